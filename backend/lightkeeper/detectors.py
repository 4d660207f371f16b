from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ViolationType(str, Enum):
    """Category of sensitive data a detector looks for."""

    EMAIL = "email"
    PHONE = "phone"
    SSN = "ssn"
    CREDIT_CARD = "credit_card"
    API_KEY = "api_key"
    PASSWORD = "password"
    IP_ADDRESS = "ip_address"
    URL_WITH_CREDENTIALS = "url_with_credentials"
    PERSONAL_ID = "personal_id"
    FINANCIAL_ACCOUNT = "financial_account"


class Severity(str, Enum):
    """Ordinal risk rating of a violation category."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


# ---------------------------------------------------------------------------
# Detector configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PatternDetector:
    """One sensitive-data rule: what to look for and what to put in its place."""

    category: ViolationType
    pattern: re.Pattern[str]
    severity: Severity
    replacement: str

    @classmethod
    def from_regex(
        cls,
        category: ViolationType,
        regex: str,
        severity: Severity,
        replacement: str,
        flags: int = 0,
    ) -> "PatternDetector":
        return cls(
            category=category,
            pattern=re.compile(regex, flags),
            severity=severity,
            replacement=replacement,
        )

    @property
    def source(self) -> str:
        return self.pattern.pattern


@dataclass(frozen=True)
class DetectorTable:
    """Ordered, immutable set of detectors.

    Position in the table is the detector's priority: it decides violation
    ordering and breaks ties when overlapping matches of equal length compete
    for the same placeholder.
    """

    detectors: tuple[PatternDetector, ...] = ()

    def __iter__(self) -> Iterator[PatternDetector]:
        return iter(self.detectors)

    def __len__(self) -> int:
        return len(self.detectors)

    def extend(self, *detectors: PatternDetector) -> "DetectorTable":
        """Return a new table with *detectors* appended at the lowest priority."""
        return DetectorTable(self.detectors + tuple(detectors))

    @property
    def categories(self) -> list[ViolationType]:
        return [d.category for d in self.detectors]


# ---------------------------------------------------------------------------
# Built-in tables
# ---------------------------------------------------------------------------

# The local part only starts where a run of local-part characters starts, so
# each run is tried once and matching stays linear.
EMAIL_DETECTOR = PatternDetector.from_regex(
    ViolationType.EMAIL,
    r"(?<![A-Za-z0-9._%+-])[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
    Severity.MEDIUM,
    "[EMAIL_REDACTED]",
)

# Digit lookarounds keep the phone rule from firing inside longer numbers
# such as card or account numbers.
PHONE_DETECTOR = PatternDetector.from_regex(
    ViolationType.PHONE,
    r"(?<!\d)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)",
    Severity.MEDIUM,
    "[PHONE_REDACTED]",
)

SSN_DETECTOR = PatternDetector.from_regex(
    ViolationType.SSN,
    r"\b\d{3}-?\d{2}-?\d{4}\b",
    Severity.CRITICAL,
    "[SSN_REDACTED]",
)

CREDIT_CARD_DETECTOR = PatternDetector.from_regex(
    ViolationType.CREDIT_CARD,
    r"\b(?:4[0-9]{12}(?:[0-9]{3})?|5[1-5][0-9]{14}|3[47][0-9]{13}"
    r"|3[0-9]{13}|6(?:011|5[0-9]{2})[0-9]{12})\b",
    Severity.CRITICAL,
    "[CARD_REDACTED]",
)

API_KEY_DETECTOR = PatternDetector.from_regex(
    ViolationType.API_KEY,
    r"(?:api[_-]?key|token|secret)[\"\s]*[:=][\"\s]*([a-zA-Z0-9_-]{20,})",
    Severity.CRITICAL,
    "[API_KEY_REDACTED]",
    re.IGNORECASE,
)

PASSWORD_DETECTOR = PatternDetector.from_regex(
    ViolationType.PASSWORD,
    r"(?:password|pwd|pass)[\"\s]*[:=][\"\s]*[\"']?([^\s\"']{6,})[\"']?",
    Severity.CRITICAL,
    "[PASSWORD_REDACTED]",
    re.IGNORECASE,
)

IP_ADDRESS_DETECTOR = PatternDetector.from_regex(
    ViolationType.IP_ADDRESS,
    r"\b(?:[0-9]{1,3}\.){3}[0-9]{1,3}\b",
    Severity.LOW,
    "[IP_REDACTED]",
)

# Userinfo never contains "/" or "@", which bounds each attempt.
URL_WITH_CREDENTIALS_DETECTOR = PatternDetector.from_regex(
    ViolationType.URL_WITH_CREDENTIALS,
    r"https?://[^:\s/@]+:[^@\s/]+@\S+",
    Severity.CRITICAL,
    "[URL_WITH_CREDS_REDACTED]",
)

# Keyword-anchored bank account numbers, or a compact IBAN.
FINANCIAL_ACCOUNT_DETECTOR = PatternDetector.from_regex(
    ViolationType.FINANCIAL_ACCOUNT,
    r"\b(?i:account|acct)(?:\s+(?i:number|num|no\.?))?\s*(?:[:#]\s*)?\d{6,17}\b"
    r"|\b[A-Z]{2}\d{2}[A-Z0-9]{11,30}\b",
    Severity.HIGH,
    "[ACCOUNT_REDACTED]",
)

PERSONAL_ID_DETECTOR = PatternDetector.from_regex(
    ViolationType.PERSONAL_ID,
    r"(?:employee\s+id|badge\s+number|staff\s+id)[:\s]+([a-zA-Z0-9]+)",
    Severity.HIGH,
    "[EMPLOYEE_ID_REDACTED]",
    re.IGNORECASE,
)

DEFAULT_DETECTORS = DetectorTable(
    (
        EMAIL_DETECTOR,
        PHONE_DETECTOR,
        SSN_DETECTOR,
        CREDIT_CARD_DETECTOR,
        API_KEY_DETECTOR,
        PASSWORD_DETECTOR,
        IP_ADDRESS_DETECTOR,
        URL_WITH_CREDENTIALS_DETECTOR,
        FINANCIAL_ACCOUNT_DETECTOR,
    )
)

# Applied to meeting transcripts after the default table has run.
TRANSCRIPT_DETECTORS = DetectorTable((PERSONAL_ID_DETECTOR,))
