from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from lightkeeper.detectors import (
    DEFAULT_DETECTORS,
    TRANSCRIPT_DETECTORS,
    DetectorTable,
    PatternDetector,
    Severity,
    ViolationType,
)

logger = logging.getLogger(__name__)

# Redacting a value can expose a word boundary next to a neighbour that was
# glued to it, so the output is rescanned until no detector fires.
MAX_REDACTION_PASSES = 8

TRANSCRIPT_CONTEXT = "meeting_transcript"
EMAIL_SUBJECT_CONTEXT = "email_subject"
EMAIL_BODY_CONTEXT = "email_body"
EMAIL_FROM_CONTEXT = "email_from"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Violation:
    """A single sensitive-data match found during one scan.

    ``matched_text`` holds the raw value for the caller's use only. It is
    kept out of ``repr`` so it cannot leak into log output by accident.
    """

    type: ViolationType
    pattern: str
    position: int  # offset in the original input
    severity: Severity
    matched_text: str = field(repr=False)


@dataclass(frozen=True)
class RedactedSpan:
    """Where a placeholder came from in the input and where it landed in the output."""

    original_start: int
    original_end: int
    start: int
    end: int
    type: ViolationType
    replacement: str


@dataclass
class SanitizationResult:
    """Outcome of one sanitisation call."""

    sanitized_text: str
    violations: list[Violation] = field(default_factory=list)
    original_length: int = 0
    context: str | None = None
    spans: list[RedactedSpan] = field(default_factory=list)

    @property
    def has_violations(self) -> bool:
        return len(self.violations) > 0

    @property
    def sanitized_length(self) -> int:
        return len(self.sanitized_text)

    @property
    def critical_violations(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.CRITICAL]

    @property
    def high_violations(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.HIGH]

    @property
    def categories(self) -> list[ViolationType]:
        """Distinct violation categories in first-seen order."""
        return list(dict.fromkeys(v.type for v in self.violations))

    @property
    def severity_breakdown(self) -> dict[str, int]:
        """Violation counts per severity, most severe first."""
        counts = Counter(v.severity for v in self.violations)
        ordered = sorted(counts, key=lambda s: s.rank, reverse=True)
        return {severity.value: counts[severity] for severity in ordered}

    @property
    def reduction_percent(self) -> float:
        """Share of the input removed by redaction; negative when placeholders grew it."""
        if self.original_length == 0:
            return 0.0
        removed = self.original_length - self.sanitized_length
        return removed / self.original_length * 100


@dataclass
class EmailSanitizationResult:
    """Per-field sanitised email plus the combined violation log."""

    sanitized_subject: str
    sanitized_body: str
    sanitized_from: str | None = None
    violations: list[Violation] = field(default_factory=list)

    @property
    def has_violations(self) -> bool:
        return len(self.violations) > 0


@dataclass(frozen=True)
class _Match:
    start: int
    end: int
    priority: int
    detector: PatternDetector


# ---------------------------------------------------------------------------
# Span helpers
# ---------------------------------------------------------------------------


def _merge_overlaps(
    matches: list[_Match],
) -> list[tuple[int, int, PatternDetector]]:
    """Collapse overlapping matches into clusters.

    Every cluster is replaced as a whole so no character of any match
    survives. The placeholder comes from the longest member; equal lengths
    go to the higher-priority detector.
    """
    clusters: list[tuple[int, int, list[_Match]]] = []
    for match in sorted(matches, key=lambda m: (m.start, m.priority)):
        if clusters and match.start < clusters[-1][1]:
            start, end, members = clusters[-1]
            members.append(match)
            clusters[-1] = (start, max(end, match.end), members)
        else:
            clusters.append((match.start, match.end, [match]))

    merged: list[tuple[int, int, PatternDetector]] = []
    for start, end, members in clusters:
        winner = max(members, key=lambda m: (m.end - m.start, -m.priority))
        merged.append((start, end, winner.detector))
    return merged


def _map_start(pos: int, spans: list[RedactedSpan]) -> int:
    """Map an offset in redacted text back to the text it was produced from."""
    shift = 0
    for span in spans:
        if pos < span.start:
            break
        if pos < span.end:
            return span.original_start
        shift = span.original_end - span.end
    return pos + shift


def _map_end(pos: int, spans: list[RedactedSpan]) -> int:
    """Like ``_map_start`` but for exclusive end offsets."""
    shift = 0
    for span in spans:
        if pos <= span.start:
            break
        if pos <= span.end:
            return span.original_end
        shift = span.original_end - span.end
    return pos + shift


def _compose_spans(
    first: list[RedactedSpan],
    second: list[RedactedSpan],
) -> list[RedactedSpan]:
    """Chain two redaction passes into spans from the input to the final output.

    ``second`` was produced from the output of ``first``. First-pass spans
    swallowed by a second-pass span disappear; the rest are shifted into
    final-output coordinates.
    """
    composed: list[RedactedSpan] = []
    for span in second:
        composed.append(
            RedactedSpan(
                original_start=_map_start(span.original_start, first),
                original_end=_map_end(span.original_end, first),
                start=span.start,
                end=span.end,
                type=span.type,
                replacement=span.replacement,
            )
        )

    for span in first:
        absorbed = any(
            span.start < s.original_end and span.end > s.original_start
            for s in second
        )
        if absorbed:
            continue
        growth = sum(
            (s.end - s.start) - (s.original_end - s.original_start)
            for s in second
            if s.original_end <= span.start
        )
        composed.append(
            RedactedSpan(
                original_start=span.original_start,
                original_end=span.original_end,
                start=span.start + growth,
                end=span.end + growth,
                type=span.type,
                replacement=span.replacement,
            )
        )

    composed.sort(key=lambda s: s.start)
    return composed


def _remap_violations(
    found: list[Violation], spans: list[RedactedSpan]
) -> list[Violation]:
    """Move violations found in redacted text back to offsets in its input."""
    return [
        Violation(
            type=v.type,
            pattern=v.pattern,
            position=_map_start(v.position, spans),
            severity=v.severity,
            matched_text=v.matched_text,
        )
        for v in found
    ]


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _log_violations(result: SanitizationResult) -> None:
    """Record aggregate statistics about a scan. Raw values are never logged."""
    critical = result.critical_violations
    logger.warning(
        "Data privacy violations detected: context=%s total=%d critical=%d "
        "high=%d types=%s length=%d->%d severity=%s",
        result.context or "unknown",
        len(result.violations),
        len(critical),
        len(result.high_violations),
        ",".join(t.value for t in result.categories),
        result.original_length,
        result.sanitized_length,
        result.severity_breakdown,
    )

    if critical:
        logger.error(
            "CRITICAL: highly sensitive data detected and redacted: "
            "context=%s types=%s count=%d",
            result.context or "unknown",
            ",".join(dict.fromkeys(v.type.value for v in critical)),
            len(critical),
        )


# ---------------------------------------------------------------------------
# Sanitiser
# ---------------------------------------------------------------------------


class ContentSanitizer:
    """Pattern-based PII and secret redaction ahead of any LLM call."""

    def __init__(self, detectors: DetectorTable = DEFAULT_DETECTORS) -> None:
        self.detectors = detectors

    def sanitize(
        self, content: str | None, context: str | None = None
    ) -> SanitizationResult:
        """Redact every detector match in *content*.

        Missing or non-string input is treated as empty text. Values that only
        become detectable once a glued neighbour is redacted are caught by a
        later pass; their violations follow those of the first pass.
        """
        result = self._sanitize(content, context)
        if result.has_violations:
            _log_violations(result)
        return result

    def sanitize_transcript(
        self,
        transcript: str | None,
        extra_detectors: DetectorTable = TRANSCRIPT_DETECTORS,
    ) -> SanitizationResult:
        """Default redaction followed by a meeting-specific pass.

        The extra detectors run over the already-redacted text. Their
        violation positions are mapped back to the original transcript.
        """
        base = self._sanitize(transcript, TRANSCRIPT_CONTEXT)
        if base.sanitized_text:
            extra = ContentSanitizer(extra_detectors)
            matches, found = extra._scan(base.sanitized_text)
            text, spans = extra._redact(base.sanitized_text, matches)

            base.violations.extend(_remap_violations(found, base.spans))
            base.spans = _compose_spans(base.spans, spans)
            base.sanitized_text = text

        if base.has_violations:
            _log_violations(base)
        return base

    def sanitize_email(
        self,
        subject: str | None,
        body: str | None,
        sender: str | None = None,
    ) -> EmailSanitizationResult:
        """Sanitise each email field on its own and pool the violations."""
        subject_result = self.sanitize(subject, EMAIL_SUBJECT_CONTEXT)
        body_result = self.sanitize(body, EMAIL_BODY_CONTEXT)
        from_result = self.sanitize(sender, EMAIL_FROM_CONTEXT) if sender else None

        violations = subject_result.violations + body_result.violations
        if from_result is not None:
            violations += from_result.violations

        return EmailSanitizationResult(
            sanitized_subject=subject_result.sanitized_text,
            sanitized_body=body_result.sanitized_text,
            sanitized_from=from_result.sanitized_text if from_result else None,
            violations=violations,
        )

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    def _sanitize(
        self, content: str | None, context: str | None
    ) -> SanitizationResult:
        if not isinstance(content, str) or not content:
            return SanitizationResult(sanitized_text="", context=context)

        sanitized = content
        violations: list[Violation] = []
        spans: list[RedactedSpan] = []
        for _ in range(MAX_REDACTION_PASSES):
            matches, found = self._scan(sanitized)
            if not matches:
                break
            sanitized, new_spans = self._redact(sanitized, matches)
            violations.extend(_remap_violations(found, spans))
            spans = _compose_spans(spans, new_spans)
        else:
            logger.warning(
                "Redaction did not settle after %d passes: context=%s",
                MAX_REDACTION_PASSES, context or "unknown",
            )

        return SanitizationResult(
            sanitized_text=sanitized,
            violations=violations,
            original_length=len(content),
            context=context,
            spans=spans,
        )

    def _scan(self, text: str) -> tuple[list[_Match], list[Violation]]:
        """Run every detector over *text*, in table order."""
        matches: list[_Match] = []
        violations: list[Violation] = []
        for priority, detector in enumerate(self.detectors):
            for m in detector.pattern.finditer(text):
                if m.start() == m.end():
                    continue
                matches.append(_Match(m.start(), m.end(), priority, detector))
                violations.append(
                    Violation(
                        type=detector.category,
                        pattern=detector.source,
                        position=m.start(),
                        severity=detector.severity,
                        matched_text=m.group(),
                    )
                )
        return matches, violations

    @staticmethod
    def _redact(
        text: str, matches: list[_Match]
    ) -> tuple[str, list[RedactedSpan]]:
        """Build the output in one left-to-right pass over merged spans."""
        parts: list[str] = []
        spans: list[RedactedSpan] = []
        cursor = 0
        out_len = 0

        for start, end, detector in _merge_overlaps(matches):
            kept = text[cursor:start]
            parts.append(kept)
            out_len += len(kept)

            parts.append(detector.replacement)
            spans.append(
                RedactedSpan(
                    original_start=start,
                    original_end=end,
                    start=out_len,
                    end=out_len + len(detector.replacement),
                    type=detector.category,
                    replacement=detector.replacement,
                )
            )
            out_len += len(detector.replacement)
            cursor = end

        parts.append(text[cursor:])
        return "".join(parts), spans


# ---------------------------------------------------------------------------
# Module-level entry points
# ---------------------------------------------------------------------------

_default_sanitizer = ContentSanitizer()


def sanitize_content(
    content: str | None, context: str | None = None
) -> SanitizationResult:
    """Redact sensitive data from *content* using the default detector table."""
    return _default_sanitizer.sanitize(content, context)


def sanitize_meeting_transcript(transcript: str | None) -> SanitizationResult:
    return _default_sanitizer.sanitize_transcript(transcript)


def sanitize_email_content(
    subject: str | None,
    body: str | None,
    sender: str | None = None,
) -> EmailSanitizationResult:
    return _default_sanitizer.sanitize_email(subject, body, sender)
