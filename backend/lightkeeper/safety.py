"""Safety gate deciding whether sanitised content may be forwarded to an LLM.

Policy, first match wins:

1. Any critical violation (more than ``max_critical_violations``).
2. Strict mode only: more than ``max_high_violations`` high violations.
3. More than ``max_content_reduction_percent`` of the input was redacted.
   Strict mode swaps in the per-context threshold when one exists.

Empty input is always safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from lightkeeper.sanitizer import SanitizationResult

if TYPE_CHECKING:
    from config import Settings


MAX_CRITICAL_VIOLATIONS = 0
MAX_HIGH_VIOLATIONS = 3
MAX_CONTENT_REDUCTION_PERCENT = 50.0

CONTEXT_REDUCTION_PERCENT: Mapping[str, float] = MappingProxyType(
    {
        "meeting_transcript": 30.0,
        "email_subject": 40.0,
        "email_body": 40.0,
        "email_from": 40.0,
        "chat_question": 20.0,
        "chat_history": 20.0,
    }
)


@dataclass(frozen=True)
class SafetyVerdict:
    is_safe: bool
    reason: str | None = None


@dataclass(frozen=True)
class SafetyPolicy:
    """Thresholds applied by ``validate_content_safety``."""

    max_critical_violations: int = MAX_CRITICAL_VIOLATIONS
    max_content_reduction_percent: float = MAX_CONTENT_REDUCTION_PERCENT
    strict_mode: bool = False
    max_high_violations: int = MAX_HIGH_VIOLATIONS
    context_reduction_percent: Mapping[str, float] = field(
        default_factory=lambda: CONTEXT_REDUCTION_PERCENT
    )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SafetyPolicy":
        return cls(
            max_critical_violations=settings.guardrails_max_critical_violations,
            max_content_reduction_percent=settings.guardrails_max_content_reduction_percent,
            strict_mode=settings.guardrails_strict_mode,
            max_high_violations=settings.guardrails_max_high_violations,
        )

    def reduction_threshold(self, context: str | None) -> float:
        if self.strict_mode and context in self.context_reduction_percent:
            return self.context_reduction_percent[context]
        return self.max_content_reduction_percent


DEFAULT_POLICY = SafetyPolicy()


def validate_content_safety(
    result: SanitizationResult,
    policy: SafetyPolicy = DEFAULT_POLICY,
) -> SafetyVerdict:
    """Return whether *result* is safe to send to an LLM, and why not if it isn't."""
    critical = result.critical_violations
    if len(critical) > policy.max_critical_violations:
        types = ", ".join(dict.fromkeys(v.type.value for v in critical))
        return SafetyVerdict(
            is_safe=False,
            reason=f"Critical data privacy violations detected: {types}",
        )

    if policy.strict_mode:
        high = result.high_violations
        if len(high) > policy.max_high_violations:
            types = ", ".join(dict.fromkeys(v.type.value for v in high))
            return SafetyVerdict(
                is_safe=False,
                reason=(
                    f"Too many high-severity violations ({len(high)} > "
                    f"{policy.max_high_violations}): {types}"
                ),
            )

    if result.original_length == 0:
        return SafetyVerdict(is_safe=True)

    reduction = result.reduction_percent
    if reduction > policy.reduction_threshold(result.context):
        return SafetyVerdict(
            is_safe=False,
            reason=(
                f"Content heavily redacted ({reduction:.1f}% removed), "
                "may not be suitable for processing"
            ),
        )

    return SafetyVerdict(is_safe=True)
