"""Tests for the transcript and email sanitisation variants."""

from __future__ import annotations

from lightkeeper.detectors import Severity, ViolationType
from lightkeeper.safety import validate_content_safety
from lightkeeper.sanitizer import (
    ContentSanitizer,
    sanitize_content,
    sanitize_email_content,
    sanitize_meeting_transcript,
)


# -----------------------------------------------------------------------
# Meeting transcripts
# -----------------------------------------------------------------------


class TestMeetingTranscript:
    def test_employee_id_only_caught_by_transcript_pass(self):
        text = "employee id: 99213"
        assert sanitize_content(text).has_violations is False

        result = sanitize_meeting_transcript(text)
        assert [v.type for v in result.violations] == [ViolationType.PERSONAL_ID]
        assert result.violations[0].severity == Severity.HIGH
        assert result.sanitized_text == "[EMPLOYEE_ID_REDACTED]"
        assert result.has_violations is True

    def test_context_label(self):
        assert sanitize_meeting_transcript("hello").context == "meeting_transcript"

    def test_base_violations_come_first(self):
        result = sanitize_meeting_transcript("badge number 4471, mail bob@corp.com")
        assert [v.type for v in result.violations] == [
            ViolationType.EMAIL,
            ViolationType.PERSONAL_ID,
        ]

    def test_lengths_recomputed_after_second_pass(self):
        text = "Email bob@corp.com then employee id: 99213"
        result = sanitize_meeting_transcript(text)
        assert result.sanitized_text == "Email [EMAIL_REDACTED] then [EMPLOYEE_ID_REDACTED]"
        assert result.original_length == len(text)
        assert result.sanitized_length == len(result.sanitized_text)

    def test_second_pass_positions_map_to_original(self):
        text = "Email bob@corp.com then employee id: 99213"
        result = sanitize_meeting_transcript(text)
        personal = next(v for v in result.violations if v.type == ViolationType.PERSONAL_ID)
        assert personal.position == text.index("employee id")
        assert personal.matched_text == "employee id: 99213"

    def test_spans_cover_both_passes(self):
        text = "staff id: Q1 wrote to bob@corp.com"
        result = sanitize_meeting_transcript(text)
        assert result.sanitized_text == "[EMPLOYEE_ID_REDACTED] wrote to [EMAIL_REDACTED]"
        assert [s.type for s in result.spans] == [
            ViolationType.PERSONAL_ID,
            ViolationType.EMAIL,
        ]
        for span in result.spans:
            assert result.sanitized_text[span.start:span.end] == span.replacement
        originals = [text[s.original_start:s.original_end] for s in result.spans]
        assert originals == ["staff id: Q1", "bob@corp.com"]

    def test_realistic_transcript(self, sample_transcript: str):
        result = sanitize_meeting_transcript(sample_transcript)
        for raw in ("procurement@vendor.io", "555-201-3344", "10.0.4.17", "A77120"):
            assert raw not in result.sanitized_text
        assert set(result.categories) == {
            ViolationType.EMAIL,
            ViolationType.PHONE,
            ViolationType.IP_ADDRESS,
            ViolationType.PERSONAL_ID,
        }
        # No critical data and placeholders outgrow the values they replace
        assert validate_content_safety(result).is_safe is True

    def test_transcript_with_ssn_is_unsafe(self):
        result = sanitize_meeting_transcript("Bob: my SSN is 123-45-6789, file it.")
        assert validate_content_safety(result).is_safe is False

    def test_idempotent(self, sample_transcript: str):
        once = sanitize_meeting_transcript(sample_transcript)
        twice = sanitize_meeting_transcript(once.sanitized_text)
        assert twice.violations == []
        assert twice.sanitized_text == once.sanitized_text

    def test_empty_transcript(self):
        result = sanitize_meeting_transcript("")
        assert result.sanitized_text == ""
        assert result.has_violations is False

    def test_none_transcript(self):
        assert sanitize_meeting_transcript(None).sanitized_text == ""


# -----------------------------------------------------------------------
# Email
# -----------------------------------------------------------------------


class TestEmailContent:
    def test_fields_sanitised_independently(self):
        result = sanitize_email_content("noreply@x.com", "call 555-000-1111")
        assert [v.type for v in result.violations] == [
            ViolationType.EMAIL,
            ViolationType.PHONE,
        ]
        assert result.sanitized_subject == "[EMAIL_REDACTED]"
        assert result.sanitized_body == "call [PHONE_REDACTED]"
        assert result.sanitized_from is None
        assert result.has_violations is True

    def test_sender_included(self):
        result = sanitize_email_content(
            "Quarterly review", "See attached.", "Jane <jane@corp.com>"
        )
        assert result.sanitized_from == "Jane <[EMAIL_REDACTED]>"
        assert [v.type for v in result.violations] == [ViolationType.EMAIL]

    def test_violation_order_subject_body_from(self):
        result = sanitize_email_content(
            "ip 10.1.1.1", "ssn 123-45-6789", "bob@corp.com"
        )
        assert [v.type for v in result.violations] == [
            ViolationType.IP_ADDRESS,
            ViolationType.SSN,
            ViolationType.EMAIL,
        ]

    def test_empty_sender_is_absent(self):
        assert sanitize_email_content("hi", "there", "").sanitized_from is None

    def test_values_split_across_fields_not_correlated(self):
        result = sanitize_email_content("jane.doe@", "example.com")
        assert result.has_violations is False
        assert result.sanitized_subject == "jane.doe@"
        assert result.sanitized_body == "example.com"

    def test_clean_email(self):
        result = sanitize_email_content("Lunch?", "Are you free at noon?")
        assert result.violations == []
        assert result.has_violations is False

    def test_injected_sanitizer(self):
        sanitizer = ContentSanitizer()
        result = sanitizer.sanitize_email("a@b.io", None)
        assert result.sanitized_subject == "[EMAIL_REDACTED]"
        assert result.sanitized_body == ""
