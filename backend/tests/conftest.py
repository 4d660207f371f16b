from __future__ import annotations

import os
from unittest.mock import AsyncMock

import pytest

# Keep the chat dependency from needing a real key during tests
os.environ.setdefault("OPENAI_API_KEY", "test-key-not-used")

from llm.providers import LLMProvider  # noqa: E402
from schemas.api import MeetingInfo  # noqa: E402


@pytest.fixture
def sample_transcript():
    """A realistic meeting transcript with a few sensitive values."""
    return (
        "Weekly sync - Platform team\n\n"
        "Alice: Thanks for joining. First item is the vendor onboarding.\n"
        "Bob: I emailed the contract to procurement@vendor.io yesterday.\n"
        "Alice: Great. Their support line is 555-201-3344 if we need it.\n"
        "Bob: The staging box is at 10.0.4.17, I'll share access later.\n"
        "Carol: Action item for me: update the runbook by Friday.\n"
        "Alice: Also, employee id: A77120 needs a new badge.\n"
    )


@pytest.fixture
def meeting() -> MeetingInfo:
    return MeetingInfo(
        title="Weekly sync",
        description="Platform team status meeting",
        summary="Vendor onboarding and runbook updates were discussed.",
        action_items=["Carol to update the runbook by Friday"],
    )


@pytest.fixture
def mock_provider() -> AsyncMock:
    """An LLM provider whose chat_sync returns a canned answer."""
    provider = AsyncMock(spec=LLMProvider)
    provider.model_name = "gpt-4o-mini"
    provider.chat_sync.return_value = "The team discussed vendor onboarding."
    return provider
