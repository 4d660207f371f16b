from __future__ import annotations

import asyncio
import base64
import binascii
import logging

import httpx

from config import get_settings
from lightkeeper.safety import SafetyPolicy, validate_content_safety
from lightkeeper.sanitizer import sanitize_content, sanitize_meeting_transcript
from llm.prompts import build_meeting_system_prompt
from llm.providers import LLMProvider
from schemas.api import MeetingInfo

logger = logging.getLogger(__name__)
settings = get_settings()

QUESTION_CONTEXT = "chat_question"
HISTORY_CONTEXT = "chat_history"
METADATA_CONTEXT = "meeting_metadata"

QUESTION_REFUSAL = (
    "I can't process this question because it appears to contain sensitive "
    "information such as a Social Security number, card number, password or "
    "API key. Please remove it and ask again."
)
TRANSCRIPT_REFUSAL = (
    "For privacy reasons I can't answer questions about this meeting: its "
    "transcript contains highly sensitive personal or confidential data. "
    "Please ask an administrator to review the transcript."
)
QUESTION_TOO_LONG_MESSAGE = (
    "Your question is too long for me to process. Please shorten it and try again."
)
TRANSCRIPT_TOO_LONG_MESSAGE = (
    "This meeting's transcript is too long for me to process. Please ask an "
    "administrator to split or shorten it."
)
RATE_LIMIT_MESSAGE = (
    "I'm currently experiencing high demand. Please try again in a moment."
)
AUTH_ERROR_MESSAGE = (
    "There's a configuration issue with the AI service. Please contact support."
)
GENERIC_ERROR_MESSAGE = (
    "I apologize, but I encountered an error processing your question. Please try "
    "rephrasing your question or ask something else about the meeting."
)

_TRANSCRIPT_DATA_URL_PREFIX = "data:text/plain;base64,"


def decode_transcript(file_url: str | None) -> str:
    """Decode a transcript stored as a ``data:text/plain;base64,`` URL."""
    if not file_url or not file_url.startswith(_TRANSCRIPT_DATA_URL_PREFIX):
        raise ValueError("Meeting transcript not available")
    encoded = file_url[len(_TRANSCRIPT_DATA_URL_PREFIX):]
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValueError("Meeting transcript could not be decoded") from exc


def filter_conversation_history(
    history: list[dict[str, str]],
    policy: SafetyPolicy,
    limit: int,
) -> list[dict[str, str]]:
    """Sanitise recent history, dropping messages that fail the safety check.

    Only the last *limit* messages are considered. A failing message is left
    out rather than aborting the whole request.
    """
    recent = history[-limit:] if limit > 0 else []
    forwarded: list[dict[str, str]] = []
    for msg in recent:
        result = sanitize_content(msg.get("content", ""), HISTORY_CONTEXT)
        verdict = validate_content_safety(result, policy)
        if not verdict.is_safe:
            continue
        forwarded.append({"role": msg["role"], "content": result.sanitized_text})

    dropped = len(recent) - len(forwarded)
    if dropped:
        logger.info(
            "Dropped %d/%d history messages that failed the safety check",
            dropped, len(recent),
        )
    return forwarded


def _redacted(text: str | None) -> str:
    return sanitize_content(text, METADATA_CONTEXT).sanitized_text


async def ask_meeting_question(
    question: str,
    transcript: str,
    meeting: MeetingInfo,
    provider: LLMProvider,
    conversation_history: list[dict[str, str]] | None = None,
) -> str:
    """Answer a question about a meeting without exposing raw sensitive data.

    The question and transcript are sanitised and gated; history messages
    are filtered one by one. The LLM only ever sees redacted text. Refusals
    and provider failures come back as fixed user-facing strings.
    """
    policy = SafetyPolicy.from_settings(settings)

    if len(question) > settings.chat_max_question_chars:
        logger.warning(
            "Question rejected: %d chars exceeds limit of %d",
            len(question), settings.chat_max_question_chars,
        )
        return QUESTION_TOO_LONG_MESSAGE

    if len(transcript) > settings.chat_max_transcript_chars:
        logger.warning(
            "Transcript rejected: %d chars exceeds limit of %d",
            len(transcript), settings.chat_max_transcript_chars,
        )
        return TRANSCRIPT_TOO_LONG_MESSAGE

    # 1. Question
    question_result = sanitize_content(question, QUESTION_CONTEXT)
    verdict = validate_content_safety(question_result, policy)
    if not verdict.is_safe:
        logger.warning("Question refused by guardrails: %s", verdict.reason)
        return QUESTION_REFUSAL

    # 2. Transcript, scanned in the default executor
    loop = asyncio.get_running_loop()
    transcript_result = await loop.run_in_executor(
        None, sanitize_meeting_transcript, transcript
    )
    verdict = validate_content_safety(transcript_result, policy)
    if not verdict.is_safe:
        logger.warning("Transcript refused by guardrails: %s", verdict.reason)
        return TRANSCRIPT_REFUSAL

    # 3. History
    history = filter_conversation_history(
        conversation_history or [], policy, settings.chat_history_limit
    )

    # 4. Build LLM messages from sanitised text only
    system_prompt = build_meeting_system_prompt(
        title=_redacted(meeting.title),
        transcript=transcript_result.sanitized_text,
        description=_redacted(meeting.description),
        summary=_redacted(meeting.summary),
        action_items=[_redacted(item) for item in meeting.action_items],
    )
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend(history)
    messages.append({"role": "user", "content": question_result.sanitized_text})

    # 5. Call the provider
    try:
        answer = await provider.chat_sync(
            messages,
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
        )
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.error("LLM request failed with status %d", status)
        if status == 429:
            return RATE_LIMIT_MESSAGE
        if status == 401:
            return AUTH_ERROR_MESSAGE
        return GENERIC_ERROR_MESSAGE
    except httpx.HTTPError as exc:
        logger.error("LLM request failed: %s", exc.__class__.__name__)
        return GENERIC_ERROR_MESSAGE

    if not answer:
        logger.error("LLM returned an empty response")
        return GENERIC_ERROR_MESSAGE

    logger.info(
        "Meeting question answered: model=%s history_forwarded=%d",
        provider.model_name, len(history),
    )
    return answer
