from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_llm_provider
from llm.providers import LLMProvider
from schemas.api import MeetingChatRequest, MeetingChatResponse
from services import chat_service

router = APIRouter()


@router.post("/meeting", response_model=MeetingChatResponse)
async def chat_with_meeting(
    body: MeetingChatRequest,
    provider: LLMProvider = Depends(get_llm_provider),
):
    """Answer a question about a meeting transcript.

    The transcript comes either as plain text or as the stored
    ``data:text/plain;base64,`` URL. Guardrail refusals are returned as a
    normal 200 response whose text explains the refusal.
    """
    message = body.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message cannot be empty")

    if body.transcript is not None:
        transcript = body.transcript
    else:
        try:
            transcript = chat_service.decode_transcript(body.file_url)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not transcript.strip():
        raise HTTPException(status_code=400, detail="Meeting transcript is empty")

    answer = await chat_service.ask_meeting_question(
        question=message,
        transcript=transcript,
        meeting=body.meeting,
        provider=provider,
        conversation_history=[m.model_dump() for m in body.conversation_history],
    )
    return MeetingChatResponse(response=answer, meeting_title=body.meeting.title)
