from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# --- Meeting Schemas ---

class MeetingInfo(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    summary: str | None = None
    action_items: list[str] = Field(default_factory=list)


# --- Chat Schemas ---

class ConversationMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=100_000)


class MeetingChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=100_000)
    meeting: MeetingInfo
    # Plain transcript text, or the stored "data:text/plain;base64,..." URL.
    transcript: str | None = None
    file_url: str | None = None
    conversation_history: list[ConversationMessage] = Field(default_factory=list)


class MeetingChatResponse(BaseModel):
    response: str
    meeting_title: str
