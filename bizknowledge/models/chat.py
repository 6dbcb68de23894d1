"""Chat session and message models.

A session is an opaque token grouping turns for history replay.  Messages
are append-only; the assistant row carries the ``{title, segment}``
citations of the snippets its answer was grounded on.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class SourceCitation(BaseModel):
    """Persisted citation: which document (and its segment) backed an answer."""

    model_config = ConfigDict(frozen=True)

    title: str
    segment: str | None = None


class ChatSource(SourceCitation):
    """Citation returned to the caller, with the document summary for display."""

    summary: str | None = None


class ChatSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    created_at: datetime
    last_activity: datetime


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    session_id: str
    role: MessageRole
    content: str
    sources: list[SourceCitation] | None = None
    timestamp: datetime


class ChatTurnResult(BaseModel):
    """Answer to one chat turn.

    ``degraded`` is ``True`` when the answer was synthesised locally because
    the text-generation service failed.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    answer: str
    sources: list[ChatSource] = Field(default_factory=list)
    degraded: bool = False
