"""Pydantic request/response schemas for the knowledge-base API.

Defines the public contract for every REST endpoint: segments, document
upload and management, search, chat and health.

# ─── NAMING ON THE WIRE ───────────────────────────────────────────────
#
# Python attributes are snake_case; JSON keys the browser client relies
# on are camelCase (``documentId``, ``segmentId``, ``sessionId``).  Each
# such field declares an ``alias`` and the models accept either spelling
# on input (``populate_by_name``).  FastAPI serialises ``response_model``
# output by alias.
#
# Request schemas end with "Request", response schemas with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


class SegmentResponse(_CamelModel):
    id: int
    name: str
    description: str | None = None
    colour: str
    document_count: int = Field(alias="documentCount")


class SegmentListResponse(BaseModel):
    success: bool = True
    segments: list[SegmentResponse] = Field(default_factory=list)


class RecountResponse(BaseModel):
    """Segment name -> repaired document count."""

    success: bool = True
    counts: dict[str, int] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class UploadResponse(_CamelModel):
    """Response returned after a document has been ingested."""

    success: bool = True
    document_id: int = Field(alias="documentId")
    segment_id: int | None = Field(default=None, alias="segmentId")
    segment_name: str | None = Field(default=None, alias="segmentName")
    confidence: float = Field(ge=0.0, le=1.0)
    summary: str
    chunk_count: int = Field(alias="chunkCount")
    message: str = "Document uploaded and processed successfully"


class DocumentSummaryResponse(_CamelModel):
    """One row of the document listing (no full content)."""

    id: int
    title: str
    filename: str | None = None
    file_type: str | None = Field(default=None, alias="fileType")
    file_size: int | None = Field(default=None, alias="fileSize")
    segment_id: int | None = Field(default=None, alias="segmentId")
    segment_name: str | None = Field(default=None, alias="segmentName")
    segment_colour: str | None = Field(default=None, alias="segmentColour")
    upload_date: datetime = Field(alias="uploadDate")
    processed: bool
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = Field(alias="confidenceScore")


class DocumentListResponse(BaseModel):
    success: bool = True
    documents: list[DocumentSummaryResponse] = Field(default_factory=list)


class ChunkResponse(_CamelModel):
    chunk_index: int = Field(alias="chunkIndex")
    chunk_text: str = Field(alias="chunkText")
    preview: str = ""


class DocumentDetailResponse(_CamelModel):
    """A single document with its content and chunks."""

    success: bool = True
    id: int
    title: str
    filename: str | None = None
    content: str
    file_type: str | None = Field(default=None, alias="fileType")
    file_size: int | None = Field(default=None, alias="fileSize")
    segment_id: int | None = Field(default=None, alias="segmentId")
    upload_date: datetime = Field(alias="uploadDate")
    processed: bool
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = Field(alias="confidenceScore")
    chunks: list[ChunkResponse] = Field(default_factory=list)


class DeleteResponse(_CamelModel):
    success: bool = True
    document_id: int = Field(alias="documentId")
    message: str = "Document deleted successfully"


class FileTypesResponse(_CamelModel):
    supported_types: list[str] = Field(alias="supportedTypes")
    description: str


# ---------------------------------------------------------------------------
# Search & chat
# ---------------------------------------------------------------------------


class SearchHitResponse(_CamelModel):
    document_id: int = Field(alias="documentId")
    chunk_index: int = Field(alias="chunkIndex")
    chunk_text: str = Field(alias="chunkText")
    document_title: str = Field(alias="documentTitle")
    document_summary: str | None = Field(default=None, alias="documentSummary")
    segment_name: str | None = Field(default=None, alias="segmentName")


class SearchResponse(BaseModel):
    success: bool = True
    query: str
    results: list[SearchHitResponse] = Field(default_factory=list)


class ChatRequest(_CamelModel):
    """A chat turn.

    Both fields are optional at the schema level so a missing value is
    reported by the chat service as a 400, not by FastAPI as a 422.
    """

    message: str | None = Field(default=None, max_length=4000)
    session_id: str | None = Field(default=None, alias="sessionId", max_length=200)


class ChatSourceResponse(BaseModel):
    title: str
    segment: str | None = None
    summary: str | None = None


class ChatResponse(_CamelModel):
    success: bool = True
    session_id: str = Field(alias="sessionId")
    answer: str
    sources: list[ChatSourceResponse] = Field(default_factory=list)
    degraded: bool = False


class ChatSessionResponse(_CamelModel):
    success: bool = True
    session_id: str = Field(alias="sessionId")
    created_at: datetime = Field(alias="createdAt")


class ChatMessageResponse(_CamelModel):
    id: int
    role: str
    content: str
    sources: list[ChatSourceResponse] | None = None
    timestamp: datetime


class ChatHistoryResponse(_CamelModel):
    success: bool = True
    session_id: str = Field(alias="sessionId")
    messages: list[ChatMessageResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Health & errors
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str = "0.1.0"
    generation_provider: str | None = None
    retrieval_engine: str | None = None
    database_path: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    success: bool = False
    error: str
    detail: str | None = None
    file_type: str | None = None
    file_name: str | None = None
    supported_types: list[str] | None = None
