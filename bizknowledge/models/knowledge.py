"""Knowledge-base data models: segments, documents, chunks and search hits.

Pydantic v2 models, frozen so a row read from the store cannot be mutated
on its way to the API.  ``Document.keywords`` is a list here and a
comma-joined string in SQLite; the store does the conversion.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Segment(BaseModel):
    """A business category documents are classified into.

    ``document_count`` is a cache of ``COUNT(documents WHERE segment_id = id)``
    that the store recomputes on every document insert and delete.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str | None = None
    colour: str = "#3B82F6"
    document_count: int = Field(default=0, ge=0)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentDraft(BaseModel):
    """Everything the ingestion pipeline has decided about a document before it is stored."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    filename: str | None = None
    content: str
    file_type: str = "text/plain"
    file_size: int = Field(default=0, ge=0)
    segment_id: int | None = None
    summary: str = ""
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)


class Document(BaseModel):
    """A stored document with its extracted content and classification."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    filename: str | None = None
    content: str
    file_type: str | None = None
    file_size: int | None = None
    segment_id: int | None = None
    upload_date: datetime
    processed: bool = False
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)


class DocumentListing(BaseModel):
    """A document row joined with its segment, without the full content."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    filename: str | None = None
    file_type: str | None = None
    file_size: int | None = None
    segment_id: int | None = None
    segment_name: str | None = None
    segment_colour: str | None = None
    upload_date: datetime
    processed: bool = False
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = 0.0


class KnowledgeChunk(BaseModel):
    """A bounded slice of a document's text; the unit of retrieval."""

    model_config = ConfigDict(frozen=True)

    id: int
    document_id: int
    chunk_text: str
    chunk_index: int = Field(ge=0)
    preview: str = ""
    created_at: datetime | None = None


class SearchHit(BaseModel):
    """One chunk/document pair matched by the retrieval engine."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    chunk_index: int
    chunk_text: str
    document_title: str
    document_summary: str | None = None
    segment_name: str | None = None


class Categorisation(BaseModel):
    """Segment assignment and summary produced for one document."""

    model_config = ConfigDict(frozen=True)

    segment_id: int | None = None
    segment_name: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    summary: str = ""
    categorised_by_ai: bool = False
    summarised_by_ai: bool = False


class IngestionResult(BaseModel):
    """Outcome of one successful ingestion."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    segment_id: int | None = None
    segment_name: str | None = None
    confidence: float = 0.0
    summary: str = ""
    chunk_count: int = 0
