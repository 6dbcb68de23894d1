"""Knowledge-base domain models -- re-exports all public model classes.

The models are organised by concern:
    - knowledge.py   -- Segments, documents, chunks, search hits, ingestion results
    - chat.py        -- Chat sessions, messages and citations
    - generation.py  -- The text-generation result type
    - extraction.py  -- File-extraction results
"""

from __future__ import annotations

from bizknowledge.models.chat import (
    ChatMessage,
    ChatSession,
    ChatSource,
    ChatTurnResult,
    MessageRole,
    SourceCitation,
)
from bizknowledge.models.extraction import ExtractedText, ExtractionErrorKind, UploadedFile
from bizknowledge.models.generation import GenerationResult
from bizknowledge.models.knowledge import (
    Categorisation,
    Document,
    DocumentDraft,
    DocumentListing,
    IngestionResult,
    KnowledgeChunk,
    SearchHit,
    Segment,
)

__all__ = [
    "Categorisation",
    "ChatMessage",
    "ChatSession",
    "ChatSource",
    "ChatTurnResult",
    "Document",
    "DocumentDraft",
    "DocumentListing",
    "ExtractedText",
    "ExtractionErrorKind",
    "GenerationResult",
    "IngestionResult",
    "KnowledgeChunk",
    "MessageRole",
    "SearchHit",
    "Segment",
    "SourceCitation",
    "UploadedFile",
]
