"""Abstract base class for the knowledge-base persistence layer.

One store holds all five entities: segments, documents, knowledge chunks,
chat sessions and chat messages.  The store is the only synchronisation
point in the system; services keep no in-process copies of its rows.

Multi-row writes (saving a document with its chunks, deleting a document,
appending a chat exchange) are atomic: either every row lands or none does.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any

from bizknowledge.models.chat import ChatMessage, ChatSession, SourceCitation
from bizknowledge.models.knowledge import (
    Document,
    DocumentDraft,
    DocumentListing,
    KnowledgeChunk,
    SearchHit,
    Segment,
)


# Concrete implementation: SQLiteKnowledgeStore
# Located in: bizknowledge/providers/store/
class IKnowledgeStore(ABC):
    """Contract for the relational store behind ingestion, retrieval and chat."""

    # -- Lifecycle -----------------------------------------------------------

    @abstractmethod
    async def initialize(self, seed_segments: Iterable[dict[str, Any]] = ()) -> None:
        """Create tables and indexes if absent and insert-or-ignore the seed segments."""

    # -- Segments ------------------------------------------------------------

    @abstractmethod
    async def list_segments(self) -> list[Segment]:
        """Return all segments ordered by name."""

    @abstractmethod
    async def get_segment_by_name(self, name: str) -> Segment | None:
        """Return the segment with exactly this name, or ``None``."""

    @abstractmethod
    async def recount_segment(self, segment_id: int) -> int:
        """Recompute one segment's ``document_count`` from the documents table.

        Returns the new count.
        """

    @abstractmethod
    async def recount_all_segments(self) -> dict[str, int]:
        """Recompute every segment's count; returns ``{segment_name: count}``."""

    # -- Documents -----------------------------------------------------------

    @abstractmethod
    async def save_document(self, draft: DocumentDraft, chunks: Sequence[str]) -> int:
        """Persist a document and its chunks in one transaction.

        The document row is inserted unprocessed, chunks are inserted with
        contiguous indices from 0, the row is flipped to processed and the
        target segment is recounted.  Any failure rolls everything back.

        Returns the new document id.
        """

    @abstractmethod
    async def get_document(self, document_id: int) -> Document | None:
        """Return one document with its full content, or ``None``."""

    @abstractmethod
    async def list_documents(self, segment_id: int | None = None) -> list[DocumentListing]:
        """Return documents newest first, optionally filtered by segment."""

    @abstractmethod
    async def list_chunks(self, document_id: int) -> list[KnowledgeChunk]:
        """Return a document's chunks in index order."""

    @abstractmethod
    async def delete_document(self, document_id: int) -> Document:
        """Delete a document (chunks cascade) and recount its segment atomically.

        Returns the deleted document.

        Raises
        ------
        bizknowledge.utils.errors.NotFoundError
            If no document has this id.
        """

    # -- Retrieval -----------------------------------------------------------

    @abstractmethod
    async def find_matching_chunks(self, query: str, limit: int) -> list[SearchHit]:
        """Return chunk/document pairs whose chunk text, title, summary or
        keywords contain ``query`` case-insensitively.

        Ordered by upload date descending, document id descending, chunk
        index ascending; at most ``limit`` rows.
        """

    # -- Chat ----------------------------------------------------------------

    @abstractmethod
    async def upsert_session(self, session_id: str) -> ChatSession:
        """Create the session if new, otherwise bump ``last_activity``."""

    @abstractmethod
    async def get_session(self, session_id: str) -> ChatSession | None:
        """Return the session, or ``None`` if it was never seen."""

    @abstractmethod
    async def append_exchange(
        self,
        session_id: str,
        user_message: str,
        assistant_message: str,
        sources: Sequence[SourceCitation],
    ) -> None:
        """Append a user message and the assistant reply in one transaction."""

    @abstractmethod
    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        """Return a session's messages ordered by timestamp, then id."""
