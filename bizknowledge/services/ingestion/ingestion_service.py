"""Orchestrator for document ingestion and deletion.

Pipeline stages: **extract -> categorise & summarise -> keywords -> chunk -> store**.

The :class:`IngestionService` coordinates its collaborators (file
extractor, categoriser, chunker, knowledge store) without any of them
knowing about each other:

    1. IFileExtractor  -- turns an upload into text, or explains why not
    2. Categoriser     -- segment + summary, with deterministic fallback
    3. extract_keywords -- coarse term list for substring search
    4. TextChunker     -- sentence-greedy bounded chunks
    5. IKnowledgeStore -- document, chunks and segment recount in one
                          transaction

Generation failures never fail an ingestion.  Caller mistakes (missing
title, both or neither of file/content, unreadable file) raise before
anything is written.
"""

from __future__ import annotations

from pathlib import PurePath

import structlog

from bizknowledge.interfaces.file_extractor import IFileExtractor
from bizknowledge.interfaces.knowledge_store import IKnowledgeStore
from bizknowledge.models.extraction import ExtractionErrorKind, UploadedFile
from bizknowledge.models.knowledge import (
    Document,
    DocumentDraft,
    DocumentListing,
    IngestionResult,
    KnowledgeChunk,
    Segment,
)
from bizknowledge.services.ingestion.categoriser import Categoriser
from bizknowledge.services.ingestion.chunker import TextChunker
from bizknowledge.services.ingestion.keyword_extractor import extract_keywords
from bizknowledge.utils.errors import (
    EmptyContentError,
    NotFoundError,
    UnsupportedFormatError,
    ValidationError,
)

logger = structlog.get_logger(logger_name=__name__)

_PASTED_FILE_TYPE = "text/plain"


class IngestionService:
    """Turns uploads into categorised, chunked, persisted documents.

    Parameters
    ----------
    store:
        Persistence for documents, chunks and segment counts.
    categoriser:
        Assigns the segment and writes the summary.
    chunker:
        Splits content into retrieval chunks.
    extractor:
        Converts uploaded files to text.
    """

    def __init__(
        self,
        store: IKnowledgeStore,
        categoriser: Categoriser,
        chunker: TextChunker,
        extractor: IFileExtractor,
    ) -> None:
        self._store = store
        self._categoriser = categoriser
        self._chunker = chunker
        self._extractor = extractor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        title: str | None,
        content: str | None = None,
        file: UploadedFile | None = None,
    ) -> IngestionResult:
        """Ingest one document from pasted text or an uploaded file.

        Raises
        ------
        ValidationError
            Missing title, or not exactly one of ``content`` / ``file``.
        UnsupportedFormatError
            The file type cannot be read.
        EmptyContentError
            The file was read but contained no text.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")

        has_content = content is not None and content.strip() != ""
        if file is not None and has_content:
            raise ValidationError("Provide either a file or pasted content, not both")
        if file is None and not has_content:
            raise ValidationError("Either a file or pasted content is required")

        if file is not None:
            text = await self._extract(file)
            filename: str | None = file.file_name
            file_type = file.content_type or _PASTED_FILE_TYPE
            file_size = file.size
        else:
            text = content or ""
            filename = None
            file_type = _PASTED_FILE_TYPE
            file_size = len(text.encode("utf-8"))

        segments = await self._store.list_segments()
        categorisation = await self._categoriser.categorise(title, text, segments)
        keywords = extract_keywords(text)
        chunks = self._chunker.chunk(text)

        draft = DocumentDraft(
            title=title,
            filename=filename,
            content=text,
            file_type=file_type,
            file_size=file_size,
            segment_id=categorisation.segment_id,
            summary=categorisation.summary,
            keywords=keywords,
            confidence_score=categorisation.confidence,
        )
        document_id = await self._store.save_document(draft, chunks)

        logger.info(
            "document_ingested",
            document_id=document_id,
            title=title[:80],
            segment=categorisation.segment_name,
            confidence=categorisation.confidence,
            chunks=len(chunks),
            source="file" if file is not None else "pasted",
        )
        return IngestionResult(
            document_id=document_id,
            segment_id=categorisation.segment_id,
            segment_name=categorisation.segment_name,
            confidence=categorisation.confidence,
            summary=categorisation.summary,
            chunk_count=len(chunks),
        )

    async def delete(self, document_id: int | None) -> Document:
        """Delete a document and its chunks, recounting its segment.

        Raises
        ------
        ValidationError
            ``document_id`` is missing.
        NotFoundError
            No such document.
        """
        if document_id is None:
            raise ValidationError("Document id is required")
        document = await self._store.delete_document(document_id)
        logger.info("document_removed", document_id=document_id, title=document.title[:80])
        return document

    async def get_document(self, document_id: int) -> Document:
        document = await self._store.get_document(document_id)
        if document is None:
            raise NotFoundError(
                message=f"Document {document_id} not found",
                resource="document",
                identifier=document_id,
            )
        return document

    async def list_documents(self, segment_id: int | None = None) -> list[DocumentListing]:
        return await self._store.list_documents(segment_id)

    async def list_chunks(self, document_id: int) -> list[KnowledgeChunk]:
        return await self._store.list_chunks(document_id)

    async def list_segments(self) -> list[Segment]:
        return await self._store.list_segments()

    async def recount_all_segments(self) -> dict[str, int]:
        """Repair every segment's cached ``document_count``."""
        return await self._store.recount_all_segments()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _extract(self, file: UploadedFile) -> str:
        extracted = await self._extractor.extract(file.file_name, file.content_type, file.data)
        declared_type = PurePath(file.file_name.lower()).suffix or file.content_type

        if extracted.failed:
            logger.warning(
                "extraction_failed",
                file_name=file.file_name,
                file_type=declared_type,
                kind=extracted.error_kind.value if extracted.error_kind else None,
                error=extracted.error,
            )
            if extracted.error_kind == ExtractionErrorKind.EMPTY:
                raise EmptyContentError(
                    message=extracted.error or EmptyContentError().message,
                    file_name=file.file_name,
                    supported_types=extracted.supported_types,
                    provider_name="file_extractor",
                )
            raise UnsupportedFormatError(
                message=extracted.error or "Unsupported file format",
                file_type=declared_type,
                file_name=file.file_name,
                supported_types=extracted.supported_types,
                provider_name="file_extractor",
            )

        if not extracted.content.strip():
            raise EmptyContentError(
                file_name=file.file_name,
                supported_types=extracted.supported_types,
                provider_name="file_extractor",
            )
        return extracted.content
