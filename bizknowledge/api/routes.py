"""FastAPI routes for the business knowledge base.

Service dependencies are resolved from ``app.state`` (populated at startup
by ``main._build_all``) via ``Depends`` with the ``Annotated`` pattern.
Domain errors raised by the services propagate to
``ErrorHandlingMiddleware``, which maps them to status codes.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                          Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/segments                  GET     List segments with counts
# /api/v1/segments/recount          POST    Repair every segment's count
# /api/v1/documents/upload          POST    Ingest a file or pasted text
# /api/v1/documents                 GET     List documents (?segment=id)
# /api/v1/documents/{id}            GET     Document with its chunks
# /api/v1/documents/{id}            DELETE  Delete a document
# /api/v1/search                    GET     Raw keyword retrieval
# /api/v1/chat/sessions             POST    Mint a session token
# /api/v1/chat                      POST    One chat turn
# /api/v1/chat/{session_id}         GET     Chat history
# /api/v1/file-types                GET     Accepted upload formats
# /api/v1/health                    GET     Health + collaborator status
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from bizknowledge.api.schemas import (
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatRequest,
    ChatResponse,
    ChatSessionResponse,
    ChatSourceResponse,
    ChunkResponse,
    DeleteResponse,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentSummaryResponse,
    ErrorResponse,
    FileTypesResponse,
    HealthResponse,
    RecountResponse,
    SearchHitResponse,
    SearchResponse,
    SegmentListResponse,
    SegmentResponse,
    UploadResponse,
)
from bizknowledge.interfaces.file_extractor import IFileExtractor
from bizknowledge.interfaces.retrieval_engine import IRetrievalEngine
from bizknowledge.models.extraction import UploadedFile
from bizknowledge.providers.extraction.basic_file_extractor import FILE_TYPE_DESCRIPTION
from bizknowledge.services.chat_service import ChatService
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.services.ingestion.ingestion_service import IngestionService
from bizknowledge.utils.errors import ValidationError
from bizknowledge.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
_UPLOAD_CHUNK_SIZE = 64 * 1024
_MAX_SEARCH_LIMIT = 50


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_retrieval_engine(request: Request) -> IRetrievalEngine:
    return request.app.state.retrieval_engine


def _get_file_extractor(request: Request) -> IFileExtractor:
    return request.app.state.file_extractor


def _get_generation_service(request: Request) -> GenerationService:
    return request.app.state.generation_service


def _get_database_path(request: Request) -> str | None:
    return getattr(request.app.state, "database_path", None)


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
ChatDep = Annotated[ChatService, Depends(_get_chat_service)]
RetrievalDep = Annotated[IRetrievalEngine, Depends(_get_retrieval_engine)]
ExtractorDep = Annotated[IFileExtractor, Depends(_get_file_extractor)]
GenerationDep = Annotated[GenerationService, Depends(_get_generation_service)]
DatabasePathDep = Annotated[str | None, Depends(_get_database_path)]

_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


@router.get("/segments", response_model=SegmentListResponse, summary="List business segments")
async def list_segments(ingestion: IngestionDep) -> SegmentListResponse:
    segments = await ingestion.list_segments()
    return SegmentListResponse(
        segments=[
            SegmentResponse(
                id=s.id,
                name=s.name,
                description=s.description,
                colour=s.colour,
                document_count=s.document_count,
            )
            for s in segments
        ]
    )


@router.post(
    "/segments/recount",
    response_model=RecountResponse,
    summary="Recompute every segment's document count",
)
async def recount_segments(ingestion: IngestionDep) -> RecountResponse:
    counts = await ingestion.recount_all_segments()
    return RecountResponse(counts=counts)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/documents/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Upload a document file or pasted text",
)
async def upload_document(
    ingestion: IngestionDep,
    title: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """Extract, categorise, summarise, chunk and store one document."""
    uploaded: UploadedFile | None = None
    if file is not None and file.filename:
        uploaded = UploadedFile(
            file_name=file.filename,
            content_type=file.content_type,
            data=await _read_upload(file),
        )

    result = await ingestion.ingest(title=title, content=content, file=uploaded)
    return UploadResponse(
        document_id=result.document_id,
        segment_id=result.segment_id,
        segment_name=result.segment_name,
        confidence=result.confidence,
        summary=result.summary,
        chunk_count=result.chunk_count,
    )


@router.get("/documents", response_model=DocumentListResponse, summary="List documents")
async def list_documents(
    ingestion: IngestionDep,
    segment: Annotated[int | None, Query(description="Filter by segment id")] = None,
) -> DocumentListResponse:
    documents = await ingestion.list_documents(segment)
    return DocumentListResponse(
        documents=[
            DocumentSummaryResponse(**d.model_dump()) for d in documents
        ]
    )


@router.get(
    "/documents/{document_id}",
    response_model=DocumentDetailResponse,
    responses=_ERRORS,
    summary="Get a document with its chunks",
)
async def get_document(document_id: int, ingestion: IngestionDep) -> DocumentDetailResponse:
    document = await ingestion.get_document(document_id)
    chunks = await ingestion.list_chunks(document_id)
    return DocumentDetailResponse(
        **document.model_dump(),
        chunks=[
            ChunkResponse(chunk_index=c.chunk_index, chunk_text=c.chunk_text, preview=c.preview)
            for c in chunks
        ],
    )


@router.delete(
    "/documents/{document_id}",
    response_model=DeleteResponse,
    responses=_ERRORS,
    summary="Delete a document",
)
async def delete_document(document_id: int, ingestion: IngestionDep) -> DeleteResponse:
    await ingestion.delete(document_id)
    return DeleteResponse(document_id=document_id)


@router.get("/file-types", response_model=FileTypesResponse, summary="Accepted upload formats")
async def file_types(extractor: ExtractorDep) -> FileTypesResponse:
    return FileTypesResponse(
        supported_types=extractor.supported_extensions(),
        description=FILE_TYPE_DESCRIPTION,
    )


# ---------------------------------------------------------------------------
# Search & chat
# ---------------------------------------------------------------------------


@router.get("/search", response_model=SearchResponse, summary="Keyword search over the corpus")
async def search(
    retrieval: RetrievalDep,
    q: Annotated[str, Query(description="Search text")] = "",
    limit: Annotated[int, Query(ge=1, le=_MAX_SEARCH_LIMIT)] = 10,
) -> SearchResponse:
    hits = await retrieval.search(q, limit)
    return SearchResponse(
        query=q,
        results=[SearchHitResponse(**h.model_dump()) for h in hits],
    )


@router.post(
    "/chat/sessions",
    response_model=ChatSessionResponse,
    summary="Start a chat session",
)
async def start_chat_session(chat: ChatDep) -> ChatSessionResponse:
    session = await chat.start_session()
    return ChatSessionResponse(session_id=session.session_id, created_at=session.created_at)


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Ask a question answered from the company documents",
)
async def chat_turn(body: ChatRequest, chat: ChatDep) -> ChatResponse:
    result = await chat.turn(body.session_id, body.message)
    return ChatResponse(
        session_id=result.session_id,
        answer=result.answer,
        sources=[ChatSourceResponse(**s.model_dump()) for s in result.sources],
        degraded=result.degraded,
    )


@router.get(
    "/chat/{session_id}",
    response_model=ChatHistoryResponse,
    responses=_ERRORS,
    summary="Get a chat session's history",
)
async def chat_history(session_id: str, chat: ChatDep) -> ChatHistoryResponse:
    messages = await chat.history(session_id)
    return ChatHistoryResponse(
        session_id=session_id,
        messages=[
            ChatMessageResponse(
                id=m.id,
                role=m.role.value,
                content=m.content,
                sources=(
                    [ChatSourceResponse(**s.model_dump()) for s in m.sources]
                    if m.sources is not None
                    else None
                ),
                timestamp=m.timestamp,
            )
            for m in messages
        ],
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    generation: GenerationDep,
    retrieval: RetrievalDep,
    database_path: DatabasePathDep,
) -> HealthResponse:
    return HealthResponse(
        generation_provider=generation.provider_name,
        retrieval_engine=retrieval.get_engine_name(),
        database_path=database_path,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _read_upload(file: UploadFile) -> bytes:
    """Read an upload in chunks, rejecting it once it passes the size cap."""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > _MAX_UPLOAD_BYTES:
            _logger.warning("upload_too_large", file_name=file.filename, limit=_MAX_UPLOAD_BYTES)
            raise ValidationError(
                f"File too large: maximum is {_MAX_UPLOAD_BYTES // (1024 * 1024)} MB"
            )
        chunks.append(chunk)
    return b"".join(chunks)
