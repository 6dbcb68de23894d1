"""Conversational Q&A over the knowledge corpus.

Each chat turn follows the same retrieval-augmented flow:

  1. SESSION   -- upsert the session row, bumping ``last_activity``.
  2. RETRIEVE  -- up to ``context_limit`` snippets for the message.
  3. GENERATE  -- a system prompt embeds the snippets as
                  ``[segment] title: chunk`` blocks and tells the model to
                  answer only from them.
  4. FALLBACK  -- when generation fails, the answer is synthesised locally:
                  a list of the best-matching documents, or a fixed
                  "no information" message when nothing matched.
  5. PERSIST   -- user message and assistant reply are appended together.

A turn only fails for caller mistakes (missing message or session id) or a
storage error; generation problems surface as ``degraded=True``.
"""

from __future__ import annotations

import secrets

import structlog

from bizknowledge.interfaces.knowledge_store import IKnowledgeStore
from bizknowledge.interfaces.retrieval_engine import IRetrievalEngine
from bizknowledge.models.chat import ChatMessage, ChatSession, ChatSource, ChatTurnResult, SourceCitation
from bizknowledge.models.knowledge import SearchHit
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.utils.errors import NotFoundError, ValidationError
from bizknowledge.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

UNCATEGORISED_LABEL = "Uncategorised"

NO_INFORMATION_MESSAGE = (
    "I don't have information about that in the company documents. "
    "The AI assistant is also temporarily unavailable, so please try "
    "rephrasing your question or ask again later."
)

_DEGRADED_INTRO = (
    "The AI assistant is temporarily unavailable, so I can't write a full "
    "answer right now. These company documents look relevant to your question:"
)

_SYSTEM_PROMPT = (
    "You are a helpful business assistant. Answer questions based ONLY on the "
    "provided company documentation. If the information is not in the "
    "documentation, clearly state that you don't have that information in the "
    "company documents.\n\n"
    "Company Documentation:\n"
    "{context}\n\n"
    "Always cite which documents or sections you're referencing in your response."
)

_SESSION_TOKEN_BYTES = 24


def format_context(hits: list[SearchHit]) -> str:
    """Render snippets as ``[segment] title: chunk`` blocks."""
    return "\n\n".join(
        f"[{h.segment_name or UNCATEGORISED_LABEL}] {h.document_title}: {h.chunk_text}"
        for h in hits
    )


def unique_sources(hits: list[SearchHit]) -> list[ChatSource]:
    """One source per document, in retrieval order."""
    seen: set[int] = set()
    sources: list[ChatSource] = []
    for hit in hits:
        if hit.document_id in seen:
            continue
        seen.add(hit.document_id)
        sources.append(
            ChatSource(
                title=hit.document_title,
                segment=hit.segment_name,
                summary=hit.document_summary,
            )
        )
    return sources


class ChatService:
    """Answers questions from the ingested corpus and records the exchange.

    Parameters
    ----------
    store:
        Session and message persistence.
    retrieval:
        Finds the snippets the answer is grounded on.
    generation:
        The failure-absorbing generation boundary.
    context_limit:
        Maximum snippets placed in the prompt.
    fallback_max_documents:
        Documents listed in a degraded answer.
    fallback_excerpt_chars:
        Length of the chunk excerpt shown for a document with no summary.
    """

    def __init__(
        self,
        store: IKnowledgeStore,
        retrieval: IRetrievalEngine,
        generation: GenerationService,
        context_limit: int = 10,
        fallback_max_documents: int = 3,
        fallback_excerpt_chars: int = 300,
    ) -> None:
        self._store = store
        self._retrieval = retrieval
        self._generation = generation
        self._context_limit = context_limit
        self._fallback_max_documents = fallback_max_documents
        self._fallback_excerpt_chars = fallback_excerpt_chars

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start_session(self) -> ChatSession:
        """Mint a server-issued opaque session token."""
        session_id = secrets.token_urlsafe(_SESSION_TOKEN_BYTES)
        session = await self._store.upsert_session(session_id)
        logger.info("chat_session_started", session_id=session_id)
        return session

    async def turn(self, session_id: str | None, message: str | None) -> ChatTurnResult:
        """Answer one message within a session."""
        session_id = (session_id or "").strip()
        message = message or ""
        # Whitespace-only counts as missing; the query itself is used as sent.
        if not session_id or not message.strip():
            raise ValidationError("Message and session ID required")

        await self._store.upsert_session(session_id)

        hits = await self._retrieval.search(message, self._context_limit)
        sources = unique_sources(hits)

        result = await self._generation.generate(
            system_prompt=_SYSTEM_PROMPT.format(context=format_context(hits)),
            user_prompt=message,
            temperature=0.3,
            max_tokens=1000,
            purpose="chat",
        )

        if result.ok:
            answer = result.text or ""
            degraded = False
        else:
            answer = self._fallback_answer(hits)
            degraded = True

        await self._store.append_exchange(
            session_id,
            message,
            answer,
            [SourceCitation(title=s.title, segment=s.segment) for s in sources],
        )

        logger.info(
            "chat_turn_completed",
            session_id=session_id,
            hits=len(hits),
            sources=len(sources),
            degraded=degraded,
        )
        return ChatTurnResult(
            session_id=session_id,
            answer=answer,
            sources=sources,
            degraded=degraded,
        )

    async def history(self, session_id: str | None) -> list[ChatMessage]:
        """Return a session's messages, oldest first."""
        session_id = (session_id or "").strip()
        if not session_id:
            raise ValidationError("Session ID required")
        session = await self._store.get_session(session_id)
        if session is None:
            raise NotFoundError(
                message=f"Chat session {session_id!r} not found",
                resource="chat_session",
                identifier=session_id,
            )
        return await self._store.list_messages(session_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _fallback_answer(self, hits: list[SearchHit]) -> str:
        if not hits:
            return NO_INFORMATION_MESSAGE

        # First hit per document carries its earliest matching chunk.
        by_document: dict[int, SearchHit] = {}
        for hit in hits:
            by_document.setdefault(hit.document_id, hit)
        documents = list(by_document.values())[: self._fallback_max_documents]

        lines = [_DEGRADED_INTRO, ""]
        for number, hit in enumerate(documents, start=1):
            segment = hit.segment_name or UNCATEGORISED_LABEL
            detail = hit.document_summary or self._excerpt(hit.chunk_text)
            lines.append(f"{number}. {hit.document_title} ({segment})")
            lines.append(f"   {detail}")
        return "\n".join(lines)

    def _excerpt(self, text: str) -> str:
        if len(text) <= self._fallback_excerpt_chars:
            return text
        return text[: self._fallback_excerpt_chars].rstrip() + "..."
