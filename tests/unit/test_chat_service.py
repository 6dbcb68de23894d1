"""Unit tests for ChatService: grounded answers, degraded fallback and history."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from bizknowledge.interfaces.knowledge_store import IKnowledgeStore
from bizknowledge.interfaces.retrieval_engine import IRetrievalEngine
from bizknowledge.models.chat import ChatSource, MessageRole, SourceCitation
from bizknowledge.models.knowledge import SearchHit
from bizknowledge.services.chat_service import (
    NO_INFORMATION_MESSAGE,
    UNCATEGORISED_LABEL,
    ChatService,
    format_context,
    unique_sources,
)
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.utils.errors import NotFoundError, ValidationError


def _hit(
    document_id: int,
    chunk_index: int = 0,
    title: str = "Doc",
    segment: str | None = "Finance",
    summary: str | None = "A summary.",
    text: str = "chunk text",
) -> SearchHit:
    return SearchHit(
        document_id=document_id,
        chunk_index=chunk_index,
        chunk_text=text,
        document_title=title,
        document_summary=summary,
        segment_name=segment,
    )


def _mocked_chat(hits: list[SearchHit], llm: MagicMock | None = None) -> tuple[ChatService, MagicMock]:
    store = MagicMock(spec=IKnowledgeStore)
    store.upsert_session = AsyncMock()
    store.append_exchange = AsyncMock()
    retrieval = MagicMock(spec=IRetrievalEngine)
    retrieval.search = AsyncMock(return_value=hits)
    chat = ChatService(store=store, retrieval=retrieval, generation=GenerationService(llm))
    return chat, store


# ─── Helpers ───────────────────────────────────────────────────────


def test_format_context_labels_uncategorised() -> None:
    context = format_context(
        [_hit(1, title="Budget", text="40 percent"), _hit(2, title="Memo", segment=None, text="hi")]
    )
    assert context == f"[Finance] Budget: 40 percent\n\n[{UNCATEGORISED_LABEL}] Memo: hi"


def test_unique_sources_keeps_first_hit_per_document() -> None:
    sources = unique_sources([_hit(1, 0, title="A"), _hit(1, 1, title="A"), _hit(2, 0, title="B")])
    assert sources == [
        ChatSource(title="A", segment="Finance", summary="A summary."),
        ChatSource(title="B", segment="Finance", summary="A summary."),
    ]


# ─── Turn validation ───────────────────────────────────────────────


@pytest.mark.parametrize(
    ("session_id", "message"),
    [(None, "hello"), ("", "hello"), ("sess", None), ("sess", "   ")],
)
async def test_turn_requires_session_and_message(session_id: Any, message: Any) -> None:
    chat, store = _mocked_chat([])
    with pytest.raises(ValidationError, match="Message and session ID required"):
        await chat.turn(session_id, message)
    store.upsert_session.assert_not_awaited()


async def test_turn_searches_and_persists_message_as_sent() -> None:
    store = MagicMock(spec=IKnowledgeStore)
    store.upsert_session = AsyncMock()
    store.append_exchange = AsyncMock()
    retrieval = MagicMock(spec=IRetrievalEngine)
    retrieval.search = AsyncMock(return_value=[])
    chat = ChatService(store=store, retrieval=retrieval, generation=GenerationService(None))
    message = "  marketing budget \n"

    await chat.turn("sess-1", message)

    retrieval.search.assert_awaited_once_with(message, 10)
    assert store.append_exchange.await_args.args[1] == message


# ─── Generated answers ─────────────────────────────────────────────


async def test_turn_with_generation_grounds_prompt(mock_llm_provider: MagicMock) -> None:
    mock_llm_provider.complete = AsyncMock(return_value="Marketing gets 25 percent [Q3 Budget].")
    hits = [_hit(1, 0, title="Q3 Budget", text="Marketing receives 25 percent")]
    chat, store = _mocked_chat(hits, mock_llm_provider)

    result = await chat.turn("sess-1", "How much does marketing get?")

    assert result.degraded is False
    assert result.answer == "Marketing gets 25 percent [Q3 Budget]."
    assert result.sources == [ChatSource(title="Q3 Budget", segment="Finance", summary="A summary.")]

    kwargs = mock_llm_provider.complete.await_args.kwargs
    assert "[Finance] Q3 Budget: Marketing receives 25 percent" in kwargs["system_prompt"]
    assert "ONLY" in kwargs["system_prompt"]
    assert kwargs["user_prompt"] == "How much does marketing get?"

    store.upsert_session.assert_awaited_once_with("sess-1")
    store.append_exchange.assert_awaited_once_with(
        "sess-1",
        "How much does marketing get?",
        "Marketing gets 25 percent [Q3 Budget].",
        [SourceCitation(title="Q3 Budget", segment="Finance")],
    )


async def test_turn_generates_even_without_hits(mock_llm_provider: MagicMock) -> None:
    mock_llm_provider.complete = AsyncMock(return_value="I don't have that information.")
    chat, _ = _mocked_chat([], mock_llm_provider)

    result = await chat.turn("sess-1", "Who won the football?")

    assert result.degraded is False
    assert result.sources == []
    mock_llm_provider.complete.assert_awaited_once()


# ─── Degraded answers ──────────────────────────────────────────────


async def test_no_hits_and_no_generation_gives_fixed_message() -> None:
    chat, store = _mocked_chat([])

    result = await chat.turn("sess-1", "Anything?")

    assert result.degraded is True
    assert result.answer == NO_INFORMATION_MESSAGE
    assert result.sources == []
    store.append_exchange.assert_awaited_once_with("sess-1", "Anything?", NO_INFORMATION_MESSAGE, [])


async def test_fallback_lists_at_most_three_documents() -> None:
    hits = [_hit(i, title=f"Report {i}", summary=f"Summary {i}.") for i in range(1, 6)]
    chat, _ = _mocked_chat(hits)

    result = await chat.turn("sess-1", "report")

    assert result.degraded is True
    assert "1. Report 1 (Finance)" in result.answer
    assert "Summary 1." in result.answer
    assert "3. Report 3 (Finance)" in result.answer
    assert "Report 4" not in result.answer
    # Sources still cover every retrieved document.
    assert len(result.sources) == 5


async def test_fallback_uses_excerpt_when_summary_missing() -> None:
    long_text = "word " * 200
    chat, _ = _mocked_chat([_hit(1, title="Memo", segment=None, summary=None, text=long_text)])

    result = await chat.turn("sess-1", "word")

    assert f"1. Memo ({UNCATEGORISED_LABEL})" in result.answer
    assert "..." in result.answer
    assert long_text not in result.answer


async def test_fallback_when_provider_errors(mock_llm_provider: MagicMock) -> None:
    mock_llm_provider.complete = AsyncMock(side_effect=RuntimeError("boom"))
    chat, _ = _mocked_chat([_hit(1, title="Q3 Budget")], mock_llm_provider)

    result = await chat.turn("sess-1", "budget")

    assert result.degraded is True
    assert "Q3 Budget" in result.answer


# ─── Sessions & history (real store) ───────────────────────────────


async def test_start_session_mints_unique_tokens(offline_services: dict[str, Any]) -> None:
    first = await offline_services["chat"].start_session()
    second = await offline_services["chat"].start_session()

    assert first.session_id != second.session_id
    assert len(first.session_id) >= 32


async def test_history_returns_turns_in_order(offline_services: dict[str, Any]) -> None:
    chat = offline_services["chat"]
    await offline_services["ingestion"].ingest(
        title="Q3 Budget", content="Marketing receives 25 percent."
    )
    session = await chat.start_session()

    await chat.turn(session.session_id, "marketing")
    await chat.turn(session.session_id, "unrelated question")

    messages = await chat.history(session.session_id)

    assert [m.role for m in messages] == [
        MessageRole.USER,
        MessageRole.ASSISTANT,
        MessageRole.USER,
        MessageRole.ASSISTANT,
    ]
    assert messages[0].content == "marketing"
    assert messages[1].sources == [SourceCitation(title="Q3 Budget", segment="General")]
    assert messages[3].content == NO_INFORMATION_MESSAGE
    assert messages[3].sources == []


async def test_turn_with_unknown_session_creates_it(offline_services: dict[str, Any]) -> None:
    chat = offline_services["chat"]
    await chat.turn("client-chosen-id", "hello there")
    assert len(await chat.history("client-chosen-id")) == 2


async def test_history_of_unknown_session_raises(offline_services: dict[str, Any]) -> None:
    with pytest.raises(NotFoundError):
        await offline_services["chat"].history("never-seen")


async def test_history_requires_session_id(offline_services: dict[str, Any]) -> None:
    with pytest.raises(ValidationError):
        await offline_services["chat"].history("  ")
