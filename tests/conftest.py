"""Shared pytest fixtures for the business knowledge base test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from bizknowledge.config.segments import DEFAULT_SEGMENTS
from bizknowledge.interfaces.llm_provider import ILLMProvider
from bizknowledge.providers.extraction.basic_file_extractor import BasicFileExtractor
from bizknowledge.providers.store.sqlite_knowledge_store import SQLiteKnowledgeStore
from bizknowledge.services.chat_service import ChatService
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.services.ingestion.categoriser import Categoriser
from bizknowledge.services.ingestion.chunker import TextChunker
from bizknowledge.services.ingestion.ingestion_service import IngestionService
from bizknowledge.services.retrieval.keyword_engine import KeywordRetrievalEngine

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _uncached_loggers() -> None:
    """Resolve ``sys.stdout`` per log call; capsys swaps it between tests."""
    # main configures logging on import; import it first so this wins.
    import bizknowledge.main  # noqa: F401

    structlog.configure(cache_logger_on_first_use=False)


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_budget_text() -> str:
    """A short finance document with several sentences."""
    return (
        "The Q3 budget allocates 40 percent of spend to product development. "
        "Marketing receives 25 percent for the autumn campaign. "
        "Operations keeps a contingency reserve of 10 percent! "
        "Is the remaining spend committed? "
        "Yes, it covers salaries and office costs."
    )


@pytest.fixture
def sample_policy_text() -> str:
    return (
        "Employees accrue 25 days of annual leave per year. "
        "Leave requests go to the line manager at least two weeks in advance."
    )


# ---------------------------------------------------------------------------
# LLM mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> MagicMock:
    """Return a mock ILLMProvider with AsyncMock methods."""
    provider = MagicMock(spec=ILLMProvider)
    provider.get_provider_name.return_value = "mock-llm"
    provider.is_available.return_value = True
    provider.validate_credentials = AsyncMock(return_value=True)
    provider.complete = AsyncMock(return_value="Mock LLM response")
    return provider


def make_routing_llm(segment_reply: str, summary: str, chat_answer: str) -> MagicMock:
    """Mock provider that answers by prompt type.

    Classification, summary and chat prompts are told apart by their system
    prompts, so one mock can drive a whole ingest-then-chat flow.
    """

    async def _complete(system_prompt: str, user_prompt: str, **_: Any) -> str:
        if "business segment" in system_prompt:
            return segment_reply
        if "summaries" in system_prompt:
            return summary
        return chat_answer

    provider = MagicMock(spec=ILLMProvider)
    provider.get_provider_name.return_value = "mock-llm"
    provider.is_available.return_value = True
    provider.validate_credentials = AsyncMock(return_value=True)
    provider.complete = AsyncMock(side_effect=_complete)
    return provider


@pytest.fixture
def routing_llm() -> MagicMock:
    return make_routing_llm(
        segment_reply="Finance",
        summary="The Q3 budget splits spend across product, marketing and operations.",
        chat_answer="According to the Q3 Budget, marketing receives 25 percent.",
    )


# ---------------------------------------------------------------------------
# Store & services
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "knowledge.db"


@pytest.fixture
async def store(db_path: Path) -> SQLiteKnowledgeStore:
    """An initialised SQLite store seeded with the default segments."""
    s = SQLiteKnowledgeStore(db_path=db_path)
    await s.initialize(DEFAULT_SEGMENTS)
    return s


def build_services(
    store: SQLiteKnowledgeStore,
    llm: ILLMProvider | None,
    timeout_seconds: float = 5.0,
) -> dict[str, Any]:
    """Wire the ingestion and chat services around *store* and *llm*."""
    generation = GenerationService(llm, timeout_seconds=timeout_seconds)
    ingestion = IngestionService(
        store=store,
        categoriser=Categoriser(generation),
        chunker=TextChunker(max_length=1000),
        extractor=BasicFileExtractor(),
    )
    retrieval = KeywordRetrievalEngine(store)
    chat = ChatService(store=store, retrieval=retrieval, generation=generation)
    return {
        "generation": generation,
        "ingestion": ingestion,
        "retrieval": retrieval,
        "chat": chat,
    }


@pytest.fixture
def offline_services(store: SQLiteKnowledgeStore) -> dict[str, Any]:
    """Services with no LLM configured: every generation call fails."""
    return build_services(store, None)


@pytest.fixture
def ai_services(store: SQLiteKnowledgeStore, routing_llm: MagicMock) -> dict[str, Any]:
    return build_services(store, routing_llm)


@pytest.fixture
def services_factory():
    """Return :func:`build_services` so tests can wire their own LLM."""
    return build_services


@pytest.fixture
def routing_llm_factory():
    return make_routing_llm
