"""Business knowledge base FastAPI application entry point.

Wires together providers, services and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and initialises the SQLite store on startup.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from bizknowledge.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from bizknowledge.api.routes import router as api_router
from bizknowledge.config.loader import load_config
from bizknowledge.config.settings import Settings
from bizknowledge.interfaces.llm_provider import ILLMProvider
from bizknowledge.providers.extraction.basic_file_extractor import BasicFileExtractor
from bizknowledge.providers.llm.anthropic_provider import AnthropicLLMProvider
from bizknowledge.providers.llm.ollama_provider import OllamaLLMProvider
from bizknowledge.providers.llm.openai_provider import OpenAILLMProvider
from bizknowledge.providers.store.sqlite_knowledge_store import SQLiteKnowledgeStore
from bizknowledge.services.chat_service import ChatService
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.services.ingestion.categoriser import Categoriser
from bizknowledge.services.ingestion.chunker import TextChunker
from bizknowledge.services.ingestion.ingestion_service import IngestionService
from bizknowledge.services.retrieval.keyword_engine import KeywordRetrievalEngine
from bizknowledge.utils.logging import configure_logging, get_logger

APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings.config_path, settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
    app_env=settings.app_env,
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# LLM provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first configured LLM provider.

    Priority order: Anthropic -> OpenAI -> Ollama.  Returns ``None`` when
    generation is disabled, which puts every categorisation, summary and
    chat answer on its fallback path.
    """
    if not app_settings.generation_enabled:
        return None
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    if app_settings.ollama_base_url:
        return OllamaLLMProvider(settings=app_settings)
    return None


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    ingestion_cfg = app_config["ingestion"]
    chat_cfg = app_config["chat"]

    store = SQLiteKnowledgeStore(
        db_path=app_config["storage"]["database_path"],
        preview_chars=int(ingestion_cfg["preview_chars"]),
    )
    extractor = BasicFileExtractor()

    llm = _build_llm_provider(app_settings)
    generation = GenerationService(
        llm, timeout_seconds=float(app_config["generation"]["timeout_seconds"])
    )

    categoriser = Categoriser(
        generation,
        category_excerpt_chars=int(ingestion_cfg["category_excerpt_chars"]),
        summary_excerpt_chars=int(ingestion_cfg["summary_excerpt_chars"]),
        summary_fallback_chars=int(ingestion_cfg["summary_fallback_chars"]),
        ai_confidence=float(ingestion_cfg["ai_confidence"]),
        default_segment=str(ingestion_cfg["default_segment"]),
    )
    chunker = TextChunker(max_length=int(ingestion_cfg["chunk_max_length"]))
    ingestion = IngestionService(
        store=store,
        categoriser=categoriser,
        chunker=chunker,
        extractor=extractor,
    )

    retrieval = KeywordRetrievalEngine(
        store, default_limit=int(app_config["retrieval"]["default_limit"])
    )
    chat = ChatService(
        store=store,
        retrieval=retrieval,
        generation=generation,
        context_limit=int(chat_cfg["context_limit"]),
        fallback_max_documents=int(chat_cfg["fallback_max_documents"]),
        fallback_excerpt_chars=int(chat_cfg["fallback_excerpt_chars"]),
    )

    return {
        "store": store,
        "file_extractor": extractor,
        "generation_service": generation,
        "ingestion_service": ingestion,
        "retrieval_engine": retrieval,
        "chat_service": chat,
        "database_path": str(store.db_path),
        "seed_segments": list(app_config.get("segments", [])),
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build components, create the schema and seed segments on startup."""
    app_settings: Settings = application.state.settings
    app_config: dict[str, Any] = application.state.config
    components = _build_all(app_settings, app_config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["store"].initialize(components["seed_segments"])

    _logger.info(
        "app_startup",
        version=APP_VERSION,
        environment=app_settings.app_env,
        generation_provider=components["generation_service"].provider_name,
        database=components["database_path"],
    )

    yield

    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    app_config: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Business Knowledge Base API",
        version=APP_VERSION,
        description=(
            "Upload business documents, have them categorised into business "
            "segments and summarised, then ask questions answered strictly "
            "from the uploaded corpus."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = app_settings or settings
    application.state.config = app_config or config

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "bizknowledge.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
