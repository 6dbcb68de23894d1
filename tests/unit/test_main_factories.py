"""Unit tests for the provider factory and DI assembly in main.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from bizknowledge.config.loader import load_config
from bizknowledge.config.settings import Settings
from bizknowledge.main import _build_all, _build_llm_provider
from bizknowledge.providers.llm.anthropic_provider import AnthropicLLMProvider
from bizknowledge.providers.llm.ollama_provider import OllamaLLMProvider
from bizknowledge.providers.llm.openai_provider import OpenAILLMProvider
from bizknowledge.providers.store.sqlite_knowledge_store import SQLiteKnowledgeStore
from bizknowledge.services.chat_service import ChatService
from bizknowledge.services.ingestion.ingestion_service import IngestionService


def _settings(tmp_path: Path, **overrides) -> Settings:
    defaults = {
        "openai_api_key": "",
        "anthropic_api_key": "",
        "ollama_base_url": "",
        "database_path": str(tmp_path / "kb.db"),
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestBuildLLMProvider:
    def test_generation_disabled(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path, anthropic_api_key="sk-ant", generation_enabled=False)
        assert _build_llm_provider(settings) is None

    def test_anthropic_preferred(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path, anthropic_api_key="sk-ant", openai_api_key="sk-oai")
        assert isinstance(_build_llm_provider(settings), AnthropicLLMProvider)

    def test_openai_when_no_anthropic(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path, openai_api_key="sk-oai")
        assert isinstance(_build_llm_provider(settings), OpenAILLMProvider)

    def test_ollama_last(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path, ollama_base_url="http://localhost:11434")
        assert isinstance(_build_llm_provider(settings), OllamaLLMProvider)

    def test_nothing_configured(self, tmp_path: Path) -> None:
        assert _build_llm_provider(_settings(tmp_path)) is None


class TestBuildAll:
    def test_components_wired(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        config = load_config(str(tmp_path / "absent.yaml"), settings)

        components = _build_all(settings, config)

        assert isinstance(components["store"], SQLiteKnowledgeStore)
        assert isinstance(components["ingestion_service"], IngestionService)
        assert isinstance(components["chat_service"], ChatService)
        assert components["retrieval_engine"].get_engine_name() == "keyword"
        assert components["generation_service"].is_configured is False
        assert components["database_path"] == str(tmp_path / "kb.db")
        assert [s["name"] for s in components["seed_segments"]][0] == "General"

    async def test_store_initialises_with_seed_segments(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        config = load_config(str(tmp_path / "absent.yaml"), settings)
        components = _build_all(settings, config)

        await components["store"].initialize(components["seed_segments"])

        segments = await components["store"].list_segments()
        assert len(segments) == len(config["segments"])

    def test_bad_chunk_length_rejected_at_build(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        config = load_config(str(tmp_path / "absent.yaml"), settings)
        config["ingestion"]["chunk_max_length"] = 0
        with pytest.raises(ValueError):
            _build_all(settings, config)

    def test_storage_and_timeout_read_from_config(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        config = load_config(str(tmp_path / "absent.yaml"), settings)
        config["storage"]["database_path"] = str(tmp_path / "override.db")
        config["generation"]["timeout_seconds"] = 3.5

        components = _build_all(settings, config)

        assert components["database_path"] == str(tmp_path / "override.db")
        assert components["generation_service"].timeout_seconds == 3.5


def test_unconfigured_install_has_no_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "OLLAMA_BASE_URL"):
        monkeypatch.delenv(var, raising=False)

    settings = Settings(_env_file=None)

    assert settings.ollama_base_url == ""
    assert settings.get_available_llm_providers() == []
    assert _build_llm_provider(settings) is None
