"""Unit tests for configuration loading and settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from bizknowledge.config.loader import DEFAULT_CONFIG, _deep_merge, load_config
from bizknowledge.config.segments import DEFAULT_SEGMENT_NAME, DEFAULT_SEGMENTS
from bizknowledge.config.settings import Settings
from bizknowledge.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "",
        "anthropic_api_key": "",
        "ollama_base_url": "",
        "database_path": "data/test.db",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), _settings())

        assert config["ingestion"]["chunk_max_length"] == 1000
        assert config["ingestion"]["default_segment"] == DEFAULT_SEGMENT_NAME
        assert config["chat"]["context_limit"] == 10
        assert len(config["segments"]) == len(DEFAULT_SEGMENTS)

    def test_yaml_overrides_are_deep_merged(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("ingestion:\n  chunk_max_length: 500\n", encoding="utf-8")

        config = load_config(str(path), _settings())

        assert config["ingestion"]["chunk_max_length"] == 500
        assert config["ingestion"]["summary_fallback_chars"] == 200

    def test_yaml_can_replace_segments(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "segments:\n  - name: General\n  - name: Research\n    description: R&D\n",
            encoding="utf-8",
        )
        config = load_config(str(path), _settings())
        assert [s["name"] for s in config["segments"]] == ["General", "Research"]

    def test_env_sections_are_added(self, tmp_path: Path) -> None:
        config = load_config(
            str(tmp_path / "absent.yaml"),
            _settings(anthropic_api_key="sk-ant", generation_timeout_seconds=9.0),
        )
        assert config["storage"]["database_path"] == "data/test.db"
        assert config["generation"]["timeout_seconds"] == 9.0
        assert set(config) == {
            "ingestion", "retrieval", "chat", "segments", "generation", "storage"
        }

    def test_defaults_are_not_mutated(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("retrieval:\n  default_limit: 3\n", encoding="utf-8")
        load_config(str(path), _settings())
        assert DEFAULT_CONFIG["retrieval"]["default_limit"] == 10

    def test_repo_config_file_loads(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(repo_config), _settings())
        assert config["ingestion"]["ai_confidence"] == pytest.approx(0.8)


class TestValidation:
    @pytest.mark.parametrize(
        "yaml_text",
        [
            "ingestion:\n  chunk_max_length: 0\n",
            "ingestion:\n  ai_confidence: 1.5\n",
            "retrieval:\n  default_limit: -1\n",
            "segments:\n  - name: General\n  - name: General\n",
            "segments:\n  - description: nameless\n",
        ],
    )
    def test_bad_values_rejected(self, tmp_path: Path, yaml_text: str) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml_text, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path), _settings())

    def test_non_positive_timeout_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="timeout_seconds"):
            load_config(str(tmp_path / "absent.yaml"), _settings(generation_timeout_seconds=0))

    def test_malformed_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("ingestion: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Could not parse"):
            load_config(str(path), _settings())

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path), _settings())


def test_deep_merge_nested() -> None:
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    _deep_merge(base, {"a": {"c": 20}, "e": 5})
    assert base == {"a": {"b": 1, "c": 20}, "d": 3, "e": 5}


class TestSettings:
    def test_provider_priority(self) -> None:
        settings = _settings(
            openai_api_key="sk-test",
            anthropic_api_key="sk-ant",
            ollama_base_url="http://localhost:11434",
        )
        assert settings.get_available_llm_providers() == ["anthropic", "openai", "ollama"]

    def test_generation_disabled_lists_no_providers(self) -> None:
        settings = _settings(openai_api_key="sk-test", generation_enabled=False)
        assert settings.get_available_llm_providers() == []

    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_PATH", "/tmp/env.db")
        monkeypatch.setenv("GENERATION_ENABLED", "false")
        settings = Settings()
        assert settings.database_path == "/tmp/env.db"
        assert settings.generation_enabled is False
