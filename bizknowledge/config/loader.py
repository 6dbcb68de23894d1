"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. DEFAULT_CONFIG below  -- built-in pipeline defaults
#   2. config/config.yaml    -- static overrides checked into the repo
#   3. .env / environment    -- deployment values via Settings
#
# _deep_merge does recursive dict merging, so a YAML file that only sets
# ``ingestion.chunk_max_length`` keeps every other ingestion default.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from bizknowledge.config.segments import DEFAULT_SEGMENT_NAME, DEFAULT_SEGMENTS
from bizknowledge.config.settings import Settings
from bizknowledge.utils.errors import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "ingestion": {
        "chunk_max_length": 1000,
        "category_excerpt_chars": 2000,
        "summary_excerpt_chars": 1500,
        "summary_fallback_chars": 200,
        "ai_confidence": 0.8,
        "default_segment": DEFAULT_SEGMENT_NAME,
        "preview_chars": 200,
    },
    "retrieval": {
        "default_limit": 10,
    },
    "chat": {
        "context_limit": 10,
        "fallback_max_documents": 3,
        "fallback_excerpt_chars": 300,
    },
    "segments": [dict(s) for s in DEFAULT_SEGMENTS],
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config on top of defaults and merge environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is fine.
        settings: Settings instance to read env overrides from.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML is malformed or a tunable is out of range.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                message=f"Could not parse {config_path}: {exc}",
                provider_name="config",
            ) from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                message=f"{config_path} must contain a mapping at the top level",
                provider_name="config",
            )
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "generation": {
            "timeout_seconds": settings.generation_timeout_seconds,
        },
        "storage": {
            "database_path": settings.database_path,
        },
    }
    _deep_merge(config, env_overrides)

    _validate(config)
    return config


def _validate(config: dict) -> None:
    """Reject tunables that would make the pipeline misbehave."""
    ingestion = config["ingestion"]
    for key in (
        "chunk_max_length",
        "category_excerpt_chars",
        "summary_excerpt_chars",
        "summary_fallback_chars",
        "preview_chars",
    ):
        if int(ingestion[key]) <= 0:
            raise ConfigurationError(
                message=f"ingestion.{key} must be positive, got {ingestion[key]}",
                provider_name="config",
            )
    if not 0.0 <= float(ingestion["ai_confidence"]) <= 1.0:
        raise ConfigurationError(
            message="ingestion.ai_confidence must be within [0, 1]",
            provider_name="config",
        )
    if int(config["retrieval"]["default_limit"]) <= 0:
        raise ConfigurationError(
            message="retrieval.default_limit must be positive",
            provider_name="config",
        )
    if float(config["generation"]["timeout_seconds"]) <= 0:
        raise ConfigurationError(
            message="generation.timeout_seconds must be positive",
            provider_name="config",
        )
    names = [s.get("name") for s in config.get("segments", [])]
    if any(not n for n in names) or len(names) != len(set(names)):
        raise ConfigurationError(
            message="segments must have unique, non-empty names",
            provider_name="config",
        )


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
