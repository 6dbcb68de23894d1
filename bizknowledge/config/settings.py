"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from two sources, highest
# priority first:
#
#   1. Environment variables, e.g. ANTHROPIC_API_KEY=sk-ant-...
#   2. The .env file in the working directory (local development)
#
# Field ``database_path`` maps to env var ``DATABASE_PATH`` and so on.
# Defaults apply when neither source sets a value.
#
# Pipeline tuning (chunk length, excerpt sizes, seed segments) lives in
# config/config.yaml instead; see loader.py.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Knowledge-base application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Text generation ===
    # Empty string = "not configured"; provider selection in main.py skips
    # providers with empty keys and falls through to the next.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, Groq, ...)
    openai_text_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""
    ollama_base_url: str = ""  # e.g. http://localhost:11434; empty = no local model
    ollama_text_model: str = ""
    # False = permanent degraded mode: no provider is built and every
    # categorisation / summary / chat answer uses its fallback.
    generation_enabled: bool = True
    # Upper bound on one generation call, enforced by GenerationService.
    generation_timeout_seconds: float = 25.0

    # === Persistence ===
    database_path: str = "data/knowledge.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"

    def get_available_llm_providers(self) -> list[str]:
        """Return provider names in selection priority order."""
        if not self.generation_enabled:
            return []
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
