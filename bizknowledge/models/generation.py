"""Result type for the text-generation boundary.

Callers never see provider exceptions or SDK response objects: every call
through :class:`~bizknowledge.services.generation_service.GenerationService`
yields a ``GenerationResult`` that is either a success carrying ``text`` or a
failure carrying ``error``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str | None = None
    error: str | None = None
    provider: str | None = None

    @property
    def ok(self) -> bool:
        """``True`` when the service produced non-empty text."""
        return self.error is None and bool(self.text and self.text.strip())

    @classmethod
    def success(cls, text: str, provider: str | None = None) -> GenerationResult:
        return cls(text=text, provider=provider)

    @classmethod
    def failure(cls, error: str, provider: str | None = None) -> GenerationResult:
        return cls(error=error, provider=provider)
