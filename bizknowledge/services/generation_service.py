"""Text-generation boundary around the configured LLM provider.

Every categorisation, summary and chat answer goes through
:meth:`GenerationService.generate`, which never raises: provider errors,
timeouts, empty replies and a missing provider all come back as a failed
:class:`~bizknowledge.models.generation.GenerationResult`.  Callers branch
on ``result.ok`` and apply their own deterministic fallback.
"""

from __future__ import annotations

import asyncio

import structlog

from bizknowledge.interfaces.llm_provider import ILLMProvider
from bizknowledge.models.generation import GenerationResult
from bizknowledge.utils.errors import GenerationServiceError
from bizknowledge.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 25.0


class GenerationService:
    """Bounded, failure-absorbing wrapper around an :class:`ILLMProvider`.

    Parameters
    ----------
    llm:
        The provider to call, or ``None`` when generation is disabled or no
        provider is configured (every call then fails immediately).
    timeout_seconds:
        Upper bound on a single call, enforced with ``asyncio.wait_for``.
    """

    def __init__(
        self,
        llm: ILLMProvider | None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._llm = llm
        self._timeout = timeout_seconds

    @property
    def provider_name(self) -> str | None:
        return self._llm.get_provider_name() if self._llm is not None else None

    @property
    def is_configured(self) -> bool:
        return self._llm is not None

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
        purpose: str = "completion",
    ) -> GenerationResult:
        """Run one completion and report the outcome as a ``GenerationResult``.

        ``purpose`` only labels log events (``"categorise"``, ``"summarise"``,
        ``"chat"``).
        """
        if self._llm is None:
            logger.debug("generation_unconfigured", purpose=purpose)
            return GenerationResult.failure("No text-generation provider is configured")

        provider = self._llm.get_provider_name()
        try:
            text = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "generation_failed",
                purpose=purpose,
                provider=provider,
                error="timeout",
                timeout_seconds=self._timeout,
            )
            return GenerationResult.failure(
                f"Generation timed out after {self._timeout:g}s", provider=provider
            )
        except GenerationServiceError as exc:
            logger.warning("generation_failed", purpose=purpose, provider=provider, error=str(exc))
            return GenerationResult.failure(exc.message, provider=provider)
        except Exception as exc:
            # Adapters should raise GenerationServiceError, but an SDK bug
            # must not take the request down with it.
            logger.error(
                "generation_failed",
                purpose=purpose,
                provider=provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return GenerationResult.failure(str(exc) or type(exc).__name__, provider=provider)

        if not text or not text.strip():
            logger.warning("generation_failed", purpose=purpose, provider=provider, error="empty")
            return GenerationResult.failure("Generation returned no text", provider=provider)

        logger.debug("generation_succeeded", purpose=purpose, provider=provider, chars=len(text))
        return GenerationResult.success(text, provider=provider)
