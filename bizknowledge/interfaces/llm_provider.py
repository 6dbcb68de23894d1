"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used for
segment classification, document summaries and chat answers.
Implementations may wrap the Anthropic API (Claude), OpenAI, or a local
model server.  Call-sites never talk to a provider directly; they go
through :class:`~bizknowledge.services.generation_service.GenerationService`,
which turns provider errors into a failed ``GenerationResult``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: AnthropicLLMProvider, OpenAILLMProvider, OllamaLLMProvider
# Located in: bizknowledge/providers/llm/
class ILLMProvider(ABC):
    """Contract for text-completion backends."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the actual request or data.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        bizknowledge.utils.errors.GenerationServiceError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this provider, e.g. ``"anthropic"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations should verify that credentials are present without
        making an inference call.
        """

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm the provider answers.

        Unlike :meth:`is_available`, this method actively contacts the
        remote service.
        """
