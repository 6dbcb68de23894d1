"""LLM provider adapters.

Three concrete implementations of ILLMProvider (bizknowledge/interfaces/llm_provider.py):
    - AnthropicLLMProvider -- Claude via the Messages API
    - OpenAILLMProvider    -- gpt-4o-mini (also any OpenAI-compatible endpoint)
    - OllamaLLMProvider    -- local models via an Ollama server

At startup, main.py picks the first configured provider in that order and
hands it to GenerationService.
"""

from bizknowledge.providers.llm.anthropic_provider import AnthropicLLMProvider
from bizknowledge.providers.llm.ollama_provider import OllamaLLMProvider
from bizknowledge.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OllamaLLMProvider", "OpenAILLMProvider"]
