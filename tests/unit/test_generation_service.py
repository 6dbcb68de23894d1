"""Unit tests for GenerationService: the failure-absorbing LLM boundary."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from bizknowledge.models.generation import GenerationResult
from bizknowledge.services.generation_service import GenerationService
from bizknowledge.utils.errors import GenerationServiceError


class TestGenerationResult:
    def test_success_is_ok(self) -> None:
        result = GenerationResult.success("hello", provider="mock-llm")
        assert result.ok is True
        assert result.text == "hello"
        assert result.provider == "mock-llm"

    def test_failure_is_not_ok(self) -> None:
        result = GenerationResult.failure("boom")
        assert result.ok is False
        assert result.error == "boom"

    def test_blank_text_is_not_ok(self) -> None:
        assert GenerationResult(text="   ").ok is False


class TestGenerate:
    async def test_returns_text_on_success(self, mock_llm_provider: MagicMock) -> None:
        service = GenerationService(mock_llm_provider)
        result = await service.generate("system", "user", temperature=0.1, max_tokens=50)

        assert result.ok
        assert result.text == "Mock LLM response"
        assert result.provider == "mock-llm"
        mock_llm_provider.complete.assert_awaited_once_with(
            system_prompt="system",
            user_prompt="user",
            temperature=0.1,
            max_tokens=50,
        )

    async def test_provider_error_becomes_failure(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(
            side_effect=GenerationServiceError("rate limited", provider_name="mock-llm")
        )
        result = await GenerationService(mock_llm_provider).generate("s", "u")

        assert not result.ok
        assert result.error == "rate limited"

    async def test_unexpected_exception_becomes_failure(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(side_effect=RuntimeError("socket closed"))
        result = await GenerationService(mock_llm_provider).generate("s", "u")

        assert not result.ok
        assert "socket closed" in (result.error or "")

    async def test_timeout_becomes_failure(self, mock_llm_provider: MagicMock) -> None:
        async def _slow(**_: object) -> str:
            await asyncio.sleep(5)
            return "too late"

        mock_llm_provider.complete = AsyncMock(side_effect=_slow)
        result = await GenerationService(mock_llm_provider, timeout_seconds=0.05).generate("s", "u")

        assert not result.ok
        assert "timed out" in (result.error or "")

    @pytest.mark.parametrize("reply", ["", "   \n"])
    async def test_empty_reply_becomes_failure(
        self, mock_llm_provider: MagicMock, reply: str
    ) -> None:
        mock_llm_provider.complete = AsyncMock(return_value=reply)
        result = await GenerationService(mock_llm_provider).generate("s", "u")
        assert not result.ok

    async def test_unconfigured_service_always_fails(self) -> None:
        service = GenerationService(None)

        result = await service.generate("s", "u")

        assert not result.ok
        assert service.is_configured is False
        assert service.provider_name is None

    def test_provider_name_reported(self, mock_llm_provider: MagicMock) -> None:
        service = GenerationService(mock_llm_provider)
        assert service.provider_name == "mock-llm"
        assert service.is_configured is True
