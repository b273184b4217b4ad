"""Tests for the LangChain text-generation wrapper with a stubbed chat model."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from sitesmith.core import llm_client
from sitesmith.core.llm_client import (
    LLMGenerationError,
    _message_text,
    call_text_generation,
    has_llm_credentials,
)


def _stub_llm(monkeypatch, *responses):
    llm = MagicMock()
    llm.ainvoke = AsyncMock(side_effect=list(responses))
    monkeypatch.setattr(llm_client, "get_llm", lambda temperature=0.5: llm)
    return llm


class TestMessageText:
    def test_plain_string(self):
        assert _message_text(SimpleNamespace(content="hello")) == "hello"

    def test_text_blocks_are_joined(self):
        message = SimpleNamespace(content=[
            {"type": "text", "text": "foo"},
            {"type": "image_url", "image_url": "x"},
            "bar",
        ])
        assert _message_text(message) == "foobar"


class TestCallTextGeneration:
    @pytest.mark.asyncio
    async def test_returns_text(self, monkeypatch):
        llm = _stub_llm(monkeypatch, SimpleNamespace(content='{"files": {}}'))

        text = await call_text_generation("system", "user", max_retries=0)

        assert text == '{"files": {}}'
        assert llm.ainvoke.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, monkeypatch):
        llm = _stub_llm(monkeypatch, RuntimeError("503"), SimpleNamespace(content="ok"))

        assert await call_text_generation("system", "user", max_retries=1) == "ok"
        assert llm.ainvoke.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_response_is_an_error(self, monkeypatch):
        _stub_llm(monkeypatch, SimpleNamespace(content=""))

        with pytest.raises(LLMGenerationError):
            await call_text_generation("system", "user", max_retries=0)


class TestCredentials:
    def test_has_credentials(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY_GEMINI", "key")
        assert has_llm_credentials()

        monkeypatch.delenv("GOOGLE_API_KEY_GEMINI")
        assert not has_llm_credentials()
