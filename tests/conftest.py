"""Pytest configuration and shared fixtures."""
from typing import Any

import pytest

from clinscribe.conversations import ConversationDefaults, ConversationStore
from clinscribe.exchange import Credentials
from clinscribe.llm import FALLBACK_MODEL, ChatMessage, LLMProvider, LLMResponse
from clinscribe.persistence import ConversationRepository, InMemoryKeyValueStore

SAMPLE_NOTE = (
    "Potential Transcription Errors:\nNo errors found.\n\n"
    "Helpful Content:\nConsider troponin.\n\n"
    "Clinical Document:\nHPI: chest pain x2h\n"
)


class FakeLLMProvider(LLMProvider):
    """Records requests and replays scripted replies or errors."""

    def __init__(self, replies: list[str | Exception] | None = None):
        self.replies = list(replies or [SAMPLE_NOTE])
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return FALLBACK_MODEL.id

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 1.0,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.requests.append({"messages": messages, "model": model, "temperature": temperature})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=model or self.model, usage={})

    async def close(self) -> None:
        self.closed = True


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Backend whose writes always fail."""

    async def set(self, key: str, value: str) -> None:
        raise OSError("disk full")

    async def delete(self, key: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def backend():
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(backend):
    return ConversationRepository(backend)


@pytest.fixture
def store(repository):
    """Store with a default model, so fresh conversations are created."""
    return ConversationStore(repository, ConversationDefaults(model=FALLBACK_MODEL))


@pytest.fixture
def bare_store(repository):
    """Store without a default model."""
    return ConversationStore(repository, ConversationDefaults())


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
def credentials():
    return Credentials(host_key="sk-test")


@pytest.fixture
def failing_store():
    """Store whose persistence writes always fail."""
    return ConversationStore(
        ConversationRepository(FailingKeyValueStore()),
        ConversationDefaults(model=FALLBACK_MODEL),
    )


@pytest.fixture
def make_llm():
    """Factory for fake providers with scripted replies."""
    return FakeLLMProvider
