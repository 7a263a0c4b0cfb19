"""Provider factory functions for CLI.

Centralizes creation of settings, persistence, the conversation store and
the LLM provider. Hides configuration details from command implementations.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..config import Settings, load_settings
from ..conversations import ConversationDefaults, ConversationStore
from ..errors import MissingCredentialError
from ..exchange import Credentials
from ..llm import LLMProvider, create_llm_provider, describe_model
from ..persistence import ConversationRepository, KeyValueStore, create_key_value_store


def get_settings() -> Settings:
    """Settings from the environment (``.env`` is loaded by the app module)."""
    return load_settings()


def get_backend(settings: Settings) -> KeyValueStore:
    """Create the key-value backend named by ``CLINSCRIBE_STORE``."""
    if settings.store_backend == "sqlite":
        return create_key_value_store("sqlite", path=str(settings.store_path))
    return create_key_value_store(settings.store_backend)


def get_defaults(settings: Settings) -> ConversationDefaults:
    model = describe_model(settings.default_model_id) if settings.default_model_id else None
    return ConversationDefaults(model=model, temperature=settings.temperature)


@asynccontextmanager
async def open_store(settings: Settings) -> AsyncIterator[ConversationStore]:
    """Connect persistence, load the store, and disconnect on exit."""
    backend = get_backend(settings)
    await backend.connect()
    try:
        store = ConversationStore(ConversationRepository(backend), get_defaults(settings))
        await store.load()
        yield store
    finally:
        await backend.disconnect()


async def get_credentials(settings: Settings, store: ConversationStore) -> Credentials:
    """Host key from the environment plus the persisted user key."""
    user_key = await store.repository.get_api_key()
    return Credentials(host_key=settings.host_api_key, user_key=user_key)


def require_llm(settings: Settings, credentials: Credentials) -> LLMProvider:
    """Create the configured LLM provider.

    Raises:
        MissingCredentialError: If no API key resolves
        ValueError: If ``LLM_PROVIDER`` names an unsupported provider
    """
    api_key = credentials.resolve()
    if api_key is None:
        raise MissingCredentialError(settings.provider)
    return create_llm_provider(settings.provider, api_key=api_key)
