"""Configuration for clinscribe.

Centralizes defaults and reads runtime settings from the environment.
The CLI loads ``.env`` with python-dotenv before calling ``load_settings``.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

from .llm.catalog import PROVIDER_MODELS

# Conversation defaults
DEFAULT_CONVERSATION_NAME = "New Conversation"
IMPLICIT_CONVERSATION_NAME = "New Clinical Note"  # created by sending with nothing selected
DEFAULT_SYSTEM_PROMPT = ""
DEFAULT_TEMPERATURE = 1.0
DEFAULT_MODEL_ID = "gpt-3.5-turbo"

# Sign-off used in the instruction template when none is configured
DEFAULT_SIGN_OFF_PLACEHOLDER = "[Provider sign-off here]"

# Messages removed before re-sending on regenerate (previous user + assistant)
REGENERATE_TRUNCATE_COUNT = 2

# Persistence
DEFAULT_STORE_BACKEND = "sqlite"
DEFAULT_STORE_PATH = Path.home() / ".clinscribe" / "store.db"

# Provider name -> environment variable holding the host-provisioned key
API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class Settings(BaseModel):
    """Runtime settings resolved from the environment."""

    provider: str = Field(default="openai", description="Generation provider name")
    host_api_key: str | None = Field(
        default=None,
        description="Key provisioned by the host environment for the provider"
    )
    default_model_id: str | None = Field(
        default=DEFAULT_MODEL_ID,
        description="Model for fresh conversations; None disables auto-created conversations"
    )
    sign_off: str = Field(default="", description="Provider sign-off appended to documents")
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    store_backend: str = Field(default=DEFAULT_STORE_BACKEND)
    store_path: Path = Field(default=DEFAULT_STORE_PATH)
    log_level: str = Field(default="warning")


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build ``Settings`` from environment variables.

    Environment variables:
        LLM_PROVIDER: openai, deepseek or anthropic (default: openai)
        OPENAI_API_KEY / DEEPSEEK_API_KEY / ANTHROPIC_API_KEY: host key
        CLINSCRIBE_DEFAULT_MODEL: default model id, empty to disable
            (default: first catalog model of the provider)
        CLINSCRIBE_SIGN_OFF: provider sign-off
        CLINSCRIBE_TEMPERATURE: default temperature (default: 1.0)
        CLINSCRIBE_STORE: memory or sqlite (default: sqlite)
        CLINSCRIBE_STORE_PATH: SQLite file (default: ~/.clinscribe/store.db)
        CLINSCRIBE_LOG_LEVEL: debug, info, warning or error

    Args:
        environ: Mapping to read instead of ``os.environ``
    """
    env = os.environ if environ is None else environ
    provider = env.get("LLM_PROVIDER", "openai").lower()
    key_var = API_KEY_ENV_VARS.get(provider)

    provider_models = PROVIDER_MODELS.get(provider, ())
    fallback_model = provider_models[0] if provider_models else DEFAULT_MODEL_ID
    default_model = env.get("CLINSCRIBE_DEFAULT_MODEL", fallback_model).strip()

    return Settings(
        provider=provider,
        host_api_key=(env.get(key_var) or None) if key_var else None,
        default_model_id=default_model or None,
        sign_off=env.get("CLINSCRIBE_SIGN_OFF", ""),
        temperature=float(env.get("CLINSCRIBE_TEMPERATURE", DEFAULT_TEMPERATURE)),
        store_backend=env.get("CLINSCRIBE_STORE", DEFAULT_STORE_BACKEND).lower(),
        store_path=Path(env.get("CLINSCRIBE_STORE_PATH", str(DEFAULT_STORE_PATH))).expanduser(),
        log_level=env.get("CLINSCRIBE_LOG_LEVEL", "warning"),
    )
