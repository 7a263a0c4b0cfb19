from .base import LLMProvider
from .catalog import FALLBACK_MODEL, MODELS, describe_model, models_for_provider
from .factory import SUPPORTED_PROVIDERS, create_llm_provider
from .models import ChatMessage, LLMResponse, ModelDescriptor
from .providers import AnthropicProvider, DeepSeekProvider, OpenAIProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "SUPPORTED_PROVIDERS",
    "ChatMessage",
    "LLMResponse",
    "ModelDescriptor",
    "FALLBACK_MODEL",
    "MODELS",
    "describe_model",
    "models_for_provider",
    "AnthropicProvider",
    "DeepSeekProvider",
    "OpenAIProvider",
]
