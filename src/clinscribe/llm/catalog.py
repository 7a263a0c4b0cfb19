"""Known generation models.

Limits follow the service documentation at the time of writing. A model id
missing from the catalog can still be used through ``describe_model``, which
falls back to conservative limits.
"""

from .models import ModelDescriptor

MODELS: dict[str, ModelDescriptor] = {
    m.id: m
    for m in (
        ModelDescriptor(id="gpt-3.5-turbo", name="GPT-3.5", max_length=12000, token_limit=4000),
        ModelDescriptor(id="gpt-4", name="GPT-4", max_length=24000, token_limit=8000),
        ModelDescriptor(id="gpt-4-32k", name="GPT-4-32K", max_length=96000, token_limit=32000),
        ModelDescriptor(id="gpt-4o", name="GPT-4o", max_length=384000, token_limit=128000),
        ModelDescriptor(id="gpt-4o-mini", name="GPT-4o mini", max_length=384000, token_limit=128000),
        ModelDescriptor(id="deepseek-chat", name="DeepSeek Chat", max_length=192000, token_limit=64000),
        ModelDescriptor(
            id="claude-sonnet-4-20250514", name="Claude Sonnet 4", max_length=600000, token_limit=200000
        ),
    )
}

FALLBACK_MODEL = MODELS["gpt-3.5-turbo"]

PROVIDER_MODELS: dict[str, tuple[str, ...]] = {
    "openai": ("gpt-3.5-turbo", "gpt-4", "gpt-4-32k", "gpt-4o", "gpt-4o-mini"),
    "deepseek": ("deepseek-chat",),
    "anthropic": ("claude-sonnet-4-20250514",),
}


def describe_model(model_id: str) -> ModelDescriptor:
    """Return the catalog entry for ``model_id`` or a descriptor with fallback limits."""
    known = MODELS.get(model_id)
    if known is not None:
        return known
    return ModelDescriptor(
        id=model_id,
        name=model_id,
        max_length=FALLBACK_MODEL.max_length,
        token_limit=FALLBACK_MODEL.token_limit,
    )


def models_for_provider(provider: str) -> list[ModelDescriptor]:
    """List catalog models served by ``provider`` (empty for unknown providers)."""
    return [MODELS[model_id] for model_id in PROVIDER_MODELS.get(provider.lower(), ())]
