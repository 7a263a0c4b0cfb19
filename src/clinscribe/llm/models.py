from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ModelDescriptor(BaseModel):
    """A generation model a conversation can be assigned to."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Identifier sent to the generation service")
    name: str = Field(description="Display name")
    max_length: int = Field(gt=0, description="Maximum input length in characters")
    token_limit: int = Field(gt=0, description="Context window in tokens")


class ChatMessage(BaseModel):
    """One message of an outbound generation request."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(
        description="Role of the message sender: 'user', 'assistant', or 'system'"
    )
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
