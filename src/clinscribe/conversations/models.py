"""Data models for conversations.

Conversations and messages are frozen; every change produces a new object
through ``model_copy`` so a stale reference can never observe a mutation.
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_CONVERSATION_NAME, DEFAULT_SYSTEM_PROMPT, DEFAULT_TEMPERATURE
from ..llm.models import ChatMessage, ModelDescriptor


class Role(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> "Message":
        """Build a user message from raw input, trimmed of surrounding whitespace."""
        return cls(role=Role.USER, content=content.strip())

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    def to_chat_message(self) -> ChatMessage:
        """Convert to the generation request format."""
        return ChatMessage(role=self.role.value, content=self.content)


class FolderType(str, Enum):
    CHAT = "chat"
    PROMPT = "prompt"


class Folder(BaseModel):
    """A named group of conversations."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    type: FolderType = FolderType.CHAT


class Conversation(BaseModel):
    """One clinical note session.

    ``prompt`` carries the selected template or pasted transcript and is
    injected into the instruction sent with every request.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = DEFAULT_CONVERSATION_NAME
    messages: tuple[Message, ...] = ()
    model: ModelDescriptor
    prompt: str = DEFAULT_SYSTEM_PROMPT
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    folder_id: str | None = None

    def with_messages(self, messages: list[Message] | tuple[Message, ...]) -> "Conversation":
        """Copy with the message history replaced."""
        return self.model_copy(update={"messages": tuple(messages)})

    def last_message(self, role: Role) -> tuple[int, Message] | None:
        """Index and message of the most recent message with ``role``."""
        for index in range(len(self.messages) - 1, -1, -1):
            if self.messages[index].role == role:
                return index, self.messages[index]
        return None

    def last_assistant_message(self) -> Message | None:
        found = self.last_message(Role.ASSISTANT)
        return found[1] if found else None

    def last_user_message(self) -> Message | None:
        found = self.last_message(Role.USER)
        return found[1] if found else None

    def transcript(self) -> str:
        """User messages joined by newlines, as shown above the generated note."""
        return "\n".join(m.content for m in self.messages if m.role == Role.USER)

    def matches(self, term: str) -> bool:
        """Case-insensitive match of ``term`` against the name and all message contents."""
        haystack = " ".join([self.name, *(m.content for m in self.messages)])
        return term.lower() in haystack.lower()
