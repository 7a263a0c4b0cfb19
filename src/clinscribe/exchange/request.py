"""Request assembly for the generation service."""

from dataclasses import dataclass

from ..config import DEFAULT_SIGN_OFF_PLACEHOLDER
from ..conversations.models import Conversation, Message
from ..llm.models import ChatMessage
from ..prompts import OFFICE_VISIT, SCRIBE_SYSTEM, render_prompt


@dataclass(frozen=True)
class Credentials:
    """API keys available to the client.

    Attributes:
        host_key: Key provisioned by the host environment
        user_key: Key the clinician entered (persisted as ``apiKey``)
    """

    host_key: str | None = None
    user_key: str | None = None

    def resolve(self) -> str | None:
        """The host key when present, otherwise the user key."""
        return self.host_key or self.user_key or None

    @property
    def available(self) -> bool:
        return self.resolve() is not None


def build_system_prompt(conversation: Conversation, sign_off: str = "") -> str:
    """Render the scribe instruction for ``conversation``.

    The conversation's prompt field is embedded as the transcript; an empty
    sign-off falls back to a visible placeholder.
    """
    return render_prompt(
        SCRIBE_SYSTEM,
        sign_off=sign_off.strip() or DEFAULT_SIGN_OFF_PLACEHOLDER,
        transcript=conversation.prompt,
    )


def build_request_messages(conversation: Conversation, sign_off: str = "") -> list[ChatMessage]:
    """System instruction followed by the full message history."""
    system = ChatMessage(role="system", content=build_system_prompt(conversation, sign_off))
    return [system, *(m.to_chat_message() for m in conversation.messages)]


def office_visit_message(transcription: str) -> Message:
    """Wrap a speech-to-text transcription as the user message for a visit note."""
    return Message.user(render_prompt(OFFICE_VISIT, transcription=transcription.strip()))
