"""Exception hierarchy for clinscribe.

Only the exchange step raises. Section parsing degrades to empty fields and
store operations always leave a consistent state, so neither has an error
type of its own.
"""


class ScribeError(Exception):
    """Base class for clinscribe errors."""


class MissingCredentialError(ScribeError):
    """No API key is available; the send was rejected before any mutation."""

    def __init__(self, provider: str | None = None):
        msg = "No API key found. Cannot send message."
        if provider:
            msg += f" (provider: {provider})"
        super().__init__(msg)
        self.provider = provider


class MessageTooLongError(ScribeError):
    """Message exceeds the selected model's input limit."""

    def __init__(self, length: int, max_length: int):
        super().__init__(
            f"Message limit is {max_length} characters. "
            f"You have entered {length} characters."
        )
        self.length = length
        self.max_length = max_length


class GenerationError(ScribeError):
    """The generation service call failed.

    The user message that triggered the call stays recorded on the
    conversation; no assistant message was appended.
    """

    def __init__(self, message: str, conversation_id: str | None = None):
        super().__init__(f"Generation failed: {message}")
        self.conversation_id = conversation_id
