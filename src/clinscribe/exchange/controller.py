"""Exchange controller.

Drives one request/response cycle against the generation service:

    IDLE -> SENDING -> AWAITING_RESPONSE -> COMPLETED | FAILED -> IDLE

The user message is recorded before the call is made and stays recorded
when the call fails. A single failed call is reported once; there is no
retry.
"""

from collections.abc import Callable
from enum import Enum

from loguru import logger

from ..config import REGENERATE_TRUNCATE_COUNT
from ..conversations.models import Conversation, Message
from ..conversations.store import ConversationStore
from ..errors import GenerationError, MessageTooLongError, MissingCredentialError
from ..llm.base import LLMProvider
from ..llm.catalog import FALLBACK_MODEL
from ..llm.models import ModelDescriptor
from .cancellation import CancellationToken
from .request import Credentials, build_request_messages
from .sanitize import sanitize_response


class ExchangeState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"
    FAILED = "failed"


class ExchangeController:
    """Sends messages for the selected conversation and records the replies.

    Callers serialize sends; ``loading`` is True while a request is in flight.
    """

    def __init__(
        self,
        store: ConversationStore,
        llm: LLMProvider,
        credentials: Credentials,
        sign_off: str = "",
        cancellation: CancellationToken | None = None,
        on_state_change: Callable[[ExchangeState], None] | None = None,
    ):
        self._store = store
        self._llm = llm
        self._credentials = credentials
        self._sign_off = sign_off
        self._cancellation = cancellation
        self._on_state_change = on_state_change
        self._state = ExchangeState.IDLE
        self._loading = False
        self._has_output = False

    @property
    def state(self) -> ExchangeState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def has_output(self) -> bool:
        """True once any exchange has produced an assistant message."""
        return self._has_output

    @property
    def cancellation(self) -> CancellationToken | None:
        return self._cancellation

    def _transition(self, state: ExchangeState) -> None:
        self._state = state
        logger.debug(f"Exchange state -> {state.value}")
        if self._on_state_change is not None:
            self._on_state_change(state)

    def _target_model(self) -> ModelDescriptor:
        """Model the next message will be sent to."""
        selected = self._store.selected
        if selected is not None:
            return selected.model
        conversations = self._store.conversations
        if conversations:
            return conversations[-1].model
        return self._store.defaults.model or FALLBACK_MODEL

    async def send(
        self,
        message: Message | str,
        truncate_count: int = 0,
        plugin: str | None = None,
    ) -> Conversation:
        """Record ``message`` on the selected conversation and fetch a reply.

        A conversation is created first when none is selected.

        Args:
            message: User message, or raw text to be trimmed into one
            truncate_count: Trailing messages dropped before appending
            plugin: Requested plugin; accepted and logged only

        Returns:
            The conversation after the exchange. When the cancellation token
            is set as the reply arrives, the reply is discarded and the
            conversation holds only the new user message.

        Raises:
            MissingCredentialError: No API key is available (nothing changed)
            MessageTooLongError: Message exceeds the model's input limit
                (nothing changed)
            GenerationError: The service call failed; the user message stays
        """
        if isinstance(message, str):
            message = Message.user(message)

        if not self._credentials.available:
            raise MissingCredentialError(self._llm.provider_name)
        model = self._target_model()
        if len(message.content) > model.max_length:
            raise MessageTooLongError(len(message.content), model.max_length)
        if plugin is not None:
            logger.info(f"Plugin {plugin!r} requested; sending a plain completion request")

        self._transition(ExchangeState.SENDING)
        conversation = await self._store.append_message(
            self._store.selected, message, truncate_count=truncate_count
        )
        request = build_request_messages(conversation, self._sign_off)
        self._loading = True

        self._transition(ExchangeState.AWAITING_RESPONSE)
        logger.info(
            f"Requesting completion: conversation={conversation.id} "
            f"model={conversation.model.id} messages={len(request)}"
        )
        try:
            response = await self._llm.chat_completion(
                request,
                model=conversation.model.id,
                temperature=conversation.temperature,
            )
        except Exception as e:
            self._loading = False
            logger.error(f"Completion failed for conversation {conversation.id}: {e}")
            self._transition(ExchangeState.FAILED)
            self._transition(ExchangeState.IDLE)
            raise GenerationError(str(e), conversation_id=conversation.id) from e
        finally:
            self._loading = False

        if self._cancellation is not None and self._cancellation.cancelled:
            logger.info(f"Discarding cancelled response for conversation {conversation.id}")
            self._transition(ExchangeState.IDLE)
            return self._store.get(conversation.id) or conversation

        current = self._store.get(conversation.id) or conversation
        conversation = await self._store.append_message(
            current, Message.assistant(sanitize_response(response.content))
        )
        self._has_output = True
        self._transition(ExchangeState.COMPLETED)
        self._transition(ExchangeState.IDLE)
        return conversation

    async def regenerate(self) -> Conversation | None:
        """Re-send the last user message, replacing the previous exchange.

        Returns the selected conversation unchanged (or None) when there is
        no user message to re-send.
        """
        conversation = self._store.selected
        last_user = conversation.last_user_message() if conversation else None
        if last_user is None:
            logger.debug("Nothing to regenerate")
            return conversation
        return await self.send(last_user, truncate_count=REGENERATE_TRUNCATE_COUNT)
