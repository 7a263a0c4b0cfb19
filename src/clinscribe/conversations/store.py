"""Conversation store.

Single source of truth for the ordered conversation collection and the
selected pointer. The collection is a dict keyed by id (insertion order is
collection order) and the selection is held as an id, so ``selected`` is
always the very object stored in the collection.

Every mutating operation writes the changed conversation and the full
collection through the repository before returning. Write failures are
logged and never raised: in-memory state stays authoritative.
"""

from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..config import (
    DEFAULT_CONVERSATION_NAME,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    IMPLICIT_CONVERSATION_NAME,
)
from ..llm.catalog import FALLBACK_MODEL
from ..llm.models import ModelDescriptor
from .models import Conversation, Folder, FolderType, Message, Role

if TYPE_CHECKING:
    from ..persistence.repository import ConversationRepository


@dataclass(frozen=True)
class ConversationDefaults:
    """Field values for conversations the store creates.

    Attributes:
        model: Default model. When None, deleting the last conversation or
            clearing the store leaves nothing selected instead of creating a
            fresh conversation.
        name: Name for explicitly created conversations
        implicit_name: Name for conversations created by sending a message
            with nothing selected
        prompt: Initial prompt field
        temperature: Temperature when there is no previous conversation
    """

    model: ModelDescriptor | None = None
    name: str = DEFAULT_CONVERSATION_NAME
    implicit_name: str = IMPLICIT_CONVERSATION_NAME
    prompt: str = DEFAULT_SYSTEM_PROMPT
    temperature: float = DEFAULT_TEMPERATURE


class ConversationStore:
    """Owns conversations, folders and the selected conversation."""

    UPDATABLE_FIELDS = frozenset({"name", "prompt", "model", "temperature", "folder_id"})

    def __init__(
        self,
        repository: "ConversationRepository",
        defaults: ConversationDefaults | None = None,
    ):
        self._repository = repository
        self._defaults = defaults or ConversationDefaults()
        self._conversations: dict[str, Conversation] = {}
        self._folders: dict[str, Folder] = {}
        self._selected_id: str | None = None

    @property
    def defaults(self) -> ConversationDefaults:
        return self._defaults

    @property
    def repository(self) -> "ConversationRepository":
        return self._repository

    @property
    def conversations(self) -> list[Conversation]:
        """Conversations in insertion order, most recent last."""
        return list(self._conversations.values())

    @property
    def selected(self) -> Conversation | None:
        if self._selected_id is None:
            return None
        return self._conversations.get(self._selected_id)

    @property
    def folders(self) -> list[Folder]:
        return list(self._folders.values())

    def get(self, conversation_id: str) -> Conversation | None:
        return self._conversations.get(conversation_id)

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._conversations

    def search(self, term: str) -> list[Conversation]:
        """Conversations whose name or messages contain ``term`` (all when blank)."""
        if not term:
            return self.conversations
        return [c for c in self._conversations.values() if c.matches(term)]

    # ------------------------------------------------------------------
    # persistence helpers

    async def _write(self, action: str, write: Awaitable[Any]) -> None:
        try:
            await write
        except Exception as e:
            logger.warning(f"Persistence write failed ({action}): {e}")

    async def _persist(self, conversation: Conversation | None = None) -> None:
        """Write ``conversation`` (if given), the collection and the selection."""
        if conversation is not None:
            await self._write(f"save {conversation.id}", self._repository.save_item(conversation))
        await self._write("save collection", self._repository.save_collection(self.conversations))
        await self._write("save selection", self._repository.save_selected(self._selected_id))

    async def load(self) -> None:
        """Restore conversations, folders and selection from persistence.

        Duplicate ids keep the first occurrence. The selection falls back to
        the most recent conversation when the stored id is missing.
        """
        try:
            conversations = await self._repository.load_collection()
            folders = await self._repository.load_folders()
            selected_id = await self._repository.load_selected()
        except Exception as e:
            logger.warning(f"Could not load persisted conversations: {e}")
            conversations, folders, selected_id = [], [], None

        self._conversations = {}
        for conversation in conversations:
            self._conversations.setdefault(conversation.id, conversation)
        self._folders = {folder.id: folder for folder in folders}

        if selected_id in self._conversations:
            self._selected_id = selected_id
        else:
            self._selected_id = self._last_id()
        logger.debug(f"Loaded {len(self._conversations)} conversations, selected={self._selected_id}")

    # ------------------------------------------------------------------
    # conversations

    def _last_id(self) -> str | None:
        return next(reversed(self._conversations), None)

    def _new_conversation(self, implicit: bool = False, **overrides: Any) -> Conversation:
        """Build (not store) a fresh conversation.

        Model and temperature are inherited from the most recent conversation
        when one exists.
        """
        last = self._conversations.get(self._last_id()) if self._conversations else None
        fields: dict[str, Any] = {
            "name": self._defaults.implicit_name if implicit else self._defaults.name,
            "messages": (),
            "model": (last.model if last else None) or self._defaults.model or FALLBACK_MODEL,
            "prompt": self._defaults.prompt,
            "temperature": last.temperature if last else self._defaults.temperature,
            "folder_id": None,
        }
        fields.update(overrides)
        return Conversation(**fields)

    def _resolve(self, conversation: Conversation) -> Conversation:
        """Replace the entry with the same id in place, or append at the end."""
        self._conversations[conversation.id] = conversation
        return conversation

    async def create_conversation(self, **overrides: Any) -> Conversation:
        """Create, append and select a new conversation.

        Args:
            **overrides: Conversation field values replacing the defaults

        Returns:
            The stored conversation
        """
        conversation = self._resolve(self._new_conversation(**overrides))
        self._selected_id = conversation.id
        await self._persist(conversation)
        logger.debug(f"Created conversation {conversation.id} ({conversation.name!r})")
        return conversation

    def select(self, conversation_id: str) -> Conversation | None:
        """Point the selection at an existing conversation.

        Unknown ids leave the selection unchanged and return None.
        Selection is persisted by the next mutating call or ``save_selection``.
        """
        conversation = self._conversations.get(conversation_id)
        if conversation is not None:
            self._selected_id = conversation_id
        return conversation

    async def save_selection(self) -> None:
        await self._write("save selection", self._repository.save_selected(self._selected_id))

    async def append_message(
        self,
        conversation: Conversation | None,
        message: Message,
        truncate_count: int = 0,
    ) -> Conversation:
        """Append ``message`` to ``conversation`` and make it the selection.

        Args:
            conversation: Target conversation, or None to create one first
            message: Message to append
            truncate_count: Number of trailing messages removed before
                appending (2 drops the previous user/assistant pair)

        Returns:
            The stored conversation
        """
        if conversation is None:
            conversation = self._resolve(self._new_conversation(implicit=True))
            self._selected_id = conversation.id
            await self._persist(conversation)
            logger.debug(f"Created conversation {conversation.id} for first message")

        messages = list(conversation.messages)
        if truncate_count > 0:
            messages = messages[:-truncate_count]
        messages.append(message)

        updated = self._resolve(conversation.with_messages(messages))
        self._selected_id = updated.id
        await self._persist(updated)
        return updated

    async def update_field(self, conversation: Conversation, key: str, value: Any) -> Conversation:
        """Replace one field of ``conversation``.

        If ``conversation`` is the selected one, or nothing is selected, the
        selection follows the new object.

        Raises:
            ValueError: If ``key`` is not an updatable field or ``value`` fails
                validation; nothing is changed in that case
        """
        if key not in self.UPDATABLE_FIELDS:
            raise ValueError(
                f"Cannot update field {key!r}. "
                f"Updatable fields: {', '.join(sorted(self.UPDATABLE_FIELDS))}"
            )
        # store the validated form so bad or uncoerced values never reach the collection
        validated = Conversation.model_validate({**conversation.model_dump(), key: value})

        updated = self._resolve(conversation.model_copy(update={key: getattr(validated, key)}))
        if self.selected is None:
            self._selected_id = updated.id
        await self._persist(updated)
        return updated

    async def replace_last_assistant_message(
        self, conversation: Conversation, content: str
    ) -> Conversation:
        """Replace the content of the most recent assistant message.

        Used when the clinician saves an edited document. A conversation
        without an assistant message is returned unchanged.
        """
        found = conversation.last_message(Role.ASSISTANT)
        if found is None:
            return conversation

        index, original = found
        messages = list(conversation.messages)
        messages[index] = original.model_copy(update={"content": content})
        updated = self._resolve(conversation.with_messages(messages))
        self._selected_id = updated.id
        await self._persist(updated)
        return updated

    async def delete_conversation(self, conversation_id: str) -> None:
        """Remove a conversation and its persisted record.

        Deleting the selected conversation selects the most recent remaining
        one; if none remain, a fresh conversation is created when a default
        model is configured, otherwise nothing is selected.
        """
        removed = self._conversations.pop(conversation_id, None)
        if removed is None:
            logger.debug(f"Delete ignored, unknown conversation {conversation_id}")
            return

        await self._write(f"remove {conversation_id}", self._repository.remove_item(conversation_id))

        if self._selected_id != conversation_id:
            await self._persist()
            return

        if self._conversations:
            self._selected_id = self._last_id()
            await self._persist(self.selected)
        elif self._defaults.model is not None:
            fresh = self._resolve(self._new_conversation())
            self._selected_id = fresh.id
            await self._persist(fresh)
        else:
            self._selected_id = None
            await self._persist()

    async def clear_all(self) -> None:
        """Delete every conversation and chat folder.

        A fresh conversation is created afterwards when a default model is
        configured.
        """
        self._conversations = {}
        self._selected_id = None
        self._folders = {k: f for k, f in self._folders.items() if f.type != FolderType.CHAT}

        await self._write("clear collection", self._repository.clear_collection())
        await self._write("save folders", self._repository.save_folders(self.folders))

        if self._defaults.model is not None:
            await self.create_conversation()

    async def import_conversations(
        self,
        conversations: Iterable[Conversation],
        folders: Iterable[Folder] = (),
    ) -> int:
        """Merge conversations and folders by id.

        Existing entries are replaced in place, new ones appended. The
        selection moves to the most recent conversation only when nothing
        is selected.

        Returns:
            Number of conversations merged
        """
        count = 0
        for conversation in conversations:
            self._resolve(conversation)
            await self._write(f"save {conversation.id}", self._repository.save_item(conversation))
            count += 1
        for folder in folders:
            self._folders[folder.id] = folder

        if self.selected is None:
            self._selected_id = self._last_id()
        await self._write("save folders", self._repository.save_folders(self.folders))
        await self._persist()
        return count

    # ------------------------------------------------------------------
    # folders

    async def create_folder(self, name: str, type: FolderType = FolderType.CHAT) -> Folder:
        folder = Folder(name=name, type=type)
        self._folders[folder.id] = folder
        await self._write("save folders", self._repository.save_folders(self.folders))
        return folder

    async def rename_folder(self, folder_id: str, name: str) -> Folder | None:
        folder = self._folders.get(folder_id)
        if folder is None:
            return None
        renamed = folder.model_copy(update={"name": name})
        self._folders[folder_id] = renamed
        await self._write("save folders", self._repository.save_folders(self.folders))
        return renamed

    async def delete_folder(self, folder_id: str) -> None:
        """Remove a folder; its conversations move back to the top level."""
        if self._folders.pop(folder_id, None) is None:
            return
        for conversation in self.conversations:
            if conversation.folder_id == folder_id:
                moved = self._resolve(conversation.model_copy(update={"folder_id": None}))
                await self._write(f"save {moved.id}", self._repository.save_item(moved))
        await self._write("save folders", self._repository.save_folders(self.folders))
        await self._persist()
