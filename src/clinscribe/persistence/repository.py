"""Conversation persistence on top of a key-value backend.

Key layout:
    conversation:<id>      one conversation (JSON object)
    conversationHistory    the full ordered collection (JSON array)
    selectedConversation   id of the selected conversation
    folders                folder list (JSON array)
    apiKey                 user-supplied credential

The single-item and collection writes are independent; callers treat them
as best-effort and idempotent (last write wins).
"""

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from ..conversations.models import Conversation, Folder
from .base import KeyValueStore

_conversation_list = TypeAdapter(list[Conversation])
_folder_list = TypeAdapter(list[Folder])


class ConversationRepository:
    """Reads and writes conversations, folders, selection and the user key."""

    ITEM_PREFIX = "conversation:"
    COLLECTION_KEY = "conversationHistory"
    SELECTED_KEY = "selectedConversation"
    FOLDERS_KEY = "folders"
    API_KEY_KEY = "apiKey"

    def __init__(self, backend: KeyValueStore):
        self._backend = backend

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    def _item_key(self, conversation_id: str) -> str:
        return f"{self.ITEM_PREFIX}{conversation_id}"

    async def save_item(self, conversation: Conversation) -> None:
        await self._backend.set(self._item_key(conversation.id), conversation.model_dump_json())

    async def load_item(self, conversation_id: str) -> Conversation | None:
        raw = await self._backend.get(self._item_key(conversation_id))
        if raw is None:
            return None
        try:
            return Conversation.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable conversation record {conversation_id}: {e}")
            return None

    async def remove_item(self, conversation_id: str) -> None:
        await self._backend.delete(self._item_key(conversation_id))

    async def save_collection(self, conversations: list[Conversation]) -> None:
        await self._backend.set(
            self.COLLECTION_KEY, _conversation_list.dump_json(conversations).decode("utf-8")
        )

    async def load_collection(self) -> list[Conversation]:
        raw = await self._backend.get(self.COLLECTION_KEY)
        if not raw:
            return []
        try:
            return _conversation_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable conversation history: {e}")
            return []

    async def save_selected(self, conversation_id: str | None) -> None:
        if conversation_id is None:
            await self._backend.delete(self.SELECTED_KEY)
        else:
            await self._backend.set(self.SELECTED_KEY, conversation_id)

    async def load_selected(self) -> str | None:
        return await self._backend.get(self.SELECTED_KEY)

    async def save_folders(self, folders: list[Folder]) -> None:
        await self._backend.set(self.FOLDERS_KEY, _folder_list.dump_json(folders).decode("utf-8"))

    async def load_folders(self) -> list[Folder]:
        raw = await self._backend.get(self.FOLDERS_KEY)
        if not raw:
            return []
        try:
            return _folder_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable folder list: {e}")
            return []

    async def clear_collection(self) -> None:
        """Remove every conversation record, the collection and the selection."""
        for key in await self._backend.keys(self.ITEM_PREFIX):
            await self._backend.delete(key)
        await self._backend.delete(self.COLLECTION_KEY)
        await self._backend.delete(self.SELECTED_KEY)

    async def get_api_key(self) -> str | None:
        return await self._backend.get(self.API_KEY_KEY)

    async def set_api_key(self, api_key: str | None) -> None:
        if api_key:
            await self._backend.set(self.API_KEY_KEY, api_key)
        else:
            await self._backend.delete(self.API_KEY_KEY)
