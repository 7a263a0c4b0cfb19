"""Export and import of conversation history.

The export format is a versioned JSON document holding the conversation
history and folders. Importing merges by id into an existing store.
"""

from datetime import datetime, timezone
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from .models import Conversation, Folder
from .store import ConversationStore

EXPORT_VERSION = 1


class ExportData(BaseModel):
    """Serialized form of a store's conversations and folders."""

    version: int = EXPORT_VERSION
    history: list[Conversation] = Field(default_factory=list)
    folders: list[Folder] = Field(default_factory=list)
    exported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def export_data(store: ConversationStore) -> dict[str, Any]:
    """JSON-ready export of every conversation and folder in ``store``."""
    data = ExportData(history=store.conversations, folders=store.folders)
    return data.model_dump(mode="json")


async def import_data(store: ConversationStore, data: dict[str, Any] | ExportData) -> int:
    """Merge exported data into ``store``.

    Args:
        store: Target store
        data: Output of ``export_data`` (dict or parsed model)

    Returns:
        Number of conversations imported

    Raises:
        ValueError: If the data does not match the export format or comes
            from a newer format version
    """
    parsed = data if isinstance(data, ExportData) else ExportData.model_validate(data)
    if parsed.version > EXPORT_VERSION:
        raise ValueError(
            f"Unsupported export version {parsed.version} (expected <= {EXPORT_VERSION})"
        )

    count = await store.import_conversations(parsed.history, parsed.folders)
    logger.info(f"Imported {count} conversations and {len(parsed.folders)} folders")
    return count
