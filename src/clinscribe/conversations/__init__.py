"""Conversation data model and store."""

from .models import Conversation, Folder, FolderType, Message, Role
from .store import ConversationDefaults, ConversationStore
from .transfer import ExportData, export_data, import_data

__all__ = [
    "Conversation",
    "ConversationDefaults",
    "ConversationStore",
    "ExportData",
    "Folder",
    "FolderType",
    "Message",
    "Role",
    "export_data",
    "import_data",
]
