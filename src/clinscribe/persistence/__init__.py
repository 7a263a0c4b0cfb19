"""Persistence boundary for clinscribe.

A get/set key-value backend plus the conversation repository layered on it.
"""

from .base import KeyValueStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore
from .repository import ConversationRepository

__all__ = [
    "ConversationRepository",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "create_key_value_store",
]
