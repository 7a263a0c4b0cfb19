"""Abstract base class for key-value persistence backends.

This module defines the get/set interface the conversation store persists
through. The abstraction hides:
- Storage format (JSON strings, SQLite rows, etc.)
- Persistence mechanism (file, database, in-memory)
- Connection management

Values are opaque strings; encoding is the repository's concern.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract key-value persistence backend."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with ``prefix``."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()
