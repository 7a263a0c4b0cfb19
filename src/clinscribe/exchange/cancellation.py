"""Caller-owned cancellation signal for an in-flight exchange."""

import asyncio

from loguru import logger


class CancellationToken:
    """Flag checked when a generation response arrives.

    A cancelled token makes the controller discard the response. The flag
    stays set until ``reset`` is called, or until ``auto_reset_after``
    seconds pass when that option is given. The timer needs a running
    event loop; a token cancelled outside one stays set until ``reset``.
    """

    def __init__(self, auto_reset_after: float | None = None):
        self._cancelled = False
        self._auto_reset_after = auto_reset_after
        self._reset_handle: asyncio.TimerHandle | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        logger.debug("Cancellation requested")
        if self._auto_reset_after is None:
            return
        if self._reset_handle is not None:
            self._reset_handle.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._reset_handle = None
            logger.debug("No running event loop, auto reset skipped")
            return
        self._reset_handle = loop.call_later(self._auto_reset_after, self.reset)

    def reset(self) -> None:
        self._cancelled = False
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
