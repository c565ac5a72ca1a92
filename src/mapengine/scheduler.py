"""Scheduler: keyed, cancellable delayed callbacks on the event loop.

Each pending action is tied to a key naming what it affects ("viewport.fit",
"highlight", "search.feedback"). Scheduling a key again cancels the previous
handle, so a newer action always supersedes a stale one.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from loguru import logger


class Scheduler:
    """Registry of pending delayed actions."""

    def __init__(self) -> None:
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def schedule(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        """Run *callback* after *delay* seconds, replacing any pending *key*.

        Must be called from a running event loop.
        """
        self.cancel(key)
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._handles.pop(key, None)
            try:
                callback()
            except Exception as e:
                logger.warning(f"Scheduled action '{key}' failed: {e}")

        self._handles[key] = loop.call_later(max(delay, 0.0), _fire)

    def cancel(self, key: str) -> bool:
        """Cancel a pending action. Returns True if one was pending."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def pending(self, key: str) -> bool:
        return key in self._handles

    def cancel_all(self) -> None:
        for key in list(self._handles):
            self.cancel(key)
