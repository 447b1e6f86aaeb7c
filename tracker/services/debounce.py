"""Coalescing of rapid text edits into a single delayed write per entity."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable

from tracker.config import settings

logger = logging.getLogger(__name__)


class Debouncer:
    """Pending writes keyed by entity, each behind a cancellable timer.

    ``schedule`` replaces any write already pending for the same key, so only
    the latest edit is ever applied. ``cancel`` drops a pending write without
    applying it; ``flush`` applies everything pending right away.
    """

    def __init__(self, delay: float | None = None) -> None:
        self.delay = settings.debounce_seconds if delay is None else delay
        self._pending: dict[Hashable, tuple[asyncio.TimerHandle, Callable[[], None]]] = {}

    def schedule(self, key: Hashable, write: Callable[[], None]) -> None:
        """Run ``write`` after the quiet period unless another edit for ``key`` arrives first.

        Must be called from inside a running event loop.
        """
        loop = asyncio.get_running_loop()
        previous = self._pending.pop(key, None)
        if previous is not None:
            previous[0].cancel()
            logger.debug("Superseded pending write for %s", key)
        handle = loop.call_later(self.delay, self._fire, key)
        self._pending[key] = (handle, write)

    def _fire(self, key: Hashable) -> None:
        entry = self._pending.pop(key, None)
        if entry is None:
            return
        _, write = entry
        write()

    def cancel(self, key: Hashable) -> bool:
        entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[0].cancel()
        logger.debug("Dropped pending write for %s", key)
        return True

    def cancel_all(self) -> int:
        keys = list(self._pending)
        for key in keys:
            self.cancel(key)
        return len(keys)

    def flush(self, key: Hashable | None = None) -> int:
        """Apply pending writes now: the one for ``key``, or all of them. Returns how many ran."""
        keys = list(self._pending) if key is None else [key]
        applied = 0
        for k in keys:
            entry = self._pending.pop(k, None)
            if entry is None:
                continue
            handle, write = entry
            handle.cancel()
            write()
            applied += 1
        return applied

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
