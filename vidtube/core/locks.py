"""
In-process keyed locks

Serializes coroutines working on the same key (e.g. one actor toggling one
like) while unrelated keys proceed concurrently. Entries are reference
counted and removed once nobody holds or waits on them.

toggle_locks guards engagement toggles, row_locks guards read-modify-write
of a single row's JSON list (playlist videos, watch history).
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Hashable, Tuple


class KeyedLock:
    """Registry of asyncio locks keyed by an arbitrary hashable"""

    def __init__(self):
        # key -> (lock, number of holders + waiters)
        self._locks: Dict[Hashable, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable):
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        return len(self._locks)


toggle_locks = KeyedLock()
row_locks = KeyedLock()
