"""
Per-pair serialization for friend relationship writes.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator
from weakref import WeakValueDictionary

from socialnet.models.friend import pair_key


class PairLockRegistry:
    """Hands out one asyncio.Lock per unordered user pair.

    Locks are only kept alive while someone holds or waits on them, so the
    registry does not grow with the number of pairs ever touched.
    """

    def __init__(self):
        self._locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, user_a: str, user_b: str) -> AsyncIterator[None]:
        lock = self._lock_for(pair_key(user_a, user_b))
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


pair_locks = PairLockRegistry()
