"""Per-line mutual exclusion for structural section changes."""

import asyncio
import threading
import weakref
from collections.abc import AsyncGenerator, Hashable
from contextlib import asynccontextmanager


class LineLockRegistry:
    """
    Hands out one asyncio.Lock per line id.

    Locks are held in a WeakValueDictionary, so a line's lock disappears once
    no coroutine holds or waits on it. Mutations of different lines never
    contend. This serialises coroutines inside one worker process; across
    workers the line row lock (SELECT ... FOR UPDATE) takes over.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[Hashable, asyncio.Lock] = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def get(self, line_id: Hashable) -> asyncio.Lock:
        with self._guard:
            lock = self._locks.get(line_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[line_id] = lock
            return lock

    @asynccontextmanager
    async def hold(self, line_id: Hashable) -> AsyncGenerator[None]:
        """Hold the lock for ``line_id`` for the duration of the block."""
        lock = self.get(line_id)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


line_locks = LineLockRegistry()
