# src/time_tracker/tasks/lock_registry.py

from __future__ import annotations

import logging
import threading
import zlib

logger = logging.getLogger(__name__)

DEFAULT_LOCK_SLOTS = 16


class LockRegistry:
    """
    Fixed pool of mutexes keyed by task id.

    A task id always maps to the same slot (CRC-32 of the id modulo size), so
    operations on one task are serialized while other tasks run in parallel.
    Two ids that land on the same slot also serialize; memory stays bounded.

    Usage:
        with registry.lock_for(task_id):
            ...
    """

    def __init__(self, size: int = DEFAULT_LOCK_SLOTS) -> None:
        if int(size) < 1:
            raise ValueError(f"lock pool size must be positive, got {size!r}")
        self._size = int(size)
        self._locks: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(self._size))
        logger.debug("LockRegistry ready slots=%s", self._size)

    @property
    def size(self) -> int:
        return self._size

    def slot_for(self, task_id: str) -> int:
        # crc32 is unsigned and stable across processes (str.__hash__ is salted).
        return zlib.crc32(str(task_id).encode("utf-8")) % self._size

    def lock_for(self, task_id: str) -> threading.Lock:
        return self._locks[self.slot_for(task_id)]

    def any_locked(self) -> bool:
        """True if some slot is currently held (diagnostics / tests)."""
        return any(lock.locked() for lock in self._locks)
