"""
Concurrency Control Service for Blind Story

Serializes load-mutate-save cycles per room so two actions on the same room
never interleave. Locks are re-entrant: a handler can hold the room lock
while it checks the host and then call into the engine, which takes it again.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class ConcurrencyControlService:
    """Manages per-room locks."""

    def __init__(self):
        # Per-room locks for fine-grained control
        self._room_locks: Dict[str, threading.RLock] = {}
        # Lock for managing room locks themselves
        self._locks_lock = threading.Lock()

    def get_room_lock(self, room_code: str) -> threading.RLock:
        """Get or create a lock for a specific room."""
        with self._locks_lock:
            lock = self._room_locks.get(room_code)
            if lock is None:
                lock = threading.RLock()
                self._room_locks[room_code] = lock
            return lock

    def cleanup_room_lock(self, room_code: str) -> None:
        """Clean up lock for a deleted room."""
        with self._locks_lock:
            if self._room_locks.pop(room_code, None) is not None:
                logger.debug(f"Released lock for room {room_code}")

    @contextmanager
    def room_operation(self, room_code: str):
        """Context manager for thread-safe room operations."""
        room_lock = self.get_room_lock(room_code)
        with room_lock:
            yield
