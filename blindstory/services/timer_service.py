"""
Timer Service for Blind Story

Owns the cancellable scheduled tasks of the Socket.IO layer: disconnect grace
periods, the dramatic pause before a reveal and the optional turn timer.
Timers are keyed by tuples such as ``("disconnect", room_code, player_id)`` or
``("reveal", room_code)``; scheduling a key again replaces the pending timer.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, Tuple

logger = logging.getLogger(__name__)

DISCONNECT = "disconnect"
REVEAL = "reveal"
TURN = "turn"


def disconnect_key(room_code: str, player_id: str) -> Tuple[str, str, str]:
    return (DISCONNECT, room_code, player_id)


def reveal_key(room_code: str) -> Tuple[str, str]:
    return (REVEAL, room_code)


def turn_key(room_code: str) -> Tuple[str, str]:
    return (TURN, room_code)


class TimerService:
    """Keyed, cancellable one-shot timers."""

    def __init__(self):
        self._timers: Dict[Hashable, Tuple[object, threading.Timer]] = {}
        self._lock = threading.Lock()

    def schedule(self, key: Hashable, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        """
        Run ``callback(*args)`` after ``delay`` seconds unless cancelled first.

        A non-positive delay runs the callback right away on the calling thread.

        Args:
            key: Identity of the timer; replaces any pending timer with this key
            delay: Seconds to wait
            callback: Function to run
        """
        self.cancel(key)
        if delay <= 0:
            callback(*args)
            return

        token = object()
        timer = threading.Timer(delay, self._fire, args=(key, token, callback, args))
        timer.daemon = True
        with self._lock:
            self._timers[key] = (token, timer)
        timer.start()
        logger.debug(f"Scheduled timer {key} in {delay}s")

    def _fire(self, key: Hashable, token: object, callback: Callable[..., Any], args: tuple) -> None:
        with self._lock:
            entry = self._timers.get(key)
            if entry is None or entry[0] is not token:
                # Cancelled or replaced while the timer thread was waking up
                return
            del self._timers[key]

        try:
            callback(*args)
        except Exception as e:
            logger.exception(f"Timer {key} failed: {e}")

    def cancel(self, key: Hashable) -> bool:
        """Cancel a pending timer. Returns True if one was pending."""
        with self._lock:
            entry = self._timers.pop(key, None)
        if entry is None:
            return False
        entry[1].cancel()
        logger.debug(f"Cancelled timer {key}")
        return True

    def cancel_room(self, room_code: str) -> int:
        """Cancel every timer belonging to a room."""
        with self._lock:
            keys = [key for key in self._timers if isinstance(key, tuple) and len(key) > 1 and key[1] == room_code]
        return sum(1 for key in keys if self.cancel(key))

    def is_pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._timers

    def pending_count(self) -> int:
        with self._lock:
            return len(self._timers)

    def shutdown(self) -> None:
        """Cancel everything (used at process exit)."""
        with self._lock:
            entries = list(self._timers.values())
            self._timers.clear()
        for _, timer in entries:
            timer.cancel()
        logger.info(f"TimerService stopped, cancelled {len(entries)} pending timers")
