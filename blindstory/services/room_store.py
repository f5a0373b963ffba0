"""
Room Store for Blind Story

Key-value persistence of room snapshots with a sliding expiry. The store is a
cache, not durable storage: a room that expires is considered abandoned.
Load-mutate-save atomicity is the caller's job (see ConcurrencyControlService).
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis

from blindstory.core.errors import ErrorCode, TransientStoreError
from blindstory.core.models import Room

logger = logging.getLogger(__name__)


def serialize_room(room: Room) -> str:
    return json.dumps(room.to_dict(), separators=(',', ':'))


def deserialize_room(raw: str) -> Room:
    return Room.from_dict(json.loads(raw))


class RoomStore(ABC):
    """Contract shared by every room store backend."""

    @abstractmethod
    def save(self, room: Room) -> None:
        """Persist the room and reset its expiry window."""

    @abstractmethod
    def get(self, code: str) -> Optional[Room]:
        """Return the stored room, or None if absent or expired."""

    @abstractmethod
    def delete(self, code: str) -> None:
        """Remove the room. Deleting a missing room is not an error."""

    @abstractmethod
    def exists(self, code: str) -> bool:
        """Check whether a live room holds this code."""

    def count(self) -> Optional[int]:
        """Number of live rooms, when the backend can tell cheaply."""
        return None


class InMemoryRoomStore(RoomStore):
    """Process-local store used for development and tests.

    Rooms are kept as JSON text so callers never share mutable objects with
    the store, matching what a network store would hand back.
    """

    def __init__(self, ttl_seconds: int = 14400, clock: Callable[[], float] = time.monotonic):
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._rooms: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _purge_if_expired(self, code: str) -> Optional[str]:
        entry = self._rooms.get(code)
        if entry is None:
            return None
        raw, expires_at = entry
        if self._clock() >= expires_at:
            del self._rooms[code]
            logger.debug(f"Room {code} expired from memory store")
            return None
        return raw

    def save(self, room: Room) -> None:
        raw = serialize_room(room)
        with self._lock:
            self._rooms[room.code] = (raw, self._clock() + self._ttl_seconds)

    def get(self, code: str) -> Optional[Room]:
        with self._lock:
            raw = self._purge_if_expired(code)
        return deserialize_room(raw) if raw is not None else None

    def delete(self, code: str) -> None:
        with self._lock:
            self._rooms.pop(code, None)

    def exists(self, code: str) -> bool:
        with self._lock:
            return self._purge_if_expired(code) is not None

    def count(self) -> int:
        with self._lock:
            for code in list(self._rooms):
                self._purge_if_expired(code)
            return len(self._rooms)


class RedisRoomStore(RoomStore):
    """Redis-backed store writing JSON snapshots with SETEX."""

    def __init__(self, client: "redis.Redis", ttl_seconds: int = 14400, key_prefix: str = 'bldsty:room:'):
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = 14400, key_prefix: str = 'bldsty:room:') -> "RedisRoomStore":
        client = redis.Redis.from_url(url, encoding='utf-8', decode_responses=True)
        return cls(client, ttl_seconds=ttl_seconds, key_prefix=key_prefix)

    def _key(self, code: str) -> str:
        return f"{self._key_prefix}{code}"

    def _unavailable(self, operation: str, code: str, error: Exception) -> TransientStoreError:
        logger.warning(f"Redis {operation} failed for room {code}: {error}")
        return TransientStoreError(
            ErrorCode.STORE_UNAVAILABLE,
            "Room storage is temporarily unavailable",
            {"operation": operation, "room_code": code}
        )

    def save(self, room: Room) -> None:
        try:
            self._client.setex(self._key(room.code), self._ttl_seconds, serialize_room(room))
        except redis.RedisError as e:
            raise self._unavailable('save', room.code, e) from e

    def get(self, code: str) -> Optional[Room]:
        try:
            raw = self._client.get(self._key(code))
        except redis.RedisError as e:
            raise self._unavailable('get', code, e) from e
        if raw is None:
            return None
        try:
            return deserialize_room(raw)
        except (ValueError, KeyError, TypeError) as e:
            # A snapshot we cannot read is as good as expired
            logger.error(f"Discarding unreadable snapshot for room {code}: {e}")
            return None

    def delete(self, code: str) -> None:
        try:
            self._client.delete(self._key(code))
        except redis.RedisError as e:
            raise self._unavailable('delete', code, e) from e

    def exists(self, code: str) -> bool:
        try:
            return bool(self._client.exists(self._key(code)))
        except redis.RedisError as e:
            raise self._unavailable('exists', code, e) from e

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False


def create_room_store(game_settings) -> RoomStore:
    """Build the store backend selected in configuration."""
    if game_settings.store_backend == 'redis':
        logger.info(f"Using Redis room store with TTL {game_settings.room_ttl_seconds}s")
        return RedisRoomStore.from_url(
            game_settings.redis_url,
            ttl_seconds=game_settings.room_ttl_seconds,
            key_prefix=game_settings.room_key_prefix,
        )
    logger.info(f"Using in-memory room store with TTL {game_settings.room_ttl_seconds}s")
    return InMemoryRoomStore(ttl_seconds=game_settings.room_ttl_seconds)
