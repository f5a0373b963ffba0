"""
Session Service - Manages player session data and Socket.IO connections.

This service handles:
- Socket ID to room membership mapping
- Session validation and retrieval
- Dropping sessions of rooms that were deleted

It is owned by the Socket.IO layer; the game engine never reads it.
"""

import logging
import threading
from typing import Dict, Optional, Tuple, Any

logger = logging.getLogger(__name__)


class SessionService:
    """Manages player sessions and Socket.IO connections."""

    def __init__(self):
        """Initialize the session service."""
        # socket_id -> {room_code, player_id, player_name}
        self._player_sessions: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()
        logger.info("SessionService initialized")

    def create_session(self, socket_id: str, room_code: str, player_id: str, player_name: str) -> None:
        """Create or update a player session.

        Args:
            socket_id: Socket.IO connection ID
            room_code: Room the player is in
            player_id: Player identifier inside the room
            player_name: Player's display name
        """
        with self._lock:
            self._player_sessions[socket_id] = {
                'room_code': room_code,
                'player_id': player_id,
                'player_name': player_name
            }
        logger.debug(f"Created session for player {player_name} ({player_id}) in room {room_code}")

    def get_session(self, socket_id: str) -> Optional[Dict[str, str]]:
        """Get player session information by socket ID.

        Returns:
            Dict with session info or None if not found
        """
        with self._lock:
            session = self._player_sessions.get(socket_id)
            return dict(session) if session else None

    def get_session_data(self, socket_id: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        """Get session data as a (room_code, player_id, player_name) tuple."""
        session_info = self.get_session(socket_id)
        if session_info:
            return (
                session_info['room_code'],
                session_info['player_id'],
                session_info['player_name']
            )
        return None, None, None

    def has_session(self, socket_id: str) -> bool:
        with self._lock:
            return socket_id in self._player_sessions

    def remove_session(self, socket_id: str) -> Optional[Dict[str, str]]:
        """Remove a player session.

        Returns:
            The removed session info or None if not found
        """
        with self._lock:
            session_info = self._player_sessions.pop(socket_id, None)
        if session_info:
            logger.debug(f"Removed session for player {session_info['player_name']} ({session_info['player_id']})")
        return session_info

    def get_sessions_by_room(self, room_code: str) -> Dict[str, Dict[str, str]]:
        """Get all sessions for a specific room."""
        with self._lock:
            return {
                socket_id: dict(session_info)
                for socket_id, session_info in self._player_sessions.items()
                if session_info['room_code'] == room_code
            }

    def remove_room_sessions(self, room_code: str) -> int:
        """Drop every session pointing at a room that no longer exists."""
        with self._lock:
            stale = [sid for sid, info in self._player_sessions.items() if info['room_code'] == room_code]
            for socket_id in stale:
                del self._player_sessions[socket_id]
        if stale:
            logger.info(f"Removed {len(stale)} sessions for deleted room {room_code}")
        return len(stale)

    def get_sessions_count(self) -> int:
        with self._lock:
            return len(self._player_sessions)

    def get_debug_info(self) -> Dict[str, Any]:
        """Get debug information about active sessions."""
        with self._lock:
            room_counts: Dict[str, int] = {}
            for session_info in self._player_sessions.values():
                room_code = session_info['room_code']
                room_counts[room_code] = room_counts.get(room_code, 0) + 1

        return {
            'total_sessions': sum(room_counts.values()),
            'sessions_by_room': room_counts,
            'active_rooms': len(room_counts)
        }
