"""
Disconnect Service for Blind Story

Handles players leaving a room for any reason: leaving on purpose, being
kicked, or dropping their connection. Dropped connections get a grace period
(``disconnect_grace_seconds``) before the player is removed; rejoining within
the window cancels the removal. A grace period of 0 removes players at once.
"""

import logging
from typing import Optional

from blindstory.core.errors import TransientStoreError
from blindstory.core.game_phases import GamePhase
from blindstory.core.models import Room
from blindstory.services.timer_service import disconnect_key
from blindstory.utils.error_handling import call_with_store_retry, log_handler_error

logger = logging.getLogger(__name__)


class DisconnectService:
    """Removal of players and the graced handling of dropped connections."""

    def __init__(self, game_engine, session_service, broadcast_service, timer_service,
                 game_flow_service, concurrency_control_service, game_settings):
        self.game_engine = game_engine
        self.session_service = session_service
        self.broadcast_service = broadcast_service
        self.timer_service = timer_service
        self.game_flow_service = game_flow_service
        self.concurrency_control_service = concurrency_control_service
        self.game_settings = game_settings

    def remove_and_announce(self, room_code: str, player_id: str) -> Optional[Room]:
        """
        Remove a player and tell the rest of the room.

        Broadcasts player-left and room-updated, game-reset when the departure
        sent the room back to the lobby, and a fresh your-turn when an
        unanswered question was handed to a spectator. When the room empties,
        its timers, sessions and lock are released.

        Returns:
            The updated room, or None if the room is gone
        """
        self.timer_service.cancel(disconnect_key(room_code, player_id))

        def remove():
            with self.concurrency_control_service.room_operation(room_code):
                before = self.game_engine.get_room(room_code)
                after = self.game_engine.remove_player(room_code, player_id)
                return before, after

        before, room = call_with_store_retry(
            remove,
            attempts=self.game_settings.store_retry_attempts,
            backoff_seconds=self.game_settings.store_retry_backoff_seconds,
        )

        if room is None:
            if before is not None:
                self.timer_service.cancel_room(room_code)
                self.session_service.remove_room_sessions(room_code)
            return None

        if before is not None and before.get_player(player_id) is None:
            return room

        self.broadcast_service.broadcast_player_left(room_code, player_id)
        if before is not None and before.phase != GamePhase.LOBBY and room.phase == GamePhase.LOBBY:
            self.game_flow_service.announce_reset(room)
            return room

        self.broadcast_service.broadcast_room_update(room)
        if room.phase == GamePhase.PLAYING:
            self.broadcast_service.send_turn_prompts(room, unanswered_only=True)
        return room

    def handle_disconnect(self, socket_id: str) -> None:
        """Forget the connection and start the grace period for its player."""
        session_info = self.session_service.remove_session(socket_id)
        if not session_info:
            return

        room_code = session_info['room_code']
        player_id = session_info['player_id']
        grace = self.game_settings.disconnect_grace_seconds
        logger.info(
            f"Player {session_info['player_name']} ({player_id}) disconnected from room {room_code}, "
            f"removal in {grace}s unless they rejoin"
        )
        self.timer_service.schedule(
            disconnect_key(room_code, player_id), grace,
            self.evict_player, room_code, player_id
        )

    def evict_player(self, room_code: str, player_id: str) -> None:
        """Grace period expired: remove the player for good."""
        try:
            self.remove_and_announce(room_code, player_id)
            logger.info(f"Player {player_id} removed from room {room_code} after disconnect")
        except TransientStoreError as e:
            log_handler_error("evict_player", e, {"room_code": room_code, "player_id": player_id})
