"""
Broadcast Service - Centralized Socket.IO message broadcasting.

This service handles all Socket.IO emissions in a centralized way:
- Room-wide broadcasts (one Socket.IO room per room code)
- Individual player messages (a player's id is their socket id)
- Room subscription management outside of a request context

Delivery is fire-and-forget: a failed emission is logged and never rolls back
the room state that triggered it.
"""

import logging
from typing import Any, Dict, Optional

from blindstory.core.models import Player, RevealData, Room

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = '/'


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio, room_state_presenter):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
            room_state_presenter: Builds client-safe payloads
        """
        self.socketio = socketio
        self.room_state_presenter = room_state_presenter

    # Core emission methods

    def emit_to_room(self, event: str, data: Any, room_code: str):
        """Emit an event to all players in a room."""
        try:
            self.socketio.emit(event, data, to=room_code)
            logger.debug(f'Emitted {event} to room {room_code}')
        except Exception as e:
            logger.error(f'Error emitting {event} to room {room_code}: {e}')

    def emit_to_player(self, event: str, data: Any, socket_id: str):
        """Emit an event to a specific player."""
        try:
            self.socketio.emit(event, data, to=socket_id)
            logger.debug(f'Emitted {event} to player {socket_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to player {socket_id}: {e}')

    def remove_from_room(self, socket_id: str, room_code: str):
        """Unsubscribe a connection from a room's broadcasts."""
        try:
            self.socketio.server.leave_room(socket_id, room_code, namespace=DEFAULT_NAMESPACE)
        except Exception as e:
            logger.error(f'Error removing {socket_id} from room {room_code}: {e}')

    # High-level broadcast methods

    def broadcast_room_update(self, room: Room):
        """Broadcast the full (blind) room snapshot to everyone in the room."""
        self.emit_to_room('room-updated', self.room_state_presenter.create_room_snapshot(room), room.code)

    def broadcast_player_joined(self, room: Room, player: Player):
        self.emit_to_room('player-joined', self.room_state_presenter.create_player_data(player), room.code)

    def broadcast_player_left(self, room_code: str, player_id: str):
        self.emit_to_room('player-left', {'player_id': player_id}, room_code)

    def send_turn_prompts(self, room: Room, unanswered_only: bool = False):
        """Tell every active player their question and every spectator to wait."""
        active = room.active_players()
        for player in active:
            if unanswered_only and player.has_answered:
                continue
            self.emit_to_player('your-turn', self.room_state_presenter.create_turn_data(room, player), player.id)
        if unanswered_only:
            return
        active_ids = {player.id for player in active}
        for player in room.players:
            if player.id not in active_ids:
                self.emit_to_player('waiting-for-others', {'spectating': True}, player.id)

    def broadcast_game_started(self, room: Room):
        """Announce a new round and hand out the questions."""
        self.emit_to_room('game-started', self.room_state_presenter.create_room_snapshot(room), room.code)
        self.send_turn_prompts(room)
        logger.info(f'Broadcasted round {room.game_state.current_round} start to room {room.code}')

    def broadcast_reveal(self, room: Room, reveal: RevealData):
        self.emit_to_room('reveal', self.room_state_presenter.create_reveal_data(room, reveal), room.code)
        logger.info(f'Broadcasted reveal to room {room.code}')

    def broadcast_game_reset(self, room: Room):
        self.emit_to_room('game-reset', self.room_state_presenter.create_room_snapshot(room), room.code)

    def send_waiting(self, socket_id: str, room: Optional[Room] = None):
        data: Dict[str, Any] = {'spectating': False}
        if room is not None:
            data['answered'] = len(room.game_state.answers)
        self.emit_to_player('waiting-for-others', data, socket_id)

    def send_kicked(self, socket_id: str, room_code: str):
        self.emit_to_player('kicked', {'room_code': room_code}, socket_id)
        self.remove_from_room(socket_id, room_code)
