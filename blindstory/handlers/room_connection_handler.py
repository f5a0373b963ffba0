"""
Room Connection Handler

This module handles Socket.IO events related to room membership:
creating, joining, leaving and rejoining rooms, and toggling ready.
"""

import logging

from blindstory.core.errors import ClientRequestError, ErrorCode
from blindstory.core.game_phases import GamePhase
from blindstory.services.error_response_factory import with_error_handling
from blindstory.services.timer_service import disconnect_key
from .base_handler import BaseRoomHandler

logger = logging.getLogger(__name__)


class RoomConnectionHandler(BaseRoomHandler):
    """Handler for room membership operations."""

    def _joined_payload(self, room, player_id: str, is_reconnection: bool = False):
        player = room.get_player(player_id)
        return {
            'room_code': room.code,
            'player_id': player_id,
            'player_name': player.name if player else None,
            'is_host': room.host_id == player_id,
            'is_reconnection': is_reconnection,
            'room': self.room_state_presenter.create_room_snapshot(room),
        }

    def _enter_room(self, room, player_id: str, player_name: str) -> None:
        self.join_socketio_room(room.code)
        self.session_service.create_session(self.current_socket_id(), room.code, player_id, player_name)

    @with_error_handling
    def handle_create_room(self, data):
        """
        Handle a player creating a room and becoming its host.

        Expected data format:
        {
            'player_name': 'display_name',
            'settings': {'max_players': 8, 'language': 'en', ...}   # optional
        }
        """
        self.log_handler_start('handle_create_room', data)

        validated = self.validate_data_dict(data, ['player_name'])
        player_name = self.validation_service.validate_player_name(validated['player_name'])
        overrides = self.validation_service.validate_settings(validated.get('settings'))
        self.ensure_not_in_room()

        settings = self.game_settings.default_room_settings.merged(overrides)
        host_id = self.current_socket_id()
        room = self.call_engine(self.game_engine.create_room, host_id, player_name, settings)

        self._enter_room(room, host_id, player_name)
        self.log_handler_success('handle_create_room', f'Room {room.code} created by {player_name}')

        response = self.emit_success('room-joined', self._joined_payload(room, host_id))
        self.broadcast_service.broadcast_room_update(room)
        return response

    @with_error_handling
    def handle_join_room(self, data):
        """
        Handle player joining a room.

        Expected data format:
        {
            'room_code': 'ABC234',
            'player_name': 'display_name'
        }
        """
        self.log_handler_start('handle_join_room', data)

        validated = self.validate_data_dict(data, ['room_code', 'player_name'])
        room_code = self.validation_service.validate_room_code(validated['room_code'])
        player_name = self.validation_service.validate_player_name(validated['player_name'])
        self.ensure_not_in_room()

        player_id = self.current_socket_id()
        room = self.call_engine(self.game_engine.join_room, room_code, player_id, player_name)

        self._enter_room(room, player_id, player_name)
        self.log_handler_success('handle_join_room', f'Player {player_name} ({player_id}) joined room {room_code}')

        response = self.emit_success('room-joined', self._joined_payload(room, player_id))
        self.broadcast_service.broadcast_player_joined(room, room.get_player(player_id))
        self.broadcast_service.broadcast_room_update(room)
        return response

    @with_error_handling
    def handle_leave_room(self, data=None):
        """Handle player leaving their current room."""
        self.log_handler_start('handle_leave_room', data)

        session_info = self.session_or_none('handle_leave_room')
        if not session_info:
            return None

        room_code = session_info['room_code']
        player_id = session_info['player_id']

        # The session stays until the player is out of the stored room
        self.disconnect_service.remove_and_announce(room_code, player_id)
        self.session_service.remove_session(self.current_socket_id())
        self.leave_socketio_room(room_code)

        self.log_handler_success('handle_leave_room', f'Player {player_id} left room {room_code}')
        return self.emit_success('room-left', {'room_code': room_code})

    @with_error_handling
    def handle_rejoin_room(self, data):
        """
        Handle a player coming back on a new connection.

        Expected data format:
        {
            'room_code': 'ABC234',
            'player_id': 'previous connection id',
            'player_name': 'display_name'
        }

        When the id and name match an existing player record, the record is
        moved to the new connection and its pending removal is cancelled. If
        the record is gone, the player joins as new, which only works while
        the room is in the lobby. Nothing about the old player changes unless
        the record was actually moved.
        """
        self.log_handler_start('handle_rejoin_room', data)

        validated = self.validate_data_dict(data, ['room_code', 'player_id', 'player_name'])
        room_code = self.validation_service.validate_room_code(validated['room_code'])
        old_id = self.validation_service.validate_player_id(validated['player_id'])
        player_name = self.validation_service.validate_player_name(validated['player_name'])
        self.ensure_not_in_room()

        new_id = self.current_socket_id()

        def rebind_or_join():
            with self.concurrency_control_service.room_operation(room_code):
                room = self.game_engine.get_room(room_code)
                if room is None:
                    raise ClientRequestError(ErrorCode.ROOM_NOT_FOUND, 'Room not found')
                player = room.get_player(old_id)
                if player is not None and player.name == player_name:
                    rebound = self.game_engine.rebind_player(room_code, old_id, new_id)
                    # An eviction waiting on the room lock finds old_id gone and does nothing
                    self.timer_service.cancel(disconnect_key(room_code, old_id))
                    return rebound, True
                if room.phase == GamePhase.LOBBY:
                    return self.game_engine.join_room(room_code, new_id, player_name), False
                raise ClientRequestError(
                    ErrorCode.REJOIN_FAILED,
                    'Cannot rejoin a game in progress',
                    {'room_code': room_code}
                )

        room, is_reconnection = self.call_engine(rebind_or_join)
        if is_reconnection:
            self._retire_old_connection(room_code, old_id)
        self._enter_room(room, new_id, player_name)
        self.log_handler_success(
            'handle_rejoin_room',
            f'Player {player_name} rejoined room {room_code} as {new_id} (reconnection={is_reconnection})'
        )

        response = self.emit_success('room-joined', self._joined_payload(room, new_id, is_reconnection))
        if not is_reconnection:
            self.broadcast_service.broadcast_player_joined(room, room.get_player(new_id))
        self.broadcast_service.broadcast_room_update(room)
        self._redeliver_round_state(room, new_id)
        return response

    def _retire_old_connection(self, room_code: str, old_id: str) -> None:
        # The old connection may still be open if the client reconnected first
        old_session = self.session_service.get_session(old_id)
        if old_session and old_session['room_code'] == room_code:
            self.session_service.remove_session(old_id)
            self.broadcast_service.remove_from_room(old_id, room_code)

    def _redeliver_round_state(self, room, player_id: str) -> None:
        """Bring a returning player back to where the round is."""
        player = room.get_player(player_id)
        if player is None:
            return
        if room.phase == GamePhase.PLAYING:
            if player.assigned_question is not None and not player.has_answered:
                self.broadcast_service.emit_to_player(
                    'your-turn', self.room_state_presenter.create_turn_data(room, player), player_id
                )
            else:
                self.broadcast_service.send_waiting(player_id, room)
        elif room.phase == GamePhase.REVEAL:
            reveal = self.game_engine.generate_reveal(room)
            if reveal is not None:
                self.broadcast_service.emit_to_player(
                    'reveal', self.room_state_presenter.create_reveal_data(room, reveal), player_id
                )

    @with_error_handling
    def handle_toggle_ready(self, data=None):
        """Handle a player flipping their ready flag in the lobby."""
        self.log_handler_start('handle_toggle_ready', data)

        session_info = self.session_or_none('handle_toggle_ready')
        if not session_info:
            return None

        room = self.call_engine(self.game_engine.toggle_ready, session_info['room_code'], session_info['player_id'])
        self.broadcast_service.broadcast_room_update(room)
        player = room.get_player(session_info['player_id'])
        self.log_handler_success('handle_toggle_ready', f'ready={player.is_ready}')
        return self.error_response_factory.create_success_response({'is_ready': player.is_ready})
