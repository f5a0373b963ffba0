"""
Game Action Handler

This module handles Socket.IO events that drive a game: starting it,
submitting answers, new rounds, kicking players and returning to the lobby.
Start, new round, kick and reset are host-only.
"""

import logging

from blindstory.core.errors import ClientRequestError, ErrorCode
from blindstory.services.error_response_factory import with_error_handling
from .base_handler import BaseGameHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseGameHandler):
    """Handler for game actions."""

    @with_error_handling
    def handle_start_game(self, data=None):
        """Handle the host starting the first round from the lobby."""
        self.log_handler_start('handle_start_game', data)

        session_info = self.session_or_none('handle_start_game')
        if not session_info:
            return None

        room = self.run_as_host(session_info, 'start the game', self.game_engine.start_game)
        if room is None:
            raise ClientRequestError(ErrorCode.INVALID_STATE, 'The game cannot be started right now')

        self.game_flow_service.announce_round(room)
        self.log_handler_success('handle_start_game', f'Room {room.code} started round {room.game_state.current_round}')
        return self.error_response_factory.create_success_response({'round': room.game_state.current_round})

    @with_error_handling
    def handle_submit_answer(self, data):
        """
        Handle a player submitting the answer to their question.

        Expected data format:
        {
            'answer': 'a dragon'
        }
        """
        self.log_handler_start('handle_submit_answer', data)

        session_info = self.session_or_none('handle_submit_answer')
        if not session_info:
            return None

        validated = self.validate_data_dict(data, ['answer'])
        result = self.call_engine(
            self.game_engine.submit_answer,
            session_info['room_code'], session_info['player_id'], validated['answer']
        )

        if not result.should_reveal:
            self.broadcast_service.send_waiting(self.current_socket_id(), result.room)
        self.game_flow_service.handle_submission(result.room, result.should_reveal)

        self.log_handler_success('handle_submit_answer', f'reveal={result.should_reveal}')
        return self.error_response_factory.create_success_response({'should_reveal': result.should_reveal})

    @with_error_handling
    def handle_new_round(self, data=None):
        """Handle the host starting the next round after a reveal."""
        self.log_handler_start('handle_new_round', data)

        session_info = self.session_or_none('handle_new_round')
        if not session_info:
            return None

        room = self.run_as_host(session_info, 'start a new round', self.game_engine.start_new_round)
        if room is None:
            raise ClientRequestError(ErrorCode.INVALID_STATE, 'A new round can only start after the reveal')

        self.game_flow_service.announce_round(room)
        self.log_handler_success('handle_new_round', f'Room {room.code} started round {room.game_state.current_round}')
        return self.error_response_factory.create_success_response({'round': room.game_state.current_round})

    @with_error_handling
    def handle_kick_player(self, data):
        """
        Handle the host removing another player.

        Expected data format:
        {
            'player_id': 'id of the player to kick'
        }
        """
        self.log_handler_start('handle_kick_player', data)

        session_info = self.session_or_none('handle_kick_player')
        if not session_info:
            return None

        validated = self.validate_data_dict(data, ['player_id'])
        target_id = self.validation_service.validate_player_id(validated['player_id'])
        if target_id == session_info['player_id']:
            raise ClientRequestError(ErrorCode.CANNOT_KICK_SELF, 'You cannot kick yourself')

        room_code = session_info['room_code']

        def kick(code):
            room = self.game_engine.get_room(code)
            if room is None or room.get_player(target_id) is None:
                raise ClientRequestError(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            return self.disconnect_service.remove_and_announce(code, target_id)

        self.run_as_host(session_info, 'kick players', kick)

        # Player ids are socket ids, so the kicked connection is the target id
        self.session_service.remove_session(target_id)
        self.broadcast_service.send_kicked(target_id, room_code)

        self.log_handler_success('handle_kick_player', f'Player {target_id} kicked from room {room_code}')
        return self.error_response_factory.create_success_response({'player_id': target_id})

    @with_error_handling
    def handle_reset_to_lobby(self, data=None):
        """
        Handle the host sending the room back to the lobby.

        Expected data format (optional):
        {
            'settings': {'max_players': 6, 'timer_seconds': 60}
        }
        """
        self.log_handler_start('handle_reset_to_lobby', data)

        session_info = self.session_or_none('handle_reset_to_lobby')
        if not session_info:
            return None

        overrides = {}
        if data is not None:
            validated = self.validate_data_dict(data)
            overrides = self.validation_service.validate_settings(validated.get('settings'))

        room = self.run_as_host(session_info, 'reset the game', self.game_engine.reset_to_lobby, overrides)
        if room is None:
            raise ClientRequestError(ErrorCode.ROOM_NOT_FOUND, 'Room not found')

        self.game_flow_service.announce_reset(room)
        self.log_handler_success('handle_reset_to_lobby', f'Room {room.code} back in lobby')
        return self.error_response_factory.create_success_response({'room_code': room.code})
