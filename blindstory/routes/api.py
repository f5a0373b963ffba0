"""
REST API endpoints for Blind Story.
"""

import logging
from flask import Blueprint, jsonify

from blindstory.core.errors import TransientStoreError
from blindstory.core.game_phases import GamePhase

logger = logging.getLogger(__name__)


def create_api_blueprint(services):
    """Create and configure the API Blueprint with service dependencies."""
    game_engine = services['game_engine']
    validation_service = services['validation_service']

    api = Blueprint('api', __name__)

    @api.route('/health')
    def health():
        """Liveness probe."""
        return jsonify({'status': 'ok'})

    @api.route('/api/rooms/<room_code>')
    def room_status(room_code):
        """Tell a client whether a room code is worth joining."""
        code = room_code.strip().upper()
        if not validation_service.is_valid_room_code(code):
            return jsonify({'exists': False, 'room_code': code}), 404

        try:
            room = game_engine.get_room(code)
        except TransientStoreError as e:
            logger.error(f'Room lookup for {code} failed: {e.message}')
            return jsonify({'error': {'code': e.code.value, 'message': e.message}}), 503

        if room is None:
            return jsonify({'exists': False, 'room_code': code}), 404

        player_count = len(room.players)
        return jsonify({
            'exists': True,
            'room_code': room.code,
            'phase': room.phase.value,
            'player_count': player_count,
            'max_players': room.settings.max_players,
            'joinable': room.phase == GamePhase.LOBBY and player_count < room.settings.max_players,
        })

    return api
