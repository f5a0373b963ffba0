"""
API Routes Unit Tests

Tests for the health check and the room lookup endpoint, using the real app
with an in-memory store.
"""

from unittest.mock import patch

from blindstory.core.errors import TransientStoreError


class TestHealth:
    """Test the health endpoint"""

    def test_health(self, app):
        """Test the liveness probe"""
        response = app.test_client().get('/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok'}


class TestRoomStatus:
    """Test /api/rooms/<room_code>"""

    def test_existing_room(self, app, game_engine):
        """Test a lobby with space is joinable"""
        room = game_engine.create_room('p-Amy', 'Amy')

        response = app.test_client().get(f'/api/rooms/{room.code.lower()}')

        assert response.status_code == 200
        assert response.get_json() == {
            'exists': True,
            'room_code': room.code,
            'phase': 'lobby',
            'player_count': 1,
            'max_players': 8,
            'joinable': True,
        }

    def test_started_room_not_joinable(self, app, game_engine):
        """Test a running game is reported but not joinable"""
        room = game_engine.create_room('p-Amy', 'Amy')
        for name in ('Bo', 'Cy', 'Dee'):
            game_engine.join_room(room.code, f'p-{name}', name)
        game_engine.start_game(room.code)

        data = app.test_client().get(f'/api/rooms/{room.code}').get_json()

        assert data['phase'] == 'playing'
        assert data['joinable'] is False

    def test_missing_room(self, app):
        """Test an unknown code"""
        response = app.test_client().get('/api/rooms/ZZZ999')

        assert response.status_code == 404
        assert response.get_json() == {'exists': False, 'room_code': 'ZZZ999'}

    def test_malformed_code(self, app):
        """Test codes that could never exist are not looked up"""
        response = app.test_client().get('/api/rooms/nope')

        assert response.status_code == 404
        assert response.get_json()['exists'] is False

    def test_store_outage(self, app, game_engine):
        """Test a store outage is reported as 503"""
        with patch.object(game_engine, 'get_room', side_effect=TransientStoreError(None, 'Room store unavailable')):
            response = app.test_client().get('/api/rooms/ABC234')

        assert response.status_code == 503
        assert response.get_json()['error']['code'] == 'STORE_UNAVAILABLE'
