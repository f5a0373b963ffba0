"""
Error Response Factory Unit Tests
"""

from unittest.mock import patch

from blindstory.core.errors import (
    AuthorizationError, ClientRequestError, ErrorCode, TransientStoreError, ValidationError,
)
from blindstory.services.error_response_factory import ErrorResponseFactory, with_error_handling


class TestErrorResponseFactory:
    """Test response shapes"""

    def setup_method(self):
        """Setup test fixtures for each test"""
        self.factory = ErrorResponseFactory()

    def test_success_response(self):
        """Test success envelope"""
        assert self.factory.create_success_response({'room_code': 'ABC234'}) == {
            'success': True,
            'data': {'room_code': 'ABC234'}
        }

    def test_error_response(self):
        """Test error envelope with and without details"""
        assert self.factory.create_error_response(ErrorCode.ROOM_FULL, 'Room is full') == {
            'success': False,
            'error': {'code': 'ROOM_FULL', 'message': 'Room is full', 'details': {}}
        }
        response = self.factory.create_error_response(ErrorCode.ROOM_FULL, 'Room is full', {'max_players': 8})
        assert response['error']['details'] == {'max_players': 8}

    @patch('blindstory.services.error_response_factory.emit')
    def test_emit_error(self, mock_emit):
        """Test errors are emitted to the caller"""
        response = self.factory.emit_error(ErrorCode.NOT_HOST, 'Only the host can do that')

        mock_emit.assert_called_once_with('error', response)
        assert response['error']['code'] == 'NOT_HOST'

    def test_handle_exception(self):
        """Test game errors keep their code and others become internal errors"""
        assert self.factory.handle_exception(
            ClientRequestError(ErrorCode.NAME_TAKEN, 'Name taken')
        ) == (ErrorCode.NAME_TAKEN, 'Name taken')
        assert self.factory.handle_exception(RuntimeError('boom')) == (
            ErrorCode.INTERNAL_ERROR, 'An internal error occurred'
        )


class TestWithErrorHandling:
    """Test the handler decorator"""

    def test_passes_through_results(self):
        """Test successful handlers are untouched"""
        @with_error_handling
        def handler(value):
            return {'success': True, 'data': value}

        assert handler(3) == {'success': True, 'data': 3}

    @patch('blindstory.services.error_response_factory.emit')
    def test_game_errors(self, mock_emit):
        """Test each error class is reported with its code"""
        errors = [
            ValidationError(ErrorCode.MISSING_PLAYER_NAME, 'Player name is required'),
            ClientRequestError(ErrorCode.GAME_IN_PROGRESS, 'Game already started'),
            AuthorizationError(None, 'Only the host can start the game'),
            TransientStoreError(None, 'Room store unavailable'),
        ]
        for error in errors:
            @with_error_handling
            def handler():
                raise error

            response = handler()
            assert response['success'] is False
            assert response['error']['code'] == error.code.value

        assert mock_emit.call_count == len(errors)

    @patch('blindstory.services.error_response_factory.emit')
    def test_unexpected_errors_are_internal(self, mock_emit):
        """Test unexpected exceptions do not leak their message"""
        @with_error_handling
        def handler():
            raise KeyError('secret detail')

        response = handler()

        assert response['error']['code'] == 'INTERNAL_ERROR'
        assert 'secret' not in response['error']['message']
        mock_emit.assert_called_once()

    def test_error_defaults(self):
        """Test errors created without a code use their class default"""
        assert AuthorizationError(None, 'x').code == ErrorCode.NOT_HOST
        assert TransientStoreError(None, 'x').code == ErrorCode.STORE_UNAVAILABLE
        assert ValidationError(None, 'x').code == ErrorCode.INVALID_DATA
        assert ClientRequestError(None, 'x').code == ErrorCode.INVALID_STATE
