"""
Base Handler Classes

This module provides base classes for Socket.IO handlers with common patterns
for service access, session lookup, the host-only guard, store retries and
response formatting.
"""

import logging
from abc import ABC
from typing import Any, Callable, Dict, Optional
from flask import request
from flask_socketio import emit, join_room, leave_room

from container import get_container
from blindstory.core.errors import AuthorizationError, ClientRequestError, ErrorCode, ValidationError
from blindstory.utils.error_handling import call_with_store_retry

logger = logging.getLogger(__name__)


class BaseHandler(ABC):
    """
    Abstract base class for all Socket.IO handlers.

    Provides common functionality like service access, session management,
    validation patterns, and standardized response formatting.
    """

    @property
    def _container(self):
        return get_container()

    @property
    def game_engine(self):
        return self._container.get('GameEngine')

    @property
    def validation_service(self):
        return self._container.get('ValidationService')

    @property
    def error_response_factory(self):
        return self._container.get('ErrorResponseFactory')

    @property
    def session_service(self):
        return self._container.get('SessionService')

    @property
    def broadcast_service(self):
        return self._container.get('BroadcastService')

    @property
    def room_state_presenter(self):
        return self._container.get('RoomStatePresenter')

    @property
    def timer_service(self):
        return self._container.get('TimerService')

    @property
    def game_flow_service(self):
        return self._container.get('GameFlowService')

    @property
    def disconnect_service(self):
        return self._container.get('DisconnectService')

    @property
    def concurrency_control_service(self):
        return self._container.get('ConcurrencyControlService')

    @property
    def game_settings(self):
        return self._container.get('GameSettings')

    def current_socket_id(self) -> str:
        """Connection id of the client that sent the current event."""
        return request.sid  # type: ignore[attr-defined]

    def get_current_session(self) -> Optional[Dict[str, Any]]:
        """Get the current session info for the requesting client."""
        return self.session_service.get_session(self.current_socket_id())

    def session_or_none(self, handler_name: str) -> Optional[Dict[str, Any]]:
        """
        Resolve the caller's room membership.

        Actions from a client that is not in any room are ignored, so callers
        return early when this gives None.
        """
        session_info = self.get_current_session()
        if not session_info:
            logger.debug(f'{handler_name} ignored: client {self.current_socket_id()} is not in a room')
        return session_info

    def ensure_not_in_room(self) -> None:
        if self.session_service.has_session(self.current_socket_id()):
            raise ValidationError(
                ErrorCode.ALREADY_IN_ROOM,
                'You are already in a room. Leave it first.'
            )

    def validate_data_dict(self, data: Any, required_fields: Optional[list] = None) -> Dict[str, Any]:
        """
        Validate that data is a dictionary and contains required fields.

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(data, dict):
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                "Invalid data format - expected dictionary"
            )

        for field in required_fields or []:
            if field not in data:
                if field == 'room_code':
                    raise ValidationError(ErrorCode.MISSING_ROOM_CODE, "Room code is required")
                elif field == 'player_name':
                    raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name is required")
                else:
                    raise ValidationError(ErrorCode.INVALID_DATA, f"Missing required field: {field}")

        return data

    def call_engine(self, operation: Callable, *args, **kwargs):
        """Run an engine operation, retrying while the room store is unavailable."""
        return call_with_store_retry(
            operation, *args,
            attempts=self.game_settings.store_retry_attempts,
            backoff_seconds=self.game_settings.store_retry_backoff_seconds,
            **kwargs
        )

    def run_as_host(self, session_info: Dict[str, Any], action: str, operation: Callable, *args):
        """
        Run a host-only engine operation.

        The host check and the operation run under the same room lock, so the
        host cannot change in between.

        Raises:
            ClientRequestError: If the room no longer exists
            AuthorizationError: If the caller is not the room's host
        """
        room_code = session_info['room_code']

        def guarded():
            with self.concurrency_control_service.room_operation(room_code):
                room = self.game_engine.get_room(room_code)
                if room is None:
                    raise ClientRequestError(ErrorCode.ROOM_NOT_FOUND, 'Room not found')
                if room.host_id != session_info['player_id']:
                    raise AuthorizationError(ErrorCode.NOT_HOST, f'Only the host can {action}')
                return operation(room_code, *args)

        return self.call_engine(guarded)

    def emit_success(self, event_name: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Emit a success response to the requesting client.

        Returns:
            The response, so handlers can also return it as the event ack
        """
        response = self.error_response_factory.create_success_response(data or {})
        emit(event_name, response)
        return response

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {self.current_socket_id()}')
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: Optional[str] = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {self.current_socket_id()}'
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)


class RoomHandlerMixin:
    """
    Mixin for handlers that deal with room membership.

    Joins and leaves the Socket.IO room that carries a game room's broadcasts.
    """

    def join_socketio_room(self, room_code: str) -> None:
        """Join a Socket.IO room for broadcasting."""
        join_room(room_code)
        logger.debug(f'Client {request.sid} joined Socket.IO room: {room_code}')  # type: ignore[attr-defined]

    def leave_socketio_room(self, room_code: str) -> None:
        """Leave a Socket.IO room."""
        leave_room(room_code)
        logger.debug(f'Client {request.sid} left Socket.IO room: {room_code}')  # type: ignore[attr-defined]


class BaseRoomHandler(BaseHandler, RoomHandlerMixin):
    """Base class for handlers that deal with room operations."""
    pass


class BaseGameHandler(BaseHandler):
    """Base class for handlers that deal with game operations."""
    pass
