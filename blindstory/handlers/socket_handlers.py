"""
Socket.IO event handlers for Blind Story.

This module provides the registration function and the connect/disconnect
handlers. All other events are routed to the handler classes through the
SocketEventRouter.
"""

import logging
from flask import request
from flask_socketio import emit

from container import get_container
from .socket_event_router import setup_router
from .room_connection_handler import RoomConnectionHandler
from .game_action_handler import GameActionHandler

logger = logging.getLogger(__name__)

# Client event name -> (handler attribute, method name)
EVENT_ROUTES = {
    'create-room': ('room', 'handle_create_room'),
    'join-room': ('room', 'handle_join_room'),
    'leave-room': ('room', 'handle_leave_room'),
    'rejoin-room': ('room', 'handle_rejoin_room'),
    'toggle-ready': ('room', 'handle_toggle_ready'),
    'start-game': ('game', 'handle_start_game'),
    'submit-answer': ('game', 'handle_submit_answer'),
    'new-round': ('game', 'handle_new_round'),
    'kick-player': ('game', 'handle_kick_player'),
    'reset-to-lobby': ('game', 'handle_reset_to_lobby'),
}


def register_socket_handlers(socketio_instance, app_config):
    """Register all socket handlers with the SocketIO instance."""
    router = setup_router()

    handlers = {
        'room': RoomConnectionHandler(),
        'game': GameActionHandler(),
    }

    def handle_connect(auth=None):
        """Handle client connection with Origin enforcement in production."""
        origin = request.headers.get('Origin')
        if app_config.is_production:
            allowed = set(app_config.allowed_origins)
            if allowed and origin and origin not in allowed:
                logger.warning(f'Rejecting connection from disallowed Origin: {origin}')
                return False
        logger.info(f'Client connected: {request.sid} from Origin: {origin}')  # type: ignore[attr-defined]
        emit('connected', {'status': 'Connected to Blind Story server'})

    # Connect and disconnect bypass the router
    socketio_instance.on_event('connect', handle_connect)
    socketio_instance.on_event('disconnect', handle_disconnect)

    for event_name, (handler_key, method_name) in EVENT_ROUTES.items():
        router.register_route(event_name, getattr(handlers[handler_key], method_name))

    router.register_with_socketio(socketio_instance)

    logger.info(f"Registered {len(router.get_registered_events())} socket event handlers")
    return router


def handle_disconnect(reason=None):
    """Start the grace period for the player behind a dropped connection."""
    logger.info(f'Client disconnected: {request.sid}')  # type: ignore[attr-defined]
    get_container().get('DisconnectService').handle_disconnect(request.sid)  # type: ignore[attr-defined]
