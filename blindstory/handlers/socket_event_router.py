"""
Socket Event Router

This module provides declarative event-to-handler mapping with middleware support,
request logging, and centralized event management for Socket.IO events.
"""

import logging
from typing import Dict, List, Callable, Any
from flask import request

logger = logging.getLogger(__name__)


class EventRouteNotFoundError(Exception):
    """Raised when an event route is not found."""
    pass


class SocketEventRouter:
    """
    Router for Socket.IO events with middleware support and logging.

    Every inbound client action goes through handle_event, so middleware sees
    all traffic in one place.
    """

    def __init__(self):
        self._routes: Dict[str, Callable] = {}
        self._middleware: List[Callable] = []

    def register_route(self, event_name: str, handler: Callable) -> None:
        """Register an event handler for a specific event."""
        self._routes[event_name] = handler
        logger.debug(f"Registered route: {event_name} -> {handler.__name__}")

    def add_middleware(self, middleware: Callable) -> None:
        """Add middleware that will be executed for all events."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.__name__}")

    def handle_event(self, event_name: str, data: Any = None) -> Any:
        """
        Handle an incoming Socket.IO event.

        Runs the middleware chain, then the handler registered for the event.

        Raises:
            EventRouteNotFoundError: If no handler is registered for the event
        """
        if event_name not in self._routes:
            raise EventRouteNotFoundError(f"No handler registered for event: {event_name}")

        logger.info(f"Handling event: {event_name} from client: {request.sid}")  # type: ignore[attr-defined]

        for middleware in self._middleware:
            data = middleware(event_name, data) or data

        return self._routes[event_name](data)

    def get_registered_events(self) -> List[str]:
        """Get a list of all registered event names."""
        return list(self._routes.keys())

    def register_with_socketio(self, socketio_instance) -> None:
        """Bind every registered route to the SocketIO instance."""
        for event_name in self.get_registered_events():
            socketio_instance.on_event(event_name, self._create_socketio_handler(event_name))
            logger.debug(f"Registered SocketIO handler for: {event_name}")

    def _create_socketio_handler(self, event_name: str) -> Callable:
        def socketio_handler(data=None):
            return self.handle_event(event_name, data)
        socketio_handler.__name__ = f"on_{event_name.replace('-', '_')}"
        return socketio_handler


def request_logging_middleware(event_name: str, data: Any) -> Any:
    """Log the payload of every event at debug level."""
    if data is not None:
        logger.debug(f"Event data for {event_name}: {data}")
    return data


def setup_router() -> SocketEventRouter:
    """Create a router with the standard middleware."""
    router = SocketEventRouter()
    router.add_middleware(request_logging_middleware)

    logger.info("Socket event router initialized")
    return router
