"""
Error Response Factory for Blind Story

Provides standardized error and success response creation, plus the
``with_error_handling`` decorator every Socket.IO handler is wrapped in.
Errors are always sent to the requesting client only, never broadcast.
"""

import logging
import traceback
from functools import wraps
from typing import Dict, Any, Optional

from flask_socketio import emit

from blindstory.core.errors import ErrorCode, GameError

logger = logging.getLogger(__name__)


class ErrorResponseFactory:
    """Factory responsible for creating standardized error and success responses."""

    def create_success_response(self, data: Dict) -> Dict:
        """
        Create standardized success response.

        Args:
            data: Response data

        Returns:
            Standardized success response
        """
        return {
            "success": True,
            "data": data
        }

    def create_error_response(self, code: ErrorCode, message: str, details: Optional[Dict] = None) -> Dict:
        """
        Create standardized error response.

        Args:
            code: Error code enum
            message: Human-readable error message
            details: Optional additional error details

        Returns:
            Standardized error response
        """
        return {
            "success": False,
            "error": {
                "code": code.value,
                "message": message,
                "details": details or {}
            }
        }

    def emit_error(self, code: ErrorCode, message: str, details: Optional[Dict] = None) -> Dict:
        """
        Emit standardized error response to the requesting client.

        Returns:
            The emitted response, so handlers can also return it as an ack
        """
        error_response = self.create_error_response(code, message, details)

        logger.warning(f"Emitting error: {code.value} - {message}")
        emit('error', error_response)
        return error_response

    def emit_game_error(self, error: GameError) -> Dict:
        """Emit a GameError (client, authorization, startup or store) to the client."""
        return self.emit_error(error.code, error.message, error.details)

    def handle_exception(self, e: Exception, context: str = "Unknown") -> tuple[ErrorCode, str]:
        """
        Map an exception to the error code and message shown to the client.

        Args:
            e: Exception instance
            context: Context where the exception occurred

        Returns:
            Tuple of (error_code, error_message)
        """
        if isinstance(e, GameError):
            return e.code, e.message

        logger.error(f"Unexpected exception in {context}: {str(e)}")
        logger.error(f"Exception traceback: {traceback.format_exc()}")

        return ErrorCode.INTERNAL_ERROR, "An internal error occurred"


def with_error_handling(func):
    """
    Decorator for Socket.IO handler methods.

    GameError subclasses are reported to the caller with their own code;
    anything else is logged and reported as INTERNAL_ERROR. The error
    response is returned so it also reaches clients that asked for an ack.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        factory = ErrorResponseFactory()
        try:
            return func(*args, **kwargs)
        except GameError as e:
            logger.info(f"{func.__name__} rejected: {e.code.value} - {e.message}")
            return factory.emit_game_error(e)
        except Exception as e:
            code, message = factory.handle_exception(e, func.__name__)
            return factory.emit_error(code, message)

    return wrapper
