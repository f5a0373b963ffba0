"""
Core error definitions for Blind Story

Provides error codes and the exception taxonomy shared by the engine and the
Socket.IO layer. Nothing in here depends on other services.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Payload and session errors
    INVALID_DATA = "INVALID_DATA"
    MISSING_ROOM_CODE = "MISSING_ROOM_CODE"
    INVALID_ROOM_CODE = "INVALID_ROOM_CODE"
    MISSING_PLAYER_NAME = "MISSING_PLAYER_NAME"
    PLAYER_NAME_TOO_LONG = "PLAYER_NAME_TOO_LONG"
    INVALID_SETTINGS = "INVALID_SETTINGS"
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"
    NOT_IN_ROOM = "NOT_IN_ROOM"

    # Room membership errors
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    GAME_IN_PROGRESS = "GAME_IN_PROGRESS"
    ROOM_FULL = "ROOM_FULL"
    NAME_TAKEN = "NAME_TAKEN"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    CANNOT_KICK_SELF = "CANNOT_KICK_SELF"
    REJOIN_FAILED = "REJOIN_FAILED"

    # Game flow errors
    INVALID_STATE = "INVALID_STATE"
    INSUFFICIENT_PLAYERS = "INSUFFICIENT_PLAYERS"
    PLAYER_OR_ASSIGNMENT_MISSING = "PLAYER_OR_ASSIGNMENT_MISSING"
    ALREADY_ANSWERED = "ALREADY_ANSWERED"
    INVALID_ANSWER = "INVALID_ANSWER"

    # Authorization
    NOT_HOST = "NOT_HOST"

    # System errors
    ROOM_CODE_EXHAUSTED = "ROOM_CODE_EXHAUSTED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GameError(Exception):
    """Base class for every error the game reports back to a client."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, code: Optional[ErrorCode], message: str, details: Optional[Dict] = None):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ClientRequestError(GameError):
    """The request cannot be honoured in the current room state.

    Reported to the originating caller only and never mutates state.
    """

    default_code = ErrorCode.INVALID_STATE


class ValidationError(ClientRequestError):
    """Custom exception for malformed or out-of-range payloads."""

    default_code = ErrorCode.INVALID_DATA


class AuthorizationError(GameError):
    """A non-host attempted a host-only action."""

    default_code = ErrorCode.NOT_HOST


class FatalStartupError(GameError):
    """A room could not be created (no free room code after bounded retries)."""

    default_code = ErrorCode.ROOM_CODE_EXHAUSTED


class TransientStoreError(GameError):
    """The room store is unreachable. Callers may retry a bounded number of times."""

    default_code = ErrorCode.STORE_UNAVAILABLE
