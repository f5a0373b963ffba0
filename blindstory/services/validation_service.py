"""
Validation Service for Blind Story

Validates and normalizes inbound Socket.IO payload fields. Answer content is
not checked here; the engine runs it through the answer validator.
"""

import logging
import re
from typing import Any, Dict, Optional

from blindstory.core.errors import ErrorCode, ValidationError
from blindstory.core.models import MAX_ROOM_CAPACITY, MIN_ROOM_CAPACITY

logger = logging.getLogger(__name__)


class ValidationService:
    """Service responsible for input validation and sanitization."""

    MAX_PLAYER_NAME_LENGTH = 20
    MIN_TIMER_SECONDS = 10
    MAX_TIMER_SECONDS = 600

    LANGUAGE_PATTERN = re.compile(r'^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{2,8})?$')

    def __init__(self, game_settings):
        """
        Args:
            game_settings: GameSettings providing the room code shape
        """
        self.room_code_length = game_settings.room_code_length
        self.room_code_alphabet = game_settings.room_code_alphabet

    def validate_room_code(self, room_code: Any) -> str:
        """
        Validate and normalize a room code.

        Returns:
            Upper-cased room code

        Raises:
            ValidationError: If the code is missing or malformed
        """
        if not room_code or not isinstance(room_code, str):
            raise ValidationError(ErrorCode.MISSING_ROOM_CODE, "Room code is required")

        room_code = room_code.strip().upper()
        if not room_code:
            raise ValidationError(ErrorCode.MISSING_ROOM_CODE, "Room code cannot be empty")

        if not self.is_valid_room_code(room_code):
            raise ValidationError(
                ErrorCode.INVALID_ROOM_CODE,
                f"Room code must be {self.room_code_length} letters or digits",
                {"room_code": room_code}
            )
        return room_code

    def is_valid_room_code(self, room_code: str) -> bool:
        """Whether an already normalized code has the generator's shape."""
        return len(room_code) == self.room_code_length and all(c in self.room_code_alphabet for c in room_code)

    def validate_player_name(self, player_name: Any) -> str:
        """
        Validate and sanitize player name.

        Raises:
            ValidationError: If player name is invalid
        """
        if not player_name or not isinstance(player_name, str):
            raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name is required")

        player_name = re.sub(r'\s+', ' ', player_name).strip()
        if not player_name:
            raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name cannot be empty")

        if len(player_name) > self.MAX_PLAYER_NAME_LENGTH:
            raise ValidationError(
                ErrorCode.PLAYER_NAME_TOO_LONG,
                f"Player name must be {self.MAX_PLAYER_NAME_LENGTH} characters or less",
                {"max_length": self.MAX_PLAYER_NAME_LENGTH, "actual_length": len(player_name)}
            )
        return player_name

    def validate_player_id(self, player_id: Any) -> str:
        if not player_id or not isinstance(player_id, str) or not player_id.strip():
            raise ValidationError(ErrorCode.INVALID_DATA, "Player id is required")
        return player_id.strip()

    def validate_settings(self, settings: Any) -> Dict[str, Any]:
        """
        Validate room settings sent by a host.

        Args:
            settings: Raw settings dict (or None); any subset of fields is allowed

        Returns:
            Dict containing only recognised, validated fields

        Raises:
            ValidationError: If any field is out of range
        """
        if settings is None:
            return {}
        if not isinstance(settings, dict):
            raise ValidationError(ErrorCode.INVALID_SETTINGS, "Settings must be an object")

        validated: Dict[str, Any] = {}

        if 'max_players' in settings:
            max_players = settings['max_players']
            if (isinstance(max_players, bool) or not isinstance(max_players, int)
                    or not MIN_ROOM_CAPACITY <= max_players <= MAX_ROOM_CAPACITY):
                raise ValidationError(
                    ErrorCode.INVALID_SETTINGS,
                    f"max_players must be between {MIN_ROOM_CAPACITY} and {MAX_ROOM_CAPACITY}",
                    {"field": "max_players"}
                )
            validated['max_players'] = max_players

        if 'language' in settings:
            language = settings['language']
            if not isinstance(language, str) or not self.LANGUAGE_PATTERN.match(language):
                raise ValidationError(ErrorCode.INVALID_SETTINGS, "language must be a language tag", {"field": "language"})
            validated['language'] = language.lower()

        if 'moderation_enabled' in settings:
            moderation_enabled = settings['moderation_enabled']
            if moderation_enabled is not None and not isinstance(moderation_enabled, bool):
                raise ValidationError(
                    ErrorCode.INVALID_SETTINGS, "moderation_enabled must be true or false", {"field": "moderation_enabled"}
                )
            validated['moderation_enabled'] = moderation_enabled

        if 'timer_seconds' in settings:
            timer_seconds = self._validate_timer(settings['timer_seconds'])
            validated['timer_seconds'] = timer_seconds

        return validated

    def _validate_timer(self, timer_seconds: Any) -> Optional[int]:
        if timer_seconds is None:
            return None
        if (isinstance(timer_seconds, bool) or not isinstance(timer_seconds, int)
                or not self.MIN_TIMER_SECONDS <= timer_seconds <= self.MAX_TIMER_SECONDS):
            raise ValidationError(
                ErrorCode.INVALID_SETTINGS,
                f"timer_seconds must be between {self.MIN_TIMER_SECONDS} and {self.MAX_TIMER_SECONDS}",
                {"field": "timer_seconds"}
            )
        return timer_seconds
