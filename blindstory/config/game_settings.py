"""
Game Settings Configuration Module

Provides centralized access to game-specific configuration values,
replacing hardcoded constants throughout the codebase.
"""

import logging

from blindstory.core.models import RoomSettings

logger = logging.getLogger(__name__)


class GameSettings:
    """Centralized game settings management."""

    def __init__(self, app_config=None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
        """
        self._config = app_config
        if app_config is None:
            try:
                from config_factory import get_config
                self._config = get_config()
            except Exception as e:
                logger.warning(f"Could not load configuration: {e}, using defaults")
                from config_factory import AppConfig
                self._config = AppConfig()

    @property
    def config(self):
        return self._config

    # Room store

    @property
    def store_backend(self) -> str:
        return self._config.store_backend

    @property
    def redis_url(self) -> str:
        return self._config.redis_url

    @property
    def room_key_prefix(self) -> str:
        return self._config.room_key_prefix

    @property
    def room_ttl_seconds(self) -> int:
        """
        Get the sliding expiry applied on every room write.

        Returns:
            Time-to-live in seconds
        """
        return self._config.room_ttl_seconds

    @property
    def store_retry_attempts(self) -> int:
        return self._config.store_retry_attempts

    @property
    def store_retry_backoff_seconds(self) -> float:
        return self._config.store_retry_backoff_seconds

    # Room codes

    @property
    def room_code_length(self) -> int:
        return self._config.room_code_length

    @property
    def room_code_alphabet(self) -> str:
        return self._config.room_code_alphabet

    @property
    def room_code_max_attempts(self) -> int:
        return self._config.room_code_max_attempts

    # Rooms and answers

    @property
    def default_room_settings(self) -> RoomSettings:
        """
        Get the settings a new room starts with when the host sends none.

        Returns:
            Fresh RoomSettings instance
        """
        return RoomSettings(
            max_players=self._config.default_max_players,
            language=self._config.default_language,
        )

    @property
    def max_answer_length(self) -> int:
        return self._config.max_answer_length

    @property
    def moderation_enabled(self) -> bool:
        return self._config.moderation_enabled

    @property
    def moderation_action(self) -> str:
        return self._config.moderation_action

    @property
    def moderation_word_list_file(self) -> str:
        return self._config.moderation_word_list_file

    # Timers

    @property
    def disconnect_grace_seconds(self) -> float:
        """
        Get the grace window before a disconnected player is removed.

        Returns:
            Seconds to wait; 0 means remove immediately
        """
        return self._config.disconnect_grace_seconds

    @property
    def reveal_delay_seconds(self) -> float:
        return self._config.reveal_delay_seconds
