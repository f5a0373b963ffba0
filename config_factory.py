"""
Configuration Factory - Centralized configuration management for Blind Story
Provides type-safe configuration with validation and environment-specific settings.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from enum import Enum
from dataclasses import dataclass, field


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


DEFAULT_SECRET_KEY = 'dev-secret-key-change-in-production'
DEFAULT_ROOM_CODE_ALPHABET = '23456789ABCDEFGHJKLMNPQRSTUVWXYZ'


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Core Flask settings
    secret_key: str = field(default_factory=lambda: DEFAULT_SECRET_KEY)
    debug: bool = False
    flask_env: str = 'development'  # Default to development for safety

    # Server settings
    host: str = '0.0.0.0'
    port: int = 5000
    socketio_async_mode: str = 'eventlet'
    cors_allowed_origins: str = ''  # comma-separated, production only

    # Room store
    store_backend: str = 'memory'
    redis_url: str = 'redis://localhost:6379/0'
    room_key_prefix: str = 'bldsty:room:'
    room_ttl_seconds: int = 14400  # 4 hours, refreshed on every write
    store_retry_attempts: int = 3
    store_retry_backoff_seconds: float = 0.05

    # Room codes
    room_code_length: int = 6
    room_code_alphabet: str = DEFAULT_ROOM_CODE_ALPHABET
    room_code_max_attempts: int = 10

    # Room defaults
    default_max_players: int = 8
    default_language: str = 'en'

    # Answers and moderation
    max_answer_length: int = 100  # characters
    moderation_enabled: bool = True
    moderation_action: str = 'reject'  # reject | redact
    moderation_word_list_file: str = 'moderation.yaml'

    # Timers
    disconnect_grace_seconds: float = 30.0  # 0 removes players immediately
    reveal_delay_seconds: float = 1.0

    # Gunicorn settings (for production deployment)
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2
    log_level: str = 'info'

    # Environment
    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.port < 1 or self.port > 65535:
            raise ConfigError(f"Invalid port number: {self.port}")

        if self.socketio_async_mode not in ('eventlet', 'threading', 'gevent'):
            raise ConfigError(f"Invalid socketio_async_mode: {self.socketio_async_mode}")

        if self.store_backend not in ('memory', 'redis'):
            raise ConfigError(f"Invalid store_backend: {self.store_backend}")

        if self.room_ttl_seconds < 60 or self.room_ttl_seconds > 7 * 24 * 3600:
            raise ConfigError(f"Invalid room_ttl_seconds: {self.room_ttl_seconds}")

        if self.store_retry_attempts < 1 or self.store_retry_attempts > 10:
            raise ConfigError(f"Invalid store_retry_attempts: {self.store_retry_attempts}")

        if self.store_retry_backoff_seconds < 0 or self.store_retry_backoff_seconds > 5:
            raise ConfigError(f"Invalid store_retry_backoff_seconds: {self.store_retry_backoff_seconds}")

        if self.room_code_length < 4 or self.room_code_length > 12:
            raise ConfigError(f"Invalid room_code_length: {self.room_code_length}")

        if len(set(self.room_code_alphabet)) < 10:
            raise ConfigError("room_code_alphabet needs at least 10 distinct characters")

        if self.room_code_max_attempts < 1 or self.room_code_max_attempts > 100:
            raise ConfigError(f"Invalid room_code_max_attempts: {self.room_code_max_attempts}")

        if self.default_max_players < 4 or self.default_max_players > 12:
            raise ConfigError(f"Invalid default_max_players: {self.default_max_players}")

        if self.max_answer_length < 10 or self.max_answer_length > 1000:
            raise ConfigError(f"Invalid max_answer_length: {self.max_answer_length}")

        if self.moderation_action not in ('reject', 'redact'):
            raise ConfigError(f"Invalid moderation_action: {self.moderation_action}")

        if self.disconnect_grace_seconds < 0 or self.disconnect_grace_seconds > 600:
            raise ConfigError(f"Invalid disconnect_grace_seconds: {self.disconnect_grace_seconds}")

        if self.reveal_delay_seconds < 0 or self.reveal_delay_seconds > 30:
            raise ConfigError(f"Invalid reveal_delay_seconds: {self.reveal_delay_seconds}")

        if self.environment == Environment.PRODUCTION and self.secret_key == DEFAULT_SECRET_KEY:
            raise ConfigError("Production environment requires a secure SECRET_KEY")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment == Environment.TESTING

    @property
    def allowed_origins(self) -> list:
        """CORS allowlist parsed from the comma-separated setting"""
        return [o.strip() for o in self.cors_allowed_origins.split(',') if o.strip()]


class ConfigurationFactory:
    """
    Factory for creating and managing application configuration.

    Features:
    - Environment variable loading with type conversion
    - Configuration validation
    - Environment-specific defaults
    - Singleton pattern for global config access
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[AppConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'BLINDSTORY_')

        Returns:
            Configured AppConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None:
                return default

            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            elif var_type == int:
                try:
                    return int(value)
                except ValueError:
                    self._logger.warning(f"Invalid integer value for {env_key}: {value}, using default: {default}")
                    return default
            elif var_type == float:
                try:
                    return float(value)
                except ValueError:
                    self._logger.warning(f"Invalid float value for {env_key}: {value}, using default: {default}")
                    return default
            else:
                return value

        flask_env = get_env_var('FLASK_ENV', 'development')  # Default to development for safety
        if flask_env == 'development':
            environment = Environment.DEVELOPMENT
            debug = True
        elif flask_env == 'testing':
            environment = Environment.TESTING
            debug = True
        else:
            environment = Environment.PRODUCTION
            debug = False

        config = AppConfig(
            # Core Flask settings
            secret_key=get_env_var('SECRET_KEY', DEFAULT_SECRET_KEY),
            debug=get_env_var('DEBUG', debug, bool),
            flask_env=flask_env,

            # Server settings
            host=get_env_var('HOST', '0.0.0.0'),
            port=get_env_var('PORT', 5000, int),
            socketio_async_mode=get_env_var('SOCKETIO_ASYNC_MODE', 'eventlet'),
            cors_allowed_origins=get_env_var('SOCKETIO_CORS_ALLOWED_ORIGINS', ''),

            # Room store
            store_backend=get_env_var('STORE_BACKEND', 'memory'),
            redis_url=get_env_var('REDIS_URL', 'redis://localhost:6379/0'),
            room_key_prefix=get_env_var('ROOM_KEY_PREFIX', 'bldsty:room:'),
            room_ttl_seconds=get_env_var('ROOM_TTL_SECONDS', 14400, int),
            store_retry_attempts=get_env_var('STORE_RETRY_ATTEMPTS', 3, int),
            store_retry_backoff_seconds=get_env_var('STORE_RETRY_BACKOFF_SECONDS', 0.05, float),

            # Room codes
            room_code_length=get_env_var('ROOM_CODE_LENGTH', 6, int),
            room_code_alphabet=get_env_var('ROOM_CODE_ALPHABET', DEFAULT_ROOM_CODE_ALPHABET),
            room_code_max_attempts=get_env_var('ROOM_CODE_MAX_ATTEMPTS', 10, int),

            # Room defaults
            default_max_players=get_env_var('DEFAULT_MAX_PLAYERS', 8, int),
            default_language=get_env_var('DEFAULT_LANGUAGE', 'en'),

            # Answers and moderation
            max_answer_length=get_env_var('MAX_ANSWER_LENGTH', 100, int),
            moderation_enabled=get_env_var('MODERATION_ENABLED', True, bool),
            moderation_action=get_env_var('MODERATION_ACTION', 'reject'),
            moderation_word_list_file=get_env_var('MODERATION_WORD_LIST_FILE', 'moderation.yaml'),

            # Timers
            disconnect_grace_seconds=get_env_var('DISCONNECT_GRACE_SECONDS', 30.0, float),
            reveal_delay_seconds=get_env_var('REVEAL_DELAY_SECONDS', 1.0, float),

            # Gunicorn settings
            worker_connections=get_env_var('WORKER_CONNECTIONS', 1000, int),
            timeout=get_env_var('TIMEOUT', 30, int),
            keepalive=get_env_var('KEEPALIVE', 2, int),
            log_level=get_env_var('LOG_LEVEL', 'info'),

            environment=environment
        )

        # Apply any manual overrides
        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)
        config._validate()

        self._config = config
        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured AppConfig instance
        """
        config_dict = dict(config_dict)
        if 'environment' in config_dict and isinstance(config_dict['environment'], str):
            config_dict['environment'] = Environment(config_dict['environment'])

        self._config = AppConfig(**config_dict)
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()  # Re-validate after change

        return self

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Returns:
            Current AppConfig instance

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def is_loaded(self) -> bool:
        return self._config is not None

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            value = getattr(self._config, field_info.name)
            if isinstance(value, Environment):
                config_dict[field_info.name] = value.value
            else:
                config_dict[field_info.name] = value

        return config_dict

    def get_flask_config(self) -> Dict[str, Any]:
        """
        Get Flask-compatible configuration dictionary.

        Returns:
            Dictionary suitable for Flask app.config.update()
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        return {
            'SECRET_KEY': self._config.secret_key,
            'DEBUG': self._config.debug,
            'ENV': self._config.flask_env,
            'DEFAULT_MAX_PLAYERS': self._config.default_max_players,
            'MAX_ANSWER_LENGTH': self._config.max_answer_length,
            'ROOM_TTL_SECONDS': self._config.room_ttl_seconds,
        }


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> AppConfig:
    """Get the global application configuration"""
    return _config_factory.get_config()


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """Load configuration from dictionary"""
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    """Override a configuration setting"""
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
