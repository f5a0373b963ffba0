"""
Gunicorn configuration for Blind Story.
Socket.IO needs a single eventlet worker: room locks, sessions and timers live in process.
"""

import sys
import logging
import yaml
from blindstory.word_list_manager import WordListManager, WordListValidationError
from config_factory import load_config


def on_starting(server):
    """
    Validate the moderation word list before workers are forked.
    If validation fails, we exit, preventing the server from starting.
    """
    logger = logging.getLogger(__name__)
    word_list_file = app_config.moderation_word_list_file
    logger.info(f"Validating {word_list_file} before starting workers...")
    try:
        word_list_manager = WordListManager(word_list_file)
        word_list_manager.load_word_list_from_yaml()
        logger.info(f"Successfully validated {word_list_manager.get_word_count()} moderation words.")
    except (FileNotFoundError, yaml.YAMLError, WordListValidationError) as e:
        logger.critical(f"FATAL: Moderation word list validation failed. Server shutting down. Error: {e}")
        sys.exit(1)


# Named app_config to avoid clashing with gunicorn's own 'config'
app_config = load_config()

# Server socket
bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

# Worker processes
workers = 1
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

# Logging
accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level

# Process naming
proc_name = "blindstory"

# Server mechanics
preload_app = False  # Don't preload for Socket.IO
daemon = False
