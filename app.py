"""
Blind Story - a party game where every player answers one question without
seeing the others, and the answers are read out as a single sentence.
Main Flask application entry point focusing on app creation, dependency injection, and service wiring.
"""

from flask import Flask
from flask_socketio import SocketIO
import logging
import atexit
import sys
import yaml

from blindstory.word_list_manager import WordListValidationError
from container import configure_container
from config_factory import load_config, ConfigurationFactory

logger = logging.getLogger(__name__)


def create_app():
    """
    Build the Flask app and its SocketIO server from environment configuration.

    Returns:
        Tuple of (app, socketio)
    """
    app = Flask(__name__)

    app_config = load_config()
    config_factory = ConfigurationFactory()
    app.config.update(config_factory.get_flask_config())

    logging.basicConfig(level=getattr(logging, app_config.log_level.upper(), logging.INFO))

    # In production, only the configured origins may connect; an empty list means same-origin only
    if app_config.is_production:
        socketio = SocketIO(app, cors_allowed_origins=app_config.allowed_origins or [],
                            async_mode=app_config.socketio_async_mode)
    else:
        socketio = SocketIO(app, cors_allowed_origins="*", async_mode=app_config.socketio_async_mode)

    container = configure_container(socketio=socketio, config=config_factory.to_dict())

    # The word list must be valid before any answer is accepted
    word_list_manager = container.get('WordListManager')
    try:
        word_list_manager.load_word_list_from_yaml()
        logger.info(f"Loaded {word_list_manager.get_word_count()} moderation words")
    except (FileNotFoundError, yaml.YAMLError, WordListValidationError) as e:
        logger.critical(f"FATAL: Moderation word list failed validation. Server shutting down. Error: {e}")
        sys.exit(1)
    container.get('AnswerValidator').use_word_list(word_list_manager)

    from blindstory.routes.api import create_api_blueprint
    api_services = {
        'game_engine': container.get('GameEngine'),
        'validation_service': container.get('ValidationService'),
    }
    app.register_blueprint(create_api_blueprint(api_services))

    from blindstory.handlers.socket_handlers import register_socket_handlers
    register_socket_handlers(socketio, app_config)

    timer_service = container.get('TimerService')

    def cleanup_on_exit():
        """Cancel pending timers on application exit."""
        logger.info("Shutting down Blind Story server...")
        timer_service.shutdown()

    atexit.register(cleanup_on_exit)

    return app, socketio


if __name__ == '__main__':
    app, socketio = create_app()
    app_config = load_config()
    logger.info(f"Starting Blind Story server on {app_config.host}:{app_config.port}")
    try:
        socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
