"""
Global pytest configuration and fixtures.
Provides service fixtures for proper dependency injection in tests.
"""

import os
import pytest

# Ensure testing environment before any application module loads configuration
os.environ['TESTING'] = '1'
os.environ['FLASK_ENV'] = 'testing'
os.environ['SOCKETIO_ASYNC_MODE'] = 'threading'
os.environ['STORE_BACKEND'] = 'memory'
os.environ['DISCONNECT_GRACE_SECONDS'] = '0'
os.environ['REVEAL_DELAY_SECONDS'] = '0'
os.environ['STORE_RETRY_BACKOFF_SECONDS'] = '0'
os.environ['MODERATION_WORD_LIST_FILE'] = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'moderation.yaml')


@pytest.fixture(scope="function", autouse=True)
def reset_global_state():
    """Reset the global container and configuration around each test."""
    from container import reset_container
    from config_factory import reset_config, load_config

    reset_container()
    reset_config()
    load_config()

    yield

    from container import get_container
    container = get_container()
    if container.has_service('TimerService'):
        container.get('TimerService').shutdown()
    reset_container()
    reset_config()


@pytest.fixture(scope="function")
def app_and_socketio():
    """Create a fresh Flask app and SocketIO server for one test."""
    from app import create_app
    return create_app()


@pytest.fixture(scope="function")
def app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture(scope="function")
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture(scope="function")
def container(app_and_socketio):
    """The service container wired by create_app()."""
    from container import get_container
    return get_container()


@pytest.fixture(scope="function")
def socket_client_factory(app, socketio):
    """Create Socket.IO test clients and disconnect them afterwards."""
    clients = []

    def make_client():
        client = socketio.test_client(app)
        clients.append(client)
        return client

    yield make_client

    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture(scope="function")
def game_engine(container):
    """Provide GameEngine through dependency injection."""
    return container.get('GameEngine')


@pytest.fixture(scope="function")
def room_store(container):
    """Provide RoomStore through dependency injection."""
    return container.get('RoomStore')


@pytest.fixture(scope="function")
def session_service(container):
    """Provide SessionService through dependency injection."""
    return container.get('SessionService')


@pytest.fixture(scope="function")
def timer_service(container):
    """Provide TimerService through dependency injection."""
    return container.get('TimerService')


@pytest.fixture(scope="function")
def validation_service(container):
    """Provide ValidationService through dependency injection."""
    return container.get('ValidationService')
