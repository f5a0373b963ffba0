"""
Service Container - Dependency Injection Container for Blind Story
Manages service creation, dependencies, and lifecycle.
"""

from typing import Dict, Any, List, Optional, Callable
import inspect
from enum import Enum


class ServiceLifecycle(Enum):
    """Service lifecycle management options"""
    SINGLETON = "singleton"  # One instance per container
    TRANSIENT = "transient"  # New instance every time


class ServiceDefinition:
    """Definition of how a service should be created"""

    def __init__(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON,
        config: Dict[str, Any] = None
    ):
        self.name = name
        self.factory = factory
        self.dependencies = dependencies or []
        self.lifecycle = lifecycle
        self.config = config or {}


class CircularDependencyError(Exception):
    """Raised when circular dependency is detected"""
    pass


class ServiceNotFoundError(Exception):
    """Raised when requested service is not registered"""
    pass


def _create_room_code_generator(room_store, game_settings):
    from blindstory.services.room_code_generator import RoomCodeGenerator
    return RoomCodeGenerator(
        room_store,
        length=game_settings.room_code_length,
        alphabet=game_settings.room_code_alphabet,
        max_attempts=game_settings.room_code_max_attempts,
    )


def _create_word_list_manager(game_settings):
    from blindstory.word_list_manager import WordListManager
    return WordListManager(game_settings.moderation_word_list_file)


class ServiceContainer:
    """
    Dependency Injection Container for managing services and their dependencies.

    Services are registered by name with an explicit dependency list. Classes
    are called with their resolved dependencies; plain functions additionally
    receive the service's config as keyword arguments. External objects such
    as the SocketIO instance are injected with set_external_dependency.
    """

    def __init__(self):
        self._services: Dict[str, ServiceDefinition] = {}
        self._instances: Dict[str, Any] = {}
        self._creating: List[str] = []  # Resolution stack, for cycle reporting
        self._config: Dict[str, Any] = {}

    def register(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON,
        config: Dict[str, Any] = None
    ) -> 'ServiceContainer':
        """
        Register a service with the container.

        Args:
            name: Service name for retrieval
            factory: Class or function to create the service
            dependencies: Names of the services passed positionally to the factory
            lifecycle: How the service instance should be managed
            config: Keyword arguments for function factories

        Returns:
            Self for method chaining
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")

        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        self._services[name] = ServiceDefinition(
            name=name,
            factory=factory,
            dependencies=dependencies,
            lifecycle=lifecycle,
            config=config
        )
        return self

    def configure_services(self) -> 'ServiceContainer':
        """
        Register all Blind Story services with their dependencies.
        This method contains the service configuration for the application.
        """
        from blindstory.config.game_settings import GameSettings
        from blindstory.game_engine import GameEngine
        from blindstory.services.room_store import create_room_store
        from blindstory.services.answer_validator import AnswerValidator
        from blindstory.services.question_assignment_service import QuestionAssignmentService
        from blindstory.services.concurrency_control_service import ConcurrencyControlService
        from blindstory.services.validation_service import ValidationService
        from blindstory.services.error_response_factory import ErrorResponseFactory
        from blindstory.services.session_service import SessionService
        from blindstory.services.timer_service import TimerService
        from blindstory.services.room_state_presenter import RoomStatePresenter
        from blindstory.services.broadcast_service import BroadcastService
        from blindstory.services.game_flow_service import GameFlowService
        from blindstory.services.disconnect_service import DisconnectService

        # Settings (no dependencies)
        self.register('GameSettings', GameSettings)

        # Storage and room codes
        self.register('RoomStore', create_room_store, dependencies=['GameSettings'])
        self.register('RoomCodeGenerator', _create_room_code_generator, dependencies=['RoomStore', 'GameSettings'])

        # Answer checking
        self.register('WordListManager', _create_word_list_manager, dependencies=['GameSettings'])
        self.register('AnswerValidator', AnswerValidator, dependencies=['GameSettings', 'WordListManager'])

        # Stateless helpers and per-process bookkeeping
        self.register('QuestionAssignmentService', QuestionAssignmentService)
        self.register('ConcurrencyControlService', ConcurrencyControlService)
        self.register('ErrorResponseFactory', ErrorResponseFactory)
        self.register('SessionService', SessionService)
        self.register('TimerService', TimerService)
        self.register('RoomStatePresenter', RoomStatePresenter)
        self.register('ValidationService', ValidationService, dependencies=['GameSettings'])

        # Game engine - the only writer of room state
        self.register('GameEngine', GameEngine, dependencies=[
            'RoomStore', 'RoomCodeGenerator', 'QuestionAssignmentService',
            'AnswerValidator', 'ConcurrencyControlService', 'GameSettings'
        ])

        # Broadcast service - socketio is injected as an external dependency
        self.register('BroadcastService', BroadcastService, dependencies=['socketio', 'RoomStatePresenter'])

        self.register('GameFlowService', GameFlowService, dependencies=[
            'GameEngine', 'BroadcastService', 'TimerService', 'GameSettings'
        ])
        self.register('DisconnectService', DisconnectService, dependencies=[
            'GameEngine', 'SessionService', 'BroadcastService', 'TimerService',
            'GameFlowService', 'ConcurrencyControlService', 'GameSettings'
        ])

        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """
        Set an external dependency that's created outside the container.
        Also used by tests to replace a registered service with a double.
        """
        self._instances[name] = instance
        return self

    def set_config(self, config: Dict[str, Any]) -> 'ServiceContainer':
        """Set global configuration for the container"""
        self._config.update(config)
        return self

    def get_config(self) -> Dict[str, Any]:
        return dict(self._config)

    def get(self, name: str) -> Any:
        """
        Get a service instance, creating it if necessary.

        Raises:
            ServiceNotFoundError: If service is not registered
            CircularDependencyError: If circular dependency detected
        """
        if name in self._instances:
            return self._instances[name]

        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")

        return self._create_service(name)

    def _create_service(self, name: str) -> Any:
        if name in self._creating:
            cycle = ' -> '.join(self._creating + [name])
            raise CircularDependencyError(f"Circular dependency detected: {cycle}")

        self._creating.append(name)
        try:
            service_def = self._services[name]
            dependencies = [self.get(dep_name) for dep_name in service_def.dependencies]

            if inspect.isclass(service_def.factory):
                instance = service_def.factory(*dependencies)
            else:
                instance = service_def.factory(*dependencies, **service_def.config)

            if service_def.lifecycle == ServiceLifecycle.SINGLETON:
                self._instances[name] = instance
            return instance
        finally:
            self._creating.remove(name)

    def has_service(self, name: str) -> bool:
        """Check if a service is registered"""
        return name in self._services

    def get_service_names(self) -> List[str]:
        """Get list of all registered service names"""
        return list(self._services.keys())

    def validate_dependencies(self) -> Dict[str, List[str]]:
        """
        Validate all service dependencies can be resolved.

        Returns:
            Dictionary mapping service names to lists of missing dependencies
        """
        issues = {}
        for name, service_def in self._services.items():
            missing_deps = [
                dep for dep in service_def.dependencies
                if not self.has_service(dep) and dep not in self._instances
            ]
            if missing_deps:
                issues[name] = missing_deps
        return issues

    def clear(self) -> 'ServiceContainer':
        """Clear all services and instances (useful for testing)"""
        self._services.clear()
        self._instances.clear()
        self._creating.clear()
        self._config.clear()
        return self

    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)}, instances={len(self._instances)})"


# Global container instance for the application
_app_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global application service container"""
    global _app_container
    if _app_container is None:
        _app_container = ServiceContainer()
    return _app_container


def configure_container(socketio=None, config=None) -> ServiceContainer:
    """
    Configure the global service container with Blind Story services.

    Args:
        socketio: Flask-SocketIO instance
        config: Application configuration as a dict

    Returns:
        Configured service container
    """
    container = get_container()
    container.clear()

    if socketio is not None:
        container.set_external_dependency('socketio', socketio)

    if config is not None:
        container.set_config(config)

    container.configure_services()
    return container


def reset_container() -> None:
    """Drop the global container (useful for testing)."""
    global _app_container
    if _app_container is not None:
        _app_container.clear()
    _app_container = None
