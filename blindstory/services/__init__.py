"""
Services package for Blind Story

Contains the service classes wired together by the container.
"""

from .room_store import RoomStore, InMemoryRoomStore, RedisRoomStore, create_room_store
from .room_code_generator import RoomCodeGenerator
from .answer_validator import AnswerValidator, ProfanityFilter, validate_answer
from .question_assignment_service import QuestionAssignmentService
from .concurrency_control_service import ConcurrencyControlService
from .session_service import SessionService
from .timer_service import TimerService
from .room_state_presenter import RoomStatePresenter

__all__ = [
    'RoomStore',
    'InMemoryRoomStore',
    'RedisRoomStore',
    'create_room_store',
    'RoomCodeGenerator',
    'AnswerValidator',
    'ProfanityFilter',
    'validate_answer',
    'QuestionAssignmentService',
    'ConcurrencyControlService',
    'SessionService',
    'TimerService',
    'RoomStatePresenter'
]
