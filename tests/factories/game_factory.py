"""
Engine factory for unit tests: real services over an in-memory store.
"""

import random

from config_factory import AppConfig
from blindstory.config.game_settings import GameSettings
from blindstory.game_engine import GameEngine
from blindstory.services.answer_validator import AnswerValidator, ProfanityFilter
from blindstory.services.concurrency_control_service import ConcurrencyControlService
from blindstory.services.question_assignment_service import QuestionAssignmentService
from blindstory.services.room_code_generator import RoomCodeGenerator
from blindstory.services.room_store import InMemoryRoomStore

TEST_BANNED_WORDS = ['darn', 'heck']


def build_game_settings(**overrides):
    """GameSettings over a default AppConfig with the given field overrides."""
    return GameSettings(AppConfig(**overrides))


def build_engine(room_store=None, seed=1234, game_settings=None, **config_overrides):
    """
    Build a GameEngine wired to real services.

    Args:
        room_store: Store to use; defaults to a fresh InMemoryRoomStore
        seed: Seed for room codes and question shuffles
        game_settings: Settings to use; built from config_overrides if omitted
    """
    game_settings = game_settings or build_game_settings(**config_overrides)
    room_store = room_store or InMemoryRoomStore(ttl_seconds=game_settings.room_ttl_seconds)

    answer_validator = AnswerValidator(game_settings)
    answer_validator.profanity_filter = ProfanityFilter(TEST_BANNED_WORDS)

    return GameEngine(
        room_store=room_store,
        room_code_generator=RoomCodeGenerator(
            room_store,
            length=game_settings.room_code_length,
            alphabet=game_settings.room_code_alphabet,
            rng=random.Random(seed),
        ),
        question_assignment_service=QuestionAssignmentService(rng=random.Random(seed)),
        answer_validator=answer_validator,
        concurrency_control_service=ConcurrencyControlService(),
        game_settings=game_settings,
    )


def fill_room(engine, names=('Amy', 'Bo', 'Cy', 'Dee'), settings=None):
    """Create a room hosted by the first name and join the rest. Player ids are 'p-<name>'."""
    host, *others = names
    room = engine.create_room(f'p-{host}', host, settings)
    for name in others:
        room = engine.join_room(room.code, f'p-{name}', name)
    return room


def answer_all(engine, room_code, answers=None):
    """Submit an answer for every active player; returns the last SubmitResult."""
    room = engine.get_room(room_code)
    answers = answers or {}
    result = None
    for player in room.active_players():
        text = answers.get(player.assigned_question, f'answer from {player.name}')
        result = engine.submit_answer(room_code, player.id, text)
    return result
