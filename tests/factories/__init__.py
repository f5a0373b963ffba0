"""
Test factories for building engines and rooms in known states.
"""

from .game_factory import build_engine, build_game_settings, fill_room, answer_all
from .room_factory import RoomFactory, PlayerFactory

__all__ = [
    'build_engine',
    'build_game_settings',
    'fill_room',
    'answer_all',
    'RoomFactory',
    'PlayerFactory'
]
