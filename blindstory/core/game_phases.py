"""
Game Phase Enumeration

Defines the game phase states and the transitions allowed between them.
"""

from enum import Enum


class GamePhase(Enum):
    """Game phase enumeration."""
    LOBBY = "lobby"
    PLAYING = "playing"
    REVEAL = "reveal"


# Reset to lobby is handled separately since it is valid from any phase
VALID_TRANSITIONS = {
    GamePhase.LOBBY: {GamePhase.PLAYING},
    GamePhase.PLAYING: {GamePhase.REVEAL},
    GamePhase.REVEAL: {GamePhase.PLAYING, GamePhase.LOBBY},
}


def can_transition(current: GamePhase, target: GamePhase) -> bool:
    """Check whether moving from ``current`` to ``target`` is a legal phase change."""
    return target in VALID_TRANSITIONS.get(current, set())
