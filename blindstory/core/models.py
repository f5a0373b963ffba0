"""
Room data model for Blind Story

Rooms are the unit of persistence and broadcast. They are stored as JSON
snapshots, so every model here round-trips through plain dictionaries.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from blindstory.core.game_phases import GamePhase


class QuestionType(Enum):
    """The four fixed story questions, in template order."""
    WHO = "who"
    WITH_WHOM = "withWhom"
    WHERE = "where"
    HOW = "how"


QUESTIONS: List[QuestionType] = [
    QuestionType.WHO,
    QuestionType.WITH_WHOM,
    QuestionType.WHERE,
    QuestionType.HOW,
]

QUESTION_LABELS = {
    QuestionType.WHO: "Who?",
    QuestionType.WITH_WHOM: "With whom?",
    QuestionType.WHERE: "Where?",
    QuestionType.HOW: "How?",
}

MIN_PLAYERS_TO_START = len(QUESTIONS)
MIN_ROOM_CAPACITY = 4
MAX_ROOM_CAPACITY = 12


def _question_or_none(value: Optional[str]) -> Optional[QuestionType]:
    return QuestionType(value) if value else None


@dataclass
class Player:
    id: str
    name: str
    is_host: bool = False
    is_ready: bool = False
    assigned_question: Optional[QuestionType] = None
    has_answered: bool = False
    previous_question: Optional[QuestionType] = None

    def clear_round_state(self) -> None:
        """Forget everything tied to rounds (used when returning to the lobby)."""
        self.assigned_question = None
        self.has_answered = False
        self.previous_question = None
        self.is_ready = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_host": self.is_host,
            "is_ready": self.is_ready,
            "assigned_question": self.assigned_question.value if self.assigned_question else None,
            "has_answered": self.has_answered,
            "previous_question": self.previous_question.value if self.previous_question else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            id=data["id"],
            name=data["name"],
            is_host=bool(data.get("is_host", False)),
            is_ready=bool(data.get("is_ready", False)),
            assigned_question=_question_or_none(data.get("assigned_question")),
            has_answered=bool(data.get("has_answered", False)),
            previous_question=_question_or_none(data.get("previous_question")),
        )


@dataclass
class RoomSettings:
    max_players: int = 8
    language: str = "en"
    moderation_enabled: Optional[bool] = None
    timer_seconds: Optional[int] = None

    def merged(self, overrides: Optional[Dict[str, Any]]) -> "RoomSettings":
        """Return a copy with the given partial overrides applied."""
        values = self.to_dict()
        for key, value in (overrides or {}).items():
            if key in values:
                values[key] = value
        return RoomSettings.from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_players": self.max_players,
            "language": self.language,
            "moderation_enabled": self.moderation_enabled,
            "timer_seconds": self.timer_seconds,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomSettings":
        return cls(
            max_players=int(data.get("max_players", 8)),
            language=data.get("language", "en"),
            moderation_enabled=data.get("moderation_enabled"),
            timer_seconds=data.get("timer_seconds"),
        )


@dataclass
class AnswerRecord:
    player_id: str
    answer: str

    def to_dict(self) -> Dict[str, str]:
        return {"player_id": self.player_id, "answer": self.answer}


@dataclass
class GameState:
    phase: GamePhase = GamePhase.LOBBY
    current_round: int = 0
    answers: Dict[QuestionType, AnswerRecord] = field(default_factory=dict)
    current_turn_index: int = 0
    question_order: List[QuestionType] = field(default_factory=lambda: list(QUESTIONS))
    rotation_index: int = 0

    def all_slots_filled(self) -> bool:
        return all(question in self.answers for question in QUESTIONS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "current_round": self.current_round,
            "answers": {question.value: record.to_dict() for question, record in self.answers.items()},
            "current_turn_index": self.current_turn_index,
            "question_order": [question.value for question in self.question_order],
            "rotation_index": self.rotation_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        answers = {
            QuestionType(key): AnswerRecord(record["player_id"], record["answer"])
            for key, record in (data.get("answers") or {}).items()
        }
        return cls(
            phase=GamePhase(data.get("phase", GamePhase.LOBBY.value)),
            current_round=int(data.get("current_round", 0)),
            answers=answers,
            current_turn_index=int(data.get("current_turn_index", 0)),
            question_order=[QuestionType(q) for q in data.get("question_order") or [q.value for q in QUESTIONS]],
            rotation_index=int(data.get("rotation_index", 0)),
        )


@dataclass
class Room:
    code: str
    host_id: str
    players: List[Player] = field(default_factory=list)
    settings: RoomSettings = field(default_factory=RoomSettings)
    game_state: GameState = field(default_factory=GameState)
    created_at: float = field(default_factory=time.time)

    @property
    def phase(self) -> GamePhase:
        return self.game_state.phase

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def has_player_named(self, name: str) -> bool:
        return any(player.name == name for player in self.players)

    def active_players(self) -> List[Player]:
        """Players holding a question this round."""
        return [player for player in self.players if player.assigned_question is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "host_id": self.host_id,
            "players": [player.to_dict() for player in self.players],
            "settings": self.settings.to_dict(),
            "game_state": self.game_state.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        return cls(
            code=data["code"],
            host_id=data["host_id"],
            players=[Player.from_dict(p) for p in data.get("players", [])],
            settings=RoomSettings.from_dict(data.get("settings") or {}),
            game_state=GameState.from_dict(data.get("game_state") or {}),
            created_at=float(data.get("created_at", time.time())),
        )


@dataclass
class RevealData:
    who: str
    with_whom: str
    where: str
    how: str
    sentence: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "who": self.who,
            "with_whom": self.with_whom,
            "where": self.where,
            "how": self.how,
            "sentence": self.sentence,
        }
