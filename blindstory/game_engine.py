"""
Game Engine for Blind Story

The room state machine: create, join, remove, toggle ready, start, submit,
reveal, new round and reset to lobby. Every operation loads the room from the
store, checks it against the current phase, mutates it and saves it back
while holding the room's lock, so operations on one room never interleave.

Failures that the caller caused raise ClientRequestError and leave the stored
room untouched. The engine never retries store failures; that is left to the
Socket.IO layer.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from blindstory.core.errors import ClientRequestError, ErrorCode
from blindstory.core.game_phases import GamePhase, can_transition
from blindstory.core.models import (
    MIN_PLAYERS_TO_START, QUESTIONS, Player, QuestionType, RevealData, Room, RoomSettings, AnswerRecord,
)
from blindstory.services.reveal_service import generate_reveal

logger = logging.getLogger(__name__)

# Filled in for players who run out the turn timer
TIMEOUT_PLACEHOLDERS = {
    QuestionType.WHO: "Someone",
    QuestionType.WITH_WHOM: "someone",
    QuestionType.WHERE: "some place",
    QuestionType.HOW: "somehow",
}


@dataclass
class SubmitResult:
    room: Room
    should_reveal: bool = False


class GameEngine:
    """Room lifecycle and round flow over the room store."""

    def __init__(self, room_store, room_code_generator, question_assignment_service,
                 answer_validator, concurrency_control_service, game_settings):
        self.room_store = room_store
        self.room_code_generator = room_code_generator
        self.question_assignment_service = question_assignment_service
        self.answer_validator = answer_validator
        self.concurrency_control_service = concurrency_control_service
        self.game_settings = game_settings

    # Helpers

    def _require_room(self, code: str) -> Room:
        room = self.room_store.get(code)
        if room is None:
            raise ClientRequestError(ErrorCode.ROOM_NOT_FOUND, 'Room not found', {'room_code': code})
        return room

    def _delete_room(self, code: str) -> None:
        self.room_store.delete(code)
        self.concurrency_control_service.cleanup_room_lock(code)
        logger.info(f"Room {code} deleted (empty)")

    @staticmethod
    def _set_phase(room: Room, phase: GamePhase) -> None:
        if not can_transition(room.phase, phase):
            raise ClientRequestError(
                ErrorCode.INVALID_STATE,
                f'Cannot move from {room.phase.value} to {phase.value}'
            )
        room.game_state.phase = phase

    def _begin_round(self, room: Room) -> None:
        if len(room.players) < MIN_PLAYERS_TO_START:
            raise ClientRequestError(
                ErrorCode.INSUFFICIENT_PLAYERS,
                f'Need at least {MIN_PLAYERS_TO_START} players to start',
                {'player_count': len(room.players), 'required': MIN_PLAYERS_TO_START}
            )
        state = room.game_state
        self.question_assignment_service.assign(room.players, state.rotation_index)
        self._set_phase(room, GamePhase.PLAYING)
        state.current_round += 1
        state.current_turn_index = 0
        state.answers = {}
        state.question_order = list(QUESTIONS)
        state.rotation_index += 1

    @staticmethod
    def _reset_room_state(room: Room) -> None:
        state = room.game_state
        state.phase = GamePhase.LOBBY
        state.current_round = 0
        state.current_turn_index = 0
        state.answers = {}
        state.question_order = list(QUESTIONS)
        state.rotation_index = 0
        for player in room.players:
            player.clear_round_state()

    @staticmethod
    def _hand_off_question(room: Room, question: QuestionType) -> Optional[Player]:
        """Give an orphaned, unanswered question to the earliest spectator."""
        for player in room.players:
            if player.assigned_question is None:
                player.assigned_question = question
                player.has_answered = False
                return player
        return None

    # Lifecycle

    def get_room(self, code: str) -> Optional[Room]:
        return self.room_store.get(code)

    def create_room(self, host_id: str, host_name: str, settings: Optional[RoomSettings] = None) -> Room:
        """
        Create a room with a single host player.

        Raises:
            FatalStartupError: If no free room code could be generated
        """
        code = self.room_code_generator.generate()
        with self.concurrency_control_service.room_operation(code):
            room = Room(
                code=code,
                host_id=host_id,
                players=[Player(id=host_id, name=host_name, is_host=True)],
                settings=settings or self.game_settings.default_room_settings,
            )
            self.room_store.save(room)
        logger.info(f"Room {code} created by {host_name} ({host_id})")
        return room

    def join_room(self, code: str, player_id: str, name: str) -> Room:
        """
        Add a non-host player to a lobby.

        Raises:
            ClientRequestError: ROOM_NOT_FOUND, GAME_IN_PROGRESS, ROOM_FULL or NAME_TAKEN
        """
        with self.concurrency_control_service.room_operation(code):
            room = self._require_room(code)
            if room.phase != GamePhase.LOBBY:
                raise ClientRequestError(ErrorCode.GAME_IN_PROGRESS, 'Game already in progress')
            if len(room.players) >= room.settings.max_players:
                raise ClientRequestError(
                    ErrorCode.ROOM_FULL, 'Room is full', {'max_players': room.settings.max_players}
                )
            if room.has_player_named(name):
                raise ClientRequestError(ErrorCode.NAME_TAKEN, 'Name already taken')

            room.players.append(Player(id=player_id, name=name))
            self.room_store.save(room)
            logger.info(f"Player {name} ({player_id}) joined room {code}")
            return room

    def remove_player(self, code: str, player_id: str) -> Optional[Room]:
        """
        Remove a player, promoting a new host if needed.

        Outside the lobby, a departure that leaves fewer than four players
        sends the room back to the lobby; otherwise the departed player's
        unanswered question goes to the earliest spectator.

        Returns:
            The updated room, or None when the room is gone (it was missing,
            or this removal emptied and deleted it)
        """
        with self.concurrency_control_service.room_operation(code):
            room = self.room_store.get(code)
            if room is None:
                return None
            leaving = room.get_player(player_id)
            if leaving is None:
                return room

            room.players = [player for player in room.players if player.id != player_id]
            if not room.players:
                self._delete_room(code)
                return None

            if leaving.is_host:
                new_host = room.players[0]
                new_host.is_host = True
                room.host_id = new_host.id
                logger.info(f"Host of room {code} passed to {new_host.name} ({new_host.id})")

            if room.phase != GamePhase.LOBBY:
                if len(room.players) < MIN_PLAYERS_TO_START:
                    self._reset_room_state(room)
                    logger.info(f"Room {code} returned to lobby: not enough players after {leaving.name} left")
                elif (room.phase == GamePhase.PLAYING and leaving.assigned_question is not None
                        and not leaving.has_answered):
                    heir = self._hand_off_question(room, leaving.assigned_question)
                    if heir is not None:
                        logger.info(f"Question {leaving.assigned_question.value} in room {code} handed to {heir.name}")

            self.room_store.save(room)
            logger.info(f"Player {leaving.name} ({player_id}) removed from room {code}")
            return room

    def rebind_player(self, code: str, old_id: str, new_id: str) -> Optional[Room]:
        """
        Move a player record to a new connection id, keeping host and answers.

        Returns:
            The updated room, or None if the room or player no longer exists
        """
        with self.concurrency_control_service.room_operation(code):
            room = self.room_store.get(code)
            if room is None:
                return None
            player = room.get_player(old_id)
            if player is None:
                return None

            player.id = new_id
            if room.host_id == old_id:
                room.host_id = new_id
            for record in room.game_state.answers.values():
                if record.player_id == old_id:
                    record.player_id = new_id
            self.room_store.save(room)
            logger.info(f"Player {player.name} in room {code} rebound from {old_id} to {new_id}")
            return room

    def toggle_ready(self, code: str, player_id: str) -> Room:
        """Flip a player's ready flag. Only meaningful in the lobby."""
        with self.concurrency_control_service.room_operation(code):
            room = self._require_room(code)
            if room.phase != GamePhase.LOBBY:
                raise ClientRequestError(ErrorCode.INVALID_STATE, 'Ready state can only change in the lobby')
            player = room.get_player(player_id)
            if player is None:
                raise ClientRequestError(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            player.is_ready = not player.is_ready
            self.room_store.save(room)
            return room

    # Round flow

    def start_game(self, code: str) -> Optional[Room]:
        """
        Start the first round from the lobby.

        Returns:
            The updated room, or None if the room is missing or not in the lobby

        Raises:
            ClientRequestError: INSUFFICIENT_PLAYERS with fewer than four players
        """
        with self.concurrency_control_service.room_operation(code):
            room = self.room_store.get(code)
            if room is None or room.phase != GamePhase.LOBBY:
                return None
            self._begin_round(room)
            self.room_store.save(room)
            logger.info(f"Game started in room {code} (round {room.game_state.current_round})")
            return room

    def submit_answer(self, code: str, player_id: str, raw_answer: Any) -> SubmitResult:
        """
        Record a player's answer for their assigned question.

        Raises:
            ClientRequestError: ROOM_NOT_FOUND, INVALID_STATE,
                PLAYER_OR_ASSIGNMENT_MISSING, ALREADY_ANSWERED or INVALID_ANSWER
        """
        with self.concurrency_control_service.room_operation(code):
            room = self._require_room(code)
            if room.phase != GamePhase.PLAYING:
                raise ClientRequestError(ErrorCode.INVALID_STATE, 'Invalid game state')

            player = room.get_player(player_id)
            if player is None or player.assigned_question is None:
                raise ClientRequestError(
                    ErrorCode.PLAYER_OR_ASSIGNMENT_MISSING, 'Player not found or no question assigned'
                )
            if player.has_answered:
                raise ClientRequestError(ErrorCode.ALREADY_ANSWERED, 'Already answered')

            validation = self.answer_validator.validate(raw_answer, room.settings.moderation_enabled)
            if not validation.is_valid:
                raise ClientRequestError(ErrorCode.INVALID_ANSWER, validation.error)

            room.game_state.answers[player.assigned_question] = AnswerRecord(player.id, validation.cleaned_text)
            player.has_answered = True

            should_reveal = room.game_state.all_slots_filled()
            if should_reveal:
                self._set_phase(room, GamePhase.REVEAL)
                logger.info(f"All answers in for room {code}, round {room.game_state.current_round}")

            self.room_store.save(room)
            return SubmitResult(room=room, should_reveal=should_reveal)

    def expire_turn(self, code: str, round_number: int) -> Optional[SubmitResult]:
        """
        Fill every unanswered slot with a placeholder when the turn timer runs out.

        Returns:
            The result, or None if the round already moved on
        """
        with self.concurrency_control_service.room_operation(code):
            room = self.room_store.get(code)
            if (room is None or room.phase != GamePhase.PLAYING
                    or room.game_state.current_round != round_number):
                return None

            for player in room.players:
                question = player.assigned_question
                if question is not None and not player.has_answered:
                    room.game_state.answers[question] = AnswerRecord(player.id, TIMEOUT_PLACEHOLDERS[question])
                    player.has_answered = True
            for question in QUESTIONS:
                if question not in room.game_state.answers:
                    room.game_state.answers[question] = AnswerRecord('', TIMEOUT_PLACEHOLDERS[question])

            self._set_phase(room, GamePhase.REVEAL)
            self.room_store.save(room)
            logger.info(f"Turn timer expired in room {code}, round {round_number}")
            return SubmitResult(room=room, should_reveal=True)

    def generate_reveal(self, room: Room) -> Optional[RevealData]:
        return generate_reveal(room)

    def start_new_round(self, code: str) -> Optional[Room]:
        """
        Start the next round after a reveal.

        Returns:
            The updated room, or None if the room is missing or not in reveal
        """
        with self.concurrency_control_service.room_operation(code):
            room = self.room_store.get(code)
            if room is None or room.phase != GamePhase.REVEAL:
                return None
            self._begin_round(room)
            self.room_store.save(room)
            logger.info(f"Round {room.game_state.current_round} started in room {code}")
            return room

    def reset_to_lobby(self, code: str, new_settings: Optional[Dict[str, Any]] = None) -> Optional[Room]:
        """
        Send the room back to the lobby from any phase.

        Args:
            code: Room code
            new_settings: Optional partial settings overrides, already validated

        Returns:
            The updated room, or None if the room is missing
        """
        with self.concurrency_control_service.room_operation(code):
            room = self.room_store.get(code)
            if room is None:
                return None
            if new_settings:
                room.settings = room.settings.merged(new_settings)
            self._reset_room_state(room)
            self.room_store.save(room)
            logger.info(f"Room {code} reset to lobby")
            return room
