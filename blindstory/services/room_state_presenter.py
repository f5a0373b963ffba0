"""
Room State Presenter - Centralized room state transformation for broadcasts.

This service provides canonical transformations for room data that is sent to
clients. Answers stay blind while a round is being played: the snapshot only
shows which question slots are already filled.
"""

import logging
from typing import Any, Dict, List

from blindstory.core.game_phases import GamePhase
from blindstory.core.models import QUESTION_LABELS, Player, RevealData, Room

logger = logging.getLogger(__name__)


class RoomStatePresenter:
    """Centralized service for transforming room data for client broadcasts."""

    def create_player_data(self, player: Player) -> Dict[str, Any]:
        """Create the public view of a player.

        The previous question is internal bookkeeping and is left out.
        """
        data = player.to_dict()
        data.pop('previous_question', None)
        return data

    def create_player_list(self, room: Room) -> List[Dict[str, Any]]:
        return [self.create_player_data(player) for player in room.players]

    def create_game_state(self, room: Room) -> Dict[str, Any]:
        """Create the game state payload, hiding answer texts before the reveal.

        Args:
            room: Room being broadcast

        Returns:
            Dict safe to send to every member of the room
        """
        state = room.game_state.to_dict()
        if room.phase != GamePhase.REVEAL:
            state['answers'] = {
                question: {'player_id': record['player_id'], 'answered': True}
                for question, record in state['answers'].items()
            }
        return state

    def create_room_snapshot(self, room: Room) -> Dict[str, Any]:
        """Create the full room snapshot sent with room-updated and game-started."""
        return {
            'code': room.code,
            'host_id': room.host_id,
            'players': self.create_player_list(room),
            'settings': room.settings.to_dict(),
            'game_state': self.create_game_state(room),
            'created_at': room.created_at,
        }

    def create_turn_data(self, room: Room, player: Player) -> Dict[str, Any]:
        question = player.assigned_question
        return {
            'question': question.value,
            'label': QUESTION_LABELS[question],
            'round': room.game_state.current_round,
        }

    def create_reveal_data(self, room: Room, reveal: RevealData) -> Dict[str, Any]:
        data = reveal.to_dict()
        data['round'] = room.game_state.current_round
        return data
