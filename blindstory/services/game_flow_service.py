"""
Game Flow Service for Blind Story

Drives what happens around a round once the engine has changed the room:
announcing the round, the dramatic pause before the reveal and the optional
turn timer. All scheduled work goes through the TimerService so it can be
cancelled by new-round, reset and room deletion.
"""

import logging
from typing import Optional

from blindstory.core.game_phases import GamePhase
from blindstory.core.models import Room
from blindstory.services.timer_service import reveal_key, turn_key
from blindstory.utils.error_handling import call_with_store_retry

logger = logging.getLogger(__name__)


class GameFlowService:
    """Round announcements, reveal delivery and turn timers."""

    def __init__(self, game_engine, broadcast_service, timer_service, game_settings):
        self.game_engine = game_engine
        self.broadcast_service = broadcast_service
        self.timer_service = timer_service
        self.game_settings = game_settings

    def call_engine(self, operation, *args, **kwargs):
        """Run an engine operation with the configured store retry policy."""
        return call_with_store_retry(
            operation, *args,
            attempts=self.game_settings.store_retry_attempts,
            backoff_seconds=self.game_settings.store_retry_backoff_seconds,
            **kwargs
        )

    def announce_round(self, room: Room) -> None:
        """Broadcast a freshly started round and arm its turn timer."""
        self.cancel_round_timers(room.code)
        self.broadcast_service.broadcast_game_started(room)
        self.broadcast_service.broadcast_room_update(room)

        timer_seconds = room.settings.timer_seconds
        if timer_seconds:
            self.timer_service.schedule(
                turn_key(room.code), timer_seconds,
                self.expire_turn, room.code, room.game_state.current_round
            )

    def handle_submission(self, room: Room, should_reveal: bool) -> None:
        """Broadcast progress after an answer and schedule the reveal once complete."""
        self.broadcast_service.broadcast_room_update(room)
        if should_reveal:
            self.timer_service.cancel(turn_key(room.code))
            self.schedule_reveal(room)

    def schedule_reveal(self, room: Room) -> None:
        self.timer_service.schedule(
            reveal_key(room.code), self.game_settings.reveal_delay_seconds,
            self.deliver_reveal, room.code, room.game_state.current_round
        )

    def deliver_reveal(self, room_code: str, round_number: int) -> None:
        """Send the reveal, unless the room moved on during the pause."""
        room = self.call_engine(self.game_engine.get_room, room_code)
        if room is None or room.phase != GamePhase.REVEAL or room.game_state.current_round != round_number:
            logger.info(f"Skipping stale reveal for room {room_code}, round {round_number}")
            return

        reveal = self.game_engine.generate_reveal(room)
        if reveal is None:
            return
        self.broadcast_service.broadcast_reveal(room, reveal)

    def expire_turn(self, room_code: str, round_number: int) -> Optional[Room]:
        """Turn timer callback: fill missing answers and reveal."""
        result = self.call_engine(self.game_engine.expire_turn, room_code, round_number)
        if result is None:
            return None
        self.handle_submission(result.room, result.should_reveal)
        return result.room

    def announce_reset(self, room: Room) -> None:
        self.cancel_round_timers(room.code)
        self.broadcast_service.broadcast_game_reset(room)
        self.broadcast_service.broadcast_room_update(room)

    def cancel_round_timers(self, room_code: str) -> None:
        self.timer_service.cancel(reveal_key(room_code))
        self.timer_service.cancel(turn_key(room_code))
