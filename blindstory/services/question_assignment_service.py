"""
Question Assignment Service for Blind Story

Maps players to the four fixed question slots for a new round.

Rooms with more than four players rotate 4-player cohorts: cohort ``k`` is
made of the players at positions ``(4k + i) mod n`` for ``i`` in 0..3, so the
last cohort wraps around to the start of the player list and every round still
fills exactly four slots. Players outside the active cohort sit the round out
as spectators.
"""

import logging
import math
import random
from typing import List, Optional

from blindstory.core.models import MIN_PLAYERS_TO_START, QUESTIONS, Player, QuestionType

logger = logging.getLogger(__name__)

COHORT_SIZE = len(QUESTIONS)


class QuestionAssignmentService:
    """Assigns questions with repeat avoidance and cohort rotation."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source used to shuffle players; pass a seeded
                ``random.Random`` for reproducible assignments
        """
        self._rng = rng or random.Random()

    @staticmethod
    def cohort_count(player_count: int) -> int:
        return max(1, math.ceil(player_count / COHORT_SIZE))

    def select_cohort(self, players: List[Player], rotation_index: int) -> List[Player]:
        """
        Pick the players who answer this round.

        Args:
            players: Room players in join order
            rotation_index: Round-by-round rotation counter

        Returns:
            The active players, in join order for rooms of four or fewer
        """
        count = len(players)
        if count <= COHORT_SIZE:
            return list(players)

        cohort = rotation_index % self.cohort_count(count)
        start = cohort * COHORT_SIZE
        return [players[(start + offset) % count] for offset in range(COHORT_SIZE)]

    def assign(self, players: List[Player], rotation_index: int = 0) -> List[Player]:
        """
        Assign questions for a new round, mutating the players in place.

        Every player's previous question becomes the question they held, their
        answer flag is cleared, and only the active cohort receives a new
        question. Within the cohort, players are shuffled and each takes the
        first free question that differs from their previous one; a swap
        repair then removes any repeat the greedy pass was forced into.

        Args:
            players: Room players in join order
            rotation_index: Round-by-round rotation counter

        Returns:
            The active players for this round

        Raises:
            ValueError: If fewer than four players are present
        """
        if len(players) < MIN_PLAYERS_TO_START:
            raise ValueError(f"Need at least {MIN_PLAYERS_TO_START} players, got {len(players)}")

        for player in players:
            player.previous_question = player.assigned_question
            player.assigned_question = None
            player.has_answered = False

        active = self.select_cohort(players, rotation_index)
        order = list(active)
        self._rng.shuffle(order)

        remaining: List[QuestionType] = list(QUESTIONS)
        for player in order:
            choice = next((q for q in remaining if q != player.previous_question), remaining[0])
            remaining.remove(choice)
            player.assigned_question = choice

        self._repair_repeats(order)

        logger.debug(
            "Assigned questions: "
            + ", ".join(f"{p.name}={p.assigned_question.value}" for p in active)
        )
        return active

    @staticmethod
    def _repair_repeats(active: List[Player]) -> None:
        """Swap away any question a player held in the previous round.

        Previous questions are pairwise distinct within a room (each round
        hands out each question once), so a partner that can take the repeated
        question always exists and the greedy fallback never survives.
        """
        for player in active:
            if player.assigned_question is None or player.assigned_question != player.previous_question:
                continue
            for partner in active:
                if partner is player:
                    continue
                if (partner.assigned_question != player.previous_question
                        and partner.previous_question != player.assigned_question):
                    player.assigned_question, partner.assigned_question = (
                        partner.assigned_question, player.assigned_question
                    )
                    break
            else:
                logger.warning(f"Could not avoid repeating {player.assigned_question.value} for {player.name}")
