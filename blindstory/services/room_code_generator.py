"""
Room Code Generator for Blind Story

Produces short, human-typable room codes and checks them against the store.
"""

import logging
import random
from typing import Optional

from blindstory.core.errors import ErrorCode, FatalStartupError

logger = logging.getLogger(__name__)

# Uppercase letters and digits without the look-alikes 0/O and 1/I
DEFAULT_ALPHABET = '23456789ABCDEFGHJKLMNPQRSTUVWXYZ'


class RoomCodeGenerator:
    """Generates room codes that are unique among live rooms."""

    def __init__(self, room_store, length: int = 6, alphabet: str = DEFAULT_ALPHABET,
                 max_attempts: int = 10, rng: Optional[random.Random] = None):
        self.room_store = room_store
        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts
        self._rng = rng or random.SystemRandom()

    def random_code(self) -> str:
        return ''.join(self._rng.choice(self.alphabet) for _ in range(self.length))

    def generate(self) -> str:
        """
        Generate a code no live room currently uses.

        Returns:
            A fresh room code

        Raises:
            FatalStartupError: If every attempt collided with a live room
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.random_code()
            if not self.room_store.exists(code):
                return code
            logger.debug(f"Room code collision on attempt {attempt}: {code}")

        logger.critical(f"Failed to generate unique room code after {self.max_attempts} attempts")
        raise FatalStartupError(
            ErrorCode.ROOM_CODE_EXHAUSTED,
            "Failed to generate unique room code",
            {"attempts": self.max_attempts}
        )
