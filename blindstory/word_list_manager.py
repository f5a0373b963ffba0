"""
Word List Manager for Blind Story

Handles loading and validation of the YAML moderation word list used by the
profanity filter.
"""

import yaml
import logging
from typing import Any, FrozenSet

logger = logging.getLogger(__name__)


class WordListValidationError(Exception):
    """Raised when the moderation word list is malformed."""
    pass


class WordListManager:
    """Manages loading and validation of the moderation word list."""

    def __init__(self, yaml_file_path: str = "moderation.yaml"):
        """
        Initialize WordListManager with path to YAML file.

        Args:
            yaml_file_path: Path to the YAML file containing banned words
        """
        self.yaml_file_path = yaml_file_path
        self.banned_words: FrozenSet[str] = frozenset()
        self.allowed_words: FrozenSet[str] = frozenset()
        self._loaded = False

    def load_word_list_from_yaml(self) -> None:
        """
        Load the banned and allowed words from the YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            WordListValidationError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        try:
            with open(self.yaml_file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)

            self.validate_yaml_structure(data)
            self.banned_words = frozenset(word.strip().lower() for word in data['banned_words'])
            self.allowed_words = frozenset(word.strip().lower() for word in data.get('allowed_words') or [])
            self._loaded = True
            logger.info(f"Loaded {len(self.banned_words)} banned words from {self.yaml_file_path}")

        except FileNotFoundError:
            logger.error(f"Word list file not found: {self.yaml_file_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            raise
        except WordListValidationError as e:
            logger.error(f"Word list validation error: {e}")
            raise

    def validate_yaml_structure(self, data: Any) -> None:
        """
        Validate the structure of loaded YAML data.

        Raises:
            WordListValidationError: If structure is invalid
        """
        if not isinstance(data, dict):
            raise WordListValidationError("YAML root must be a dictionary")

        if 'banned_words' not in data:
            raise WordListValidationError("YAML must contain 'banned_words' key")

        for key in ('banned_words', 'allowed_words'):
            words = data.get(key)
            if words is None and key == 'allowed_words':
                continue
            if not isinstance(words, list):
                raise WordListValidationError(f"'{key}' must be a list")
            for i, word in enumerate(words):
                if not isinstance(word, str) or not word.strip():
                    raise WordListValidationError(f"'{key}' entry {i} must be a non-empty string")

        if not data['banned_words']:
            raise WordListValidationError("'banned_words' list cannot be empty")

    def is_loaded(self) -> bool:
        return self._loaded

    def get_word_count(self) -> int:
        return len(self.banned_words)
