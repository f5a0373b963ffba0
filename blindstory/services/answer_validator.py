"""
Answer Validator for Blind Story

Validates and cleans submitted answers against the length and content policy.
``validate_answer`` is a pure function of its inputs; ``AnswerValidator`` only
binds it to the configured limits and word list.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

MODERATION_REJECT = 'reject'
MODERATION_REDACT = 'redact'

_WHITESPACE = re.compile(r'\s+')
_WORD = re.compile(r"[A-Za-z0-9']+")


@dataclass(frozen=True)
class AnswerValidation:
    is_valid: bool
    cleaned_text: str = ''
    error: Optional[str] = None


class ProfanityFilter:
    """Whole-word, case-insensitive matcher over a fixed word list."""

    def __init__(self, banned_words: Iterable[str], allowed_words: Iterable[str] = ()):
        self._banned = frozenset(word.lower() for word in banned_words)
        self._allowed = frozenset(word.lower() for word in allowed_words)

    def _is_banned(self, word: str) -> bool:
        lowered = word.lower()
        return lowered in self._banned and lowered not in self._allowed

    def is_profane(self, text: str) -> bool:
        return any(self._is_banned(match.group(0)) for match in _WORD.finditer(text))

    def clean(self, text: str) -> str:
        """Replace every banned word with asterisks of the same length."""
        return _WORD.sub(
            lambda m: '*' * len(m.group(0)) if self._is_banned(m.group(0)) else m.group(0),
            text
        )


def validate_answer(text, max_length: int = 100, moderation_enabled: bool = True,
                    profanity_filter: Optional[ProfanityFilter] = None,
                    moderation_action: str = MODERATION_REJECT) -> AnswerValidation:
    """
    Validate and clean a raw answer.

    Rules run in order: empty or whitespace-only, too long, then moderation
    (reject or redact) when enabled and a filter is available.

    Args:
        text: Raw answer from the client
        max_length: Longest accepted answer, in characters, after trimming
        moderation_enabled: Whether the word list is applied
        profanity_filter: Word-list filter; moderation is skipped without one
        moderation_action: 'reject' refuses the answer, 'redact' masks words

    Returns:
        AnswerValidation with the cleaned text or the reason for rejection
    """
    if not isinstance(text, str):
        return AnswerValidation(False, error='Answer must be text')

    cleaned = _WHITESPACE.sub(' ', text).strip()
    if not cleaned:
        return AnswerValidation(False, error='Answer cannot be empty')

    if len(cleaned) > max_length:
        return AnswerValidation(False, error=f'Answer is too long (max {max_length} characters)')

    if moderation_enabled and profanity_filter is not None and profanity_filter.is_profane(cleaned):
        if moderation_action == MODERATION_REDACT:
            return AnswerValidation(True, cleaned_text=profanity_filter.clean(cleaned))
        return AnswerValidation(False, error='Answer contains inappropriate content')

    return AnswerValidation(True, cleaned_text=cleaned)


class AnswerValidator:
    """Answer policy bound to configuration and the loaded word list."""

    def __init__(self, game_settings, word_list_manager=None):
        self.max_length = game_settings.max_answer_length
        self.moderation_enabled = game_settings.moderation_enabled
        self.moderation_action = game_settings.moderation_action
        self.profanity_filter: Optional[ProfanityFilter] = None
        if word_list_manager is not None:
            self.use_word_list(word_list_manager)

    def use_word_list(self, word_list_manager) -> None:
        """Rebuild the filter from a (re)loaded word list."""
        if word_list_manager.is_loaded():
            self.profanity_filter = ProfanityFilter(
                word_list_manager.banned_words, word_list_manager.allowed_words
            )
        else:
            logger.warning("Word list not loaded; answers will not be moderated")
            self.profanity_filter = None

    def validate(self, text, moderation_enabled: Optional[bool] = None) -> AnswerValidation:
        """Validate with the room's moderation override, if it has one."""
        if moderation_enabled is None:
            moderation_enabled = self.moderation_enabled
        return validate_answer(
            text,
            max_length=self.max_length,
            moderation_enabled=moderation_enabled,
            profanity_filter=self.profanity_filter,
            moderation_action=self.moderation_action,
        )
