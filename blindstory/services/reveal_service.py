"""
Reveal Service for Blind Story

Composes the story sentence from the four answers. Smoothing is a fixed
sequence of textual passes; each pass assumes the previous ones already ran.
"""

import logging
import re
from typing import Callable, List, Optional

from blindstory.core.models import QuestionType, RevealData, Room

logger = logging.getLogger(__name__)

SENTENCE_TEMPLATE = "{who} was {with_whom} {where}, and they did it {how}"

PREPOSITIONS = (
    'with', 'without', 'alongside', 'beside', 'besides', 'next to', 'near',
    'at', 'in', 'on', 'inside', 'outside', 'into', 'onto', 'under', 'over',
    'above', 'below', 'beneath', 'behind', 'by', 'from', 'to', 'toward',
    'towards', 'across', 'around', 'through', 'between', 'among', 'amongst',
    'upon', 'within', 'underneath', 'against',
)

SMALL_WORDS = ('a', 'an', 'the', 'at', 'with', 'to', 'of', 'in', 'on', 'and', 'by', 'for')

# Words spelled with a vowel but read with a consonant sound, and the reverse
CONSONANT_SOUND_PREFIXES = (
    'unic', 'unif', 'unio', 'uniq', 'unit', 'univ', 'use', 'usu', 'uten',
    'uti', 'ubiq', 'eu', 'ewe',
)
CONSONANT_SOUND_WORDS = ('one', 'once', 'ufo', 'uk', 'us')
SILENT_H_PREFIXES = ('hour', 'honest', 'honor', 'honour', 'heir')

_TRAILING_CLAUSE_PUNCTUATION = re.compile(r'[\s.,;:]+$')


def starts_with_preposition(text: str) -> bool:
    lowered = text.lower()
    return any(
        lowered == preposition or lowered.startswith(preposition + ' ')
        for preposition in PREPOSITIONS
    )


def with_preposition(text: str, preposition: str) -> str:
    """Prepend the template preposition unless the answer already has one."""
    return text if starts_with_preposition(text) else f"{preposition} {text}"


def lowercase_first(text: str) -> str:
    """Lowercase the first letter, leaving acronyms and 'I' alone."""
    if not text:
        return text
    first_word = text.split(' ', 1)[0]
    if first_word == 'I' or first_word.startswith('I\'') or (len(first_word) > 1 and first_word.isupper()):
        return text
    return text[0].lower() + text[1:]


# Cleanup passes, applied in this order

def collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def fix_punctuation_spacing(text: str) -> str:
    text = re.sub(r'\s+([,.!?;:])', r'\1', text)
    return re.sub(r'([,;:!?])(?=[^\s\d,.!?;:])', r'\1 ', text)


def dedupe_punctuation(text: str) -> str:
    return re.sub(r'([,.!?;:])\1+', r'\1', text)


def capitalize_first(text: str) -> str:
    for index, char in enumerate(text):
        if char.isalpha():
            return text[:index] + char.upper() + text[index + 1:]
    return text


def ensure_terminal_punctuation(text: str) -> str:
    return text if text.endswith(('.', '!', '?')) else text + '.'


def starts_with_vowel_sound(word: str) -> bool:
    """Spelling-based guess, with the common exceptions either way."""
    lowered = word.lower()
    if lowered.startswith(SILENT_H_PREFIXES):
        return True
    head = re.match(r'[a-z]*', lowered).group()
    if head in CONSONANT_SOUND_WORDS or lowered.startswith(CONSONANT_SOUND_PREFIXES):
        return False
    return lowered[:1] in ('a', 'e', 'i', 'o', 'u')


def fix_indefinite_articles(text: str) -> str:
    def replace(match):
        article, word = match.group(1), match.group(2)
        if starts_with_vowel_sound(word):
            article += 'n'
        return f"{article} {word}"

    return re.sub(r"\b([Aa]) ([A-Za-z][\w'-]*)", replace, text)


def collapse_repeated_small_words(text: str) -> str:
    pattern = r'\b(' + '|'.join(SMALL_WORDS) + r') \1\b'
    return re.sub(pattern, r'\1', text, flags=re.IGNORECASE)


def remove_comma_before_final_period(text: str) -> str:
    return re.sub(r',\s*([.!?])$', r'\1', text)


CLEANUP_PASSES: List[Callable[[str], str]] = [
    collapse_whitespace,
    fix_punctuation_spacing,
    dedupe_punctuation,
    capitalize_first,
    ensure_terminal_punctuation,
    fix_indefinite_articles,
    collapse_repeated_small_words,
    remove_comma_before_final_period,
]


def smooth_sentence(text: str) -> str:
    for cleanup in CLEANUP_PASSES:
        text = cleanup(text)
    return text


def compose_sentence(who: str, with_whom: str, where: str, how: str) -> str:
    """
    Build the story sentence from four answers.

    >>> compose_sentence("Alice", "a dragon", "the moon", "accidentally")
    'Alice was with a dragon at the moon, and they did it accidentally.'
    """
    clauses = [_TRAILING_CLAUSE_PUNCTUATION.sub('', part.strip()) for part in (who, with_whom, where)]
    sentence = SENTENCE_TEMPLATE.format(
        who=clauses[0],
        with_whom=with_preposition(clauses[1], 'with'),
        where=with_preposition(clauses[2], 'at'),
        how=lowercase_first(how.strip()),
    )
    return smooth_sentence(sentence)


def generate_reveal(room: Room) -> Optional[RevealData]:
    """
    Build the reveal for a room.

    Returns:
        RevealData, or None unless all four question slots hold an answer
    """
    answers = room.game_state.answers
    if not room.game_state.all_slots_filled():
        logger.warning(f"Reveal requested for room {room.code} with unfilled slots")
        return None

    who = answers[QuestionType.WHO].answer
    with_whom = answers[QuestionType.WITH_WHOM].answer
    where = answers[QuestionType.WHERE].answer
    how = answers[QuestionType.HOW].answer
    return RevealData(
        who=who,
        with_whom=with_whom,
        where=where,
        how=how,
        sentence=compose_sentence(who, with_whom, where, how),
    )
