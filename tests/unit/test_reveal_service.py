"""
Reveal Service Unit Tests

Tests for sentence composition, preposition handling and the ordered cleanup
passes.
"""

import pytest

from blindstory.core.models import QuestionType
from blindstory.services.reveal_service import (
    CLEANUP_PASSES,
    capitalize_first,
    collapse_repeated_small_words,
    compose_sentence,
    dedupe_punctuation,
    ensure_terminal_punctuation,
    fix_indefinite_articles,
    fix_punctuation_spacing,
    generate_reveal,
    lowercase_first,
    remove_comma_before_final_period,
    smooth_sentence,
    starts_with_preposition,
)
from tests.factories import RoomFactory


class TestComposeSentence:
    """Test the story template"""

    def test_reference_sentence(self):
        """Test the plain four-answer story"""
        assert compose_sentence('Alice', 'a dragon', 'the moon', 'accidentally') == \
            'Alice was with a dragon at the moon, and they did it accidentally.'

    def test_existing_prepositions_not_doubled(self):
        """Test answers that start with a preposition keep it"""
        sentence = compose_sentence('Bob', 'beside a goat', 'in the kitchen', 'loudly')

        assert sentence == 'Bob was beside a goat in the kitchen, and they did it loudly.'

    def test_repeated_with_collapsed(self):
        """Test an answer starting with 'with' is not prefixed again"""
        assert compose_sentence('Bob', 'with Carol', 'home', 'quickly') == \
            'Bob was with Carol at home, and they did it quickly.'

    def test_how_clause_lowercased(self):
        """Test the how answer is lowercased mid-sentence"""
        assert compose_sentence('Bob', 'Carol', 'Paris', 'Very Slowly').endswith('they did it very Slowly.')

    def test_how_clause_keeps_acronyms_and_i(self):
        """Test acronyms and 'I' keep their capital"""
        assert compose_sentence('Bob', 'Carol', 'Paris', 'NASA style').endswith('they did it NASA style.')
        assert compose_sentence('Bob', 'Carol', 'Paris', 'I guess').endswith('they did it I guess.')

    def test_first_letter_capitalized(self):
        """Test the sentence starts with a capital"""
        assert compose_sentence('my cat', 'a dog', 'the park', 'happily').startswith('My cat was')

    def test_trailing_punctuation_in_clauses_removed(self):
        """Test answers ending in punctuation do not break the sentence"""
        assert compose_sentence('Alice.', 'a dragon,', 'the moon.', 'accidentally!') == \
            'Alice was with a dragon at the moon, and they did it accidentally!'

    def test_article_fixed(self):
        """Test 'a' before a vowel becomes 'an'"""
        assert compose_sentence('Bob', 'a owl', 'a igloo', 'gently') == \
            'Bob was with an owl at an igloo, and they did it gently.'


class TestCleanupPasses:
    """Test each cleanup pass on its own"""

    def test_pass_order(self):
        """Test passes run in the documented order"""
        assert [p.__name__ for p in CLEANUP_PASSES] == [
            'collapse_whitespace',
            'fix_punctuation_spacing',
            'dedupe_punctuation',
            'capitalize_first',
            'ensure_terminal_punctuation',
            'fix_indefinite_articles',
            'collapse_repeated_small_words',
            'remove_comma_before_final_period',
        ]

    def test_fix_punctuation_spacing(self):
        """Test spaces move from before punctuation to after it"""
        assert fix_punctuation_spacing('one ,two') == 'one, two'

    def test_dedupe_punctuation(self):
        """Test repeated punctuation collapses"""
        assert dedupe_punctuation('wow!!! ok,,') == 'wow! ok,'

    def test_capitalize_first(self):
        """Test the first letter is capitalized even after punctuation"""
        assert capitalize_first('"hello"') == '"Hello"'

    def test_ensure_terminal_punctuation(self):
        """Test a period is added only when missing"""
        assert ensure_terminal_punctuation('Hi') == 'Hi.'
        assert ensure_terminal_punctuation('Hi?') == 'Hi?'

    def test_fix_indefinite_articles(self):
        """Test a/an correction keeps the original case"""
        assert fix_indefinite_articles('A apple and a egg') == 'An apple and an egg'

    @pytest.mark.parametrize('text, expected', [
        ('a unicorn', 'a unicorn'),
        ('a university', 'a university'),
        ('a European', 'a European'),
        ('a one-legged pirate', 'a one-legged pirate'),
        ('a hour', 'an hour'),
        ('a honest mistake', 'an honest mistake'),
        ('a umbrella', 'an umbrella'),
        ('a dragon', 'a dragon'),
    ])
    def test_fix_indefinite_articles_by_sound(self, text, expected):
        """Test the article follows how the next word sounds"""
        assert fix_indefinite_articles(text) == expected

    def test_collapse_repeated_small_words(self):
        """Test doubled function words collapse"""
        assert collapse_repeated_small_words('at at the the park') == 'at the park'

    def test_remove_comma_before_final_period(self):
        """Test a dangling comma before the end is removed"""
        assert remove_comma_before_final_period('and so,.') == 'and so.'

    def test_smooth_sentence(self):
        """Test the full pipeline on a messy sentence"""
        assert smooth_sentence('  the  the cat sat ,on a egg ,') == 'The cat sat, on an egg.'

    @pytest.mark.parametrize('text, expected', [
        ('with a friend', True),
        ('next to him', True),
        ('within reason', True),
        ('withering heights', False),
        ('a dragon', False),
    ])
    def test_starts_with_preposition(self, text, expected):
        """Test preposition detection needs a whole word"""
        assert starts_with_preposition(text) is expected

    def test_lowercase_first_empty(self):
        """Test empty text is left alone"""
        assert lowercase_first('') == ''


class TestGenerateReveal:
    """Test reveal data for a room"""

    def test_all_slots_filled(self):
        """Test a complete room gives the reference sentence"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers())

        reveal = generate_reveal(room)

        assert reveal.sentence == 'Alice was with a dragon at the moon, and they did it accidentally.'
        assert reveal.to_dict() == {
            'who': 'Alice',
            'with_whom': 'a dragon',
            'where': 'the moon',
            'how': 'accidentally',
            'sentence': 'Alice was with a dragon at the moon, and they did it accidentally.',
        }

    @pytest.mark.parametrize('missing', list(QuestionType))
    def test_missing_slot_gives_none(self, missing):
        """Test any missing slot yields no reveal"""
        answers = RoomFactory.story_answers()
        del answers[missing]

        assert generate_reveal(RoomFactory.create_with_answers(answers)) is None
