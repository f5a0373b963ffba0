"""
Answer Validator Unit Tests

Tests for the pure validation function, the profanity filter and the
configured validator wrapper.
"""

import pytest
from unittest.mock import Mock

from blindstory.services.answer_validator import AnswerValidator, ProfanityFilter, validate_answer
from tests.factories import build_game_settings


class TestValidateAnswer:
    """Test validate_answer rules and their order"""

    def setup_method(self):
        """Setup test fixtures for each test"""
        self.filter = ProfanityFilter(['darn', 'heck'])

    def test_valid_answer_is_trimmed(self):
        """Test surrounding and repeated whitespace is cleaned"""
        result = validate_answer('  a   purple\tcow  ')

        assert result.is_valid is True
        assert result.cleaned_text == 'a purple cow'
        assert result.error is None

    @pytest.mark.parametrize('text', ['', '   ', '\n\t'])
    def test_empty_answers_rejected(self, text):
        """Test empty and whitespace-only answers"""
        result = validate_answer(text)

        assert result.is_valid is False
        assert result.error == 'Answer cannot be empty'

    def test_non_text_rejected(self):
        """Test answers must be strings"""
        assert validate_answer(None).error == 'Answer must be text'
        assert validate_answer(['a']).error == 'Answer must be text'

    def test_length_limit(self):
        """Test the limit is inclusive and applies after trimming"""
        assert validate_answer('x' * 100).is_valid is True
        assert validate_answer('  ' + 'x' * 100 + '  ').is_valid is True

        result = validate_answer('x' * 101)
        assert result.is_valid is False
        assert result.error == 'Answer is too long (max 100 characters)'

    def test_configurable_length(self):
        """Test a custom maximum"""
        assert validate_answer('x' * 150, max_length=200).is_valid is True
        assert validate_answer('x' * 201, max_length=200).is_valid is False

    def test_emptiness_checked_before_length(self):
        """Test rules run in order"""
        assert validate_answer(' ' * 500).error == 'Answer cannot be empty'

    def test_length_checked_before_moderation(self):
        """Test an overlong profane answer reports length"""
        result = validate_answer('darn ' * 30, profanity_filter=self.filter)

        assert result.error == 'Answer is too long (max 100 characters)'

    def test_moderation_rejects(self):
        """Test listed words are rejected by default"""
        result = validate_answer('Oh Darn it', profanity_filter=self.filter)

        assert result.is_valid is False
        assert result.error == 'Answer contains inappropriate content'

    def test_moderation_redacts(self):
        """Test redact mode masks listed words and accepts the answer"""
        result = validate_answer('oh darn it', profanity_filter=self.filter, moderation_action='redact')

        assert result.is_valid is True
        assert result.cleaned_text == 'oh **** it'

    def test_moderation_disabled(self):
        """Test listed words pass when moderation is off"""
        result = validate_answer('oh darn it', moderation_enabled=False, profanity_filter=self.filter)

        assert result.is_valid is True
        assert result.cleaned_text == 'oh darn it'

    def test_moderation_without_filter(self):
        """Test moderation is skipped when no word list is loaded"""
        assert validate_answer('oh darn it', profanity_filter=None).is_valid is True

    def test_pure_function(self):
        """Test repeated calls give identical results"""
        first = validate_answer('a heck of a day', profanity_filter=self.filter)
        second = validate_answer('a heck of a day', profanity_filter=self.filter)

        assert first == second


class TestProfanityFilter:
    """Test ProfanityFilter matching"""

    def test_whole_words_only(self):
        """Test listed words inside longer words do not match"""
        profanity_filter = ProfanityFilter(['ass'])

        assert profanity_filter.is_profane('a pass in class') is False
        assert profanity_filter.is_profane('what an ass') is True

    def test_case_insensitive(self):
        """Test matching ignores case"""
        assert ProfanityFilter(['darn']).is_profane('DARN') is True

    def test_allowed_words_override(self):
        """Test allowed words are never flagged"""
        profanity_filter = ProfanityFilter(['scunthorpe'], allowed_words=['Scunthorpe'])

        assert profanity_filter.is_profane('Scunthorpe') is False

    def test_clean_keeps_punctuation(self):
        """Test masking preserves the rest of the text"""
        assert ProfanityFilter(['darn']).clean('Darn, darn!') == '****, ****!'


class TestAnswerValidator:
    """Test the configured validator"""

    def test_uses_configured_limits(self):
        """Test configuration drives length and moderation"""
        validator = AnswerValidator(build_game_settings(max_answer_length=20, moderation_action='redact'))
        validator.profanity_filter = ProfanityFilter(['darn'])

        assert validator.validate('x' * 21).is_valid is False
        assert validator.validate('darn').cleaned_text == '****'

    def test_room_override(self):
        """Test a room setting can turn moderation off"""
        validator = AnswerValidator(build_game_settings())
        validator.profanity_filter = ProfanityFilter(['darn'])

        assert validator.validate('darn').is_valid is False
        assert validator.validate('darn', moderation_enabled=False).is_valid is True

    def test_use_word_list(self):
        """Test the filter is built from a loaded word list"""
        word_list_manager = Mock()
        word_list_manager.is_loaded.return_value = True
        word_list_manager.banned_words = frozenset(['darn'])
        word_list_manager.allowed_words = frozenset()

        validator = AnswerValidator(build_game_settings(), word_list_manager)

        assert validator.profanity_filter is not None
        assert validator.validate('darn').is_valid is False

    def test_unloaded_word_list_disables_filter(self):
        """Test an unloaded word list leaves answers unmoderated"""
        word_list_manager = Mock()
        word_list_manager.is_loaded.return_value = False

        validator = AnswerValidator(build_game_settings(), word_list_manager)

        assert validator.profanity_filter is None
