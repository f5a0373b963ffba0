"""
Word List Manager Unit Tests
"""

import os

import pytest
import yaml

from blindstory.word_list_manager import WordListManager, WordListValidationError

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _write(tmp_path, content):
    path = tmp_path / 'moderation.yaml'
    path.write_text(content, encoding='utf-8')
    return str(path)


class TestWordListManager:
    """Test WordListManager behaviour"""

    def test_load_valid_file(self, tmp_path):
        """Test words are normalized and the manager reports loaded"""
        manager = WordListManager(_write(tmp_path, 'banned_words:\n  - " Darn "\n  - heck\nallowed_words:\n  - Scunthorpe\n'))

        manager.load_word_list_from_yaml()

        assert manager.is_loaded()
        assert manager.banned_words == frozenset({'darn', 'heck'})
        assert manager.allowed_words == frozenset({'scunthorpe'})
        assert manager.get_word_count() == 2

    def test_allowed_words_optional(self, tmp_path):
        """Test a file without allowed words"""
        manager = WordListManager(_write(tmp_path, 'banned_words: [darn]\n'))

        manager.load_word_list_from_yaml()

        assert manager.allowed_words == frozenset()

    def test_bundled_word_list_loads(self):
        """Test the shipped moderation list is valid"""
        manager = WordListManager(os.path.join(PROJECT_ROOT, 'moderation.yaml'))

        manager.load_word_list_from_yaml()

        assert manager.get_word_count() > 0

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError"""
        manager = WordListManager(str(tmp_path / 'missing.yaml'))

        with pytest.raises(FileNotFoundError):
            manager.load_word_list_from_yaml()
        assert not manager.is_loaded()

    def test_unparseable_yaml(self, tmp_path):
        """Test YAML syntax errors propagate"""
        manager = WordListManager(_write(tmp_path, 'banned_words: [darn\n'))

        with pytest.raises(yaml.YAMLError):
            manager.load_word_list_from_yaml()

    @pytest.mark.parametrize('content', [
        '- darn\n',
        'allowed_words: [darn]\n',
        'banned_words: darn\n',
        'banned_words: []\n',
        'banned_words: [darn, ""]\n',
        'banned_words: [darn, 3]\n',
        'banned_words: [darn]\nallowed_words: heck\n',
    ])
    def test_invalid_structure(self, tmp_path, content):
        """Test malformed word lists are rejected"""
        manager = WordListManager(_write(tmp_path, content))

        with pytest.raises(WordListValidationError):
            manager.load_word_list_from_yaml()
