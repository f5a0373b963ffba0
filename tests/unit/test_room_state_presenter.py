"""
Room State Presenter Unit Tests

Tests that client payloads keep answers blind until the reveal.
"""

from blindstory.core.game_phases import GamePhase
from blindstory.core.models import QuestionType, RevealData
from blindstory.services.room_state_presenter import RoomStatePresenter
from tests.factories import PlayerFactory, RoomFactory


class TestRoomStatePresenter:
    """Test RoomStatePresenter payloads"""

    def setup_method(self):
        """Setup test fixtures for each test"""
        self.presenter = RoomStatePresenter()

    def test_player_data_hides_previous_question(self):
        """Test bookkeeping fields stay private"""
        player = PlayerFactory.create(previous_question=QuestionType.WHO)

        data = self.presenter.create_player_data(player)

        assert 'previous_question' not in data
        assert data['id'] == 'p1'

    def test_answers_hidden_while_playing(self):
        """Test answer texts are replaced by answered flags before the reveal"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers(), phase=GamePhase.PLAYING)

        answers = self.presenter.create_game_state(room)['answers']

        assert answers['who'] == {'player_id': 'p0', 'answered': True}
        assert all('answer' not in record for record in answers.values())

    def test_answers_shown_at_reveal(self):
        """Test answer texts are included once revealed"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers())

        answers = self.presenter.create_game_state(room)['answers']

        assert answers['withWhom'] == {'player_id': 'p1', 'answer': 'a dragon'}

    def test_room_snapshot(self):
        """Test the snapshot fields"""
        room = RoomFactory.create_lobby(max_players=6)

        snapshot = self.presenter.create_room_snapshot(room)

        assert snapshot['code'] == 'ABC234'
        assert snapshot['host_id'] == 'p0'
        assert len(snapshot['players']) == 4
        assert snapshot['settings']['max_players'] == 6
        assert snapshot['game_state']['phase'] == 'lobby'

    def test_turn_data(self):
        """Test the your-turn payload"""
        room = RoomFactory.create_lobby()
        room.game_state.current_round = 2
        player = room.players[1]
        player.assigned_question = QuestionType.WITH_WHOM

        assert self.presenter.create_turn_data(room, player) == {
            'question': 'withWhom',
            'label': 'With whom?',
            'round': 2,
        }

    def test_reveal_data(self):
        """Test the reveal payload carries the round"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers())
        reveal = RevealData('Alice', 'a dragon', 'the moon', 'accidentally', 'A sentence.')

        data = self.presenter.create_reveal_data(room, reveal)

        assert data['sentence'] == 'A sentence.'
        assert data['round'] == 1
