"""
Broadcast Service Unit Tests

Tests for Socket.IO emissions against a mocked server.
"""

from unittest.mock import Mock

from blindstory.core.game_phases import GamePhase
from blindstory.core.models import QuestionType, RevealData
from blindstory.services.broadcast_service import BroadcastService
from blindstory.services.room_state_presenter import RoomStatePresenter
from tests.factories import RoomFactory


class TestBroadcastService:
    """Test BroadcastService behaviour"""

    def setup_method(self):
        """Setup test fixtures for each test"""
        self.socketio = Mock()
        self.service = BroadcastService(self.socketio, RoomStatePresenter())

    def _events(self):
        return [(c.args[0], c.kwargs['to']) for c in self.socketio.emit.call_args_list]

    def test_emit_to_room(self):
        """Test room broadcasts target the room code"""
        self.service.emit_to_room('room-updated', {'a': 1}, 'ABC234')

        self.socketio.emit.assert_called_once_with('room-updated', {'a': 1}, to='ABC234')

    def test_emit_failures_are_swallowed(self):
        """Test a failed emission is logged and does not raise"""
        self.socketio.emit.side_effect = RuntimeError('socket gone')

        self.service.emit_to_room('room-updated', {}, 'ABC234')
        self.service.emit_to_player('your-turn', {}, 'p1')

    def test_room_unsubscription(self):
        """Test unsubscribing goes through the underlying server"""
        self.service.remove_from_room('p1', 'ABC234')

        self.socketio.server.leave_room.assert_called_once_with('p1', 'ABC234', namespace='/')

    def test_room_update_is_blind(self):
        """Test room-updated never carries answer texts mid-round"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers(), phase=GamePhase.PLAYING)

        self.service.broadcast_room_update(room)

        payload = self.socketio.emit.call_args.args[1]
        assert 'Alice' not in str(payload)

    def test_game_started_sends_turn_prompts(self):
        """Test active players get their question and spectators are told to wait"""
        room = RoomFactory.create_lobby(player_count=5)
        for player, question in zip(room.players, [QuestionType.WHO, QuestionType.WITH_WHOM,
                                                   QuestionType.WHERE, QuestionType.HOW]):
            player.assigned_question = question
        room.game_state.phase = GamePhase.PLAYING
        room.game_state.current_round = 1

        self.service.broadcast_game_started(room)

        events = self._events()
        assert events[0] == ('game-started', 'ABC234')
        assert events.count(('your-turn', 'p0')) == 1
        assert ('waiting-for-others', 'p4') in events
        turn_payload = self.socketio.emit.call_args_list[1].args[1]
        assert turn_payload == {'question': 'who', 'label': 'Who?', 'round': 1}

    def test_turn_prompts_for_unanswered_only(self):
        """Test re-prompts skip players who already answered and spectators"""
        room = RoomFactory.create_lobby(player_count=5)
        room.players[0].assigned_question = QuestionType.WHO
        room.players[0].has_answered = True
        room.players[1].assigned_question = QuestionType.HOW

        self.service.send_turn_prompts(room, unanswered_only=True)

        assert self._events() == [('your-turn', 'p1')]

    def test_reveal(self):
        """Test the reveal goes to the whole room"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers())
        reveal = RevealData('Alice', 'a dragon', 'the moon', 'accidentally', 'Story.')

        self.service.broadcast_reveal(room, reveal)

        event, payload = self.socketio.emit.call_args.args
        assert event == 'reveal'
        assert payload['sentence'] == 'Story.'
        assert self.socketio.emit.call_args.kwargs == {'to': 'ABC234'}

    def test_send_waiting(self):
        """Test the waiting payload reports answered slots"""
        room = RoomFactory.create_with_answers(RoomFactory.story_answers(), phase=GamePhase.PLAYING)

        self.service.send_waiting('p0', room)

        self.socketio.emit.assert_called_once_with(
            'waiting-for-others', {'spectating': False, 'answered': 4}, to='p0'
        )

    def test_send_kicked(self):
        """Test the kicked player is told and unsubscribed"""
        self.service.send_kicked('p2', 'ABC234')

        self.socketio.emit.assert_called_once_with('kicked', {'room_code': 'ABC234'}, to='p2')
        self.socketio.server.leave_room.assert_called_once_with('p2', 'ABC234', namespace='/')

    def test_player_left(self):
        """Test player-left payload"""
        self.service.broadcast_player_left('ABC234', 'p3')

        self.socketio.emit.assert_called_once_with('player-left', {'player_id': 'p3'}, to='ABC234')
