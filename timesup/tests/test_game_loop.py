"""
Tests for the session layer.

Tests:
- Session lifecycle
- Loop states across a turn
- Timer driven timeouts
"""

from ..engine_core.settings import GameMode, GamePhase, GameRound
from ..session import SessionManager, SessionState, LoopState
from ..engine_core.term import Term
from .conftest import make_settings


def new_session(term_count: int = 3, **kwargs):
    manager = SessionManager()
    terms = [Term(text=f"Word {i}") for i in range(term_count)]
    session = manager.create_session(make_settings(**kwargs), terms)
    return manager, session


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_session(self):
        manager, session = new_session()
        assert session.state == SessionState.CREATED
        assert session.loop.state == LoopState.SETUP
        assert manager.get_session(session.session_id) is session
        assert manager.get_session("other") is None

    def test_create_builds_pool_from_categories(self):
        manager = SessionManager()
        session = manager.create_session(make_settings())
        assert session.game_state.pool_size == 5

    def test_start_game_activates(self):
        manager, session = new_session()
        result = manager.start_game()
        assert result.success
        assert session.state == SessionState.ACTIVE
        assert session.loop.state == LoopState.WAITING_TURN

    def test_new_session_replaces_old(self):
        manager, first = new_session()
        second = manager.create_session(make_settings(), [Term(text="Cat")])
        assert first.state == SessionState.ABANDONED
        assert manager.get_session() is second

    def test_end_session(self):
        manager, session = new_session()
        manager.end_session(session.session_id)
        assert manager.get_session() is None
        assert session.state == SessionState.GAME_OVER

    def test_restore_session_keeps_id(self):
        manager, session = new_session()
        manager.start_game()
        state = session.game_state.clone()

        other = SessionManager()
        restored = other.restore_session(state)
        assert restored.session_id == session.session_id
        assert restored.state == SessionState.ACTIVE


class TestGameLoop:
    """Tests for the GameLoop driver."""

    def test_turn_runs_and_times_out(self):
        _, session = new_session()
        loop = session.loop
        loop.start_game()

        result = loop.start_turn()
        assert result.loop_state == LoopState.TURN_RUNNING
        assert result.current_term == "Word 0"
        assert result.active_team == "Red"

        result = loop.tick(10)
        assert result.success
        assert session.game_state.turn_time_remaining == 20

        result = loop.tick(20)
        assert result.turn_ended
        assert result.loop_state == LoopState.WAITING_TURN
        assert session.game_state.current_team_index == 1
        assert not loop.timer.is_running

    def test_correct_until_round_end(self):
        _, session = new_session(2)
        loop = session.loop
        loop.start_game()
        loop.start_turn()
        loop.correct()
        result = loop.correct()

        assert result.round_ended
        assert loop.state == LoopState.ROUND_END
        assert not loop.timer.is_running

        result = loop.next_round()
        assert result.success
        assert loop.state == LoopState.WAITING_TURN
        assert session.game_state.current_round == GameRound.ROUND_2

    def test_pause_stops_the_clock(self):
        _, session = new_session()
        loop = session.loop
        loop.start_game()
        loop.start_turn()
        loop.pause()
        loop.tick(30)
        assert session.game_state.turn_active
        assert loop.is_paused

        loop.resume()
        result = loop.tick(30)
        assert result.turn_ended

    def test_drawing_round_waits_for_clock(self):
        _, session = new_session(mode=GameMode.WITH_DRAWING)
        loop = session.loop
        loop.start_game()
        session.game_state.current_round = GameRound.ROUND_4

        loop.start_turn()
        assert loop.state == LoopState.DRAWING_READY
        assert not loop.timer.is_running

        loop.start_drawing_timer()
        assert loop.state == LoopState.TURN_RUNNING
        assert loop.timer.is_running

    def test_invalid_action_reports_error(self):
        _, session = new_session()
        loop = session.loop
        loop.start_game()
        loop.start_turn()
        result = loop.skip()
        assert not result.success
        assert result.error_code == "INVALID_ACTION"
        assert result.errors

    def test_perk_timer_delta_moves_clock(self):
        _, session = new_session()
        loop = session.loop
        loop.start_game()
        loop.start_turn()
        loop.apply_perk(timer_delta=-25)
        assert loop.timer.remaining == 5

        result = loop.tick(5)
        assert result.turn_ended

    def test_full_game_reaches_game_over(self):
        _, session = new_session(1)
        loop = session.loop
        loop.start_game()
        for _ in range(3):
            loop.start_turn()
            loop.correct()
            result = loop.next_round()

        assert result.game_ended
        assert loop.state == LoopState.GAME_OVER
        assert session.state == SessionState.GAME_OVER
        assert session.game_state.phase == GamePhase.GAME_END
        assert result.winners == ["Red"]
        assert loop.standings() == [("Red", 2), ("Blue", 1)]
