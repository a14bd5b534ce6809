"""
Tests for the turn/round state.

Tests:
- Selectability, ownership and eligibility of terms
- Term selection and avoidance
- Turn and round completion checks
- Round transitions
"""

import pytest

from ..engine_core.settings import GameMode, GamePhase, GameRound, GameSettings
from ..engine_core.state import GameState, NoTeamsError
from ..engine_core.term import Term
from .conftest import make_settings, make_state


def penalty_card(team_id: str, threshold: int) -> Term:
    return Term(text="Penalty", assigned_team_id=team_id, available_from_team_turn=threshold)


class TestSettings:
    """Tests for GameSettings validation."""

    def test_playable_settings(self):
        settings = make_settings()
        assert settings.is_valid
        assert settings.validation_errors() == []

    def test_one_team_not_playable(self):
        settings = make_settings(teams=("Solo",))
        assert not settings.is_valid
        assert settings.validation_errors() == ["At least 2 teams are required"]

    def test_too_few_terms_not_playable(self):
        settings = make_settings()
        settings.word_count = 11
        assert not settings.is_valid
        assert "10 terms, 11 requested" in settings.validation_errors()[0]

    def test_max_word_count_has_floor(self):
        settings = make_settings(with_categories=False)
        assert settings.max_word_count == 5
        assert not settings.is_valid


class TestStart:
    """Tests for GameState.start."""

    def test_start_without_teams_raises(self):
        """The state refuses to play without teams."""
        state = GameState.create(GameSettings(), [Term(text="Cat")])
        with pytest.raises(NoTeamsError):
            state.start()
        assert state.phase == GamePhase.SETUP

    def test_start_resets_everything(self, setup_state):
        """Start enters PLAYING with fresh counters and no active turn."""
        setup_state.terms[0].mark_completed(0)
        setup_state.teams[0].add_score(3, 0)

        setup_state.start()

        assert setup_state.phase == GamePhase.PLAYING
        assert setup_state.current_round == GameRound.ROUND_1
        assert setup_state.current_team_index == 0
        assert not setup_state.turn_active
        assert setup_state.teams[0].score == 0
        assert not setup_state.terms[0].is_completed_in(0)
        assert setup_state.team_turn_counters == {"team_1": 0, "team_2": 0}

    def test_team_ids_follow_order(self, setup_state):
        assert [t.team_id for t in setup_state.teams] == ["team_1", "team_2"]
        assert setup_state.active_team_id == "team_1"


class TestSelectability:
    """Tests for ownership and eligibility of terms."""

    def test_completed_terms_never_selectable(self, playing_state):
        """Once completed in a round, a term leaves the available set."""
        state = playing_state
        state.start_new_turn()
        index = state.mark_current_term_completed()

        assert index not in state.available_indices
        state.next_team()
        state.start_new_turn()
        assert index not in state.available_indices

    def test_penalty_card_ownership_and_threshold(self, playing_state):
        """Penalty card of B with threshold 2: never for A, for B from its 2nd turn."""
        state = playing_state
        state.terms.append(penalty_card("team_2", 2))
        penalty_index = 3

        state.start_new_turn()  # A, turn 1
        assert penalty_index not in state.available_indices

        state.next_team()
        state.start_new_turn()  # B, turn 1
        assert state.active_team_id == "team_2"
        assert penalty_index not in state.available_indices

        state.next_team()
        state.start_new_turn()  # A, turn 2
        assert penalty_index not in state.available_indices

        state.next_team()
        state.start_new_turn()  # B, turn 2
        assert penalty_index in state.available_indices
        assert not state.is_term_selectable(state.terms[penalty_index], "team_1")

    def test_add_penalty_card_eligible_next_turn(self, playing_state):
        """A new penalty card waits for the owner's next turn."""
        state = playing_state
        state.start_new_turn()
        index = state.add_penalty_card(Term(text="Extra"), "team_1")

        assert state.terms[index].available_from_team_turn == 2
        assert state.penalty_card_counter == 1
        assert index not in state.available_indices

        state.next_team()
        state.start_new_turn()
        state.next_team()
        state.start_new_turn()
        assert index in state.available_indices

    def test_current_term_resolves_past_completed(self, playing_state):
        """The cursor skips terms completed elsewhere."""
        state = playing_state
        state.start_new_turn()
        state.terms[0].mark_completed(0)
        assert state.current_term is state.terms[1]
        assert state.current_term_index == 0
        assert state.resolved_current_term_index() == 1

    def test_empty_pool(self):
        """Nothing to select in an empty pool."""
        state = make_state(0)
        state.start()
        assert state.current_term is None
        assert state.next_term() is None
        assert state.mark_current_term_completed() is None
        assert state.remaining_terms_count == 0


class TestNextTerm:
    """Tests for term selection."""

    def test_skips_seen_terms(self, playing_state):
        state = playing_state
        state.start_new_turn()
        state.mark_current_term_as_seen()  # term 0
        assert state.next_term() == 1

    def test_avoidance_prefers_other_candidate(self, playing_state):
        """The avoided index is passed over while another candidate exists."""
        state = playing_state
        state.start_new_turn()
        assert state.next_term(avoiding=1) == 2

    def test_avoidance_never_blocks_only_candidate(self):
        """A single remaining candidate is selected even when avoided."""
        state = make_state(2)
        state.start()
        state.start_new_turn()
        state.mark_current_term_as_seen()  # term 0
        assert state.next_term(avoiding=1) == 1

    def test_no_candidates_leaves_cursor(self, playing_state):
        """With everything seen the cursor does not move."""
        state = playing_state
        state.start_new_turn()
        state.current_term_index = 1
        state.seen_terms_in_current_turn.update({0, 1, 2})
        assert state.next_term() is None
        assert state.current_term_index == 1

    def test_wraps_around(self, playing_state):
        state = playing_state
        state.start_new_turn()
        state.current_term_index = 2
        state.mark_current_term_as_seen()
        assert state.next_term() == 0


class TestCompletionChecks:
    """Tests for turn end and round end checks."""

    def test_seen_all_for_turn(self, playing_state):
        state = playing_state
        state.start_new_turn()
        assert not state.has_team_seen_all_available_terms_for_turn
        for _ in range(3):
            state.mark_current_term_as_seen()
            state.next_term()
        assert state.has_team_seen_all_available_terms_for_turn

    def test_ineligible_penalty_does_not_block_turn_end(self, playing_state):
        """Penalty cards that are not eligible yet do not keep the turn alive."""
        state = playing_state
        state.start_new_turn()
        state.add_penalty_card(Term(text="Extra"), "team_1")
        state.seen_terms_in_current_turn.update({0, 1, 2})
        assert state.has_team_seen_all_available_terms_for_turn
        assert not state.has_team_seen_all_available_terms

    def test_round_incomplete_while_start_cards_open(self, playing_state):
        state = playing_state
        state.terms[0].mark_completed(0)
        assert not state.all_terms_completed_for_current_round

    def test_round_complete_when_start_cards_done(self, playing_state):
        state = playing_state
        for term in state.terms:
            term.mark_completed(0)
        assert state.all_terms_completed_for_current_round

    def test_round_waits_while_every_team_has_penalties(self, playing_state):
        """The round closes once any team has no open penalty card."""
        state = playing_state
        for term in state.terms:
            term.mark_completed(0)
        state.terms.append(penalty_card("team_1", 0))
        state.terms.append(penalty_card("team_2", 0))
        assert not state.all_terms_completed_for_current_round

        state.terms[-1].mark_completed(0)
        assert state.all_terms_completed_for_current_round


class TestRoundTransitions:
    """Tests for next_team and next_round."""

    def test_next_team_wraps(self, playing_state):
        state = playing_state
        state.seen_terms_in_current_turn.add(0)
        state.next_team()
        assert state.current_team_index == 1
        assert not state.seen_terms_in_current_turn
        state.next_team()
        assert state.current_team_index == 0

    def test_next_round_rotates_starting_team(self, playing_state):
        """Next round starts with the team after the current one."""
        state = playing_state
        state.current_term_index = 2
        state.seen_terms_in_current_round.add(1)

        assert state.next_round()
        assert state.current_round == GameRound.ROUND_2
        assert state.current_team_index == 1
        assert state.current_term_index == 0
        assert not state.seen_terms_in_current_round

    def test_classic_ends_after_round_three(self, playing_state):
        state = playing_state
        state.current_round = GameRound.ROUND_3
        assert state.is_last_round
        assert not state.next_round()
        assert state.phase == GamePhase.GAME_END

    def test_drawing_mode_plays_round_four(self):
        """Drawing mode: round 3 -> round 4 -> game end."""
        state = make_state(3, mode=GameMode.WITH_DRAWING)
        state.start()
        state.current_round = GameRound.ROUND_3

        assert state.next_round()
        assert state.current_round == GameRound.ROUND_4
        assert state.phase == GamePhase.PLAYING

        assert not state.next_round()
        assert state.phase == GamePhase.GAME_END

    def test_random_order_shuffle_is_deterministic(self):
        """Same seed, same order after a reshuffle."""
        first = make_state(10, mode=GameMode.RANDOM_ORDER)
        second = make_state(10, mode=GameMode.RANDOM_ORDER)
        for state in (first, second):
            state.start()
            state.next_round()
        assert [t.text for t in first.terms] == [t.text for t in second.terms]


class TestScoring:
    """Tests for scoring through the state."""

    def test_add_score_defaults_to_active_team_and_round(self, playing_state):
        state = playing_state
        state.current_round = GameRound.ROUND_2
        state.add_score(2)
        assert state.teams[0].round_scores[1] == 2

    def test_unknown_team_index_is_noop(self, playing_state):
        state = playing_state
        state.add_score(5, team_index=9)
        state.apply_penalty(5, team_index=-3)
        assert all(team.score == 0 for team in state.teams)

    def test_reveal_pending_penalties_snapshot(self, playing_state):
        state = playing_state
        state.add_score(4)
        state.apply_penalty(1, reveal_at_end=True)
        state.apply_penalty(1, reveal_at_end=True)

        snapshot = state.reveal_pending_penalties()

        assert snapshot["team_1"] == (4, 2, 2)
        assert snapshot["team_2"] == (0, 0, 0)
        assert state.teams[0].pending_round_penalties == [0, 0, 0, 0]


class TestClone:
    """Tests for state copies."""

    def test_clone_is_independent(self, playing_state):
        copy = playing_state.clone()
        copy.terms[0].mark_completed(0)
        copy.teams[0].add_score(1, 0)
        copy.seen_terms_in_current_turn.add(2)

        assert not playing_state.terms[0].is_completed_in(0)
        assert playing_state.teams[0].score == 0
        assert not playing_state.seen_terms_in_current_turn

    def test_clone_shares_settings(self, playing_state):
        assert playing_state.clone().settings is playing_state.settings
