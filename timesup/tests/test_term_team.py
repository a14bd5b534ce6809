"""
Tests for the Term and Team entities.

Tests:
- Completion flags per round
- Score clamping and derived totals
- Deferred penalties
"""

from ..engine_core.settings import GameMode
from ..engine_core.team import Team
from ..engine_core.term import Term


class TestTerm:
    """Tests for Term completion flags."""

    def test_new_term_is_start_card(self):
        """A term without owner is a start card."""
        term = Term(text="Cat")
        assert term.is_start_card
        assert term.completed_in_rounds == [False, False, False, False]

    def test_mark_completed_sets_round_flag(self):
        """Completing a round only flags that round."""
        term = Term(text="Cat")
        term.mark_completed(1)
        assert term.is_completed_in(1)
        assert not term.is_completed_in(0)
        assert not term.is_completed

    def test_mark_completed_out_of_range_is_noop(self):
        """Out-of-range rounds are ignored."""
        term = Term(text="Cat")
        term.mark_completed(7)
        term.mark_completed(-1)
        assert term.completed_in_rounds == [False] * 4
        assert not term.is_completed_in(7)

    def test_is_completed_follows_mode(self):
        """Classic needs three rounds, drawing mode needs four."""
        term = Term(text="Cat")
        for round_index in range(3):
            term.mark_completed(round_index, GameMode.CLASSIC)
        assert term.is_completed

        term.update_is_completed(GameMode.WITH_DRAWING)
        assert not term.is_completed
        term.mark_completed(3, GameMode.WITH_DRAWING)
        assert term.is_completed

    def test_reset_clears_flags_and_owner(self):
        """reset() makes the term a fresh start card."""
        term = Term(text="Cat", assigned_team_id="team_1", available_from_team_turn=3)
        term.mark_completed(0)
        term.reset()
        assert term.is_start_card
        assert term.available_from_team_turn == 0
        assert not term.is_completed_in(0)

    def test_copy_as_new_has_new_identity(self):
        """Copies keep the text but not the flags or id."""
        term = Term(text="Cat", english_translation="Cat")
        term.mark_completed(0)
        copy = term.copy_as_new()
        assert copy.text == "Cat"
        assert copy.term_id != term.term_id
        assert not copy.is_completed_in(0)


class TestTeamScoring:
    """Tests for Team score buckets."""

    def test_add_score_updates_total(self):
        """Score is the sum of round buckets."""
        team = Team(team_id="t", name="Red")
        team.add_score(3, 0)
        team.add_score(2, 1)
        assert team.round_scores[:2] == [3, 2]
        assert team.score == 5

    def test_score_never_negative(self):
        """Negative points clamp the bucket at zero."""
        team = Team(team_id="t", name="Red")
        team.add_score(2, 0)
        team.add_score(-5, 0)
        assert team.round_scores[0] == 0
        assert team.score == 0

    def test_out_of_range_round_is_noop(self):
        """Scoring an unknown round changes nothing."""
        team = Team(team_id="t", name="Red")
        team.add_score(5, 4)
        team.apply_penalty(5, -1)
        assert team.score == 0
        assert team.round_scores == [0, 0, 0, 0]

    def test_negative_penalty_ignored(self):
        """A penalty never raises a score or empties a pending bucket below zero."""
        team = Team(team_id="t", name="Red")
        team.add_score(2, 0)
        team.apply_penalty(-3, 0)
        team.apply_penalty(-3, 0, reveal_at_end=True)
        assert team.score == 2
        assert team.pending_round_penalties[0] == 0

    def test_only_relevant_rounds_count(self):
        """The drawing bucket only counts in drawing mode."""
        team = Team(team_id="t", name="Red", relevant_rounds=3)
        team.add_score(4, 3)
        assert team.score == 0

        team.update_total_score(GameMode.WITH_DRAWING)
        assert team.score == 4

    def test_immediate_penalty(self):
        """Immediate penalties hit the round bucket right away."""
        team = Team(team_id="t", name="Red")
        team.add_score(3, 1)
        team.apply_penalty(1, 1)
        assert team.round_scores[1] == 2
        assert team.pending_round_penalties[1] == 0

    def test_deferred_penalties_revealed_with_clamping(self):
        """Two deferred 10-point penalties on an empty round clamp to zero."""
        team = Team(team_id="t", name="Red")
        team.add_score(5, 0)
        team.apply_penalty(10, 0, reveal_at_end=True)
        team.apply_penalty(10, 0, reveal_at_end=True)

        assert team.score == 5
        assert team.pending_penalty_total(GameMode.CLASSIC) == 20

        team.reveal_pending_penalties(GameMode.CLASSIC)
        assert team.round_scores[0] == 0
        assert team.pending_round_penalties[0] == 0
        assert team.score == 0

    def test_reset_scores(self):
        team = Team(team_id="t", name="Red")
        team.add_score(5, 0)
        team.apply_penalty(2, 1, reveal_at_end=True)
        team.reset_scores()
        assert team.score == 0
        assert team.round_scores == [0, 0, 0, 0]
        assert team.pending_round_penalties == [0, 0, 0, 0]
