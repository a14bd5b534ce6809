"""
Team - Identity and scoring buckets.

score is derived: it always equals the sum of the round buckets
relevant to the game mode and is recomputed after every mutation.
Round buckets never go below zero.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .settings import GameMode


@dataclass
class Team:
    """State for a single team."""
    team_id: str
    name: str
    score: int = 0
    round_scores: list[int] = field(default_factory=lambda: [0, 0, 0, 0])
    pending_round_penalties: list[int] = field(default_factory=lambda: [0, 0, 0, 0])

    # How many leading round buckets count towards score
    relevant_rounds: int = 4

    def _valid_round(self, round_index: int) -> bool:
        return 0 <= round_index < len(self.round_scores)

    def add_score(self, points: int, round_index: int):
        """Add (or with negative points, remove) points, never below zero."""
        if not self._valid_round(round_index):
            return
        self.round_scores[round_index] = max(0, self.round_scores[round_index] + points)
        self.update_total_score()

    def apply_penalty(self, points: int, round_index: int, reveal_at_end: bool = False):
        """
        Subtract points from a round. Non-positive points are ignored.

        With reveal_at_end the penalty is only recorded in the pending
        bucket and the visible score stays untouched.
        """
        if not self._valid_round(round_index) or points <= 0:
            return
        if reveal_at_end:
            self.pending_round_penalties[round_index] += points
        else:
            self.round_scores[round_index] = max(0, self.round_scores[round_index] - points)
            self.update_total_score()

    def reveal_pending_penalties(self, mode: GameMode):
        """Apply every deferred penalty of the mode's rounds and clear them."""
        rounds = min(mode.total_rounds, len(self.pending_round_penalties))
        for round_index in range(rounds):
            pending = self.pending_round_penalties[round_index]
            if pending <= 0:
                continue
            self.round_scores[round_index] = max(0, self.round_scores[round_index] - pending)
            self.pending_round_penalties[round_index] = 0
        self.update_total_score(mode)

    def pending_penalty_total(self, mode: GameMode) -> int:
        rounds = min(mode.total_rounds, len(self.pending_round_penalties))
        return sum(self.pending_round_penalties[:rounds])

    def update_total_score(self, mode: GameMode | None = None):
        if mode is not None:
            self.relevant_rounds = mode.total_rounds
        self.score = sum(self.round_scores[:self.relevant_rounds])

    def reset_scores(self):
        self.score = 0
        self.round_scores = [0, 0, 0, 0]
        self.pending_round_penalties = [0, 0, 0, 0]
