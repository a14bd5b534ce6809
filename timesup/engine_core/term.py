"""
Term - A guessable card in the shared pool.

A term without an owner is a start card, playable by any team.
A term with assigned_team_id is a penalty card: only the owning
team may play it, and only once its turn counter reaches
available_from_team_turn.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from .settings import GameMode


def _new_term_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Term:
    """A term instance in the pool."""
    text: str
    english_translation: str | None = None
    term_id: str = field(default_factory=_new_term_id)

    # Index = round number, once True stays True until reset()
    completed_in_rounds: list[bool] = field(default_factory=lambda: [False] * 4)
    is_completed: bool = False

    # Penalty card metadata
    assigned_team_id: str | None = None
    available_from_team_turn: int = 0

    @property
    def is_start_card(self) -> bool:
        return self.assigned_team_id is None

    def is_completed_in(self, round_index: int) -> bool:
        if round_index < 0 or round_index >= len(self.completed_in_rounds):
            return False
        return self.completed_in_rounds[round_index]

    def mark_completed(self, round_index: int, mode: GameMode | None = None):
        """Retire the term for a round. Out-of-range rounds are ignored."""
        if round_index < 0 or round_index >= len(self.completed_in_rounds):
            return
        self.completed_in_rounds[round_index] = True
        self.update_is_completed(mode)

    def update_is_completed(self, mode: GameMode | None = None):
        required = mode.total_rounds if mode is not None else 3
        self.is_completed = all(self.completed_in_rounds[:required])

    def reset(self):
        """Clear all completion flags and ownership for a new game."""
        self.is_completed = False
        self.completed_in_rounds = [False] * 4
        self.assigned_team_id = None
        self.available_from_team_turn = 0

    def copy_as_new(self) -> Term:
        """Fresh, unplayed copy with a new identity."""
        return Term(text=self.text, english_translation=self.english_translation)
