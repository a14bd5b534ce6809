"""
Game Settings - Static configuration consumed by the game state.

Covers:
- Game modes and the rounds each mode plays
- Round rules (describe, one word, mime, draw)
- Difficulty (skip penalty policy)
- Team/category selection, turn time limit and word count

The state reads settings but never mutates them.
Environment defaults follow the same os.getenv style as the API app.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import os

from .term import Term


ROUND_COUNT = 4

DEFAULT_TURN_TIME_LIMIT = float(os.getenv("TIMESUP_TURN_TIME", "30"))
DEFAULT_WORD_COUNT = int(os.getenv("TIMESUP_WORD_COUNT", "50"))

MIN_TEAMS = 2
MIN_WORD_COUNT = 5
MAX_WORD_COUNT = 200


class GameMode(Enum):
    """How many rounds are played and in which order terms appear."""
    CLASSIC = "classic"
    WITH_DRAWING = "with_drawing"
    RANDOM_ORDER = "random_order"

    @property
    def description(self) -> str:
        return {
            GameMode.CLASSIC: "The classic game with 3 rounds",
            GameMode.WITH_DRAWING: "Classic plus a 4th drawing round",
            GameMode.RANDOM_ORDER: "Terms reshuffled at the start of every round",
        }[self]

    @property
    def total_rounds(self) -> int:
        return 4 if self == GameMode.WITH_DRAWING else 3

    @property
    def should_shuffle_per_round(self) -> bool:
        return self == GameMode.RANDOM_ORDER


class Difficulty(Enum):
    """Penalty policy for skipped and missed terms."""
    EASY = "easy"  # no skip penalty
    MEDIUM = "medium"  # skip penalties deferred until the end of the game
    HARD = "hard"  # immediate skip penalties, wrong guesses add penalty cards


class GameRound(Enum):
    """Rounds by index. The value is the index into per-round buckets."""
    ROUND_1 = 0
    ROUND_2 = 1
    ROUND_3 = 2
    ROUND_4 = 3

    @property
    def title(self) -> str:
        return f"Round {self.value + 1}"

    @property
    def description(self) -> str:
        return {
            GameRound.ROUND_1: "Describe",
            GameRound.ROUND_2: "One word only",
            GameRound.ROUND_3: "Mime only",
            GameRound.ROUND_4: "Drawing",
        }[self]

    @property
    def detailed_rules(self) -> str:
        return {
            GameRound.ROUND_1: (
                "Describe the term. Words from the same stem, sound-alikes, "
                "translations and spelling are not allowed."
            ),
            GameRound.ROUND_2: (
                "Say exactly ONE word. The team gets ONE guess; "
                "if it is wrong, skip the term."
            ),
            GameRound.ROUND_3: (
                "Mime only: no sounds, no words, no pointing. The team gets "
                "ONE guess; if it is wrong, skip the term."
            ),
            GameRound.ROUND_4: (
                "Draw only: no words, letters, numbers or symbols. The team "
                "gets ONE guess; if it is wrong, skip the term."
            ),
        }[self]

    @property
    def can_skip(self) -> bool:
        return self != GameRound.ROUND_1

    @property
    def is_drawing(self) -> bool:
        return self == GameRound.ROUND_4

    def is_available(self, mode: GameMode) -> bool:
        """Rounds 1-3 are played in every mode, round 4 only with drawing."""
        if self == GameRound.ROUND_4:
            return mode == GameMode.WITH_DRAWING
        return True


class GamePhase(Enum):
    """High-level game phases."""
    SETUP = "setup"
    PLAYING = "playing"
    SLOT_REWARD = "slot_reward"
    ROUND_END = "round_end"
    GAME_END = "game_end"


@dataclass
class TeamConfig:
    """A team as configured before the game starts."""
    name: str
    team_id: str | None = None


@dataclass
class Category:
    """A named group of terms the content provider draws from."""
    category_id: str
    name: str
    level: str = "custom"  # very_easy, easy, medium, hard, custom
    terms: list[Term] = field(default_factory=list)

    @property
    def term_count(self) -> int:
        return len(self.terms)


@dataclass
class GameSettings:
    """
    Static game configuration.

    Validity mirrors the setup screen: at least two teams,
    at least one category, and enough terms for the word count.
    """
    teams: list[TeamConfig] = field(default_factory=list)
    selected_categories: list[Category] = field(default_factory=list)
    turn_time_limit: float = DEFAULT_TURN_TIME_LIMIT
    game_mode: GameMode = GameMode.CLASSIC
    difficulty: Difficulty = Difficulty.EASY
    word_count: int = DEFAULT_WORD_COUNT
    random_seed: int = 0

    @property
    def team_count(self) -> int:
        return len(self.teams)

    @property
    def available_word_count(self) -> int:
        return sum(c.term_count for c in self.selected_categories)

    @property
    def min_word_count(self) -> int:
        return MIN_WORD_COUNT

    @property
    def max_word_count(self) -> int:
        return max(MIN_WORD_COUNT, min(self.available_word_count, MAX_WORD_COUNT))

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()

    def validation_errors(self) -> list[str]:
        """Human-readable reasons the settings are not playable."""
        errors = []
        if self.team_count < MIN_TEAMS:
            errors.append(f"At least {MIN_TEAMS} teams are required")
        if not self.selected_categories:
            errors.append("Select at least one category")
        if self.available_word_count < self.word_count:
            errors.append(
                f"Selected categories hold {self.available_word_count} terms, "
                f"{self.word_count} requested"
            )
        if self.turn_time_limit <= 0:
            errors.append("Turn time limit must be positive")
        return errors
