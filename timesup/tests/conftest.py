"""
Pytest fixtures for Timesup tests.
"""

import pytest

from ..engine_core.settings import (
    Category,
    Difficulty,
    GameMode,
    GameSettings,
    TeamConfig,
)
from ..engine_core.state import GameState
from ..engine_core.term import Term
from ..engine_core.action import Action
from ..engine_core.reducer import apply_action


CATEGORY_TEXTS = [f"Word {i}" for i in range(10)]


def make_settings(
    difficulty: Difficulty = Difficulty.EASY,
    mode: GameMode = GameMode.CLASSIC,
    teams=("Red", "Blue"),
    with_categories: bool = True,
) -> GameSettings:
    categories = []
    if with_categories:
        categories = [
            Category(
                category_id="test",
                name="Test",
                terms=[Term(text=text) for text in CATEGORY_TEXTS],
            )
        ]
    return GameSettings(
        teams=[TeamConfig(name=name) for name in teams],
        selected_categories=categories,
        turn_time_limit=30.0,
        game_mode=mode,
        difficulty=difficulty,
        word_count=5,
        random_seed=7,
    )


def make_state(term_count: int = 3, **kwargs) -> GameState:
    """State in SETUP with a pool of 'Word 0'..'Word n-1'."""
    terms = [Term(text=CATEGORY_TEXTS[i] if i < 10 else f"Extra {i}") for i in range(term_count)]
    return GameState.create(make_settings(**kwargs), terms, game_id="test_game")


def run(state: GameState, *actions: Action) -> GameState:
    """Apply actions in order, failing the test on the first rejected one."""
    for action in actions:
        result = apply_action(state, action)
        assert result.success, f"{action.action_type.value} failed: {result.error}"
        state = result.new_state
    return state


@pytest.fixture
def settings() -> GameSettings:
    return make_settings()


@pytest.fixture
def setup_state() -> GameState:
    """Two teams, three start cards, not started."""
    return make_state(3)


@pytest.fixture
def playing_state(setup_state: GameState) -> GameState:
    """Started game, waiting for the first turn."""
    setup_state.start()
    return setup_state
