"""
Engine Core - Deterministic turn/round state management.

The engine is the runtime that:
1. Takes GameSettings and a term pool
2. Manages GameState (teams, cursors, seen sets, scores)
3. Applies actions via the reducer
4. Signals turn, round and game ends to the driver
"""

from .settings import (
    GameSettings,
    GameMode,
    GameRound,
    GamePhase,
    Difficulty,
    TeamConfig,
    Category,
)
from .term import Term
from .team import Team
from .state import GameState, NoTeamsError
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action

__all__ = [
    "GameSettings",
    "GameMode",
    "GameRound",
    "GamePhase",
    "Difficulty",
    "TeamConfig",
    "Category",
    "Term",
    "Team",
    "GameState",
    "NoTeamsError",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
]
