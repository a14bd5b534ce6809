"""
Session Module - Drives a local game.

A session represents one play-through:
- Created when the host confirms the setup
- Holds the current game state
- Runs turns through the GameLoop and the turn timer
- Kept after the game ends for the results screen

One session at a time. Snapshots (see api.schemas.GameSnapshot)
let a host persist and resume a game.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult
from .timer import TurnTimer, ManualTurnTimer

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "TurnTimer",
    "ManualTurnTimer",
]
