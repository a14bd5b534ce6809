"""
Action System - Actions, payloads, and results.

Actions represent:
1. Guess outcomes reported by the driver (correct, skip, wrong)
2. Clock signals (tick, timeout)
3. Flow requests (start game, start turn, next round, slot reward)
4. Perk effects applied from outside the engine

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Guess outcomes
    CORRECT = "correct"
    SKIP = "skip"
    WRONG = "wrong"

    # Clock
    TICK = "tick"
    TIMEOUT = "timeout"
    START_DRAWING_TIMER = "start_drawing_timer"

    # Flow
    START_GAME = "start_game"
    START_TURN = "start_turn"
    END_TURN = "end_turn"
    NEXT_ROUND = "next_round"
    REVEAL_PENALTIES = "reveal_penalties"

    # Slot reward interstitial
    SPIN_SLOT = "spin_slot"
    FINISH_SLOT_REWARD = "finish_slot_reward"

    # Perk layer hooks
    PERK_EFFECT = "perk_effect"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types have different payload shapes.
    This is a generic container; validation happens in the reducer.
    """
    team_id: str | None = None

    # For clock actions
    seconds: float | None = None

    # For perk effects
    score_delta: int | None = None
    timer_delta: float | None = None
    forced_skip: bool | None = None
    flicker: bool | None = None
    slot_credits: int | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are validated before application and applied
    atomically by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def start_game(cls) -> Action:
        return cls(action_type=ActionType.START_GAME)

    @classmethod
    def start_turn(cls) -> Action:
        return cls(action_type=ActionType.START_TURN)

    @classmethod
    def correct(cls) -> Action:
        return cls(action_type=ActionType.CORRECT)

    @classmethod
    def skip(cls) -> Action:
        return cls(action_type=ActionType.SKIP)

    @classmethod
    def wrong(cls) -> Action:
        return cls(action_type=ActionType.WRONG)

    @classmethod
    def tick(cls, seconds: float = 1.0) -> Action:
        """Factory for a clock tick of the given length."""
        return cls(action_type=ActionType.TICK, payload=ActionPayload(seconds=seconds))

    @classmethod
    def timeout(cls) -> Action:
        return cls(action_type=ActionType.TIMEOUT)

    @classmethod
    def end_turn(cls) -> Action:
        return cls(action_type=ActionType.END_TURN)

    @classmethod
    def next_round(cls) -> Action:
        return cls(action_type=ActionType.NEXT_ROUND)

    @classmethod
    def perk_effect(
        cls,
        team_id: str | None = None,
        score_delta: int | None = None,
        timer_delta: float | None = None,
        forced_skip: bool | None = None,
        flicker: bool | None = None,
        slot_credits: int | None = None,
    ) -> Action:
        """
        Factory for an externally decided perk effect.

        team_id defaults to the active team.
        """
        return cls(
            action_type=ActionType.PERK_EFFECT,
            payload=ActionPayload(
                team_id=team_id,
                score_delta=score_delta,
                timer_delta=timer_delta,
                forced_skip=forced_skip,
                flicker=flicker,
                slot_credits=slot_credits,
            ),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Errors (if failed)
    - Events for the driver (turn ended, round ended, ...)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes, for logs and UI toasts
    state_changes: list[str] = field(default_factory=list)

    # Flow signals for the driver
    turn_ended: bool = False
    round_ended: bool = False
    game_ended: bool = False

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
