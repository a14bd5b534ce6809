"""
Game Loop - Drives a game turn by turn.

The loop:
1. Host starts the active team's turn (hand-off screen)
2. Team guesses: correct / skip / wrong
3. Clock ticks until time runs out or the team saw every term
4. Turn ends: slot reward, next team, or round end
5. Round end: next round or game end
6. Repeat

The loop is the single owner of the game state. Every mutation goes
through the reducer; the loop only swaps in the new state and keeps
the timer in step with it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import logging

from ..engine_core.action import Action, ActionType, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.settings import GamePhase
from .timer import ManualTurnTimer, TurnTimer

if TYPE_CHECKING:
    from .manager import Session


logger = logging.getLogger("timesup.session")


class LoopState(Enum):
    """State of the game loop, as the host UI sees it."""
    SETUP = "setup"
    WAITING_TURN = "waiting_turn"  # hand-off between teams
    DRAWING_READY = "drawing_ready"  # drawing round, clock not started yet
    TURN_RUNNING = "turn_running"
    SLOT_REWARD = "slot_reward"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of one loop step.

    Contains what the host needs to render the next screen.
    """
    success: bool
    loop_state: LoopState

    current_term: str | None = None
    active_team: str | None = None

    changes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    error_code: str | None = None

    turn_ended: bool = False
    round_ended: bool = False
    game_ended: bool = False

    # Game over info
    winners: list[str] = field(default_factory=list)


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)
        loop.start_game()

        loop.start_turn()
        loop.correct()
        loop.tick(1.0)
        ...
        if result.round_ended:
            loop.next_round()
    """

    def __init__(self, session: Session, timer: TurnTimer | None = None):
        self.session = session
        self.timer = timer or ManualTurnTimer()
        self.reducer = Reducer()
        self.state = LoopState.SETUP
        self._last_timeout: TurnResult | None = None

        # Restored mid-turn: pick the clock up where the snapshot left it
        state = self.game_state
        if state is not None and state.turn_active and state.is_timer_running:
            self._start_timer()
        self._sync_loop_state()

    @property
    def game_state(self):
        return self.session.game_state

    # =========================================================================
    # Flow
    # =========================================================================

    def start_game(self) -> TurnResult:
        return self.apply(Action.start_game())

    def start_turn(self) -> TurnResult:
        result = self.apply(Action.start_turn())
        if result.success and self.game_state.is_timer_running:
            self._start_timer()
        return result

    def start_drawing_timer(self) -> TurnResult:
        result = self.apply(Action(action_type=ActionType.START_DRAWING_TIMER))
        if result.success:
            self._start_timer()
        return result

    def next_round(self) -> TurnResult:
        return self.apply(Action.next_round())

    def end_turn(self) -> TurnResult:
        return self.apply(Action.end_turn())

    def reveal_penalties(self) -> TurnResult:
        return self.apply(Action(action_type=ActionType.REVEAL_PENALTIES))

    def spin_slot(self) -> TurnResult:
        return self.apply(Action(action_type=ActionType.SPIN_SLOT))

    def finish_slot_reward(self) -> TurnResult:
        return self.apply(Action(action_type=ActionType.FINISH_SLOT_REWARD))

    # =========================================================================
    # Guesses
    # =========================================================================

    def correct(self) -> TurnResult:
        return self.apply(Action.correct())

    def skip(self) -> TurnResult:
        return self.apply(Action.skip())

    def wrong(self) -> TurnResult:
        return self.apply(Action.wrong())

    def apply_perk(self, **effects) -> TurnResult:
        """Apply a perk effect and carry any timer delta over to the clock."""
        result = self.apply(Action.perk_effect(**effects))
        if result.success and self.timer.is_running:
            self.timer.set_remaining(self.game_state.turn_time_remaining)
        return result

    # =========================================================================
    # Clock
    # =========================================================================

    def tick(self, seconds: float = 1.0) -> TurnResult:
        """
        Advance the turn clock.

        The timer fires TIMEOUT when it runs out; otherwise the state's
        own clock is advanced by the same amount.
        """
        if not isinstance(self.timer, ManualTurnTimer):
            return self._result(ActionResult.failure("Timer is not tick-driven"))
        if not self.timer.is_running or self.timer.is_paused:
            return self._result(ActionResult.success_with_state(self.game_state))

        self._last_timeout = None
        self.timer.tick(seconds)
        if self._last_timeout is not None:
            return self._last_timeout
        return self.apply(Action.tick(seconds))

    def pause(self):
        self.timer.pause()

    def resume(self):
        self.timer.resume()

    @property
    def is_paused(self) -> bool:
        return self.timer.is_paused

    def _start_timer(self):
        self.timer.start(self.game_state.turn_time_remaining, self._on_timeout)

    def _on_timeout(self):
        if not self.game_state.turn_active:
            return
        logger.info("turn timed out", extra={"team_id": self.game_state.active_team_id})
        self._last_timeout = self.apply(Action.timeout())

    # =========================================================================
    # Core
    # =========================================================================

    def apply(self, action: Action) -> TurnResult:
        """Apply an action through the reducer and swap in the new state."""
        result = self.reducer.apply(self.game_state, action)
        if result.success and result.new_state is not None:
            self.session.game_state = result.new_state
            if result.turn_ended:
                self.timer.stop()
        self._sync_loop_state()
        if result.game_ended:
            self.session.mark_finished()
        return self._result(result)

    def _sync_loop_state(self):
        state = self.game_state
        if state is None or state.phase == GamePhase.SETUP:
            self.state = LoopState.SETUP
        elif state.phase == GamePhase.GAME_END:
            self.state = LoopState.GAME_OVER
        elif state.phase == GamePhase.SLOT_REWARD:
            self.state = LoopState.SLOT_REWARD
        elif state.phase == GamePhase.ROUND_END:
            self.state = LoopState.ROUND_END
        elif not state.turn_active:
            self.state = LoopState.WAITING_TURN
        elif not state.is_timer_running:
            self.state = LoopState.DRAWING_READY
        else:
            self.state = LoopState.TURN_RUNNING

    def _result(self, result: ActionResult) -> TurnResult:
        state = self.game_state
        term = state.current_term if state.turn_active else None
        team = state.current_team
        return TurnResult(
            success=result.success,
            loop_state=self.state,
            current_term=term.text if term else None,
            active_team=team.name if team else None,
            changes=list(result.state_changes),
            errors=[result.error] if result.error else [],
            error_code=result.error_code,
            turn_ended=result.turn_ended,
            round_ended=result.round_ended,
            game_ended=result.game_ended,
            winners=self.winners() if self.state == LoopState.GAME_OVER else [],
        )

    # =========================================================================
    # Standings
    # =========================================================================

    def standings(self) -> list[tuple[str, int]]:
        """(team name, score), best first. Ties keep team order."""
        teams = sorted(
            enumerate(self.game_state.teams),
            key=lambda pair: (-pair[1].score, pair[0]),
        )
        return [(team.name, team.score) for _, team in teams]

    def winners(self) -> list[str]:
        if not self.game_state.teams:
            return []
        best = max(team.score for team in self.game_state.teams)
        return [team.name for team in self.game_state.teams if team.score == best]
