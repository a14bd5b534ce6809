"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Copy-on-write: (state, action) -> new_state, the input state is
  never modified
- Validates before applying
- Returns ActionResult with success/failure
- Game rules live here: skip permissions per round, penalties per
  difficulty, penalty cards, turn/round/game end transitions
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random

from .state import GameState, NoTeamsError
from .settings import Difficulty, GamePhase
from .action import Action, ActionType, ActionResult
from .term import Term


logger = logging.getLogger("timesup.engine.reducer")

SLOT_STREAK_INTERVAL = 10
SLOT_WIN_POINTS = 10
SLOT_LOSS_POINTS = -15

# Actions that only make sense while a team is mid-turn
TURN_ACTIONS = {
    ActionType.CORRECT,
    ActionType.SKIP,
    ActionType.WRONG,
    ActionType.TICK,
    ActionType.TIMEOUT,
    ActionType.END_TURN,
    ActionType.START_DRAWING_TIMER,
}


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            logger.info(
                "action rejected: %s", validation_error,
                extra={"action": action.action_type.value, "phase": state.phase.value},
            )
            return ActionResult.failure(validation_error, error_code="INVALID_ACTION")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        new_state = state.clone()
        try:
            result = handler(new_state, action)
        except NoTeamsError as e:
            return ActionResult.failure(str(e), error_code="NO_TEAMS")
        except Exception as e:
            logger.exception("handler failed", extra={"action": action.action_type.value})
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR")

        if result.success:
            logger.debug(
                "action applied",
                extra={"action": action.action_type.value, "changes": result.state_changes},
            )
        return result

    def _validate_action(self, state: GameState, action: Action) -> str | None:
        """
        Validate that an action is legal in the current state.

        Returns error message if invalid, None if valid.
        """
        action_type = action.action_type

        if state.phase == GamePhase.GAME_END:
            return "Game is over - no actions allowed"

        if state.phase == GamePhase.SETUP:
            if action_type != ActionType.START_GAME:
                return "Game not started - only start_game allowed during setup"
            return None

        if action_type == ActionType.START_GAME:
            return "Game already started"

        if action_type in TURN_ACTIONS:
            if state.phase != GamePhase.PLAYING or not state.turn_active:
                return "No active turn"

        if action_type == ActionType.START_TURN:
            if state.phase != GamePhase.PLAYING:
                return f"Cannot start a turn during {state.phase.value}"
            if state.turn_active:
                return "Turn already running"

        if action_type == ActionType.SKIP and not state.current_round.can_skip:
            return f"Skipping is not allowed in {state.current_round.title.lower()}"

        if action_type == ActionType.WRONG:
            if not state.current_round.can_skip:
                return f"Wrong guesses are not tracked in {state.current_round.title.lower()}"
            if state.settings.difficulty != Difficulty.HARD:
                return "Wrong guesses are only tracked on hard difficulty"
            if state.active_forced_skip_team_id == state.active_team_id:
                return "Forced skip pending - skip this term first"

        if action_type == ActionType.CORRECT:
            if state.active_forced_skip_team_id == state.active_team_id:
                return "Forced skip pending - skip this term first"

        if action_type == ActionType.START_DRAWING_TIMER:
            if not state.current_round.is_drawing:
                return "The drawing timer is only used in the drawing round"
            if state.is_timer_running:
                return "Timer already running"

        if action_type == ActionType.NEXT_ROUND and state.phase != GamePhase.ROUND_END:
            return "Round is not finished"

        if action_type in {ActionType.SPIN_SLOT, ActionType.FINISH_SLOT_REWARD}:
            if state.phase != GamePhase.SLOT_REWARD:
                return "No slot reward in progress"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_GAME: self._handle_start_game,
            ActionType.START_TURN: self._handle_start_turn,
            ActionType.CORRECT: self._handle_correct,
            ActionType.SKIP: self._handle_miss,
            ActionType.WRONG: self._handle_miss,
            ActionType.TICK: self._handle_tick,
            ActionType.TIMEOUT: self._handle_timeout,
            ActionType.END_TURN: self._handle_timeout,
            ActionType.START_DRAWING_TIMER: self._handle_start_drawing_timer,
            ActionType.NEXT_ROUND: self._handle_next_round,
            ActionType.REVEAL_PENALTIES: self._handle_reveal_penalties,
            ActionType.SPIN_SLOT: self._handle_spin_slot,
            ActionType.FINISH_SLOT_REWARD: self._handle_finish_slot_reward,
            ActionType.PERK_EFFECT: self._handle_perk_effect,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Flow
    # =========================================================================

    def _handle_start_game(self, state: GameState, action: Action) -> ActionResult:
        if not state.terms:
            return ActionResult.failure("Term pool is empty", error_code="EMPTY_POOL")
        state.start()
        return ActionResult.success_with_state(
            state,
            changes=[f"Game started with {state.team_count} teams and {state.pool_size} terms"],
        )

    def _handle_start_turn(self, state: GameState, action: Action) -> ActionResult:
        """
        Start the active team's turn.

        A forced skip scheduled for the team becomes active. When the team
        has nothing to play the turn ends right away. The drawing round
        waits for START_DRAWING_TIMER before the clock runs.
        """
        team = state.current_team
        state.start_new_turn()
        state.turn_active = True
        self._reset_streak(state, team.team_id)

        if team.team_id in state.forced_skip_teams:
            state.forced_skip_teams.discard(team.team_id)
            state.active_forced_skip_team_id = team.team_id

        result = ActionResult.success_with_state(state, changes=[f"{team.name} starts turn"])
        if state.current_term is None:
            result.state_changes.append(f"No term available for {team.name}, turn skipped")
            self._end_turn(state, result)
            return result

        state.is_timer_running = not state.current_round.is_drawing
        state.debug_dump("start_turn")
        return result

    def _handle_next_round(self, state: GameState, action: Action) -> ActionResult:
        """
        Leave ROUND_END: either start the next round or end the game.

        On the last round deferred penalties (medium difficulty) are
        revealed for every team before the game ends.
        """
        result = ActionResult.success_with_state(state)
        if state.is_last_round:
            if state.settings.difficulty == Difficulty.MEDIUM:
                self._reveal(state, result)
            for team in state.teams:
                team.update_total_score(state.settings.game_mode)
            state.next_round()
            result.game_ended = True
            result.state_changes.append("Game over")
            return result

        state.next_round()
        state.phase = GamePhase.PLAYING
        state.turn_active = False
        result.state_changes.append(
            f"{state.current_round.title}: {state.current_round.description}"
        )
        return result

    def _handle_reveal_penalties(self, state: GameState, action: Action) -> ActionResult:
        result = ActionResult.success_with_state(state)
        self._reveal(state, result)
        return result

    def _reveal(self, state: GameState, result: ActionResult):
        snapshot = state.reveal_pending_penalties()
        state.metadata["score_reveal"] = {
            team_id: list(values) for team_id, values in snapshot.items()
        }
        for team_id, (before, penalty, after) in snapshot.items():
            name = state.get_team(team_id).name
            result.state_changes.append(f"{name}: {before} - {penalty} pending = {after}")

    # =========================================================================
    # Guess outcomes
    # =========================================================================

    def _handle_correct(self, state: GameState, action: Action) -> ActionResult:
        team = state.current_team
        term = state.current_term
        if term is None:
            return ActionResult.failure("No current term available")

        state.add_score(1)
        self._increment_streak(state, team.team_id)
        state.mark_current_term_completed()

        result = ActionResult.success_with_state(
            state, changes=[f"{team.name} guessed '{term.text}' (+1)"],
        )
        if state.has_team_seen_all_available_terms_for_turn:
            self._end_turn(state, result)
        else:
            state.next_term(None)
        return result

    def _handle_miss(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle a skip or a wrong guess.

        The term is recorded as seen (not completed), the difficulty
        penalty is applied and, for a wrong guess, a penalty card is
        added for the team. The next term avoids the one just missed.
        """
        is_wrong = action.action_type == ActionType.WRONG
        team = state.current_team
        term = state.current_term
        if term is None:
            return ActionResult.failure("No current term available")

        missed_index = state.mark_current_term_as_seen()
        label = "missed" if is_wrong else "skipped"
        result = ActionResult.success_with_state(state, changes=[f"{team.name} {label} '{term.text}'"])

        self._apply_skip_penalty(state, result)
        if is_wrong:
            penalty_term = self._generate_penalty_term(state, team.name)
            state.add_penalty_card(penalty_term, team.team_id)
            result.state_changes.append(f"Penalty card '{penalty_term.text}' assigned to {team.name}")
        else:
            state.active_forced_skip_team_id = None
        self._reset_streak(state, team.team_id)

        if state.has_team_seen_all_available_terms_for_turn:
            self._end_turn(state, result)
            return result

        state.next_term(avoiding=missed_index)
        if state.current_term is None:
            self._end_turn(state, result)
        return result

    def _apply_skip_penalty(self, state: GameState, result: ActionResult):
        difficulty = state.settings.difficulty
        if difficulty == Difficulty.MEDIUM:
            state.apply_penalty(1, reveal_at_end=True)
            result.state_changes.append("-1 pending penalty")
        elif difficulty == Difficulty.HARD:
            state.apply_penalty(1)
            result.state_changes.append("-1 penalty")

    def _generate_penalty_term(self, state: GameState, team_name: str) -> Term:
        """
        Pick a penalty card text from the selected categories, preferring
        texts not already in the pool. Falls back to a numbered card.
        """
        number = state.penalty_card_counter + 1
        pool = [t for c in state.settings.selected_categories for t in c.terms]
        existing = {t.text.lower() for t in state.terms}
        unused = [t for t in pool if t.text.lower() not in existing]

        rng = random.Random(f"{state.random_seed}:penalty:{number}")
        source = unused or pool
        if source:
            picked = rng.choice(source)
            return Term(
                text=picked.text,
                english_translation=picked.english_translation,
                term_id=f"penalty_{number}",
            )
        return Term(text=f"Penalty card {number} - {team_name}", term_id=f"penalty_{number}")

    # =========================================================================
    # Clock
    # =========================================================================

    def _handle_tick(self, state: GameState, action: Action) -> ActionResult:
        result = ActionResult.success_with_state(state)
        if not state.is_timer_running:
            return result
        seconds = action.payload.seconds if action.payload.seconds is not None else 1.0
        state.turn_time_remaining = max(0.0, state.turn_time_remaining - seconds)
        if state.turn_time_remaining <= 0:
            result.state_changes.append("Time is up")
            self._end_turn(state, result)
        return result

    def _handle_timeout(self, state: GameState, action: Action) -> ActionResult:
        result = ActionResult.success_with_state(state, changes=["Turn ended"])
        self._end_turn(state, result)
        return result

    def _handle_start_drawing_timer(self, state: GameState, action: Action) -> ActionResult:
        state.is_timer_running = True
        return ActionResult.success_with_state(state, changes=["Drawing timer started"])

    def _end_turn(self, state: GameState, result: ActionResult):
        """
        Close the active team's turn.

        Side effects: clock stopped, streak and turn-scoped flags of the
        finishing team cleared, pending slot credits become spendable.
        If the round is not complete the next team is up (hand-off in
        PLAYING); otherwise the phase becomes ROUND_END. A team with slot
        credits first gets the SLOT_REWARD interstitial.
        """
        state.is_timer_running = False
        state.turn_active = False
        finishing = state.active_team_id
        if finishing is not None:
            pending = state.pending_slot_credits.pop(finishing, 0)
            if pending > 0:
                state.slot_credits[finishing] = state.slot_credits.get(finishing, 0) + pending
                state.slot_reward_team_id = finishing
            self._reset_streak(state, finishing)
            state.flicker_teams.discard(finishing)
        state.active_forced_skip_team_id = None

        round_completed = state.all_terms_completed_for_current_round
        if not round_completed:
            state.next_team()

        result.turn_ended = True
        if state.slot_reward_team_id is not None:
            state.phase = GamePhase.SLOT_REWARD
            result.state_changes.append("Slot reward unlocked")
        elif round_completed:
            state.phase = GamePhase.ROUND_END
            result.round_ended = True
            result.state_changes.append(f"{state.current_round.title} complete")
        else:
            state.phase = GamePhase.PLAYING
        state.debug_dump("end_turn")

    # =========================================================================
    # Streaks, slot reward, perks
    # =========================================================================

    def _increment_streak(self, state: GameState, team_id: str):
        streak = state.team_hit_streaks.get(team_id, 0) + 1
        state.team_hit_streaks[team_id] = streak
        if streak % SLOT_STREAK_INTERVAL == 0:
            state.pending_slot_credits[team_id] = state.pending_slot_credits.get(team_id, 0) + 1
            logger.debug("slot credit earned", extra={"team_id": team_id, "streak": streak})

    def _reset_streak(self, state: GameState, team_id: str):
        state.team_hit_streaks[team_id] = 0

    def _handle_spin_slot(self, state: GameState, action: Action) -> ActionResult:
        team_id = state.slot_reward_team_id
        credits = state.slot_credits.get(team_id, 0)
        if credits <= 0:
            return ActionResult.failure("No slot credits left")

        rng = random.Random(f"{state.random_seed}:slot:{state.slot_spins}")
        delta = SLOT_WIN_POINTS if rng.random() < 0.5 else SLOT_LOSS_POINTS
        state.add_score(delta, team_index=state.team_index(team_id))
        state.slot_spins += 1
        if credits - 1 > 0:
            state.slot_credits[team_id] = credits - 1
        else:
            state.slot_credits.pop(team_id, None)

        team = state.get_team(team_id)
        sign = "+" if delta >= 0 else ""
        return ActionResult.success_with_state(state, changes=[f"{team.name}: slot {sign}{delta}"])

    def _handle_finish_slot_reward(self, state: GameState, action: Action) -> ActionResult:
        state.slot_credits.pop(state.slot_reward_team_id, None)
        state.slot_reward_team_id = None
        result = ActionResult.success_with_state(state)
        if state.all_terms_completed_for_current_round:
            state.phase = GamePhase.ROUND_END
            result.round_ended = True
        else:
            state.phase = GamePhase.PLAYING
        return result

    def _handle_perk_effect(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply effects decided by the perk layer.

        Unknown teams are ignored. Timer deltas only touch the running
        turn of the target team.
        """
        payload = action.payload
        team_id = payload.team_id or state.active_team_id
        team_index = state.team_index(team_id) if team_id else None
        result = ActionResult.success_with_state(state)
        if team_index is None:
            return result

        is_active = team_id == state.active_team_id and state.turn_active
        if payload.score_delta:
            state.add_score(payload.score_delta, team_index=team_index)
            result.state_changes.append(f"score {payload.score_delta:+d}")
        if payload.timer_delta and is_active:
            state.turn_time_remaining = max(0.0, state.turn_time_remaining + payload.timer_delta)
            result.state_changes.append(f"timer {payload.timer_delta:+g}s")
        if payload.forced_skip is True:
            if is_active:
                state.active_forced_skip_team_id = team_id
            else:
                state.forced_skip_teams.add(team_id)
        elif payload.forced_skip is False:
            state.forced_skip_teams.discard(team_id)
            if state.active_forced_skip_team_id == team_id:
                state.active_forced_skip_team_id = None
        if payload.flicker is True:
            state.flicker_teams.add(team_id)
        elif payload.flicker is False:
            state.flicker_teams.discard(team_id)
        if payload.slot_credits:
            state.pending_slot_credits[team_id] = (
                state.pending_slot_credits.get(team_id, 0) + payload.slot_credits
            )
        return result


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a reducer and applies the action.
    """
    return Reducer().apply(state, action)
