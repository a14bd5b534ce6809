"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Owns the session manager (one local game at a time)
3. Exports and restores snapshots
4. Formats responses for the host UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    CreateGameRequest,
    ActionRequest,
    # Responses
    GameStateResponse,
    ActionResponse,
    CategoryInfo,
    CategoryListResponse,
    ErrorResponse,
    TeamInfo,
    GameSnapshot,
    # Enums
    ActionName,
    ErrorCode,
    SessionStatus,
)
from ..content import default_categories, make_category, select_categories
from ..engine_core.settings import (
    Category,
    GameSettings,
    TeamConfig,
    DEFAULT_TURN_TIME_LIMIT,
    DEFAULT_WORD_COUNT,
)
from ..session import SessionManager, Session, TurnResult


logger = logging.getLogger("timesup.api")


class InvalidSettingsError(ValueError):
    """Raised when a setup request is not playable."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass
class APIService:
    """
    Main API service for a host UI.

    Usage:
        service = APIService()

        state = service.create_game(CreateGameRequest(teams=["Red", "Blue"]))
        service.apply_action(state.session_id, ActionRequest(action="start_turn"))
        service.tick(state.session_id, 1.0)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    categories: list[Category] = field(default_factory=default_categories)

    def list_categories(self) -> CategoryListResponse:
        infos = [CategoryInfo.model_validate(c) for c in self.categories]
        return CategoryListResponse(categories=infos, count=len(infos))

    def create_game(self, request: CreateGameRequest) -> GameStateResponse:
        """
        Set up a new game and (by default) start it.

        Raises ValueError for unknown categories and InvalidSettingsError
        when the setup is not playable.
        """
        custom = [
            make_category(c.category_id, c.name, c.terms)
            for c in request.custom_categories
        ]
        available = self.categories + custom
        ids = request.categories or [c.category_id for c in self.categories]
        selected = select_categories(ids, available)

        settings = GameSettings(
            teams=[TeamConfig(name=name) for name in request.teams],
            selected_categories=selected,
            turn_time_limit=request.turn_time_limit or DEFAULT_TURN_TIME_LIMIT,
            game_mode=request.game_mode,
            difficulty=request.difficulty,
            word_count=request.word_count or DEFAULT_WORD_COUNT,
            random_seed=request.random_seed if request.random_seed is not None else 0,
        )
        # Silently shrink the word count to what the categories hold
        if settings.available_word_count < settings.word_count:
            settings.word_count = settings.max_word_count
        if not settings.is_valid:
            raise InvalidSettingsError(settings.validation_errors())

        session = self.session_manager.create_session(settings)
        if request.auto_start:
            result = self.session_manager.start_game(session.session_id)
            if not result.success:
                raise InvalidSettingsError(result.errors)
        return self._state_response(session)

    def get_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._state_response(session)

    def apply_action(self, session_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        """Dispatch a host action to the session's game loop."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        loop = session.loop
        action = request.action
        if action == ActionName.START_GAME:
            result = self.session_manager.start_game(session_id)
        elif action == ActionName.PAUSE:
            loop.pause()
            return ActionResponse(success=True, changes=["Paused"], state=self._state_response(session))
        elif action == ActionName.RESUME:
            loop.resume()
            return ActionResponse(success=True, changes=["Resumed"], state=self._state_response(session))
        elif action == ActionName.PERK_EFFECT:
            result = loop.apply_perk(
                team_id=request.team_id,
                score_delta=request.score_delta,
                timer_delta=request.timer_delta,
                forced_skip=request.forced_skip,
                flicker=request.flicker,
                slot_credits=request.slot_credits,
            )
        else:
            result = getattr(loop, action.value)()

        return self._action_response(session, result)

    def tick(self, session_id: str, seconds: float = 1.0) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._action_response(session, session.loop.tick(seconds))

    def export_snapshot(self, session_id: str) -> GameSnapshot | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return GameSnapshot.from_state(session.game_state)

    def restore_snapshot(self, snapshot: GameSnapshot) -> GameStateResponse:
        session = self.session_manager.restore_session(snapshot.to_state())
        logger.info("snapshot restored", extra={"session_id": session.session_id})
        return self._state_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        if not self.session_manager.get_session(session_id):
            return False
        self.session_manager.end_session(session_id, reason)
        return True

    # =========================================================================
    # Formatting
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session not found: {session_id}",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _action_response(self, session: Session, result: TurnResult) -> ActionResponse | ErrorResponse:
        if not result.success:
            code = result.error_code or "INVALID_ACTION"
            return ErrorResponse(
                error="; ".join(result.errors) or "Action failed",
                error_code=ErrorCode(code) if code in ErrorCode.__members__ else ErrorCode.INVALID_ACTION,
                details={"phase": session.game_state.phase.value, "loop_state": result.loop_state.value},
            )
        return ActionResponse(
            success=True,
            changes=result.changes,
            turn_ended=result.turn_ended,
            round_ended=result.round_ended,
            game_ended=result.game_ended,
            state=self._state_response(session),
        )

    def _state_response(self, session: Session) -> GameStateResponse:
        state = session.game_state
        loop = session.loop
        game_round = state.current_round
        active_id = state.active_team_id
        term = state.current_term if state.turn_active else None
        reveal = state.metadata.get("score_reveal")

        teams = [
            TeamInfo(
                team_id=team.team_id,
                name=team.name,
                score=team.score,
                round_scores=list(team.round_scores),
                is_active=team.team_id == active_id,
                hit_streak=state.team_hit_streaks.get(team.team_id, 0),
                open_penalty_cards=state.pending_penalty_cards(team.team_id),
                has_flicker=team.team_id in state.flicker_teams,
            )
            for team in state.teams
        ]

        return GameStateResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            phase=state.phase,
            loop_state=loop.state.value,
            round_number=game_round.value + 1,
            round_title=game_round.title,
            round_description=game_round.description,
            round_rules=game_round.detailed_rules,
            can_skip=game_round.can_skip,
            is_drawing_round=game_round.is_drawing,
            active_team_id=active_id,
            current_term=term.text if term else None,
            remaining_terms=state.remaining_terms_count,
            turn_time_remaining=state.turn_time_remaining,
            is_timer_running=state.is_timer_running,
            turn_active=state.turn_active,
            is_paused=loop.is_paused,
            forced_skip_active=state.active_forced_skip_team_id is not None,
            teams=teams,
            slot_reward_team_id=state.slot_reward_team_id,
            slot_credits=state.slot_credits.get(state.slot_reward_team_id, 0) if state.slot_reward_team_id else 0,
            score_reveal=reveal,
            winners=loop.winners() if loop.state.value == "game_over" else [],
        )
