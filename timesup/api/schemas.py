"""
Pydantic Schemas for API - Request/response models and the game snapshot.

These models define the contract between a host UI and the engine.
GameSnapshot round-trips the full game aggregate, so a host can persist
a game at any point and resume it later with identical behavior.

Error Codes:
- INVALID_ACTION: Action is not legal in the current phase
- NO_TEAMS: Game started without teams
- EMPTY_POOL: Game started with an empty term pool
- INVALID_SETTINGS: Setup is not playable (teams, categories, word count)
- UNKNOWN_CATEGORY: Requested category id does not exist
- SESSION_NOT_FOUND: Session does not exist or was replaced
- INVALID_SNAPSHOT: Snapshot could not be restored
"""

from enum import Enum
from typing import Annotated, Optional, Any
from pydantic import BaseModel, Field, model_validator

from ..engine_core.settings import (
    Category,
    Difficulty,
    GameMode,
    GamePhase,
    GameRound,
    GameSettings,
    TeamConfig,
    ROUND_COUNT,
)
from ..engine_core.state import GameState
from ..engine_core.team import Team
from ..engine_core.term import Term


SNAPSHOT_VERSION = 1


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ActionName(str, Enum):
    """Actions a host can post."""
    START_GAME = "start_game"
    START_TURN = "start_turn"
    START_DRAWING_TIMER = "start_drawing_timer"
    CORRECT = "correct"
    SKIP = "skip"
    WRONG = "wrong"
    END_TURN = "end_turn"
    NEXT_ROUND = "next_round"
    REVEAL_PENALTIES = "reveal_penalties"
    SPIN_SLOT = "spin_slot"
    FINISH_SLOT_REWARD = "finish_slot_reward"
    PERK_EFFECT = "perk_effect"
    PAUSE = "pause"
    RESUME = "resume"


class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_ACTION = "INVALID_ACTION"
    NO_HANDLER = "NO_HANDLER"
    NO_TEAMS = "NO_TEAMS"
    EMPTY_POOL = "EMPTY_POOL"
    HANDLER_ERROR = "HANDLER_ERROR"
    INVALID_SETTINGS = "INVALID_SETTINGS"
    UNKNOWN_CATEGORY = "UNKNOWN_CATEGORY"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"


# =============================================================================
# Snapshot Models
# =============================================================================

class TermSnapshot(BaseModel):
    """A term with its completion flags and penalty card metadata."""
    text: str
    english_translation: Optional[str] = None
    term_id: str
    completed_in_rounds: list[bool] = Field(default_factory=lambda: [False] * ROUND_COUNT)
    is_completed: bool = False
    assigned_team_id: Optional[str] = None
    available_from_team_turn: int = Field(0, ge=0)

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _check_rounds(self):
        if len(self.completed_in_rounds) != ROUND_COUNT:
            raise ValueError(f"completed_in_rounds must have {ROUND_COUNT} entries")
        return self

    def to_term(self) -> Term:
        return Term(
            text=self.text,
            english_translation=self.english_translation,
            term_id=self.term_id,
            completed_in_rounds=list(self.completed_in_rounds),
            is_completed=self.is_completed,
            assigned_team_id=self.assigned_team_id,
            available_from_team_turn=self.available_from_team_turn,
        )


class TeamSnapshot(BaseModel):
    """A team with its score buckets."""
    team_id: str
    name: str
    score: int = Field(0, ge=0)
    round_scores: list[int] = Field(default_factory=lambda: [0] * ROUND_COUNT)
    pending_round_penalties: list[int] = Field(default_factory=lambda: [0] * ROUND_COUNT)
    relevant_rounds: int = Field(ROUND_COUNT, ge=1, le=ROUND_COUNT)

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _check_buckets(self):
        for name in ("round_scores", "pending_round_penalties"):
            values = getattr(self, name)
            if len(values) != ROUND_COUNT or any(v < 0 for v in values):
                raise ValueError(f"{name} must hold {ROUND_COUNT} non-negative values")
        return self

    def to_team(self) -> Team:
        team = Team(
            team_id=self.team_id,
            name=self.name,
            round_scores=list(self.round_scores),
            pending_round_penalties=list(self.pending_round_penalties),
            relevant_rounds=self.relevant_rounds,
        )
        team.update_total_score()
        return team


class CategorySnapshot(BaseModel):
    category_id: str
    name: str
    level: str = "custom"
    terms: list[TermSnapshot] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TeamConfigSnapshot(BaseModel):
    name: str
    team_id: Optional[str] = None

    model_config = {"from_attributes": True}


class SettingsSnapshot(BaseModel):
    """Static game configuration."""
    teams: list[TeamConfigSnapshot] = Field(default_factory=list)
    selected_categories: list[CategorySnapshot] = Field(default_factory=list)
    turn_time_limit: float = Field(30.0, gt=0)
    game_mode: GameMode = GameMode.CLASSIC
    difficulty: Difficulty = Difficulty.EASY
    word_count: int = Field(50, ge=0)
    random_seed: int = 0

    model_config = {"from_attributes": True}

    def to_settings(self) -> GameSettings:
        return GameSettings(
            teams=[TeamConfig(name=t.name, team_id=t.team_id) for t in self.teams],
            selected_categories=[
                Category(
                    category_id=c.category_id,
                    name=c.name,
                    level=c.level,
                    terms=[t.to_term() for t in c.terms],
                )
                for c in self.selected_categories
            ],
            turn_time_limit=self.turn_time_limit,
            game_mode=self.game_mode,
            difficulty=self.difficulty,
            word_count=self.word_count,
            random_seed=self.random_seed,
        )


class GameSnapshot(BaseModel):
    """
    Complete, restorable game aggregate.

    Seen sets are stored sorted so equal states give equal snapshots.
    """
    snapshot_version: int = SNAPSHOT_VERSION
    game_id: str
    settings: SettingsSnapshot
    teams: list[TeamSnapshot] = Field(default_factory=list)
    terms: list[TermSnapshot] = Field(default_factory=list)

    phase: GamePhase = GamePhase.SETUP
    current_round: GameRound = GameRound.ROUND_1
    current_team_index: int = Field(0, ge=0)
    current_term_index: int = Field(0, ge=0)

    turn_time_remaining: float = Field(0.0, ge=0)
    is_timer_running: bool = False
    turn_active: bool = False

    seen_terms_in_current_turn: list[int] = Field(default_factory=list)
    seen_terms_in_current_round: list[int] = Field(default_factory=list)
    team_turn_counters: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
    team_hit_streaks: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)

    forced_skip_teams: list[str] = Field(default_factory=list)
    active_forced_skip_team_id: Optional[str] = None
    flicker_teams: list[str] = Field(default_factory=list)

    pending_slot_credits: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
    slot_credits: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
    slot_reward_team_id: Optional[str] = None
    slot_spins: int = Field(0, ge=0)

    penalty_card_counter: int = Field(0, ge=0)
    random_seed: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_cursors(self):
        if self.snapshot_version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version {self.snapshot_version}")
        if self.phase != GamePhase.SETUP and not self.teams:
            raise ValueError("A started game needs at least one team")
        if self.teams and self.current_team_index >= len(self.teams):
            raise ValueError("current_team_index does not point at a team")
        if not self.current_round.is_available(self.settings.game_mode):
            raise ValueError(
                f"{self.current_round.title} is not played in {self.settings.game_mode.value} mode"
            )
        size = len(self.terms)
        for name in ("seen_terms_in_current_turn", "seen_terms_in_current_round"):
            if any(i < 0 or i >= size for i in getattr(self, name)):
                raise ValueError(f"{name} holds indices outside the term pool")
        return self

    @classmethod
    def from_state(cls, state: GameState) -> "GameSnapshot":
        return cls(
            game_id=state.game_id,
            settings=SettingsSnapshot.model_validate(state.settings),
            teams=[TeamSnapshot.model_validate(t) for t in state.teams],
            terms=[TermSnapshot.model_validate(t) for t in state.terms],
            phase=state.phase,
            current_round=state.current_round,
            current_team_index=state.current_team_index,
            current_term_index=state.current_term_index,
            turn_time_remaining=state.turn_time_remaining,
            is_timer_running=state.is_timer_running,
            turn_active=state.turn_active,
            seen_terms_in_current_turn=sorted(state.seen_terms_in_current_turn),
            seen_terms_in_current_round=sorted(state.seen_terms_in_current_round),
            team_turn_counters=dict(state.team_turn_counters),
            team_hit_streaks=dict(state.team_hit_streaks),
            forced_skip_teams=sorted(state.forced_skip_teams),
            active_forced_skip_team_id=state.active_forced_skip_team_id,
            flicker_teams=sorted(state.flicker_teams),
            pending_slot_credits=dict(state.pending_slot_credits),
            slot_credits=dict(state.slot_credits),
            slot_reward_team_id=state.slot_reward_team_id,
            slot_spins=state.slot_spins,
            penalty_card_counter=state.penalty_card_counter,
            random_seed=state.random_seed,
            metadata=dict(state.metadata),
        )

    def to_state(self) -> GameState:
        return GameState(
            game_id=self.game_id,
            settings=self.settings.to_settings(),
            teams=[t.to_team() for t in self.teams],
            terms=[t.to_term() for t in self.terms],
            phase=self.phase,
            current_round=self.current_round,
            current_team_index=self.current_team_index,
            current_term_index=self.current_term_index,
            turn_time_remaining=self.turn_time_remaining,
            is_timer_running=self.is_timer_running,
            turn_active=self.turn_active,
            seen_terms_in_current_turn=set(self.seen_terms_in_current_turn),
            seen_terms_in_current_round=set(self.seen_terms_in_current_round),
            team_turn_counters=dict(self.team_turn_counters),
            team_hit_streaks=dict(self.team_hit_streaks),
            forced_skip_teams=set(self.forced_skip_teams),
            active_forced_skip_team_id=self.active_forced_skip_team_id,
            flicker_teams=set(self.flicker_teams),
            pending_slot_credits=dict(self.pending_slot_credits),
            slot_credits=dict(self.slot_credits),
            slot_reward_team_id=self.slot_reward_team_id,
            slot_spins=self.slot_spins,
            penalty_card_counter=self.penalty_card_counter,
            random_seed=self.random_seed,
            metadata=dict(self.metadata),
        )


# =============================================================================
# Request Models
# =============================================================================

class CustomCategoryRequest(BaseModel):
    """A host-defined category sent along with the setup."""
    category_id: str
    name: str
    terms: list[str] = Field(..., min_length=1)


class CreateGameRequest(BaseModel):
    """Request to set up a new game."""
    teams: list[str] = Field(..., min_length=2, description="Team names in play order")
    categories: list[str] = Field(
        default_factory=list,
        description="Built-in or custom category ids; empty selects all built-in ones",
    )
    custom_categories: list[CustomCategoryRequest] = Field(default_factory=list)
    game_mode: GameMode = GameMode.CLASSIC
    difficulty: Difficulty = Difficulty.EASY
    turn_time_limit: Optional[float] = Field(None, gt=0, description="Seconds per turn")
    word_count: Optional[int] = Field(None, ge=5, le=200)
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")
    auto_start: bool = Field(True, description="Start the game right away")


class ActionRequest(BaseModel):
    """An action posted by the host."""
    action: ActionName
    team_id: Optional[str] = Field(None, description="Target team for perk effects")
    score_delta: Optional[int] = None
    timer_delta: Optional[float] = None
    forced_skip: Optional[bool] = None
    flicker: Optional[bool] = None
    slot_credits: Optional[int] = Field(None, ge=0)


class TickRequest(BaseModel):
    seconds: float = Field(1.0, gt=0, le=60)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class TeamInfo(BaseModel):
    """Team information for display."""
    team_id: str
    name: str
    score: int = 0
    round_scores: list[int] = Field(default_factory=list)
    is_active: bool = False
    hit_streak: int = 0
    open_penalty_cards: int = 0
    has_flicker: bool = False


class GameStateResponse(BaseModel):
    """Everything a host screen needs to render the game."""
    session_id: str
    status: SessionStatus
    phase: GamePhase
    loop_state: str

    round_number: int
    round_title: str
    round_description: str
    round_rules: str
    can_skip: bool
    is_drawing_round: bool

    active_team_id: Optional[str] = None
    current_term: Optional[str] = None
    remaining_terms: int = 0
    turn_time_remaining: float = 0.0
    is_timer_running: bool = False
    turn_active: bool = False
    is_paused: bool = False
    forced_skip_active: bool = False

    teams: list[TeamInfo] = Field(default_factory=list)
    slot_reward_team_id: Optional[str] = None
    slot_credits: int = 0
    score_reveal: Optional[dict[str, list[int]]] = None
    winners: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Response after applying an action or a tick."""
    success: bool
    changes: list[str] = Field(default_factory=list)
    turn_ended: bool = False
    round_ended: bool = False
    game_ended: bool = False
    state: GameStateResponse
    api_version: str = "v1"


class CategoryInfo(BaseModel):
    category_id: str
    name: str
    level: str
    term_count: int

    model_config = {"from_attributes": True}


class CategoryListResponse(BaseModel):
    categories: list[CategoryInfo]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
