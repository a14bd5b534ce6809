"""
Game State - The turn/round aggregate.

Holds the teams, the term pool and every cursor the game needs:
- which round is played
- which team is active
- where the term cursor points
- which terms were seen in this turn and this round
- per-team turn counters and hit streaks

Design principles:
- The term cursor is best-effort: it is resolved lazily to the
  nearest term the active team may play, so completions elsewhere
  in the pool never invalidate it
- Every scan over the circular pool is bounded
- Single writer: the reducer clones the state before mutating it,
  so a state handed out to readers is never changed underneath them
- Serializable: can be exported and restored at any point
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
import logging
import random
import uuid

from .settings import GameSettings, GamePhase, GameRound, ROUND_COUNT
from .team import Team
from .term import Term


logger = logging.getLogger("timesup.engine")


class NoTeamsError(ValueError):
    """Raised when a game is started without any team."""


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    Mutating methods change this instance in place; callers that need
    the previous state keep a clone (the reducer always does).
    """
    game_id: str
    settings: GameSettings = field(default_factory=GameSettings)
    teams: list[Team] = field(default_factory=list)
    terms: list[Term] = field(default_factory=list)

    # Cursors
    phase: GamePhase = GamePhase.SETUP
    current_round: GameRound = GameRound.ROUND_1
    current_team_index: int = 0
    current_term_index: int = 0

    # Turn clock
    turn_time_remaining: float = 0.0
    is_timer_running: bool = False
    turn_active: bool = False

    # Seen tracking (term indices)
    seen_terms_in_current_turn: set[int] = field(default_factory=set)
    seen_terms_in_current_round: set[int] = field(default_factory=set)

    # Per-team counters, keyed by team_id
    team_turn_counters: dict[str, int] = field(default_factory=dict)
    team_hit_streaks: dict[str, int] = field(default_factory=dict)

    # Flags requested by the perk layer
    forced_skip_teams: set[str] = field(default_factory=set)
    active_forced_skip_team_id: str | None = None
    flicker_teams: set[str] = field(default_factory=set)

    # Slot reward interstitial
    pending_slot_credits: dict[str, int] = field(default_factory=dict)
    slot_credits: dict[str, int] = field(default_factory=dict)
    slot_reward_team_id: str | None = None
    slot_spins: int = 0

    penalty_card_counter: int = 0
    random_seed: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        settings: GameSettings,
        terms: list[Term],
        game_id: str | None = None,
    ) -> GameState:
        """Build a state in SETUP phase from settings and a term pool."""
        teams = [
            Team(
                team_id=config.team_id or f"team_{i + 1}",
                name=config.name,
                relevant_rounds=settings.game_mode.total_rounds,
            )
            for i, config in enumerate(settings.teams)
        ]
        return cls(
            game_id=game_id or str(uuid.uuid4()),
            settings=settings,
            teams=teams,
            terms=list(terms),
            turn_time_remaining=settings.turn_time_limit,
            random_seed=settings.random_seed,
        )

    # =========================================================================
    # Teams
    # =========================================================================

    @property
    def team_count(self) -> int:
        return len(self.teams)

    @property
    def current_team(self) -> Team | None:
        if 0 <= self.current_team_index < len(self.teams):
            return self.teams[self.current_team_index]
        return None

    @property
    def active_team_id(self) -> str | None:
        team = self.current_team
        return team.team_id if team else None

    def get_team(self, team_id: str) -> Team | None:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        return None

    def team_index(self, team_id: str) -> int | None:
        for i, team in enumerate(self.teams):
            if team.team_id == team_id:
                return i
        return None

    def reset_team_turn_counters(self):
        self.team_turn_counters = {team.team_id: 0 for team in self.teams}

    def reset_team_hit_streaks(self):
        self.team_hit_streaks = {team.team_id: 0 for team in self.teams}

    # =========================================================================
    # Selectability
    # =========================================================================

    @property
    def pool_size(self) -> int:
        return len(self.terms)

    def is_term_selectable(self, term: Term, team_id: str | None) -> bool:
        """
        A term is selectable when it is still open in this round and it
        is either a start card, or a penalty card owned by team_id whose
        eligibility threshold has been reached.
        """
        if term.is_completed_in(self.current_round.value):
            return False
        if term.assigned_team_id is None:
            return True
        if team_id is None or term.assigned_team_id != team_id:
            return False
        return self.team_turn_counters.get(team_id, 0) >= term.available_from_team_turn

    def is_index_selectable(self, index: int, team_id: str | None) -> bool:
        if index < 0 or index >= len(self.terms):
            return False
        return self.is_term_selectable(self.terms[index], team_id)

    def is_penalty_term_active(self, term: Term) -> bool:
        """Penalty card whose owner has reached its eligibility threshold."""
        if term.assigned_team_id is None:
            return False
        turns = self.team_turn_counters.get(term.assigned_team_id, 0)
        return turns >= term.available_from_team_turn

    @property
    def available_indices(self) -> list[int]:
        """Indices the active team may play in the current round."""
        team_id = self.active_team_id
        return [
            i for i, term in enumerate(self.terms)
            if self.is_term_selectable(term, team_id)
        ]

    def _available_indices_for_current_turn(self) -> list[int]:
        return [i for i in self.available_indices if i not in self.seen_terms_in_current_turn]

    @property
    def remaining_terms_count(self) -> int:
        return len(self._available_indices_for_current_turn())

    # =========================================================================
    # Cursor resolution
    # =========================================================================

    def _next_selectable_index(self, start_index: int, team_id: str | None) -> int | None:
        size = len(self.terms)
        for offset in range(size):
            index = (start_index + offset) % size
            if self.is_index_selectable(index, team_id):
                return index
        return None

    def resolved_index_for_current_team(self, start_index: int | None = None) -> int | None:
        """First selectable index at or after the cursor, wrapping once."""
        if not self.terms:
            return None
        base = self.current_term_index if start_index is None else start_index
        bounded = base % len(self.terms)
        return self._next_selectable_index(bounded, self.active_team_id)

    def resolved_current_term_index(self) -> int:
        """Resolved index, falling back to the raw cursor."""
        resolved = self.resolved_index_for_current_team()
        return self.current_term_index if resolved is None else resolved

    @property
    def current_term(self) -> Term | None:
        index = self.resolved_index_for_current_team()
        if index is None:
            return None
        return self.terms[index]

    # =========================================================================
    # Term selection
    # =========================================================================

    def next_term(self, avoiding: int | None = None) -> int | None:
        """
        Move the cursor to the next term for the active team.

        Terms seen in this turn are skipped. The avoiding index is
        passed over once, but only while another candidate exists, so
        avoidance can never block selection. The scan is bounded to
        twice the pool size.

        Returns the selected index, or None when no candidate is left
        (the cursor is then unchanged and the turn should end).
        """
        candidates = self._available_indices_for_current_turn()
        if not candidates:
            logger.debug(
                "next_term: no candidates",
                extra={"team_id": self.active_team_id, "avoiding": avoiding},
            )
            return None

        team_id = self.active_team_id
        size = len(self.terms)
        start = self.resolved_index_for_current_team()
        index = candidates[0] if start is None else start
        avoided = False

        for _ in range(size * 2):
            index = (index + 1) % size
            if not self.is_index_selectable(index, team_id):
                continue
            if index in self.seen_terms_in_current_turn:
                continue
            if avoiding is not None and index == avoiding and len(candidates) > 1 and not avoided:
                avoided = True
                continue
            self.current_term_index = index
            logger.debug(
                "next_term: selected",
                extra={"term_index": index, "term_text": self.terms[index].text, "avoiding": avoiding},
            )
            return index

        return None

    def mark_current_term_completed(self) -> int | None:
        """Retire the resolved term for this round and record it as seen."""
        index = self.resolved_index_for_current_team()
        if index is None:
            return None
        self.terms[index].mark_completed(self.current_round.value, self.settings.game_mode)
        self.seen_terms_in_current_turn.add(index)
        self.seen_terms_in_current_round.add(index)
        return index

    def mark_current_term_as_seen(self) -> int | None:
        """Record a pass on the resolved term without completing it."""
        index = self.resolved_index_for_current_team()
        if index is None:
            return None
        self.seen_terms_in_current_turn.add(index)
        self.seen_terms_in_current_round.add(index)
        return index

    # =========================================================================
    # Turn end / round end checks
    # =========================================================================

    @property
    def has_team_seen_all_available_terms_for_turn(self) -> bool:
        """
        True when every open start card and every penalty card the
        active team may currently play has been shown in this turn.
        """
        team_id = self.active_team_id
        seen = self.seen_terms_in_current_turn
        for index, term in enumerate(self.terms):
            if index in seen or not self.is_term_selectable(term, team_id):
                continue
            if term.is_start_card or self.is_penalty_term_active(term):
                return False
        return True

    @property
    def has_team_seen_all_available_terms(self) -> bool:
        """
        Diagnostic variant that also counts the active team's penalty
        cards that are not eligible yet. Not used to end turns.
        """
        team_id = self.active_team_id
        round_index = self.current_round.value
        open_indices = {
            i for i, term in enumerate(self.terms)
            if not term.is_completed_in(round_index)
            and (term.is_start_card or term.assigned_team_id == team_id)
        }
        return open_indices.issubset(self.seen_terms_in_current_turn)

    def pending_penalty_cards(self, team_id: str) -> int:
        round_index = self.current_round.value
        return sum(
            1 for term in self.terms
            if term.assigned_team_id == team_id and not term.is_completed_in(round_index)
        )

    @property
    def all_terms_completed_for_current_round(self) -> bool:
        """
        A round is over once every start card is completed and at least
        one team has no open penalty card left in this round.
        """
        round_index = self.current_round.value
        start_cards = [t for t in self.terms if t.is_start_card]
        if not all(t.is_completed_in(round_index) for t in start_cards):
            return False

        pending = {team.team_id: self.pending_penalty_cards(team.team_id) for team in self.teams}
        logger.debug(
            "round completion check",
            extra={"round": round_index, "pending_penalties": pending},
        )
        return any(count == 0 for count in pending.values())

    # =========================================================================
    # Transitions
    # =========================================================================

    def reset_turn_clock(self):
        self.turn_time_remaining = self.settings.turn_time_limit

    def start(self):
        """
        Reset all per-game data and enter PLAYING.

        Side effects: term flags reset, team scores zeroed, turn counters
        and hit streaks zeroed, round 1 with the first team, no turn active.
        """
        if not self.teams:
            raise NoTeamsError("Cannot start a game without teams")

        mode = self.settings.game_mode
        for term in self.terms:
            term.reset()
        for team in self.teams:
            team.reset_scores()
            team.update_total_score(mode)

        self.current_round = GameRound.ROUND_1
        self.current_team_index = 0
        self.current_term_index = 0
        self.seen_terms_in_current_turn.clear()
        self.seen_terms_in_current_round.clear()
        self.reset_team_turn_counters()
        self.reset_team_hit_streaks()
        self.forced_skip_teams.clear()
        self.active_forced_skip_team_id = None
        self.flicker_teams.clear()
        self.pending_slot_credits.clear()
        self.slot_credits.clear()
        self.slot_reward_team_id = None
        self.penalty_card_counter = 0
        self.reset_turn_clock()
        self.is_timer_running = False
        self.turn_active = False
        self.phase = GamePhase.PLAYING
        self.debug_dump("after start")

    def start_new_turn(self):
        """
        Begin a turn for the active team.

        Side effects: turn seen set cleared, clock reset, the active
        team's turn counter incremented (this is what makes penalty
        cards eligible over time).
        """
        self.seen_terms_in_current_turn.clear()
        self.reset_turn_clock()
        team = self.current_team
        if team is not None:
            self.team_turn_counters[team.team_id] = self.team_turn_counters.get(team.team_id, 0) + 1

    def next_team(self):
        """
        Hand the turn to the next team.

        Side effects: clock reset, turn seen set cleared. The term cursor
        is kept, so the next team continues where the previous one stopped.
        """
        if not self.teams:
            return
        self.current_team_index = (self.current_team_index + 1) % len(self.teams)
        self.reset_turn_clock()
        self.seen_terms_in_current_turn.clear()

    def next_available_round(self) -> GameRound | None:
        mode = self.settings.game_mode
        for value in range(self.current_round.value + 1, ROUND_COUNT):
            candidate = GameRound(value)
            if candidate.is_available(mode):
                return candidate
        return None

    @property
    def is_last_round(self) -> bool:
        return self.next_available_round() is None

    def next_round(self) -> bool:
        """
        Advance to the next round the game mode plays.

        Side effects: starting team rotated by one, cursor reset to 0,
        both seen sets cleared, clock reset, pool reshuffled when the mode
        asks for it. When no round is left the phase becomes GAME_END.

        Returns False when the game ended instead.
        """
        following = self.next_available_round()
        if following is None:
            self.phase = GamePhase.GAME_END
            self.is_timer_running = False
            self.turn_active = False
            logger.info("game ended", extra={"game_id": self.game_id})
            return False

        self.current_round = following
        if self.teams:
            self.current_team_index = (self.current_team_index + 1) % len(self.teams)
        self.current_term_index = 0
        self.reset_turn_clock()
        self.seen_terms_in_current_turn.clear()
        self.seen_terms_in_current_round.clear()
        if self.settings.game_mode.should_shuffle_per_round:
            self.shuffle_terms()
        logger.info(
            "round started",
            extra={"round": following.value, "team_index": self.current_team_index},
        )
        return True

    def shuffle_terms(self):
        """Reorder the pool deterministically for the current round."""
        rng = random.Random(f"{self.random_seed}:{self.current_round.value}")
        rng.shuffle(self.terms)

    def add_penalty_card(self, term: Term, team_id: str) -> int:
        """
        Append a penalty card owned by team_id. It becomes playable on the
        owner's next turn. Returns its index.
        """
        term.assigned_team_id = team_id
        term.available_from_team_turn = self.team_turn_counters.get(team_id, 0) + 1
        self.terms.append(term)
        self.penalty_card_counter += 1
        logger.debug(
            "penalty card added",
            extra={"team_id": team_id, "term_text": term.text,
                   "available_from": term.available_from_team_turn},
        )
        return len(self.terms) - 1

    # =========================================================================
    # Scoring
    # =========================================================================

    def _team_at(self, team_index: int | None) -> Team | None:
        index = self.current_team_index if team_index is None else team_index
        if 0 <= index < len(self.teams):
            return self.teams[index]
        return None

    def add_score(self, points: int, round_index: int | None = None, team_index: int | None = None):
        """Score for a team (default: active team, current round)."""
        team = self._team_at(team_index)
        if team is None:
            return
        round_index = self.current_round.value if round_index is None else round_index
        team.add_score(points, round_index)

    def apply_penalty(
        self,
        points: int,
        round_index: int | None = None,
        reveal_at_end: bool = False,
        team_index: int | None = None,
    ):
        team = self._team_at(team_index)
        if team is None:
            return
        round_index = self.current_round.value if round_index is None else round_index
        team.apply_penalty(points, round_index, reveal_at_end)

    def reveal_pending_penalties(self) -> dict[str, tuple[int, int, int]]:
        """
        Reveal deferred penalties for every team at once.

        Returns team_id -> (score before, penalty, score after).
        """
        mode = self.settings.game_mode
        snapshot = {}
        for team in self.teams:
            before = team.score
            penalty = team.pending_penalty_total(mode)
            team.reveal_pending_penalties(mode)
            snapshot[team.team_id] = (before, penalty, team.score)
        logger.info("pending penalties revealed", extra={"reveal": snapshot})
        return snapshot

    # =========================================================================
    # Diagnostics / copying
    # =========================================================================

    def debug_dump(self, context: str):
        if not logger.isEnabledFor(logging.DEBUG):
            return
        term = self.current_term
        logger.debug(
            "state dump: %s", context,
            extra={
                "round": self.current_round.value,
                "team_index": self.current_team_index,
                "term_index": self.current_term_index,
                "term_text": term.text if term else None,
                "remaining": self.remaining_terms_count,
                "seen_in_turn": sorted(self.seen_terms_in_current_turn),
                "seen_in_round": sorted(self.seen_terms_in_current_round),
                "available": self.available_indices,
            },
        )

    def clone(self) -> GameState:
        """Deep copy the state. Settings are never mutated, so they are shared."""
        return deepcopy(self, {id(self.settings): self.settings})
