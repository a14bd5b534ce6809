"""
Session Manager - Creates and holds the local game session.

LIFECYCLE:
1. Host configures teams, categories, mode and difficulty
2. Host creates a session -> term pool built, state in SETUP
3. During game: the GameLoop drives the state through the reducer
4. Game ends -> session marked finished, state kept for the results screen
5. Host can export a snapshot at any point and restore it later

One device plays one game: the manager holds a single active session.
Creating or restoring a session replaces the previous one.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import uuid
import time

from ..engine_core.settings import GameSettings
from ..engine_core.state import GameState
from ..engine_core.term import Term
from ..content.provider import build_pool_for_settings
from .game_loop import GameLoop
from .timer import TurnTimer


logger = logging.getLogger("timesup.session")


class SessionState(Enum):
    """State of a game session."""
    CREATED = "created"  # Settings chosen, game not started
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Replaced or ended early


@dataclass
class Session:
    """
    A local game session.

    Contains:
    - The current game state (replaced after every action)
    - The loop driving it
    - Session metadata
    """
    session_id: str
    created_at: float
    game_state: GameState

    state: SessionState = SessionState.CREATED
    loop: GameLoop | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.state in {SessionState.CREATED, SessionState.ACTIVE}

    def mark_finished(self):
        self.state = SessionState.GAME_OVER
        logger.info("session finished", extra={"session_id": self.session_id})


class SessionManager:
    """
    Manages the single local session.

    No persistence - snapshots are exported by the API layer on request.
    """

    def __init__(self, timer_factory=None):
        self._session: Session | None = None
        self._timer_factory = timer_factory

    def _new_timer(self) -> TurnTimer | None:
        return self._timer_factory() if self._timer_factory else None

    def create_session(
        self,
        settings: GameSettings,
        terms: list[Term] | None = None,
    ) -> Session:
        """
        Create a new session.

        Args:
            settings: Game configuration
            terms: Optional explicit term pool; built from the selected
                categories when omitted

        Returns:
            New Session in CREATED state
        """
        if terms is None:
            terms = build_pool_for_settings(settings)
        session_id = str(uuid.uuid4())
        game_state = GameState.create(settings, terms, game_id=session_id)
        return self._install(session_id, game_state)

    def restore_session(self, game_state: GameState) -> Session:
        """Install a session around a previously exported state."""
        return self._install(game_state.game_id, game_state)

    def _install(self, session_id: str, game_state: GameState) -> Session:
        if self._session is not None and self._session.is_active():
            self.end_session(reason="replaced")

        session = Session(
            session_id=session_id,
            created_at=time.time(),
            game_state=game_state,
        )
        session.loop = GameLoop(session, timer=self._new_timer())
        if game_state.phase.value == "game_end":
            session.state = SessionState.GAME_OVER
        elif game_state.phase.value != "setup":
            session.state = SessionState.ACTIVE
        self._session = session
        logger.info(
            "session created",
            extra={"session_id": session_id, "teams": game_state.team_count,
                   "terms": game_state.pool_size},
        )
        return session

    def get_session(self, session_id: str | None = None) -> Session | None:
        """Get the active session, optionally checking its id."""
        if self._session is None:
            return None
        if session_id is not None and self._session.session_id != session_id:
            return None
        return self._session

    def start_game(self, session_id: str | None = None):
        session = self.get_session(session_id)
        if session is None:
            return None
        result = session.loop.start_game()
        if result.success:
            session.state = SessionState.ACTIVE
        return result

    def end_session(self, session_id: str | None = None, reason: str = "completed"):
        """End the session and drop it."""
        session = self.get_session(session_id)
        if session is None:
            return
        if session.loop is not None:
            session.loop.timer.stop()
        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        self._session = None
        logger.info("session ended", extra={"session_id": session.session_id, "reason": reason})
