"""
Turn Timer - The clock contract the game loop drives turns with.

The engine never owns a clock. A host plugs in a TurnTimer; the loop
starts it when a turn begins and turns its timeout into a TIMEOUT
action.

Contract:
- on_timeout fires at most once per start()
- on_timeout never fires after stop()
- stopping discards a pending timeout without touching game state
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable
import logging


logger = logging.getLogger("timesup.session.timer")


class TurnTimer(ABC):
    """Abstract countdown used for one turn at a time."""

    @abstractmethod
    def start(self, seconds: float, on_timeout: Callable[[], None]):
        """Start (or restart) the countdown."""
        pass

    @abstractmethod
    def pause(self):
        pass

    @abstractmethod
    def resume(self):
        pass

    @abstractmethod
    def stop(self):
        """Stop the countdown and discard any pending timeout."""
        pass

    @abstractmethod
    def set_remaining(self, seconds: float):
        """Adjust the remaining time of a running countdown."""
        pass

    @property
    @abstractmethod
    def remaining(self) -> float:
        pass

    @property
    @abstractmethod
    def is_paused(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        pass


class ManualTurnTimer(TurnTimer):
    """
    Tick-driven timer.

    Time only passes when tick() is called, which makes turns fully
    deterministic for tests, simulations and hosts with their own
    frame clock.
    """

    def __init__(self):
        self._remaining = 0.0
        self._running = False
        self._paused = False
        self._on_timeout: Callable[[], None] | None = None

    def start(self, seconds: float, on_timeout: Callable[[], None]):
        self._remaining = max(0.0, seconds)
        self._on_timeout = on_timeout
        self._running = True
        self._paused = False

    def pause(self):
        if self._running:
            self._paused = True

    def resume(self):
        self._paused = False

    def stop(self):
        self._running = False
        self._paused = False
        self._on_timeout = None

    def set_remaining(self, seconds: float):
        self._remaining = max(0.0, seconds)

    @property
    def remaining(self) -> float:
        return self._remaining

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_running(self) -> bool:
        return self._running

    def tick(self, seconds: float = 1.0) -> bool:
        """
        Advance the clock. Returns True if this tick fired the timeout.
        """
        if not self._running or self._paused:
            return False
        self._remaining = max(0.0, self._remaining - seconds)
        if self._remaining > 0:
            return False

        callback = self._on_timeout
        self._running = False
        self._on_timeout = None
        logger.debug("turn timer expired")
        if callback is not None:
            callback()
        return True
