"""
Shared simulation interface
---------------------------
A Simulation is the rule set of one game mode. It builds an initial state,
advances it by one logical tick given the player's intent, and projects it
into a read-only snapshot for the renderer. The state object is owned by the
caller (GameEngine or DualcadeEnv) and handed to `step`, which returns the
next state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional

from .entities import Direction, GameMode
from .timers import TICKS_PER_SECOND

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    RUNNING = "running"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class TickInput:
    """Player intent consumed at the start of a tick"""
    flap: bool = False
    direction: Optional[Direction] = None


class Outcome(NamedTuple):
    score: int
    secondary: int  # pipes passed or pellets collected
    duration_seconds: int


@dataclass
class SimulationState:
    tick: int = 0
    score: int = 0
    status: RunStatus = RunStatus.RUNNING
    end_reason: Optional[str] = None

    @property
    def duration_seconds(self) -> int:
        return self.tick // TICKS_PER_SECOND


class Simulation(ABC):
    """Rule set of one game mode"""

    mode: GameMode

    def __init__(self, speed_multiplier: float = 1.0):
        self.speed_multiplier = speed_multiplier

    @abstractmethod
    def initial_state(self, initial: Optional[int] = None, seed: Optional[int] = None) -> SimulationState:
        """Build a fresh run. `initial` is the starting shield or life count."""

    @abstractmethod
    def step(self, state: SimulationState, tick_input: TickInput) -> SimulationState:
        """Advance one tick: timers, motion/AI, collisions, score."""

    @abstractmethod
    def snapshot(self, state: SimulationState):
        """Read-only view of everything the renderer draws"""

    @abstractmethod
    def secondary(self, state: SimulationState) -> int:
        """Mode-specific counter reported with the outcome"""

    def set_shields(self, state: SimulationState, shields: int) -> bool:
        """Modes without shields ignore the request"""
        return False

    def current_shields(self, state: SimulationState) -> int:
        return 0

    def is_over(self, state: SimulationState) -> bool:
        return state.status is RunStatus.GAME_OVER

    def abort(self, state: SimulationState, reason: str) -> SimulationState:
        self._game_over(state, reason)
        return state

    def outcome(self, state: SimulationState) -> Outcome:
        return Outcome(state.score, self.secondary(state), state.duration_seconds)

    def _game_over(self, state: SimulationState, reason: str):
        state.status = RunStatus.GAME_OVER
        state.end_reason = reason
        logger.info("Game over (%s) at tick %d, score %d", reason, state.tick, state.score)
