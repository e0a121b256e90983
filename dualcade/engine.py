"""
GameEngine - orchestrates one simulation run
--------------------------------------------
- Owns the simulation state; it is the only writer
- Buffers input between ticks (flap, directional intent)
- The host calls `tick(dt)` at its own cadence (display refresh, test loop ...)
- Renders a snapshot after every tick and reports the score/outcome
- Any exception inside a tick ends the run through the normal completion path

States: IDLE -> RUNNING <-> PAUSED -> GAME_OVER, with LEVEL_COMPLETE reported
for one tick between maze levels. DISPOSED is terminal.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Union

from .configs.game_config import MAZE_CHASE_CONFIG, SIDE_SCROLLER_CONFIG, SPEED_TIERS
from .entities import Direction, GameMode
from .errors import EngineDisposedError, RendererUnavailableError
from .maze_chase import MazeChaseSimulation
from .side_scroller import SideScrollerSimulation
from .simulation import Outcome, RunStatus, Simulation, SimulationState, TickInput
from .timers import TICKS_PER_SECOND

logger = logging.getLogger(__name__)

STEP_SECONDS = 1.0 / TICKS_PER_SECOND


class EngineStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"
    DISPOSED = "disposed"


class SpeedTier(Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"

    @property
    def multiplier(self) -> float:
        return SPEED_TIERS[self.value]


def build_simulation(mode: GameMode, **kwargs) -> Simulation:
    """Create the simulation for `mode`, filling unspecified options from the config"""
    mode = GameMode(mode)
    if mode is GameMode.SIDE_SCROLLER:
        return SideScrollerSimulation(**{**SIDE_SCROLLER_CONFIG, **kwargs})
    return MazeChaseSimulation(**{**MAZE_CHASE_CONFIG, **kwargs})


class GameEngine:
    """Tick-driven engine for one game mode"""

    def __init__(
        self,
        mode: Union[GameMode, str],
        renderer,
        on_game_end: Callable[[int, int, int], None],
        on_score_update: Optional[Callable[[int], None]] = None,
        on_level_complete: Optional[Callable[[int, int], None]] = None,
        simulation: Optional[Simulation] = None,
        max_catch_up_steps: int = 5,
        **simulation_kwargs,
    ):
        if renderer is None or not callable(getattr(renderer, "render", None)):
            raise RendererUnavailableError(f"renderer {renderer!r} has no render(snapshot) method")

        self.mode = GameMode(mode)
        self.simulation = simulation if simulation is not None else build_simulation(self.mode, **simulation_kwargs)
        if self.simulation.mode is not self.mode:
            raise ValueError(f"simulation plays {self.simulation.mode.value}, engine mode is {self.mode.value}")

        self.renderer = renderer
        self.on_game_end = on_game_end
        self.on_score_update = on_score_update
        self.on_level_complete = on_level_complete
        self.max_catch_up_steps = max_catch_up_steps

        self.status = EngineStatus.IDLE
        self.state: Optional[SimulationState] = None
        self.last_snapshot = None

        self._initial: Optional[int] = None
        self._pending_flap = False
        self._pending_direction: Optional[Direction] = None
        self._accumulator = 0.0
        self._ended = False
        self._disposers: List[Callable[[], None]] = []

        self.state = self.simulation.initial_state()
        try:
            self.render()
        except Exception as exc:
            raise RendererUnavailableError(f"initial render failed: {exc}") from exc

        logger.info("Game engine initialized for mode %s", self.mode.value)

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def reset(self, initial: Optional[int] = None):
        """Rebuild the mode state (starting shields or lives) and render one idle frame"""
        self._check_not_disposed()
        if initial is not None:
            self._initial = initial
        self.state = self.simulation.initial_state(self._initial)
        self.status = EngineStatus.IDLE
        self._clear_input()
        self._ended = False
        logger.info("Engine reset for %s (initial=%s)", self.mode.value, self._initial)
        self.render()

    def start(self):
        """Begin a fresh run; the host drives it with `tick()`"""
        self._check_not_disposed()
        self.state = self.simulation.initial_state(self._initial)
        self._clear_input()
        self._ended = False
        self.status = EngineStatus.RUNNING
        logger.info(
            "Game started: mode=%s shields/lives=%d speed=%.2f",
            self.mode.value, self.current_shields(), self.simulation.speed_multiplier,
        )

    def pause(self):
        if self.status is EngineStatus.RUNNING:
            self.status = EngineStatus.PAUSED
            logger.debug("Paused at tick %d", self.state.tick)

    def resume(self):
        if self.status is EngineStatus.PAUSED:
            self.status = EngineStatus.RUNNING
            self._accumulator = 0.0
            logger.debug("Resumed at tick %d", self.state.tick)

    def dispose(self):
        """Stop the run for good and detach every registered listener"""
        if self.status is EngineStatus.DISPOSED:
            return
        self.status = EngineStatus.DISPOSED
        self._ended = True
        self._clear_input()
        disposers, self._disposers = self._disposers, []
        for detach in disposers:
            try:
                detach()
            except Exception:
                logger.exception("Listener detach failed during dispose")
        logger.info("Game engine disposed")

    def add_disposer(self, detach: Callable[[], None]):
        """Register a callback that detaches an input listener on dispose"""
        if self.status is EngineStatus.DISPOSED:
            detach()
            return
        self._disposers.append(detach)

    # ----------------------------
    # Settings
    # ----------------------------

    def set_speed(self, tier: Union[SpeedTier, str]):
        tier = SpeedTier(tier)
        self.simulation.speed_multiplier = tier.multiplier
        logger.info("Speed changed to %s (x%.2f)", tier.value, tier.multiplier)

    def set_shields(self, shields: int):
        if self.mode is not GameMode.SIDE_SCROLLER:
            logger.debug("set_shields ignored in %s mode", self.mode.value)
            return
        if shields < 0:
            raise ValueError(f"shields must be >= 0, got {shields}")
        self._initial = shields
        self.simulation.set_shields(self.state, shields)
        logger.info("Shields set to %d", shields)

    def current_shields(self) -> int:
        """Shields in the side-scroller, lives in the maze"""
        return self.simulation.current_shields(self.state)

    # ----------------------------
    # Input (consumed at the start of the next tick)
    # ----------------------------

    def handle_flap_input(self):
        if self.mode is GameMode.SIDE_SCROLLER and self.status is EngineStatus.RUNNING:
            self._pending_flap = True

    def handle_directional_input(self, direction: Union[Direction, str]):
        # Turns queued during the level-complete tick apply on the new level
        if self.mode is not GameMode.MAZE_CHASE or not self.running:
            return
        if isinstance(direction, str):
            direction = Direction[direction.upper()]
        self._pending_direction = direction

    def _clear_input(self):
        self._pending_flap = False
        self._pending_direction = None
        self._accumulator = 0.0

    # ----------------------------
    # Tick loop
    # ----------------------------

    @property
    def running(self) -> bool:
        return not self._ended and self.status in (EngineStatus.RUNNING, EngineStatus.LEVEL_COMPLETE)

    def tick(self, dt: Optional[float] = None) -> int:
        """Advance the run.

        With `dt=None` exactly one logical tick is simulated. With a frame time
        in seconds, elapsed time is accumulated and consumed in fixed steps,
        at most `max_catch_up_steps` per call. Returns the number of steps run.
        """
        if not self.running:
            return 0

        if dt is None:
            steps = 1
        else:
            self._accumulator += dt
            steps = int(self._accumulator / STEP_SECONDS)
            self._accumulator -= steps * STEP_SECONDS
            if steps > self.max_catch_up_steps:
                steps = self.max_catch_up_steps
                self._accumulator = 0.0

        ran = 0
        for _ in range(steps):
            if not self.running:
                break
            self._step()
            ran += 1
        return ran

    def _step(self):
        tick_input = TickInput(flap=self._pending_flap, direction=self._pending_direction)
        self._pending_flap = False
        self._pending_direction = None

        try:
            previous_score = self.state.score
            self.state = self.simulation.step(self.state, tick_input)

            if self.state.score != previous_score and self.on_score_update is not None:
                self.on_score_update(self.state.score)

            if self.state.status is RunStatus.LEVEL_COMPLETE:
                self.status = EngineStatus.LEVEL_COMPLETE
                if self.on_level_complete is not None:
                    self.on_level_complete(self.state.level, self.state.score)
            elif self.status is EngineStatus.LEVEL_COMPLETE:
                self.status = EngineStatus.RUNNING

            self.render()
        except Exception:
            logger.exception("Error in game loop at tick %d", self.state.tick)
            self.simulation.abort(self.state, "error")

        if self.simulation.is_over(self.state):
            self._finish()

    def _finish(self):
        if self._ended:
            return
        self._ended = True
        if self.state.status is RunStatus.LEVEL_COMPLETE:
            self.status = EngineStatus.LEVEL_COMPLETE
        else:
            self.status = EngineStatus.GAME_OVER
        outcome = self.outcome
        logger.info(
            "Run ended (%s): score=%d secondary=%d duration=%ds",
            self.state.end_reason, outcome.score, outcome.secondary, outcome.duration_seconds,
        )
        self.on_game_end(outcome.score, outcome.secondary, outcome.duration_seconds)

    # ----------------------------
    # Output
    # ----------------------------

    @property
    def outcome(self) -> Outcome:
        return self.simulation.outcome(self.state)

    def render(self):
        self.last_snapshot = self.simulation.snapshot(self.state)
        self.renderer.render(self.last_snapshot)

    def _check_not_disposed(self):
        if self.status is EngineStatus.DISPOSED:
            raise EngineDisposedError("engine was disposed; create a new one")
