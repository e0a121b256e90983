"""
Game entity dataclasses
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .timers import Countdown

Cell = Tuple[int, int]  # (col, row)


class GameMode(Enum):
    SIDE_SCROLLER = "side_scroller"
    MAZE_CHASE = "maze_chase"


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# Order in which candidate moves are generated; earlier wins a tie.
DIRECTION_PRIORITY = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


class AgentMode(Enum):
    SCATTER = "scatter"
    CHASE = "chase"
    FRIGHTENED = "frightened"
    EATEN = "eaten"


# ----------------------------
# Side-scroller
# ----------------------------

@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle, y grows downward"""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class Avatar:
    """Flapping side-scroller avatar"""
    x: float
    y: float
    width: float = 60.0
    height: float = 40.0
    velocity: float = 0.0  # px/tick, negative is up
    rotation: float = 0.0  # degrees, visual only

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)


@dataclass
class Obstacle:
    """Pipe pair with an open vertical gap"""
    x: float
    gap_top: float
    gap_size: float = 180.0
    width: float = 80.0
    scored: bool = False  # never counted twice
    struck: bool = False  # absorbed a shield hit; no longer collides or scores

    def boxes(self, bounds_height: float) -> Tuple[Box, Box]:
        top = Box(self.x, 0.0, self.width, self.gap_top)
        gap_bottom = self.gap_top + self.gap_size
        bottom = Box(self.x, gap_bottom, self.width, max(0.0, bounds_height - gap_bottom))
        return top, bottom


@dataclass
class Projectile:
    """Missile flying right to left"""
    x: float
    y: float
    vx: float = -6.0
    width: float = 40.0
    height: float = 16.0

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)


@dataclass
class ShieldCounter:
    """Consumable obstacle-hit charges"""
    current: int = 3
    maximum: int = 3

    def absorb(self) -> bool:
        """Spend one charge. False means the hit was not absorbed."""
        if self.current <= 0:
            return False
        self.current -= 1
        return True

    def reset(self, charges: Optional[int] = None):
        if charges is not None:
            if charges < 0:
                raise ValueError(f"shield count must be >= 0, got {charges}")
            self.maximum = charges
        self.current = self.maximum


# ----------------------------
# Maze chase
# ----------------------------

@dataclass
class PlayerAgent:
    """Grid-bound player; moves one cell per movement cadence"""
    col: int
    row: int
    direction: Direction = Direction.RIGHT
    next_direction: Optional[Direction] = None

    @property
    def cell(self) -> Cell:
        return (self.col, self.row)


@dataclass
class PursuingAgent:
    """Pursuing agent driven by the scatter/chase/frightened/eaten state machine"""
    identity: int
    col: int
    row: int
    home: Cell  # scatter corner
    spawn: Cell  # pen cell
    direction: Direction = Direction.UP
    mode: AgentMode = AgentMode.SCATTER
    in_pen: bool = True
    is_vulnerable: bool = False
    is_blinking: bool = False
    release_timer: Countdown = field(default_factory=Countdown)

    @property
    def cell(self) -> Cell:
        return (self.col, self.row)

    @property
    def released(self) -> bool:
        return not self.in_pen


@dataclass
class Pellet:
    col: int
    row: int
    is_power: bool = False
    collected: bool = False

    @property
    def cell(self) -> Cell:
        return (self.col, self.row)
