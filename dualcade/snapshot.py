"""
Read-only frame snapshots handed to renderers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .entities import AgentMode, Avatar, Box, Direction
from .simulation import RunStatus


@dataclass(frozen=True)
class ObstacleView:
    x: float
    gap_top: float
    gap_size: float
    width: float


@dataclass(frozen=True)
class SideScrollerSnapshot:
    tick: int
    status: RunStatus
    width: int
    height: int
    score: int
    pipes_passed: int
    avatar: Avatar
    obstacles: Tuple[ObstacleView, ...]
    projectiles: Tuple[Box, ...]
    shields: int
    max_shields: int
    invincible: bool
    hit_effect: bool
    missile_warning: bool


@dataclass(frozen=True)
class PlayerView:
    col: int
    row: int
    x: float
    y: float
    direction: Direction


@dataclass(frozen=True)
class AgentView:
    identity: int
    col: int
    row: int
    x: float
    y: float  # includes the pen bob offset
    direction: Direction
    mode: AgentMode
    in_pen: bool
    is_vulnerable: bool
    is_blinking: bool


@dataclass(frozen=True)
class PelletView:
    col: int
    row: int
    is_power: bool


@dataclass(frozen=True)
class MazeChaseSnapshot:
    tick: int
    status: RunStatus
    cell_size: int
    grid: np.ndarray  # read-only CellKind grid, rows x cols
    score: int
    lives: int
    level: int
    pellets_collected: int
    player: PlayerView
    agents: Tuple[AgentView, ...]
    pellets: Tuple[PelletView, ...]  # uncollected only
    phase: AgentMode
    invulnerable: bool
