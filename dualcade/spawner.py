"""
Obstacle and projectile lifecycle for the side-scroller
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from .entities import Obstacle, Projectile

logger = logging.getLogger(__name__)


class ObjectManager:
    """Creates obstacles/projectiles off the right edge and prunes them off the left edge"""

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        rng: Optional[np.random.Generator] = None,
        gap_size: float = 180.0,
        obstacle_width: float = 80.0,
        spacing: float = 300.0,
        base_speed: float = 4.0,  # px/tick at multiplier 1.0
        projectile_speed: float = 6.0,
        margin: float = 50.0,
    ):
        if gap_size + 2 * margin > height:
            raise ValueError(
                f"gap_size {gap_size} with margin {margin} does not fit height {height}"
            )
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else np.random.default_rng()
        self.gap_size = gap_size
        self.obstacle_width = obstacle_width
        self.spacing = spacing
        self.base_speed = base_speed
        self.projectile_speed = projectile_speed
        self.margin = margin

    def create_obstacle(self) -> Obstacle:
        lo = self.margin
        hi = self.height - self.gap_size - self.margin
        gap_top = float(self.rng.uniform(lo, hi))
        return Obstacle(
            x=float(self.width),
            gap_top=gap_top,
            gap_size=self.gap_size,
            width=self.obstacle_width,
        )

    def should_spawn_next(self, obstacles: List[Obstacle]) -> bool:
        if not obstacles:
            return True
        rightmost = max(o.x for o in obstacles)
        return rightmost < self.width - self.spacing

    def advance(self, obstacles: List[Obstacle], speed_multiplier: float = 1.0) -> List[Obstacle]:
        step = self.base_speed * speed_multiplier
        for o in obstacles:
            o.x -= step
        return [o for o in obstacles if o.x + o.width > 0]

    def create_projectile(self) -> Projectile:
        height = 16.0
        y = float(self.rng.uniform(self.margin, self.height - self.margin - height))
        projectile = Projectile(x=float(self.width), y=y, vx=-self.projectile_speed, height=height)
        logger.debug("Projectile spawned at y=%.1f", y)
        return projectile

    def advance_projectiles(
        self, projectiles: List[Projectile], speed_multiplier: float = 1.0
    ) -> List[Projectile]:
        for p in projectiles:
            p.x += p.vx * speed_multiplier
        return [p for p in projectiles if p.x + p.width > 0]
