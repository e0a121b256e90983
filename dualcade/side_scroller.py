"""
SideScrollerSimulation
----------------------
Flapping avatar vs. scrolling obstacles and projectiles.

- Gravity pulls the avatar down; a flap sets a fixed upward velocity
- Obstacles spawn off the right edge at a minimum spacing with a random gap
- Passing an obstacle scores one point, unless it was struck
- An obstacle hit spends a shield (knockback + invincibility); with no shields
  left it ends the run
- Projectiles start after a warm-up and then arrive on a fixed interval;
  touching one always ends the run
- Touching the ground always ends the run
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .collision import has_passed, hits_obstacle, hits_projectile
from .entities import Avatar, GameMode, Obstacle, Projectile, ShieldCounter
from .physics import AvatarPhysics
from .simulation import RunStatus, Simulation, SimulationState, TickInput
from .snapshot import ObstacleView, SideScrollerSnapshot
from .spawner import ObjectManager
from .timers import Countdown, ProjectileClock, Scheduler, seconds_to_ticks
from .utils import make_rng

logger = logging.getLogger(__name__)


@dataclass
class SideScrollerState(SimulationState):
    avatar: Optional[Avatar] = None
    obstacles: List[Obstacle] = field(default_factory=list)
    projectiles: List[Projectile] = field(default_factory=list)
    shields: ShieldCounter = field(default_factory=ShieldCounter)
    pipes_passed: int = 0
    timers: Scheduler = field(default_factory=Scheduler)
    spawner: Optional[ObjectManager] = None


class SideScrollerSimulation(Simulation):
    """Side-scrolling obstacle avoidance rules"""

    mode = GameMode.SIDE_SCROLLER

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        shields: int = 3,
        seed: Optional[int] = None,
        speed_multiplier: float = 1.5,
        avatar_x: float = 100.0,
        avatar_y: float = 285.0,
        gravity: float = 0.5,
        flap_velocity: float = -8.0,
        max_fall_speed: float = 12.0,
        gap_size: float = 180.0,
        obstacle_width: float = 80.0,
        obstacle_spacing: float = 300.0,
        scroll_speed: float = 4.0,
        projectile_speed: float = 6.0,
        projectile_warmup_seconds: float = 15.0,
        projectile_interval_seconds: float = 15.0,
        projectile_warning_seconds: float = 2.0,
        invincibility_ticks: int = 60,
        hit_effect_ticks: int = 30,
        knockback_velocity: float = -8.0,
        knockback_distance: float = 20.0,
        min_avatar_x: float = 50.0,
    ):
        super().__init__(speed_multiplier=speed_multiplier)
        if shields < 0:
            raise ValueError(f"shields must be >= 0, got {shields}")

        # Arena
        self.width = width
        self.height = height
        self.shields = shields
        self.seed = seed

        # Avatar
        self.avatar_x = avatar_x
        self.avatar_y = avatar_y
        self.physics = AvatarPhysics(gravity, flap_velocity, max_fall_speed)

        # Objects
        self.gap_size = gap_size
        self.obstacle_width = obstacle_width
        self.obstacle_spacing = obstacle_spacing
        self.scroll_speed = scroll_speed
        self.projectile_speed = projectile_speed

        # Timers
        self.projectile_warmup = seconds_to_ticks(projectile_warmup_seconds)
        self.projectile_interval = seconds_to_ticks(projectile_interval_seconds)
        self.projectile_warning = seconds_to_ticks(projectile_warning_seconds)
        self.invincibility_ticks = invincibility_ticks
        self.hit_effect_ticks = hit_effect_ticks

        # Shield hit response
        self.knockback_velocity = knockback_velocity
        self.knockback_distance = knockback_distance
        self.min_avatar_x = min_avatar_x

    # ----------------------------
    # Simulation API
    # ----------------------------

    def initial_state(self, initial: Optional[int] = None, seed: Optional[int] = None) -> SideScrollerState:
        shields = self.shields if initial is None else initial
        if shields < 0:
            raise ValueError(f"shields must be >= 0, got {shields}")

        spawner = ObjectManager(
            width=self.width,
            height=self.height,
            rng=make_rng(self.seed if seed is None else seed),
            gap_size=self.gap_size,
            obstacle_width=self.obstacle_width,
            spacing=self.obstacle_spacing,
            base_speed=self.scroll_speed,
            projectile_speed=self.projectile_speed,
        )

        timers = Scheduler()
        timers.add("invincibility", Countdown(self.invincibility_ticks))
        timers.add("hit_effect", Countdown(self.hit_effect_ticks))
        timers.add(
            "projectile",
            ProjectileClock(self.projectile_warmup, self.projectile_interval, self.projectile_warning),
        )

        state = SideScrollerState(
            avatar=Avatar(x=self.avatar_x, y=self.avatar_y),
            shields=ShieldCounter(current=shields, maximum=shields),
            timers=timers,
            spawner=spawner,
        )
        state.obstacles.append(spawner.create_obstacle())
        return state

    def step(self, state: SideScrollerState, tick_input: TickInput) -> SideScrollerState:
        if state.status is not RunStatus.RUNNING:
            return state
        state.tick += 1

        fired = state.timers.tick()
        if "projectile" in fired:
            state.projectiles.append(state.spawner.create_projectile())
            logger.debug("Projectile %d launched at tick %d",
                         state.timers["projectile"].spawned, state.tick)

        self._update_avatar(state, tick_input)
        self._update_objects(state)
        self._handle_collisions(state)
        if state.status is RunStatus.RUNNING:
            self._score_passes(state)
        return state

    def snapshot(self, state: SideScrollerState) -> SideScrollerSnapshot:
        return SideScrollerSnapshot(
            tick=state.tick,
            status=state.status,
            width=self.width,
            height=self.height,
            score=state.score,
            pipes_passed=state.pipes_passed,
            avatar=state.avatar,
            obstacles=tuple(
                ObstacleView(o.x, o.gap_top, o.gap_size, o.width) for o in state.obstacles
            ),
            projectiles=tuple(p.box for p in state.projectiles),
            shields=state.shields.current,
            max_shields=state.shields.maximum,
            invincible=state.timers["invincibility"].active,
            hit_effect=state.timers["hit_effect"].active,
            missile_warning=state.timers["projectile"].warning,
        )

    def secondary(self, state: SideScrollerState) -> int:
        return state.pipes_passed

    def set_shields(self, state: SideScrollerState, shields: int) -> bool:
        state.shields.reset(shields)
        return True

    def current_shields(self, state: SideScrollerState) -> int:
        return state.shields.current

    # ----------------------------
    # Core mechanics
    # ----------------------------

    def _update_avatar(self, state: SideScrollerState, tick_input: TickInput):
        avatar = state.avatar
        if tick_input.flap:
            avatar = self.physics.apply_impulse(avatar)
        avatar = self.physics.integrate(avatar)
        state.avatar = self.physics.bounce_off_ceiling(avatar)

    def _update_objects(self, state: SideScrollerState):
        spawner = state.spawner
        state.obstacles = spawner.advance(state.obstacles, self.speed_multiplier)
        state.projectiles = spawner.advance_projectiles(state.projectiles, self.speed_multiplier)

        if spawner.should_spawn_next(state.obstacles):
            state.obstacles.append(spawner.create_obstacle())

    def _score_passes(self, state: SideScrollerState):
        # Runs after collisions so an obstacle that took a shield never scores
        for o in state.obstacles:
            if o.scored or o.struck or not has_passed(state.avatar, o):
                continue
            o.scored = True
            state.score += 1
            state.pipes_passed += 1

    def _handle_collisions(self, state: SideScrollerState):
        avatar = state.avatar

        # Ground is always fatal
        if self.physics.is_ground_collision(avatar, self.height):
            self._game_over(state, "ground")
            return

        # Projectiles ignore shields and invincibility
        for p in state.projectiles:
            if hits_projectile(avatar, p):
                self._game_over(state, "projectile")
                return

        if state.timers["invincibility"].active:
            return

        for o in state.obstacles:
            if o.struck or not hits_obstacle(avatar, o, self.height):
                continue
            if state.shields.absorb():
                o.struck = True
                o.scored = True
                state.avatar = replace(
                    avatar,
                    velocity=self.knockback_velocity,
                    x=max(self.min_avatar_x, avatar.x - self.knockback_distance),
                )
                state.timers["invincibility"].start()
                state.timers["hit_effect"].start()
                logger.info("Obstacle hit, shields remaining %d/%d",
                            state.shields.current, state.shields.maximum)
            else:
                self._game_over(state, "obstacle")
            break
