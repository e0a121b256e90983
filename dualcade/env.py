"""
DualcadeEnv - gymnasium adapter over either game mode
-----------------------------------------------------
- Gymnasium API around a Simulation (no engine, no wall clock)
- Discrete actions:
    side_scroller: 0 nothing, 1 flap
    maze_chase:    0 keep heading, 1 up, 2 down, 3 left, 4 right
- Each env step runs `frame_skip` ticks; the action is applied on the first
- Reward is the score delta; the episode terminates when the run is over and
  is truncated after `max_steps` ticks
- Vector observation, every component mapped to [-1, 1]

Quick test:
    python -m dualcade.env --mode side_scroller
"""

from __future__ import annotations

import argparse
import time
from typing import Any, Dict, Optional, Union

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .engine import build_simulation
from .entities import DIRECTION_PRIORITY, GameMode
from .simulation import TickInput
from .utils import clamp, manhattan

MAZE_AGENT_SLOTS = 4


class DualcadeEnv(gym.Env):
    """Either dualcade mode as a gymnasium environment"""

    metadata = {"render_modes": ["human"], "render_fps": 60}

    def __init__(
        self,
        mode: Union[GameMode, str] = GameMode.MAZE_CHASE,
        render_mode: Optional[str] = None,
        max_steps: int = 3600,  # ticks, 60s at 60 ticks/sec
        frame_skip: int = 4,
        **simulation_kwargs,
    ):
        super().__init__()
        if frame_skip < 1:
            raise ValueError(f"frame_skip must be >= 1, got {frame_skip}")

        self.mode = GameMode(mode)
        self.render_mode = render_mode
        self.max_steps = max_steps
        self.frame_skip = frame_skip
        self.simulation = build_simulation(self.mode, **simulation_kwargs)

        if self.mode is GameMode.SIDE_SCROLLER:
            self.action_space = spaces.Discrete(2)
            # avatar y, velocity, next obstacle dx / gap top / gap bottom,
            # shields, nearest projectile dx / dy, projectile warning
            obs_dim = 9
        else:
            self.action_space = spaces.Discrete(1 + len(DIRECTION_PRIORITY))
            # player col/row, per agent dx/dy/vulnerable/in_pen,
            # nearest pellet dx/dy, lives, pellets remaining
            obs_dim = 2 + MAZE_AGENT_SLOTS * 4 + 2 + 2
        self.observation_space = spaces.Box(low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32)

        # Arcade rendering state
        self._window = None

        self.state = None
        self._ticks = 0
        self._initial_lives = 1

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        initial = (options or {}).get("initial")
        self.state = self.simulation.initial_state(initial, seed=seed)
        self._ticks = 0
        self._initial_lives = max(1, self.simulation.current_shields(self.state))

        obs = self._get_obs()
        info = self._get_info()
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action):
        tick_input = self._decode_action(int(action))
        start_score = self.state.score

        for _ in range(self.frame_skip):
            self.state = self.simulation.step(self.state, tick_input)
            self._ticks += 1
            tick_input = TickInput()
            if self.simulation.is_over(self.state):
                break

        reward = float(self.state.score - start_score)
        terminated = self.simulation.is_over(self.state)
        truncated = not terminated and self._ticks >= self.max_steps

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _decode_action(self, action: int) -> TickInput:
        if self.mode is GameMode.SIDE_SCROLLER:
            return TickInput(flap=action == 1)
        if action == 0:
            return TickInput()
        return TickInput(direction=DIRECTION_PRIORITY[action - 1])

    # ----------------------------
    # Observation / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        if self.mode is GameMode.SIDE_SCROLLER:
            parts = self._side_scroller_obs()
        else:
            parts = self._maze_chase_obs()
        return np.array([clamp(v, -1.0, 1.0) for v in parts], dtype=np.float32)

    def _side_scroller_obs(self):
        sim, s = self.simulation, self.state
        a = s.avatar
        w, h = sim.width, sim.height

        parts = [
            (a.y / h) * 2 - 1,
            a.velocity / sim.physics.max_fall_speed,
        ]

        ahead = [o for o in s.obstacles if o.x + o.width > a.x]
        if ahead:
            o = min(ahead, key=lambda o: o.x)
            parts += [(o.x - a.x) / w, (o.gap_top / h) * 2 - 1, ((o.gap_top + o.gap_size) / h) * 2 - 1]
        else:
            parts += [1.0, 0.0, 0.0]

        parts.append(s.shields.current / max(1, s.shields.maximum) * 2 - 1)

        incoming = [p for p in s.projectiles if p.x + p.width > a.x]
        if incoming:
            p = min(incoming, key=lambda p: p.x)
            parts += [(p.x - a.x) / w, (p.y - a.y) / h]
        else:
            parts += [1.0, 0.0]

        parts.append(1.0 if s.timers["projectile"].warning else 0.0)
        return parts

    def _maze_chase_obs(self):
        s = self.state
        maze = s.maze
        w, h = maze.width, maze.height
        player = s.player

        parts = [(player.col / w) * 2 - 1, (player.row / h) * 2 - 1]

        for i in range(MAZE_AGENT_SLOTS):
            if i < len(s.agents):
                g = s.agents[i]
                parts += [
                    (g.col - player.col) / w,
                    (g.row - player.row) / h,
                    1.0 if g.is_vulnerable else 0.0,
                    1.0 if g.in_pen else 0.0,
                ]
            else:
                parts += [0.0, 0.0, 0.0, 0.0]

        left = [p for p in s.pellets if not p.collected]
        if left:
            p = min(left, key=lambda p: manhattan(p.cell, player.cell))
            parts += [(p.col - player.col) / w, (p.row - player.row) / h]
        else:
            parts += [0.0, 0.0]

        parts.append(s.lives / self._initial_lives * 2 - 1)
        parts.append(len(left) / max(1, len(s.pellets)) * 2 - 1)
        return parts

    def _get_info(self) -> Dict[str, Any]:
        outcome = self.simulation.outcome(self.state)
        info = {
            "score": outcome.score,
            "secondary": outcome.secondary,
            "duration_seconds": outcome.duration_seconds,
            "tick": self.state.tick,
            "status": self.state.status.value,
            "end_reason": self.state.end_reason,
        }
        if self.mode is GameMode.SIDE_SCROLLER:
            info["shields"] = self.state.shields.current
        else:
            info["lives"] = self.state.lives
            info["level"] = self.state.level
        return info

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            from .render import SnapshotWindow

            if self.mode is GameMode.SIDE_SCROLLER:
                width, height = self.simulation.width, self.simulation.height
            else:
                size = self.simulation.cell_size
                width, height = self.simulation.maze.width * size, self.simulation.maze.height * size
            self._window = SnapshotWindow(width, height, f"DualcadeEnv - {self.mode.value}")

        self._window.snapshot = self.simulation.snapshot(self.state)
        # Keep the window responsive and show the frame
        self._window.dispatch_events()
        self._window.on_draw()
        self._window.flip()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(mode: Union[GameMode, str] = GameMode.MAZE_CHASE, render: bool = True, seed: int = 42):
    """Run a random episode for testing"""
    env = DualcadeEnv(mode, render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    print(f"Running {env.mode.value} episode...")

    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward
        if render:
            time.sleep(1 / 60)

    print(f"Random episode return: {total} (secondary={info['secondary']}, "
          f"duration={info['duration_seconds']}s, end={info['end_reason']})")

    env.close()
    return total, info


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run one random DualcadeEnv episode")
    parser.add_argument("--mode", choices=[m.value for m in GameMode], default=GameMode.MAZE_CHASE.value)
    parser.add_argument("--no-render", action="store_true", help="Disable rendering")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    run_random_episode(args.mode, render=not args.no_render, seed=args.seed)
