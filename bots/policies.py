"""
Scripted policies for DualcadeEnv
Each policy is a callable `policy(env) -> action` that reads the live
simulation state instead of the observation vector.
"""

from collections import deque
from typing import Dict, Optional

from dualcade.entities import DIRECTION_PRIORITY, Cell, Direction, GameMode


class RandomPolicy:
    """Uniform random actions (baseline)"""

    def __call__(self, env) -> int:
        return int(env.action_space.sample())


class FlapPolicy:
    """Keep the avatar's centre just below the middle of the next gap"""

    def __init__(self, margin: float = 20.0):
        self.margin = margin

    def __call__(self, env) -> int:
        state = env.state
        a = state.avatar
        ahead = [o for o in state.obstacles if o.x + o.width > a.x]
        if ahead:
            o = min(ahead, key=lambda o: o.x)
            target = o.gap_top + o.gap_size / 2
        else:
            target = env.simulation.height / 2

        centre = a.y + a.height / 2
        # Only flap when falling, a second flap while rising overshoots
        if centre > target + self.margin and a.velocity >= 0:
            return 1
        return 0


class GreedyPelletPolicy:
    """Breadth-first search to the closest pellet, avoiding dangerous agents"""

    def __call__(self, env) -> int:
        state = env.state
        maze = state.maze
        start = state.player.cell

        danger = {
            g.cell for g in state.agents
            if not g.in_pen and not g.is_vulnerable
        }
        for cell in list(danger):
            for d in DIRECTION_PRIORITY:
                danger.add(maze.neighbor(cell, d))

        first_step: Dict[Cell, Optional[Direction]] = {start: None}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            pellet = state.pellets.at(cell)
            if cell != start and pellet is not None and not pellet.collected:
                return 1 + DIRECTION_PRIORITY.index(first_step[cell])
            for d in DIRECTION_PRIORITY:
                if not maze.can_move(cell, d):
                    continue
                nxt = maze.neighbor(cell, d)
                if nxt in first_step or nxt in danger:
                    continue
                first_step[nxt] = first_step[cell] or d
                queue.append(nxt)
        return 0


def make_policy(name: str, mode: GameMode):
    """Build a policy by name ('random' or 'heuristic') for one mode"""
    if name == "random":
        return RandomPolicy()
    if name == "heuristic":
        return FlapPolicy() if GameMode(mode) is GameMode.SIDE_SCROLLER else GreedyPelletPolicy()
    raise ValueError(f"Unknown policy: {name}")
