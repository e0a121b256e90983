import pytest

from dualcade.maze_chase import MazeChaseSimulation
from dualcade.side_scroller import SideScrollerSimulation
from dualcade.simulation import TickInput

# Small mazes, player moves right by default
ONE_PELLET = (
    "####",
    "#P.#",
    "####",
)

# Power pellet on the first cell, a pellet that is never reached below
POWER_THEN_WALL = (
    "#####",
    "#Po #",
    "#.###",
    "#####",
)

# Agent 0 waits at the far end of the corridor
CORRIDOR_AGENT = (
    "#######",
    "#P...0#",
    "#######",
)

CORRIDOR_POWER_AGENT = (
    "###########",
    "#Po......0#",
    "###########",
)

# Player and agent 0 meet halfway between two cells; the pellet below is unreachable
SWAP_CORRIDOR = (
    "#######",
    "#P  0 #",
    "#######",
    "#.    #",
    "#######",
)

# Player and agent 0 in separate corridors, so only timers act on the agent
SPLIT_ROOMS = (
    "#######",
    "#Po   #",
    "#######",
    "#.  0 #",
    "#######",
)


class RecordingRenderer:
    """Keeps every snapshot the engine hands over"""

    def __init__(self):
        self.frames = []

    def render(self, snapshot):
        self.frames.append(snapshot)


def run_ticks(sim, state, n, tick_input=None):
    tick_input = tick_input or TickInput()
    for _ in range(n):
        state = sim.step(state, tick_input)
    return state


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def side_sim():
    return SideScrollerSimulation(seed=123)


@pytest.fixture
def fast_maze():
    """Maze simulation where every entity moves on every tick"""
    def build(layout, **kwargs):
        kwargs.setdefault("player_move_ticks", 1)
        kwargs.setdefault("agent_move_ticks", 1)
        return MazeChaseSimulation(layout=layout, **kwargs)
    return build
