"""dualcade - deterministic 2D arcade simulation core (side-scroller and maze chase)"""

from .engine import EngineStatus, GameEngine, SpeedTier, build_simulation
from .entities import Direction, GameMode
from .env import DualcadeEnv, run_random_episode
from .errors import EngineDisposedError, EngineError, RendererUnavailableError
from .maze_chase import MazeChaseSimulation
from .side_scroller import SideScrollerSimulation
from .simulation import Outcome, RunStatus, TickInput

__all__ = [
    'GameEngine', 'EngineStatus', 'SpeedTier', 'build_simulation',
    'GameMode', 'Direction',
    'SideScrollerSimulation', 'MazeChaseSimulation',
    'TickInput', 'Outcome', 'RunStatus',
    'EngineError', 'RendererUnavailableError', 'EngineDisposedError',
    'DualcadeEnv', 'run_random_episode',
]
