"""
Utility functions for game mechanics
"""

from __future__ import annotations
from typing import Optional, Tuple
import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    """Grid distance between two (col, row) cells"""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """Create the generator used for every random draw of a run"""
    return np.random.default_rng(seed)
