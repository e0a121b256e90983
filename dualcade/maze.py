"""
Maze grid and pellet inventory
------------------------------
The layout is an embedded text grid. Legend:

    '#' wall        '.' pellet       'o' power pellet    ' ' empty
    '-' pen gate    '=' pen floor    'P' player spawn    '0'-'3' agent spawns (pen floor)

Rows must all have the same width. Columns wrap around, so a walkable cell on
the left edge of a row is connected to the walkable cell on the right edge
(the tunnel).
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .entities import Cell, Direction, Pellet


class CellKind(IntEnum):
    EMPTY = 0
    WALL = 1
    PELLET = 2
    POWER_PELLET = 3
    GATE = 4
    PEN = 5


DEFAULT_LAYOUT = (
    "########################################",
    "#..................##..................#",
    "#.####.#####.#####.##.#####.#####.####.#",
    "#o####.#####.#####.##.#####.#####.####o#",
    "#......................................#",
    "#.####.##.####################.##.####.#",
    "#......##..........##..........##......#",
    "######.#####.#####.##.#####.#####.######",
    "######.#####.#####.##.#####.#####.######",
    "######.##......................##.######",
    "######.##.#########--#########.##.######",
    "..........#######=0123=#######..........",
    "######.##.####################.##.######",
    "######.##......................##.######",
    "######.#####.#####.##.#####.#####.######",
    "#..................##..................#",
    "#.####.#####.#####.##.#####.#####.####.#",
    "#o..##............................##..o#",
    "###.##.##.####################.##.##.###",
    "#......##..........##..........##......#",
    "#.##########.#####.##.#####.#####.####.#",
    "#..................P...................#",
    "########################################",
)

# Power-pellet placements, picked by (level - 1) % len(...)
POWER_PELLET_VARIANTS: Tuple[Tuple[Cell, ...], ...] = (
    ((1, 3), (38, 3), (1, 17), (38, 17)),
    ((1, 1), (38, 1), (1, 21), (38, 21)),
    ((1, 5), (38, 5), (1, 15), (38, 15)),
    ((6, 4), (33, 4), (6, 17), (33, 17)),
)

# Scatter corners per agent identity
DEFAULT_HOME_CORNERS: Dict[int, Cell] = {
    0: (38, 1),
    1: (1, 1),
    2: (38, 21),
    3: (1, 21),
}

_LEGEND = {
    "#": CellKind.WALL,
    ".": CellKind.PELLET,
    "o": CellKind.POWER_PELLET,
    " ": CellKind.EMPTY,
    "-": CellKind.GATE,
    "=": CellKind.PEN,
    "P": CellKind.EMPTY,
    "0": CellKind.PEN,
    "1": CellKind.PEN,
    "2": CellKind.PEN,
    "3": CellKind.PEN,
}


class Maze:
    """Static grid for one level"""

    def __init__(self, layout: Sequence[str] = DEFAULT_LAYOUT):
        if not layout:
            raise ValueError("maze layout is empty")
        width = len(layout[0])
        for row, line in enumerate(layout):
            if len(line) != width:
                raise ValueError(
                    f"maze layout is not rectangular: row {row} has {len(line)} cells, expected {width}"
                )

        self.layout = tuple(layout)
        self.height = len(layout)
        self.width = width
        self.grid = np.zeros((self.height, self.width), dtype=np.uint8)
        self.player_spawn: Optional[Cell] = None
        self.agent_spawns: Dict[int, Cell] = {}
        self.gate_cells: List[Cell] = []

        for row, line in enumerate(layout):
            for col, ch in enumerate(line):
                try:
                    kind = _LEGEND[ch]
                except KeyError:
                    raise ValueError(f"unknown maze cell {ch!r} at ({col}, {row})") from None
                self.grid[row, col] = kind
                if ch == "P":
                    self.player_spawn = (col, row)
                elif ch.isdigit():
                    self.agent_spawns[int(ch)] = (col, row)
                elif kind == CellKind.GATE:
                    self.gate_cells.append((col, row))

        if self.player_spawn is None:
            raise ValueError("maze layout has no player spawn 'P'")
        # Static for the level; snapshots share it
        self.grid.setflags(write=False)

    # ----------------------------
    # Queries
    # ----------------------------

    @property
    def pen_exit(self) -> Optional[Cell]:
        """Cell just above the first gate cell; None when the maze has no pen gate"""
        if not self.gate_cells:
            return None
        col, row = self.gate_cells[0]
        return (col, row - 1)

    def wrap_col(self, col: int) -> int:
        return col % self.width

    def kind(self, col: int, row: int) -> CellKind:
        return CellKind(int(self.grid[row, self.wrap_col(col)]))

    def is_walkable(self, col: int, row: int, through_gate: bool = False) -> bool:
        if row < 0 or row >= self.height:
            return False
        kind = self.grid[row, self.wrap_col(col)]
        if kind == CellKind.WALL:
            return False
        if kind == CellKind.GATE:
            return through_gate
        return True

    def neighbor(self, cell: Cell, direction: Direction) -> Cell:
        col, row = cell
        return (self.wrap_col(col + direction.dx), row + direction.dy)

    def can_move(self, cell: Cell, direction: Direction, through_gate: bool = False) -> bool:
        col, row = self.neighbor(cell, direction)
        return self.is_walkable(col, row, through_gate)

    def clamp_cell(self, col: int, row: int) -> Cell:
        return (
            max(0, min(col, self.width - 1)),
            max(0, min(row, self.height - 1)),
        )

    def pellet_cells(self) -> Iterator[Tuple[Cell, bool]]:
        rows, cols = np.nonzero(
            (self.grid == CellKind.PELLET) | (self.grid == CellKind.POWER_PELLET)
        )
        for row, col in zip(rows.tolist(), cols.tolist()):
            yield (col, row), bool(self.grid[row, col] == CellKind.POWER_PELLET)

    def __repr__(self) -> str:
        return f"Maze({self.width}x{self.height})"


class PelletInventory:
    """Pellets of one level, keyed by cell"""

    def __init__(self, pellets: Iterable[Pellet]):
        self._pellets: Dict[Cell, Pellet] = {p.cell: p for p in pellets}

    @classmethod
    def from_maze(cls, maze: Maze) -> "PelletInventory":
        return cls(Pellet(col=c, row=r, is_power=power) for (c, r), power in maze.pellet_cells())

    def __iter__(self) -> Iterator[Pellet]:
        return iter(self._pellets.values())

    def __len__(self) -> int:
        return len(self._pellets)

    def at(self, cell: Cell) -> Optional[Pellet]:
        return self._pellets.get(cell)

    def collect(self, cell: Cell) -> Optional[Pellet]:
        """Collect the pellet on `cell`. Returns None if there is none left there."""
        pellet = self._pellets.get(cell)
        if pellet is None or pellet.collected:
            return None
        pellet.collected = True
        return pellet

    @property
    def remaining(self) -> int:
        return sum(1 for p in self._pellets.values() if not p.collected)

    @property
    def collected_count(self) -> int:
        return len(self._pellets) - self.remaining

    def relocate_power(self, cells: Iterable[Cell]):
        """Turn every pellet regular, then make those on `cells` power pellets"""
        for pellet in self._pellets.values():
            pellet.is_power = False
        for cell in cells:
            pellet = self._pellets.get(cell)
            if pellet is not None:
                pellet.is_power = True
