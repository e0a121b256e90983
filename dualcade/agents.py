"""
Pursuing-agent AI
-----------------
Reactive targeting: every released agent picks a target cell from its mode and
identity, then takes the legal neighbouring cell that best serves that target.

Chase targets per identity:
- 0: the player's cell
- 1: four cells ahead of the player along its heading
- 2: the cell two ahead of the player, mirrored away from agent 0
- 3: the player while at least 8 cells away, its home corner otherwise

Frightened agents take the move that maximises Manhattan distance from the
player. Moves into walls (or through the pen gate) are never generated.
"""

from __future__ import annotations

from typing import List, Optional

from .entities import (
    DIRECTION_PRIORITY,
    AgentMode,
    Cell,
    Direction,
    PlayerAgent,
    PursuingAgent,
)
from .maze import Maze
from .utils import manhattan


class PursuitAI:
    def __init__(
        self,
        maze: Maze,
        ambush_lead: int = 4,
        flank_lead: int = 2,
        shy_distance: int = 8,
    ):
        self.maze = maze
        self.ambush_lead = ambush_lead
        self.flank_lead = flank_lead
        self.shy_distance = shy_distance

    # ----------------------------
    # Targets
    # ----------------------------

    @staticmethod
    def _ahead(player: PlayerAgent, cells: int) -> Cell:
        d = player.direction
        return (player.col + d.dx * cells, player.row + d.dy * cells)

    def chase_target(
        self,
        agent: PursuingAgent,
        player: PlayerAgent,
        leader: Optional[PursuingAgent] = None,
    ) -> Cell:
        if agent.identity == 1:
            return self.maze.clamp_cell(*self._ahead(player, self.ambush_lead))

        if agent.identity == 2:
            if leader is None or leader.in_pen:
                return player.cell
            pivot_col, pivot_row = self._ahead(player, self.flank_lead)
            col = pivot_col + (pivot_col - leader.col)
            row = pivot_row + (pivot_row - leader.row)
            return self.maze.clamp_cell(col, row)

        if agent.identity == 3:
            if manhattan(agent.cell, player.cell) >= self.shy_distance:
                return player.cell
            return agent.home

        return player.cell

    def target_for(
        self,
        agent: PursuingAgent,
        player: PlayerAgent,
        leader: Optional[PursuingAgent] = None,
    ) -> Cell:
        if agent.mode is AgentMode.CHASE:
            return self.chase_target(agent, player, leader)
        return agent.home

    # ----------------------------
    # Movement
    # ----------------------------

    def legal_moves(self, agent: PursuingAgent, allow_reverse: bool = False) -> List[Direction]:
        reverse = agent.direction.opposite
        return [
            d for d in DIRECTION_PRIORITY
            if (allow_reverse or d is not reverse)
            and self.maze.can_move(agent.cell, d)
        ]

    def choose_direction(
        self,
        agent: PursuingAgent,
        player: PlayerAgent,
        leader: Optional[PursuingAgent] = None,
    ) -> Optional[Direction]:
        moves = self.legal_moves(agent) or self.legal_moves(agent, allow_reverse=True)
        if not moves:
            return None

        if agent.mode is AgentMode.FRIGHTENED:
            # max() keeps the first of equal candidates, i.e. priority order
            return max(moves, key=lambda d: manhattan(self.maze.neighbor(agent.cell, d), player.cell))

        target = self.target_for(agent, player, leader)
        return min(moves, key=lambda d: manhattan(self.maze.neighbor(agent.cell, d), target))

    def step(
        self,
        agent: PursuingAgent,
        player: PlayerAgent,
        leader: Optional[PursuingAgent] = None,
    ) -> bool:
        """Move the agent one cell. Returns False when it has nowhere to go."""
        direction = self.choose_direction(agent, player, leader)
        if direction is None:
            return False
        agent.col, agent.row = self.maze.neighbor(agent.cell, direction)
        agent.direction = direction
        return True
