"""
MazeChaseSimulation
-------------------
Grid maze with pellets, a player agent and four pursuing agents.

Tick order: timers (phase, vulnerability, blink, release, invulnerability)
-> pen releases -> player move -> agent moves -> collisions -> level check.
Entities move one cell per movement cadence, never per tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .agents import PursuitAI
from .collision import same_cell
from .entities import AgentMode, Cell, Direction, GameMode, PlayerAgent, PursuingAgent
from .maze import (
    DEFAULT_HOME_CORNERS,
    DEFAULT_LAYOUT,
    POWER_PELLET_VARIANTS,
    Maze,
    PelletInventory,
)
from .simulation import RunStatus, Simulation, SimulationState, TickInput
from .snapshot import AgentView, MazeChaseSnapshot, PelletView, PlayerView
from .timers import Cadence, Countdown, PhaseClock, Scheduler

logger = logging.getLogger(__name__)


@dataclass
class MazeChaseState(SimulationState):
    maze: Optional[Maze] = None
    pellets: Optional[PelletInventory] = None
    player: Optional[PlayerAgent] = None
    agents: List[PursuingAgent] = field(default_factory=list)
    lives: int = 3
    level: int = 1
    pellets_collected: int = 0
    timers: Scheduler = field(default_factory=Scheduler)

    @property
    def phase(self) -> AgentMode:
        return self.timers["phase"].current


class MazeChaseSimulation(Simulation):
    """Maze-chase rules with reactive pursuing agents"""

    mode = GameMode.MAZE_CHASE

    def __init__(
        self,
        layout: Sequence[str] = DEFAULT_LAYOUT,
        lives: int = 3,
        cell_size: int = 20,
        speed_multiplier: float = 1.0,
        player_move_ticks: int = 8,
        agent_move_ticks: int = 10,
        phase_ticks: int = 600,
        frightened_ticks: int = 600,
        blink_window_ticks: int = 180,
        blink_interval_ticks: int = 30,
        invulnerability_ticks: int = 120,
        release_ticks: Sequence[int] = (0, 300, 600, 900),
        respawn_release_ticks: Sequence[int] = (0, 60, 120, 180),
        eaten_release_ticks: int = 120,
        bob_interval_ticks: int = 10,
        home_corners: Optional[Dict[int, Cell]] = None,
        power_variants: Optional[Sequence[Sequence[Cell]]] = None,
        pellet_points: int = 5,
        power_pellet_points: int = 25,
        agent_points: int = 100,
        level_bonus: int = 1000,
        end_run_on_level_complete: bool = False,
        seed: Optional[int] = None,  # accepted for API symmetry; the maze has no randomness
    ):
        super().__init__(speed_multiplier=speed_multiplier)
        if lives < 1:
            raise ValueError(f"lives must be >= 1, got {lives}")

        self.layout = tuple(layout)
        self.maze = Maze(self.layout)
        self.lives = lives
        self.cell_size = cell_size

        # Cadences / timers (ticks)
        self.player_move_ticks = player_move_ticks
        self.agent_move_ticks = agent_move_ticks
        self.phase_ticks = phase_ticks
        self.frightened_ticks = frightened_ticks
        self.blink_window_ticks = blink_window_ticks
        self.blink_interval_ticks = blink_interval_ticks
        self.invulnerability_ticks = invulnerability_ticks
        self.release_ticks = tuple(release_ticks)
        self.respawn_release_ticks = tuple(respawn_release_ticks)
        self.eaten_release_ticks = eaten_release_ticks
        self.bob_interval_ticks = bob_interval_ticks

        self.home_corners = dict(DEFAULT_HOME_CORNERS if home_corners is None else home_corners)
        if power_variants is None:
            power_variants = POWER_PELLET_VARIANTS if self.layout == DEFAULT_LAYOUT else ()
        self.power_variants = tuple(tuple(v) for v in power_variants)

        # Scoring
        self.pellet_points = pellet_points
        self.power_pellet_points = power_pellet_points
        self.agent_points = agent_points
        self.level_bonus = level_bonus
        self.end_run_on_level_complete = end_run_on_level_complete

        self.ai = PursuitAI(self.maze)

    # ----------------------------
    # Simulation API
    # ----------------------------

    def initial_state(self, initial: Optional[int] = None, seed: Optional[int] = None) -> MazeChaseState:
        lives = self.lives if initial is None else initial
        if lives < 1:
            raise ValueError(f"lives must be >= 1, got {lives}")

        timers = Scheduler()
        timers.add("phase", PhaseClock((AgentMode.SCATTER, AgentMode.CHASE), self.phase_ticks))
        timers.add("vulnerability", Countdown(self.frightened_ticks))
        timers.add("blink", Cadence(self.blink_interval_ticks))
        timers.add("invulnerability", Countdown(self.invulnerability_ticks))
        timers.add("player_move", Cadence(self.player_move_ticks))
        timers.add("agent_move", Cadence(self.agent_move_ticks))

        state = MazeChaseState(maze=self.maze, lives=lives, timers=timers)
        for identity, spawn in sorted(self.maze.agent_spawns.items()):
            agent = PursuingAgent(
                identity=identity,
                col=spawn[0],
                row=spawn[1],
                home=self.home_corners.get(identity, spawn),
                spawn=spawn,
            )
            timers.add(f"release_{identity}", agent.release_timer)
            state.agents.append(agent)

        self._start_level(state)
        return state

    def step(self, state: MazeChaseState, tick_input: TickInput) -> MazeChaseState:
        if state.status is RunStatus.LEVEL_COMPLETE and not self.end_run_on_level_complete:
            state.status = RunStatus.RUNNING
        if state.status is not RunStatus.RUNNING:
            return state
        state.tick += 1

        fired = set(state.timers.tick())
        self._update_timers(state, fired)
        self._release_agents(state)

        if tick_input.direction is not None:
            state.player.next_direction = tick_input.direction
        self._turn_player(state)
        player_from = state.player.cell
        agents_from = {a.identity: a.cell for a in state.agents}
        if "player_move" in fired:
            self._move_player(state)
        if "agent_move" in fired:
            self._move_agents(state)

        self._handle_collisions(state, player_from, agents_from)
        return state

    def snapshot(self, state: MazeChaseState) -> MazeChaseSnapshot:
        size = self.cell_size
        player = state.player
        return MazeChaseSnapshot(
            tick=state.tick,
            status=state.status,
            cell_size=size,
            grid=state.maze.grid,
            score=state.score,
            lives=state.lives,
            level=state.level,
            pellets_collected=state.pellets_collected,
            player=PlayerView(player.col, player.row, player.col * size, player.row * size, player.direction),
            agents=tuple(
                AgentView(
                    identity=a.identity,
                    col=a.col,
                    row=a.row,
                    x=a.col * size,
                    y=a.row * size + self._bob_offset(a),
                    direction=a.direction,
                    mode=a.mode,
                    in_pen=a.in_pen,
                    is_vulnerable=a.is_vulnerable,
                    is_blinking=a.is_blinking,
                )
                for a in state.agents
            ),
            pellets=tuple(
                PelletView(p.col, p.row, p.is_power) for p in state.pellets if not p.collected
            ),
            phase=state.phase,
            invulnerable=state.timers["invulnerability"].active,
        )

    def secondary(self, state: MazeChaseState) -> int:
        return state.pellets_collected

    def current_shields(self, state: MazeChaseState) -> int:
        return state.lives

    def is_over(self, state: MazeChaseState) -> bool:
        if state.status is RunStatus.LEVEL_COMPLETE:
            return self.end_run_on_level_complete
        return super().is_over(state)

    # ----------------------------
    # Timers
    # ----------------------------

    def _update_timers(self, state: MazeChaseState, fired: set):
        if "phase" in fired:
            phase = state.phase
            logger.debug("Global phase switched to %s at tick %d", phase.value, state.tick)
            for agent in state.agents:
                if agent.released and agent.mode not in (AgentMode.FRIGHTENED, AgentMode.EATEN):
                    agent.mode = phase

        vulnerability = state.timers["vulnerability"]
        if "vulnerability" in fired:
            self._end_vulnerability(state)
        elif vulnerability.active and vulnerability.remaining <= self.blink_window_ticks:
            if "blink" in fired:
                for agent in state.agents:
                    if agent.is_vulnerable:
                        agent.is_blinking = not agent.is_blinking

    def _release_agents(self, state: MazeChaseState):
        for agent in state.agents:
            if agent.in_pen and not agent.release_timer.active:
                agent.in_pen = False
                agent.col, agent.row = self.maze.pen_exit or agent.spawn
                agent.direction = Direction.LEFT
                agent.mode = state.phase
                logger.debug("Agent %d released in %s mode", agent.identity, agent.mode.value)

    def _bob_offset(self, agent: PursuingAgent) -> float:
        if not agent.in_pen or not agent.release_timer.active:
            return 0.0
        quarter = self.cell_size / 4
        return -quarter if (agent.release_timer.remaining // self.bob_interval_ticks) % 2 == 0 else quarter

    # ----------------------------
    # Movement
    # ----------------------------

    def _turn_player(self, state: MazeChaseState):
        """Apply the buffered direction as soon as that neighbour is open"""
        player = state.player
        wanted = player.next_direction
        if wanted is not None and self.maze.can_move(player.cell, wanted):
            player.direction = wanted
            player.next_direction = None

    def _move_player(self, state: MazeChaseState):
        player = state.player
        # A blocked heading just stops at the cell boundary
        if self.maze.can_move(player.cell, player.direction):
            player.col, player.row = self.maze.neighbor(player.cell, player.direction)

    def _move_agents(self, state: MazeChaseState):
        leader = state.agents[0] if state.agents else None
        for agent in state.agents:
            if agent.in_pen:
                continue
            self.ai.step(agent, state.player, leader)

    # ----------------------------
    # Collisions
    # ----------------------------

    def _handle_collisions(
        self,
        state: MazeChaseState,
        player_from: Optional[Cell] = None,
        agents_from: Optional[Dict[int, Cell]] = None,
    ):
        player = state.player
        agents_from = agents_from or {}

        pellet = state.pellets.collect(player.cell)
        if pellet is not None:
            state.pellets_collected += 1
            if pellet.is_power:
                state.score += self.power_pellet_points
                self._frighten(state)
            else:
                state.score += self.pellet_points

        if not state.timers["invulnerability"].active:
            for agent in state.agents:
                # Swapping cells on the same tick is a meeting too
                crossed = (
                    agent.cell == player_from
                    and agents_from.get(agent.identity) == player.cell
                )
                if agent.in_pen or not (same_cell(agent, player) or crossed):
                    continue
                if agent.is_vulnerable:
                    self._eat_agent(state, agent)
                    continue
                self._lose_life(state, agent)
                break

        if state.status is RunStatus.RUNNING and state.pellets.remaining == 0:
            self._complete_level(state)

    def _frighten(self, state: MazeChaseState):
        state.timers["vulnerability"].start(self.frightened_ticks)
        state.timers["blink"].reset()
        for agent in state.agents:
            if agent.in_pen or agent.mode is AgentMode.EATEN:
                continue
            agent.is_vulnerable = True
            agent.is_blinking = False
            agent.mode = AgentMode.FRIGHTENED
            agent.direction = agent.direction.opposite
        logger.info("Power pellet eaten at tick %d, agents vulnerable for %d ticks",
                    state.tick, self.frightened_ticks)

    def _end_vulnerability(self, state: MazeChaseState):
        for agent in state.agents:
            agent.is_vulnerable = False
            agent.is_blinking = False
            if agent.mode is AgentMode.FRIGHTENED:
                agent.mode = state.phase
        logger.debug("Vulnerability expired at tick %d", state.tick)

    def _eat_agent(self, state: MazeChaseState, agent: PursuingAgent):
        state.score += self.agent_points
        agent.col, agent.row = agent.spawn
        agent.in_pen = True
        agent.is_vulnerable = False
        agent.is_blinking = False
        agent.mode = AgentMode.EATEN
        agent.direction = Direction.UP
        agent.release_timer.start(self.eaten_release_ticks)
        logger.info("Agent %d eaten, score %d", agent.identity, state.score)

    def _lose_life(self, state: MazeChaseState, agent: PursuingAgent):
        state.lives -= 1
        logger.info("Caught by agent %d, lives remaining %d", agent.identity, state.lives)
        if state.lives <= 0:
            state.lives = 0
            self._game_over(state, "caught")
            return
        state.timers["invulnerability"].start()
        self._reset_positions(state, self.respawn_release_ticks)

    def _complete_level(self, state: MazeChaseState):
        state.score += self.level_bonus
        logger.info("Level %d complete at tick %d, score %d", state.level, state.tick, state.score)
        state.status = RunStatus.LEVEL_COMPLETE
        if self.end_run_on_level_complete:
            state.end_reason = "level_complete"
            return
        state.level += 1
        self._start_level(state)

    # ----------------------------
    # Level setup
    # ----------------------------

    def _start_level(self, state: MazeChaseState):
        state.pellets = PelletInventory.from_maze(self.maze)
        if self.power_variants:
            state.pellets.relocate_power(
                self.power_variants[(state.level - 1) % len(self.power_variants)]
            )
        state.timers["invulnerability"].cancel()
        self._reset_positions(state, self.release_ticks)

    def _reset_positions(self, state: MazeChaseState, release_ticks: Tuple[int, ...]):
        spawn = self.maze.player_spawn
        state.player = PlayerAgent(col=spawn[0], row=spawn[1])

        for agent in state.agents:
            agent.col, agent.row = agent.spawn
            agent.direction = Direction.UP
            agent.in_pen = True
            agent.mode = AgentMode.SCATTER
            agent.is_vulnerable = False
            agent.is_blinking = False
            delay = release_ticks[agent.identity] if agent.identity < len(release_ticks) else release_ticks[-1]
            agent.release_timer.start(delay)

        state.timers["vulnerability"].cancel()
        state.timers["phase"].reset()
        state.timers["player_move"].reset()
        state.timers["agent_move"].reset()
