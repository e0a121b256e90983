import pytest

from dualcade.entities import AgentMode, Direction
from dualcade.maze import DEFAULT_LAYOUT, POWER_PELLET_VARIANTS
from dualcade.maze_chase import MazeChaseSimulation
from dualcade.simulation import RunStatus, TickInput
from dualcade.snapshot import MazeChaseSnapshot

from conftest import (
    CORRIDOR_AGENT,
    CORRIDOR_POWER_AGENT,
    ONE_PELLET,
    POWER_THEN_WALL,
    SPLIT_ROOMS,
    SWAP_CORRIDOR,
    run_ticks,
)


@pytest.fixture(scope="module")
def default_sim():
    return MazeChaseSimulation()


def test_initial_state(default_sim):
    state = default_sim.initial_state()
    assert state.lives == 3 and state.level == 1 and state.score == 0
    assert state.player.cell == (19, 21)
    assert [a.identity for a in state.agents] == [0, 1, 2, 3]
    assert all(a.in_pen for a in state.agents)
    assert state.phase is AgentMode.SCATTER
    power = sorted(p.cell for p in state.pellets if p.is_power)
    assert power == sorted(POWER_PELLET_VARIANTS[0])


def test_lives_validation():
    with pytest.raises(ValueError):
        MazeChaseSimulation(lives=0)
    with pytest.raises(ValueError):
        MazeChaseSimulation().initial_state(0)


def test_agents_released_on_schedule(default_sim):
    state = default_sim.initial_state()
    state = default_sim.step(state, TickInput())
    released = [a.identity for a in state.agents if a.released]
    assert released == [0]
    assert state.agents[0].mode is AgentMode.SCATTER

    state = run_ticks(default_sim, state, 298)
    assert [a.identity for a in state.agents if a.released] == [0]
    state = default_sim.step(state, TickInput())
    assert [a.identity for a in state.agents if a.released] == [0, 1]


def test_released_agents_never_enter_walls(default_sim):
    state = default_sim.initial_state()
    maze = state.maze
    for _ in range(1500):
        state = default_sim.step(state, TickInput())
        for a in state.agents:
            if a.released:
                assert maze.is_walkable(*a.cell)
        if state.status is RunStatus.GAME_OVER:
            break


def test_global_phase_switches(default_sim):
    state = default_sim.initial_state()
    state = run_ticks(default_sim, state, 600)
    assert state.phase is AgentMode.CHASE
    released = [a for a in state.agents if a.released]
    assert released and all(a.mode is AgentMode.CHASE for a in released)


def test_player_moves_on_cadence():
    sim = MazeChaseSimulation(layout=CORRIDOR_AGENT, release_ticks=(10_000,))
    state = sim.initial_state()
    state = run_ticks(sim, state, 7)
    assert state.player.cell == (1, 1)
    state = sim.step(state, TickInput())
    assert state.player.cell == (2, 1)
    assert state.score == 5


def test_blocked_direction_stays_buffered(fast_maze):
    sim = fast_maze(POWER_THEN_WALL)
    state = sim.initial_state()
    state = sim.step(state, TickInput(direction=Direction.UP))
    # Wall above: keep heading right, remember the request
    assert state.player.cell == (2, 1)
    assert state.player.next_direction is Direction.UP
    state = run_ticks(sim, state, 3)
    assert state.player.cell == (3, 1)
    assert state.player.next_direction is Direction.UP


def test_power_pellet_vulnerability_lasts_600_ticks(fast_maze):
    sim = fast_maze(POWER_THEN_WALL)
    state = sim.initial_state()
    state = sim.step(state, TickInput())
    assert state.score == 25

    vulnerability = state.timers["vulnerability"]
    ticks = 0
    while vulnerability.active:
        ticks += 1
        state = sim.step(state, TickInput())
    assert ticks == 600


def test_pellet_collection_is_idempotent(fast_maze):
    sim = fast_maze(POWER_THEN_WALL)
    state = run_ticks(sim, sim.initial_state(), 3)
    score = state.score
    state.player.next_direction = Direction.LEFT
    state = run_ticks(sim, state, 4)
    assert state.player.cell == (1, 1)
    assert state.score == score
    assert state.pellets_collected == 1


def test_non_vulnerable_agent_costs_exactly_one_life(fast_maze):
    sim = fast_maze(CORRIDOR_AGENT)
    state = run_ticks(sim, sim.initial_state(), 2)
    assert state.lives == 2
    assert state.score == 10
    assert state.status is RunStatus.RUNNING
    assert state.player.cell == (1, 1)
    agent = state.agents[0]
    assert agent.in_pen and agent.cell == (5, 1)
    assert state.timers["invulnerability"].active


def test_last_life_ends_run_and_lives_never_negative(fast_maze):
    sim = fast_maze(CORRIDOR_AGENT, lives=1)
    state = run_ticks(sim, sim.initial_state(), 2)
    assert state.lives == 0
    assert state.status is RunStatus.GAME_OVER
    assert state.end_reason == "caught"
    assert sim.is_over(state)
    state = run_ticks(sim, state, 5)
    assert state.lives == 0


def test_eating_vulnerable_agent(fast_maze):
    sim = fast_maze(CORRIDOR_POWER_AGENT)
    state = sim.step(sim.initial_state(), TickInput())
    agent = state.agents[0]
    assert agent.is_vulnerable and agent.mode is AgentMode.FRIGHTENED
    assert agent.direction is Direction.RIGHT  # reversed on fright

    state = run_ticks(sim, state, 4)
    assert state.lives == 3
    assert state.score == 25 + 4 * 5 + 100
    assert agent.in_pen and agent.cell == (9, 1)
    assert agent.mode is AgentMode.EATEN
    assert not agent.is_vulnerable
    assert agent.release_timer.remaining == 120


def test_invulnerability_ignores_agents(fast_maze):
    sim = fast_maze(CORRIDOR_AGENT)
    state = sim.initial_state()
    state.timers["invulnerability"].start()
    state = run_ticks(sim, state, 3)
    assert state.lives == 3


def test_agents_swapping_cells_still_meet(fast_maze):
    sim = fast_maze(SWAP_CORRIDOR)
    state = sim.step(sim.initial_state(), TickInput())
    agent = state.agents[0]
    assert state.player.cell == (2, 1) and agent.cell == (3, 1)

    # Both move at once and trade cells
    state = sim.step(state, TickInput())
    assert state.lives == 2
    assert state.player.cell == (1, 1)
    assert agent.in_pen and agent.cell == (4, 1)


def test_blinking_toggles_only_near_the_end_of_vulnerability(fast_maze):
    sim = fast_maze(SPLIT_ROOMS)
    state = sim.step(sim.initial_state(), TickInput())
    agent = state.agents[0]
    assert agent.is_vulnerable and not agent.is_blinking

    vulnerability = state.timers["vulnerability"]
    history = []
    while vulnerability.active:
        state = sim.step(state, TickInput())
        history.append((vulnerability.remaining, agent.is_blinking))

    assert not any(blinking for remaining, blinking in history if remaining > 180)
    toggles = [
        remaining for (remaining, blinking), (_, before) in zip(history, [(600, False)] + history)
        if blinking != before
    ]
    assert toggles == [180, 150, 120, 90, 60, 30]
    assert history[-1] == (0, False)
    assert not agent.is_vulnerable


def test_blinking_is_cleared_when_vulnerability_expires(fast_maze):
    sim = fast_maze(SPLIT_ROOMS, blink_interval_ticks=50)
    state = sim.step(sim.initial_state(), TickInput())
    agent = state.agents[0]

    vulnerability = state.timers["vulnerability"]
    while vulnerability.remaining > 1:
        state = sim.step(state, TickInput())
    # Toggled at 150, 100 and 50 ticks left
    assert agent.is_blinking

    state = sim.step(state, TickInput())
    assert not vulnerability.active
    assert not agent.is_blinking and not agent.is_vulnerable


def test_eaten_agent_returns_in_current_phase(fast_maze):
    sim = fast_maze(SPLIT_ROOMS, agent_move_ticks=1000, phase_ticks=100)
    state = run_ticks(sim, sim.initial_state(), 4)
    assert state.player.cell == (5, 1)

    agent = state.agents[0]
    assert agent.is_vulnerable
    agent.col, agent.row = state.player.cell
    state = sim.step(state, TickInput())
    assert state.score == 25 + 100
    assert agent.in_pen and agent.mode is AgentMode.EATEN
    assert agent.release_timer.remaining == 120

    state = run_ticks(sim, state, 119)
    assert agent.in_pen and agent.mode is AgentMode.EATEN

    state = sim.step(state, TickInput())
    assert state.tick == 125
    assert not agent.in_pen
    assert state.phase is AgentMode.CHASE
    assert agent.mode is AgentMode.CHASE
    assert not agent.is_vulnerable


def test_phase_flip_leaves_frightened_agents_alone(fast_maze):
    sim = fast_maze(SPLIT_ROOMS, phase_ticks=50)
    state = sim.step(sim.initial_state(), TickInput())
    agent = state.agents[0]

    state = run_ticks(sim, state, 49)
    assert state.tick == 50
    assert state.phase is AgentMode.CHASE
    assert agent.mode is AgentMode.FRIGHTENED

    while state.timers["vulnerability"].active:
        state = sim.step(state, TickInput())
    assert not agent.is_vulnerable
    assert agent.mode is state.phase


def test_level_complete_keeps_lives_and_score(fast_maze):
    sim = fast_maze(ONE_PELLET, lives=2)
    state = sim.step(sim.initial_state(), TickInput())
    assert state.status is RunStatus.LEVEL_COMPLETE
    assert state.score == 5 + 1000
    assert state.level == 2
    assert state.lives == 2
    assert state.pellets.remaining == 1
    assert state.player.cell == (1, 1)
    assert not sim.is_over(state)

    state = sim.step(state, TickInput())
    assert state.status is RunStatus.LEVEL_COMPLETE
    assert state.score == 2 * 1005
    assert state.level == 3


def test_level_complete_can_end_the_run(fast_maze):
    sim = fast_maze(ONE_PELLET, end_run_on_level_complete=True)
    state = sim.step(sim.initial_state(), TickInput())
    assert state.status is RunStatus.LEVEL_COMPLETE
    assert state.level == 1
    assert state.end_reason == "level_complete"
    assert sim.is_over(state)
    assert sim.outcome(state) == (1005, 1, 0)


def test_power_pellets_relocate_per_level():
    sim = MazeChaseSimulation()
    state = sim.initial_state()
    for p in state.pellets:
        p.collected = True
    last = next(p for p in state.pellets if p.cell == (2, 1))
    last.collected = False
    state.player.col, state.player.row = (1, 1)
    state.player.direction = Direction.RIGHT
    state = run_ticks(sim, state, 8)
    assert state.level == 2
    power = sorted(p.cell for p in state.pellets if p.is_power)
    assert power == sorted(POWER_PELLET_VARIANTS[1])


def test_pen_bob_offset():
    sim = MazeChaseSimulation(cell_size=20)
    state = sim.initial_state()
    snap = sim.snapshot(state)
    waiting = snap.agents[3]
    assert waiting.in_pen
    assert abs(waiting.y - waiting.row * 20) == 5


def test_snapshot_lists_only_uncollected_pellets(fast_maze):
    sim = fast_maze(POWER_THEN_WALL)
    state = sim.step(sim.initial_state(), TickInput())
    snap = sim.snapshot(state)
    assert isinstance(snap, MazeChaseSnapshot)
    assert [(p.col, p.row) for p in snap.pellets] == [(1, 2)]
    assert snap.player.col == 2
    assert snap.lives == 3 and snap.level == 1
    assert snap.grid.shape == (4, 5)


def test_deterministic_runs(default_sim):
    def play():
        state = default_sim.initial_state()
        trace = [Direction.LEFT, Direction.UP, Direction.RIGHT, Direction.DOWN]
        for i in range(2000):
            d = trace[(i // 97) % 4] if i % 13 == 0 else None
            state = default_sim.step(state, TickInput(direction=d))
        return default_sim.outcome(state), state.lives, [a.cell for a in state.agents]

    assert play() == play()


def test_default_layout_is_used_by_default():
    assert MazeChaseSimulation().layout == DEFAULT_LAYOUT
