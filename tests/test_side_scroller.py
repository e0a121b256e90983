import pytest

from dualcade.entities import Avatar, Obstacle, Projectile
from dualcade.side_scroller import SideScrollerSimulation
from dualcade.simulation import RunStatus, TickInput
from dualcade.snapshot import SideScrollerSnapshot

from conftest import run_ticks

FLAP = TickInput(flap=True)


def clear_field(state):
    state.obstacles = []
    state.projectiles = []
    return state


def test_initial_state(side_sim):
    state = side_sim.initial_state()
    assert state.status is RunStatus.RUNNING
    assert state.avatar == Avatar(x=100, y=285)
    assert state.shields.current == state.shields.maximum == 3
    assert len(state.obstacles) == 1 and state.obstacles[0].x == 800


def test_initial_shields_override_and_validation(side_sim):
    assert side_sim.initial_state(1).shields.current == 1
    with pytest.raises(ValueError):
        side_sim.initial_state(-1)
    with pytest.raises(ValueError):
        SideScrollerSimulation(shields=-2)


def test_gravity_and_flap(side_sim):
    state = clear_field(side_sim.initial_state())
    state = side_sim.step(state, TickInput())
    assert state.avatar.velocity == pytest.approx(0.5)
    state = side_sim.step(state, FLAP)
    assert state.avatar.velocity == pytest.approx(-7.5)
    assert state.avatar.y < 285.5


def test_ceiling_bounce(side_sim):
    state = clear_field(side_sim.initial_state())
    state.avatar = Avatar(x=100, y=2, velocity=-8)
    state = side_sim.step(state, TickInput())
    assert state.avatar.y == 0
    assert state.avatar.velocity == 0
    assert state.status is RunStatus.RUNNING


def test_ground_is_fatal_even_with_shields(side_sim):
    state = clear_field(side_sim.initial_state())
    state.avatar = Avatar(x=100, y=559)
    state = side_sim.step(state, TickInput())
    assert state.status is RunStatus.GAME_OVER
    assert state.end_reason == "ground"
    assert state.shields.current == 3


def test_passing_an_obstacle_scores_once(side_sim):
    state = clear_field(side_sim.initial_state())
    state.obstacles = [Obstacle(x=20, gap_top=0, gap_size=600)]
    state = side_sim.step(state, TickInput())
    assert state.score == 1
    assert state.pipes_passed == 1
    state = side_sim.step(state, TickInput())
    assert state.score == 1


def test_shield_absorbs_obstacle_hit(side_sim):
    state = clear_field(side_sim.initial_state())
    state.obstacles = [Obstacle(x=100, gap_top=400)]
    state = side_sim.step(state, TickInput())

    assert state.status is RunStatus.RUNNING
    assert state.shields.current == 2
    assert state.avatar.velocity < 0
    assert state.avatar.x == 80
    assert state.timers["invincibility"].remaining == 60
    assert state.timers["hit_effect"].active
    # A struck obstacle is never scored
    assert state.pipes_passed == 0

    # Further hits inside the invincibility window are ignored
    state.obstacles.append(Obstacle(x=state.avatar.x, gap_top=500))
    state = run_ticks(side_sim, state, 5)
    assert state.shields.current == 2
    assert state.status is RunStatus.RUNNING


def test_obstacle_passed_while_overlapping_spends_shield_without_scoring(side_sim):
    state = clear_field(side_sim.initial_state())
    state.obstacles = [Obstacle(x=80, gap_top=400)]
    state = side_sim.step(state, TickInput())

    assert state.shields.current == 2
    assert state.obstacles[0].struck
    assert state.score == 0 and state.pipes_passed == 0

    state = run_ticks(side_sim, state, 20)
    assert state.score == 0 and state.pipes_passed == 0


def test_knockback_stops_at_min_x(side_sim):
    state = clear_field(side_sim.initial_state())
    state.avatar = Avatar(x=60, y=285)
    state.obstacles = [Obstacle(x=60, gap_top=400)]
    state = side_sim.step(state, TickInput())
    assert state.avatar.x == 50


def test_obstacle_hit_without_shields_ends_run():
    sim = SideScrollerSimulation(shields=0, seed=1)
    state = clear_field(sim.initial_state())
    state.obstacles = [Obstacle(x=100, gap_top=400)]
    state = sim.step(state, TickInput())
    assert state.status is RunStatus.GAME_OVER
    assert state.end_reason == "obstacle"
    assert state.shields.current == 0


def test_shields_never_negative(side_sim):
    state = clear_field(side_sim.initial_state(1))
    for _ in range(2):
        state.obstacles = [Obstacle(x=state.avatar.x, gap_top=500)]
        state.timers["invincibility"].cancel()
        state = side_sim.step(state, TickInput())
        assert state.shields.current >= 0
    assert state.status is RunStatus.GAME_OVER


@pytest.mark.parametrize("invincible", [False, True])
def test_projectile_is_always_fatal(side_sim, invincible):
    state = clear_field(side_sim.initial_state())
    if invincible:
        state.timers["invincibility"].start()
    state.projectiles = [Projectile(x=110, y=290)]
    state = side_sim.step(state, TickInput())
    assert state.status is RunStatus.GAME_OVER
    assert state.end_reason == "projectile"
    assert state.shields.current == 3


def test_projectiles_follow_warmup_and_warning():
    sim = SideScrollerSimulation(
        seed=3,
        projectile_warmup_seconds=0.1,   # 6 ticks
        projectile_interval_seconds=0.1,
        projectile_warning_seconds=0.05,  # 3 ticks
    )
    state = clear_field(sim.initial_state())
    state = run_ticks(sim, state, 2)
    assert not sim.snapshot(state).missile_warning
    state = run_ticks(sim, state, 1)
    assert sim.snapshot(state).missile_warning
    assert state.projectiles == []
    state = run_ticks(sim, state, 3, FLAP)
    assert len(state.projectiles) == 1
    assert state.projectiles[0].x == pytest.approx(800 - 6 * 1.5)


def test_obstacles_keep_spawning(side_sim):
    state = side_sim.initial_state()
    for i in range(80):
        state = side_sim.step(state, FLAP if i % 9 == 0 else TickInput())
    assert len(state.obstacles) >= 2
    xs = sorted(o.x for o in state.obstacles)
    assert all(b - a >= 300 for a, b in zip(xs, xs[1:]))


def test_speed_multiplier_scales_scrolling():
    slow = SideScrollerSimulation(seed=5, speed_multiplier=0.75)
    fast = SideScrollerSimulation(seed=5, speed_multiplier=2.25)
    s1 = slow.step(slow.initial_state(), TickInput())
    s2 = fast.step(fast.initial_state(), TickInput())
    assert s1.obstacles[0].x == pytest.approx(797)
    assert s2.obstacles[0].x == pytest.approx(791)


def play(sim, seed, ticks=1200):
    state = sim.initial_state(seed=seed)
    for i in range(ticks):
        state = sim.step(state, FLAP if i % 14 == 0 else TickInput())
    return state


def test_same_seed_and_inputs_are_deterministic():
    sim = SideScrollerSimulation()
    a = play(sim, seed=11)
    b = play(sim, seed=11)
    assert sim.outcome(a) == sim.outcome(b)
    assert a.tick == b.tick
    assert a.avatar == b.avatar
    assert [o.gap_top for o in a.obstacles] == [o.gap_top for o in b.obstacles]


def test_no_updates_after_game_over(side_sim):
    state = clear_field(side_sim.initial_state())
    state.avatar = Avatar(x=100, y=570)
    state = side_sim.step(state, TickInput())
    tick = state.tick
    state = run_ticks(side_sim, state, 10)
    assert state.tick == tick
    assert side_sim.outcome(state).duration_seconds == 0


def test_snapshot(side_sim):
    state = side_sim.initial_state()
    state = side_sim.step(state, TickInput())
    snap = side_sim.snapshot(state)
    assert isinstance(snap, SideScrollerSnapshot)
    assert snap.tick == 1
    assert snap.shields == 3 and snap.max_shields == 3
    assert snap.obstacles[0].x == state.obstacles[0].x
    assert not snap.invincible and not snap.missile_warning


def test_set_shields(side_sim):
    state = side_sim.initial_state()
    assert side_sim.set_shields(state, 5)
    assert side_sim.current_shields(state) == 5
    assert state.shields.maximum == 5
