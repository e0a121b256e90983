"""
Game configuration for both modes
Splat these into the simulation / engine / env constructors:

    SideScrollerSimulation(**SIDE_SCROLLER_CONFIG)
    GameEngine(GameMode.MAZE_CHASE, renderer, on_end, **MAZE_CHASE_CONFIG)
"""

# Side-scroller parameters (pixels and ticks at 60 ticks/sec)
SIDE_SCROLLER_CONFIG = {
    "width": 800,
    "height": 600,
    "shields": 3,
    "avatar_x": 100.0,
    "avatar_y": 285.0,
    "gravity": 0.5,
    "flap_velocity": -8.0,
    "max_fall_speed": 12.0,
    "gap_size": 180.0,
    "obstacle_width": 80.0,
    "obstacle_spacing": 300.0,
    "scroll_speed": 4.0,       # px/tick before the speed tier multiplier
    "projectile_speed": 6.0,
    "projectile_warmup_seconds": 15.0,
    "projectile_interval_seconds": 15.0,
    "projectile_warning_seconds": 2.0,
    "invincibility_ticks": 60,
    "hit_effect_ticks": 30,
    "knockback_velocity": -8.0,
    "knockback_distance": 20.0,
}

# Maze-chase parameters
MAZE_CHASE_CONFIG = {
    "lives": 3,
    "cell_size": 20,
    "player_move_ticks": 8,    # one cell every 8 ticks
    "agent_move_ticks": 10,
    "phase_ticks": 600,        # scatter <-> chase every 10 s
    "frightened_ticks": 600,   # power pellet lasts 10 s
    "blink_window_ticks": 180, # blink during the last 3 s
    "blink_interval_ticks": 30,
    "invulnerability_ticks": 120,
    "release_ticks": (0, 300, 600, 900),
    "respawn_release_ticks": (0, 60, 120, 180),
    "eaten_release_ticks": 120,
    "pellet_points": 5,
    "power_pellet_points": 25,
    "agent_points": 100,
    "level_bonus": 1000,
    "end_run_on_level_complete": False,
}

# Speed tiers (side-scroller scrolling multiplier)
SPEED_TIERS = {
    "slow": 0.75,
    "normal": 1.5,
    "fast": 2.25,
}

# Engine host parameters
ENGINE_CONFIG = {
    "max_catch_up_steps": 5,  # fixed steps allowed per host frame
}

# Gymnasium environment parameters
ENV_CONFIG = {
    "max_steps": 3600,  # 60 seconds at 60 ticks/sec
    "frame_skip": 4,
}
