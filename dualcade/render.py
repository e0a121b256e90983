"""
Renderers and the arcade host window
------------------------------------
The engine hands every frame to `renderer.render(snapshot)`. Renderers are
pure consumers: they never touch simulation state.

- NullRenderer: headless runs
- SnapshotWindow: arcade window that draws the latest snapshot
- GameWindow: SnapshotWindow that also hosts a GameEngine (drives ticks from
  on_update, forwards keyboard input, disposes the engine on close)

Play:
    python -m dualcade.render --mode maze_chase
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

import arcade

from .configs.game_config import ENGINE_CONFIG
from .engine import EngineStatus, GameEngine, SpeedTier
from .entities import AgentMode, Direction, GameMode
from .maze import DEFAULT_LAYOUT, CellKind, Maze
from .snapshot import MazeChaseSnapshot, SideScrollerSnapshot

AGENT_COLORS = {
    0: (255, 0, 0),
    1: (255, 182, 193),
    2: (0, 255, 255),
    3: (255, 165, 0),
}


class NullRenderer:
    """Discards frames"""

    def render(self, snapshot):
        pass


class WindowRenderer:
    """Hands each snapshot to a SnapshotWindow for its next on_draw"""

    def __init__(self, window: "SnapshotWindow"):
        self.window = window

    def render(self, snapshot):
        self.window.snapshot = snapshot


class SnapshotWindow(arcade.Window):
    """Arcade window that draws the most recent snapshot"""

    def __init__(self, width: int, height: int, title: str = "dualcade"):
        super().__init__(width, height, title)
        self.snapshot = None

        # Colors
        self.BG = (18, 18, 22)
        self.AVATAR_C = (140, 110, 200)
        self.OBSTACLE_C = (80, 200, 120)
        self.PROJECTILE_C = (220, 80, 80)
        self.WARNING_C = (120, 30, 30)
        self.WALL_C = (40, 60, 220)
        self.GATE_C = (255, 184, 255)
        self.PELLET_C = (240, 210, 80)
        self.PLAYER_C = (255, 255, 0)
        self.FRIGHT_C = (5, 5, 255)
        self.FLASH_C = (255, 255, 255)
        self.HUD_C = (220, 220, 220)

    def on_draw(self):
        self.clear()
        arcade.set_background_color(self.BG)
        if isinstance(self.snapshot, SideScrollerSnapshot):
            self._draw_side_scroller(self.snapshot)
        elif isinstance(self.snapshot, MazeChaseSnapshot):
            self._draw_maze_chase(self.snapshot)

    # Snapshots use y-down screen coordinates; arcade is y-up
    def _rect(self, x, y, w, h, color):
        top = self.height - y
        arcade.draw_lrbt_rectangle_filled(x, x + w, top - h, top, color)

    def _draw_side_scroller(self, s: SideScrollerSnapshot):
        if s.missile_warning:
            self._rect(0, 0, self.width, 12, self.WARNING_C)

        for o in s.obstacles:
            self._rect(o.x, 0, o.width, o.gap_top, self.OBSTACLE_C)
            bottom = o.gap_top + o.gap_size
            self._rect(o.x, bottom, o.width, s.height - bottom, self.OBSTACLE_C)

        for p in s.projectiles:
            self._rect(p.x, p.y, p.width, p.height, self.PROJECTILE_C)

        a = s.avatar
        # Flicker while invincible
        if not s.invincible or (s.tick // 5) % 2 == 0:
            self._rect(a.x, a.y, a.width, a.height, self.AVATAR_C)

        txt = f"Score: {s.score}  Shields: {s.shields}/{s.max_shields}"
        arcade.draw_text(txt, 12, self.height - 24, self.HUD_C, 14)

    def _draw_maze_chase(self, s: MazeChaseSnapshot):
        size = s.cell_size
        rows, cols = s.grid.shape
        for row in range(rows):
            for col in range(cols):
                kind = s.grid[row, col]
                if kind == CellKind.WALL:
                    self._rect(col * size, row * size, size, size, self.WALL_C)
                elif kind == CellKind.GATE:
                    self._rect(col * size, row * size + size * 0.4, size, size * 0.2, self.GATE_C)

        for p in s.pellets:
            radius = size * (0.3 if p.is_power else 0.1)
            cx = p.col * size + size / 2
            cy = self.height - (p.row * size + size / 2)
            arcade.draw_circle_filled(cx, cy, radius, self.PELLET_C)

        pl = s.player
        if not s.invulnerable or (s.tick // 5) % 2 == 0:
            arcade.draw_circle_filled(pl.x + size / 2, self.height - (pl.y + size / 2), size * 0.45, self.PLAYER_C)

        for a in s.agents:
            if a.is_vulnerable:
                color = self.FLASH_C if a.is_blinking else self.FRIGHT_C
            elif a.mode is AgentMode.EATEN:
                color = self.HUD_C
            else:
                color = AGENT_COLORS.get(a.identity, self.HUD_C)
            arcade.draw_circle_filled(a.x + size / 2, self.height - (a.y + size / 2), size * 0.45, color)

        txt = f"Score: {s.score}  Lives: {s.lives}  Level: {s.level}"
        arcade.draw_text(txt, 12, 8, self.HUD_C, 14)


class GameWindow(SnapshotWindow):
    """Hosts a GameEngine: on_update is the frame-synchronized tick source"""

    KEY_DIRECTIONS = {
        arcade.key.UP: Direction.UP,
        arcade.key.W: Direction.UP,
        arcade.key.DOWN: Direction.DOWN,
        arcade.key.S: Direction.DOWN,
        arcade.key.LEFT: Direction.LEFT,
        arcade.key.A: Direction.LEFT,
        arcade.key.RIGHT: Direction.RIGHT,
        arcade.key.D: Direction.RIGHT,
    }

    def __init__(self, mode: GameMode, width: int, height: int, speed: Optional[str] = None, **simulation_kwargs):
        super().__init__(width, height, f"dualcade - {GameMode(mode).value}")
        self.engine = GameEngine(
            mode,
            renderer=WindowRenderer(self),
            on_game_end=self._on_game_end,
            **ENGINE_CONFIG,
            **simulation_kwargs,
        )
        if speed is not None:
            self.engine.set_speed(SpeedTier(speed))

        self.push_handlers(on_key_press=self._on_key)
        self.engine.add_disposer(lambda: self.remove_handlers(on_key_press=self._on_key))
        self.result = None

    def _on_key(self, symbol, modifiers):
        engine = self.engine
        if symbol == arcade.key.ENTER:
            if engine.status in (EngineStatus.IDLE, EngineStatus.GAME_OVER, EngineStatus.LEVEL_COMPLETE):
                engine.start()
        elif symbol == arcade.key.P:
            if engine.status is EngineStatus.PAUSED:
                engine.resume()
            else:
                engine.pause()
        elif symbol in (arcade.key.SPACE, arcade.key.UP) and engine.mode is GameMode.SIDE_SCROLLER:
            engine.handle_flap_input()
        elif symbol in self.KEY_DIRECTIONS:
            engine.handle_directional_input(self.KEY_DIRECTIONS[symbol])

    def on_update(self, delta_time: float):
        self.engine.tick(delta_time)

    def _on_game_end(self, score: int, secondary: int, duration: int):
        self.result = (score, secondary, duration)
        print(f"Game over! score={score} secondary={secondary} duration={duration}s  (ENTER to restart)")

    def on_close(self):
        self.engine.dispose()
        super().on_close()


def play(mode: str = "maze_chase", speed: Optional[str] = None, **simulation_kwargs):
    """Open a window and play one mode"""
    mode = GameMode(mode)
    if mode is GameMode.SIDE_SCROLLER:
        width, height = simulation_kwargs.get("width", 800), simulation_kwargs.get("height", 600)
    else:
        size = simulation_kwargs.get("cell_size", 20)
        maze = Maze(simulation_kwargs.get("layout", DEFAULT_LAYOUT))
        width, height = maze.width * size, maze.height * size
    window = GameWindow(mode, width, height, speed=speed, **simulation_kwargs)
    print("ENTER to start, P to pause, SPACE to flap / arrows to steer")
    arcade.run()
    return window.result


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play a dualcade mode")
    parser.add_argument("--mode", choices=[m.value for m in GameMode], default="maze_chase")
    parser.add_argument("--speed", choices=[t.value for t in SpeedTier], default=None)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    play(args.mode, speed=args.speed, seed=args.seed)
