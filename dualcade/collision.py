"""
Collision tests for both game modes
"""

from __future__ import annotations

from .entities import Avatar, Box, Obstacle, Projectile


def boxes_overlap(a: Box, b: Box) -> bool:
    """Standard AABB test; touching edges do not overlap"""
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def has_passed(avatar: Avatar, obstacle: Obstacle) -> bool:
    """Avatar's leading edge is beyond the obstacle's trailing edge"""
    return avatar.x + avatar.width > obstacle.x + obstacle.width


def hits_obstacle(avatar: Avatar, obstacle: Obstacle, bounds_height: float) -> bool:
    box = avatar.box
    return any(boxes_overlap(box, part) for part in obstacle.boxes(bounds_height))


def hits_projectile(avatar: Avatar, projectile: Projectile) -> bool:
    return boxes_overlap(avatar.box, projectile.box)


def same_cell(a, b) -> bool:
    """Maze-mode collision: grid movement is quantized, so cell equality suffices"""
    return a.col == b.col and a.row == b.row
