"""
Vertical motion for the side-scroller avatar.

All operations are pure: they take an Avatar and return a new one.
"""

from __future__ import annotations

from dataclasses import replace

from .entities import Avatar
from .utils import clamp


class AvatarPhysics:
    """Gravity and flap impulse, in pixels per tick"""

    def __init__(
        self,
        gravity: float = 0.5,
        flap_velocity: float = -8.0,
        max_fall_speed: float = 12.0,
    ):
        self.gravity = gravity
        self.flap_velocity = flap_velocity
        self.max_fall_speed = max_fall_speed

    def apply_impulse(self, avatar: Avatar) -> Avatar:
        return replace(avatar, velocity=self.flap_velocity)

    def integrate(self, avatar: Avatar, dt: float = 1.0) -> Avatar:
        velocity = min(avatar.velocity + self.gravity * dt, self.max_fall_speed)
        y = avatar.y + velocity * dt
        # Nose up while rising, down while falling
        rotation = clamp(velocity * 3.0, -25.0, 90.0)
        return replace(avatar, y=y, velocity=velocity, rotation=rotation)

    @staticmethod
    def is_ground_collision(avatar: Avatar, bounds_height: float) -> bool:
        return avatar.y + avatar.height >= bounds_height

    @staticmethod
    def bounce_off_ceiling(avatar: Avatar) -> Avatar:
        if avatar.y >= 0:
            return avatar
        return replace(avatar, y=0.0, velocity=max(0.0, avatar.velocity))
