"""
Tick-driven timers
------------------
Every timer here is a frame counter decremented (or incremented) once per
simulation tick. Nothing reads the wall clock, so a run can be paused,
replayed and unit-tested tick by tick.

- Countdown: one-shot countdown (release, vulnerability, invincibility ...)
- Cadence: fires every N ticks (movement cadence, blink cadence)
- PhaseClock: alternates between two phases on a fixed period
- ProjectileClock: warm-up, fixed interval and pre-spawn warning window
- Scheduler: named set of the above, advanced in a single pass per tick
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple

TICKS_PER_SECOND = 60


def seconds_to_ticks(seconds: float) -> int:
    """Convert game seconds to a whole number of ticks"""
    return int(round(seconds * TICKS_PER_SECOND))


class Countdown:
    """One-shot countdown measured in ticks."""

    def __init__(self, duration: int = 0, start: bool = False):
        self.duration = int(duration)
        self.remaining = self.duration if start else 0

    @property
    def active(self) -> bool:
        return self.remaining > 0

    @property
    def elapsed(self) -> int:
        if not self.active:
            return 0
        return self.duration - self.remaining

    def start(self, ticks: Optional[int] = None):
        if ticks is not None:
            self.duration = int(ticks)
        self.remaining = self.duration

    def cancel(self):
        self.remaining = 0

    def tick(self) -> bool:
        """Advance one tick. Returns True on the tick the countdown reaches zero."""
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return self.remaining == 0

    def __repr__(self) -> str:
        return f"Countdown(remaining={self.remaining}, duration={self.duration})"


class Cadence:
    """Fires once every `interval` ticks."""

    def __init__(self, interval: int):
        if interval < 1:
            raise ValueError(f"cadence interval must be >= 1, got {interval}")
        self.interval = int(interval)
        self.counter = 0

    def reset(self):
        self.counter = 0

    def tick(self) -> bool:
        self.counter += 1
        if self.counter >= self.interval:
            self.counter = 0
            return True
        return False

    def __repr__(self) -> str:
        return f"Cadence(counter={self.counter}, interval={self.interval})"


class PhaseClock:
    """Alternates between two phases every `period` ticks, starting with the first."""

    def __init__(self, phases: Tuple[Any, Any], period: int):
        self.phases = phases
        self.period = int(period)
        self.current = phases[0]
        self._countdown = Countdown(self.period, start=True)

    def reset(self):
        self.current = self.phases[0]
        self._countdown.start(self.period)

    @property
    def remaining(self) -> int:
        return self._countdown.remaining

    def tick(self) -> bool:
        """Returns True on the tick the phase flips."""
        if not self._countdown.tick():
            return False
        first, second = self.phases
        self.current = second if self.current == first else first
        self._countdown.start(self.period)
        return True

    def __repr__(self) -> str:
        return f"PhaseClock(current={self.current!r}, remaining={self.remaining})"


class ProjectileClock:
    """Projectile cadence: first spawn after a warm-up, then on a fixed interval.

    `warning` is raised during the last `warning_ticks` before each spawn so the
    renderer can flash a warning.
    """

    def __init__(self, warmup: int, interval: int, warning_ticks: int):
        self.warmup = int(warmup)
        self.interval = int(interval)
        self.warning_ticks = int(warning_ticks)
        self.since_last_spawn = 0
        self.spawned = 0
        self._countdown = Countdown(self.warmup, start=True)

    def reset(self):
        self.since_last_spawn = 0
        self.spawned = 0
        self._countdown.start(self.warmup)

    @property
    def ticks_to_next(self) -> int:
        return self._countdown.remaining

    @property
    def warning(self) -> bool:
        return 0 < self._countdown.remaining <= self.warning_ticks

    def tick(self) -> bool:
        """Returns True on the tick a projectile should spawn."""
        self.since_last_spawn += 1
        if not self._countdown.tick():
            return False
        self.spawned += 1
        self.since_last_spawn = 0
        self._countdown.start(self.interval)
        return True

    def __repr__(self) -> str:
        return f"ProjectileClock(ticks_to_next={self.ticks_to_next}, spawned={self.spawned})"


class Scheduler:
    """Named timers advanced together, once per tick."""

    def __init__(self):
        self._timers: Dict[str, Any] = {}

    def add(self, name: str, timer):
        if name in self._timers:
            raise ValueError(f"timer '{name}' already registered")
        self._timers[name] = timer
        return timer

    def __getitem__(self, name: str):
        return self._timers[name]

    def __contains__(self, name: str) -> bool:
        return name in self._timers

    def __iter__(self) -> Iterator[str]:
        return iter(self._timers)

    def tick(self) -> List[str]:
        """Advance every timer by one tick and return the names that fired."""
        fired = []
        for name, timer in self._timers.items():
            if timer.tick():
                fired.append(name)
        return fired
