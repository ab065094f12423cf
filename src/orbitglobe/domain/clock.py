# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Time-scaled simulation clock.

A virtual clock whose simulated timestamp advances at
speed_multiplier × real elapsed time. The clock is delta-based: each
update() measures the wall-clock time since the previous update, so the
simulation is independent of how often update() is called.

    speed_multiplier = 0   → paused
    speed_multiplier = 1   → real time
    speed_multiplier > 1   → accelerated

All times are milliseconds since the Unix epoch (UTC).
"""
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

DEFAULT_SPEED_MULTIPLIER = 30.0
MS_PER_MINUTE = 60_000.0


def wall_clock_ms() -> float:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time() * 1000.0


@dataclass
class ClockState:
    """Mutable clock state. Only ScaledClock.update() advances it."""
    simulated_time_ms: float
    previous_real_time_ms: float
    speed_multiplier: float


class ScaledClock:
    """
    Simulated clock driven by wall-clock deltas.

    Args:
        speed_multiplier: Initial simulated-seconds per real second.
        now_ms: Wall-clock source in ms. Injectable for deterministic tests.
    """

    def __init__(
        self,
        speed_multiplier: float = DEFAULT_SPEED_MULTIPLIER,
        now_ms: Callable[[], float] = wall_clock_ms,
    ) -> None:
        _check_multiplier(speed_multiplier)
        self._now_ms = now_ms
        start = now_ms()
        self._state = ClockState(
            simulated_time_ms=start,
            previous_real_time_ms=start,
            speed_multiplier=float(speed_multiplier),
        )

    @property
    def state(self) -> ClockState:
        """Snapshot of the current state (a copy; mutating it has no effect)."""
        s = self._state
        return ClockState(s.simulated_time_ms, s.previous_real_time_ms, s.speed_multiplier)

    @property
    def simulated_time_ms(self) -> float:
        return self._state.simulated_time_ms

    @property
    def speed_multiplier(self) -> float:
        return self._state.speed_multiplier

    def now_ms(self) -> float:
        """Read the wall clock this ScaledClock is anchored to."""
        return self._now_ms()

    def update(self) -> None:
        """Advance simulated time by Δreal × speed_multiplier."""
        now = self._now_ms()
        delta_real = now - self._state.previous_real_time_ms
        self._state.previous_real_time_ms = now
        self._state.simulated_time_ms += delta_real * self._state.speed_multiplier

    def minutes_since(self, epoch_ms: float) -> float:
        """Simulated minutes elapsed since epoch_ms (negative if epoch is ahead)."""
        return (self._state.simulated_time_ms - epoch_ms) / MS_PER_MINUTE

    def simulated_datetime(self) -> datetime:
        """Simulated time as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(
            self._state.simulated_time_ms / 1000.0, tz=timezone.utc,
        )

    def set_speed(self, multiplier: float) -> None:
        """
        Set the speed multiplier.

        Switching to real time (multiplier == 1) re-anchors both simulated
        and previous wall-clock time to the same current reading, so drift
        accumulated while accelerated or paused is discarded.
        """
        _check_multiplier(multiplier)
        self._state.speed_multiplier = float(multiplier)
        if multiplier == 1:
            now = self._now_ms()
            self._state.simulated_time_ms = now
            self._state.previous_real_time_ms = now


def _check_multiplier(multiplier: float) -> None:
    if multiplier < 0:
        raise ValueError(f"Speed multiplier must be >= 0, got {multiplier}")
