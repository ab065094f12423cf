# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Satellite registry: owns tracked objects and drives per-frame propagation.

Each frame the caller invokes update_satellites(), which steps the
ScaledClock exactly once and propagates every tracked object to the same
simulated timestamp. Objects whose elements fail to propagate keep their
last known position for that tick; they are never removed automatically.

Lifecycle per object:  added → propagating → removed
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

import numpy as np

from orbitglobe.domain.clock import ScaledClock
from orbitglobe.domain.coordinate_frames import (
    DEFAULT_SCENE_RADIUS,
    eci_to_frames,
    gmst_rad,
)
from orbitglobe.domain.orbit_path import (
    ORBIT_PATH_MINUTES,
    ORBIT_PATH_STEP_MINUTES,
    orbit_path,
)
from orbitglobe.domain.tracked_object import (
    SatelliteRecord,
    TrackedObject,
    parse_satellite_record,
)
from orbitglobe.ports.display import DisplaySurface
from orbitglobe.ports.propagation import PropagationError, PropagatorFactory


logger = logging.getLogger(__name__)


class SatelliteRegistry:
    """
    Tracks satellites and repositions their display markers.

    Args:
        display: Display surface receiving marker create/move/release calls.
        propagators: Factory turning TLE lines into propagators.
        clock_factory: Builds a fresh ScaledClock (on construction, on
            switching back to real time and on clear).
        scene_radius: Globe radius in scene units.
    """

    def __init__(
        self,
        display: DisplaySurface,
        propagators: PropagatorFactory,
        clock_factory: Callable[[], ScaledClock] = ScaledClock,
        scene_radius: float = DEFAULT_SCENE_RADIUS,
    ) -> None:
        self._display = display
        self._propagators = propagators
        self._clock_factory = clock_factory
        self._scene_radius = scene_radius
        self._clock = clock_factory()
        self._objects: list[TrackedObject] = []

    @property
    def clock(self) -> ScaledClock:
        return self._clock

    @property
    def satellites(self) -> tuple[TrackedObject, ...]:
        return tuple(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def get(self, norad_cat_id: int) -> TrackedObject | None:
        for obj in self._objects:
            if obj.norad_cat_id == norad_cat_id:
                return obj
        return None

    def add_satellite(self, dto: SatelliteRecord | dict[str, Any]) -> TrackedObject | None:
        """
        Start tracking one object.

        Elements are parsed once here; the object is propagated to the
        current wall-clock time and a marker is created for it. A record
        that cannot be parsed or propagated is logged and skipped so one
        bad element set does not block a batch.

        Returns:
            The new TrackedObject, or None if the record was skipped.
        """
        try:
            record = dto if isinstance(dto, SatelliteRecord) else parse_satellite_record(dto)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Skipping malformed satellite record: %s", e)
            return None

        try:
            propagator = self._propagators.from_tle(record.tle_line1, record.tle_line2)
            now_ms = self._clock.now_ms()
            minutes = (now_ms - record.epoch_ms) / 60_000.0
            pos_eci = propagator.propagate(minutes)
        except (ValueError, PropagationError) as e:
            logger.warning(
                "Initial propagation failed for %s (%d): %s",
                record.object_name, record.norad_cat_id, e,
            )
            return None

        now = datetime.fromtimestamp(now_ms / 1000.0, tz=timezone.utc)
        state = eci_to_frames(pos_eci, now, self._scene_radius)
        marker = self._display.create_marker(record, state)

        tracked = TrackedObject(
            record=record,
            propagator=propagator,
            marker=marker,
            state=state,
        )
        self._objects.append(tracked)
        logger.debug("Tracking %s (%d)", record.object_name, record.norad_cat_id)
        return tracked

    def add_satellites(self, dtos: Iterable[SatelliteRecord | dict[str, Any]]) -> int:
        """Add a batch of records; returns how many were added."""
        added = 0
        for dto in dtos:
            if self.add_satellite(dto) is not None:
                added += 1
        logger.info("Added %d satellites (%d tracked)", added, len(self._objects))
        return added

    def update_satellites(self) -> None:
        """
        Step the clock once and reposition every tracked object.

        All objects use the same simulated timestamp and GMST angle.
        Never blocks on I/O.
        """
        self._clock.update()
        sim_time = self._clock.simulated_datetime()
        gmst = gmst_rad(sim_time)

        for obj in self._objects:
            minutes = self._clock.minutes_since(obj.epoch_ms)
            try:
                pos_eci = obj.propagator.propagate(minutes)
            except PropagationError as e:
                obj.failed_ticks += 1
                if obj.failed_ticks == 1:
                    logger.warning(
                        "Propagation failed for %s (%d), holding last position: %s",
                        obj.record.object_name, obj.norad_cat_id, e,
                    )
                else:
                    logger.debug("Propagation gap for %d: %s", obj.norad_cat_id, e)
                continue

            obj.state = eci_to_frames(pos_eci, sim_time, self._scene_radius, gmst_angle_rad=gmst)
            self._display.set_position(obj.marker, obj.state)

    def set_speed(self, multiplier: float) -> None:
        """
        Change the simulation speed.

        Returning to real time (multiplier == 1) replaces the clock with a
        fresh one anchored at the current wall-clock time; no state from
        the accelerated run is carried over.
        """
        if multiplier == 1:
            self._clock = self._clock_factory()
        self._clock.set_speed(multiplier)

    def orbit_path(
        self,
        norad_cat_id: int,
        minutes_ahead: float = ORBIT_PATH_MINUTES,
        step_minutes: float = ORBIT_PATH_STEP_MINUTES,
    ) -> np.ndarray | None:
        """
        Upcoming orbit of a tracked object from the current simulated time.

        Returns:
            (N, 3) scene positions, or None if the object is not tracked.
        """
        obj = self.get(norad_cat_id)
        if obj is None:
            return None
        sim_time = self._clock.simulated_datetime()
        return orbit_path(
            obj.propagator,
            self._clock.minutes_since(obj.epoch_ms),
            gmst_rad(sim_time),
            minutes_ahead=minutes_ahead,
            step_minutes=step_minutes,
            scene_radius=self._scene_radius,
        )

    def remove_satellite(self, norad_cat_id: int) -> bool:
        """Stop tracking an object and release its marker."""
        obj = self.get(norad_cat_id)
        if obj is None:
            return False
        self._display.release(obj.marker)
        self._objects.remove(obj)
        return True

    def clear_satellites(self) -> None:
        """Release every marker and reset to an empty registry with a fresh clock."""
        for obj in self._objects:
            self._display.release(obj.marker)
        self._objects = []
        self._clock = self._clock_factory()
