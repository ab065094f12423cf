# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbit path sampling.

Samples one object's propagator forward from a start offset and lifts the
samples into scene coordinates, giving a polyline of its upcoming orbit.

Every sample is rotated into the Earth-fixed frame with the GMST of the
start instant, so the path shows the inertial orbit against the globe as
it stands at that moment, and its first point coincides with the
object's marker.
"""
import logging

import numpy as np

from .coordinate_frames import DEFAULT_SCENE_RADIUS, ecef_to_scene, eci_to_ecef
from orbitglobe.ports.propagation import OrbitPropagator, PropagationError


logger = logging.getLogger(__name__)

# Roughly one low-Earth-orbit revolution at one-minute resolution
ORBIT_PATH_MINUTES = 90.0
ORBIT_PATH_STEP_MINUTES = 1.0


def sample_offsets(
    minutes_ahead: float = ORBIT_PATH_MINUTES,
    step_minutes: float = ORBIT_PATH_STEP_MINUTES,
) -> np.ndarray:
    """
    Offsets 0, step, 2·step, ... with floor(minutes_ahead / step) entries.

    Raises:
        ValueError: If step_minutes is not positive or minutes_ahead is
            negative.
    """
    if step_minutes <= 0:
        raise ValueError(f"Sample step must be positive, got {step_minutes}")
    if minutes_ahead < 0:
        raise ValueError(f"Path length must be non-negative, got {minutes_ahead}")
    return np.arange(int(minutes_ahead / step_minutes)) * step_minutes


def orbit_path(
    propagator: OrbitPropagator,
    start_minutes: float,
    gmst_angle_rad: float,
    minutes_ahead: float = ORBIT_PATH_MINUTES,
    step_minutes: float = ORBIT_PATH_STEP_MINUTES,
    scene_radius: float = DEFAULT_SCENE_RADIUS,
) -> np.ndarray:
    """
    Scene-space orbit polyline.

    Args:
        propagator: The object's propagator.
        start_minutes: Minutes since the element epoch of the first sample.
        gmst_angle_rad: Earth rotation angle applied to every sample.
        minutes_ahead: Length of the path in minutes.
        step_minutes: Spacing between samples.
        scene_radius: Globe radius in scene units.

    Returns:
        (N, 3) array of scene positions. Samples the propagator rejects
        are left out, so N may be smaller than the sample count.
    """
    points = []
    offsets = sample_offsets(minutes_ahead, step_minutes)
    for offset in offsets:
        try:
            pos_eci = propagator.propagate(start_minutes + float(offset))
        except PropagationError as e:
            logger.debug("Orbit path sample at +%.1f min skipped: %s", offset, e)
            continue
        points.append(ecef_to_scene(eci_to_ecef(pos_eci, gmst_angle_rad), scene_radius))

    if len(points) < len(offsets):
        logger.debug("Orbit path kept %d of %d samples", len(points), len(offsets))
    if not points:
        return np.empty((0, 3))
    return np.array(points, dtype=np.float64)
