# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Fibonacci sphere lattice.

Evenly distributed sample points on the unit sphere, used to fill the
interior of large polygons so their meshes follow the sphere's curvature.
"""
import math

import numpy as np

DEFAULT_FIBONACCI_POINT_COUNT = 3000


def fibonacci_sphere(n: int) -> np.ndarray:
    """
    Generate n points on the unit sphere using the golden-angle spiral.

    y runs linearly from +1 to -1; the azimuth advances by the golden
    angle π(√5 - 1) per point.

    Args:
        n: Number of points (> 0).

    Returns:
        (n, 2) array of (longitude_deg, latitude_deg), longitude in
        (-180, 180], latitude in [-90, 90].

    Raises:
        ValueError: If n is not positive.
    """
    if n <= 0:
        raise ValueError(f"Cannot generate {n} points on a Fibonacci sphere")

    golden_angle = math.pi * (math.sqrt(5.0) - 1.0)
    denominator = float(n - 1) if n > 1 else 1.0

    i = np.arange(n, dtype=np.float64)
    y = 1.0 - (i / denominator) * 2.0
    theta = golden_angle * i

    lon = np.degrees(theta % (2.0 * math.pi))
    lon = np.where(lon > 180.0, lon - 360.0, lon)
    lat = np.degrees(np.arcsin(np.clip(y, -1.0, 1.0)))

    return np.column_stack((lon, lat))
