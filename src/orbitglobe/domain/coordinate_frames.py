# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Coordinate frame conversions.

Pure, stateless transformations between ECI, ECEF, geodetic and scene
coordinates. Distances are in kilometers except scene coordinates, which
are in render units scaled to a chosen globe radius.

Reference frames:
    ECI      — Earth-Centered Inertial (SGP4 TEME output is treated as ECI)
    ECEF     — Earth-Centered Earth-Fixed (rotating with Earth)
    Geodetic — Latitude, Longitude, Altitude (WGS84 ellipsoid)
    Scene    — Right-handed render frame, +Y up through the north pole

Scene convention (spherical parameterization):
    φ = (90 - lat)·π/180,  θ = (lon + 180)·π/180
    x = -r·sinφ·cosθ,  y = r·cosφ,  z = r·sinφ·sinθ

so (lat 0°, lon 0°) lies on +X, the north pole on +Y and lon 90°E on -Z.
ECEF maps onto the same convention through the axis permutation
(x, y, z)_ecef → (x, z, -y)_scene.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np


@dataclass(frozen=True)
class _EarthConstants:
    """Earth shape constants in kilometers (WGS84 / IUGG mean radius)."""
    MEAN_RADIUS_KM: float = 6371.0
    EQUATORIAL_RADIUS_KM: float = 6378.137
    POLAR_RADIUS_KM: float = 6356.7523142
    E_SQUARED: float = 0.00669437999014    # first eccentricity squared


EarthConstants: _EarthConstants = _EarthConstants()

DEFAULT_SCENE_RADIUS = 1.0


@dataclass(frozen=True)
class FrameState:
    """A position expressed in every frame the simulation uses."""
    position_eci_km: tuple[float, float, float]
    position_ecef_km: tuple[float, float, float]
    position_scene: tuple[float, float, float]
    lat_deg: float
    lon_deg: float
    alt_km: float
    timestamp: datetime


# ── Geodetic ↔ scene ──────────────────────────────────────────────

def geodetic_to_scene(
    lat_deg: float,
    lon_deg: float,
    radius: float = DEFAULT_SCENE_RADIUS,
) -> tuple[float, float, float]:
    """
    Convert latitude/longitude to a point on a sphere of the given radius.

    Args:
        lat_deg: Latitude in degrees [-90, 90].
        lon_deg: Longitude in degrees.
        radius: Sphere radius in scene units.

    Returns:
        (x, y, z) in scene coordinates.
    """
    phi = (90.0 - lat_deg) * (math.pi / 180.0)
    theta = (lon_deg + 180.0) * (math.pi / 180.0)

    x = -radius * math.sin(phi) * math.cos(theta)
    y = radius * math.cos(phi)
    z = radius * math.sin(phi) * math.sin(theta)

    return x, y, z


def geodetic_to_scene_array(lon_lat: np.ndarray, radius: float = DEFAULT_SCENE_RADIUS) -> np.ndarray:
    """
    Vectorized geodetic_to_scene for an (N, 2) array of (lon, lat) pairs.

    Note the GeoJSON ordering: longitude first.

    Returns:
        (N, 3) float64 array of scene coordinates.
    """
    lon_lat = np.asarray(lon_lat, dtype=np.float64).reshape(-1, 2)
    phi = np.radians(90.0 - lon_lat[:, 1])
    theta = np.radians(lon_lat[:, 0] + 180.0)
    sin_phi = np.sin(phi)
    return np.column_stack((
        -radius * sin_phi * np.cos(theta),
        radius * np.cos(phi),
        radius * sin_phi * np.sin(theta),
    ))


def scene_to_geodetic(point: tuple[float, float, float]) -> tuple[float, float]:
    """
    Inverse of geodetic_to_scene.

    The point is first projected onto the unit sphere, so any radius works.
    At the poles longitude is undefined; atan2 then yields 0.

    Args:
        point: (x, y, z) in scene coordinates, not the origin.

    Returns:
        (lat_deg, lon_deg) with longitude in (-180, 180].

    Raises:
        ValueError: If the point is the origin.
    """
    x, y, z = point
    r = math.sqrt(x * x + y * y + z * z)
    if r == 0.0:
        raise ValueError("Cannot convert the origin to geodetic coordinates")

    lat_deg = math.degrees(math.asin(max(-1.0, min(1.0, y / r))))
    lon_deg = math.degrees(math.atan2(-z, x))
    if lon_deg <= -180.0:
        lon_deg += 360.0

    return lat_deg, lon_deg


# ── Inertial / Earth-fixed ────────────────────────────────────────

def gmst_rad(epoch: datetime) -> float:
    """
    Compute Greenwich Mean Sidereal Time for a given UTC epoch.

    Uses the IAU formula based on Julian centuries from J2000.0:
        GMST(°) = 280.46061837 + 360.98564736629 * (JD - 2451545.0)
                  + 0.000387933 * T² - T³/38710000

    Args:
        epoch: UTC datetime (naive values are treated as UTC).

    Returns:
        GMST in radians, normalized to [0, 2π).
    """
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)

    j2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    jd_since_j2000 = (epoch - j2000).total_seconds() / 86400.0
    t_centuries = jd_since_j2000 / 36525.0

    gmst_deg = (
        280.46061837
        + 360.98564736629 * jd_since_j2000
        + 0.000387933 * t_centuries**2
        - t_centuries**3 / 38710000.0
    )

    gmst_deg = gmst_deg % 360.0
    if gmst_deg < 0:
        gmst_deg += 360.0

    return math.radians(gmst_deg)


def eci_to_ecef(
    pos_eci: tuple[float, float, float],
    gmst_angle_rad: float,
) -> tuple[float, float, float]:
    """
    Rotate an inertial position into the Earth-fixed frame.

    The rotation R_z(-θ) by the GMST angle θ:
        [x_ecef]   [ cos(θ)  sin(θ)  0] [x_eci]
        [y_ecef] = [-sin(θ)  cos(θ)  0] [y_eci]
        [z_ecef]   [   0       0     1] [z_eci]
    """
    cos_t = math.cos(gmst_angle_rad)
    sin_t = math.sin(gmst_angle_rad)

    return (
        cos_t * pos_eci[0] + sin_t * pos_eci[1],
        -sin_t * pos_eci[0] + cos_t * pos_eci[1],
        pos_eci[2],
    )


def ecef_to_geodetic(
    pos_ecef_km: tuple[float, float, float],
) -> tuple[float, float, float]:
    """
    Convert ECEF position to geodetic coordinates (WGS84 ellipsoid).

    Uses the iterative Bowring method for latitude convergence.

    Args:
        pos_ecef_km: Position in ECEF frame (x, y, z) in kilometers.

    Returns:
        (latitude_deg, longitude_deg, altitude_km)
        Latitude in [-90, 90], longitude in (-180, 180].
    """
    c = EarthConstants
    a = c.EQUATORIAL_RADIUS_KM
    b = c.POLAR_RADIUS_KM
    e2 = c.E_SQUARED

    x, y, z = pos_ecef_km
    p = math.sqrt(x**2 + y**2)

    lon_rad = math.atan2(y, x)

    # Initial estimate from the spherical approximation
    lat_rad = math.atan2(z, p * (1.0 - e2))

    for _ in range(10):
        sin_lat = math.sin(lat_rad)
        n = a / math.sqrt(1.0 - e2 * sin_lat**2)
        lat_rad = math.atan2(z + e2 * n * sin_lat, p)

    sin_lat = math.sin(lat_rad)
    cos_lat = math.cos(lat_rad)
    n = a / math.sqrt(1.0 - e2 * sin_lat**2)

    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - n
    else:
        alt = abs(z) - b

    lon_deg = math.degrees(lon_rad)
    if lon_deg <= -180.0:
        lon_deg += 360.0

    return math.degrees(lat_rad), lon_deg, alt


def ecef_to_scene(
    pos_ecef_km: tuple[float, float, float],
    scene_radius: float = DEFAULT_SCENE_RADIUS,
    planet_radius_km: float = EarthConstants.MEAN_RADIUS_KM,
) -> tuple[float, float, float]:
    """
    Scale an ECEF position into scene units and permute axes.

    scene = (x, z, -y)_ecef × scene_radius / planet_radius_km, which keeps
    satellites aligned with meshes built by geodetic_to_scene.
    """
    scale = scene_radius / planet_radius_km
    x, y, z = pos_ecef_km
    return x * scale, z * scale, -y * scale


def eci_to_frames(
    pos_eci_km: tuple[float, float, float],
    epoch: datetime,
    scene_radius: float = DEFAULT_SCENE_RADIUS,
    gmst_angle_rad: float | None = None,
) -> FrameState:
    """
    Chain ECI → ECEF → (geodetic, scene) for one position.

    Args:
        pos_eci_km: Inertial position in km.
        epoch: Time of the position, used for GMST.
        scene_radius: Globe radius in scene units.
        gmst_angle_rad: Precomputed GMST; avoids recomputing it per object
            when a whole fleet shares one timestamp.
    """
    if gmst_angle_rad is None:
        gmst_angle_rad = gmst_rad(epoch)
    pos_ecef = eci_to_ecef(pos_eci_km, gmst_angle_rad)
    lat_deg, lon_deg, alt_km = ecef_to_geodetic(pos_ecef)

    return FrameState(
        position_eci_km=(float(pos_eci_km[0]), float(pos_eci_km[1]), float(pos_eci_km[2])),
        position_ecef_km=pos_ecef,
        position_scene=ecef_to_scene(pos_ecef, scene_radius),
        lat_deg=lat_deg,
        lon_deg=lon_deg,
        alt_km=alt_km,
        timestamp=epoch,
    )
