# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Spherical polygon meshing.

Turns a geographic polygon ring (lon/lat) into a triangle mesh lying on a
sphere. Planar triangulation is only valid in a plane, so the ring is
moved into one:

    1. lon/lat → unit vectors
    2. opposite point = -normalize(centroid), the projection pole
    3. rotate so the opposite point sits on -Z
    4. stereographic projection from -Z: (x, y, z) → (x/(1+z), y/(1+z))
    5. constrained Delaunay triangulation of the 2D points with the ring
       edges as segments, so concave rings are covered exactly
    6. indices re-attached to the original, unrotated 3D points

Stereographic projection is conformal and maps the sphere minus the pole
onto the plane one-to-one, so the ring keeps its planar topology as long as
it does not enclose the pole. Choosing the pole opposite the centroid keeps
it outside ordinary polygons; rings spanning most of a hemisphere or more
can still come close to it, which is reported with a warning.
"""
import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import triangle
from scipy.spatial.transform import Rotation

from .coordinate_frames import geodetic_to_scene_array


logger = logging.getLogger(__name__)

PROJECTION_POLE = np.array([0.0, 0.0, -1.0])
CENTROID_EPSILON = 1e-9
POLE_EPSILON = 1e-12
# Projected radius tan(β/2) = 10 ⇔ within ~11.4° of the projection pole
POLE_RISK_RADIUS = 10.0
# Lattice points closer than this (projected) to a ring vertex are dropped
INTERIOR_MIN_SPACING = 1e-6
# Rings with |area| below this × extent² are treated as collinear
DEGENERATE_AREA_EPSILON = 1e-12
# Triangle switches: p = honour the ring segments and drop the outside, Q = quiet
TRIANGULATE_OPTIONS = "pQ"
MARKER_SIZE_FACTOR = 0.003


@dataclass(frozen=True, eq=False)
class SphereMesh:
    """Triangle mesh on a sphere: (N, 3) positions and (M, 3) vertex indices."""
    positions: np.ndarray
    triangles: np.ndarray
    name: str = ""
    geo_feature: Any = None

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.triangles.shape[0])


@dataclass(frozen=True)
class MarkerSpec:
    """Debug marker at one mesh vertex."""
    position: tuple[float, float, float]
    size: float


# ── Ring preparation ──────────────────────────────────────────────

def normalize_ring(ring: Any) -> np.ndarray:
    """
    Convert a ring of (lon, lat) pairs to an (N, 2) array.

    Repeated consecutive vertices and a closing vertex equal to the first
    are dropped; extra coordinates (e.g. altitude) are ignored. Closure
    itself is not validated.

    Raises:
        ValueError: If a coordinate is not a numeric (lon, lat) pair, or
            fewer than 3 vertices remain.
    """
    try:
        coords = np.array([(float(p[0]), float(p[1])) for p in ring], dtype=np.float64)
    except (IndexError, TypeError) as e:
        raise ValueError(f"Ring coordinates must be (lon, lat) pairs: {e}") from e
    if len(coords) > 1:
        repeated = np.all(coords[1:] == coords[:-1], axis=1)
        coords = coords[np.concatenate(([True], ~repeated))]
    if len(coords) > 1 and np.allclose(coords[0], coords[-1]):
        coords = coords[:-1]
    if len(coords) < 3:
        raise ValueError(
            f"Ring must have at least 3 distinct vertices, got {len(coords)}"
        )
    return coords


def ring_to_unit_vectors(ring: np.ndarray) -> np.ndarray:
    """(N, 2) lon/lat ring → (N, 3) unit vectors in scene coordinates."""
    return geodetic_to_scene_array(ring, 1.0)


# ── Pole selection and rotation ───────────────────────────────────

def opposite_point(points: np.ndarray) -> np.ndarray:
    """
    Unit vector antipodal to the centroid of the points.

    Raises:
        ValueError: If the centroid is effectively zero (points evenly
            spread over the sphere), so no direction can be chosen.
    """
    centroid = np.asarray(points, dtype=np.float64).mean(axis=0)
    norm = float(np.linalg.norm(centroid))
    if norm < CENTROID_EPSILON:
        raise ValueError(
            "Points centroid is effectively zero; cannot determine rotation direction"
        )
    return -centroid / norm


def rotation_to_pole(direction: np.ndarray, pole: np.ndarray = PROJECTION_POLE) -> Rotation:
    """
    Shortest-arc rotation taking a unit direction onto the pole.

    Parallel and antiparallel directions are handled explicitly; for the
    antiparallel case any axis perpendicular to the pole works.
    """
    direction = np.asarray(direction, dtype=np.float64)
    direction = direction / np.linalg.norm(direction)
    cos_angle = float(np.clip(np.dot(direction, pole), -1.0, 1.0))

    if cos_angle > 1.0 - 1e-12:
        return Rotation.identity()
    if cos_angle < -1.0 + 1e-12:
        axis = np.cross(pole, [1.0, 0.0, 0.0])
        if np.linalg.norm(axis) < 1e-6:
            axis = np.cross(pole, [0.0, 1.0, 0.0])
        axis = axis / np.linalg.norm(axis)
        return Rotation.from_rotvec(axis * np.pi)

    axis = np.cross(direction, pole)
    axis = axis / np.linalg.norm(axis)
    return Rotation.from_rotvec(axis * np.arccos(cos_angle))


# ── Stereographic projection ──────────────────────────────────────

def stereographic_projection(points: np.ndarray) -> np.ndarray:
    """
    Project unit-sphere points from the -Z pole onto the plane z = 0.

        (x, y, z) → (x / (1 + z), y / (1 + z))

    Raises:
        ValueError: If any point lies on the pole itself.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    denom = 1.0 + points[:, 2]
    if np.any(np.abs(denom) < POLE_EPSILON):
        raise ValueError("Cannot project a point located at the projection pole (0, 0, -1)")
    return np.column_stack((points[:, 0] / denom, points[:, 1] / denom))


def inverse_stereographic_projection(points_2d: np.ndarray) -> np.ndarray:
    """
    Inverse of stereographic_projection: plane points back onto the unit sphere.

    Raises:
        ValueError: If any coordinate is NaN or infinite.
    """
    points_2d = np.asarray(points_2d, dtype=np.float64).reshape(-1, 2)
    if not np.all(np.isfinite(points_2d)):
        raise ValueError("Input coordinates must be finite numbers")
    sq = np.sum(points_2d**2, axis=1)
    denom = 1.0 + sq
    return np.column_stack((
        2.0 * points_2d[:, 0] / denom,
        2.0 * points_2d[:, 1] / denom,
        (1.0 - sq) / denom,
    ))


# ── Triangulation ─────────────────────────────────────────────────

def points_in_ring(points: np.ndarray, ring: np.ndarray) -> np.ndarray:
    """
    Even-odd test of 2D points against a closed 2D ring.

    Returns:
        Boolean array, True where the point is inside.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    ring = np.asarray(ring, dtype=np.float64).reshape(-1, 2)

    px = points[:, 0][:, None]
    py = points[:, 1][:, None]
    xi = ring[:, 0][None, :]
    yi = ring[:, 1][None, :]
    xj = np.roll(ring[:, 0], 1)[None, :]
    yj = np.roll(ring[:, 1], 1)[None, :]

    straddles = (yi > py) != (yj > py)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
    hits = straddles & (px < x_cross)
    return (np.count_nonzero(hits, axis=1) % 2) == 1


def ring_segments(count: int) -> np.ndarray:
    """Edge list of a closed ring over vertices 0..count-1: (0, 1), ..., (count-1, 0)."""
    start = np.arange(count, dtype=np.int32)
    return np.column_stack((start, np.roll(start, -1)))


def signed_area(ring: np.ndarray) -> float:
    """Shoelace area of a 2D ring; positive when counter-clockwise."""
    ring = np.asarray(ring, dtype=np.float64).reshape(-1, 2)
    x, y = ring[:, 0], ring[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def triangulate_projected(
    points_2d: np.ndarray,
    boundary_count: int,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Constrained Delaunay triangulation of projected points inside the ring.

    The first boundary_count points are the ring in order and every ring
    edge is passed as a segment, so all of them appear in the output and
    nothing outside the ring is triangulated. Any further points are
    interior samples and become vertices of the triangulation.

    Returns:
        (vertices, triangles): (K, 2) vertices beginning with points_2d in
        order, and (M, 3) int64 indices into them. K exceeds len(points_2d)
        only when crossing ring edges forced extra vertices.

    Raises:
        ValueError: If the ring encloses no area (e.g. all collinear) or
            no triangle lies inside it.
    """
    points_2d = np.ascontiguousarray(points_2d, dtype=np.float64)
    boundary = points_2d[:boundary_count]
    if len(boundary) < 3:
        raise ValueError("Triangulation failed: ring needs at least 3 vertices")
    extent = float((boundary.max(axis=0) - boundary.min(axis=0)).max())
    if abs(signed_area(boundary)) <= DEGENERATE_AREA_EPSILON * extent**2:
        raise ValueError("Triangulation failed: ring encloses no area")

    result = triangle.triangulate(
        {"vertices": points_2d, "segments": ring_segments(boundary_count)},
        TRIANGULATE_OPTIONS,
    )
    triangles = result.get("triangles")
    if triangles is None or len(triangles) == 0:
        raise ValueError("Triangulation failed: no triangles inside the ring")
    return (
        np.asarray(result["vertices"], dtype=np.float64),
        np.asarray(triangles, dtype=np.int64).reshape(-1, 3),
    )


def orient_outward(positions: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Reorder triangle vertices so each face normal points away from the origin."""
    if len(triangles) == 0:
        return triangles
    a = positions[triangles[:, 0]]
    b = positions[triangles[:, 1]]
    c = positions[triangles[:, 2]]
    normals = np.cross(b - a, c - a)
    inward = np.einsum("ij,ij->i", normals, a + b + c) < 0.0
    oriented = triangles.copy()
    oriented[inward, 1], oriented[inward, 2] = triangles[inward, 2], triangles[inward, 1]
    return oriented


# ── Pipeline ──────────────────────────────────────────────────────

def _interior_samples(
    lattice: np.ndarray,
    rotation: Rotation,
    projected_ring: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Lattice points (unit vectors, projected) strictly inside the ring."""
    unit = geodetic_to_scene_array(lattice, 1.0)
    rotated = rotation.apply(unit)
    # Stay clear of the pole before projecting
    keep = rotated[:, 2] > -1.0 + 1e-6
    unit, rotated = unit[keep], rotated[keep]
    if len(unit) == 0:
        return unit, np.empty((0, 2))

    projected = stereographic_projection(rotated)
    inside = points_in_ring(projected, projected_ring)
    unit, projected = unit[inside], projected[inside]

    if len(unit):
        gaps = np.linalg.norm(projected[:, None, :] - projected_ring[None, :, :], axis=2)
        clear = gaps.min(axis=1) > INTERIOR_MIN_SPACING
        unit, projected = unit[clear], projected[clear]
    return unit, projected


def mesh_polygon_ring(
    ring: Any,
    radius: float = 1.0,
    *,
    lattice: np.ndarray | None = None,
    name: str = "",
    geo_feature: Any = None,
) -> SphereMesh:
    """
    Triangulate a lon/lat ring into a mesh on a sphere of the given radius.

    Args:
        ring: Sequence of (lon, lat) pairs (GeoJSON order). Assumed simple
            and well-formed.
        radius: Sphere radius of the output positions.
        lattice: Optional (K, 2) lon/lat sample points (e.g. a Fibonacci
            lattice); those inside the ring become interior vertices.
        name: Mesh name, passed through.
        geo_feature: Styling tag, passed through.

    Returns:
        SphereMesh whose first N vertices are the ring vertices in input
        order, followed by any interior vertices, then any vertices
        added where ring edges cross.

    Raises:
        ValueError: For rings with fewer than 3 vertices, a degenerate
            centroid, or a degenerate triangulation.
    """
    coords = normalize_ring(ring)
    sphere_points = ring_to_unit_vectors(coords)

    pole_direction = opposite_point(sphere_points)
    rotation = rotation_to_pole(pole_direction)
    projected = stereographic_projection(rotation.apply(sphere_points))

    if np.any(np.linalg.norm(projected, axis=1) > POLE_RISK_RADIUS):
        logger.warning(
            "Ring %s has vertices near the projection pole; triangulation may degrade",
            name or "<unnamed>",
        )

    if lattice is not None and len(lattice):
        interior_unit, interior_2d = _interior_samples(
            np.asarray(lattice, dtype=np.float64), rotation, projected,
        )
        sphere_points = np.vstack((sphere_points, interior_unit))
        projected = np.vstack((projected, interior_2d))

    vertices_2d, triangles = triangulate_projected(projected, len(coords))
    if len(vertices_2d) > len(projected):
        extra = inverse_stereographic_projection(vertices_2d[len(projected):])
        sphere_points = np.vstack((sphere_points, rotation.inv().apply(extra)))

    positions = sphere_points * radius
    triangles = orient_outward(positions, triangles)

    return SphereMesh(
        positions=positions,
        triangles=triangles,
        name=name,
        geo_feature=geo_feature,
    )


def vertex_markers(mesh: SphereMesh, size: float | None = None) -> list[MarkerSpec]:
    """
    One debug marker per mesh vertex.

    Size defaults to MARKER_SIZE_FACTOR × the sphere radius.
    """
    if mesh.vertex_count == 0:
        return []
    if size is None:
        size = float(np.linalg.norm(mesh.positions[0])) * MARKER_SIZE_FACTOR
    return [
        MarkerSpec(position=(float(p[0]), float(p[1]), float(p[2])), size=size)
        for p in mesh.positions
    ]


def outline_positions(coordinates: Any, radius: float = 1.0) -> np.ndarray:
    """LineString (lon, lat) vertices lifted onto the sphere, as (N, 3)."""
    coords = np.array([(float(p[0]), float(p[1])) for p in coordinates], dtype=np.float64)
    if len(coords) == 0:
        return np.empty((0, 3))
    return geodetic_to_scene_array(coords, radius)
