# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
GeoJSON feature meshing and styling.

Builds sphere meshes for the Polygon features of a FeatureCollection and
outline polylines for its LineString features. The feature classification
only selects a material; it has no effect on geometry.
"""
import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

import numpy as np

from .spherical_mesh import SphereMesh, mesh_polygon_ring, outline_positions


logger = logging.getLogger(__name__)


class GeoFeature(Enum):
    LAND = "land"
    LAKES = "lakes"
    OTHER = "other"


class Side(IntEnum):
    """Face culling mode, numbered as the renderer numbers it."""
    FRONT = 0
    BACK = 1
    DOUBLE = 2


@dataclass(frozen=True)
class MeshMaterial:
    """Plain material descriptor: no renderer objects cross process boundaries."""
    color: int
    transparent: bool
    opacity: float
    side: Side


@dataclass(frozen=True)
class OutlinePath:
    """A LineString lifted onto the sphere."""
    positions: np.ndarray
    name: str = "Outline"


_STYLES: dict[GeoFeature, tuple[str, int]] = {
    GeoFeature.LAKES: ("Lake", 0x00FFFF),
    GeoFeature.LAND: ("Land", 0x00FF00),
}


def material_for(geo_feature: GeoFeature) -> tuple[str, MeshMaterial]:
    """Mesh name and material for a feature classification."""
    name, color = _STYLES.get(geo_feature, ("Unknown", 0xFFFFFF))
    return name, MeshMaterial(color=color, transparent=True, opacity=1.0, side=Side.DOUBLE)


def _features(geojson: dict[str, Any]) -> list[dict[str, Any]]:
    features = geojson.get("features")
    if features is None:
        raise ValueError("GeoJSON has no 'features' member")
    return features


def generate_geo_polygon_meshes(
    geojson: dict[str, Any],
    geo_feature: GeoFeature,
    radius: float = 1.0,
    lattice: np.ndarray | None = None,
) -> list[tuple[SphereMesh, MeshMaterial]]:
    """
    Mesh every Polygon feature's outer ring.

    Non-polygon geometries are ignored. A feature that fails to mesh is
    logged and skipped; the others are still returned.

    Returns:
        (mesh, material) pairs in feature order.
    """
    name, material = material_for(geo_feature)
    results: list[tuple[SphereMesh, MeshMaterial]] = []

    for index, feature in enumerate(_features(geojson)):
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "Polygon":
            continue
        rings = geometry.get("coordinates") or []
        if not rings:
            logger.warning("Skipping %s feature %d: empty polygon", name, index)
            continue
        try:
            mesh = mesh_polygon_ring(
                rings[0], radius,
                lattice=lattice, name=name, geo_feature=geo_feature,
            )
        except ValueError as e:
            logger.warning("Skipping %s feature %d: %s", name, index, e)
            continue
        results.append((mesh, material))

    logger.debug("Meshed %d %s polygons", len(results), name)
    return results


def generate_outline_meshes(geojson: dict[str, Any], radius: float = 1.0) -> list[OutlinePath]:
    """Lift every LineString feature onto the sphere."""
    paths = []
    for feature in _features(geojson):
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "LineString":
            continue
        positions = outline_positions(geometry.get("coordinates") or [], radius)
        if len(positions) >= 2:
            paths.append(OutlinePath(positions=positions))
    return paths
