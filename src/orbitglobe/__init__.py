# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbit Globe

Time-scaled satellite tracking on a 3D globe and spherical polygon
meshing for GeoJSON overlays. Satellites are propagated from TLEs with
SGP4 against an accelerated simulation clock and placed in a render
frame shared with the land and lake meshes, which are triangulated via
stereographic projection in a worker process.
"""

from orbitglobe.domain.clock import (
    DEFAULT_SPEED_MULTIPLIER,
    ClockState,
    ScaledClock,
)
from orbitglobe.domain.coordinate_frames import (
    EarthConstants,
    FrameState,
    geodetic_to_scene,
    scene_to_geodetic,
    gmst_rad,
    eci_to_ecef,
    ecef_to_geodetic,
    ecef_to_scene,
    eci_to_frames,
)
from orbitglobe.domain.tracked_object import (
    SatelliteRecord,
    TrackedObject,
    parse_satellite_record,
)
from orbitglobe.domain.orbit_path import orbit_path
from orbitglobe.domain.satellite_registry import SatelliteRegistry
from orbitglobe.domain.fibonacci import fibonacci_sphere
from orbitglobe.domain.spherical_mesh import (
    SphereMesh,
    MarkerSpec,
    mesh_polygon_ring,
    stereographic_projection,
    inverse_stereographic_projection,
    vertex_markers,
)
from orbitglobe.domain.geo_features import (
    GeoFeature,
    MeshMaterial,
    OutlinePath,
    material_for,
    generate_geo_polygon_meshes,
    generate_outline_meshes,
)
from orbitglobe.domain.mesh_protocol import (
    GenerateMeshTask,
    MeshBatch,
    MeshTaskError,
    SerializedMesh,
)

__version__ = "1.0.0"
