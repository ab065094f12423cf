# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Adapters for propagation, display and data I/O.

External dependencies (sgp4, HTTP, file I/O, worker processes) are
confined to this layer.
"""
from orbitglobe.adapters.sgp4_propagator import Sgp4Propagator, Sgp4PropagatorFactory
from orbitglobe.adapters.scene_display import SatelliteMarker, SceneDisplay
from orbitglobe.adapters.satellite_source import (
    DEFAULT_BASE_URL,
    FileSatelliteSource,
    HttpSatelliteSource,
)
from orbitglobe.adapters.geojson_source import FileGeoJsonSource, HttpGeoJsonSource
from orbitglobe.adapters.mesh_dispatcher import (
    MeshTaskDispatcher,
    WorkerInitializationError,
    load_feature_meshes,
)
