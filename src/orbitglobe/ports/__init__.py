# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for the simulation core's external collaborators.

Adapters implement these for SGP4 propagation, the display surface,
and the satellite/GeoJSON data sources.
"""
from orbitglobe.ports.propagation import (
    OrbitPropagator,
    PropagationError,
    PropagatorFactory,
)
from orbitglobe.ports.display import DisplaySurface
from orbitglobe.ports.data_source import GeoJsonSource, SatelliteSource

__all__ = [
    "OrbitPropagator",
    "PropagationError",
    "PropagatorFactory",
    "DisplaySurface",
    "GeoJsonSource",
    "SatelliteSource",
]
