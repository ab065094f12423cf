# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for external data sources.

Adapters handle the actual HTTP/file access.
"""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SatelliteSource(Protocol):
    """Port for fetching satellite DTOs."""

    def fetch_by_type(self, satellite_type: str) -> list[dict[str, Any]]:
        """Fetch satellite DTO dicts for a named group (e.g. 'starlink')."""
        ...


@runtime_checkable
class GeoJsonSource(Protocol):
    """Port for fetching GeoJSON feature collections."""

    def fetch(self, name: str) -> dict[str, Any]:
        """Fetch a named FeatureCollection (e.g. 'ne_110m_land')."""
        ...
