# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
GeoJSON data source adapters.

Datasets are laid out as {name}/{name}.geojson under a root directory or
base URL (e.g. ne_110m_land/ne_110m_land.geojson).
"""
import json
from pathlib import Path
from typing import Any
from urllib.parse import quote

from orbitglobe.adapters.satellite_source import fetch_json
from orbitglobe.ports.data_source import GeoJsonSource


def _check_collection(data: Any, origin: str) -> dict[str, Any]:
    if not isinstance(data, dict) or "features" not in data:
        raise ValueError(f"{origin} is not a GeoJSON FeatureCollection")
    return data


class FileGeoJsonSource(GeoJsonSource):
    """Reads GeoJSON datasets from a local directory."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    def path_for(self, name: str) -> Path:
        return self._root / name / f"{name}.geojson"

    def fetch(self, name: str) -> dict[str, Any]:
        path = self.path_for(name)
        with open(path, encoding="utf-8") as f:
            return _check_collection(json.load(f), str(path))


class HttpGeoJsonSource(GeoJsonSource):
    """Fetches GeoJSON datasets over HTTP."""

    def __init__(self, base_url: str, timeout: int = 10):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def fetch(self, name: str) -> dict[str, Any]:
        encoded = quote(name)
        url = f"{self._base_url}/{encoded}/{encoded}.geojson"
        return _check_collection(fetch_json(url, self._timeout), url)
