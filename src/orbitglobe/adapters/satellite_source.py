# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Satellite data source adapters.

HttpSatelliteSource queries the satellite API ({base_url}/{type});
FileSatelliteSource reads the same DTO list from a JSON file.
External dependencies (urllib, json, file I/O) are confined to this layer.
"""
import json
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any
from urllib.parse import quote

from orbitglobe.ports.data_source import SatelliteSource

DEFAULT_BASE_URL = "http://localhost:8080/api/satellites"


def fetch_json(url: str, timeout: int) -> Any:
    """GET a JSON document; network and HTTP failures raise ConnectionError."""
    req = urllib.request.Request(
        url, headers={"Accept": "application/json", "User-Agent": "orbitglobe/0.1"},
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as e:
        raise ConnectionError(f"HTTP error {e.code} for {url}: {e.reason}") from e
    except urllib.error.URLError as e:
        raise ConnectionError(f"Connection to {url} failed: {e.reason}") from e


class HttpSatelliteSource(SatelliteSource):
    """Fetches satellite DTOs from the satellite REST API."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: int = 10):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def fetch_by_type(self, satellite_type: str) -> list[dict[str, Any]]:
        url = f"{self._base_url}/{quote(satellite_type)}"
        data = fetch_json(url, self._timeout)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON list from {url}, got {type(data).__name__}")
        return data


class FileSatelliteSource(SatelliteSource):
    """
    Reads satellite DTOs from JSON.

    The path may be a single file holding a list (satellite_type is then
    ignored) or a directory of {satellite_type}.json files.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def fetch_by_type(self, satellite_type: str) -> list[dict[str, Any]]:
        path = self._path / f"{satellite_type}.json" if self._path.is_dir() else self._path
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON list in {path}")
        return data
