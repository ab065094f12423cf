# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
In-memory display surface.

Keeps one marker per tracked satellite with the metadata a renderer
would attach to it. Used by the CLI and as the headless scene in tests.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from orbitglobe.domain.coordinate_frames import FrameState
from orbitglobe.domain.tracked_object import SatelliteRecord
from orbitglobe.ports.display import DisplaySurface


logger = logging.getLogger(__name__)

DEFAULT_MARKER_COLOR = 0xFF0000
DEFAULT_MARKER_SIZE = 0.02


@dataclass
class SatelliteMarker:
    """A renderable point marker and its attached metadata."""
    name: str
    position: tuple[float, float, float]
    color: int = DEFAULT_MARKER_COLOR
    size: float = DEFAULT_MARKER_SIZE
    user_data: dict[str, Any] = field(default_factory=dict)
    moves: int = 0
    disposed: bool = False


def _user_data(record: SatelliteRecord, state: FrameState) -> dict[str, Any]:
    return {
        "noradCatId": record.norad_cat_id,
        "objectName": record.object_name,
        "countryCode": record.country_code,
        "launchDate": record.launch_date.isoformat() if record.launch_date else None,
        "decayDate": record.decay_date.isoformat() if record.decay_date else None,
        "lastUpdated": record.last_updated.isoformat() if record.last_updated else None,
        "epoch": record.epoch.isoformat(),
        "tleLine1": record.tle_line1,
        "tleLine2": record.tle_line2,
        "latitude": state.lat_deg,
        "longitude": state.lon_deg,
        "altitude": state.alt_km,
    }


class SceneDisplay(DisplaySurface):
    """Headless scene holding SatelliteMarker objects."""

    def __init__(self, color: int = DEFAULT_MARKER_COLOR, size: float = DEFAULT_MARKER_SIZE):
        self._color = color
        self._size = size
        self.markers: list[SatelliteMarker] = []

    def create_marker(self, record: SatelliteRecord, state: FrameState) -> SatelliteMarker:
        marker = SatelliteMarker(
            name=record.object_name,
            position=state.position_scene,
            color=self._color,
            size=self._size,
            user_data=_user_data(record, state),
        )
        self.markers.append(marker)
        return marker

    def set_position(self, marker: SatelliteMarker, state: FrameState) -> None:
        marker.position = state.position_scene
        marker.user_data["latitude"] = state.lat_deg
        marker.user_data["longitude"] = state.lon_deg
        marker.user_data["altitude"] = state.alt_km
        marker.moves += 1

    def release(self, marker: SatelliteMarker) -> None:
        if marker.disposed:
            logger.debug("Marker %s already released", marker.name)
            return
        marker.disposed = True
        self.markers.remove(marker)
