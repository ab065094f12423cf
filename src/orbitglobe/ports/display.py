# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interface for the display surface.

The renderer is an opaque consumer: the core asks it for one marker per
tracked object, moves markers each frame and releases them on removal.
"""
from typing import Any, Protocol, runtime_checkable

from orbitglobe.domain.coordinate_frames import FrameState
from orbitglobe.domain.tracked_object import SatelliteRecord


@runtime_checkable
class DisplaySurface(Protocol):
    """Port for creating and positioning satellite markers."""

    def create_marker(self, record: SatelliteRecord, state: FrameState) -> Any:
        """Create and attach a marker at the given state; return its handle."""
        ...

    def set_position(self, marker: Any, state: FrameState) -> None:
        """Move an existing marker."""
        ...

    def release(self, marker: Any) -> None:
        """Detach a marker and free its resources."""
        ...
