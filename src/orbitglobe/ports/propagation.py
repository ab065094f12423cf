# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interface for orbit propagation.

The propagator itself (SGP4) is an external capability; the core only
sequences calls to it and handles its failure mode.
"""
from typing import Protocol, runtime_checkable


class PropagationError(RuntimeError):
    """Propagation failed for one element set at one time offset."""


@runtime_checkable
class OrbitPropagator(Protocol):
    """Port for a single object's initialized propagator."""

    def propagate(self, minutes_since_epoch: float) -> tuple[float, float, float]:
        """
        Inertial (TEME) position in km at the given offset from epoch.

        Raises:
            PropagationError: If the elements cannot be propagated.
        """
        ...

    def propagate_state(
        self, minutes_since_epoch: float,
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """
        Inertial position (km) and velocity (km/s) at the given offset.

        Raises:
            PropagationError: If the elements cannot be propagated.
        """
        ...


@runtime_checkable
class PropagatorFactory(Protocol):
    """Port for parsing element sets into propagators."""

    def from_tle(self, line1: str, line2: str) -> OrbitPropagator:
        """
        Parse a two-line element set once.

        Raises:
            ValueError: If the lines cannot be parsed.
        """
        ...
