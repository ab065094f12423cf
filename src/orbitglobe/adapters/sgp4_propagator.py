# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
SGP4 adapter: wraps the sgp4 library behind the propagation ports.

External dependency (sgp4) is confined to this layer.

TLE mean elements are SGP4-specific, not Keplerian; positions come out
in the TEME frame in kilometers, which the core treats as inertial.
"""
import math

from orbitglobe.ports.propagation import (
    OrbitPropagator,
    PropagationError,
    PropagatorFactory,
)

TLE_LINE_LENGTH = 69


def _require_sgp4():
    """Import sgp4 lazily; raise clear error if not installed."""
    try:
        from sgp4.api import SGP4_ERRORS, Satrec, WGS72
    except ImportError:
        raise ImportError(
            "sgp4 is required for orbit propagation. "
            "Install with: pip install sgp4"
        ) from None
    return Satrec, WGS72, SGP4_ERRORS


class Sgp4Propagator(OrbitPropagator):
    """One initialized SGP4 satellite record."""

    def __init__(self, satrec, errors: dict[int, str]):
        self._satrec = satrec
        self._errors = errors

    @property
    def satnum(self) -> int:
        return int(self._satrec.satnum)

    def propagate_state(
        self, minutes_since_epoch: float,
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """TEME position (km) and velocity (km/s) at the given offset."""
        error_code, position_km, velocity_km_s = self._satrec.sgp4_tsince(minutes_since_epoch)
        if error_code != 0:
            message = self._errors.get(error_code, "unknown error")
            raise PropagationError(f"SGP4 error {error_code}: {message}")
        if not all(math.isfinite(v) for v in (*position_km, *velocity_km_s)):
            raise PropagationError("SGP4 returned a non-finite state")
        return (
            (position_km[0], position_km[1], position_km[2]),
            (velocity_km_s[0], velocity_km_s[1], velocity_km_s[2]),
        )

    def propagate(self, minutes_since_epoch: float) -> tuple[float, float, float]:
        position_km, _ = self.propagate_state(minutes_since_epoch)
        return position_km


class Sgp4PropagatorFactory(PropagatorFactory):
    """Parses TLE lines with the WGS72 gravity model."""

    def from_tle(self, line1: str, line2: str) -> Sgp4Propagator:
        Satrec, WGS72, errors = _require_sgp4()
        if not (line1.startswith("1 ") and line2.startswith("2 ")):
            raise ValueError("TLE lines must start with '1 ' and '2 '")
        if len(line1.rstrip()) < TLE_LINE_LENGTH or len(line2.rstrip()) < TLE_LINE_LENGTH:
            raise ValueError(f"TLE lines must be {TLE_LINE_LENGTH} characters")
        try:
            satrec = Satrec.twoline2rv(line1, line2, WGS72)
        except (ValueError, IndexError) as e:
            raise ValueError(f"Unparsable TLE: {e}") from e
        if satrec.error != 0:
            message = errors.get(satrec.error, "unknown error")
            raise ValueError(f"SGP4 initialization error {satrec.error}: {message}")
        return Sgp4Propagator(satrec, errors)
