# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the SGP4 propagation adapter."""
import math

import pytest

sgp4 = pytest.importorskip("sgp4", reason="sgp4 not installed (pip install sgp4)")

from orbitglobe.adapters.sgp4_propagator import Sgp4Propagator, Sgp4PropagatorFactory
from orbitglobe.ports.propagation import OrbitPropagator, PropagationError, PropagatorFactory


ISS_LINE1 = "1 25544U 98067A   19343.69339541  .00001764  00000-0  38792-4 0  9991"
ISS_LINE2 = "2 25544  51.6439 211.2001 0007417  17.6667  85.6398 15.50103472202482"


# ── Factory ───────────────────────────────────────────────────────

class TestSgp4PropagatorFactory:

    def test_implements_port(self):
        assert isinstance(Sgp4PropagatorFactory(), PropagatorFactory)

    def test_from_tle(self):
        prop = Sgp4PropagatorFactory().from_tle(ISS_LINE1, ISS_LINE2)
        assert isinstance(prop, Sgp4Propagator)
        assert isinstance(prop, OrbitPropagator)
        assert prop.satnum == 25544

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            Sgp4PropagatorFactory().from_tle("1 garbage", "2 garbage")

    def test_swapped_lines_rejected(self):
        with pytest.raises(ValueError):
            Sgp4PropagatorFactory().from_tle(ISS_LINE2, ISS_LINE1)


# ── Propagation ───────────────────────────────────────────────────

class TestSgp4Propagator:

    def test_leo_radius_at_epoch(self):
        prop = Sgp4PropagatorFactory().from_tle(ISS_LINE1, ISS_LINE2)
        r = math.sqrt(sum(p * p for p in prop.propagate(0.0)))
        assert 6700.0 < r < 6850.0

    def test_position_changes_with_time(self):
        prop = Sgp4PropagatorFactory().from_tle(ISS_LINE1, ISS_LINE2)
        p0 = prop.propagate(0.0)
        p1 = prop.propagate(10.0)
        # ~7.66 km/s over 600 s
        assert 4000.0 < math.dist(p0, p1) < 5000.0

    def test_state_includes_velocity(self):
        prop = Sgp4PropagatorFactory().from_tle(ISS_LINE1, ISS_LINE2)
        position, velocity = prop.propagate_state(0.0)
        assert position == prop.propagate(0.0)
        speed = math.sqrt(sum(v * v for v in velocity))
        assert 7.5 < speed < 7.8

    def test_velocity_consistent_with_motion(self):
        prop = Sgp4PropagatorFactory().from_tle(ISS_LINE1, ISS_LINE2)
        p0, v0 = prop.propagate_state(0.0)
        p1 = prop.propagate(1.0 / 60.0)
        # one second ahead ≈ p0 + v0 · 1 s
        assert math.dist(p1, [p + v for p, v in zip(p0, v0)]) < 0.01

    def test_negative_minutes(self):
        prop = Sgp4PropagatorFactory().from_tle(ISS_LINE1, ISS_LINE2)
        r = math.sqrt(sum(p * p for p in prop.propagate(-45.0)))
        assert 6700.0 < r < 6850.0

    def test_error_code_raises(self):
        class BrokenSatrec:
            satnum = 1

            def sgp4_tsince(self, tsince):
                return 6, (float("nan"),) * 3, (float("nan"),) * 3

        prop = Sgp4Propagator(BrokenSatrec(), {6: "mrt is less than 1.0 which indicates the satellite has decayed"})
        with pytest.raises(PropagationError, match="SGP4 error 6"):
            prop.propagate(0.0)

    def test_non_finite_raises(self):
        class NanSatrec:
            satnum = 1

            def sgp4_tsince(self, tsince):
                return 0, (float("nan"), 0.0, 0.0), (0.0, 0.0, 0.0)

        with pytest.raises(PropagationError):
            Sgp4Propagator(NanSatrec(), {}).propagate(0.0)

    def test_non_finite_velocity_raises(self):
        class NanVelocitySatrec:
            satnum = 1

            def sgp4_tsince(self, tsince):
                return 0, (7000.0, 0.0, 0.0), (float("nan"), 0.0, 0.0)

        with pytest.raises(PropagationError):
            Sgp4Propagator(NanVelocitySatrec(), {}).propagate_state(0.0)

    def test_propagation_error_is_runtime_error(self):
        assert issubclass(PropagationError, RuntimeError)
