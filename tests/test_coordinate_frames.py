# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for coordinate frame conversions (ECI→ECEF→Geodetic→Scene)."""
import math
from datetime import datetime, timezone

import numpy as np
import pytest

from orbitglobe.domain.coordinate_frames import (
    DEFAULT_SCENE_RADIUS,
    EarthConstants,
    FrameState,
    ecef_to_geodetic,
    ecef_to_scene,
    eci_to_ecef,
    eci_to_frames,
    geodetic_to_scene,
    geodetic_to_scene_array,
    gmst_rad,
    scene_to_geodetic,
)


def _close(a, b, tol=1e-9):
    return all(abs(x - y) < tol for x, y in zip(a, b))


# ── Geodetic → scene ──────────────────────────────────────────────

class TestGeodeticToScene:

    def test_origin_meridian_on_plus_x(self):
        assert _close(geodetic_to_scene(0.0, 0.0, 1.0), (1.0, 0.0, 0.0))

    def test_north_pole_on_plus_y(self):
        assert _close(geodetic_to_scene(90.0, 0.0, 1.0), (0.0, 1.0, 0.0))

    def test_south_pole_on_minus_y(self):
        assert _close(geodetic_to_scene(-90.0, 45.0, 1.0), (0.0, -1.0, 0.0))

    def test_lon_90_east_on_minus_z(self):
        assert _close(geodetic_to_scene(0.0, 90.0, 1.0), (0.0, 0.0, -1.0))

    def test_scales_with_radius(self):
        x, y, z = geodetic_to_scene(30.0, 60.0, 2.5)
        assert math.sqrt(x * x + y * y + z * z) == pytest.approx(2.5)

    def test_array_matches_scalar(self):
        lon_lat = np.array([[10.0, 20.0], [-170.0, -45.0], [179.0, 89.0]])
        arr = geodetic_to_scene_array(lon_lat, 3.0)
        assert arr.shape == (3, 3)
        for (lon, lat), row in zip(lon_lat, arr):
            assert _close(geodetic_to_scene(lat, lon, 3.0), row)


# ── Scene → geodetic ──────────────────────────────────────────────

class TestSceneToGeodetic:

    @pytest.mark.parametrize("lat", [-89.0, -45.5, 0.0, 12.25, 60.0, 89.0])
    @pytest.mark.parametrize("lon", [-179.0, -90.0, -0.5, 0.0, 45.0, 135.0, 180.0])
    def test_round_trip(self, lat, lon):
        got_lat, got_lon = scene_to_geodetic(geodetic_to_scene(lat, lon, 1.0))
        assert got_lat == pytest.approx(lat, abs=1e-9)
        assert got_lon == pytest.approx(lon, abs=1e-9)

    def test_radius_independent(self):
        lat, lon = scene_to_geodetic(geodetic_to_scene(33.0, -71.0, 250.0))
        assert lat == pytest.approx(33.0)
        assert lon == pytest.approx(-71.0)

    def test_longitude_range(self):
        _, lon = scene_to_geodetic(geodetic_to_scene(0.0, -180.0, 1.0))
        assert -180.0 < lon <= 180.0
        assert lon == pytest.approx(180.0)

    def test_pole_longitude_is_zero(self):
        lat, lon = scene_to_geodetic((0.0, 1.0, 0.0))
        assert lat == pytest.approx(90.0)
        assert lon == 0.0

    def test_origin_rejected(self):
        with pytest.raises(ValueError):
            scene_to_geodetic((0.0, 0.0, 0.0))


# ── GMST and ECI → ECEF ───────────────────────────────────────────

class TestGMST:

    def test_range(self):
        theta = gmst_rad(datetime(2026, 3, 20, 12, 0, 0, tzinfo=timezone.utc))
        assert 0 <= theta < 2 * math.pi

    def test_j2000_reference(self):
        """At J2000.0, GMST ≈ 280.46°."""
        theta = gmst_rad(datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
        assert abs(theta - math.radians(280.46)) < math.radians(0.1)

    def test_naive_treated_as_utc(self):
        aware = datetime(2026, 6, 15, 6, 0, 0, tzinfo=timezone.utc)
        assert gmst_rad(aware.replace(tzinfo=None)) == pytest.approx(gmst_rad(aware))


class TestECItoECEF:

    def test_identity_at_zero_gmst(self):
        assert _close(eci_to_ecef((7000.0, 10.0, -5.0), 0.0), (7000.0, 10.0, -5.0))

    def test_90deg_rotation(self):
        """ECI +Y becomes ECEF +X after a quarter turn."""
        assert _close(eci_to_ecef((0.0, 7000.0, 0.0), math.pi / 2), (7000.0, 0.0, 0.0), 1e-6)

    def test_preserves_magnitude(self):
        pos = (6778.0, 1234.0, 3456.0)
        for deg in (0, 45, 135, 270):
            out = eci_to_ecef(pos, math.radians(deg))
            assert math.dist(out, (0, 0, 0)) == pytest.approx(math.dist(pos, (0, 0, 0)))


# ── ECEF → geodetic ───────────────────────────────────────────────

class TestECEFtoGeodetic:

    def test_equator_prime_meridian(self):
        a = EarthConstants.EQUATORIAL_RADIUS_KM
        lat, lon, alt = ecef_to_geodetic((a + 400.0, 0.0, 0.0))
        assert lat == pytest.approx(0.0, abs=1e-9)
        assert lon == pytest.approx(0.0, abs=1e-9)
        assert alt == pytest.approx(400.0, abs=1e-6)

    def test_north_pole(self):
        b = EarthConstants.POLAR_RADIUS_KM
        lat, _, alt = ecef_to_geodetic((0.0, 0.0, b + 100.0))
        assert lat == pytest.approx(90.0)
        assert alt == pytest.approx(100.0, abs=1e-3)

    def test_longitude_90_east(self):
        a = EarthConstants.EQUATORIAL_RADIUS_KM
        _, lon, _ = ecef_to_geodetic((0.0, a, 0.0))
        assert lon == pytest.approx(90.0)


# ── ECEF → scene and full chain ───────────────────────────────────

class TestSceneChain:

    def test_scale_factor(self):
        r = EarthConstants.MEAN_RADIUS_KM
        assert _close(ecef_to_scene((r, 0.0, 0.0), 2.0), (2.0, 0.0, 0.0))

    def test_axis_permutation_matches_geodetic_to_scene(self):
        """ECEF +Y (lon 90°E) lands where geodetic_to_scene puts lon 90°E."""
        r = EarthConstants.MEAN_RADIUS_KM
        assert _close(ecef_to_scene((0.0, r, 0.0), 1.0), geodetic_to_scene(0.0, 90.0, 1.0))
        assert _close(ecef_to_scene((0.0, 0.0, r), 1.0), geodetic_to_scene(90.0, 0.0, 1.0))

    def test_eci_to_frames_consistent(self):
        epoch = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        pos_eci = (4000.0, -3000.0, 4500.0)
        state = eci_to_frames(pos_eci, epoch)

        assert isinstance(state, FrameState)
        assert state.timestamp == epoch
        assert state.position_eci_km == pos_eci
        assert _close(state.position_ecef_km, eci_to_ecef(pos_eci, gmst_rad(epoch)))
        # scene direction agrees with the geodetic longitude
        _, scene_lon = scene_to_geodetic(state.position_scene)
        assert scene_lon == pytest.approx(state.lon_deg, abs=1e-9)

    def test_precomputed_gmst_used(self):
        epoch = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        state = eci_to_frames((7000.0, 0.0, 0.0), epoch, gmst_angle_rad=0.0)
        assert _close(state.position_ecef_km, (7000.0, 0.0, 0.0))
        assert state.lon_deg == pytest.approx(0.0, abs=1e-9)

    def test_default_radius(self):
        assert DEFAULT_SCENE_RADIUS == 1.0
