"""
Ephemeris Provider Tests
========================

These run against astronomy-engine itself.
"""
from datetime import datetime, timezone

import numpy as np
import pytest

from orrery.bodies import SUN, CelestialBody, default_bodies, find_body
from orrery.ephemeris import OBLIQUITY_DEG, EphemerisProvider, ecliptic_to_equatorial
from orrery.errors import ConfigurationError, UnknownBodyError
from orrery.physics import OrbitalElements

PERIHELION_2024 = datetime(2024, 1, 3, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def ephemeris():
    return EphemerisProvider(default_bodies())


class TestTabulatedBodies:
    def test_sun_is_at_origin(self, ephemeris):
        assert np.allclose(ephemeris.position(SUN, PERIHELION_2024), 0.0, atol=1e-12)

    def test_earth_near_perihelion(self, ephemeris):
        earth = find_body(default_bodies(), "Earth")
        distance = np.linalg.norm(ephemeris.position(earth, PERIHELION_2024))
        assert distance == pytest.approx(0.9833, abs=2e-3)

    def test_jupiter_distance(self, ephemeris):
        jupiter = find_body(default_bodies(), "Jupiter")
        distance = np.linalg.norm(ephemeris.position(jupiter, PERIHELION_2024))
        assert 4.9 < distance < 5.5

    def test_galilean_moons_in_one_call(self, ephemeris):
        offsets = ephemeris.jupiter_moon_offsets(PERIHELION_2024)
        distances = [np.linalg.norm(offset) for offset in offsets]
        assert len(offsets) == 4
        assert all(d < 0.02 for d in distances)
        # Io inside Europa inside Ganymede inside Callisto
        assert distances[0] < distances[1] < distances[2] < distances[3]

    def test_moon_offset_is_geocentric(self, ephemeris):
        distance = np.linalg.norm(ephemeris.moon_offset(PERIHELION_2024))
        assert 0.0023 < distance < 0.0029

    def test_barycenter_is_close_to_sun(self, ephemeris):
        assert np.linalg.norm(ephemeris.barycenter(PERIHELION_2024)) < 0.012


class TestElementBodies:
    def test_ceres_distance_within_orbit_bounds(self, ephemeris):
        ceres = find_body(default_bodies(), "Ceres")
        distance = np.linalg.norm(ephemeris.position(ceres, PERIHELION_2024))
        a, e = ceres.elements.a, ceres.elements.e
        assert a * (1 - e) <= distance <= a * (1 + e)

    def test_ecliptic_to_equatorial_rotation(self):
        eps = np.radians(OBLIQUITY_DEG)
        rotated = ecliptic_to_equatorial(np.array([0.0, 1.0, 0.0]))
        assert np.allclose(rotated, [0.0, np.cos(eps), np.sin(eps)])
        assert np.allclose(ecliptic_to_equatorial(np.array([1.0, 0.0, 0.0])), [1.0, 0.0, 0.0])


class TestValidation:
    def test_unknown_library_body_rejected(self):
        vulcan = CelestialBody("Vulcan", "planet", 1.0, 20.0, (255, 0, 0), ephemeris="Vulcan")
        with pytest.raises(UnknownBodyError):
            EphemerisProvider([SUN, vulcan])

    def test_body_without_position_source_rejected(self):
        ghost = CelestialBody("Ghost", "dwarf", 1.0, 100.0, (255, 255, 255))
        with pytest.raises(ConfigurationError):
            EphemerisProvider([SUN, ghost])

    def test_body_with_both_sources_rejected(self):
        elements = OrbitalElements(a=1.0, e=0.0, i=0.0, Omega=0.0, omega=0.0, M0=0.0)
        twin = CelestialBody("Twin", "planet", 1.0, 365.25, (0, 0, 255), ephemeris="Earth", elements=elements)
        with pytest.raises(ConfigurationError):
            EphemerisProvider([SUN, twin])
