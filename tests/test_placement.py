"""
Body Placement Tests
====================

Tests for per-frame placement, moon offsets and the orbit-expansion factor.
"""
import numpy as np
import pytest

from orrery.bodies import find_body
from orrery.config import AU_TO_SCENE
from orrery.coordinates import CoordinateTransformer
from orrery.placement import (
    BodyPlacementUpdater,
    display_radius,
    moon_expansion_factor,
    moon_orbit_caps,
)
from orrery.physics import semi_major_axis_from_period
from orrery.scene import build_scene


@pytest.fixture
def placement(config, provider, bodies):
    _, frame = build_scene()
    return BodyPlacementUpdater(config, provider, CoordinateTransformer(provider, bodies), bodies, frame)


class TestExpansionFactor:
    def test_never_below_one(self):
        assert moon_expansion_factor(0.01, 1.1, 100.0) == 1.0
        assert moon_expansion_factor(0.0, 1.1, 100.0) == 1.0

    def test_grows_with_display_radius(self):
        assert moon_expansion_factor(200.0, 1.1, 100.0) == pytest.approx(2.2)

    def test_strictly_increasing_with_planet_scale(self, placement, config, epoch):
        """Test Jupiter's factor as the planet scale keeps growing."""
        factors = []
        for scale in (5000.0, 10000.0, 20000.0, 40000.0):
            config.planet_scale = scale
            placement.update(epoch)
            factors.append(placement.expansion_factors["Jupiter"])
        assert all(f >= 1.0 for f in factors)
        assert all(b > a for a, b in zip(factors, factors[1:]))

    def test_closest_moon_clears_the_planet(self, placement, config, bodies, epoch):
        config.planet_scale = 20000.0
        placement.update(epoch)
        jupiter = find_body(bodies, "Jupiter")
        radius = display_radius(jupiter, config.planet_scale)
        parent = placement.display_positions["Jupiter"]
        closest = min(np.linalg.norm(placement.display_positions[moon.name] - parent) for moon in jupiter.moons)
        assert closest == pytest.approx(radius * jupiter.moon_clearance)


class TestPlacement:
    def test_heliocentric_positions_in_scene_units(self, placement, provider, bodies, epoch):
        placement.update(epoch)
        mars = find_body(bodies, "Mars")
        expected = provider.position(mars, epoch)
        assert np.allclose(placement.nodes["Mars"].position,
                           np.array([expected[0], expected[2], -expected[1]]) * AU_TO_SCENE)

    def test_geocentric_earth_at_origin(self, placement, config, epoch):
        config.coordinate_system = "Geocentric"
        placement.update(epoch)
        assert np.allclose(placement.nodes["Earth"].position, 0.0, atol=1e-12)
        assert np.linalg.norm(placement.nodes["Sun"].position) == pytest.approx(AU_TO_SCENE, rel=1e-9)

    def test_moon_follows_parent(self, placement, config, epoch):
        config.planet_scale = 1.0
        placement.update(epoch)
        offset = placement.moon_nodes["Moon"].position - placement.nodes["Earth"].position
        assert np.linalg.norm(offset) == pytest.approx(0.00257 * AU_TO_SCENE * config.moon_orbit_scale)

    def test_transforms_are_not_shared(self, placement, epoch):
        placement.update(epoch)
        positions = [node.position for node in placement.nodes.values()]
        assert len({id(p) for p in positions}) == len(positions)

    def test_small_moons_hidden_by_default(self, placement, epoch):
        placement.update(epoch)
        assert not placement.moon_nodes["Phobos"].visible
        assert placement.moon_nodes["Io"].visible

    def test_hidden_planets_hide_their_moons(self, placement, config, epoch):
        config.show_planets = False
        placement.update(epoch)
        assert not placement.nodes["Jupiter"].visible
        assert not placement.moon_nodes["Io"].visible
        assert placement.nodes["Ceres"].visible

    def test_moon_orbit_ring_scales_with_factor(self, placement, config, epoch):
        config.planet_scale = 20000.0
        placement.update(epoch)
        ring = placement.moon_orbit_nodes["Io"]
        io_offset = placement.moon_nodes["Io"].position - placement.nodes["Jupiter"].position
        assert ring.scale == pytest.approx(np.linalg.norm(io_offset))


class TestMoonOrbitCap:
    def test_caps_half_way_to_next_planet(self, bodies):
        planets = [body for body in bodies if body.kind == "planet"]
        caps = moon_orbit_caps(planets)
        a_saturn = semi_major_axis_from_period(10759)
        a_uranus = semi_major_axis_from_period(30687)
        assert caps["Saturn"] == pytest.approx((a_uranus - a_saturn) / 2)
        assert caps["Neptune"] == pytest.approx(semi_major_axis_from_period(60190) / 2)

    def test_capped_moon_distance(self, placement, config, epoch):
        config.planet_scale = 1.0
        placement.update(epoch)
        uncapped = np.linalg.norm(placement.moon_nodes["Iapetus"].position - placement.nodes["Saturn"].position)

        config.cap_moon_orbits = True
        placement.update(epoch)
        capped = np.linalg.norm(placement.moon_nodes["Iapetus"].position - placement.nodes["Saturn"].position)
        assert capped < uncapped
        assert capped == pytest.approx(placement.moon_caps["Saturn"] * AU_TO_SCENE)
