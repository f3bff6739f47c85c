"""
Trail Cache Tests
=================

Tests for relative-orbit trails (caching, step counts, gradients) and the
static orbit lines.
"""
from datetime import timedelta

import numpy as np
import pytest

from orrery.bodies import find_body
from orrery.config import AU_TO_SCENE
from orrery.coordinates import CoordinateTransformer
from orrery.trails import (
    OrbitLine,
    OrbitLineSet,
    RelativeOrbitTrailCache,
    gradient,
    trail_steps,
)


@pytest.fixture
def cache(config, provider, bodies):
    return RelativeOrbitTrailCache(config, provider, CoordinateTransformer(provider, bodies))


def names(traced):
    return [body.name for body in traced]


class TestTracedBodies:
    def test_heliocentric_has_no_trails(self, cache, bodies):
        assert cache.traced_bodies("Heliocentric", bodies) == []

    def test_tychonic_traces_only_the_sun(self, cache, bodies):
        assert names(cache.traced_bodies("Tychonic", bodies)) == ["Sun"]

    def test_geocentric_skips_earth(self, cache, bodies):
        traced = names(cache.traced_bodies("Geocentric", bodies))
        assert "Earth" not in traced
        assert "Sun" in traced and "Mars" in traced and "Eris" in traced

    def test_barycentric_traces_everything(self, cache, bodies):
        traced = names(cache.traced_bodies("Barycentric", bodies))
        assert "Earth" in traced and "Sun" in traced

    def test_orbit_toggles_respected(self, cache, config, bodies):
        config.show_dwarf_planet_orbits = False
        config.show_sun_orbit = False
        traced = names(cache.traced_bodies("Geocentric", bodies))
        assert "Ceres" not in traced and "Sun" not in traced
        assert "Jupiter" in traced

    @pytest.mark.parametrize("system", ["Geocentric", "Tychonic", "Barycentric"])
    def test_hidden_sun_has_no_trail(self, cache, config, bodies, system):
        config.show_sun = False
        assert "Sun" not in names(cache.traced_bodies(system, bodies))

    def test_hidden_sun_trail_not_built(self, simulation):
        simulation.config.set_coordinate_system("Geocentric")
        simulation.config.show_sun = False
        simulation.update(0.0)
        assert ("Sun", "Geocentric") not in {entry.key for entry in simulation.trails.active}


class TestTrailSteps:
    def test_geocentric_sun_loop(self):
        # (2*pi*1 AU + 2*pi) * 20 steps/AU * 2
        assert trail_steps(365.25, "Geocentric") == int(np.ceil(4 * np.pi * 40))

    def test_bands(self):
        assert trail_steps(203830, "Geocentric") == 5000
        assert trail_steps(4333, "Barycentric") == 500
        assert trail_steps(365.25, "Tychonic") == 500
        assert trail_steps(88, "Barycentric") == 360


class TestTrailCache:
    def test_same_time_reuses_buffers(self, cache, bodies, epoch):
        first = {entry.key: entry for entry in cache.update_trails("Geocentric", bodies, epoch)}
        snapshot = {key: entry.positions.copy() for key, entry in first.items()}
        buffers = {key: entry.positions for key, entry in first.items()}
        counts = {key: entry.recalculations for key, entry in first.items()}

        second = cache.update_trails("Geocentric", bodies, epoch)
        for entry in second:
            assert entry.positions is buffers[entry.key]
            assert np.array_equal(entry.positions, snapshot[entry.key])
            assert entry.recalculations == counts[entry.key]

    def test_sub_hour_advance_only_refreshes_progress(self, cache, provider, bodies, epoch):
        entry = cache.update_trails("Tychonic", bodies, epoch)[0]
        positions = entry.positions.copy()
        calls = provider.calls
        entry.progress[:] = -1.0

        cache.update_trails("Tychonic", bodies, epoch + timedelta(minutes=59))
        assert provider.calls == calls
        assert entry.recalculations == 1
        assert np.array_equal(entry.positions, positions)
        assert np.all(entry.progress[:entry.steps + 1] >= 0.0)

    def test_stale_trail_is_resampled_in_place(self, cache, bodies, epoch):
        entry = cache.update_trails("Tychonic", bodies, epoch)[0]
        buffer = entry.positions
        cache.update_trails("Tychonic", bodies, epoch + timedelta(hours=2))
        assert entry.recalculations == 2
        assert entry.positions is buffer
        assert entry.reallocations == 1

    def test_undersized_buffer_is_reallocated(self, cache, bodies, epoch):
        entry = cache.update_trails("Tychonic", bodies, epoch)[0]
        entry.allocate(10)
        entry.steps = 10
        cache.update_trails("Tychonic", bodies, epoch)
        assert entry.reallocations == 2
        assert entry.capacity == trail_steps(365.25, "Tychonic")

    def test_geocentric_sun_trail_is_earth_orbit_mirrored(self, cache, bodies, epoch):
        trails = {entry.key[0]: entry for entry in cache.update_trails("Geocentric", bodies, epoch)}
        radii = np.linalg.norm(trails["Sun"].points, axis=1)
        assert np.allclose(radii, AU_TO_SCENE)

    def test_progress_is_zero_at_current_sample(self, cache, bodies, epoch):
        entry = cache.update_trails("Tychonic", bodies, epoch)[0]
        progress = entry.progress[:entry.steps + 1]
        current = int(np.argmin(progress))
        assert progress[current] == 0.0
        assert np.all((progress >= 0.0) & (progress < 1.0))
        # window is centred on the current date
        assert abs(current - entry.steps / 2) <= 1


class TestGradient:
    def test_gradient_values(self):
        assert np.allclose(gradient(2, 4), [0.5, 0.25, 0.0, 0.75])

    def test_orbit_line_gradient_follows_body(self):
        points = np.array([[np.cos(a), 0.0, np.sin(a)] for a in np.linspace(0, 2 * np.pi, 8, endpoint=False)])
        line = OrbitLine("Test", points)
        line.update_gradient(points[3] * 1.01)
        assert line.closest_index == 3
        assert line.progress[3] == 0.0
        assert line.progress[2] == pytest.approx(1 / 8)

    def test_orbit_line_set(self, config, provider, bodies, epoch):
        lines = OrbitLineSet(config, provider, bodies)
        lines.build(epoch)
        mars = find_body(bodies, "Mars")
        helio = {"Mars": provider.position(mars, epoch)}
        lines.update_gradients(helio)
        line = lines.lines["Mars"]
        assert line.points.shape == (360, 3)
        assert abs(line.closest_index - 180) <= 1
        assert "Sun" not in lines.lines
