"""
Renderer Tests
==============

Pure helpers of the pygame renderer.
"""
import numpy as np
import pytest

from orrery.scene import Camera

pygame = pytest.importorskip("pygame")
from orrery.renderer import project_points, to_live  # noqa: E402


class TestProjection:
    def test_point_ahead_lands_on_screen_centre(self):
        camera = Camera(position=[0.0, 0.0, 10.0])
        camera.look_at([0.0, 0.0, 0.0])
        xy, depth = project_points(np.array([[0.0, 0.0, 0.0]]), camera, (800, 600))
        assert np.allclose(xy[0], [400.0, 300.0])
        assert depth[0] == pytest.approx(10.0)

    def test_point_behind_camera_is_dropped(self):
        camera = Camera(position=[0.0, 0.0, 10.0])
        camera.look_at([0.0, 0.0, 0.0])
        xy, _ = project_points(np.array([[0.0, 0.0, 20.0]]), camera, (800, 600))
        assert np.all(np.isnan(xy))

    def test_up_is_up_on_screen(self):
        camera = Camera(position=[0.0, 0.0, 10.0])
        camera.look_at([0.0, 0.0, 0.0])
        xy, _ = project_points(np.array([[0.0, 1.0, 0.0]]), camera, (800, 600))
        assert xy[0, 1] < 300.0

    def test_to_live_applies_root_offset(self, simulation):
        simulation.update(0.0)
        live = to_live(simulation.frame, np.zeros((1, 3)))
        assert np.allclose(live[0], -simulation.virtual_origin.accumulated_offset)
