"""
Camera focus on a body: an eased fly-to, then the camera rides along with it.

All positions here are true-space (virtual) coordinates; the virtual origin turns
them into render space, so focusing on Neptune never puts big numbers on the camera.
"""
import logging

import numpy as np

logger = logging.getLogger(__name__)

FLY_DURATION = 1.5
SCREEN_FRACTION = 0.3
VIEW_ELEVATION = np.pi / 6


def ease_in_out(t):
    t = min(1.0, max(0.0, t))
    return 4 * t ** 3 if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def focus_distance(visual_radius, fov_deg, fraction=SCREEN_FRACTION):
    """Camera distance at which a sphere of `visual_radius` fills `fraction` of the view."""
    return visual_radius / np.sin(np.radians(fov_deg) * fraction / 2)


class FocusTracker:
    def __init__(self, virtual_origin, camera):
        self.virtual_origin = virtual_origin
        self.camera = camera
        self.node = None
        self.elapsed = 0.0
        self._start_position = None
        self._start_target = None
        self._last_body_position = None

    @property
    def active(self):
        return self.node is not None

    def body_position(self, node):
        return self.virtual_origin.scene_to_world(node.world_position())

    def focus(self, node):
        self.node = node
        self.elapsed = 0.0
        self._start_position = self.virtual_origin.get_virtual_position()
        self._start_target = self.virtual_origin.get_virtual_target()
        self._last_body_position = self.body_position(node)
        logger.info("Focusing on %s", node.name)

    def exit(self):
        if self.node is not None:
            logger.info("Leaving focus on %s", self.node.name)
        self.node = None

    def _end_position(self, body_position):
        distance = focus_distance(max(self.node.scale, 1e-3), self.camera.fov)
        direction = np.array([np.cos(VIEW_ELEVATION), np.sin(VIEW_ELEVATION), np.cos(VIEW_ELEVATION)])
        return body_position + direction / np.linalg.norm(direction) * distance

    def update(self, wall_delta):
        if self.node is None:
            return
        body_position = self.body_position(self.node)

        if self.elapsed < FLY_DURATION:
            self.elapsed += wall_delta
            t = ease_in_out(self.elapsed / FLY_DURATION)
            end_position = self._end_position(body_position)
            self.virtual_origin.set_virtual_target(self._start_target + (body_position - self._start_target) * t)
            self.virtual_origin.set_virtual_position(self._start_position + (end_position - self._start_position) * t)
        else:
            # Tracking: carry the camera along with the body's motion
            delta = body_position - self._last_body_position
            if np.any(delta):
                self.virtual_origin.set_virtual_target(self.virtual_origin.get_virtual_target() + delta)
                self.virtual_origin.set_virtual_position(self.virtual_origin.get_virtual_position() + delta)
        self._last_body_position = body_position
