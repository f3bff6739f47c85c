"""
VIRTUAL ORIGIN
--------------
Keeps render-space numbers small while the camera roams an astronomical-scale
scene.

Float32 on the GPU side only has ~7 significant digits, so a camera sitting
10^6 units from the origin jitters. Instead of moving the camera far away we
move the *world* the other way: the root node is translated by
-accumulated_offset and the camera is pulled back to (or near) the origin.

    true position = live camera position - root.position
                  = live camera position + accumulated_offset

Two modes share one rebase():
    - continuous: rebase whenever the camera is off-origin (every frame it moved),
    - periodic:   rebase only once the camera drifts past `threshold`.
"""
import logging

import numpy as np

from .config import DEFAULT_REBASE_THRESHOLD, VIRTUAL_ORIGIN_MODES
from .errors import ConfigurationError, RebaseError

logger = logging.getLogger(__name__)

# Anything closer than this is "at the origin" for continuous mode.
ORIGIN_EPSILON = 1e-10


class VirtualOrigin:
    def __init__(self, camera, controls, root, mode="continuous", threshold=DEFAULT_REBASE_THRESHOLD, enabled=True):
        if mode not in VIRTUAL_ORIGIN_MODES:
            raise ConfigurationError(f"Unknown virtual origin mode '{mode}'")
        self.camera = camera
        self.controls = controls
        self.root = root
        self.mode = mode
        self.threshold = float(threshold)
        self.enabled = enabled
        self.accumulated_offset = np.zeros(3)
        self.rebase_count = 0

    # --- Per-frame ---

    def needs_rebase(self):
        if not self.enabled:
            return False
        distance = np.linalg.norm(self.camera.position)
        if self.mode == "continuous":
            return distance > ORIGIN_EPSILON
        return distance > self.threshold

    def update(self):
        """Called once per frame after the controls moved the camera. Returns True if it rebased."""
        if self.needs_rebase():
            self.rebase()
            return True
        return False

    def rebase(self):
        """
        Moves the camera to the origin and shifts everything else to match.

        All new values are computed before any of them is written. If a write
        fails, every piece of state is put back and RebaseError is raised.
        """
        offset = np.array(self.camera.position, dtype=float)
        if not np.all(np.isfinite(offset)):
            raise RebaseError(f"Camera position is not finite: {offset}")

        snapshot = (
            self.camera.position.copy(),
            self.controls.target.copy(),
            self.accumulated_offset.copy(),
            self.root.position.copy(),
            self.rebase_count,
        )
        new_target = self.controls.target - offset
        new_accumulated = self.accumulated_offset + offset
        new_root = -new_accumulated

        try:
            self.camera.position = np.zeros(3)
            self.controls.target = new_target
            self.accumulated_offset = new_accumulated
            self.root.position = new_root
            self.rebase_count += 1
        except Exception as exc:
            (self.camera.position, self.controls.target, self.accumulated_offset,
             self.root.position, self.rebase_count) = snapshot
            raise RebaseError(f"Rebase rolled back: {exc}") from exc

        self.camera.look_at(self.controls.target)
        logger.debug("Rebase #%d by %s, accumulated offset %s",
                     self.rebase_count, np.round(offset, 3), np.round(new_accumulated, 3))

    # --- True-space accessors ---

    def true_camera_position(self):
        return self.camera.position - self.root.position

    def get_virtual_position(self):
        return self.camera.position + self.accumulated_offset

    def set_virtual_position(self, position):
        """Places the camera at a true-space position, rebasing if that lands it too far out."""
        self.camera.position = np.asarray(position, dtype=float) - self.accumulated_offset
        self.controls.sync_from_camera()
        if self.needs_rebase():
            self.rebase()

    def get_virtual_target(self):
        return self.controls.target + self.accumulated_offset

    def set_virtual_target(self, target):
        self.controls.target = np.asarray(target, dtype=float) - self.accumulated_offset
        self.controls.sync_from_camera()
        self.camera.look_at(self.controls.target)

    def world_to_scene(self, point):
        return np.asarray(point, dtype=float) - self.accumulated_offset

    def scene_to_world(self, point):
        return np.asarray(point, dtype=float) + self.accumulated_offset

    # --- Transitions ---

    def disable(self):
        """
        Hands the controls real coordinates: camera and target jump to their true
        positions and the offset goes back to zero. No-op when already disabled.
        """
        if not self.enabled:
            return
        true_position = self.get_virtual_position()
        true_target = self.get_virtual_target()
        self.enabled = False
        self.accumulated_offset = np.zeros(3)
        self.root.position = np.zeros(3)
        self.controls.set_camera(true_position, true_target)
        logger.info("Virtual origin disabled at %s", np.round(true_position, 3))

    def enable(self):
        """Turns rebasing back on; continuous mode re-centres straight away."""
        if self.enabled:
            return
        self.enabled = True
        if self.mode == "continuous" or np.linalg.norm(self.camera.position) > self.threshold:
            self.rebase()
        logger.info("Virtual origin enabled (%s)", self.mode)

    def reset(self):
        """Back to a zero offset, keeping the camera where it truly is."""
        true_position = self.get_virtual_position()
        true_target = self.get_virtual_target()
        self.accumulated_offset = np.zeros(3)
        self.root.position = np.zeros(3)
        self.controls.set_camera(true_position, true_target)
        self.rebase_count = 0
        if self.needs_rebase():
            self.rebase()
