"""
Orbit camera controls.

The controller keeps a target and a spherical offset (yaw, pitch, distance) of
the camera around it. Both the camera and the target live in render space, so
the virtual-origin manager may shift them at any time: since only their
difference feeds the spherical state, a shift of both never moves the view.
"""
import numpy as np

MIN_DISTANCE = 1e-6
MAX_PITCH = np.radians(89.0)


class OrbitControls:
    def __init__(self, camera, target=None, damping=0.0):
        self.camera = camera
        self.target = np.zeros(3) if target is None else np.asarray(target, dtype=float).copy()
        self.damping = damping
        self.enabled = True
        self._yaw_velocity = 0.0
        self._pitch_velocity = 0.0
        self.yaw, self.pitch, self.distance = 0.0, 0.0, 1.0
        self.sync_from_camera()

    def sync_from_camera(self):
        """Re-derives yaw/pitch/distance after the camera was moved directly."""
        offset = self.camera.position - self.target
        distance = float(np.linalg.norm(offset))
        if distance < MIN_DISTANCE:
            offset = np.array([0.0, 0.0, MIN_DISTANCE])
            distance = MIN_DISTANCE
        self.distance = distance
        self.pitch = float(np.arcsin(np.clip(offset[1] / distance, -1.0, 1.0)))
        self.yaw = float(np.arctan2(offset[0], offset[2]))

    def offset(self):
        cos_p = np.cos(self.pitch)
        return self.distance * np.array([
            cos_p * np.sin(self.yaw),
            np.sin(self.pitch),
            cos_p * np.cos(self.yaw),
        ])

    def rotate(self, d_yaw, d_pitch):
        if not self.enabled:
            return
        if self.damping > 0:
            self._yaw_velocity += d_yaw
            self._pitch_velocity += d_pitch
        else:
            self.yaw += d_yaw
            self.pitch = float(np.clip(self.pitch + d_pitch, -MAX_PITCH, MAX_PITCH))

    def zoom(self, factor):
        if self.enabled and factor > 0:
            self.distance = max(MIN_DISTANCE, self.distance * factor)

    def pan(self, dx, dy):
        """Moves the target in the camera's screen plane, scaled by distance."""
        if not self.enabled:
            return
        right, up, _ = self.camera.view_basis()
        self.target = self.target + (right * dx + up * dy) * self.distance

    def set_camera(self, position, target):
        """Teleports camera and target (render space) and resyncs the spherical state."""
        self.target = np.asarray(target, dtype=float).copy()
        self.camera.position = np.asarray(position, dtype=float).copy()
        self.sync_from_camera()

    def update(self):
        if self.damping > 0:
            self.yaw += self._yaw_velocity * self.damping
            self.pitch = float(np.clip(self.pitch + self._pitch_velocity * self.damping, -MAX_PITCH, MAX_PITCH))
            self._yaw_velocity *= 1.0 - self.damping
            self._pitch_velocity *= 1.0 - self.damping
        self.camera.position = self.target + self.offset()
        self.camera.look_at(self.target)
