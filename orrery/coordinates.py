"""
Coordinate systems and reference planes.

A coordinate system decides which point sits at the scene origin (the Sun,
Earth or the Solar-System barycenter). A reference plane decides which way is
"up"; it is a single rotation on the frame node, never applied per body.

Scene axes follow the usual renderer convention: scene-X = X, scene-Y = Z,
scene-Z = -Y.
"""
import numpy as np

from .config import AU_TO_SCENE, check_coordinate_system, check_reference_plane
from .ephemeris import OBLIQUITY_DEG
from .errors import UnknownBodyError

EARTH = "Earth"


def to_scene(vector):
    x, y, z = vector
    return np.array([x, z, -y])


def from_scene(vector):
    x, y, z = vector
    return np.array([x, -z, y])


def reference_plane_rotation(plane, obliquity_deg=OBLIQUITY_DEG):
    """
    3x3 rotation (scene axes) for the frame node.

    Equatorial is the identity. Ecliptic tips the equatorial frame back by the
    obliquity about scene-X so the ecliptic lies flat.
    """
    check_reference_plane(plane)
    if plane == "Equatorial":
        return np.eye(3)
    eps = np.radians(obliquity_deg)
    c, s = np.cos(eps), np.sin(eps)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, s],
        [0.0, -s, c],
    ])


def reference_plane_euler(plane, obliquity_deg=OBLIQUITY_DEG):
    """Same rotation as reference_plane_rotation() expressed as Euler angles."""
    check_reference_plane(plane)
    if plane == "Equatorial":
        return np.zeros(3)
    return np.array([-np.radians(obliquity_deg), 0.0, 0.0])


class CoordinateTransformer:
    """
    Turns heliocentric positions into display positions.

    Heliocentric is the identity. Geocentric and Tychonic put Earth at the origin;
    Barycentric puts the Solar-System barycenter there. The last center computed
    for each system is kept, so every body of a frame pays for it once.
    """

    def __init__(self, provider, bodies):
        self.provider = provider
        self.bodies = {body.name: body for body in bodies}
        self._center_cache = {}

    def center(self, system, when):
        check_coordinate_system(system)
        if system == "Heliocentric":
            return np.zeros(3)
        cached = self._center_cache.get(system)
        if cached is not None and cached[0] == when:
            return cached[1]
        if system == "Barycentric":
            center = self.provider.barycenter(when)
        elif EARTH in self.bodies:
            center = self.provider.position(self.bodies[EARTH], when)
        else:
            raise UnknownBodyError(EARTH)
        self._center_cache[system] = (when, center)
        return center

    def transform(self, helio_pos, system, when):
        """Heliocentric AU -> display AU (still in ephemeris axes)."""
        return np.asarray(helio_pos, dtype=float) - self.center(system, when)

    def display_position(self, helio_pos, system, when):
        """Heliocentric AU -> frame-local scene units."""
        return to_scene(self.transform(helio_pos, system, when)) * AU_TO_SCENE
