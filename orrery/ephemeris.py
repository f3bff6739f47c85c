"""
Ephemeris provider.

Thin wrapper around astronomy-engine. Tabulated bodies (planets, Pluto, Earth's
Moon, the Galilean moons, the Solar-System barycenter) come from the library;
element-only bodies come from the Kepler solver. Everything returned here is in
AU, in the library's J2000 equatorial axes, so Keplerian output is rotated out of
the ecliptic by the mean obliquity before it is handed back.
"""
import logging

import astronomy
import numpy as np

from .bodies import validate_body_table
from .clock import days_since_j2000
from .physics import keplerian_position

logger = logging.getLogger(__name__)

OBLIQUITY_DEG = 23.43928


def ecliptic_to_equatorial(vector, obliquity_deg=OBLIQUITY_DEG):
    eps = np.radians(obliquity_deg)
    x, y, z = vector
    return np.array([
        x,
        y * np.cos(eps) - z * np.sin(eps),
        y * np.sin(eps) + z * np.cos(eps),
    ])


def _vec(v):
    return np.array([v.x, v.y, v.z])


def astro_time(when):
    """astronomy.Time for an aware UTC datetime."""
    return astronomy.Time(days_since_j2000(when))


def library_body_names():
    return {body.name for body in astronomy.Body if body is not astronomy.Body.Invalid}


class EphemerisProvider:
    """
    Positions for every body in one frame.

    Body names are checked once, in validate(); per-frame calls assume the table
    is good and never raise for an unknown name they were not asked about.
    """

    def __init__(self, bodies=None):
        self._library_bodies = {}
        if bodies is not None:
            self.validate(bodies)

    def validate(self, bodies):
        validate_body_table(bodies, library_body_names())
        for body in bodies:
            if body.ephemeris is not None:
                self._library_bodies[body.ephemeris] = astronomy.Body[body.ephemeris]

    def _library_body(self, name):
        if name not in self._library_bodies:
            self._library_bodies[name] = astronomy.Body[name]
        return self._library_bodies[name]

    def position(self, body, when):
        """
        Heliocentric position of a body.

        Args:
            body (CelestialBody): A validated body.
            when (datetime): Aware UTC datetime.

        Returns:
            np.ndarray: (x, y, z) in AU, equatorial J2000.
        """
        if body.ephemeris is not None:
            return _vec(astronomy.HelioVector(self._library_body(body.ephemeris), astro_time(when)))
        return ecliptic_to_equatorial(keplerian_position(body.elements, when))

    def jupiter_moon_offsets(self, when):
        """Io, Europa, Ganymede, Callisto as offsets from Jupiter, in one library call."""
        info = astronomy.JupiterMoons(astro_time(when))
        return [_vec(info.io), _vec(info.europa), _vec(info.ganymede), _vec(info.callisto)]

    def moon_offset(self, when):
        """Earth's Moon relative to Earth."""
        return _vec(astronomy.GeoMoon(astro_time(when)))

    def barycenter(self, when):
        """Solar-System barycenter relative to the Sun."""
        return _vec(astronomy.HelioVector(astronomy.Body.SSB, astro_time(when)))
