"""
Per-frame body placement.

For every body: heliocentric position -> coordinate system -> scene units, written
into that body's node under the frame node. Moons are offsets from their parent's
displayed position, pushed outwards when the parent is drawn so large that it
would swallow its own moons.
"""
import logging

import numpy as np

from .clock import days_since_j2000
from .config import AU_TO_SCENE, EARTH_RADIUS_AU
from .coordinates import to_scene
from .ephemeris import ecliptic_to_equatorial
from .physics import semi_major_axis_from_period
from .scene import SceneNode

logger = logging.getLogger(__name__)

SUN_ROTATION_HOURS = 600.0


def moon_expansion_factor(display_radius, clearance, base_min_moon_distance):
    """
    How much a planet's moon system must be scaled so the closest moon clears
    the planet's display radius by `clearance`. Never shrinks anything.
    """
    if base_min_moon_distance <= 0:
        return 1.0
    return max(1.0, display_radius * clearance / base_min_moon_distance)


def display_radius(body, scale):
    """Radius of a body in scene units once the display scale is applied."""
    return body.radius * EARTH_RADIUS_AU * AU_TO_SCENE * scale


def spin_angle(rotation_period_hours, when):
    if not rotation_period_hours:
        return 0.0
    hours = days_since_j2000(when) * 24.0
    return (hours / rotation_period_hours * 2 * np.pi) % (2 * np.pi)


def moon_orbit_caps(planets):
    """
    Largest allowed moon distance per planet (AU): half the gap to the next
    planet out, or half the planet's own distance for the last one.
    """
    ordered = sorted(planets, key=lambda body: body.period)
    distances = [semi_major_axis_from_period(body.period) for body in ordered]
    caps = {}
    for index, body in enumerate(ordered):
        if index + 1 < len(ordered):
            caps[body.name] = (distances[index + 1] - distances[index]) / 2
        else:
            caps[body.name] = distances[index] * 0.5
    return caps


class BodyPlacementUpdater:
    def __init__(self, config, provider, transformer, bodies, frame):
        self.config = config
        self.provider = provider
        self.transformer = transformer
        self.bodies = list(bodies)
        self.frame = frame

        self.nodes = {}
        self.moon_nodes = {}
        self.moon_orbit_nodes = {}
        self.moon_parents = {}
        self.helio_positions = {}
        self.display_positions = {}
        self.expansion_factors = {}
        self.moon_caps = moon_orbit_caps([b for b in self.bodies if b.kind == "planet"])

        for body in self.bodies:
            self.nodes[body.name] = SceneNode(body.name, parent=frame)
            for moon in body.moons:
                self.moon_nodes[moon.name] = SceneNode(moon.name, parent=frame)
                # Unit-radius orbit ring, sized through its scale each frame
                self.moon_orbit_nodes[moon.name] = SceneNode(f"{moon.name} orbit", parent=frame)
                self.moon_parents[moon.name] = body

    def body_visible(self, body):
        if body.kind == "star":
            return self.config.show_sun
        if body.kind == "planet":
            return self.config.show_planets
        return self.config.show_dwarf_planets

    def update(self, when):
        """Places every body and moon for `when`. Returns the frame-local positions by name."""
        system = self.config.coordinate_system
        jovian_offsets = None

        for body in self.bodies:
            if body.ephemeris is None and body.elements is None:
                # Rejected at startup already; never place a body at a made-up spot.
                continue
            helio = self.provider.position(body, when)
            local = self.transformer.display_position(helio, system, when)
            self.helio_positions[body.name] = helio
            self.display_positions[body.name] = local

            node = self.nodes[body.name]
            node.position = local
            node.visible = self.body_visible(body)
            if body.kind == "star":
                node.scale = display_radius(body, self.config.sun_scale)
                node.rotation = np.array([0.0, spin_angle(SUN_ROTATION_HOURS, when), 0.0])
            else:
                node.scale = display_radius(body, self.config.planet_scale)
                node.rotation = np.array([0.0, spin_angle(body.rotation_period, when), np.radians(body.axial_tilt)])

            if body.moons:
                if jovian_offsets is None and any(m.model == "jovian" for m in body.moons):
                    jovian_offsets = self.provider.jupiter_moon_offsets(when)
                self._place_moons(body, local, when, jovian_offsets, node.visible)

        return self.display_positions

    def _moon_offset(self, moon, when, jovian_offsets):
        """Offset from the parent in AU, equatorial axes."""
        if moon.model == "geocentric":
            return self.provider.moon_offset(when)
        if moon.model == "jovian":
            return jovian_offsets[moon.moon_index]
        angle = 2 * np.pi * days_since_j2000(when) / moon.period
        return ecliptic_to_equatorial(np.array([moon.distance * np.cos(angle), moon.distance * np.sin(angle), 0.0]))

    def _place_moons(self, body, parent_local, when, jovian_offsets, parent_visible):
        scale = AU_TO_SCENE * self.config.moon_orbit_scale
        offsets = {}
        for moon in body.moons:
            offset = to_scene(self._moon_offset(moon, when, jovian_offsets)) * scale
            if self.config.cap_moon_orbits and body.name in self.moon_caps:
                cap = self.moon_caps[body.name] * AU_TO_SCENE
                length = np.linalg.norm(offset)
                if length > cap:
                    offset = offset * (cap / length)
            offsets[moon.name] = offset

        base_min = min(np.linalg.norm(offset) for offset in offsets.values())
        factor = moon_expansion_factor(display_radius(body, self.config.planet_scale),
                                       body.moon_clearance, base_min)
        self.expansion_factors[body.name] = factor

        for moon in body.moons:
            offset = offsets[moon.name] * factor
            visible = parent_visible and self.config.show_moons(moon.category)

            node = self.moon_nodes[moon.name]
            node.position = parent_local + offset
            node.visible = visible
            node.scale = display_radius(moon, self.config.planet_scale)
            if moon.tidally_locked:
                # keep the same face pointed at the parent
                node.rotation = np.array([0.0, np.arctan2(-offset[0], -offset[2]), 0.0])
            self.display_positions[moon.name] = node.position

            orbit = self.moon_orbit_nodes[moon.name]
            orbit.position = parent_local
            orbit.scale = float(np.linalg.norm(offsets[moon.name])) * factor
            orbit.visible = visible
