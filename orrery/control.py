"""
Programmatic control of a running simulation.

This is the only writer of the shared config once the simulation is running.
Every setter validates first and raises ConfigurationError (or InvalidDateError)
without touching any state when the value is bad.
"""
import logging

from .bodies import find_body
from .config import MOON_CATEGORIES
from .clock import check_speed
from .errors import ConfigurationError, UnknownBodyError

logger = logging.getLogger(__name__)

VISIBILITY_FLAGS = {
    "sun": "show_sun",
    "planets": "show_planets",
    "dwarf_planets": "show_dwarf_planets",
    "planet_orbits": "show_planet_orbits",
    "dwarf_planet_orbits": "show_dwarf_planet_orbits",
    "sun_orbit": "show_sun_orbit",
    "stars": "show_stars",
}
VISIBILITY_FLAGS.update({f"{category}_moons": f"show_{category}_moons" for category in MOON_CATEGORIES})


class SimulationControl:
    def __init__(self, simulation):
        self.simulation = simulation
        self.config = simulation.config

    # --- Time ---

    def set_speed(self, multiplier):
        self.config.clock.speed_multiplier = check_speed(multiplier)
        logger.info("Speed set to x%g", self.config.clock.speed_multiplier)

    def pause(self):
        self.config.clock.paused = True

    def resume(self):
        self.config.clock.paused = False

    def toggle_pause(self):
        self.config.clock.paused = not self.config.clock.paused
        return self.config.clock.paused

    def set_date(self, date):
        """Sets the date without pausing."""
        return self.simulation.jump_to_date(date, pause_after=False)

    def jump_to_date(self, date, pause_after=True):
        return self.simulation.jump_to_date(date, pause_after=pause_after)

    # --- Frames and scale ---

    def set_coordinate_system(self, system):
        self.config.set_coordinate_system(system)
        logger.info("Coordinate system: %s", system)

    def set_reference_plane(self, plane):
        self.config.set_reference_plane(plane)
        logger.info("Reference plane: %s", plane)

    def set_planet_scale(self, scale):
        self.config.set_planet_scale(scale)

    def set_cap_moon_orbits(self, enabled):
        self.config.cap_moon_orbits = bool(enabled)

    # --- Visibility ---

    def set_visible(self, what, visible=True):
        if what not in VISIBILITY_FLAGS:
            raise ConfigurationError(f"Unknown visibility toggle '{what}', expected one of {', '.join(VISIBILITY_FLAGS)}")
        setattr(self.config, VISIBILITY_FLAGS[what], bool(visible))

    def toggle(self, what):
        if what not in VISIBILITY_FLAGS:
            raise ConfigurationError(f"Unknown visibility toggle '{what}'")
        flag = VISIBILITY_FLAGS[what]
        setattr(self.config, flag, not getattr(self.config, flag))
        return getattr(self.config, flag)

    # --- Camera ---

    def focus(self, name):
        body = find_body(self.simulation.bodies, name)
        node = self.simulation.node_for(body.name)
        if node is None:
            raise UnknownBodyError(name)
        self.simulation.focus.focus(node)

    def exit_focus(self):
        self.simulation.focus.exit()

    def enable_precision(self):
        self.simulation.virtual_origin.enable()

    def disable_precision(self):
        self.simulation.virtual_origin.disable()

    def status(self):
        sim = self.simulation
        return {
            "date": sim.current_date.isoformat(),
            "speed": self.config.clock.speed_multiplier,
            "paused": self.config.clock.paused,
            "coordinate_system": self.config.coordinate_system,
            "reference_plane": self.config.reference_plane,
            "rebase_count": sim.virtual_origin.rebase_count,
            "camera": sim.virtual_origin.get_virtual_position().tolist(),
            "focus": sim.focus.node.name if sim.focus.active else None,
        }
