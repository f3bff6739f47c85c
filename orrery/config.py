"""
General config for the Orrery.

Two halves live here:
  - module constants for the viewer and the scene scale (screen size, colours,
    AU to scene units...) which are read-only at runtime,
  - the SimulationConfig object, created once at startup and handed to every
    component. The control API is the only writer; the frame loop only reads it.
"""
from dataclasses import dataclass, field, fields

from .clock import SimulationClock
from .errors import ConfigurationError

# --- Screen ---
SCREEN_WIDTH = 1400
SCREEN_HEIGHT = 800
FPS = 60

# Colors
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
LIGHT_GREY = (135, 135, 135)
ORBIT_GREY = (40, 40, 40)
TRAIL_COLOR = (110, 160, 255)

# Coordinate clamping limits for Pygame
COORD_MIN = -32760
COORD_MAX = 32760

# Drawing
MIN_BODY_RADIUS_PIXELS = 2
MAX_BODY_RADIUS_PIXELS = 400
GRADIENT_BANDS = 16

# --- Scene scale ---
AU_TO_SCENE = 50.0
# One parsec is ~206265 AU; stars are squashed so that the whole catalogue stays
# within a few tens of thousands of scene units.
PARSEC_TO_SCENE = 10.0
REAL_PLANET_SCALE_FACTOR = 500.0
EARTH_RADIUS_AU = 4.2635e-5

# --- Frames ---
COORDINATE_SYSTEMS = ("Heliocentric", "Geocentric", "Tychonic", "Barycentric")
REFERENCE_PLANES = ("Equatorial", "Ecliptic")
VIRTUAL_ORIGIN_MODES = ("continuous", "periodic")
DEFAULT_REBASE_THRESHOLD = 1000.0

MOON_CATEGORIES = ("largest", "major", "small")


def check_coordinate_system(value):
    if value not in COORDINATE_SYSTEMS:
        raise ConfigurationError(
            f"Unknown coordinate system '{value}', expected one of {', '.join(COORDINATE_SYSTEMS)}")
    return value


def check_reference_plane(value):
    if value not in REFERENCE_PLANES:
        raise ConfigurationError(
            f"Unknown reference plane '{value}', expected one of {', '.join(REFERENCE_PLANES)}")
    return value


@dataclass
class SimulationConfig:
    """
    The shared, mutable configuration object.

    Visibility toggles and scales are the only things expected to change after
    startup. Use the setters (or SimulationControl) rather than assigning to the
    frame keys directly so bad values are rejected up front.
    """
    clock: SimulationClock = field(default_factory=SimulationClock)
    coordinate_system: str = "Heliocentric"
    reference_plane: str = "Equatorial"

    planet_scale: float = REAL_PLANET_SCALE_FACTOR
    sun_scale: float = 20.0
    moon_orbit_scale: float = 500.0
    cap_moon_orbits: bool = False

    show_sun: bool = True
    show_planets: bool = True
    show_dwarf_planets: bool = True
    show_planet_orbits: bool = True
    show_dwarf_planet_orbits: bool = True
    show_sun_orbit: bool = True
    show_largest_moons: bool = True
    show_major_moons: bool = True
    show_small_moons: bool = False
    show_stars: bool = True

    virtual_origin_mode: str = "continuous"
    rebase_threshold: float = DEFAULT_REBASE_THRESHOLD
    debug: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raises ConfigurationError for the first invalid setting found."""
        check_coordinate_system(self.coordinate_system)
        check_reference_plane(self.reference_plane)
        if self.virtual_origin_mode not in VIRTUAL_ORIGIN_MODES:
            raise ConfigurationError(f"Unknown virtual origin mode '{self.virtual_origin_mode}'")
        for name in ("planet_scale", "sun_scale", "moon_orbit_scale", "rebase_threshold"):
            if not getattr(self, name) > 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)!r}")

    def set_coordinate_system(self, value):
        self.coordinate_system = check_coordinate_system(value)

    def set_reference_plane(self, value):
        self.reference_plane = check_reference_plane(value)

    def set_planet_scale(self, value):
        value = float(value)
        if value <= 0:
            raise ConfigurationError(f"planet_scale must be positive, got {value!r}")
        self.planet_scale = value

    def show_moons(self, category):
        return getattr(self, f"show_{category}_moons", False)

    @classmethod
    def from_mapping(cls, values):
        """
        Builds a config from a plain dict (CLI flags, a JSON file...).

        'date', 'speed' and 'paused' go to the clock; unknown keys are rejected.
        """
        values = dict(values)
        clock = SimulationClock(
            values.pop("date", None),
            speed_multiplier=values.pop("speed", 1.0),
            paused=values.pop("paused", False),
        )
        known = {f.name for f in fields(cls)} - {"clock"}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(clock=clock, **values)
