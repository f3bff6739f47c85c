"""
Static body tables.

Planets and Pluto are looked up in the ephemeris library by name; dwarf planets
without a tabulated ephemeris carry their own orbital elements. Radii are in
Earth radii, periods in days, rotation periods in hours.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import MOON_CATEGORIES
from .errors import ConfigurationError, UnknownBodyError
from .physics import OrbitalElements

logger = logging.getLogger(__name__)

MOON_MODELS = ("geocentric", "jovian", "circular")
BODY_KINDS = ("star", "planet", "dwarf")


@dataclass(frozen=True)
class MoonSpec:
    name: str
    model: str
    radius: float
    period: float
    distance: Optional[float] = None  # AU, circular model only
    moon_index: Optional[int] = None  # jovian model only
    color: tuple = (190, 190, 190)
    tidally_locked: bool = True
    category: str = "major"


@dataclass(frozen=True)
class CelestialBody:
    name: str
    kind: str
    radius: float
    period: float
    color: tuple
    ephemeris: Optional[str] = None
    elements: Optional[OrbitalElements] = None
    rotation_period: Optional[float] = None
    axial_tilt: float = 0.0
    moon_clearance: float = 1.1
    moons: List[MoonSpec] = field(default_factory=list)


SUN = CelestialBody("Sun", "star", radius=109.0, period=365.25, color=(255, 220, 80),
                    ephemeris="Sun", rotation_period=600.0)

PLANETS = [
    CelestialBody("Mercury", "planet", 0.38, 88, (170, 160, 150), ephemeris="Mercury",
                  rotation_period=1408, axial_tilt=0.01),
    CelestialBody("Venus", "planet", 0.95, 225, (230, 200, 140), ephemeris="Venus",
                  rotation_period=5832, axial_tilt=177.4),
    CelestialBody("Earth", "planet", 1.0, 365.25, (80, 140, 255), ephemeris="Earth",
                  rotation_period=24, axial_tilt=23.4, moons=[
                      MoonSpec("Moon", "geocentric", 0.27, 27.32, category="largest"),
                  ]),
    CelestialBody("Mars", "planet", 0.53, 687, (220, 100, 60), ephemeris="Mars",
                  rotation_period=24.6, axial_tilt=25.2, moons=[
                      MoonSpec("Phobos", "circular", 0.0018, 0.319, distance=6.27e-5, category="small"),
                      MoonSpec("Deimos", "circular", 0.001, 1.263, distance=1.568e-4, category="small"),
                  ]),
    CelestialBody("Jupiter", "planet", 11.0, 4333, (210, 170, 130), ephemeris="Jupiter",
                  rotation_period=9.9, axial_tilt=3.1, moon_clearance=1.2, moons=[
                      MoonSpec("Io", "jovian", 0.286, 1.769, moon_index=0, color=(230, 210, 110), category="largest"),
                      MoonSpec("Europa", "jovian", 0.245, 3.551, moon_index=1, color=(200, 180, 160), category="largest"),
                      MoonSpec("Ganymede", "jovian", 0.413, 7.155, moon_index=2, color=(160, 150, 140), category="largest"),
                      MoonSpec("Callisto", "jovian", 0.378, 16.689, moon_index=3, color=(120, 110, 100), category="largest"),
                  ]),
    CelestialBody("Saturn", "planet", 9.0, 10759, (230, 210, 150), ephemeris="Saturn",
                  rotation_period=10.7, axial_tilt=26.7, moon_clearance=1.3, moons=[
                      MoonSpec("Titan", "circular", 0.404, 15.945, distance=0.008168, color=(220, 170, 80),
                               category="largest"),
                      MoonSpec("Rhea", "circular", 0.12, 4.518, distance=0.003524),
                      MoonSpec("Iapetus", "circular", 0.115, 79.32, distance=0.02381),
                  ]),
    CelestialBody("Uranus", "planet", 4.0, 30687, (160, 220, 230), ephemeris="Uranus",
                  rotation_period=17.2, axial_tilt=97.8, moons=[
                      MoonSpec("Titania", "circular", 0.124, 8.706, distance=0.002916),
                      MoonSpec("Oberon", "circular", 0.12, 13.46, distance=0.003901),
                  ]),
    CelestialBody("Neptune", "planet", 3.9, 60190, (90, 120, 240), ephemeris="Neptune",
                  rotation_period=16.1, axial_tilt=28.3, moons=[
                      # retrograde
                      MoonSpec("Triton", "circular", 0.212, -5.877, distance=0.002371, category="largest"),
                  ]),
]

DWARF_PLANETS = [
    CelestialBody("Ceres", "dwarf", 0.074, 1682, (160, 160, 160),
                  elements=OrbitalElements(a=2.767, e=0.079, i=10.59, Omega=80.33, omega=73.51, M0=77.37),
                  rotation_period=9.07),
    CelestialBody("Pluto", "dwarf", 0.19, 90560, (200, 170, 140), ephemeris="Pluto",
                  rotation_period=153.3, axial_tilt=122.5),
    CelestialBody("Haumea", "dwarf", 0.13, 103468, (220, 220, 220),
                  elements=OrbitalElements(a=43.18, e=0.195, i=28.21, Omega=122.16, omega=238.78, M0=219.87),
                  rotation_period=3.9),
    CelestialBody("Makemake", "dwarf", 0.11, 111845, (200, 120, 100),
                  elements=OrbitalElements(a=45.43, e=0.161, i=28.98, Omega=79.62, omega=294.84, M0=200),
                  rotation_period=22.8),
    CelestialBody("Eris", "dwarf", 0.18, 203830, (230, 230, 230),
                  elements=OrbitalElements(a=67.86, e=0.436, i=44.04, Omega=35.95, omega=151.64, M0=200),
                  rotation_period=25.9),
]


def default_bodies():
    """Sun first, then planets inner to outer, then dwarf planets."""
    return [SUN] + PLANETS + DWARF_PLANETS


def validate_body_table(bodies, known_ephemeris_names=None):
    """
    Checks a body table once at startup.

    Every body needs exactly one position source. Moons must use a known model
    with the parameters that model needs. Names must be unique.

    Raises:
        ConfigurationError: On the first problem found.
        UnknownBodyError: When an ephemeris name is not in `known_ephemeris_names`.
    """
    seen = set()
    for body in bodies:
        if body.name in seen:
            raise ConfigurationError(f"Duplicate body name '{body.name}'")
        seen.add(body.name)
        if body.kind not in BODY_KINDS:
            raise ConfigurationError(f"{body.name}: unknown kind '{body.kind}'")
        if (body.ephemeris is None) == (body.elements is None):
            raise ConfigurationError(
                f"{body.name}: needs exactly one of an ephemeris name or orbital elements")
        if known_ephemeris_names is not None and body.ephemeris is not None \
                and body.ephemeris not in known_ephemeris_names:
            raise UnknownBodyError(body.ephemeris)
        for moon in body.moons:
            _validate_moon(body, moon)
    logger.debug("Validated %d bodies", len(seen))


def _validate_moon(parent, moon):
    if moon.model not in MOON_MODELS:
        raise ConfigurationError(f"{parent.name}/{moon.name}: unknown moon model '{moon.model}'")
    if moon.category not in MOON_CATEGORIES:
        raise ConfigurationError(f"{parent.name}/{moon.name}: unknown moon category '{moon.category}'")
    if moon.model == "circular" and not (moon.distance and moon.period):
        raise ConfigurationError(f"{parent.name}/{moon.name}: circular moons need distance and period")
    if moon.model == "jovian" and moon.moon_index not in (0, 1, 2, 3):
        raise ConfigurationError(f"{parent.name}/{moon.name}: jovian moon index must be 0-3")
    if moon.model == "geocentric" and parent.name != "Earth":
        raise ConfigurationError(f"{parent.name}/{moon.name}: only Earth has a geocentric moon ephemeris")


def find_body(bodies, name):
    for body in bodies:
        if body.name.lower() == name.lower():
            return body
        for moon in body.moons:
            if moon.name.lower() == name.lower():
                return moon
    raise UnknownBodyError(name)
