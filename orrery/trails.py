"""
Orbit trails.

Two kinds of line are drawn:
    - static orbit lines (Heliocentric / Tychonic): one period of each body's
      heliocentric path, sampled once and only re-shaded every frame,
    - relative trails (Geocentric / Tychonic / Barycentric): the path a body
      traces around the chosen center, i.e. the epicycles. These are costly to
      sample, so they are cached per (body, system) and only resampled once the
      simulated time has moved more than an hour.

Both carry a "progress" buffer in [0, 1) used as a brightness gradient, 0 at the
body and growing backwards along its path.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

import numpy as np

from .bodies import SUN
from .coordinates import EARTH, to_scene
from .config import AU_TO_SCENE
from .physics import semi_major_axis_from_period

logger = logging.getLogger(__name__)

STEPS_PER_AU = 20
STEP_LIMITS = {
    "Geocentric": (360, 5000),
    "Tychonic": (360, 500),
    "Barycentric": (360, 500),
}
# The Sun's apparent loop: one year around Earth, ~12 years of wobble about the barycenter.
SUN_TRAIL_PERIODS = {
    "Geocentric": 365.25,
    "Tychonic": 365.25,
    "Barycentric": 12 * 365.25,
}
RECALCULATE_AFTER = timedelta(hours=1)
ORBIT_LINE_SAMPLES = 360


def gradient(closest_index, count, out=None):
    """progress[i] = ((closest - i) mod count) / count for i in [0, count)."""
    if out is None:
        out = np.empty(count)
    indices = np.arange(count)
    out[:count] = ((closest_index - indices) % count) / count
    return out


def trail_steps(period_days, system):
    """
    Number of samples for one loop of a relative trail.

    Proportional to the length of the path: 2*pi*a for the body's own orbit, plus
    Earth's 2*pi AU (at double density) when Earth is the center.
    """
    circumference = 2 * math.pi * semi_major_axis_from_period(period_days)
    density = STEPS_PER_AU
    if system in ("Geocentric", "Tychonic"):
        circumference += 2 * math.pi
        density *= 2
    low, high = STEP_LIMITS[system]
    return int(min(high, max(low, math.ceil(circumference * density))))


@dataclass
class TrailCacheEntry:
    key: Tuple[str, str]
    positions: np.ndarray
    progress: np.ndarray
    steps: int = 0
    window_start: Optional[datetime] = None
    interval: timedelta = timedelta(0)
    last_recalculated: Optional[datetime] = None
    recalculations: int = 0
    reallocations: int = 0

    @property
    def capacity(self):
        return len(self.positions) - 1

    @property
    def points(self):
        return self.positions[:self.steps + 1]

    def allocate(self, steps):
        self.positions = np.zeros((steps + 1, 3))
        self.progress = np.zeros(steps + 1)


class RelativeOrbitTrailCache:
    def __init__(self, config, provider, transformer):
        self.config = config
        self.provider = provider
        self.transformer = transformer
        self.entries: Dict[Tuple[str, str], TrailCacheEntry] = {}
        self.active = []

    def traced_bodies(self, system, bodies):
        """Which bodies get a relative trail in `system`, Sun included where it moves."""
        if system == "Heliocentric":
            return []
        star = next((body for body in bodies if body.kind == "star"), SUN)
        sun = [star] if self.config.show_sun and self.config.show_sun_orbit else []
        if system == "Tychonic":
            return sun
        traced = []
        for body in bodies:
            if body.kind == "star":
                continue
            if system == "Geocentric" and body.name == EARTH:
                continue
            if body.kind == "planet" and not (self.config.show_planets and self.config.show_planet_orbits):
                continue
            if body.kind == "dwarf" and not (self.config.show_dwarf_planets and self.config.show_dwarf_planet_orbits):
                continue
            traced.append(body)
        return traced + sun

    def trail_period(self, body, system):
        if body.kind == "star":
            return SUN_TRAIL_PERIODS[system]
        return body.period

    def update_trails(self, system, bodies, when):
        """
        Refreshes the trails needed for `system` at `when` and returns them.

        Positions are only resampled when an entry is new, too small, or more than
        an hour of simulated time stale. Progress is refreshed on every call.
        """
        self.active = []
        for body in self.traced_bodies(system, bodies):
            entry = self._entry(body, system)
            period = self.trail_period(body, system)
            steps = trail_steps(period, system)

            stale = (
                entry.last_recalculated is None
                or steps != entry.steps
                or abs(when - entry.last_recalculated) > RECALCULATE_AFTER
            )
            if steps > entry.capacity:
                if entry.reallocations:
                    logger.debug("Trail %s/%s outgrew %d samples, reallocating for %d",
                                 body.name, system, entry.capacity, steps)
                # old buffers are simply dropped, nothing else holds them
                entry.allocate(steps)
                entry.reallocations += 1
                stale = True
            if stale:
                self._sample(entry, body, system, period, steps, when)
            self._update_progress(entry, when)
            self.active.append(entry)
        return self.active

    def _entry(self, body, system):
        key = (body.name, system)
        entry = self.entries.get(key)
        if entry is None:
            entry = TrailCacheEntry(key, np.zeros((1, 3)), np.zeros(1))
            self.entries[key] = entry
        return entry

    def _sample(self, entry, body, system, period, steps, when):
        interval = timedelta(days=period / steps)
        start = when - timedelta(days=period / 2)
        for index in range(steps + 1):
            sample_time = start + interval * index
            helio = self.provider.position(body, sample_time)
            entry.positions[index] = to_scene(self.transformer.transform(helio, system, sample_time)) * AU_TO_SCENE
        entry.steps = steps
        entry.window_start = start
        entry.interval = interval
        entry.last_recalculated = when
        entry.recalculations += 1

    def _update_progress(self, entry, when):
        count = entry.steps + 1
        elapsed = (when - entry.window_start) / entry.interval
        current = int(min(entry.steps, max(0, round(elapsed))))
        gradient(current, count, out=entry.progress)

    def clear(self):
        self.entries.clear()
        self.active = []


@dataclass
class OrbitLine:
    """One period of a body's heliocentric path in scene units, plus its gradient."""
    name: str
    points: np.ndarray
    progress: np.ndarray = field(default=None)
    closest_index: int = 0

    def __post_init__(self):
        if self.progress is None:
            self.progress = np.zeros(len(self.points))

    def update_gradient(self, body_position):
        """`body_position` is heliocentric scene units, same space as `points`."""
        distances = np.linalg.norm(self.points - body_position, axis=1)
        self.closest_index = int(np.argmin(distances))
        gradient(self.closest_index, len(self.points), out=self.progress)


class OrbitLineSet:
    """Static orbit lines for planets and dwarf planets, built once per body."""

    def __init__(self, config, provider, bodies):
        self.config = config
        self.provider = provider
        self.bodies = [body for body in bodies if body.kind != "star"]
        self.lines: Dict[str, OrbitLine] = {}

    def build(self, when, samples=ORBIT_LINE_SAMPLES):
        for body in self.bodies:
            interval = timedelta(days=abs(body.period) / samples)
            start = when - timedelta(days=abs(body.period) / 2)
            points = np.array([
                to_scene(self.provider.position(body, start + interval * index)) * AU_TO_SCENE
                for index in range(samples)
            ])
            self.lines[body.name] = OrbitLine(body.name, points)
        logger.debug("Built %d orbit lines", len(self.lines))

    def line_visible(self, body):
        if self.config.coordinate_system not in ("Heliocentric", "Tychonic"):
            return False
        if body.kind == "planet":
            return self.config.show_planets and self.config.show_planet_orbits
        return self.config.show_dwarf_planets and self.config.show_dwarf_planet_orbits

    def update_gradients(self, helio_positions):
        """`helio_positions` maps body name to heliocentric AU for this frame."""
        for name, line in self.lines.items():
            if name in helio_positions:
                line.update_gradient(to_scene(helio_positions[name]) * AU_TO_SCENE)
