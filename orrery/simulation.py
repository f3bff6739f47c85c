"""
The per-frame driver.

Order of work for every frame (and for a date jump):
    1. clock advances,
    2. bodies are placed for the coordinate system,
    3. the frame node takes the reference-plane rotation,
    4. focus tracking moves the virtual camera,
    5. controls write the camera position,
    6. the virtual origin pulls the camera back towards zero,
    7. relative trails are refreshed (if stale) and every gradient is re-shaded.
"""
import logging

import numpy as np

from .bodies import default_bodies
from .config import SimulationConfig
from .controls import OrbitControls
from .coordinates import CoordinateTransformer, reference_plane_euler
from .clock import DATE_MARGIN_DAYS, parse_date
from .ephemeris import EphemerisProvider
from .errors import ConfigurationError, InvalidDateError
from .focus import FocusTracker
from .placement import BodyPlacementUpdater
from .scene import Camera, build_scene
from .trails import OrbitLineSet, RelativeOrbitTrailCache
from .virtual_origin import VirtualOrigin

logger = logging.getLogger(__name__)

DEFAULT_CAMERA_POSITION = (0.0, 600.0, 1800.0)


class Simulation:
    def __init__(self, config=None, bodies=None, provider=None, camera_position=DEFAULT_CAMERA_POSITION):
        self.config = config if config is not None else SimulationConfig()
        self.config.validate()
        self.bodies = list(bodies) if bodies is not None else default_bodies()

        if provider is None:
            provider = EphemerisProvider()
        # Unknown or malformed bodies stop us here, not mid-frame.
        provider.validate(self.bodies)
        longest = max(abs(body.period) for body in self.bodies)
        if longest / 2 > DATE_MARGIN_DAYS:
            raise ConfigurationError(f"Orbital period of {longest} days is too long to sample")
        self.provider = provider

        self.transformer = CoordinateTransformer(provider, self.bodies)
        self.root, self.frame = build_scene()
        self.placement = BodyPlacementUpdater(self.config, provider, self.transformer, self.bodies, self.frame)
        self.trails = RelativeOrbitTrailCache(self.config, provider, self.transformer)
        self.orbit_lines = OrbitLineSet(self.config, provider, self.bodies)
        self.orbit_lines.build(self.config.clock.current_date)

        self.camera = Camera(position=camera_position)
        self.controls = OrbitControls(self.camera)
        self.virtual_origin = VirtualOrigin(
            self.camera, self.controls, self.root,
            mode=self.config.virtual_origin_mode,
            threshold=self.config.rebase_threshold,
        )
        self.focus = FocusTracker(self.virtual_origin, self.camera)
        self.frame_count = 0

    @property
    def current_date(self):
        return self.config.clock.current_date

    def update(self, wall_delta):
        """One frame: advance the clock by `wall_delta` wall-clock seconds and redo everything."""
        self.config.clock.advance(wall_delta)
        self._refresh(wall_delta)
        self.frame_count += 1

    def _refresh(self, wall_delta):
        when = self.config.clock.current_date
        self.placement.update(when)
        self.frame.rotation = reference_plane_euler(self.config.reference_plane)
        self.focus.update(wall_delta)
        self.controls.update()
        self.virtual_origin.update()
        self.trails.update_trails(self.config.coordinate_system, self.bodies, when)
        self.orbit_lines.update_gradients(self.placement.helio_positions)

    def jump_to_date(self, date, pause_after=True):
        """
        Moves simulated time straight to `date` and recomputes everything for it
        before returning. Bad dates raise InvalidDateError and leave the clock alone;
        if the recompute itself fails the previous date and pause state come back.
        """
        try:
            target = parse_date(date)
        except InvalidDateError:
            logger.error("Refusing to jump to invalid date %r", date)
            raise
        clock = self.config.clock
        previous = (clock.current_date, clock.paused)
        clock.current_date = target
        if pause_after:
            clock.paused = True
        try:
            self._refresh(0.0)
        except Exception:
            clock.current_date, clock.paused = previous
            logger.error("Jump to %s failed, clock restored to %s", target.isoformat(), previous[0].isoformat())
            raise
        logger.info("Jumped to %s%s", target.isoformat(), " (paused)" if pause_after else "")
        return target

    def node_for(self, name):
        """Scene node of a body or moon by name."""
        if name in self.placement.nodes:
            return self.placement.nodes[name]
        return self.placement.moon_nodes.get(name)

    def true_position(self, name):
        """True-space position of a body, independent of the current rebase offset."""
        node = self.node_for(name)
        return None if node is None else self.virtual_origin.scene_to_world(node.world_position())

    def camera_distance_from_origin(self):
        return float(np.linalg.norm(self.camera.position))
