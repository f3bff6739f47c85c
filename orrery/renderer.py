import math

import numpy as np
import pygame

from .config import (BLACK, COORD_MAX, COORD_MIN, GRADIENT_BANDS, LIGHT_GREY, MAX_BODY_RADIUS_PIXELS,
                     MIN_BODY_RADIUS_PIXELS, ORBIT_GREY, SCREEN_HEIGHT, SCREEN_WIDTH, TRAIL_COLOR, WHITE)


def _clamp_coord(value):
    # Pygame falls over on huge or non-finite coordinates
    if not math.isfinite(value):
        return COORD_MAX if value > 0 else COORD_MIN
    return int(max(COORD_MIN, min(value, COORD_MAX)))


def focal_length(fov_deg, screen_height=SCREEN_HEIGHT):
    return (screen_height / 2) / math.tan(math.radians(fov_deg) / 2)


def project_points(points, camera, screen_size=(SCREEN_WIDTH, SCREEN_HEIGHT)):
    """
    Projects live render-space points onto the screen.

    The camera looks along its forward vector; a point's depth is its distance
    along that vector. Screen position = centre + (x, -y) * focal / depth.

    Args:
        points (np.ndarray): (N, 3) points in live render space.
        camera (Camera): The scene camera.
        screen_size (tuple): (width, height) in pixels.

    Returns:
        tuple: (screen_xy (N, 2) float array, depth (N,) array). Points behind the
        near plane get NaN screen coordinates.
    """
    points = np.atleast_2d(points)
    right, up, forward = camera.view_basis()
    relative = points - camera.position
    x = relative @ right
    y = relative @ up
    depth = relative @ forward

    width, height = screen_size
    f = focal_length(camera.fov, height)
    with np.errstate(divide="ignore", invalid="ignore"):
        sx = width / 2 + x * f / depth
        sy = height / 2 - y * f / depth
    behind = depth <= camera.near
    sx[behind] = np.nan
    sy[behind] = np.nan
    return np.stack([sx, sy], axis=1), depth


def to_live(node, local_points):
    """Frame-local (or any node-local) points -> live render space through the node's parents."""
    matrix = node.world_matrix()
    return np.atleast_2d(local_points) @ matrix[:3, :3].T + matrix[:3, 3]


def shade(color, brightness):
    brightness = min(1.0, max(0.0, brightness))
    return tuple(int(c * brightness) for c in color)


class OrreryRenderer:
    """
    Draws a Simulation with pygame.

    Painter's algorithm: stars, then orbit lines and trails, then bodies sorted
    far to near, then the HUD on top.
    """

    def __init__(self, simulation, screen, starfield=None):
        self.simulation = simulation
        self.screen = screen
        self.starfield = starfield
        self.font = pygame.font.Font(None, 16)
        self.hud_font = pygame.font.Font(None, 22)
        self.show_labels = True
        self.screen_positions = {}

    def _project(self, points):
        xy, depth = project_points(points, self.simulation.camera, self.screen.get_size())
        return xy, depth

    def _polyline(self, live_points, progress, color):
        """Gradient polyline: bright at progress 0, fading along the path."""
        xy, _ = self._project(live_points)
        count = len(xy)
        if count < 2:
            return
        band = max(2, count // GRADIENT_BANDS)
        for start in range(0, count - 1, band - 1):
            chunk = xy[start:start + band]
            visible = chunk[np.all(np.isfinite(chunk), axis=1)]
            if len(visible) < 2:
                continue
            brightness = 1.0 - float(np.mean(progress[start:start + band]))
            pts = [(_clamp_coord(px), _clamp_coord(py)) for px, py in visible]
            pygame.draw.lines(self.screen, shade(color, 0.15 + 0.85 * brightness), False, pts, 1)

    def draw_stars(self):
        sim = self.simulation
        if not (self.starfield and sim.config.show_stars):
            return
        live = to_live(sim.frame, self.starfield.positions())
        xy, _ = self._project(live)
        width, height = self.screen.get_size()
        for star, (sx, sy) in zip(self.starfield.stars, xy):
            if not (math.isfinite(sx) and math.isfinite(sy)) or not (0 <= sx < width and 0 <= sy < height):
                continue
            self.screen.set_at((int(sx), int(sy)), shade(WHITE, 1.2 - star["mag"] / 8.0))

    def draw_orbits(self):
        sim = self.simulation
        bodies = {body.name: body for body in sim.bodies}
        sun_local = sim.placement.display_positions.get("Sun", np.zeros(3))
        for name, line in sim.orbit_lines.lines.items():
            if not sim.orbit_lines.line_visible(bodies[name]):
                continue
            # orbit lines are heliocentric, so they hang off the Sun's displayed position
            live = to_live(sim.frame, line.points + sun_local)
            self._polyline(live, line.progress, bodies[name].color)

        for entry in sim.trails.active:
            live = to_live(sim.frame, entry.points)
            color = bodies[entry.key[0]].color if entry.key[0] in bodies else TRAIL_COLOR
            self._polyline(live, entry.progress[:entry.steps + 1], color)

    def draw_bodies(self):
        sim = self.simulation
        f = focal_length(sim.camera.fov, self.screen.get_height())
        drawable = []
        colors = {body.name: body.color for body in sim.bodies}
        for body in sim.bodies:
            colors.update({moon.name: moon.color for moon in body.moons})

        nodes = list(sim.placement.nodes.values()) + list(sim.placement.moon_nodes.values())
        for node in nodes:
            if not node.is_visible():
                continue
            live = node.world_position()
            xy, depth = self._project(live)
            sx, sy = xy[0]
            if not (math.isfinite(sx) and math.isfinite(sy)):
                continue
            radius = int(min(MAX_BODY_RADIUS_PIXELS, max(MIN_BODY_RADIUS_PIXELS, node.scale * f / depth[0])))
            drawable.append((depth[0], node.name, sx, sy, radius))

        for orbit_name, orbit in sim.placement.moon_orbit_nodes.items():
            if not orbit.is_visible():
                continue
            xy, depth = self._project(orbit.world_position())
            sx, sy = xy[0]
            if math.isfinite(sx) and math.isfinite(sy):
                ring = int(orbit.scale * f / depth[0])
                if MIN_BODY_RADIUS_PIXELS < ring < COORD_MAX:
                    pygame.draw.circle(self.screen, ORBIT_GREY, (_clamp_coord(sx), _clamp_coord(sy)), ring, 1)

        self.screen_positions = {}
        for depth, name, sx, sy, radius in sorted(drawable, reverse=True):
            center = (_clamp_coord(sx), _clamp_coord(sy))
            pygame.draw.circle(self.screen, colors.get(name, WHITE), center, radius)
            self.screen_positions[name] = (center[0], center[1], radius)
            if self.show_labels:
                label = self.font.render(name, True, LIGHT_GREY)
                self.screen.blit(label, (center[0] + radius + 3, center[1] - 6))

    def draw_hud(self, fps=None):
        sim = self.simulation
        clock = sim.config.clock
        lines = [
            sim.current_date.strftime("%Y-%m-%d %H:%M:%S UTC"),
            f"Speed x{clock.speed_multiplier:g}{'  (paused)' if clock.paused else ''}",
            f"{sim.config.coordinate_system} / {sim.config.reference_plane}",
            f"Origin: {sim.virtual_origin.mode}, {sim.virtual_origin.rebase_count} rebases",
        ]
        if sim.focus.active:
            lines.append(f"Focus: {sim.focus.node.name}")
        if fps is not None:
            lines.append(f"{fps:.0f} fps")
        for row, text in enumerate(lines):
            self.screen.blit(self.hud_font.render(text, True, WHITE), (20, 20 + row * 22))

    def body_at(self, pos):
        """Name of the body under a screen position, nearest first."""
        for name, (sx, sy, radius) in reversed(list(self.screen_positions.items())):
            if math.hypot(pos[0] - sx, pos[1] - sy) <= max(radius, 6):
                return name
        return None

    def draw(self, fps=None):
        self.screen.fill(BLACK)
        self.draw_stars()
        self.draw_orbits()
        self.draw_bodies()
        self.draw_hud(fps)
