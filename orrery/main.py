import argparse
import logging
import sys
from datetime import datetime, timezone

import pygame

from .config import COORDINATE_SYSTEMS, FPS, REFERENCE_PLANES, SCREEN_HEIGHT, SCREEN_WIDTH, VIRTUAL_ORIGIN_MODES, \
    SimulationConfig
from .control import SimulationControl
from .errors import ConfigurationError
from .logging_utils import configure_logging
from .renderer import OrreryRenderer
from .simulation import Simulation
from .starfield import Starfield

logger = logging.getLogger(__name__)

ROTATE_SPEED = 0.005
PAN_SPEED = 0.0015
ZOOM_STEP = 1.15
SPEED_STEP = 10.0

SYSTEM_KEYS = {
    pygame.K_1: "Heliocentric",
    pygame.K_2: "Geocentric",
    pygame.K_3: "Tychonic",
    pygame.K_4: "Barycentric",
}


def build_parser():
    parser = argparse.ArgumentParser(description="Interactive solar-system orrery.")
    parser.add_argument("--date", help="Start date (ISO 8601, UTC). Defaults to now.")
    parser.add_argument("--speed", type=float, default=1.0, help="Simulated seconds per real second.")
    parser.add_argument("--paused", action="store_true")
    parser.add_argument("--system", choices=COORDINATE_SYSTEMS, default="Heliocentric")
    parser.add_argument("--plane", choices=REFERENCE_PLANES, default="Equatorial")
    parser.add_argument("--planet-scale", type=float, default=None)
    parser.add_argument("--cap-moon-orbits", action="store_true")
    parser.add_argument("--origin-mode", choices=VIRTUAL_ORIGIN_MODES, default="continuous")
    parser.add_argument("--rebase-threshold", type=float, default=None)
    parser.add_argument("--stars", help="Star catalogue: CSV file or http(s) URL of a JSON catalogue.")
    parser.add_argument("--debug", action="store_true")
    return parser


def config_from_args(args):
    values = {
        "date": args.date,
        "speed": args.speed,
        "paused": args.paused,
        "coordinate_system": args.system,
        "reference_plane": args.plane,
        "cap_moon_orbits": args.cap_moon_orbits,
        "virtual_origin_mode": args.origin_mode,
        "debug": args.debug,
    }
    if args.planet_scale is not None:
        values["planet_scale"] = args.planet_scale
    if args.rebase_threshold is not None:
        values["rebase_threshold"] = args.rebase_threshold
    return SimulationConfig.from_mapping(values)


def load_starfield(source):
    starfield = Starfield()
    if not source:
        return starfield
    if source.startswith(("http://", "https://")):
        starfield.load_remote(source)
    else:
        starfield.load_data(source)
    return starfield


def handle_key(event, control, renderer):
    key = event.key
    if key == pygame.K_SPACE:
        control.toggle_pause()
    elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
        control.set_speed(control.config.clock.speed_multiplier * SPEED_STEP)
    elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
        control.set_speed(control.config.clock.speed_multiplier / SPEED_STEP)
    elif key == pygame.K_r:
        control.set_speed(-control.config.clock.speed_multiplier)
    elif key in SYSTEM_KEYS:
        control.set_coordinate_system(SYSTEM_KEYS[key])
    elif key == pygame.K_p:
        plane = "Ecliptic" if control.config.reference_plane == "Equatorial" else "Equatorial"
        control.set_reference_plane(plane)
    elif key == pygame.K_o:
        if control.simulation.virtual_origin.enabled:
            control.disable_precision()
        else:
            control.enable_precision()
    elif key == pygame.K_s:
        control.toggle("stars")
    elif key == pygame.K_m:
        control.toggle("major_moons")
    elif key == pygame.K_l:
        renderer.show_labels = not renderer.show_labels
    elif key == pygame.K_t:
        control.set_date(datetime.now(timezone.utc))
    elif key == pygame.K_ESCAPE:
        control.exit_focus()


def run(args):
    config = config_from_args(args)
    configure_logging(config.debug)
    simulation = Simulation(config)
    control = SimulationControl(simulation)
    starfield = load_starfield(args.stars)

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption("Orrery")
    renderer = OrreryRenderer(simulation, screen, starfield)
    clock = pygame.time.Clock()

    controls = simulation.controls
    dragging = None
    last_mouse_pos = None
    running = True

    while running:
        dt_seconds = clock.tick(FPS) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                handle_key(event, control, renderer)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3):
                if event.button == 1:
                    picked = renderer.body_at(event.pos)
                    if picked:
                        control.focus(picked)
                        continue
                dragging = event.button
                last_mouse_pos = event.pos
            elif event.type == pygame.MOUSEBUTTONUP and event.button == dragging:
                dragging = None
            elif event.type == pygame.MOUSEMOTION and dragging:
                dx = event.pos[0] - last_mouse_pos[0]
                dy = event.pos[1] - last_mouse_pos[1]
                last_mouse_pos = event.pos
                if dragging == 1:
                    controls.rotate(-dx * ROTATE_SPEED, dy * ROTATE_SPEED)
                else:
                    control.exit_focus()
                    controls.pan(-dx * PAN_SPEED, dy * PAN_SPEED)
            elif event.type == pygame.MOUSEWHEEL:
                controls.zoom(1 / ZOOM_STEP if event.y > 0 else ZOOM_STEP)

        simulation.update(dt_seconds)
        renderer.draw(clock.get_fps())
        pygame.display.flip()

    pygame.quit()


def main(argv=None):
    """
    The Main Entry Point.

    Parses the command line, builds the simulation (bad configuration stops us
    here), then runs the Pygame loop:
    1.  **Event Handling**: mouse orbit / pan / zoom, click-to-focus, keyboard toggles.
    2.  **Update**: `simulation.update()` with the real frame time.
    3.  **Draw**: `renderer.draw()`.
    """
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except ConfigurationError as e:
        logging.getLogger("orrery").error("Configuration error: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
