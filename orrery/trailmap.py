"""
Flat plot of the relative-orbit trails (the epicycles) for one coordinate system.

Looks straight down on the chosen reference plane. A slider moves the date, and
the trail cache resamples on its own once the date has moved far enough.
"""
import argparse
import logging
import sys
from datetime import timedelta

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.widgets import Slider

from .bodies import default_bodies
from .config import COORDINATE_SYSTEMS, SimulationConfig
from .coordinates import CoordinateTransformer, reference_plane_rotation
from .ephemeris import EphemerisProvider
from .errors import ConfigurationError
from .logging_utils import configure_logging
from .trails import RelativeOrbitTrailCache

logger = logging.getLogger(__name__)

SLIDER_RANGE_DAYS = 5 * 365.25


def trails_frame(cache, config, bodies, when):
    """
    Samples the trails for `config.coordinate_system` at `when` into a DataFrame.

    Columns: body, index, x, y, z (scene units, reference plane applied), progress.
    """
    rotation = reference_plane_rotation(config.reference_plane)
    frames = []
    for entry in cache.update_trails(config.coordinate_system, bodies, when):
        points = entry.points @ rotation.T
        frames.append(pd.DataFrame({
            "body": entry.key[0],
            "index": np.arange(len(points)),
            "x": points[:, 0],
            "y": points[:, 1],
            "z": points[:, 2],
            "progress": entry.progress[:len(points)],
        }))
    if not frames:
        return pd.DataFrame(columns=["body", "index", "x", "y", "z", "progress"])
    return pd.concat(frames, ignore_index=True)


def plot_trails(config, bodies=None, provider=None, csv_path=None, show=True):
    bodies = bodies if bodies is not None else default_bodies()
    provider = provider if provider is not None else EphemerisProvider(bodies)
    cache = RelativeOrbitTrailCache(config, provider, CoordinateTransformer(provider, bodies))
    start = config.clock.current_date
    colors = {body.name: np.array(body.color) / 255.0 for body in bodies}

    df = trails_frame(cache, config, bodies, start)
    if csv_path:
        df.to_csv(csv_path, index=False)
        logger.info("Wrote %d trail samples to %s", len(df), csv_path)

    fig, ax = plt.subplots(figsize=(9, 9))
    plt.subplots_adjust(bottom=0.15)
    fig.patch.set_facecolor('black')
    ax.set_facecolor('black')
    ax.set_aspect('equal')
    ax.tick_params(axis='x', colors='grey', labelsize=6)
    ax.tick_params(axis='y', colors='grey', labelsize=6)
    for spine in ax.spines.values():
        spine.set_color('grey')

    def update_plot(when):
        ax.clear()
        ax.set_facecolor('black')
        data = trails_frame(cache, config, bodies, when)
        for name, group in data.groupby("body"):
            # scene Y is "up", so the plane is x against -z
            ax.scatter(group["x"], -group["z"], s=1, c=[colors.get(name, (1, 1, 1))],
                       alpha=np.clip(1.0 - group["progress"].to_numpy(dtype=float), 0.05, 1.0))
        ax.scatter([0], [0], s=12, c='white')
        ax.set_title(f"{config.coordinate_system} trails | {when:%Y-%m-%d}", color='white', fontsize=12)
        fig.canvas.draw_idle()

    ax_date = plt.axes([0.2, 0.05, 0.65, 0.03], facecolor='grey')
    slider = Slider(ax_date, 'Days', -SLIDER_RANGE_DAYS, SLIDER_RANGE_DAYS, valinit=0, color='grey')
    slider.label.set_color('grey')
    slider.valtext.set_color('grey')
    slider.on_changed(lambda val: update_plot(start + timedelta(days=val)))

    update_plot(start)
    if show:
        plt.show()
    return fig, df


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot relative orbit trails.")
    parser.add_argument("--system", choices=[s for s in COORDINATE_SYSTEMS if s != "Heliocentric"],
                        default="Geocentric")
    parser.add_argument("--plane", default="Ecliptic")
    parser.add_argument("--date", help="Centre date (ISO 8601, UTC). Defaults to now.")
    parser.add_argument("--csv", help="Also write the samples to this CSV file.")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)

    configure_logging(args.debug)
    try:
        config = SimulationConfig.from_mapping({
            "date": args.date,
            "coordinate_system": args.system,
            "reference_plane": args.plane,
        })
        plot_trails(config, csv_path=args.csv)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
