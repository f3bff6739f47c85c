import csv
import logging
import os
import sys

import numpy as np

from .api_client import fetch_star_catalogue
from .config import PARSEC_TO_SCENE

logger = logging.getLogger(__name__)

DEFAULT_MAGNITUDE = 6.0


def resource_path(relative_path):
    """ Get absolute path to resource, works for dev and for PyInstaller """
    base_path = getattr(sys, "_MEIPASS", os.path.abspath("."))
    return os.path.join(base_path, relative_path)


def parsec_to_scene(x, y, z):
    """Equatorial parsecs -> scene units, with the (x, z, -y) axis swap."""
    return np.array([x, z, -y]) * PARSEC_TO_SCENE


class Starfield:
    """
    Background stars.

    Stars are loaded once; on any failure the field is simply empty and the rest
    of the orrery carries on. Positions are scene units under the frame node, so
    they turn with the reference plane but ignore the coordinate system.
    """

    def __init__(self, data_file=None):
        self.stars = []
        if data_file:
            self.load_data(resource_path(data_file))

    def __len__(self):
        return len(self.stars)

    def _add(self, name, x, y, z, magnitude):
        self.stars.append({
            "name": name,
            "pos": parsec_to_scene(x, y, z),
            "mag": DEFAULT_MAGNITUDE if magnitude is None else magnitude,
        })

    def load_data(self, filename):
        """
        Loads stars from a CSV file: name, x, y, z (parsecs), optional magnitude.

        A header row is skipped, as are rows that do not parse.
        """
        self.stars = []

        if not filename:
            return self.stars

        if not os.path.exists(filename):
            logger.error("Starfield data file '%s' not found.", filename)
            return self.stars

        try:
            with open(filename, mode='r', encoding='utf-8-sig') as f:
                for row in csv.reader(f):
                    if len(row) < 4:
                        continue
                    name = row[0].strip()
                    if name.lower() in ("name", "star"):
                        continue
                    try:
                        magnitude = float(row[4]) if len(row) > 4 and row[4].strip() else None
                        self._add(name, float(row[1]), float(row[2]), float(row[3]), magnitude)
                    except ValueError:
                        continue
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error("Error loading starfield data: %s", e)
            self.stars = []
            return self.stars

        logger.info("Loaded %d stars for starfield.", len(self.stars))
        return self.stars

    def load_remote(self, url):
        """Same as load_data() but from a JSON catalogue over HTTP."""
        self.stars = []
        for star in fetch_star_catalogue(url):
            self._add(star["name"], star["x"], star["y"], star["z"], star["mag"])
        return self.stars

    def positions(self):
        if not self.stars:
            return np.empty((0, 3))
        return np.array([star["pos"] for star in self.stars])

    def brightest(self, count):
        return sorted(self.stars, key=lambda star: star["mag"])[:count]
