"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for the orrery tests. Anything that needs many positions (trails,
placement, whole frames) uses CircularEphemeris instead of astronomy-engine:
every body on a circular, coplanar orbit sized from its period.
"""
from datetime import datetime, timezone

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from orrery.bodies import default_bodies, validate_body_table  # noqa: E402
from orrery.clock import SimulationClock, days_since_j2000  # noqa: E402
from orrery.config import SimulationConfig  # noqa: E402
from orrery.physics import semi_major_axis_from_period  # noqa: E402
from orrery.simulation import Simulation  # noqa: E402

GALILEAN_DISTANCES = (0.00282, 0.00449, 0.00716, 0.01259)
GALILEAN_PERIODS = (1.769, 3.551, 7.155, 16.689)


def _circle(radius, period, when):
    angle = 2 * np.pi * days_since_j2000(when) / period
    return np.array([radius * np.cos(angle), radius * np.sin(angle), 0.0])


class CircularEphemeris:
    """Ephemeris test double with the same interface as EphemerisProvider."""

    def __init__(self):
        self.calls = 0

    def validate(self, bodies):
        validate_body_table(bodies)

    def position(self, body, when):
        self.calls += 1
        if body.kind == "star":
            return np.zeros(3)
        return _circle(semi_major_axis_from_period(body.period), body.period, when)

    def barycenter(self, when):
        return _circle(0.005, 12 * 365.25, when)

    def jupiter_moon_offsets(self, when):
        return [_circle(d, p, when) for d, p in zip(GALILEAN_DISTANCES, GALILEAN_PERIODS)]

    def moon_offset(self, when):
        return _circle(0.00257, 27.32, when)


@pytest.fixture
def epoch():
    """A fixed date for every test that needs one."""
    return datetime(2024, 3, 20, 3, 6, tzinfo=timezone.utc)


@pytest.fixture
def bodies():
    return default_bodies()


@pytest.fixture
def provider():
    return CircularEphemeris()


@pytest.fixture
def config(epoch):
    return SimulationConfig(clock=SimulationClock(epoch))


@pytest.fixture
def simulation(config, bodies, provider):
    return Simulation(config, bodies=bodies, provider=provider)
