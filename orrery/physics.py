"""
PHYSICS MODULE
--------------
Orbital mechanics for bodies that have no tabulated ephemeris (dwarf planets,
custom bodies). Everything here is pure: same elements + same time = same answer.

Key Concepts:
1.  **Orbital Elements**: A set of 6 numbers that uniquely define an orbit.
    - Semi-Major Axis (a): The size of the orbit, in AU.
    - Eccentricity (e): The shape of the orbit (0 = circle, 0 < e < 1 = ellipse).
    - Inclination (i): The tilt of the orbit relative to the ecliptic.
    - Longitude of Ascending Node (Omega): The rotation of the orbit around the Z-axis.
    - Argument of Periapsis (omega): The orientation of the ellipse within the orbital plane.
    - Mean Anomaly at Epoch (M0): Where the body was at the reference time (J2000 unless given).

2.  **Kepler's Equation**: M = E - e * sin(E)
    M grows linearly with time, E is what we need for (x, y). We solve it with
    Newton-Raphson, capped at a handful of iterations. Good enough for display;
    very eccentric orbits are simply left with the best estimate.

3.  **Coordinate Transformation**:
    - Position in the 2D orbital plane (x', y') first,
    - then the 3-1-3 rotation (omega, i, Omega) to heliocentric ecliptic (x, y, z).
"""
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

from .clock import J2000, SECONDS_PER_DAY, parse_date
from .errors import ConfigurationError

# Gaussian gravitational constant expressed as degrees per day for a = 1 AU.
MEAN_MOTION_AT_1AU = 0.9856076686
DAYS_PER_YEAR = 365.25
KEPLER_TOLERANCE = 1e-6
KEPLER_MAX_ITERATIONS = 10


@dataclass(frozen=True)
class OrbitalElements:
    a: float
    e: float
    i: float
    Omega: float
    omega: float
    M0: float
    # datetime, ISO string or Julian Date; None means J2000.0
    epoch: object = None
    epoch_datetime: datetime = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.a > 0:
            raise ConfigurationError(f"Semi-major axis must be positive, got {self.a!r}")
        if not 0 <= self.e < 1:
            raise ConfigurationError(f"Eccentricity must be in [0, 1), got {self.e!r}")
        epoch_dt = J2000 if self.epoch is None else parse_date(self.epoch)
        object.__setattr__(self, "epoch_datetime", epoch_dt)

    @property
    def mean_motion(self):
        return mean_motion(self.a)

    @property
    def period(self):
        return orbital_period_days(self.a)


def mean_motion(semi_major_axis):
    """Mean motion in degrees per day for a heliocentric orbit of the given size."""
    return MEAN_MOTION_AT_1AU / semi_major_axis ** 1.5


def orbital_period_days(semi_major_axis):
    return 360.0 / mean_motion(semi_major_axis)


def semi_major_axis_from_period(period_days):
    """Kepler's third law calibrated on Earth: a (AU) = (P / 1 yr)^(2/3)."""
    return (abs(period_days) / DAYS_PER_YEAR) ** (2.0 / 3.0)


def solve_kepler_equation(mean_anomaly_rad, eccentricity, tolerance=KEPLER_TOLERANCE,
                          max_iterations=KEPLER_MAX_ITERATIONS, full_output=False):
    """
    Solves Kepler's Equation: M = E - e * sin(E) for E (Eccentric Anomaly).

    Newton-Raphson starting from E = M. We stop as soon as a step is smaller than
    the tolerance, or when the iteration cap is hit; in that case the last estimate
    is returned as-is. There is no error path.

    Args:
        mean_anomaly_rad (float): The Mean Anomaly in radians (M).
        eccentricity (float): The orbital eccentricity (e).
        tolerance (float): Stop once |dE| drops below this.
        max_iterations (int): Hard cap on the number of Newton steps.
        full_output (bool): Also return the number of iterations used.

    Returns:
        float: The Eccentric Anomaly (E) in radians, or (E, iterations) with full_output.
    """
    E = mean_anomaly_rad
    iterations = 0
    # f(E) = E - e*sin(E) - M, f'(E) = 1 - e*cos(E)
    while iterations < max_iterations:
        iterations += 1
        delta_E = (E - eccentricity * np.sin(E) - mean_anomaly_rad) / (1 - eccentricity * np.cos(E))
        E -= delta_E
        if abs(delta_E) < tolerance:
            break

    if full_output:
        return E, iterations
    return E


def rotate_to_ecliptic(xp, yp, inclination_deg, lon_asc_node_deg, arg_periapsis_deg):
    """
    Rotates orbital-plane coordinates (xp, yp, 0) into heliocentric ecliptic axes.

    Works on scalars or numpy arrays. The three rotations are omega about Z,
    i about X, then Omega about Z, folded into one matrix.
    """
    i = np.radians(inclination_deg)
    omega = np.radians(arg_periapsis_deg)
    Omega = np.radians(lon_asc_node_deg)
    cos_w, sin_w = np.cos(omega), np.sin(omega)
    cos_O, sin_O = np.cos(Omega), np.sin(Omega)
    cos_i, sin_i = np.cos(i), np.sin(i)

    x = xp * (cos_w * cos_O - sin_w * sin_O * cos_i) - yp * (sin_w * cos_O + cos_w * sin_O * cos_i)
    y = xp * (cos_w * sin_O + sin_w * cos_O * cos_i) + yp * (cos_w * cos_O * cos_i - sin_w * sin_O)
    z = xp * (sin_w * sin_i) + yp * (cos_w * sin_i)
    return x, y, z


def mean_anomaly_at(elements, when):
    """Mean anomaly in degrees, normalised to [0, 360)."""
    delta_days = (when - elements.epoch_datetime).total_seconds() / SECONDS_PER_DAY
    return (elements.M0 + elements.mean_motion * delta_days) % 360.0


def keplerian_position(elements, when):
    """
    Heliocentric ecliptic position (AU) of a body at a given time.

    Steps:
    1. Days since the elements' epoch.
    2. Mean motion n = 0.9856076686 / a^1.5 degrees per day.
    3. M = (M0 + n * days) mod 360.
    4. Solve Kepler's Equation for E.
    5. Position in the orbital plane:
         x' = a (cos E - e)
         y' = a sqrt(1 - e^2) sin E
    6. Rotate (x', y') into 3D space using (i, Omega, omega).

    Args:
        elements (OrbitalElements): The orbit.
        when (datetime): Aware UTC datetime.

    Returns:
        np.ndarray: (x, y, z) in AU, heliocentric ecliptic J2000.
    """
    a, e = elements.a, elements.e
    M_rad = np.radians(mean_anomaly_at(elements, when))
    E = solve_kepler_equation(M_rad, e)

    xp = a * (np.cos(E) - e)
    yp = a * np.sqrt(1 - e * e) * np.sin(E)
    return np.array(rotate_to_ecliptic(xp, yp, elements.i, elements.Omega, elements.omega))


def calculate_orbit_points(elements, num_points=360):
    """
    Generates the closed orbital path as an (num_points, 3) array in AU.

    Iterates the True Anomaly over a full turn rather than stepping time, so the
    points are evenly spread in angle. Used for the static orbit preview.
    """
    a, e = elements.a, elements.e
    nu = np.linspace(0, 2 * np.pi, num_points)
    # Polar equation of an ellipse about its focus
    r = a * (1 - e ** 2) / (1 + e * np.cos(nu))
    x, y, z = rotate_to_ecliptic(r * np.cos(nu), r * np.sin(nu), elements.i, elements.Omega, elements.omega)
    return np.array([x, y, z]).T
