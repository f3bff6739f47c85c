import logging
import math
from datetime import date, datetime, timedelta, timezone

from .errors import ConfigurationError, InvalidDateError

logger = logging.getLogger(__name__)

J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
J2000_JULIAN_DATE = 2451545.0
SECONDS_PER_DAY = 86400.0

# Trails and orbit lines sample up to half a period either side of the current
# date (~280 years for Eris), so simulated time stays well inside datetime's range.
MIN_DATE = datetime(1000, 1, 1, tzinfo=timezone.utc)
MAX_DATE = datetime(9000, 1, 1, tzinfo=timezone.utc)
DATE_MARGIN_DAYS = (MIN_DATE.replace(tzinfo=None) - datetime.min).days


def parse_date(value):
    """
    Turns user input into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), dates, ISO 8601 strings
    (with or without a trailing 'Z') and Julian Dates given as numbers.
    Anything else, or a date outside [MIN_DATE, MAX_DATE), raises InvalidDateError;
    there is no silent fallback to "now".
    """
    try:
        result = _to_utc(value)
    except OverflowError:
        raise InvalidDateError(value) from None
    if not MIN_DATE <= result < MAX_DATE:
        raise InvalidDateError(value)
    return result


def _to_utc(value):
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return julian_date_to_datetime(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _to_utc(datetime.fromisoformat(text))
        except ValueError:
            pass
    raise InvalidDateError(value)


def julian_date_to_datetime(jd):
    try:
        return J2000 + timedelta(days=float(jd) - J2000_JULIAN_DATE)
    except (OverflowError, ValueError):
        raise InvalidDateError(jd) from None


def check_speed(value):
    """Speed must be a finite number of simulated seconds per wall second."""
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f"Speed must be finite, got {value!r}")
    return value


def days_since_j2000(when):
    return (when - J2000).total_seconds() / SECONDS_PER_DAY


class SimulationClock:
    """
    Simulated time.

    `speed_multiplier` is in simulated seconds per wall-clock second and may be
    negative to run time backwards. A paused clock ignores advance().
    """

    def __init__(self, current_date=None, speed_multiplier=1.0, paused=False):
        self.current_date = parse_date(current_date) if current_date is not None else datetime.now(timezone.utc)
        self.speed_multiplier = check_speed(speed_multiplier)
        self.paused = bool(paused)

    def advance(self, wall_delta_seconds):
        """
        Moves time on by `speed_multiplier * wall_delta_seconds`.

        Running into either end of the supported range stops the clock there and
        pauses it rather than overflowing.
        """
        if self.paused or self.speed_multiplier == 0:
            return self.current_date
        step = self.speed_multiplier * wall_delta_seconds
        limit = MAX_DATE if step > 0 else MIN_DATE
        room = (limit - self.current_date).total_seconds()
        if abs(step) >= abs(room):
            self.current_date = limit - timedelta(microseconds=1) if step > 0 else limit
            self.paused = True
            logger.warning("Simulated time reached %s, clock paused", self.current_date.isoformat())
        else:
            self.current_date += timedelta(seconds=step)
        return self.current_date

    def set_date(self, value):
        self.current_date = parse_date(value)
        logger.debug("Clock set to %s", self.current_date.isoformat())
        return self.current_date

    def __repr__(self):
        state = "paused" if self.paused else f"x{self.speed_multiplier:g}"
        return f"SimulationClock({self.current_date.isoformat()}, {state})"
