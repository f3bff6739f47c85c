"""
Exceptions raised by the orrery.

Everything that is the caller's fault (a bad body table, an unknown coordinate
system, a date that cannot be parsed) is a ConfigurationError and is raised
loudly, either at startup or at the control API boundary. Numerical corner
cases in the orbital maths are never raised.
"""


class OrreryError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(OrreryError):
    """Invalid static configuration or an invalid value passed to the control API."""


class UnknownBodyError(ConfigurationError):
    """A body name that neither the body tables nor the ephemeris library know."""

    def __init__(self, name):
        super().__init__(f"Unknown body '{name}'")
        self.name = name


class InvalidDateError(ConfigurationError):
    """A date that could not be turned into a UTC datetime."""

    def __init__(self, value):
        super().__init__(f"Invalid date: {value!r}")
        self.value = value


class RebaseError(OrreryError):
    """A virtual-origin rebase failed and was rolled back."""
