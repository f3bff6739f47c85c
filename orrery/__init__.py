"""Interactive solar-system orrery with floating-origin camera precision."""
from .config import SimulationConfig
from .errors import ConfigurationError, InvalidDateError, OrreryError, RebaseError, UnknownBodyError
from .simulation import Simulation

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "InvalidDateError",
    "OrreryError",
    "RebaseError",
    "Simulation",
    "SimulationConfig",
    "UnknownBodyError",
]
