"""registrar - Observable attribute models with change tracking."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("registrar")
except PackageNotFoundError:
    __version__ = "0+local"
from registrar.config import RegistrarConfig, get_config, set_config
from registrar.events import ALL_EVENTS, Events
from registrar.exceptions import InvalidOptionsError, RegistrarConfigError, RegistrarError
from registrar.extend import Extendable, extend
from registrar.model import Model
from registrar.options import ModelOptions, coerce_options

__all__ = [
    "__version__",
    "ALL_EVENTS",
    "Events",
    "Extendable",
    "InvalidOptionsError",
    "Model",
    "ModelOptions",
    "RegistrarConfig",
    "RegistrarConfigError",
    "RegistrarError",
    "coerce_options",
    "extend",
    "get_config",
    "set_config",
]
