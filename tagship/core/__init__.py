"""Core types shared by the release pipeline and the CLI."""

from .config import Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    "ErrorCode",
    "Ok",
    "Err",
    "Result",
]
