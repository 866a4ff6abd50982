"""Configuration module for iClock API.

Values resolve with priority CLI > environment > default.

Usage:
    from iclock_api.config import Config
    from iclock_api.config.base import EnvVars, get_config_value

Environment variables use the ICLOCK_ prefix; PORT is honoured as a
fallback for the API port.
"""

from .base import (
    ENV_PREFIX_ICLOCK,
    EnvVars,
    get_bool_config_value,
    get_config_value,
    get_env_value,
)
from .server import Config

__all__ = [
    "Config",
    "EnvVars",
    "get_config_value",
    "get_env_value",
    "get_bool_config_value",
    "ENV_PREFIX_ICLOCK",
]
