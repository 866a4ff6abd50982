"""Shared configuration utilities and constants."""

import os
from typing import Any, Optional, TypeVar

T = TypeVar("T")

ENV_PREFIX_ICLOCK = "ICLOCK_"


class EnvVars:
    """Centralized environment variable names for consistent access."""

    # === API ===
    API_HOST = f"{ENV_PREFIX_ICLOCK}API_HOST"
    API_PORT = f"{ENV_PREFIX_ICLOCK}API_PORT"
    API_TITLE = f"{ENV_PREFIX_ICLOCK}API_TITLE"
    API_VERSION = f"{ENV_PREFIX_ICLOCK}API_VERSION"

    # === Database ===
    DB_PATH = f"{ENV_PREFIX_ICLOCK}DB_PATH"

    # === Metrics ===
    METRICS_ENABLED = f"{ENV_PREFIX_ICLOCK}METRICS_ENABLED"

    # === Logging ===
    LOG_LEVEL = f"{ENV_PREFIX_ICLOCK}LOG_LEVEL"
    LOG_FORMAT = f"{ENV_PREFIX_ICLOCK}LOG_FORMAT"

    # === Command Queue ===
    REDELIVERY_TIMEOUT_SECONDS = f"{ENV_PREFIX_ICLOCK}REDELIVERY_TIMEOUT_SECONDS"
    REDELIVERY_INTERVAL_SECONDS = f"{ENV_PREFIX_ICLOCK}REDELIVERY_INTERVAL_SECONDS"

    # === Legacy ===
    # Plain PORT, as used by earlier deployments of the sync server
    LEGACY_PORT = "PORT"


def get_env_value(
    env_var: str,
    default: T,
    type_converter: type = str,
    fallback_env_var: Optional[str] = None,
) -> T:
    """
    Get a value from an environment variable with type conversion.

    Args:
        env_var: Primary environment variable name
        default: Default value if not found
        type_converter: Type to convert to (str, int, float, bool)
        fallback_env_var: Optional legacy/fallback environment variable name

    Returns:
        The environment value converted to the specified type, or the default
    """
    env_value = os.getenv(env_var)

    if env_value is None and fallback_env_var:
        env_value = os.getenv(fallback_env_var)

    if env_value is not None:
        if type_converter == bool:
            return env_value.lower() in ("true", "1", "yes", "on")  # type: ignore
        return type_converter(env_value)

    return default


def get_config_value(
    cli_arg: Optional[Any],
    env_var: str,
    default: T,
    type_converter: type = str,
    fallback_env_var: Optional[str] = None,
) -> T:
    """
    Get a configuration value with priority: CLI > Environment > Default.

    Args:
        cli_arg: CLI argument value (highest priority)
        env_var: Primary environment variable name
        default: Default value (lowest priority)
        type_converter: Type to convert to (str, int, float, bool)
        fallback_env_var: Optional legacy/fallback environment variable name

    Returns:
        The resolved configuration value
    """
    if cli_arg is not None:
        return cli_arg

    return get_env_value(env_var, default, type_converter, fallback_env_var)


def get_bool_config_value(
    cli_flag: Optional[bool],
    env_var: str,
    default: bool,
    fallback_env_var: Optional[str] = None,
) -> bool:
    """
    Get a boolean configuration value from a ``--flag/--no-flag`` option.

    Args:
        cli_flag: True/False when the flag was given, None when omitted
        env_var: Environment variable name
        default: Default value
        fallback_env_var: Optional legacy/fallback environment variable

    Returns:
        The resolved boolean value
    """
    if cli_flag is not None:
        return bool(cli_flag)

    return get_env_value(env_var, default, bool, fallback_env_var)
