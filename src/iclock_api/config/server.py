"""Server configuration resolved from CLI arguments, environment variables, and defaults."""

from dataclasses import dataclass
from typing import Optional

from .base import EnvVars, get_bool_config_value, get_config_value


@dataclass
class Config:
    """Application configuration."""

    # === API ===
    api_host: str = "0.0.0.0"
    api_port: int = 1337
    api_title: str = "iClock API"
    api_version: str = "1.0.0"

    # === Database ===
    db_path: str = "./data/iclock.db"

    # === Prometheus ===
    metrics_enabled: bool = True

    # === Logging ===
    log_level: str = "INFO"
    log_format: str = "json"  # json|text

    # === Command Queue ===
    redelivery_timeout_seconds: float = 0.0  # 0 keeps sent commands until acked
    redelivery_interval_seconds: float = 5.0

    @classmethod
    def from_args_and_env(cls, cli_args: Optional[dict] = None) -> "Config":
        """
        Load configuration from CLI arguments, environment variables, and defaults.

        Priority: CLI args > Environment variables > Defaults

        Args:
            cli_args: Options collected by the CLI; omitted options are absent or None

        Returns:
            Config instance
        """
        args = cli_args or {}
        config = cls()

        config.api_host = get_config_value(
            args.get("api_host"), EnvVars.API_HOST, config.api_host
        )
        config.api_port = get_config_value(
            args.get("api_port"), EnvVars.API_PORT, config.api_port, int,
            fallback_env_var=EnvVars.LEGACY_PORT,
        )
        config.api_title = get_config_value(
            args.get("api_title"), EnvVars.API_TITLE, config.api_title
        )
        config.api_version = get_config_value(
            args.get("api_version"), EnvVars.API_VERSION, config.api_version
        )

        config.db_path = get_config_value(
            args.get("db_path"), EnvVars.DB_PATH, config.db_path
        )

        config.metrics_enabled = get_bool_config_value(
            args.get("metrics"), EnvVars.METRICS_ENABLED, config.metrics_enabled
        )

        config.log_level = get_config_value(
            args.get("log_level"), EnvVars.LOG_LEVEL, config.log_level
        ).upper()
        config.log_format = get_config_value(
            args.get("log_format"), EnvVars.LOG_FORMAT, config.log_format
        ).lower()

        config.redelivery_timeout_seconds = get_config_value(
            args.get("redelivery_timeout"), EnvVars.REDELIVERY_TIMEOUT_SECONDS,
            config.redelivery_timeout_seconds, float,
        )
        config.redelivery_interval_seconds = get_config_value(
            args.get("redelivery_interval"), EnvVars.REDELIVERY_INTERVAL_SECONDS,
            config.redelivery_interval_seconds, float,
        )

        return config

    def display(self) -> str:
        """
        Display configuration in human-readable format.

        Returns:
            Formatted configuration string
        """
        lines = [
            "Configuration:",
            "  API:",
            f"    Host: {self.api_host}",
            f"    Port: {self.api_port}",
            f"    Metrics: {'Enabled' if self.metrics_enabled else 'Disabled'}",
            "  Database:",
            f"    Path: {self.db_path}",
            "  Logging:",
            f"    Level: {self.log_level}",
            f"    Format: {self.log_format}",
            "  Command Queue:",
        ]
        if self.redelivery_timeout_seconds > 0:
            lines.extend([
                f"    Redelivery: after {self.redelivery_timeout_seconds}s without ack",
                f"      Check Interval: {self.redelivery_interval_seconds}s",
            ])
        else:
            lines.append("    Redelivery: Disabled (sent commands wait for ack)")

        return "\n".join(lines)
