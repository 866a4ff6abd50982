"""Command-line interface for iClock API."""

import asyncio
import logging
import signal

import click

from .config import Config
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """iClock API - command broker for polling attendance terminals."""
    pass


@cli.command()
@click.option(
    "--api-host",
    type=str,
    help="API server host (default: 0.0.0.0)",
)
@click.option(
    "--api-port",
    type=int,
    help="API server port (default: 1337)",
)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file for uploaded records (default: ./data/iclock.db)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: INFO)",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    help="Log format (default: json)",
)
@click.option(
    "--metrics/--no-metrics",
    default=None,
    help="Enable/disable Prometheus metrics (default: enabled)",
)
@click.option(
    "--redelivery-timeout",
    type=float,
    help="Seconds after which an unacknowledged sent command is redelivered (default: 0 = never)",
)
@click.option(
    "--redelivery-interval",
    type=float,
    help="Seconds between redelivery sweeps (default: 5)",
)
def server(**kwargs):
    """Start the iClock API server."""
    from .__main__ import Application

    # Filter out None values (unspecified options)
    cli_args = {k: v for k, v in kwargs.items() if v is not None}

    config = Config.from_args_and_env(cli_args)

    setup_logging(level=config.log_level, format_type=config.log_format)

    app = Application(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        loop.create_task(app.stop())

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        loop.run_until_complete(app.run())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt")
    finally:
        loop.close()

