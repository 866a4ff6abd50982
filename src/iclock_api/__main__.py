"""Main application entry point."""

import asyncio
import logging
from typing import Optional

import uvicorn

from .api.app import create_app
from .api.dependencies import (
    set_broker_instance,
    set_config_instance,
    set_ingestor_instance,
    set_repository_instance,
)
from .broker import CommandBroker
from .config import Config
from .database.engine import DatabaseEngine, init_database
from .database.repository import RecordRepository
from .ingest import RecordIngestor
from .metrics import MetricsCollector, get_metrics
from .queue import CommandQueueStore, RedeliveryMonitor

logger = logging.getLogger(__name__)


class Application:
    """Main application controller."""

    def __init__(self, config: Config):
        """
        Initialize application.

        Args:
            config: Application configuration
        """
        self.config = config
        self.db_engine: Optional[DatabaseEngine] = None
        self.store: Optional[CommandQueueStore] = None
        self.broker: Optional[CommandBroker] = None
        self.redelivery: Optional[RedeliveryMonitor] = None
        self.api_server_task: Optional[asyncio.Task] = None
        self.running = False

    async def start(self) -> None:
        """Start the application."""
        logger.info("Starting iClock API")
        logger.info(f"\n{self.config.display()}")

        logger.info("Initializing database...")
        self.db_engine = init_database(self.config.db_path)
        repository = RecordRepository(self.db_engine)

        metrics: Optional[MetricsCollector] = None
        if self.config.metrics_enabled:
            metrics = get_metrics()

        # Command queues live in memory only and start empty on every launch
        self.store = CommandQueueStore()
        self.broker = CommandBroker(self.store, metrics=metrics)
        ingestor = RecordIngestor(repository, metrics=metrics)

        set_config_instance(self.config)
        set_broker_instance(self.broker)
        set_ingestor_instance(ingestor)
        set_repository_instance(repository)

        self.redelivery = RedeliveryMonitor(
            self.store,
            timeout_seconds=self.config.redelivery_timeout_seconds,
            interval_seconds=self.config.redelivery_interval_seconds,
            on_requeue=metrics.record_redelivered if metrics else None,
        )
        self.redelivery.start()

        logger.info(f"Starting API server on {self.config.api_host}:{self.config.api_port}")
        self.api_server_task = asyncio.create_task(self._run_api_server())

        self.running = True
        logger.info("Application started successfully")

    async def stop(self) -> None:
        """Stop the application."""
        logger.info("Stopping iClock API...")
        self.running = False

        if self.api_server_task:
            self.api_server_task.cancel()
            try:
                await self.api_server_task
            except asyncio.CancelledError:
                pass

        if self.redelivery:
            await self.redelivery.stop()

        if self.db_engine:
            self.db_engine.close()

        logger.info("Application stopped")

    async def _run_api_server(self) -> None:
        """Run the FastAPI server."""
        try:
            app = create_app(
                title=self.config.api_title,
                version=self.config.api_version,
                enable_metrics=self.config.metrics_enabled,
            )

            config = uvicorn.Config(
                app,
                host=self.config.api_host,
                port=self.config.api_port,
                log_level=self.config.log_level.lower(),
                access_log=True,
            )
            server = uvicorn.Server(config)
            await server.serve()

        except asyncio.CancelledError:
            logger.info("API server shutting down...")
            raise
        except Exception as e:
            logger.error(f"API server error: {e}", exc_info=True)
            if self.config.metrics_enabled:
                get_metrics().record_error("api_server", "server_failed")
        finally:
            self.running = False

    async def run(self) -> None:
        """Run the application until interrupted."""
        try:
            await self.start()

            while self.running:
                await asyncio.sleep(1)

        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        except Exception as e:
            logger.error(f"Application error: {e}", exc_info=True)
        finally:
            await self.stop()


def main() -> None:
    """Main entry point - delegates to CLI."""
    from .cli import cli
    cli()


if __name__ == "__main__":
    main()
