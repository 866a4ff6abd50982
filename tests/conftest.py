"""Shared pytest fixtures for iClock API tests."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from iclock_api.api import dependencies
from iclock_api.api.app import create_app
from iclock_api.broker import CommandBroker
from iclock_api.config import Config
from iclock_api.database.engine import DatabaseEngine
from iclock_api.database.repository import RecordRepository
from iclock_api.ingest import RecordIngestor
from iclock_api.queue import CommandQueueStore


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[str, None, None]:
    """Create a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield db_path
    # Cleanup
    for suffix in ("", "-wal", "-shm"):
        Path(db_path + suffix).unlink(missing_ok=True)


@pytest.fixture(scope="function")
def test_config(temp_db_path: str) -> Config:
    """Create a test configuration."""
    return Config(
        api_host="127.0.0.1",
        api_port=1337,
        db_path=temp_db_path,
        metrics_enabled=False,
        log_level="WARNING",  # Quiet logs in tests
        log_format="text",
        redelivery_timeout_seconds=0.0,
    )


@pytest.fixture(scope="function")
def db_engine(test_config: Config) -> Generator[DatabaseEngine, None, None]:
    """Create a database engine for testing."""
    engine = DatabaseEngine(test_config.db_path)
    engine.initialize()
    yield engine
    engine.close()


@pytest.fixture(scope="function")
def repository(db_engine: DatabaseEngine) -> RecordRepository:
    """Create a record repository over the test database."""
    return RecordRepository(db_engine)


@pytest.fixture(scope="function")
def store() -> CommandQueueStore:
    """Create an empty command queue store."""
    return CommandQueueStore()


@pytest.fixture(scope="function")
def broker(store: CommandQueueStore) -> CommandBroker:
    """Create a command broker without metrics."""
    return CommandBroker(store)


@pytest.fixture(scope="function")
def ingestor(repository: RecordRepository) -> RecordIngestor:
    """Create a record ingestor without metrics."""
    return RecordIngestor(repository)


@pytest.fixture(scope="function")
def client(
    test_config: Config,
    broker: CommandBroker,
    ingestor: RecordIngestor,
    repository: RecordRepository,
) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client wired to fresh broker and database instances."""
    dependencies.set_config_instance(test_config)
    dependencies.set_broker_instance(broker)
    dependencies.set_ingestor_instance(ingestor)
    dependencies.set_repository_instance(repository)

    app = create_app(enable_metrics=False)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    dependencies._broker_instance = None
    dependencies._ingestor_instance = None
    dependencies._repository_instance = None
    dependencies._config_instance = None
