"""FastAPI dependency injection for the broker, ingestor and repository."""

from typing import Optional

from ..broker import CommandBroker
from ..config import Config
from ..database.repository import RecordRepository
from ..ingest import RecordIngestor

# Global instances (set during app startup)
_broker_instance: Optional[CommandBroker] = None
_ingestor_instance: Optional[RecordIngestor] = None
_repository_instance: Optional[RecordRepository] = None
_config_instance: Optional[Config] = None


def set_broker_instance(broker: CommandBroker) -> None:
    """
    Set the global CommandBroker instance.

    This is called during application startup to make the broker
    available to all API routes.

    Args:
        broker: The CommandBroker instance
    """
    global _broker_instance
    _broker_instance = broker


def set_ingestor_instance(ingestor: RecordIngestor) -> None:
    """Set the global RecordIngestor instance."""
    global _ingestor_instance
    _ingestor_instance = ingestor


def set_repository_instance(repository: RecordRepository) -> None:
    """Set the global RecordRepository instance."""
    global _repository_instance
    _repository_instance = repository


def set_config_instance(config: Config) -> None:
    """Set the global Config instance."""
    global _config_instance
    _config_instance = config


def get_broker() -> CommandBroker:
    """
    Dependency to get the CommandBroker instance.

    Raises:
        RuntimeError: If the broker has not been set

    Example:
        ```python
        @router.get("/commands/{sn}")
        def list_commands(sn: str, broker: CommandBroker = Depends(get_broker)):
            return broker.inspect(sn)
        ```
    """
    if _broker_instance is None:
        raise RuntimeError("CommandBroker instance not initialized")
    return _broker_instance


def get_ingestor() -> RecordIngestor:
    """
    Dependency to get the RecordIngestor instance.

    Raises:
        RuntimeError: If the ingestor has not been set
    """
    if _ingestor_instance is None:
        raise RuntimeError("RecordIngestor instance not initialized")
    return _ingestor_instance


def get_repository() -> RecordRepository:
    """
    Dependency to get the RecordRepository instance.

    Raises:
        RuntimeError: If the repository has not been set
    """
    if _repository_instance is None:
        raise RuntimeError("RecordRepository instance not initialized")
    return _repository_instance


def get_config() -> Optional[Config]:
    """Dependency to get the Config instance (None before startup)."""
    return _config_instance
