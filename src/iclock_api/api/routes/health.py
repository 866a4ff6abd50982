"""Health check endpoint."""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text

from ...broker import CommandBroker
from ...database.repository import RecordRepository
from ..dependencies import get_broker, get_config, get_repository
from ..schemas import HealthCheckResponse, QueueStatsSchema

router = APIRouter()
logger = logging.getLogger(__name__)

# Track application start time
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Overall health check",
    description="Check database connectivity and report command queue statistics",
)
def health_check(
    broker: CommandBroker = Depends(get_broker),
    repository: RecordRepository = Depends(get_repository),
) -> HealthCheckResponse:
    """
    Get overall application health status.

    Returns:
        Health check response with database status, uptime and queue stats
    """
    db_connected = False
    try:
        with repository.db_engine.session_scope() as session:
            session.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")

    config = get_config()
    stats = broker.store.stats()

    return HealthCheckResponse(
        status="healthy" if db_connected else "unhealthy",
        database_connected=db_connected,
        uptime_seconds=time.time() - _start_time,
        redelivery_enabled=bool(config and config.redelivery_timeout_seconds > 0),
        queue=QueueStatsSchema(**stats.to_dict()),
    )
