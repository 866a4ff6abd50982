"""Pydantic schemas for API request and response validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common/Shared Schemas
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    detail: Optional[Any] = Field(None, description="Additional error details")


# ============================================================================
# Command Schemas
# ============================================================================

class CommandSchema(BaseModel):
    """A queued device command as seen by operators."""

    id: int = Field(..., description="Per-device command id")
    command: str = Field(..., description="Command payload sent to the device")
    status: str = Field(..., description="pending, sent or done")
    queued_at: datetime
    sent_at: Optional[datetime] = None
    done_at: Optional[datetime] = None
    device_ack: Optional[str] = Field(None, description="Result reported by the device")
    delivery_attempts: int = 0


class QueueCommandRequest(BaseModel):
    """Request to queue a raw command for a device."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    sn: Optional[str] = Field(None, alias="SN", description="Device serial number")
    command: Optional[str] = Field(None, description="Command payload, e.g. 'CHECK'")


class QueueCommandResponse(BaseModel):
    """Response after queueing a command."""

    success: bool
    queued: CommandSchema


class CommandListResponse(BaseModel):
    """Commands currently queued for one device."""

    sn: str
    commands: List[CommandSchema]


# ============================================================================
# Record Schemas
# ============================================================================

class DataResponse(BaseModel):
    """Users and attendance logs uploaded by devices."""

    users: List[Dict[str, Any]]
    attendance: List[Dict[str, Any]]


# ============================================================================
# Health Schemas
# ============================================================================

class QueueStatsSchema(BaseModel):
    """Command queue statistics."""

    devices: int = Field(..., description="Devices that have had commands queued")
    pending: int = Field(..., description="Commands waiting for a poll")
    sent: int = Field(..., description="Commands delivered and awaiting ack")
    total: int


class HealthCheckResponse(BaseModel):
    """Overall health check response."""

    status: str = Field(..., description="Overall status: healthy or unhealthy")
    database_connected: bool
    uptime_seconds: float
    redelivery_enabled: bool
    queue: QueueStatsSchema
