"""
Data models for the command queue system.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class CommandStatus(str, Enum):
    """Lifecycle states of a device command."""
    PENDING = "pending"  # Queued, not yet handed to the device
    SENT = "sent"  # Delivered on a poll, waiting for the device ack
    DONE = "done"  # Acknowledged; evicted from the queue right after


@dataclass
class DeviceCommand:
    """One unit of work queued for a single device."""

    id: int
    text: str
    status: CommandStatus = CommandStatus.PENDING
    queued_at: datetime = field(default_factory=utcnow)
    sent_at: Optional[datetime] = None
    done_at: Optional[datetime] = None
    device_ack: Optional[str] = None
    delivery_attempts: int = 0

    def copy(self) -> "DeviceCommand":
        """Return a detached copy safe to hand outside the store."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "command": self.text,
            "status": self.status.value,
            "queued_at": _iso(self.queued_at),
            "sent_at": _iso(self.sent_at),
            "done_at": _iso(self.done_at),
            "device_ack": self.device_ack,
            "delivery_attempts": self.delivery_attempts,
        }


@dataclass
class QueueStats:
    """Statistics about the command queues."""

    devices: int
    pending: int
    sent: int

    @property
    def total(self) -> int:
        return self.pending + self.sent

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "devices": self.devices,
            "pending": self.pending,
            "sent": self.sent,
            "total": self.total,
        }
