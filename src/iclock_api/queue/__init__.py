"""
Command queue system for iClock API.

Holds per-device command queues and the pending/sent/done acknowledgment
state machine used by the device polling protocol.
"""

from .models import CommandStatus, DeviceCommand, QueueStats
from .redelivery import RedeliveryMonitor
from .store import CommandQueueStore, DeviceQueue

__all__ = [
    "CommandQueueStore",
    "CommandStatus",
    "DeviceCommand",
    "DeviceQueue",
    "QueueStats",
    "RedeliveryMonitor",
]
