"""Database layer for device record persistence."""

from .engine import DatabaseEngine, init_database
from .models import AttendanceLog, DeviceUser
from .repository import RecordRepository

__all__ = [
    "DatabaseEngine",
    "init_database",
    "AttendanceLog",
    "DeviceUser",
    "RecordRepository",
]
