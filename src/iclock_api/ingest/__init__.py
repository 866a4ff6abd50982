"""Ingestion of attendance and user tables pushed by devices."""

from .handler import RecordIngestor
from .parsers import parse_attendance_line, parse_user_line

__all__ = [
    "RecordIngestor",
    "parse_attendance_line",
    "parse_user_line",
]
