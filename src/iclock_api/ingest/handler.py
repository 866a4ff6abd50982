"""Handler for table uploads from devices."""

import logging
from typing import Optional

from ..database.repository import RecordRepository
from ..metrics import MetricsCollector
from ..protocol import OK_SENTINEL
from .parsers import USER_PREFIX, parse_attendance_line, parse_user_line

logger = logging.getLogger(__name__)

TABLE_ATTLOG = "ATTLOG"
TABLE_OPERLOG = "OPERLOG"

# Replies the terminals are known to accept for each table
ATTLOG_RESPONSE = "OK:ATTLOG 10001"
OPERLOG_RESPONSE = "OK:OPERLOG 10001"


class RecordIngestor:
    """Parses uploaded tables and persists them through the repository."""

    def __init__(
        self,
        repository: RecordRepository,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.repository = repository
        self.metrics = metrics

    def handle_upload(self, sn: Optional[str], table: Optional[str], body: str) -> str:
        """
        Handle a ``POST /iclock/cdata.aspx`` upload.

        Args:
            sn: Uploading device serial number
            table: Table name from the query string
            body: Raw text body

        Returns:
            Plain-text reply for the device
        """
        if table == TABLE_ATTLOG:
            count = self._ingest_attendance(sn, body)
            if count:
                logger.info(f"Saved {count} attendance logs (SN={sn})", extra={"sn": sn})
            return ATTLOG_RESPONSE

        if table == TABLE_OPERLOG:
            count = self._ingest_users(sn, body)
            if count:
                logger.info(f"Synced {count} users (SN={sn})", extra={"sn": sn})
            return OPERLOG_RESPONSE

        logger.debug(f"Upload without a handled table (table={table}, SN={sn}): {body}")
        return OK_SENTINEL

    def _ingest_attendance(self, sn: Optional[str], body: str) -> int:
        lines = [line.strip() for line in (body or "").split("\n") if line.strip()]
        logs = [parse_attendance_line(line) for line in lines]
        if not logs:
            return 0
        count = self.repository.save_attendance(logs, sn=sn)
        if self.metrics:
            self.metrics.record_ingested(TABLE_ATTLOG, count)
        return count

    def _ingest_users(self, sn: Optional[str], body: str) -> int:
        lines = [
            line.strip()
            for line in (body or "").split("\n")
            if line.strip().startswith(USER_PREFIX)
        ]
        users = [parse_user_line(line) for line in lines]
        if not users:
            return 0
        count = self.repository.upsert_users(users, sn=sn)
        if self.metrics:
            self.metrics.record_ingested(TABLE_OPERLOG, count)
        return count
