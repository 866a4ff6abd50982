"""Collection-style access to device records."""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy import select

from .engine import DatabaseEngine
from .models import AttendanceLog, DeviceUser

logger = logging.getLogger(__name__)

COLLECTION_ATTENDANCE = "attendance"
COLLECTION_USERS = "users"

# Keys lifted into columns; everything else stays in DeviceUser.fields
_USER_COLUMNS = {"PIN", "Name", "Privilege", "SN", "createdAt", "updatedAt"}


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RecordRepository:
    """
    Document-style store for records uploaded by devices.

    ``load``/``save`` address a collection by name; the typed helpers are
    what the ingest path uses.
    """

    def __init__(self, db_engine: DatabaseEngine):
        self.db_engine = db_engine

    def load(self, collection: str) -> list[dict[str, Any]]:
        """
        Load every record of a collection.

        Raises:
            KeyError: For an unknown collection name
        """
        if collection == COLLECTION_ATTENDANCE:
            return self.load_attendance()
        if collection == COLLECTION_USERS:
            return self.load_users()
        raise KeyError(f"Unknown collection: {collection}")

    def save(self, collection: str, records: Iterable[dict[str, Any]]) -> int:
        """
        Save records into a collection (attendance appends, users upsert by PIN).

        Raises:
            KeyError: For an unknown collection name
        """
        if collection == COLLECTION_ATTENDANCE:
            return self.save_attendance(records)
        if collection == COLLECTION_USERS:
            return self.upsert_users(records)
        raise KeyError(f"Unknown collection: {collection}")

    def save_attendance(
        self,
        logs: Iterable[dict[str, Any]],
        sn: Optional[str] = None,
    ) -> int:
        """
        Append attendance logs.

        Args:
            logs: Parsed ATTLOG records
            sn: Uploading device, overrides any ``SN`` key in the records

        Returns:
            Number of logs stored
        """
        count = 0
        with self.db_engine.session_scope() as session:
            for log in logs:
                session.add(
                    AttendanceLog(
                        pin=log.get("PIN"),
                        timestamp=log.get("Timestamp"),
                        verify_mode=log.get("VerifyMode", ""),
                        in_out_mode=log.get("InOutMode", ""),
                        work_code=log.get("WorkCode", ""),
                        sn=sn if sn is not None else log.get("SN"),
                    )
                )
                count += 1
        return count

    def upsert_users(
        self,
        users: Iterable[dict[str, Any]],
        sn: Optional[str] = None,
    ) -> int:
        """
        Insert or update users by PIN.

        Records without a PIN are skipped.

        Returns:
            Number of users written
        """
        count = 0
        with self.db_engine.session_scope() as session:
            for user in users:
                pin = user.get("PIN")
                if not pin:
                    logger.warning(f"Skipping user record without PIN: {user}")
                    continue

                fields = {k: v for k, v in user.items() if k not in _USER_COLUMNS}
                existing = session.scalars(
                    select(DeviceUser).where(DeviceUser.pin == pin)
                ).first()

                if existing is None:
                    session.add(
                        DeviceUser(
                            pin=pin,
                            name=user.get("Name"),
                            privilege=int(user.get("Privilege") or 0),
                            fields=fields,
                            sn=sn if sn is not None else user.get("SN"),
                        )
                    )
                else:
                    existing.name = user.get("Name")
                    existing.privilege = int(user.get("Privilege") or 0)
                    existing.fields = fields
                    existing.sn = sn if sn is not None else user.get("SN")
                    existing.updated_at = _now()
                # Flush so a PIN repeated within one upload updates instead of inserting twice
                session.flush()
                count += 1
        return count

    def load_attendance(self) -> list[dict[str, Any]]:
        with self.db_engine.session_scope() as session:
            rows = session.scalars(select(AttendanceLog).order_by(AttendanceLog.id)).all()
            return [row.to_dict() for row in rows]

    def load_users(self) -> list[dict[str, Any]]:
        with self.db_engine.session_scope() as session:
            rows = session.scalars(select(DeviceUser).order_by(DeviceUser.id)).all()
            return [row.to_dict() for row in rows]
