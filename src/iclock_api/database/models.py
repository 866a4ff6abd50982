"""SQLAlchemy database models for records uploaded by devices."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class AttendanceLog(Base):
    """A punch uploaded by a terminal in an ATTLOG table push."""

    __tablename__ = "attendance_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pin: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    timestamp: Mapped[Optional[str]] = mapped_column(String(32))  # as reported by the device
    verify_mode: Mapped[str] = mapped_column(String(16), default="")
    in_out_mode: Mapped[str] = mapped_column(String(16), default="")
    work_code: Mapped[str] = mapped_column(String(16), default="")
    sn: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    received_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    def to_dict(self) -> dict[str, Any]:
        return {
            "PIN": self.pin,
            "Timestamp": self.timestamp,
            "VerifyMode": self.verify_mode,
            "InOutMode": self.in_out_mode,
            "WorkCode": self.work_code,
            "SN": self.sn,
            "receivedAt": _iso(self.received_at),
        }


class DeviceUser(Base):
    """A user enrolled on a terminal, keyed by PIN (OPERLOG USER lines)."""

    __tablename__ = "device_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pin: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(128))
    privilege: Mapped[int] = mapped_column(Integer, default=0)
    fields: Mapped[dict] = mapped_column(JSON, default=dict)  # every raw key=value pair
    sn: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.fields or {})
        data.update(
            {
                "PIN": self.pin,
                "Name": self.name,
                "Privilege": self.privilege,
                "SN": self.sn,
                "createdAt": _iso(self.created_at),
            }
        )
        if self.updated_at is not None:
            data["updatedAt"] = _iso(self.updated_at)
        return data
