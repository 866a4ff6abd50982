"""Unit tests for command queue models."""

from datetime import datetime, timezone

from iclock_api.queue.models import CommandStatus, DeviceCommand, QueueStats


class TestCommandStatus:
    """Test CommandStatus enum."""

    def test_values(self):
        assert CommandStatus.PENDING.value == "pending"
        assert CommandStatus.SENT.value == "sent"
        assert CommandStatus.DONE.value == "done"

    def test_is_string(self):
        assert CommandStatus.PENDING == "pending"


class TestDeviceCommand:
    """Test DeviceCommand dataclass."""

    def test_defaults(self):
        """A new command starts pending with only queued_at set."""
        command = DeviceCommand(id=1, text="CHECK")
        assert command.status == CommandStatus.PENDING
        assert command.queued_at is not None
        assert command.queued_at.tzinfo is not None
        assert command.sent_at is None
        assert command.done_at is None
        assert command.device_ack is None
        assert command.delivery_attempts == 0

    def test_copy_is_detached(self):
        """Mutating a copy leaves the original untouched."""
        command = DeviceCommand(id=1, text="CHECK")
        copy = command.copy()
        copy.status = CommandStatus.SENT
        copy.device_ack = "OK"

        assert copy == DeviceCommand(
            id=1,
            text="CHECK",
            status=CommandStatus.SENT,
            queued_at=command.queued_at,
            device_ack="OK",
        )
        assert command.status == CommandStatus.PENDING
        assert command.device_ack is None

    def test_to_dict(self):
        queued = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        sent = datetime(2024, 1, 1, 8, 1, tzinfo=timezone.utc)
        command = DeviceCommand(
            id=3,
            text="DATA QUERY ATTLOG",
            status=CommandStatus.SENT,
            queued_at=queued,
            sent_at=sent,
            delivery_attempts=1,
        )

        assert command.to_dict() == {
            "id": 3,
            "command": "DATA QUERY ATTLOG",
            "status": "sent",
            "queued_at": "2024-01-01T08:00:00+00:00",
            "sent_at": "2024-01-01T08:01:00+00:00",
            "done_at": None,
            "device_ack": None,
            "delivery_attempts": 1,
        }


class TestQueueStats:
    """Test QueueStats dataclass."""

    def test_total(self):
        stats = QueueStats(devices=2, pending=3, sent=4)
        assert stats.total == 7

    def test_to_dict(self):
        stats = QueueStats(devices=1, pending=0, sent=2)
        assert stats.to_dict() == {"devices": 1, "pending": 0, "sent": 2, "total": 2}
