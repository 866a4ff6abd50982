"""Unit tests for API request/response schemas."""

from iclock_api.api.schemas import (
    CommandSchema,
    ErrorResponse,
    QueueCommandRequest,
    QueueStatsSchema,
)
from iclock_api.queue import DeviceCommand, QueueStats


class TestErrorResponse:
    """Test ErrorResponse schema."""

    def test_error_only(self):
        response = ErrorResponse(error="SN is required")
        assert response.model_dump() == {"error": "SN is required", "detail": None}

    def test_error_with_detail(self):
        response = ErrorResponse(error="Validation error", detail=[{"loc": ["body"]}])
        assert response.detail == [{"loc": ["body"]}]


class TestQueueCommandRequest:
    """Test QueueCommandRequest schema."""

    def test_alias(self):
        request = QueueCommandRequest.model_validate({"SN": "A1", "command": "CHECK"})
        assert request.sn == "A1"
        assert request.command == "CHECK"

    def test_field_name(self):
        assert QueueCommandRequest(sn="A1").sn == "A1"

    def test_numeric_serial_is_string(self):
        request = QueueCommandRequest.model_validate({"SN": 12345, "command": "CHECK"})
        assert request.sn == "12345"

    def test_all_optional(self):
        request = QueueCommandRequest()
        assert request.sn is None
        assert request.command is None


class TestCommandSchema:
    """Test CommandSchema built from a DeviceCommand."""

    def test_from_command(self):
        schema = CommandSchema(**DeviceCommand(id=4, text="CHECK").to_dict())
        assert schema.id == 4
        assert schema.command == "CHECK"
        assert schema.status == "pending"
        assert schema.sent_at is None


class TestQueueStatsSchema:
    """Test QueueStatsSchema."""

    def test_from_stats(self):
        schema = QueueStatsSchema(**QueueStats(devices=1, pending=2, sent=3).to_dict())
        assert schema.total == 5
