"""Unit tests for the iClock wire codec."""

import pytest

from iclock_api.protocol import (
    OK_SENTINEL,
    AckLine,
    MalformedAckLine,
    format_command_line,
    format_poll_response,
    parse_ack_line,
    result_from_return_code,
    parse_command_id,
    split_ack_lines,
)
from iclock_api.queue import DeviceCommand


class TestPollResponse:
    """Test command line formatting."""

    def test_command_line(self):
        assert format_command_line(DeviceCommand(id=7, text="CHECK")) == "C:7:CHECK"

    def test_empty_is_sentinel(self):
        assert format_poll_response([]) == OK_SENTINEL

    def test_single_command_has_trailing_newline(self):
        assert format_poll_response([DeviceCommand(id=1, text="CHECK")]) == "C:1:CHECK\n"

    def test_multiple_commands(self):
        commands = [
            DeviceCommand(id=1, text="CHECK"),
            DeviceCommand(id=2, text="DATA QUERY ATTLOG"),
        ]
        assert format_poll_response(commands) == "C:1:CHECK\nC:2:DATA QUERY ATTLOG\n"

    def test_payload_passed_untouched(self):
        command = DeviceCommand(id=3, text="DATA UPDATE USERINFO PIN=1\tName=A:B")
        assert format_poll_response([command]) == "C:3:DATA UPDATE USERINFO PIN=1\tName=A:B\n"


class TestAckLines:
    """Test batch ack decoding."""

    def test_split_handles_crlf_and_blanks(self):
        assert split_ack_lines("C:1:OK\r\n\n  C:2:OK  \n") == ["C:1:OK", "C:2:OK"]

    def test_split_empty(self):
        assert split_ack_lines("") == []
        assert split_ack_lines(None) == []

    def test_parse(self):
        assert parse_ack_line("C:12:OK") == AckLine(command_id=12, result="OK")

    def test_parse_keeps_separators_in_result(self):
        assert parse_ack_line("C:1:ERR:timeout").result == "ERR:timeout"

    def test_parse_decimal_id(self):
        assert parse_ack_line("C:2.0:OK") == AckLine(command_id=2, result="OK")

    def test_parse_empty_result(self):
        assert parse_ack_line("C:1:") == AckLine(command_id=1, result="")

    @pytest.mark.parametrize(
        "line",
        ["X:1", "C:1", "X:1:OK", "C:abc:OK", "C:1.5:OK", "C::OK", "", "OK"],
    )
    def test_parse_malformed(self, line):
        with pytest.raises(MalformedAckLine):
            parse_ack_line(line)

    def test_malformed_is_value_error(self):
        assert issubclass(MalformedAckLine, ValueError)


class TestCommandId:
    """Test numeric command id decoding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1", 1), (" 7 ", 7), ("1.0", 1), ("1e1", 10), ("12", 12)],
    )
    def test_numeric(self, value, expected):
        assert parse_command_id(value) == expected

    @pytest.mark.parametrize("value", [None, "", "  ", "abc", "1.5", "nan", "inf"])
    def test_rejected(self, value):
        assert parse_command_id(value) is None


class TestReturnCode:
    """Test structured ack return code mapping."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [("0", "OK"), (" 0 ", "OK"), ("-1", "ERR"), ("2", "ERR"), ("", "ERR"), (None, "ERR")],
    )
    def test_mapping(self, code, expected):
        assert result_from_return_code(code) == expected
