"""Unit tests for the uploaded table parsers."""

from iclock_api.ingest import parse_attendance_line, parse_user_line


class TestAttendanceParser:
    """Test ATTLOG line parsing."""

    def test_full_line(self):
        record = parse_attendance_line("1001\t2024-03-01 08:15:02\t1\t0\t0\t0")
        assert record == {
            "PIN": "1001",
            "Timestamp": "2024-03-01 08:15:02",
            "VerifyMode": "1",
            "InOutMode": "0",
            "WorkCode": "0",
        }

    def test_short_line(self):
        record = parse_attendance_line("1001 2024-03-01")
        assert record["PIN"] == "1001"
        assert record["Timestamp"] == "2024-03-01"
        assert record["VerifyMode"] == ""
        assert record["WorkCode"] == ""


class TestUserParser:
    """Test OPERLOG USER line parsing."""

    def test_tab_separated(self):
        user = parse_user_line(
            "USER PIN=7\tName=Jane Doe\tPri=14\tPasswd=\tCard=[0000]\tGrp=1\tTZ=0000000100000000"
        )

        assert user["PIN"] == "7"
        assert user["Name"] == "Jane Doe"
        assert user["Privilege"] == 14
        assert user["Password"] == ""
        assert user["Card"] == "[0000]"
        assert user["Group"] == "1"
        assert user["TZ"] == "0000000100000000"
        assert user["Expires"] == "0"
        assert user["ValidCount"] == "0"
        # Raw fields are kept as well
        assert user["Pri"] == "14"

    def test_space_separated(self):
        user = parse_user_line("USER PIN=8 Name=Bob Pri=0 Expires=1")
        assert user["PIN"] == "8"
        assert user["Name"] == "Bob"
        assert user["Privilege"] == 0
        assert user["Expires"] == "1"

    def test_missing_values(self):
        user = parse_user_line("USER Name=NoPin Pri=admin")
        assert user["PIN"] is None
        assert user["Privilege"] == 0
        assert user["StartDatetime"] == "0"
