"""Parsers for the flat text tables uploaded to ``/iclock/cdata.aspx``."""

import re
from typing import Any

USER_PREFIX = "USER"

_WHITESPACE = re.compile(r"\s+")


def _int_or_zero(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_attendance_line(line: str) -> dict[str, str]:
    """
    Parse one ATTLOG line.

    Lines look like ``<PIN>\\t<date> <time>\\t<verify>\\t<inout>\\t<workcode>...``;
    the date and time tokens are joined back into ``Timestamp``.
    """
    parts = _WHITESPACE.split(line.strip())

    def part(index: int) -> str:
        return parts[index] if len(parts) > index else ""

    timestamp = part(1)
    if part(2):
        timestamp = f"{timestamp} {part(2)}"

    return {
        "PIN": part(0),
        "Timestamp": timestamp,
        "VerifyMode": part(3),
        "InOutMode": part(4),
        "WorkCode": part(5),
    }


def parse_user_line(line: str) -> dict[str, Any]:
    """
    Parse one OPERLOG ``USER`` line of ``key=value`` pairs.

    Pairs are tab-separated on the wire, which lets names contain spaces;
    lines without tabs fall back to whitespace splitting.
    """
    body = line.strip()
    if body.startswith(USER_PREFIX):
        body = body[len(USER_PREFIX):].strip()

    tokens = body.split("\t") if "\t" in body else _WHITESPACE.split(body)
    fields: dict[str, str] = {}
    for token in tokens:
        key, _, value = token.strip().partition("=")
        if key:
            fields[key] = value

    record: dict[str, Any] = dict(fields)
    record.update(
        {
            "PIN": fields.get("PIN"),
            "Name": fields.get("Name"),
            "Privilege": _int_or_zero(fields.get("Pri", "")),
            "Password": fields.get("Passwd", ""),
            "Card": fields.get("Card", ""),
            "Group": fields.get("Grp", ""),
            "TZ": fields.get("TZ", ""),
            "Expires": fields.get("Expires") or "0",
            "StartDatetime": fields.get("StartDatetime") or "0",
            "EndDatetime": fields.get("EndDatetime") or "0",
            "ValidCount": fields.get("ValidCount") or "0",
        }
    )
    return record
