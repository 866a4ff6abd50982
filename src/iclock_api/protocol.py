"""Wire encoding of the iClock push protocol command channel.

Commands travel to the device as ``C:<id>:<payload>`` lines and come back,
either as the same line shape with a free-form result in place of the
payload, or as discrete ``ID``/``Return``/``CMD`` form fields.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .queue.models import DeviceCommand

# Universal "nothing more to say" body
OK_SENTINEL = "OK"

COMMAND_MARKER = "C"
FIELD_SEPARATOR = ":"

RETURN_CODE_SUCCESS = "0"
ACK_RESULT_OK = "OK"
ACK_RESULT_ERR = "ERR"

_LINE_SPLIT = re.compile(r"\r?\n")


class MalformedAckLine(ValueError):
    """Raised when a batch acknowledgment line cannot be decoded."""

    pass


@dataclass(frozen=True)
class AckLine:
    """One decoded ``C:<id>:<result>`` acknowledgment entry."""

    command_id: int
    result: str


def format_command_line(command: DeviceCommand) -> str:
    return f"{COMMAND_MARKER}{FIELD_SEPARATOR}{command.id}{FIELD_SEPARATOR}{command.text}"


def format_poll_response(commands: Iterable[DeviceCommand]) -> str:
    """
    Build the body answering a device poll.

    Returns:
        ``OK`` when there is nothing to deliver, otherwise one command line
        per command with a trailing newline
    """
    lines = [format_command_line(c) for c in commands]
    if not lines:
        return OK_SENTINEL
    return "\n".join(lines) + "\n"


def split_ack_lines(info: str) -> list[str]:
    """Split a batch ack payload into trimmed, non-empty lines."""
    return [line.strip() for line in _LINE_SPLIT.split(info or "") if line.strip()]


def parse_command_id(value: Optional[str]) -> Optional[int]:
    """
    Decode a command id as a number.

    Integral values in any numeric spelling (``1``, ``1.0``, ``1e0``) are
    accepted; anything else, blanks included, yields None.
    """
    if value is None or not str(value).strip():
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)


def parse_ack_line(line: str) -> AckLine:
    """
    Decode a single ``C:<id>:<result>`` line.

    Everything after the second separator is the result, separators included.

    Raises:
        MalformedAckLine: If the line has fewer than three fields, the wrong
            marker, or a non-numeric id
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < 3 or parts[0] != COMMAND_MARKER:
        raise MalformedAckLine(f"Unrecognized ack format: {line}")
    command_id = parse_command_id(parts[1])
    if command_id is None:
        raise MalformedAckLine(f"Non-numeric command id in ack: {line}")
    return AckLine(command_id=command_id, result=FIELD_SEPARATOR.join(parts[2:]))


def result_from_return_code(return_code: Optional[str]) -> str:
    """Map a structured ``Return`` field to the stored ack result."""
    if return_code is not None and str(return_code).strip() == RETURN_CODE_SUCCESS:
        return ACK_RESULT_OK
    return ACK_RESULT_ERR
