"""Command broker bridging the operator API and polling devices.

Enqueue admits work from the operator side, poll hands pending work to a
device and marks it sent, and the two acknowledgment encodings both funnel
into :meth:`CommandBroker.acknowledge`.
"""

import logging
from typing import Optional

from .metrics import MetricsCollector
from .protocol import (
    OK_SENTINEL,
    MalformedAckLine,
    format_poll_response,
    parse_ack_line,
    parse_command_id,
    result_from_return_code,
    split_ack_lines,
)
from .queue import CommandQueueStore, DeviceCommand

logger = logging.getLogger(__name__)

ENCODING_BATCH = "batch"
ENCODING_STRUCTURED = "structured"


class InvalidCommandRequest(ValueError):
    """Raised when an operator request is missing required fields."""

    pass


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class CommandBroker:
    """Runs the pending -> sent -> done command state machine."""

    def __init__(
        self,
        store: CommandQueueStore,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the broker.

        Args:
            store: Command queue store holding every device queue
            metrics: Optional metrics collector (None disables metrics)
        """
        self.store = store
        self.metrics = metrics

    def _update_depth(self) -> None:
        if self.metrics:
            stats = self.store.stats()
            self.metrics.update_queue_depth(stats.pending, stats.sent)

    def enqueue(self, sn: Optional[str], text: Optional[str]) -> DeviceCommand:
        """
        Queue a command for a device.

        Args:
            sn: Device serial number
            text: Command payload, passed to the device untouched

        Returns:
            The created command, including its assigned id

        Raises:
            InvalidCommandRequest: If the serial number or payload is missing
        """
        if _is_blank(sn) or _is_blank(text):
            raise InvalidCommandRequest("SN and command are required")

        command = self.store.enqueue(str(sn), str(text))
        logger.info(
            f"Queued command for {sn}: C:{command.id}:{command.text}",
            extra={"sn": sn, "command_id": command.id},
        )
        if self.metrics:
            self.metrics.record_queued()
            self._update_depth()
        return command

    def poll(self, sn: Optional[str]) -> str:
        """
        Answer a device poll.

        Pending commands are returned as command lines and marked sent in the
        same step. Missing or unknown devices and empty queues get ``OK``.
        """
        if _is_blank(sn):
            logger.debug("Poll without SN, answering OK")
            return OK_SENTINEL

        delivered = self.store.take_pending(sn)
        if self.metrics:
            self.metrics.record_poll(len(delivered))

        body = format_poll_response(delivered)
        if delivered:
            logger.info(
                f"Sending {len(delivered)} command(s) to {sn}:\n{body.strip()}",
                extra={"sn": sn, "command_ids": [c.id for c in delivered]},
            )
            self._update_depth()
        return body

    def acknowledge(self, sn: str, command_id: int, result: str, encoding: str) -> bool:
        """
        Complete a command reported by a device.

        Unknown ids are stale or duplicate acks; they are logged and ignored.

        Returns:
            True if a queued command was completed
        """
        command = self.store.acknowledge(sn, command_id, result)
        if command is None:
            logger.warning(
                f"Ack for unknown command id {command_id} (SN={sn})",
                extra={"sn": sn, "command_id": command_id, "encoding": encoding},
            )
            if self.metrics:
                self.metrics.record_unmatched_ack(encoding)
            return False

        logger.info(
            f"Command C:{command_id}:{command.text} acknowledged by {sn} -> {result}",
            extra={"sn": sn, "command_id": command_id, "encoding": encoding},
        )
        if self.metrics:
            self.metrics.record_ack(encoding, result)
            self._update_depth()
        return True

    def ack_batch(self, sn: Optional[str], info: Optional[str]) -> str:
        """
        Handle a batch of ``C:<id>:<result>`` ack lines.

        Malformed lines are skipped without affecting the rest of the batch.

        Returns:
            Always ``OK``
        """
        if _is_blank(sn) or _is_blank(info):
            return OK_SENTINEL

        for line in split_ack_lines(info):
            try:
                ack = parse_ack_line(line)
            except MalformedAckLine as e:
                logger.warning(f"{e} (SN={sn})", extra={"sn": sn})
                if self.metrics:
                    self.metrics.record_malformed_ack_line()
                continue
            self.acknowledge(sn, ack.command_id, ack.result, ENCODING_BATCH)

        return OK_SENTINEL

    def ack_structured(
        self,
        sn: Optional[str],
        command_id: Optional[str],
        return_code: Optional[str],
        command_text: Optional[str],
    ) -> str:
        """
        Handle a single ack carried as ``ID``/``Return``/``CMD`` fields.

        Returns:
            Always ``OK``
        """
        if _is_blank(sn) or _is_blank(command_id) or _is_blank(command_text):
            logger.debug(f"Incomplete structured ack from {sn or '<no SN>'}, ignoring")
            return OK_SENTINEL

        parsed_id = parse_command_id(command_id)
        if parsed_id is None:
            logger.warning(
                f"Non-numeric command id in ack C:{command_id}:{command_text} from {sn}",
                extra={"sn": sn},
            )
            if self.metrics:
                self.metrics.record_unmatched_ack(ENCODING_STRUCTURED)
            return OK_SENTINEL

        self.acknowledge(
            sn, parsed_id, result_from_return_code(return_code), ENCODING_STRUCTURED
        )
        return OK_SENTINEL

    def inspect(self, sn: str) -> list[DeviceCommand]:
        """Return the commands currently queued for a device."""
        return self.store.snapshot(sn)
