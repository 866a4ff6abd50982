"""
In-memory command queue store shared by the device and operator endpoints.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .models import CommandStatus, DeviceCommand, QueueStats, utcnow

logger = logging.getLogger(__name__)


class DeviceQueue:
    """Ordered commands and id sequence for a single device serial number."""

    def __init__(self, sn: str):
        self.sn = sn
        self.commands: list[DeviceCommand] = []
        self.last_id = 0
        self.lock = threading.Lock()

    def advance(self) -> int:
        """Bump the sequence counter. Caller must hold ``lock``."""
        self.last_id += 1
        return self.last_id

    def find(self, command_id: int) -> int:
        """Index of the command with ``command_id`` or -1. Caller must hold ``lock``."""
        for index, command in enumerate(self.commands):
            if command.id == command_id:
                return index
        return -1


class CommandQueueStore:
    """
    Maps device serial numbers to their command queues.

    Every public method completes without waiting on I/O. The device mapping
    is guarded by a store-wide lock that is only held while looking up or
    creating a queue; each queue then serializes its own mutations, so
    traffic for different devices never contends.

    Queues are never discarded once created: the sequence counter lives on the
    queue, and ids must not be reused after the command list drains.
    """

    def __init__(self) -> None:
        self._queues: dict[str, DeviceQueue] = {}
        self._lock = threading.Lock()

    def _get_queue(self, sn: str, create: bool = False) -> Optional[DeviceQueue]:
        with self._lock:
            queue = self._queues.get(sn)
            if queue is None and create:
                queue = DeviceQueue(sn)
                self._queues[sn] = queue
            return queue

    def _all_queues(self) -> list[DeviceQueue]:
        with self._lock:
            return list(self._queues.values())

    def next_id(self, sn: str) -> int:
        """
        Reserve the next command id for a device.

        Args:
            sn: Device serial number

        Returns:
            The reserved id (1 for the first call on a device)
        """
        queue = self._get_queue(sn, create=True)
        with queue.lock:
            return queue.advance()

    def enqueue(self, sn: str, text: str) -> DeviceCommand:
        """
        Append a new pending command to a device queue.

        Args:
            sn: Device serial number
            text: Opaque command payload

        Returns:
            A copy of the created command
        """
        queue = self._get_queue(sn, create=True)
        with queue.lock:
            command = DeviceCommand(id=queue.advance(), text=text)
            queue.commands.append(command)
            logger.debug(
                f"Queued command C:{command.id}:{text} for {sn}",
                extra={"sn": sn, "command_id": command.id},
            )
            return command.copy()

    def pending_for(self, sn: str) -> list[DeviceCommand]:
        """Return copies of the pending commands for a device, in queue order."""
        queue = self._get_queue(sn)
        if queue is None:
            return []
        with queue.lock:
            return [c.copy() for c in queue.commands if c.status == CommandStatus.PENDING]

    def mark_sent(
        self,
        sn: str,
        ids: Iterable[int],
        now: Optional[datetime] = None,
    ) -> int:
        """
        Transition the given pending commands to sent.

        Ids that are unknown or not pending are ignored.

        Returns:
            Number of commands transitioned
        """
        queue = self._get_queue(sn)
        if queue is None:
            return 0
        wanted = set(ids)
        now = now or utcnow()
        with queue.lock:
            return self._mark_sent_locked(queue, wanted, now)

    @staticmethod
    def _mark_sent_locked(queue: DeviceQueue, ids: set[int], now: datetime) -> int:
        marked = 0
        for command in queue.commands:
            if command.id in ids and command.status == CommandStatus.PENDING:
                command.status = CommandStatus.SENT
                command.sent_at = now
                command.delivery_attempts += 1
                marked += 1
        return marked

    def take_pending(self, sn: str, now: Optional[datetime] = None) -> list[DeviceCommand]:
        """
        Read the pending commands for a device and mark them sent in one step.

        Two concurrent callers can never both receive the same command.

        Returns:
            Copies of the commands as delivered (status ``sent``)
        """
        queue = self._get_queue(sn)
        if queue is None:
            return []
        now = now or utcnow()
        with queue.lock:
            ids = {c.id for c in queue.commands if c.status == CommandStatus.PENDING}
            if not ids:
                return []
            self._mark_sent_locked(queue, ids, now)
            return [c.copy() for c in queue.commands if c.id in ids]

    def acknowledge(
        self,
        sn: str,
        command_id: int,
        result: str,
        now: Optional[datetime] = None,
    ) -> Optional[DeviceCommand]:
        """
        Complete a command and evict it from the queue.

        A pending command is accepted as well as a sent one, since devices
        retransmit acknowledgments.

        Args:
            sn: Device serial number
            command_id: Id reported by the device
            result: Free-form result captured from the device
            now: Completion timestamp override

        Returns:
            Copy of the completed command, or None if no command matched
        """
        queue = self._get_queue(sn)
        if queue is None:
            return None
        with queue.lock:
            index = queue.find(command_id)
            if index == -1:
                return None
            command = queue.commands.pop(index)
            command.status = CommandStatus.DONE
            command.done_at = now or utcnow()
            command.device_ack = result
            return command.copy()

    def ack_by_id(self, sn: str, command_id: int, result: str) -> bool:
        """Acknowledge a command; True if it was found."""
        return self.acknowledge(sn, command_id, result) is not None

    def snapshot(self, sn: str) -> list[DeviceCommand]:
        """Return copies of every command currently queued for a device."""
        queue = self._get_queue(sn)
        if queue is None:
            return []
        with queue.lock:
            return [c.copy() for c in queue.commands]

    def requeue_stale(
        self,
        timeout_seconds: float,
        now: Optional[datetime] = None,
    ) -> list[tuple[str, int]]:
        """
        Revert sent commands that were never acknowledged back to pending.

        Args:
            timeout_seconds: Minimum age of the delivery before reverting
            now: Reference time override

        Returns:
            (sn, command id) pairs that were reverted
        """
        now = now or utcnow()
        cutoff = now - timedelta(seconds=timeout_seconds)
        reverted: list[tuple[str, int]] = []

        for queue in self._all_queues():
            with queue.lock:
                for command in queue.commands:
                    if (
                        command.status == CommandStatus.SENT
                        and command.sent_at is not None
                        and command.sent_at <= cutoff
                    ):
                        command.status = CommandStatus.PENDING
                        command.sent_at = None
                        reverted.append((queue.sn, command.id))

        if reverted:
            logger.info(f"Reverted {len(reverted)} unacknowledged command(s) to pending")
        return reverted

    def devices(self) -> list[str]:
        """Serial numbers that have had at least one command."""
        with self._lock:
            return sorted(self._queues)

    def stats(self) -> QueueStats:
        """
        Get current queue statistics.

        Returns:
            Queue statistics
        """
        pending = 0
        sent = 0
        queues = self._all_queues()
        for queue in queues:
            with queue.lock:
                for command in queue.commands:
                    if command.status == CommandStatus.PENDING:
                        pending += 1
                    elif command.status == CommandStatus.SENT:
                        sent += 1
        return QueueStats(devices=len(queues), pending=pending, sent=sent)
