"""
Background redelivery of commands that were sent but never acknowledged.
"""
import asyncio
import logging
from typing import Callable, Optional

from .store import CommandQueueStore

logger = logging.getLogger(__name__)


class RedeliveryMonitor:
    """
    Periodically reverts stale ``sent`` commands to ``pending``.

    A command stuck in ``sent`` (device lost the response, or rebooted before
    executing it) is otherwise never handed out again. With a timeout of 0 the
    monitor is disabled and delivered commands stay ``sent`` until acked.
    """

    def __init__(
        self,
        store: CommandQueueStore,
        timeout_seconds: float = 0.0,
        interval_seconds: float = 5.0,
        on_requeue: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize the monitor.

        Args:
            store: Command queue store to sweep
            timeout_seconds: Age after which a sent command is redelivered (0 disables)
            interval_seconds: Time between sweeps
            on_requeue: Optional callback receiving the number of reverted commands
        """
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.interval_seconds = interval_seconds
        self.on_requeue = on_requeue
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.timeout_seconds > 0

    def sweep(self) -> int:
        """Run a single pass; returns the number of commands reverted."""
        if not self.enabled:
            return 0
        reverted = self.store.requeue_stale(self.timeout_seconds)
        for sn, command_id in reverted:
            logger.warning(
                f"No ack for C:{command_id} from {sn} within {self.timeout_seconds}s, redelivering",
                extra={"sn": sn, "command_id": command_id},
            )
        if reverted and self.on_requeue:
            self.on_requeue(len(reverted))
        return len(reverted)

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in redelivery sweep: {e}", exc_info=True)

    def start(self) -> None:
        """Start the background sweep task (no-op when disabled)."""
        if not self.enabled:
            logger.info("Command redelivery disabled")
            return
        if self._task is None or self._task.done():
            logger.info(
                f"Starting command redelivery monitor "
                f"(timeout {self.timeout_seconds}s, every {self.interval_seconds}s)"
            )
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
