"""Prometheus metrics collector."""

import logging

from prometheus_client import Counter, Gauge

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and exposes Prometheus metrics."""

    def __init__(self):
        """Initialize metrics."""

        # Command lifecycle
        self.commands_queued_total = Counter(
            "iclock_commands_queued_total", "Total commands queued by operators"
        )

        self.commands_delivered_total = Counter(
            "iclock_commands_delivered_total", "Total commands handed to devices on poll"
        )

        self.commands_acknowledged_total = Counter(
            "iclock_commands_acknowledged_total",
            "Total commands completed by a device ack",
            ["encoding", "outcome"],
        )

        self.commands_redelivered_total = Counter(
            "iclock_commands_redelivered_total",
            "Sent commands reverted to pending after the delivery timeout",
        )

        # Protocol anomalies
        self.acks_unmatched_total = Counter(
            "iclock_acks_unmatched_total",
            "Acks for command ids that are not queued (stale or duplicate)",
            ["encoding"],
        )

        self.ack_lines_malformed_total = Counter(
            "iclock_ack_lines_malformed_total", "Batch ack lines that could not be decoded"
        )

        # Polling
        self.polls_total = Counter(
            "iclock_polls_total", "Total device polls", ["result"]
        )

        # Record uploads
        self.records_ingested_total = Counter(
            "iclock_records_ingested_total", "Records received from devices", ["table"]
        )

        # Queue depth
        self.queued_commands = Gauge(
            "iclock_queued_commands", "Commands currently queued", ["status"]
        )

        # Application health
        self.errors_total = Counter(
            "iclock_errors_total", "Total errors encountered", ["component", "error_type"]
        )

    def record_queued(self) -> None:
        """Record a queued command."""
        self.commands_queued_total.inc()

    def record_poll(self, delivered: int) -> None:
        """Record a device poll and the number of commands delivered."""
        self.polls_total.labels(result="commands" if delivered else "empty").inc()
        if delivered:
            self.commands_delivered_total.inc(delivered)

    def record_ack(self, encoding: str, result: str) -> None:
        """Record a completed command."""
        outcome = "ok" if result == "OK" else "error"
        self.commands_acknowledged_total.labels(encoding=encoding, outcome=outcome).inc()

    def record_unmatched_ack(self, encoding: str) -> None:
        """Record an ack that did not match a queued command."""
        self.acks_unmatched_total.labels(encoding=encoding).inc()

    def record_malformed_ack_line(self) -> None:
        """Record an undecodable batch ack line."""
        self.ack_lines_malformed_total.inc()

    def record_redelivered(self, count: int) -> None:
        """Record commands reverted to pending."""
        self.commands_redelivered_total.inc(count)

    def record_ingested(self, table: str, count: int) -> None:
        """Record uploaded records."""
        self.records_ingested_total.labels(table=table).inc(count)

    def update_queue_depth(self, pending: int, sent: int) -> None:
        """Update queue depth gauges."""
        self.queued_commands.labels(status="pending").set(pending)
        self.queued_commands.labels(status="sent").set(sent)

    def record_error(self, component: str, error_type: str) -> None:
        """Record an error."""
        self.errors_total.labels(component=component, error_type=error_type).inc()


# Global metrics collector instance
_metrics: MetricsCollector = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
