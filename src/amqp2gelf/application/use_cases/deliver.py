"""Use case moving messages from the queue to the GELF sink.

Purpose
-------
Couple acknowledgment to delivery: a message is acked only after its record
was written, rejected (never requeued) when it cannot be parsed or written.

Contents
--------
* :class:`DeliveryStats` - counters returned by a finished run.
* :class:`DeliveryLoop` - single-worker loop over a message iterator.

System Role
-----------
Runs on the delivery thread started by :func:`amqp2gelf.runtime.run_bridge`.
Processing is strictly sequential with one message in flight; fatal outcomes
are reported to the shutdown coordinator instead of being raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from amqp2gelf.application.ports.sink import LogSinkPort
from amqp2gelf.domain.errors import ParseError, SinkError, SourceConnectionLost
from amqp2gelf.domain.message import InboundMessage
from amqp2gelf.domain.record import LogRecord
from amqp2gelf.domain.shutdown import ShutdownCause

from .build_record import RecordBuilder, build_record
from .shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DeliveryStats:
    """Per-run counters, mainly for diagnostics and tests."""

    acked: int = 0
    rejected: int = 0

    @property
    def processed(self) -> int:
        return self.acked + self.rejected


class DeliveryLoop:
    """Consume messages in order, forward records, settle each message once.

    Parameters
    ----------
    sink:
        Destination implementing :class:`LogSinkPort`.
    coordinator:
        Receives ``SINK_FAILED``, ``SOURCE_LOST`` and ``SOURCE_ENDED`` events.
    build:
        Record builder; defaults to :func:`build_record` with lenient renames.
    observer:
        Optional callback receiving every built record (verbose rendering).
    """

    def __init__(
        self,
        *,
        sink: LogSinkPort,
        coordinator: ShutdownCoordinator,
        build: RecordBuilder = build_record,
        observer: Callable[[LogRecord], None] | None = None,
    ) -> None:
        self._sink = sink
        self._build = build
        self._observer = observer
        self._sink_failed = coordinator.handle(ShutdownCause.SINK_FAILED)
        self._source_lost = coordinator.handle(ShutdownCause.SOURCE_LOST)
        self._source_ended = coordinator.handle(ShutdownCause.SOURCE_ENDED)
        self._coordinator = coordinator

    def run(self, messages: Iterable[InboundMessage]) -> DeliveryStats:
        """Process ``messages`` until exhausted, stopped, or a fatal error occurs."""

        stats = DeliveryStats()
        try:
            for message in messages:
                if not self._process(message, stats):
                    return stats
                if self._coordinator.shutting_down:
                    logger.debug("Shutdown requested; delivery loop stops after %d messages", stats.processed)
                    return stats
        except SourceConnectionLost as exc:
            self._source_lost.send(f"AMQP server closed connection: {exc}")
            return stats
        self._source_ended.send("done")
        return stats

    def _process(self, message: InboundMessage, stats: DeliveryStats) -> bool:
        """Handle one message; ``False`` means the loop must stop."""

        try:
            try:
                record = self._build(message.body, message.content_type)
            except ParseError as exc:
                logger.debug("Cannot parse message, rejecting: %s; body=%r", exc, message.body)
                message.reject()
                stats.rejected += 1
                return True

            if self._observer is not None:
                self._observer(record)

            try:
                self._sink.send(record)
            except SinkError as exc:
                self._sink_failed.send(f"Cannot send gelf msg: {exc}")
                message.reject()
                stats.rejected += 1
                return False

            message.ack()
            stats.acked += 1
            return True
        except SourceConnectionLost as exc:
            self._source_lost.send(f"AMQP server closed connection: {exc}")
            return False


__all__ = ["DeliveryLoop", "DeliveryStats"]
