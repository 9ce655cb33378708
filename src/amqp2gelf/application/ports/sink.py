"""Port describing the GELF transport records are written to."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from amqp2gelf.domain.record import LogRecord


@runtime_checkable
class LogSinkPort(Protocol):
    """Accept one record per call; failures raise :class:`~amqp2gelf.domain.errors.SinkError`."""

    def send(self, record: LogRecord) -> None:
        """Write ``record`` synchronously."""

    def close(self) -> None:
        """Release transport resources."""


__all__ = ["LogSinkPort"]
