"""Port describing the AMQP queue the bridge consumes from."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Protocol, runtime_checkable

from amqp2gelf.domain.message import InboundMessage


@runtime_checkable
class QueueSourcePort(Protocol):
    """Durable queue delivering messages that require explicit settlement."""

    def messages(self) -> Iterator[InboundMessage]:
        """Yield deliveries in broker order until stopped, cancelled or disconnected."""

    def add_close_listener(self, listener: Callable[[str], None]) -> None:
        """Register ``listener`` to receive the reason of an unexpected connection close."""

    def stop(self) -> None:
        """Ask :meth:`messages` to end after the current delivery; safe from any thread."""

    def close(self) -> None:
        """Cancel the consumer and release the connection."""


__all__ = ["QueueSourcePort"]
