"""Inbound queue message paired with its single-use acknowledgment handle."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from .errors import AcknowledgementError


@runtime_checkable
class AckHandle(Protocol):
    """Broker-side capability settling one delivery."""

    def ack(self) -> None:
        """Mark the delivery as durably processed (never cumulative)."""

    def reject(self) -> None:
        """Discard the delivery without requeueing it."""


class Settlement(Enum):
    """Outcome recorded once a message has been settled."""

    ACKED = "acked"
    REJECTED = "rejected"


class InboundMessage:
    """One delivery from the queue, settled exactly once.

    Examples
    --------
    >>> class _Handle:
    ...     def ack(self): pass
    ...     def reject(self): pass
    >>> message = InboundMessage(b"hello", "text/plain", _Handle())
    >>> message.ack()
    >>> message.settlement
    <Settlement.ACKED: 'acked'>
    >>> message.reject()
    Traceback (most recent call last):
    ...
    amqp2gelf.domain.errors.AcknowledgementError: message already acked
    """

    __slots__ = ("body", "content_type", "_handle", "_settlement")

    def __init__(self, body: bytes, content_type: str, handle: AckHandle) -> None:
        self.body = body
        self.content_type = content_type
        self._handle = handle
        self._settlement: Settlement | None = None

    @property
    def settlement(self) -> Settlement | None:
        return self._settlement

    def ack(self) -> None:
        self._settle(Settlement.ACKED)
        self._handle.ack()

    def reject(self) -> None:
        self._settle(Settlement.REJECTED)
        self._handle.reject()

    def _settle(self, outcome: Settlement) -> None:
        if self._settlement is not None:
            raise AcknowledgementError(f"message already {self._settlement.value}")
        self._settlement = outcome

    def __repr__(self) -> str:
        return f"InboundMessage(content_type={self.content_type!r}, size={len(self.body)}, settlement={self._settlement})"


__all__ = ["AckHandle", "InboundMessage", "Settlement"]
