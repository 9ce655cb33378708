"""Pika-based AMQP consumer implementing :class:`QueueSourcePort`.

Purpose
-------
Consume a durable queue with manual acknowledgment and expose deliveries as
:class:`InboundMessage` objects whose settlement maps onto ``basic.ack`` and
``basic.reject``.

Contents
--------
* :class:`AmqpQueueSource` - blocking consumer with cooperative stop.
* :class:`_DeliveryHandle` - per-delivery acknowledgment handle.

System Role
-----------
The connection is opened by the composition root and then used exclusively by
the delivery thread. Only :meth:`AmqpQueueSource.stop` may be called from other
threads; it sets a flag checked between broker polls.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

import pika
from pika.exceptions import AMQPError

from amqp2gelf import __init__conf__
from amqp2gelf.application.ports.queue import QueueSourcePort
from amqp2gelf.domain.errors import SourceConnectionError, SourceConnectionLost
from amqp2gelf.domain.message import InboundMessage

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[pika.connection.Parameters], Any]


class _DeliveryHandle:
    """Settle one delivery tag on the channel that received it."""

    __slots__ = ("_channel", "_delivery_tag")

    def __init__(self, channel: Any, delivery_tag: int) -> None:
        self._channel = channel
        self._delivery_tag = delivery_tag

    def ack(self) -> None:
        try:
            self._channel.basic_ack(delivery_tag=self._delivery_tag, multiple=False)
        except AMQPError as exc:
            raise SourceConnectionLost(f"ack of delivery {self._delivery_tag} failed: {exc!r}") from exc

    def reject(self) -> None:
        try:
            self._channel.basic_reject(delivery_tag=self._delivery_tag, requeue=False)
        except AMQPError as exc:
            raise SourceConnectionLost(f"reject of delivery {self._delivery_tag} failed: {exc!r}") from exc


class AmqpQueueSource(QueueSourcePort):
    """Consume ``queue`` from the broker at ``uri`` one unacknowledged message at a time."""

    def __init__(
        self,
        *,
        uri: str,
        queue: str,
        poll_interval: float = 0.5,
        connection_factory: ConnectionFactory = pika.BlockingConnection,
    ) -> None:
        self._uri = uri
        self._queue = queue
        self._poll_interval = poll_interval
        self._connection_factory = connection_factory
        self._connection: Any = None
        self._channel: Any = None
        self._consumer_tag = f"{__init__conf__.name}-{os.getpid()}"
        self._consuming = False
        self._stop_requested = threading.Event()
        self._close_listeners: list[Callable[[str], None]] = []
        self._channel_closed: str | None = None

    @property
    def consumer_tag(self) -> str:
        return self._consumer_tag

    def open(self) -> None:
        """Connect, open a channel and declare the durable queue."""

        if self._connection is not None:
            return
        try:
            parameters = pika.URLParameters(self._uri)
        except ValueError as exc:
            raise SourceConnectionError(f"AMQP URI invalid: {exc}") from exc
        parameters.client_properties = {
            "product": __init__conf__.name,
            "version": __init__conf__.version,
        }
        try:
            connection = self._connection_factory(parameters)
        except (AMQPError, OSError) as exc:
            raise SourceConnectionError(f"AMQP Dial: {exc!r}") from exc
        try:
            channel = connection.channel()
            channel.add_on_close_callback(self._on_channel_closed)
            channel.queue_declare(queue=self._queue, durable=True, exclusive=False, auto_delete=False)
            channel.basic_qos(prefetch_count=1)
        except AMQPError as exc:
            _close_quietly(connection)
            raise SourceConnectionError(f"Queue Declare: {exc!r}") from exc
        self._connection = connection
        self._channel = channel

    def add_close_listener(self, listener: Callable[[str], None]) -> None:
        self._close_listeners.append(listener)

    def messages(self) -> Iterator[InboundMessage]:
        """Yield deliveries until :meth:`stop`, broker cancellation, or connection loss."""

        if self._channel is None:
            raise SourceConnectionError("AMQP source is not open")
        channel = self._channel
        pending: deque[InboundMessage] = deque()
        cancelled = threading.Event()

        def on_message(channel: Any, method: Any, properties: Any, body: bytes) -> None:
            content_type = getattr(properties, "content_type", None) or ""
            pending.append(InboundMessage(body, content_type, _DeliveryHandle(channel, method.delivery_tag)))

        def on_cancel(_frame: Any) -> None:
            logger.info("Broker cancelled consumer %s", self._consumer_tag)
            cancelled.set()

        try:
            channel.add_on_cancel_callback(on_cancel)
            channel.basic_consume(
                queue=self._queue,
                on_message_callback=on_message,
                auto_ack=False,
                consumer_tag=self._consumer_tag,
            )
        except AMQPError as exc:
            raise SourceConnectionError(f"Queue Consume: {exc!r}") from exc
        self._consuming = True

        while not self._stop_requested.is_set():
            while pending:
                yield pending.popleft()
                if self._stop_requested.is_set():
                    return
            if cancelled.is_set():
                return
            if self._channel_closed is not None or not channel.is_open:
                self._consuming = False
                self._notify_close(self._channel_closed or "channel closed")
                return
            try:
                self._connection.process_data_events(time_limit=self._poll_interval)
            except AMQPError as exc:
                self._consuming = False
                self._notify_close(f"{exc!r}")
                return

    def stop(self) -> None:
        self._stop_requested.set()

    def close(self) -> None:
        """Cancel the consumer and close the connection; unsettled messages are requeued by the broker."""

        connection, channel = self._connection, self._channel
        self._connection = None
        self._channel = None
        if connection is None:
            return
        if self._consuming and channel is not None and getattr(channel, "is_open", False):
            try:
                channel.basic_cancel(self._consumer_tag)
            except AMQPError as exc:
                logger.debug("Cancelling consumer %s failed: %r", self._consumer_tag, exc)
        self._consuming = False
        _close_quietly(connection)

    def _on_channel_closed(self, _channel: Any, reason: Exception) -> None:
        self._channel_closed = repr(reason)

    def _notify_close(self, reason: str) -> None:
        logger.debug("AMQP connection closed: %s", reason)
        for listener in list(self._close_listeners):
            listener(reason)


def _close_quietly(connection: Any) -> None:
    if not getattr(connection, "is_open", False):
        return
    try:
        connection.close()
    except AMQPError as exc:
        logger.debug("Closing AMQP connection failed: %r", exc)


__all__ = ["AmqpQueueSource"]
