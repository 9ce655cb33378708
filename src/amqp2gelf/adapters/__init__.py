"""Adapters connecting the bridge to RabbitMQ, Graylog and the terminal."""

from __future__ import annotations

from .amqp import AmqpQueueSource
from .console import RichRecordRenderer, configure_logging
from .gelf_udp import GelfUdpSink

__all__ = ["AmqpQueueSource", "GelfUdpSink", "RichRecordRenderer", "configure_logging"]
