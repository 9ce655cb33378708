"""Forward messages from an AMQP queue to Graylog as GELF over UDP.

JSON messages keep their fields (reserved Graylog names are renamed); any
other payload becomes the GELF ``short_message``.
"""

from __future__ import annotations

from .application.use_cases import DeliveryLoop, ShutdownCoordinator, build_record
from .config import BridgeSettings, build_settings
from .domain import InboundMessage, LogRecord, ParseError, SinkError
from .runtime import run_bridge

__all__ = [
    "BridgeSettings",
    "DeliveryLoop",
    "InboundMessage",
    "LogRecord",
    "ParseError",
    "ShutdownCoordinator",
    "SinkError",
    "build_record",
    "build_settings",
    "run_bridge",
]
