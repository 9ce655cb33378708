"""Domain entities and value objects used by the bridge."""

from __future__ import annotations

from .errors import (
    AcknowledgementError,
    BridgeError,
    ParseError,
    SinkError,
    SourceConnectionError,
    SourceConnectionLost,
)
from .levels import SyslogLevel
from .message import AckHandle, InboundMessage, Settlement
from .record import LogRecord
from .shutdown import CoordinatorState, ShutdownCause, ShutdownEvent

__all__ = [
    "AckHandle",
    "AcknowledgementError",
    "BridgeError",
    "CoordinatorState",
    "InboundMessage",
    "LogRecord",
    "ParseError",
    "Settlement",
    "ShutdownCause",
    "ShutdownEvent",
    "SinkError",
    "SourceConnectionError",
    "SourceConnectionLost",
    "SyslogLevel",
]
