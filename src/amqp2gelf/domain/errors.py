"""Exception hierarchy shared by the bridge layers.

Contents
--------
* :class:`BridgeError` - common base class.
* :class:`ParseError` - recovered per message; the message is rejected.
* :class:`SinkError` - GELF transport failure, fatal to the pipeline.
* :class:`SourceConnectionError` - the queue could not be opened at startup.
* :class:`SourceConnectionLost` - the broker connection closed while running.
* :class:`AcknowledgementError` - a message was settled twice.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all errors raised by amqp2gelf."""


class ParseError(BridgeError):
    """Raised when a JSON-typed message body cannot become a log record."""


class SinkError(BridgeError):
    """Raised when a record cannot be written to the GELF transport."""


class SourceConnectionError(BridgeError):
    """Raised when the AMQP connection, channel or consumer cannot be set up."""


class SourceConnectionLost(BridgeError):
    """Raised when the AMQP connection closes underneath a running consumer."""


class AcknowledgementError(BridgeError):
    """Raised when a message is acknowledged or rejected more than once."""


__all__ = [
    "AcknowledgementError",
    "BridgeError",
    "ParseError",
    "SinkError",
    "SourceConnectionError",
    "SourceConnectionLost",
]
