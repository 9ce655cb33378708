"""GELF-like log record produced for every consumed message.

Purpose
-------
Provide an immutable representation of the record handed to the GELF sink and
keep its wire serialisation in one place.

Contents
--------
* :class:`LogRecord` dataclass with :meth:`LogRecord.to_gelf` and
  :meth:`LogRecord.to_json`.
* Default constants shared with the record builder.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .levels import SyslogLevel

DEFAULT_VERSION = "1.1"
DEFAULT_HOST = "unknown_amqp"
DEFAULT_LEVEL = int(SyslogLevel.INFORMATIONAL)


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Structured record forwarded to Graylog.

    Attributes
    ----------
    version:
        GELF protocol version.
    host:
        Originating host, ``"unknown_amqp"`` when the producer did not say.
    short_message:
        Summary text.
    timestamp:
        Seconds since the epoch; ``0.0`` means unknown.
    level:
        Syslog severity, informational by default.
    extra:
        Additional fields flattened next to the typed ones on the wire.
    """

    version: str = DEFAULT_VERSION
    host: str = DEFAULT_HOST
    short_message: str = ""
    timestamp: float = 0.0
    level: int = DEFAULT_LEVEL
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", dict(self.extra))

    @property
    def severity(self) -> SyslogLevel:
        """Return :attr:`level` as a :class:`SyslogLevel`."""

        return SyslogLevel.from_numeric(self.level)

    def to_gelf(self) -> dict[str, Any]:
        """Return the wire mapping with extra fields flattened alongside.

        Typed fields take precedence over extra keys carrying the same name.

        Examples
        --------
        >>> LogRecord(short_message="hi", extra={"_app": "x"}).to_gelf()["_app"]
        'x'
        """

        payload = dict(self.extra)
        payload.update(
            {
                "version": self.version,
                "host": self.host,
                "short_message": self.short_message,
                "timestamp": self.timestamp,
                "level": self.level,
            }
        )
        return payload

    def to_json(self) -> bytes:
        """Serialise :meth:`to_gelf` as compact UTF-8 JSON.

        Raises ``ValueError`` for non-finite floats, which JSON cannot carry.
        """

        return json.dumps(self.to_gelf(), separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")


__all__ = ["DEFAULT_HOST", "DEFAULT_LEVEL", "DEFAULT_VERSION", "LogRecord"]
