"""Syslog severities used as the GELF ``level`` field.

Purpose
-------
GELF reuses the syslog severity scale where smaller numbers are more severe.
This enum gives those integers names so the console renderer can style
records by severity.

Contents
--------
* :class:`SyslogLevel` enum with conversion helpers.
"""

from __future__ import annotations

from enum import IntEnum


class SyslogLevel(IntEnum):
    """The eight syslog severities, most severe first."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFORMATIONAL = 6
    DEBUG = 7

    @property
    def severity(self) -> str:
        """Return the lowercase severity name."""

        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> "SyslogLevel":
        normalized = name.strip().upper()
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown syslog level: {name!r}") from exc

    @classmethod
    def from_numeric(cls, level: int) -> "SyslogLevel":
        """Return the :class:`SyslogLevel` for ``level``, clamping out-of-range values.

        Producers sometimes send levels outside 0..7; those are clamped to the
        nearest valid severity instead of failing.

        Examples
        --------
        >>> SyslogLevel.from_numeric(6)
        <SyslogLevel.INFORMATIONAL: 6>
        >>> SyslogLevel.from_numeric(42)
        <SyslogLevel.DEBUG: 7>
        """

        return cls(min(max(level, cls.EMERGENCY), cls.DEBUG))


__all__ = ["SyslogLevel"]
