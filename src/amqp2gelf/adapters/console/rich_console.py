"""Rich-powered renderer for records built in verbose mode.

Purpose
-------
Show operators what each consumed message turned into before it is written
to Graylog, coloured by syslog severity.

Contents
--------
* :data:`_STYLE_MAP` - default severity-to-style mapping.
* :class:`RichRecordRenderer` - callable installed as the delivery observer.
"""

from __future__ import annotations

from typing import Mapping, MutableMapping

from rich.console import Console

from amqp2gelf.domain.levels import SyslogLevel
from amqp2gelf.domain.record import LogRecord

#: Default Rich styles keyed by :class:`SyslogLevel`.
_STYLE_MAP: Mapping[SyslogLevel, str] = {
    SyslogLevel.EMERGENCY: "bold white on red",
    SyslogLevel.ALERT: "bold white on red",
    SyslogLevel.CRITICAL: "bold red",
    SyslogLevel.ERROR: "red",
    SyslogLevel.WARNING: "yellow",
    SyslogLevel.NOTICE: "green",
    SyslogLevel.INFORMATIONAL: "cyan",
    SyslogLevel.DEBUG: "dim",
}


class RichRecordRenderer:
    """Print one line per record using Rich with optional style overrides."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: MutableMapping[SyslogLevel | str, str] | None = None,
    ) -> None:
        if console is not None:
            self._console = console
        else:
            self._console = Console(stderr=True, force_terminal=force_color or None, no_color=no_color)
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = SyslogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged

    def __call__(self, record: LogRecord) -> None:
        """Render ``record``.

        Examples
        --------
        >>> from io import StringIO
        >>> console = Console(file=StringIO(), record=True)
        >>> RichRecordRenderer(console=console)(LogRecord(host="web1", short_message="boot ok"))
        >>> 'web1' in console.export_text()
        True
        """
        style = "" if self._no_color else self._style_map.get(record.severity, "")
        self._console.print(self.format_line(record), style=style, markup=False, highlight=False)

    @staticmethod
    def format_line(record: LogRecord) -> str:
        """Return a human-friendly console line for ``record``.

        Examples
        --------
        >>> RichRecordRenderer.format_line(LogRecord(host="web1", short_message="boot ok", extra={"app": "x"}))
        'GELF 1.1 informational web1 ts=0.0 boot ok app=x'
        """
        typed = {"version", "host", "short_message", "timestamp", "level"}
        extras = " ".join(f"{key}={value}" for key, value in sorted(record.extra.items()) if key not in typed)
        line = f"GELF {record.version} {record.severity.severity} {record.host} ts={record.timestamp} {record.short_message}"
        return f"{line} {extras}" if extras else line


__all__ = ["RichRecordRenderer"]
