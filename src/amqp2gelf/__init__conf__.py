"""Static package metadata surfaced by the CLI banner and AMQP client properties."""

from __future__ import annotations

name = "amqp2gelf"
title = "Forward AMQP queue messages to Graylog as GELF over UDP"
version = "0.3.0"
homepage = "https://github.com/DECK36/amqp2gelf"
author = "DECK36 GmbH & Co. KG"
shell_command = "amqp2gelf"


def summary_info() -> str:
    """Return the metadata banner printed by ``amqp2gelf info``.

    Examples
    --------
    >>> summary_info().splitlines()[0]
    'Info for amqp2gelf:'
    """

    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("shell_command", shell_command),
    )
    width = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(width)} = {value}" for label, value in fields)
    return "\n".join(lines) + "\n"
