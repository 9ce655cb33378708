"""Logging setup routing the package loggers through Rich."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_PACKAGE_LOGGER = "amqp2gelf"


def configure_logging(*, verbose: bool, console: Console | None = None) -> logging.Logger:
    """Install a single :class:`RichHandler` on the package logger.

    ``verbose`` lowers the threshold to ``DEBUG`` so parse failures and broker
    chatter become visible; otherwise only ``INFO`` and above are shown.
    Calling it again replaces the previously installed handler.
    """

    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.propagate = False
    return package_logger


__all__ = ["configure_logging"]
