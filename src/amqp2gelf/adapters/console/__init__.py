"""Console adapters built on Rich."""

from __future__ import annotations

from .rich_console import RichRecordRenderer
from .rich_logging import configure_logging

__all__ = ["RichRecordRenderer", "configure_logging"]
