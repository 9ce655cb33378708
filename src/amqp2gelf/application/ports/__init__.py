"""Protocols implemented by the outer adapters."""

from __future__ import annotations

from .queue import QueueSourcePort
from .sink import LogSinkPort

__all__ = ["LogSinkPort", "QueueSourcePort"]
