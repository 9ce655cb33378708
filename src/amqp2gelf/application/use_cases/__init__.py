"""Use cases composing the bridge pipeline."""

from __future__ import annotations

from .build_record import JSON_MEDIA_TYPES, RESERVED_FIELDS, build_record, create_record_builder
from .deliver import DeliveryLoop, DeliveryStats
from .shutdown import ShutdownCoordinator, ShutdownHandle

__all__ = [
    "DeliveryLoop",
    "DeliveryStats",
    "JSON_MEDIA_TYPES",
    "RESERVED_FIELDS",
    "ShutdownCoordinator",
    "ShutdownHandle",
    "build_record",
    "create_record_builder",
]
