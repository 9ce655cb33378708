"""Composition helpers turning :class:`BridgeSettings` into live collaborators.

Purpose
-------
Keep adapter construction in one place so :func:`amqp2gelf.runtime.run_bridge`
only orchestrates, and tests can swap factories for fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from amqp2gelf.adapters import AmqpQueueSource, GelfUdpSink, RichRecordRenderer
from amqp2gelf.application.ports import LogSinkPort, QueueSourcePort
from amqp2gelf.application.use_cases import DeliveryLoop, ShutdownCoordinator, create_record_builder
from amqp2gelf.config import BridgeSettings
from amqp2gelf.domain.record import LogRecord

SourceFactory = Callable[[BridgeSettings], QueueSourcePort]
SinkFactory = Callable[[BridgeSettings], LogSinkPort]


@dataclass(slots=True)
class BridgeComponents:
    """Live collaborators for one bridge run."""

    source: QueueSourcePort
    sink: LogSinkPort
    coordinator: ShutdownCoordinator
    loop: DeliveryLoop


def create_source(settings: BridgeSettings) -> QueueSourcePort:
    """Connect to the broker and declare the queue; raises on failure."""

    source = AmqpQueueSource(uri=settings.uri, queue=settings.queue)
    source.open()
    return source


def create_sink(settings: BridgeSettings) -> LogSinkPort:
    """Create the GELF/UDP writer; raises ``SinkError`` when the address cannot be resolved."""

    sink = GelfUdpSink(host=settings.server, port=settings.port, compression=settings.compression)
    sink.open()
    return sink


def create_observer(settings: BridgeSettings) -> Callable[[LogRecord], None] | None:
    return RichRecordRenderer() if settings.verbose else None


def build_components(
    settings: BridgeSettings,
    *,
    coordinator: ShutdownCoordinator,
    source_factory: SourceFactory = create_source,
    sink_factory: SinkFactory = create_sink,
) -> BridgeComponents:
    """Open sink and source and wire the delivery loop to ``coordinator``."""

    sink = sink_factory(settings)
    try:
        source = source_factory(settings)
    except BaseException:
        sink.close()
        raise
    loop = DeliveryLoop(
        sink=sink,
        coordinator=coordinator,
        build=create_record_builder(strict_renames=settings.strict_renames),
        observer=create_observer(settings),
    )
    return BridgeComponents(source=source, sink=sink, coordinator=coordinator, loop=loop)


__all__ = [
    "BridgeComponents",
    "build_components",
    "create_observer",
    "create_sink",
    "create_source",
]
