"""Runtime façade running the bridge until a shutdown event arrives.

Purpose
-------
Expose :func:`run_bridge`, the process-level orchestration the CLI invokes:
open the GELF sink and the AMQP source, start the delivery thread, watch
operating-system signals, and translate the first shutdown event into an exit
code.

Contents
--------
* :func:`run_bridge` - blocking entry point returning the exit status.
* Re-exports of the composition helpers used by tests.

System Role
-----------
Concurrency layout: the main thread owns signal handling and waits on the
:class:`ShutdownCoordinator`; one daemon thread runs the
:class:`DeliveryLoop` and is the only user of the AMQP connection. The broker
close listener and every signal source hold their own send-once handle.
"""

from __future__ import annotations

import logging
import threading
from contextlib import nullcontext

from amqp2gelf import __init__conf__
from amqp2gelf.application.use_cases import ShutdownCoordinator
from amqp2gelf.config import BridgeSettings
from amqp2gelf.domain.errors import SinkError, SourceConnectionError
from amqp2gelf.domain.shutdown import ShutdownCause

from ._composition import (
    BridgeComponents,
    SinkFactory,
    SourceFactory,
    build_components,
    create_sink,
    create_source,
)
from ._signals import watch_signals

logger = logging.getLogger(__name__)


def run_bridge(
    settings: BridgeSettings,
    *,
    coordinator: ShutdownCoordinator | None = None,
    source_factory: SourceFactory = create_source,
    sink_factory: SinkFactory = create_sink,
    install_signal_handlers: bool = True,
    poll_interval: float = 0.5,
) -> int:
    """Run until shutdown and return the process exit code.

    Parameters
    ----------
    settings:
        Resolved configuration; nothing is read from globals.
    coordinator:
        Injected by tests; a fresh coordinator using
        ``settings.grace_period`` is created otherwise.
    source_factory, sink_factory:
        Build the opened queue source and GELF sink.
    install_signal_handlers:
        Route SIGINT/SIGTERM to the coordinator; requires the main thread.
    poll_interval:
        Seconds between coordinator checks on the main thread.

    Returns
    -------
    int
        ``0`` after an interrupt or a consumer cancelled by the broker, ``1``
        after a fatal error (including startup failures).
    """

    coordinator = coordinator or ShutdownCoordinator(grace_period=settings.grace_period)
    logger.debug("Start %s %s", __init__conf__.name, __init__conf__.version)
    logger.debug("connecting to %s ...", settings.uri)
    try:
        components = build_components(
            settings,
            coordinator=coordinator,
            source_factory=source_factory,
            sink_factory=sink_factory,
        )
    except (SourceConnectionError, SinkError) as exc:
        logger.critical("Fatal Error: %s", exc)
        return 1

    watch_source = coordinator.handle(ShutdownCause.SOURCE_LOST)
    components.source.add_close_listener(lambda reason: watch_source.send(f"AMQP server closed connection: {reason}"))
    logger.info(
        "Forwarding queue %r to GELF/UDP %s (%s compression)",
        settings.queue,
        settings.gelf_endpoint,
        settings.compression,
    )

    worker = threading.Thread(
        target=_deliver,
        args=(components,),
        name=f"{__init__conf__.name}-delivery",
        daemon=True,
    )
    guard = watch_signals(coordinator) if install_signal_handlers else nullcontext()
    with guard:
        worker.start()
        while coordinator.wait(timeout=poll_interval) is None:
            pass
        components.source.stop()
        worker.join(timeout=settings.grace_period)
        if worker.is_alive():
            logger.warning("Delivery worker still busy after %.1fs; exiting without it", settings.grace_period)
        coordinator.terminate()
    return coordinator.exit_code


def _deliver(components: BridgeComponents) -> None:
    """Delivery thread body; always releases source and sink."""

    worker_failed = components.coordinator.handle(ShutdownCause.WORKER_FAILED)
    try:
        stats = components.loop.run(components.source.messages())
        logger.debug("Delivery loop finished: %d acked, %d rejected", stats.acked, stats.rejected)
    except SourceConnectionError as exc:
        components.coordinator.handle(ShutdownCause.SOURCE_LOST).send(str(exc))
    except Exception as exc:
        logger.exception("Delivery worker crashed")
        worker_failed.send(f"delivery worker crashed: {exc!r}")
    finally:
        components.source.close()
        components.sink.close()


__all__ = [
    "BridgeComponents",
    "build_components",
    "create_sink",
    "create_source",
    "run_bridge",
]
