from __future__ import annotations

import os
import signal

import pytest

from amqp2gelf.application.use_cases import ShutdownCoordinator
from amqp2gelf.config import BridgeSettings
from amqp2gelf.domain.errors import SinkError, SourceConnectionError
from amqp2gelf.domain.shutdown import CoordinatorState, ShutdownCause
from amqp2gelf.runtime import build_components, run_bridge
from tests.fakes import FakeSource, ManualTimer, RecordingSink, make_message


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings(grace_period=1.0)


def _run(settings: BridgeSettings, source: FakeSource, sink: RecordingSink, **kwargs) -> int:
    return run_bridge(
        settings,
        source_factory=lambda _settings: source,
        sink_factory=lambda _settings: sink,
        install_signal_handlers=False,
        poll_interval=0.01,
        **kwargs,
    )


def test_source_end_forwards_everything_and_exits_cleanly(settings: BridgeSettings) -> None:
    log: list[str] = []
    source = FakeSource([make_message(b"one", "text/plain", log=log, name="one"), make_message(b"two", "text/plain", log=log, name="two")])
    sink = RecordingSink(log)
    coordinator = ShutdownCoordinator()

    exit_code = _run(settings, source, sink, coordinator=coordinator)

    assert exit_code == 0
    assert log == ["send:one", "ack:one", "send:two", "ack:two"]
    assert source.closed is True
    assert sink.closed is True
    assert coordinator.state is CoordinatorState.TERMINATED
    assert coordinator.event is not None
    assert coordinator.event.reason == "done"


def test_sink_failure_exits_with_error(settings: BridgeSettings) -> None:
    source = FakeSource([make_message(b"x", "text/plain")], block_until_stopped=True)
    coordinator = ShutdownCoordinator()

    exit_code = _run(settings, source, RecordingSink(fail_on=0), coordinator=coordinator)

    assert exit_code == 1
    assert coordinator.event is not None
    assert coordinator.event.cause is ShutdownCause.SINK_FAILED
    assert coordinator.event.reason == "Cannot send gelf msg: connection refused"


def test_lost_broker_connection_exits_with_error(settings: BridgeSettings) -> None:
    source = FakeSource([make_message(b"x", "text/plain")], lost_reason="CONNECTION_FORCED")
    coordinator = ShutdownCoordinator()

    exit_code = _run(settings, source, RecordingSink(), coordinator=coordinator)

    assert exit_code == 1
    assert coordinator.event is not None
    assert coordinator.event.cause is ShutdownCause.SOURCE_LOST
    assert coordinator.event.reason == "AMQP server closed connection: CONNECTION_FORCED"
    assert source.closed is True


def test_interrupt_stops_the_source_and_cancels_grace_timer(settings: BridgeSettings) -> None:
    ManualTimer.created.clear()
    coordinator = ShutdownCoordinator(grace_period=settings.grace_period, timer_factory=ManualTimer)
    source = FakeSource(
        [make_message(b"x", "text/plain")],
        block_until_stopped=True,
        on_idle=lambda: coordinator.interrupt("SIGTERM"),
    )
    sink = RecordingSink()

    exit_code = _run(settings, source, sink, coordinator=coordinator)

    assert exit_code == 0
    assert source.stopped.is_set()
    assert len(sink.records) == 1
    assert ManualTimer.created[0].cancelled is True
    assert coordinator.event is not None
    assert coordinator.event.reason == "received signal SIGTERM"


def test_real_sigterm_is_routed_to_the_coordinator(settings: BridgeSettings) -> None:
    previous = signal.getsignal(signal.SIGTERM)
    coordinator = ShutdownCoordinator(grace_period=settings.grace_period)
    source = FakeSource(block_until_stopped=True, on_idle=lambda: os.kill(os.getpid(), signal.SIGTERM))

    exit_code = run_bridge(
        settings,
        coordinator=coordinator,
        source_factory=lambda _settings: source,
        sink_factory=lambda _settings: RecordingSink(),
        poll_interval=0.01,
    )

    assert exit_code == 0
    assert coordinator.event is not None
    assert coordinator.event.cause is ShutdownCause.INTERRUPT
    assert signal.getsignal(signal.SIGTERM) == previous


def test_startup_failure_of_source_closes_sink(settings: BridgeSettings, caplog: pytest.LogCaptureFixture) -> None:
    sink = RecordingSink()

    def refuse(_settings: BridgeSettings) -> FakeSource:
        raise SourceConnectionError("AMQP Dial: connection refused")

    with caplog.at_level("CRITICAL", logger="amqp2gelf"):
        exit_code = run_bridge(
            settings,
            source_factory=refuse,
            sink_factory=lambda _settings: sink,
            install_signal_handlers=False,
        )

    assert exit_code == 1
    assert sink.closed is True
    assert "Fatal Error: AMQP Dial: connection refused" in caplog.text


def test_startup_failure_of_sink_skips_source(settings: BridgeSettings) -> None:
    opened: list[str] = []

    def unresolvable(_settings: BridgeSettings) -> RecordingSink:
        raise SinkError("Cannot create gelf writer for nowhere:12201")

    def source_factory(_settings: BridgeSettings) -> FakeSource:
        opened.append("source")
        return FakeSource()

    exit_code = run_bridge(
        settings,
        source_factory=source_factory,
        sink_factory=unresolvable,
        install_signal_handlers=False,
    )

    assert exit_code == 1
    assert opened == []


def test_worker_crash_is_reported(settings: BridgeSettings) -> None:
    class ExplodingSource(FakeSource):
        def messages(self):
            raise RuntimeError("boom")
            yield  # pragma: no cover

    coordinator = ShutdownCoordinator()

    exit_code = _run(settings, ExplodingSource(), RecordingSink(), coordinator=coordinator)

    assert exit_code == 1
    assert coordinator.event is not None
    assert coordinator.event.cause is ShutdownCause.WORKER_FAILED
    assert "boom" in coordinator.event.reason


def test_verbose_settings_attach_console_observer() -> None:
    components = build_components(
        BridgeSettings(verbose=True),
        coordinator=ShutdownCoordinator(),
        source_factory=lambda _settings: FakeSource(),
        sink_factory=lambda _settings: RecordingSink(),
    )

    assert components.loop._observer is not None
