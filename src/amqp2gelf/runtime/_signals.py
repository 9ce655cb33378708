"""Operating-system signal watcher feeding the shutdown coordinator."""

from __future__ import annotations

import signal
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from types import FrameType

from amqp2gelf.application.use_cases.shutdown import ShutdownCoordinator

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def watch_signals(
    coordinator: ShutdownCoordinator,
    signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
) -> Iterator[None]:
    """Route ``signals`` to :meth:`ShutdownCoordinator.interrupt` while active.

    Must run on the main thread; previous handlers are restored on exit.
    """

    def handler(signum: int, _frame: FrameType | None) -> None:
        coordinator.interrupt(signal.Signals(signum).name)

    previous: dict[signal.Signals, Callable | int | None] = {}
    try:
        for signum in signals:
            previous[signum] = signal.signal(signum, handler)
        yield
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old if old is not None else signal.SIG_DFL)


__all__ = ["DEFAULT_SIGNALS", "watch_signals"]
