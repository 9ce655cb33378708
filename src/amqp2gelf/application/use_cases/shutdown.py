"""Shutdown coordination for the bridge.

Purpose
-------
Fold every termination signal (operator interrupt, sink failure, end of the
consumer, lost broker connection) into a single first-wins
:class:`~amqp2gelf.domain.shutdown.ShutdownEvent` and bound how long a
graceful shutdown may take after an interrupt.

Contents
--------
* :class:`ShutdownCoordinator` - single-winner rendezvous with grace timer.
* :class:`ShutdownHandle` - send-once capability owned by one signal source.

System Role
-----------
Senders never block: :meth:`ShutdownCoordinator.trigger` sets the event under a
short lock and returns, so a late watcher cannot hang after shutdown began.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable

from amqp2gelf.domain.shutdown import CoordinatorState, ShutdownCause, ShutdownEvent

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 2.0


def _hard_exit() -> None:  # pragma: no cover - terminates the interpreter
    os._exit(1)


class ShutdownHandle:
    """Send-once handle bound to one cause; repeated sends are ignored."""

    __slots__ = ("_coordinator", "_cause", "_sent", "_lock")

    def __init__(self, coordinator: "ShutdownCoordinator", cause: ShutdownCause) -> None:
        self._coordinator = coordinator
        self._cause = cause
        self._sent = False
        self._lock = threading.Lock()

    @property
    def cause(self) -> ShutdownCause:
        return self._cause

    def send(self, reason: str) -> bool:
        """Forward ``reason`` to the coordinator; returns whether it won."""

        with self._lock:
            if self._sent:
                return False
            self._sent = True
        return self._coordinator.trigger(reason, self._cause)


class ShutdownCoordinator:
    """Track the ``RUNNING -> SHUTTING_DOWN -> TERMINATED`` lifecycle.

    Parameters
    ----------
    grace_period:
        Seconds allowed between an operator interrupt and :meth:`terminate`
        before ``abort`` is invoked.
    abort:
        Called when the grace period expires; defaults to ``os._exit(1)``.
    timer_factory:
        Builds the grace timer; tests substitute a manual timer.

    Examples
    --------
    >>> coordinator = ShutdownCoordinator()
    >>> coordinator.trigger("done", ShutdownCause.SOURCE_ENDED)
    True
    >>> coordinator.trigger("late", ShutdownCause.SINK_FAILED)
    False
    >>> coordinator.wait().reason
    'done'
    """

    def __init__(
        self,
        *,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        abort: Callable[[], None] = _hard_exit,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
    ) -> None:
        if grace_period <= 0:
            raise ValueError("grace_period must be positive")
        self._grace_period = grace_period
        self._abort = abort
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._signalled = threading.Event()
        self._event: ShutdownEvent | None = None
        self._state = CoordinatorState.RUNNING
        self._grace_timer: threading.Timer | None = None

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def event(self) -> ShutdownEvent | None:
        return self._event

    @property
    def shutting_down(self) -> bool:
        return self._signalled.is_set()

    @property
    def exit_code(self) -> int:
        if self._event is None:
            return 0
        return self._event.cause.exit_code

    def handle(self, cause: ShutdownCause) -> ShutdownHandle:
        """Return a fresh send-once handle for one signal source."""

        return ShutdownHandle(self, cause)

    def trigger(self, reason: str, cause: ShutdownCause) -> bool:
        """Record ``reason`` unless another event already won."""

        with self._lock:
            if self._event is not None:
                logger.debug("Ignoring shutdown request after first event: %s", reason)
                return False
            self._event = ShutdownEvent(reason=reason, cause=cause)
            self._state = CoordinatorState.SHUTTING_DOWN
        self._signalled.set()
        return True

    def interrupt(self, signal_name: str) -> bool:
        """Handle an operating-system signal and start the grace timer."""

        self._arm_grace_timer()
        return self.trigger(f"received signal {signal_name}", ShutdownCause.INTERRUPT)

    def wait(self, timeout: float | None = None) -> ShutdownEvent | None:
        """Block until a shutdown event exists; ``None`` when ``timeout`` elapsed."""

        self._signalled.wait(timeout)
        return self._event

    def terminate(self) -> ShutdownEvent | None:
        """Finish shutdown: cancel the grace timer and log the final reason."""

        with self._lock:
            timer = self._grace_timer
            self._grace_timer = None
            self._state = CoordinatorState.TERMINATED
        if timer is not None:
            timer.cancel()
        reason = self._event.reason if self._event is not None else "no shutdown reason recorded"
        logger.info("The End. %s", reason)
        return self._event

    def _arm_grace_timer(self) -> None:
        with self._lock:
            if self._grace_timer is not None or self._state is CoordinatorState.TERMINATED:
                return
            timer = self._timer_factory(self._grace_period, self._bail_out)
            timer.daemon = True
            self._grace_timer = timer
        timer.start()

    def _bail_out(self) -> None:
        if self._state is CoordinatorState.TERMINATED:
            return
        logger.critical("shutdown was ignored, bailing out now.")
        self._abort()


__all__ = ["DEFAULT_GRACE_PERIOD", "ShutdownCoordinator", "ShutdownHandle"]
