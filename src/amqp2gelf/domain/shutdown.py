"""Value objects describing why and how the bridge shuts down."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ShutdownCause(Enum):
    """Signal sources able to stop the bridge."""

    INTERRUPT = "interrupt"
    SOURCE_ENDED = "source_ended"
    SOURCE_LOST = "source_lost"
    SINK_FAILED = "sink_failed"
    WORKER_FAILED = "worker_failed"

    @property
    def exit_code(self) -> int:
        """Process exit status associated with the cause.

        Operator interrupts and a consumer cancelled by the broker are normal
        endings; everything else reports failure.
        """

        return 0 if self in (ShutdownCause.INTERRUPT, ShutdownCause.SOURCE_ENDED) else 1


class CoordinatorState(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


@dataclass(slots=True, frozen=True)
class ShutdownEvent:
    """The first termination signal received; later ones are ignored."""

    reason: str
    cause: ShutdownCause

    def __post_init__(self) -> None:
        if not self.reason.strip():
            raise ValueError("reason must not be empty")


__all__ = ["CoordinatorState", "ShutdownCause", "ShutdownEvent"]
