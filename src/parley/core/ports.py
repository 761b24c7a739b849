"""Side-effect ports the conversation state machine drives."""

from __future__ import annotations

from abc import ABC


class StateMachinePorts(ABC):  # noqa: B024
    """Collaborators invoked synchronously from inside ``dispatch``.

    Implementations must not dispatch events back into the state machine;
    re-entrant dispatches are rejected.  All hooks default to no-ops so
    the state machine can run standalone in tests.
    """

    def cancel_generation(self) -> None:  # noqa: B027
        """Cancel the in-flight generation call and discard partial output."""

    def drop_pending_generation(self) -> None:  # noqa: B027
        """Drop a generation request that has not produced output yet."""

    def reset_timers(self) -> None:  # noqa: B027
        """Restart utterance closure countdowns."""


class NoopPorts(StateMachinePorts):
    """Ports implementation that does nothing."""
