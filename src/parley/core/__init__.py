"""Core engine primitives: state machine, ports and timers."""

from parley.core.fsm import (
    TRANSITIONS,
    WILDCARD_TRANSITIONS,
    ConversationStateMachine,
    resolve_transition,
)
from parley.core.ports import NoopPorts, StateMachinePorts
from parley.core.timers import ScheduledCallback

__all__ = [
    "TRANSITIONS",
    "WILDCARD_TRANSITIONS",
    "ConversationStateMachine",
    "NoopPorts",
    "ScheduledCallback",
    "StateMachinePorts",
    "resolve_transition",
]
