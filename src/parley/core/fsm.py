"""Conversation state machine.

The state machine is the single source of truth for the conversation
phase and the generation counter.  Both are mutated only inside
:meth:`ConversationStateMachine.dispatch`.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from parley.core.ports import NoopPorts, StateMachinePorts
from parley.models.conversation import StateTransition
from parley.models.enums import ConversationEvent, ConversationState

logger = logging.getLogger("parley.fsm")

S = ConversationState
E = ConversationEvent

TRANSITIONS: dict[tuple[ConversationState, ConversationEvent], ConversationState] = {
    (S.IDLE, E.START_INTERVIEW): S.LISTENING,
    (S.LISTENING, E.SPEECH_START): S.USER_SPEAKING,
    (S.LISTENING, E.ANALYSIS_START): S.AI_THINKING,
    (S.USER_SPEAKING, E.SPEECH_END): S.LISTENING,
    (S.USER_SPEAKING, E.UTTERANCE_COMPLETE): S.LISTENING,
    (S.AI_THINKING, E.ANALYSIS_CHUNK): S.AI_RESPONDING,
    (S.AI_THINKING, E.ANALYSIS_COMPLETE): S.LISTENING,
    (S.AI_THINKING, E.ANALYSIS_ERROR): S.LISTENING,
    (S.AI_THINKING, E.SPEECH_START): S.INTERRUPTED,
    (S.AI_THINKING, E.UTTERANCE_COMPLETE): S.INTERRUPTED,
    (S.AI_THINKING, E.USER_INTERRUPT): S.INTERRUPTED,
    (S.AI_RESPONDING, E.ANALYSIS_CHUNK): S.AI_RESPONDING,
    (S.AI_RESPONDING, E.ANALYSIS_COMPLETE): S.LISTENING,
    (S.AI_RESPONDING, E.ANALYSIS_ERROR): S.LISTENING,
    (S.AI_RESPONDING, E.SPEECH_START): S.INTERRUPTED,
    (S.AI_RESPONDING, E.UTTERANCE_COMPLETE): S.INTERRUPTED,
    (S.AI_RESPONDING, E.USER_INTERRUPT): S.INTERRUPTED,
    (S.INTERRUPTED, E.SPEECH_START): S.USER_SPEAKING,
    (S.INTERRUPTED, E.UTTERANCE_COMPLETE): S.LISTENING,
    (S.INTERRUPTED, E.ANALYSIS_COMPLETE): S.LISTENING,
    (S.INTERRUPTED, E.ANALYSIS_ERROR): S.LISTENING,
}
"""Explicit ``(state, event) -> state`` transitions."""

WILDCARD_TRANSITIONS: dict[ConversationEvent, ConversationState] = {
    E.STOP_INTERVIEW: S.IDLE,
    E.RESET: S.IDLE,
}
"""Events accepted from every state."""

_AI_ACTIVE = frozenset({S.AI_THINKING, S.AI_RESPONDING})
_USER_ACTIVE = frozenset({S.USER_SPEAKING, S.INTERRUPTED})
_MIC_OPEN = frozenset({S.LISTENING, S.USER_SPEAKING, S.INTERRUPTED})

TransitionListener = Callable[[StateTransition], object]


def resolve_transition(
    state: ConversationState, event: ConversationEvent
) -> ConversationState | None:
    """Return the target state for *event* in *state*, or None if invalid."""
    target = TRANSITIONS.get((state, event))
    if target is None:
        target = WILDCARD_TRANSITIONS.get(event)
    return target


class ConversationStateMachine:
    """Authoritative tracker of the conversation phase.

    Each instance is independent: construct one per session and hand it
    to the orchestrator.  Side effects are delegated to
    :class:`~parley.core.ports.StateMachinePorts` and run synchronously
    inside :meth:`dispatch`, before subscribers are notified.
    """

    def __init__(
        self,
        ports: StateMachinePorts | None = None,
        *,
        history_size: int = 100,
    ) -> None:
        self._state = ConversationState.IDLE
        self._ports: StateMachinePorts = ports or NoopPorts()
        self._generation_id = 0
        self._listeners: list[TransitionListener] = []
        self._history: deque[StateTransition] = deque(maxlen=history_size)
        self._dispatching = False

    # -- Queries --

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def generation_id(self) -> int:
        return self._generation_id

    @property
    def history(self) -> list[StateTransition]:
        """Most recent transitions, oldest first."""
        return list(self._history)

    def is_generation_valid(self, generation_id: int) -> bool:
        """True iff *generation_id* is the live generation right now."""
        return generation_id == self._generation_id

    def can_start_analysis(self) -> bool:
        return self._state is S.LISTENING

    def can_receive_chunks(self) -> bool:
        return self._state in _AI_ACTIVE

    def is_ai_active(self) -> bool:
        return self._state in _AI_ACTIVE

    def is_user_active(self) -> bool:
        return self._state in _USER_ACTIVE

    def should_listen_to_mic(self) -> bool:
        return self._state in _MIC_OPEN

    # -- Wiring --

    def set_ports(self, ports: StateMachinePorts | None) -> None:
        """Replace the side-effect ports (``None`` restores the no-op ports)."""
        self._ports = ports or NoopPorts()

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Register *listener* for successful transitions.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- Dispatch --

    def dispatch(self, event: ConversationEvent) -> bool:
        """Apply *event* to the current state.

        Returns False, leaving the state untouched, when the transition is
        not in the table or when called re-entrantly from a side effect or
        listener.  Never raises.
        """
        if self._dispatching:
            logger.warning(
                "Rejected re-entrant dispatch of %s while in %s", event, self._state
            )
            return False

        prev = self._state
        target = resolve_transition(prev, event)
        if target is None:
            logger.debug("Invalid transition: %s + %s", prev, event)
            return False

        self._dispatching = True
        try:
            self._state = target
            logger.debug("%s --[%s]--> %s", prev, event, target)
            self._run_side_effects(prev, event, target)
            record = StateTransition(
                from_state=prev,
                event=event,
                to_state=target,
                generation_id=self._generation_id,
            )
            self._history.append(record)
            self._notify(record)
        finally:
            self._dispatching = False
        return True

    def _run_side_effects(
        self,
        prev: ConversationState,
        event: ConversationEvent,
        target: ConversationState,
    ) -> None:
        # Leaving an active generation behind: interruption or session stop.
        if prev in _AI_ACTIVE and target in (S.INTERRUPTED, S.IDLE):
            logger.debug("Cancelling generation %d (%s)", self._generation_id, event)
            self._call_port("cancel_generation")
            self._generation_id += 1

        if prev is S.AI_THINKING and event is E.UTTERANCE_COMPLETE:
            logger.debug("Dropping pending generation")
            self._call_port("drop_pending_generation")

        if target in (S.LISTENING, S.IDLE):
            self._call_port("reset_timers")

        if event is E.ANALYSIS_START:
            self._generation_id += 1

    def _call_port(self, name: str) -> None:
        try:
            getattr(self._ports, name)()
        except Exception:
            logger.exception("Error in state machine port %s", name)

    def _notify(self, record: StateTransition) -> None:
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception:
                logger.exception("Error in state listener")
