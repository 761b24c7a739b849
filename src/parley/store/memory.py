"""In-memory implementation of SessionStore."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from parley.models.conversation import Turn, Utterance
from parley.models.enums import ConversationState, Speaker
from parley.store.base import SessionStore, StoreListener, StreamingBuffer

logger = logging.getLogger("parley.store")


class InMemorySessionStore(SessionStore):
    """Deque-backed store with bounded turn and utterance history."""

    def __init__(self, *, max_turns: int = 50, max_utterances: int = 100) -> None:
        self._state = ConversationState.IDLE
        self._turns: deque[Turn] = deque(maxlen=max_turns)
        self._utterances: deque[Utterance] = deque(maxlen=max_utterances)
        self._streaming: StreamingBuffer | None = None
        self._error: str | None = None
        self._listeners: list[StoreListener] = []

    # Mutators

    def set_state(self, state: ConversationState) -> None:
        if state is self._state:
            return
        self._state = state
        self._notify()

    def add_turn(self, turn: Turn) -> None:
        self._turns.append(turn)
        self._notify()

    def add_utterance(self, utterance: Utterance) -> None:
        self._utterances.append(utterance)
        self._notify()

    def append_stream(self, generation_id: int, chunk: str) -> None:
        if self._streaming is None or self._streaming.generation_id != generation_id:
            self._streaming = StreamingBuffer(generation_id=generation_id)
        self._streaming.text += chunk
        self._notify()

    def commit_stream(self) -> Turn | None:
        buffer, self._streaming = self._streaming, None
        if buffer is None:
            return None
        content = buffer.text.strip()
        if not content:
            self._notify()
            return None
        turn = Turn(speaker=Speaker.AI, content=content)
        self._turns.append(turn)
        self._notify()
        return turn

    def clear_stream(self) -> None:
        if self._streaming is None:
            return
        self._streaming = None
        self._notify()

    def set_error(self, error: str | None) -> None:
        if error == self._error:
            return
        self._error = error
        self._notify()

    def clear(self) -> None:
        self._state = ConversationState.IDLE
        self._turns.clear()
        self._utterances.clear()
        self._streaming = None
        self._error = None
        self._notify()

    # Readers

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def turns(self) -> list[Turn]:
        return list(self._turns)

    @property
    def utterances(self) -> list[Utterance]:
        return list(self._utterances)

    @property
    def streaming(self) -> StreamingBuffer | None:
        return self._streaming

    @property
    def error(self) -> str | None:
        return self._error

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Error in store listener")
