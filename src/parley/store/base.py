"""Session store ABC and read-side views."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from parley.models.conversation import Turn, Utterance, _utcnow
from parley.models.enums import ConversationState


@dataclass
class StreamingBuffer:
    """Text accumulated for one in-flight generation."""

    generation_id: int
    """Generation that created the buffer."""

    text: str = ""
    """Accepted chunks, concatenated."""

    started_at: datetime = field(default_factory=_utcnow)


class SessionSnapshot(BaseModel):
    """Immutable copy of the store at one instant, for UI layers."""

    model_config = ConfigDict(frozen=True)

    state: ConversationState
    turns: tuple[Turn, ...] = ()
    utterances: tuple[Utterance, ...] = ()
    streaming_text: str | None = None
    streaming_generation_id: int | None = None
    error: str | None = None
    taken_at: datetime = Field(default_factory=_utcnow)


StoreListener = Callable[[], object]


class SessionStore(ABC):
    """Observable per-session state.

    Mutators are driven by the orchestrator only.  Everything else should
    treat the store as read-only and use :meth:`subscribe` or
    :meth:`snapshot`.
    """

    # -- Mutators --

    @abstractmethod
    def set_state(self, state: ConversationState) -> None:
        """Mirror the conversation phase."""
        ...

    @abstractmethod
    def add_turn(self, turn: Turn) -> None:
        """Append a committed turn, evicting the oldest past the cap."""
        ...

    @abstractmethod
    def add_utterance(self, utterance: Utterance) -> None:
        """Append a closed utterance, evicting the oldest past the cap."""
        ...

    @abstractmethod
    def append_stream(self, generation_id: int, chunk: str) -> None:
        """Append *chunk*, creating the buffer for *generation_id* if needed.

        A buffer owned by another generation is replaced.
        """
        ...

    @abstractmethod
    def commit_stream(self) -> Turn | None:
        """Promote the buffer to an AI turn and clear it.

        Returns the new turn, or None when there was nothing to commit.
        """
        ...

    @abstractmethod
    def clear_stream(self) -> None:
        """Discard the buffer without committing."""
        ...

    @abstractmethod
    def set_error(self, error: str | None) -> None:
        """Record (or clear, with None) the surfaced error message."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Reset to an empty idle session."""
        ...

    # -- Readers --

    @property
    @abstractmethod
    def state(self) -> ConversationState: ...

    @property
    @abstractmethod
    def turns(self) -> list[Turn]: ...

    @property
    @abstractmethod
    def utterances(self) -> list[Utterance]: ...

    @property
    @abstractmethod
    def streaming(self) -> StreamingBuffer | None: ...

    @property
    def streaming_text(self) -> str | None:
        buffer = self.streaming
        return buffer.text if buffer is not None else None

    @property
    @abstractmethod
    def error(self) -> str | None: ...

    def recent_turns(self, n: int) -> list[Turn]:
        """The last *n* turns, oldest first."""
        if n <= 0:
            return []
        return self.turns[-n:]

    def snapshot(self) -> SessionSnapshot:
        buffer = self.streaming
        return SessionSnapshot(
            state=self.state,
            turns=tuple(self.turns),
            utterances=tuple(self.utterances),
            streaming_text=buffer.text if buffer is not None else None,
            streaming_generation_id=buffer.generation_id if buffer is not None else None,
            error=self.error,
        )

    @abstractmethod
    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Call *listener* after every mutation. Returns an unsubscribe function."""
        ...
