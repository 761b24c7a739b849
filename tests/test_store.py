"""Tests for InMemorySessionStore."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from parley.models.conversation import Turn, Utterance
from parley.models.enums import ConversationState, Speaker
from parley.store.memory import InMemorySessionStore


def _turn(content: str, speaker: Speaker = Speaker.USER) -> Turn:
    return Turn(speaker=speaker, content=content)


class TestHistory:
    def test_turns_are_bounded(self) -> None:
        store = InMemorySessionStore(max_turns=3)
        for i in range(5):
            store.add_turn(_turn(f"turn {i}"))
        assert [t.content for t in store.turns] == ["turn 2", "turn 3", "turn 4"]

    def test_default_caps(self, store: InMemorySessionStore) -> None:
        for i in range(120):
            store.add_utterance(Utterance(text=f"utterance {i}"))
            store.add_turn(_turn(f"turn {i}"))
        assert len(store.utterances) == 100
        assert len(store.turns) == 50
        assert store.utterances[0].text == "utterance 20"

    def test_recent_turns(self, store: InMemorySessionStore) -> None:
        for i in range(10):
            store.add_turn(_turn(f"turn {i}"))
        assert [t.content for t in store.recent_turns(3)] == ["turn 7", "turn 8", "turn 9"]
        assert store.recent_turns(0) == []
        assert len(store.recent_turns(50)) == 10

    def test_turns_returns_copy(self, store: InMemorySessionStore) -> None:
        store.add_turn(_turn("hello there"))
        store.turns.clear()
        assert len(store.turns) == 1


class TestStreaming:
    def test_append_and_commit(self, store: InMemorySessionStore) -> None:
        store.append_stream(1, "Start with ")
        store.append_stream(1, "the outcome.")
        assert store.streaming_text == "Start with the outcome."
        assert store.streaming is not None
        assert store.streaming.generation_id == 1

        turn = store.commit_stream()

        assert turn is not None
        assert turn.speaker is Speaker.AI
        assert turn.content == "Start with the outcome."
        assert store.turns == [turn]
        assert store.streaming_text is None

    def test_new_generation_replaces_buffer(self, store: InMemorySessionStore) -> None:
        store.append_stream(1, "old")
        store.append_stream(2, "new")
        assert store.streaming_text == "new"

    def test_commit_empty_buffer(self, store: InMemorySessionStore) -> None:
        assert store.commit_stream() is None
        store.append_stream(1, "   ")
        assert store.commit_stream() is None
        assert store.turns == []

    def test_clear_stream(self, store: InMemorySessionStore) -> None:
        store.append_stream(1, "partial")
        store.clear_stream()
        assert store.streaming is None
        assert store.turns == []


class TestStateAndErrors:
    def test_set_state_and_error(self, store: InMemorySessionStore) -> None:
        store.set_state(ConversationState.LISTENING)
        store.set_error("Generation timed out after 30s")
        assert store.state is ConversationState.LISTENING
        assert store.error == "Generation timed out after 30s"
        store.set_error(None)
        assert store.error is None

    def test_clear(self, store: InMemorySessionStore) -> None:
        store.set_state(ConversationState.AI_RESPONDING)
        store.add_turn(_turn("hello there"))
        store.add_utterance(Utterance(text="hello there"))
        store.append_stream(3, "partial")
        store.set_error("boom")

        store.clear()

        assert store.state is ConversationState.IDLE
        assert store.turns == []
        assert store.utterances == []
        assert store.streaming is None
        assert store.error is None


class TestSnapshot:
    def test_snapshot_is_frozen_copy(self, store: InMemorySessionStore) -> None:
        store.set_state(ConversationState.AI_RESPONDING)
        store.add_turn(_turn("What is your greatest strength?"))
        store.append_stream(4, "My greatest")

        snap = store.snapshot()
        store.append_stream(4, " strength")

        assert snap.state is ConversationState.AI_RESPONDING
        assert snap.streaming_text == "My greatest"
        assert snap.streaming_generation_id == 4
        assert [t.content for t in snap.turns] == ["What is your greatest strength?"]
        with pytest.raises(ValidationError):
            snap.error = "changed"


class TestSubscribe:
    def test_listener_called_on_mutation(self, store: InMemorySessionStore) -> None:
        calls: list[int] = []
        unsubscribe = store.subscribe(lambda: calls.append(1))

        store.set_state(ConversationState.LISTENING)
        store.set_state(ConversationState.LISTENING)
        store.add_turn(_turn("hello there"))
        unsubscribe()
        store.add_turn(_turn("ignored"))

        assert calls == [1, 1]

    def test_failing_listener_is_isolated(self, store: InMemorySessionStore) -> None:
        def _boom() -> None:
            raise RuntimeError("listener failed")

        calls: list[int] = []
        store.subscribe(_boom)
        store.subscribe(lambda: calls.append(1))

        store.add_turn(_turn("hello there"))

        assert calls == [1]
        assert len(store.turns) == 1
