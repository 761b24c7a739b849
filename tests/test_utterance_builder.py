"""Tests for UtteranceBuilder."""

from __future__ import annotations

import asyncio

import pytest

from parley.models.conversation import Utterance
from parley.models.enums import ClosedBy, Speaker
from parley.turn.builder import UtteranceBuilder
from parley.turn.policy import ClosurePolicy
from tests.conftest import final, interim


@pytest.fixture
def completed() -> list[Utterance]:
    return []


@pytest.fixture
def builder(completed: list[Utterance]) -> UtteranceBuilder:
    b = UtteranceBuilder(completed.append)
    yield b
    b.close()


class TestClosure:
    async def test_semantic_closure_from_word_fragments(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        results = [
            builder.process_result(final(word))
            for word in ["What", "is", "your", "greatest", "strength?"]
        ]

        assert results[:4] == [None, None, None, None]
        assert len(completed) == 1
        utterance = completed[0]
        assert results[4] is utterance
        assert utterance.text == "What is your greatest strength?"
        assert utterance.closed_by is ClosedBy.SEMANTIC
        assert utterance.speaker is Speaker.USER
        assert utterance.confidence == pytest.approx(0.9)
        assert builder.buffered_text == ""
        assert not builder.timer_pending

    async def test_filler_never_closes(self, completed: list[Utterance]) -> None:
        builder = UtteranceBuilder(
            completed.append, policy=ClosurePolicy(silence_threshold_ms=10)
        )
        builder.process_result(final("um", confidence=0.95))
        await asyncio.sleep(0.05)

        assert completed == []
        assert builder.buffered_text == "um"
        builder.close()

    async def test_silence_from_fragment(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        utterance = builder.process_result(
            final("I really enjoyed working with that team", trailing_silence_ms=1500)
        )

        assert utterance is not None
        assert utterance.closed_by is ClosedBy.SILENCE
        assert utterance.word_count == 7
        assert completed == [utterance]

    async def test_silence_countdown(self, completed: list[Utterance]) -> None:
        builder = UtteranceBuilder(
            completed.append, policy=ClosurePolicy(silence_threshold_ms=20)
        )
        assert builder.process_result(final("I really enjoyed working with that team")) is None
        assert builder.timer_pending

        await asyncio.sleep(0.08)

        assert len(completed) == 1
        assert completed[0].closed_by is ClosedBy.SILENCE
        assert not builder.has_pending_text

    async def test_countdown_leaves_short_text_open(self, completed: list[Utterance]) -> None:
        builder = UtteranceBuilder(
            completed.append, policy=ClosurePolicy(silence_threshold_ms=10)
        )
        builder.process_result(final("I worked there"))
        await asyncio.sleep(0.05)

        assert completed == []
        assert builder.buffered_text == "I worked there"
        builder.close()

    async def test_low_confidence_stays_open(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        builder.process_result(final("What is your greatest strength?", confidence=0.4))
        assert completed == []

    async def test_repeated_final_closes_by_stability(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        builder.process_result(final("I led the migration to Kubernetes"))
        builder.process_result(final("I led the migration to Kubernetes"))

        assert len(completed) == 1
        assert completed[0].text == "I led the migration to Kubernetes"
        assert completed[0].closed_by is ClosedBy.STABILITY

    async def test_recognizer_stable_count(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        builder.process_result(final("I led the migration to Kubernetes", stable_repeat_count=3))
        assert completed[0].closed_by is ClosedBy.STABILITY


class TestAccumulation:
    async def test_cumulative_final_replaces_buffer(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("I built"))
        builder.process_result(final("I built the billing"))
        assert builder.buffered_text == "I built the billing"

    async def test_shared_letter_prefix_is_appended(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("I"))
        builder.process_result(final("Iterators in Python"))
        assert builder.buffered_text == "I Iterators in Python"

    async def test_partial_word_overlap_is_appended(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("this"))
        builder.process_result(final("is"))
        assert builder.buffered_text == "this is"

    async def test_whitespace_ignored(self, builder: UtteranceBuilder) -> None:
        assert builder.process_result(final("   ")) is None
        assert not builder.has_pending_text
        assert not builder.timer_pending

    async def test_interim_is_display_only(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("I built"))
        builder.process_result(interim("I built the billing service."))

        assert builder.interim_text == "I built the billing service."
        assert builder.buffered_text == "I built"
        assert builder.timer_pending

        builder.process_result(final("the billing"))
        assert builder.interim_text == ""
        assert builder.buffered_text == "I built the billing"

    async def test_interim_without_buffer_does_not_arm(self, builder: UtteranceBuilder) -> None:
        builder.process_result(interim("What is"))
        assert not builder.timer_pending

    async def test_average_confidence(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("I built", confidence=0.8))
        builder.process_result(final("the billing", confidence=1.0))
        assert builder.average_confidence == pytest.approx(0.9)


class TestControl:
    async def test_force_commit(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        builder.process_result(final("um"))
        utterance = builder.force_commit()

        assert utterance is not None
        assert utterance.text == "um"
        assert utterance.closed_by is ClosedBy.SILENCE
        assert completed == [utterance]
        assert not builder.has_pending_text

    async def test_force_commit_with_reason(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("so the thing is"))
        utterance = builder.force_commit(ClosedBy.INTERRUPTION)
        assert utterance is not None
        assert utterance.closed_by is ClosedBy.INTERRUPTION

    async def test_force_commit_empty(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        assert builder.force_commit() is None
        assert completed == []

    async def test_reset_timers_keeps_text(self, builder: UtteranceBuilder) -> None:
        builder.process_result(final("I worked there"))
        builder.reset_timers()
        assert builder.buffered_text == "I worked there"
        assert builder.timer_pending

    async def test_reset_timers_without_text(self, builder: UtteranceBuilder) -> None:
        builder.reset_timers()
        assert not builder.timer_pending

    async def test_reset_discards(
        self, builder: UtteranceBuilder, completed: list[Utterance]
    ) -> None:
        builder.process_result(final("I worked there"))
        builder.process_result(interim("I worked there for"))
        builder.reset()

        assert builder.buffered_text == ""
        assert builder.interim_text == ""
        assert not builder.timer_pending
        assert completed == []

    async def test_without_callback(self) -> None:
        builder = UtteranceBuilder()
        utterance = builder.process_result(final("What is your greatest strength?"))
        assert utterance is not None
        assert utterance.id.startswith("utt-")
