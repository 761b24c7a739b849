"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import pytest

from parley.core.fsm import ConversationStateMachine
from parley.generation.mock import MockGenerationSource
from parley.models.enums import ConversationEvent, ConversationState
from parley.orchestration.config import OrchestratorConfig
from parley.orchestration.engine import StreamingOrchestrator
from parley.store.memory import InMemorySessionStore
from parley.transcription.base import TranscriptFragment


@pytest.fixture
def advance() -> Callable[[int], Coroutine[Any, Any, None]]:
    """Yield control to let pending tasks run without real delay.

        await advance()       # 5 yields (default)
        await advance(10)     # 10 yields for heavier workloads
    """

    async def _advance(n: int = 5) -> None:
        for _ in range(n):
            await asyncio.sleep(0)

    return _advance


@pytest.fixture
def fsm() -> ConversationStateMachine:
    return ConversationStateMachine()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


def final(text: str, confidence: float = 0.9, **kwargs: Any) -> TranscriptFragment:
    return TranscriptFragment(text=text, is_final=True, confidence=confidence, **kwargs)


def interim(text: str, confidence: float = 0.9) -> TranscriptFragment:
    return TranscriptFragment(text=text, is_final=False, confidence=confidence)


EVENTS_TO: dict[ConversationState, list[ConversationEvent]] = {
    ConversationState.IDLE: [],
    ConversationState.LISTENING: [ConversationEvent.START_INTERVIEW],
    ConversationState.USER_SPEAKING: [
        ConversationEvent.START_INTERVIEW,
        ConversationEvent.SPEECH_START,
    ],
    ConversationState.AI_THINKING: [
        ConversationEvent.START_INTERVIEW,
        ConversationEvent.ANALYSIS_START,
    ],
    ConversationState.AI_RESPONDING: [
        ConversationEvent.START_INTERVIEW,
        ConversationEvent.ANALYSIS_START,
        ConversationEvent.ANALYSIS_CHUNK,
    ],
    ConversationState.INTERRUPTED: [
        ConversationEvent.START_INTERVIEW,
        ConversationEvent.ANALYSIS_START,
        ConversationEvent.USER_INTERRUPT,
    ],
}
"""Event paths from IDLE reaching each state."""


def drive_to(machine: ConversationStateMachine, state: ConversationState) -> None:
    for event in EVENTS_TO[state]:
        assert machine.dispatch(event)
    assert machine.state is state


def make_orchestrator(
    generator: MockGenerationSource | None = None,
    **config: Any,
) -> StreamingOrchestrator:
    config.setdefault("settle_delay_ms", 0)
    return StreamingOrchestrator(
        generator or MockGenerationSource(),
        config=OrchestratorConfig(**config),
    )
