"""Simulated interview session with scripted speech and a mock model.

Demonstrates how the pieces fit together without any network access:
- MockTranscriptionSource replaying recognizer fragments
- StreamingOrchestrator closing utterances and gating them by intent
- MockGenerationSource streaming a response that the user interrupts
- InMemorySessionStore snapshots for a UI layer

Run with:
    uv run python examples/mock_session.py
"""

from __future__ import annotations

import asyncio
import logging

from parley import (
    InMemorySessionStore,
    MockGenerationSource,
    MockTranscriptionSource,
    OrchestratorConfig,
    SpeechEnded,
    SpeechStarted,
    StreamFlushPolicy,
    StreamingOrchestrator,
    TranscriptFragment,
)

logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")
logger = logging.getLogger("parley.example")


def fragment(text: str, *, silence_ms: int = 0) -> TranscriptFragment:
    return TranscriptFragment(
        text=text, is_final=True, confidence=0.92, trailing_silence_ms=silence_ms
    )


async def main() -> None:
    store = InMemorySessionStore()
    store.subscribe(lambda: logger.debug("store changed: %s", store.state))

    generator = MockGenerationSource(
        [
            ["Talk about ", "a concrete project ", "where focus paid off."],
            ["Name the trade-off, ", "then how you communicated it."],
        ],
        delay_s=0.05,
    )
    orchestrator = StreamingOrchestrator(
        generator,
        store=store,
        config=OrchestratorConfig(flush=StreamFlushPolicy()),
    )
    orchestrator.start()

    # First question: answered in full.
    await orchestrator.run(
        MockTranscriptionSource(
            [
                SpeechStarted(),
                TranscriptFragment("What is your", confidence=0.8),
                fragment("What is your greatest strength?"),
                SpeechEnded(),
            ]
        )
    )
    await asyncio.sleep(0.1)
    await orchestrator.join()

    # A statement is recorded but not answered.
    await orchestrator.run(
        MockTranscriptionSource(
            [fragment("So basically our team runs everything on Kubernetes.")]
        )
    )

    # Second question, interrupted by the speaker partway through.
    await orchestrator.run(
        MockTranscriptionSource(
            [fragment("How do you handle disagreements about priorities?")]
        )
    )
    await asyncio.sleep(0.12)
    await orchestrator.run(
        MockTranscriptionSource(
            [
                SpeechStarted(),
                fragment("Actually let me rephrase that question for you", silence_ms=1500),
            ]
        )
    )

    await orchestrator.close()

    snapshot = store.snapshot()
    print(f"\nFinal state: {snapshot.state}")
    for turn in snapshot.turns:
        print(f"  [{turn.speaker}] {turn.content}")


if __name__ == "__main__":
    asyncio.run(main())
