"""Mock transcription source for testing."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from parley.transcription.base import TranscriptionEvent, TranscriptionSource


class MockTranscriptionSource(TranscriptionSource):
    """Replays a preconfigured sequence of transcription events.

    Example:
        source = MockTranscriptionSource(
            [
                SpeechStarted(),
                TranscriptFragment("What is your greatest strength?", is_final=True),
                SpeechEnded(),
            ]
        )
    """

    def __init__(
        self,
        events: list[TranscriptionEvent] | None = None,
        *,
        delay_s: float = 0.0,
    ) -> None:
        self._events = list(events or [])
        self._delay_s = delay_s
        self.emitted: list[TranscriptionEvent] = []
        self.closed = False

    async def events(self) -> AsyncIterator[TranscriptionEvent]:
        for event in self._events:
            await asyncio.sleep(self._delay_s)
            self.emitted.append(event)
            yield event

    async def close(self) -> None:
        self.closed = True
