"""Mock generation source for testing."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from parley.generation.base import GenerationRequest, GenerationSource


class MockGenerationSource(GenerationSource):
    """Round-robin scripted chunk streams for tests.

    Args:
        responses: One list of chunks per call, reused round-robin.
        delay_s: Sleep before each chunk.
        gates: Optional per-call events, so a test can hold a generation open
            and release it later.
        gate_after: Number of chunks yielded before waiting on the gate.
        error: Raised after ``error_after`` chunks of every call.
        error_after: Number of chunks yielded before ``error`` is raised.
        cancellable: Value reported by :attr:`supports_cancellation`.
    """

    def __init__(
        self,
        responses: list[list[str]] | None = None,
        *,
        delay_s: float = 0.0,
        gates: list[asyncio.Event | None] | None = None,
        gate_after: int = 0,
        error: Exception | None = None,
        error_after: int = 0,
        cancellable: bool = True,
    ) -> None:
        self.responses = responses or [["Hello ", "from ", "mock."]]
        self._delay_s = delay_s
        self._gates = gates or []
        self._gate_after = gate_after
        self._error = error
        self._error_after = error_after
        self._cancellable = cancellable
        self.requests: list[GenerationRequest] = []
        self.finished: list[int] = []
        self.cancelled: list[int] = []
        self.closed = False

    @property
    def supports_cancellation(self) -> bool:
        return self._cancellable

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        index = len(self.requests)
        self.requests.append(request)
        chunks = self.responses[index % len(self.responses)]
        gate = self._gates[index] if index < len(self._gates) else None
        try:
            for i, chunk in enumerate(chunks):
                if gate is not None and i == self._gate_after:
                    await gate.wait()
                if self._error is not None and i >= self._error_after:
                    raise self._error
                await asyncio.sleep(self._delay_s)
                yield chunk
            if gate is not None and self._gate_after >= len(chunks):
                await gate.wait()
            if self._error is not None:
                raise self._error
            self.finished.append(request.generation_id)
        except (asyncio.CancelledError, GeneratorExit):
            self.cancelled.append(request.generation_id)
            raise

    async def close(self) -> None:
        self.closed = True
