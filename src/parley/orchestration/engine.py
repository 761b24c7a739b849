"""Streaming orchestrator: utterances in, generated responses out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Coroutine
from typing import Any

from parley.core.fsm import ConversationStateMachine
from parley.core.ports import StateMachinePorts
from parley.core.timers import ScheduledCallback
from parley.generation.base import (
    GenerationError,
    GenerationRequest,
    GenerationSource,
    GenerationTimeoutError,
)
from parley.generation.coalesce import coalesce_stream
from parley.intent.base import IntentClassifier, IntentResult
from parley.intent.patterns import PatternIntentClassifier
from parley.models.conversation import StateTransition, Turn, Utterance
from parley.models.enums import ConversationEvent
from parley.orchestration.config import OrchestratorConfig
from parley.store.base import SessionStore
from parley.store.memory import InMemorySessionStore
from parley.transcription.base import (
    SpeechEnded,
    SpeechStarted,
    TranscriptFragment,
    TranscriptionSource,
)
from parley.turn.builder import UtteranceBuilder

logger = logging.getLogger("parley.orchestrator")


class StreamingOrchestrator(StateMachinePorts):
    """Drives one conversation session.

    Recognizer events feed the :class:`UtteranceBuilder`.  Each closed
    utterance is recorded, classified and, when the intent warrants it,
    answered by streaming a generation into the session store.

    Every generation is tagged with the state machine's generation id at
    the moment it starts.  Chunks, completions and errors are applied only
    while that id is still live, so results from an interrupted
    generation can never leak into the store.

    The orchestrator is the state machine's side-effect port: interrupting
    a generation cancels its task (when the source allows it) and drops
    the partial response.

    Example::

        orchestrator = StreamingOrchestrator(HTTPGenerationSource(config))
        orchestrator.start()
        await orchestrator.run(transcription_source)
        await orchestrator.stop()
    """

    def __init__(
        self,
        generator: GenerationSource,
        *,
        fsm: ConversationStateMachine | None = None,
        builder: UtteranceBuilder | None = None,
        classifier: IntentClassifier | None = None,
        store: SessionStore | None = None,
        config: OrchestratorConfig | None = None,
    ) -> None:
        self._config = config or OrchestratorConfig()
        self._generator = generator
        self._fsm = fsm or ConversationStateMachine()
        self._builder = builder or UtteranceBuilder(policy=self._config.closure)
        self._classifier = classifier or PatternIntentClassifier()
        self._store = store or InMemorySessionStore()

        self._fsm.set_ports(self)
        self._unsubscribe_fsm = self._fsm.subscribe(self._on_transition)
        self._builder.set_on_complete(self._on_utterance)
        self._store.set_state(self._fsm.state)

        self._settle = ScheduledCallback(
            self._on_settle, self._config.settle_delay_ms, name="analysis_settle"
        )
        self._pending_text: str | None = None
        self._scheduled_tasks: set[asyncio.Task[Any]] = set()
        self._last_intent: IntentResult | None = None
        self._stopping = False

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def fsm(self) -> ConversationStateMachine:
        return self._fsm

    @property
    def builder(self) -> UtteranceBuilder:
        return self._builder

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def generator(self) -> GenerationSource:
        return self._generator

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def last_intent(self) -> IntentResult | None:
        """Classification of the most recent utterance."""
        return self._last_intent

    @property
    def analysis_pending(self) -> bool:
        """True while the settle delay before an analysis is running."""
        return self._settle.pending

    @property
    def active_generations(self) -> int:
        """Number of generation tasks that have not finished."""
        return len(self._scheduled_tasks)

    # -------------------------------------------------------------------------
    # Session input
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """Open the session and begin listening."""
        return self._fsm.dispatch(ConversationEvent.START_INTERVIEW)

    def on_speech_start(self) -> bool:
        if self._fsm.is_ai_active():
            logger.debug("Speech started while AI active, interrupting")
            return self._fsm.dispatch(ConversationEvent.USER_INTERRUPT)
        return self._fsm.dispatch(ConversationEvent.SPEECH_START)

    def on_speech_end(self) -> bool:
        return self._fsm.dispatch(ConversationEvent.SPEECH_END)

    def on_fragment(self, fragment: TranscriptFragment) -> Utterance | None:
        """Forward a recognizer fragment to the utterance builder."""
        return self._builder.process_result(fragment)

    async def run(self, source: TranscriptionSource) -> None:
        """Consume *source* until it is exhausted, in arrival order."""
        async for event in source.events():
            if isinstance(event, TranscriptFragment):
                self.on_fragment(event)
            elif isinstance(event, SpeechStarted):
                self.on_speech_start()
            elif isinstance(event, SpeechEnded):
                self.on_speech_end()
            else:
                logger.warning("Ignoring unknown transcription event %r", event)

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def trigger_analysis(self, text: str) -> int | None:
        """Start a generation for *text*.

        Returns the generation id, or None when the conversation is not in a
        state that allows analysis.  Must be called on the event loop.
        """
        if not self._fsm.can_start_analysis():
            logger.debug("Cannot start analysis in state %s", self._fsm.state)
            return None

        self._fsm.dispatch(ConversationEvent.ANALYSIS_START)
        generation_id = self._fsm.generation_id
        self._store.set_error(None)

        settings = self._config.generation
        request = GenerationRequest(
            generation_id=generation_id,
            text=text,
            turns=self._store.recent_turns(self._config.history_turns),
            language=settings.base_language,
            profile=settings.profile,
            format_mode=settings.format_mode,
            model=settings.model,
        )
        logger.debug("Triggering analysis (gen %d): %r", generation_id, text[:50])
        self._create_task(self._run_generation(request), f"generation-{generation_id}")
        return generation_id

    async def join(self) -> None:
        """Wait for every running generation task to finish."""
        while self._scheduled_tasks:
            await asyncio.gather(*list(self._scheduled_tasks), return_exceptions=True)

    async def _run_generation(self, request: GenerationRequest) -> None:
        generation_id = request.generation_id
        timeout_s = self._config.generation_timeout_s
        stream: AsyncIterator[str] = self._generator.stream(request)
        if self._config.flush is not None:
            stream = coalesce_stream(stream, self._config.flush)
        try:
            async with asyncio.timeout(timeout_s):
                async for chunk in stream:
                    self._on_chunk(generation_id, chunk)
        except TimeoutError:
            self._on_error(
                generation_id, GenerationTimeoutError(timeout_s, source=self._generator.name)
            )
        except GenerationError as exc:
            self._on_error(generation_id, exc)
        except Exception as exc:
            logger.exception("Generation %d failed", generation_id)
            message = str(exc) or type(exc).__name__
            self._on_error(generation_id, GenerationError(message, source=self._generator.name))
        else:
            self._on_complete(generation_id)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def _on_chunk(self, generation_id: int, chunk: str) -> None:
        if not self._fsm.is_generation_valid(generation_id):
            logger.debug("Ignoring chunk for stale generation %d", generation_id)
            return
        if not self._fsm.can_receive_chunks():
            logger.debug("Cannot receive chunks in state %s", self._fsm.state)
            return
        self._fsm.dispatch(ConversationEvent.ANALYSIS_CHUNK)
        self._store.append_stream(generation_id, chunk)

    def _on_complete(self, generation_id: int) -> None:
        if not self._fsm.is_generation_valid(generation_id):
            logger.debug("Ignoring completion for stale generation %d", generation_id)
            return
        self._fsm.dispatch(ConversationEvent.ANALYSIS_COMPLETE)
        turn = self._store.commit_stream()
        logger.debug(
            "Analysis complete (gen %d, %d chars)",
            generation_id,
            len(turn.content) if turn is not None else 0,
        )

    def _on_error(self, generation_id: int, error: GenerationError) -> None:
        if not self._fsm.is_generation_valid(generation_id):
            logger.debug("Dropping error from stale generation %d: %s", generation_id, error)
            return
        logger.warning("Analysis error (gen %d): %s", generation_id, error)
        self._fsm.dispatch(ConversationEvent.ANALYSIS_ERROR)
        self._store.set_error(str(error))
        self._store.clear_stream()

    # -------------------------------------------------------------------------
    # Utterances
    # -------------------------------------------------------------------------

    def _on_utterance(self, utterance: Utterance) -> None:
        text = utterance.text.strip()
        if not text:
            logger.debug("Skipping empty utterance")
            return

        logger.debug("Utterance complete: %r (state %s)", text[:50], self._fsm.state)
        self._fsm.dispatch(ConversationEvent.UTTERANCE_COMPLETE)
        self._store.add_utterance(utterance)
        self._store.add_turn(Turn.from_utterance(utterance))
        if self._stopping:
            return

        result = self._classifier.describe(text)
        self._last_intent = result
        logger.debug("Intent %s (%s)", result.intent, result.reason)

        if result.should_continue:
            self._builder.reset_timers()
            return
        if not result.should_trigger:
            return

        self._pending_text = text
        self._settle.start()

    def _on_settle(self) -> None:
        text, self._pending_text = self._pending_text, None
        if text is None:
            return
        if not self._fsm.can_start_analysis():
            logger.debug("Analysis skipped after settle, state is %s", self._fsm.state)
            return
        self.trigger_analysis(text)

    def _on_transition(self, record: StateTransition) -> None:
        self._store.set_state(record.to_state)

    # -------------------------------------------------------------------------
    # State machine ports
    # -------------------------------------------------------------------------

    def cancel_generation(self) -> None:
        if self._generator.supports_cancellation:
            for task in self._scheduled_tasks:
                task.cancel()
        else:
            logger.debug("Generation source cannot be cancelled, letting it drain")
        self._store.clear_stream()

    def drop_pending_generation(self) -> None:
        self._settle.cancel()
        self._pending_text = None

    def reset_timers(self) -> None:
        self._builder.reset_timers()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def stop(self) -> None:
        """End the session.

        Buffered speech is committed to history, the state machine returns
        to IDLE and all pending work is cancelled.  Safe to call repeatedly.
        """
        self._stopping = True
        try:
            self._builder.force_commit()
            self._fsm.dispatch(ConversationEvent.STOP_INTERVIEW)
            self._settle.cancel()
            self._pending_text = None
            for task in self._scheduled_tasks:
                task.cancel()
            if self._scheduled_tasks:
                await asyncio.gather(*self._scheduled_tasks, return_exceptions=True)
            self._scheduled_tasks.clear()
            self._store.clear_stream()
            self._builder.reset()
        finally:
            self._stopping = False

    async def close(self) -> None:
        """Stop the session and release the generation source."""
        await self.stop()
        self._builder.close()
        self._unsubscribe_fsm()
        self._fsm.set_ports(None)
        await self._generator.close()

    # -------------------------------------------------------------------------
    # Task tracking
    # -------------------------------------------------------------------------

    def _create_task(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        task.add_done_callback(self._task_done)
        self._scheduled_tasks.add(task)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        """Done-callback for generation tasks: log exceptions and forget the task."""
        self._scheduled_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Unhandled exception in generation task %s: %s",
                task.get_name(),
                exc,
                exc_info=exc,
            )
