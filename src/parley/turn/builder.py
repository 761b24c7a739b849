"""Utterance builder: segments a fragment stream into closed utterances."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime

from parley.core.timers import ScheduledCallback
from parley.models.conversation import Utterance, _utcnow
from parley.models.enums import ClosedBy, Speaker
from parley.transcription.base import TranscriptFragment
from parley.turn.policy import ClosureDecision, ClosurePolicy, evaluate_closure
from parley.turn.similarity import confidence_spread, text_similarity

logger = logging.getLogger("parley.turn")

UtteranceCallback = Callable[[Utterance], object]


class UtteranceBuilder:
    """Accumulate final recognizer fragments until a closure rule fires.

    Closure is evaluated when a final fragment arrives and again when the
    silence countdown expires.  On closure exactly one :class:`Utterance`
    is passed to *on_complete* and the buffer is cleared.  Interim
    fragments only feed :attr:`interim_text`.

    Timers run on the asyncio event loop, so feed the builder from code
    running on that loop.
    """

    def __init__(
        self,
        on_complete: UtteranceCallback | None = None,
        *,
        policy: ClosurePolicy | None = None,
        speaker: Speaker = Speaker.USER,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_complete = on_complete
        self._policy = policy or ClosurePolicy()
        self._speaker = speaker
        self._clock = clock
        self._silence_timer = ScheduledCallback(
            self._on_silence_timeout,
            self._policy.silence_threshold_ms,
            name="utterance_silence",
        )
        self._text = ""
        self._interim = ""
        self._confidences: list[float] = []
        self._started_at: datetime | None = None
        self._last_activity = 0.0
        self._last_final = ""
        self._repeat_count = 0

    @property
    def policy(self) -> ClosurePolicy:
        return self._policy

    @property
    def buffered_text(self) -> str:
        """Final text accumulated for the open utterance."""
        return self._text

    @property
    def interim_text(self) -> str:
        """Latest interim text, for display only."""
        return self._interim

    @property
    def has_pending_text(self) -> bool:
        return bool(self._text.strip())

    @property
    def timer_pending(self) -> bool:
        return self._silence_timer.pending

    def set_on_complete(self, callback: UtteranceCallback | None) -> None:
        self._on_complete = callback

    # -- Input --

    def process_result(self, fragment: TranscriptFragment) -> Utterance | None:
        """Feed one recognizer fragment.

        Returns the closed utterance if this fragment completed one.
        """
        text = fragment.text.strip()
        if not text:
            return None

        self._last_activity = self._clock()
        if self._started_at is None:
            self._started_at = _utcnow()

        if not fragment.is_final:
            self._interim = text
            if self.has_pending_text:
                self._silence_timer.start()
            return None

        self._interim = ""
        self._append(text)
        self._confidences.append(fragment.confidence)
        self._track_repeat(text)

        decision = self.evaluate(
            trailing_silence_ms=fragment.trailing_silence_ms,
            stable_count=max(fragment.stable_repeat_count, self._repeat_count),
        )
        logger.debug(
            "Final fragment %r -> close=%s (%s)", text[:40], decision.should_close, decision.reason
        )
        if decision.should_close and decision.closed_by is not None:
            return self._commit(decision.closed_by)

        self._silence_timer.start()
        return None

    def evaluate(
        self, *, trailing_silence_ms: float = 0.0, stable_count: int | None = None
    ) -> ClosureDecision:
        """Run the closure policy against the current buffer."""
        return evaluate_closure(
            self._text,
            confidence=self.average_confidence,
            trailing_silence_ms=trailing_silence_ms,
            stable_count=self._repeat_count if stable_count is None else stable_count,
            confidence_spread=confidence_spread(self._confidences),
            policy=self._policy,
        )

    @property
    def average_confidence(self) -> float:
        if not self._confidences:
            return 0.0
        return sum(self._confidences) / len(self._confidences)

    # -- Control --

    def reset_timers(self) -> None:
        """Restart the closure countdown, keeping buffered text."""
        self._silence_timer.cancel()
        if self.has_pending_text:
            self._last_activity = self._clock()
            self._silence_timer.start()

    def force_commit(self, closed_by: ClosedBy = ClosedBy.SILENCE) -> Utterance | None:
        """Close the open utterance immediately, bypassing the closure rules.

        Returns None when nothing is buffered.
        """
        if not self.has_pending_text:
            self.reset()
            return None
        logger.debug("Force-committing buffered utterance")
        return self._commit(closed_by)

    def reset(self) -> None:
        """Discard buffered text and cancel the countdown."""
        self._silence_timer.cancel()
        self._text = ""
        self._interim = ""
        self._confidences = []
        self._started_at = None
        self._last_final = ""
        self._repeat_count = 0

    def close(self) -> None:
        self._silence_timer.cancel()

    # -- Internal --

    def _append(self, text: str) -> None:
        current = self._text
        lowered = current.lower()
        if not current:
            self._text = text
        elif lowered == text.lower() or lowered.endswith(" " + text.lower()):
            return
        elif text.lower().startswith(lowered + " "):
            # Recognizer re-reported the whole utterance with more words.
            self._text = text
        else:
            self._text = f"{current} {text}"

    def _track_repeat(self, text: str) -> None:
        if (
            self._last_final
            and text_similarity(self._last_final, text) >= self._policy.similarity_threshold
        ):
            self._repeat_count += 1
        else:
            self._repeat_count = 1
        self._last_final = text

    def _on_silence_timeout(self) -> None:
        if not self.has_pending_text:
            return
        elapsed_ms = (self._clock() - self._last_activity) * 1000.0
        # The countdown only fires once the threshold has passed.
        silence_ms = max(elapsed_ms, float(self._policy.silence_threshold_ms))
        decision = self.evaluate(trailing_silence_ms=silence_ms)
        logger.debug("Silence timeout -> close=%s (%s)", decision.should_close, decision.reason)
        if decision.should_close and decision.closed_by is not None:
            self._commit(decision.closed_by)

    def _commit(self, closed_by: ClosedBy) -> Utterance:
        utterance = Utterance(
            speaker=self._speaker,
            text=self._text.strip(),
            start_time=self._started_at or _utcnow(),
            end_time=_utcnow(),
            confidence=min(max(self.average_confidence, 0.0), 1.0),
            closed_by=closed_by,
        )
        logger.debug(
            "Committing utterance %r (%s, conf %.2f)",
            utterance.text[:50],
            closed_by,
            utterance.confidence,
        )
        self.reset()
        if self._on_complete is not None:
            self._on_complete(utterance)
        return utterance
