"""Parley - turn-taking and streaming analysis for live voice conversations."""

from parley._version import __version__
from parley.core import (
    ConversationStateMachine,
    NoopPorts,
    ScheduledCallback,
    StateMachinePorts,
)
from parley.generation import (
    GenerationError,
    GenerationRequest,
    GenerationSource,
    GenerationTimeoutError,
    HTTPGenerationConfig,
    HTTPGenerationSource,
    MockGenerationSource,
    StreamFlushPolicy,
    coalesce_stream,
)
from parley.intent import (
    IntentClassifier,
    IntentResult,
    MockIntentClassifier,
    PatternIntentClassifier,
    classify_intent,
    should_continue,
    should_trigger,
)
from parley.models import (
    ClosedBy,
    ConversationEvent,
    ConversationState,
    Intent,
    Speaker,
    StateTransition,
    Turn,
    Utterance,
)
from parley.orchestration import GenerationSettings, OrchestratorConfig, StreamingOrchestrator
from parley.store import InMemorySessionStore, SessionSnapshot, SessionStore
from parley.transcription import (
    MockTranscriptionSource,
    SpeechEnded,
    SpeechStarted,
    TranscriptFragment,
    TranscriptionSource,
)
from parley.turn import ClosureDecision, ClosurePolicy, UtteranceBuilder, evaluate_closure

__all__ = [
    "__version__",
    # Models
    "ClosedBy",
    "ConversationEvent",
    "ConversationState",
    "Intent",
    "Speaker",
    "StateTransition",
    "Turn",
    "Utterance",
    # State machine
    "ConversationStateMachine",
    "NoopPorts",
    "ScheduledCallback",
    "StateMachinePorts",
    # Utterances
    "ClosureDecision",
    "ClosurePolicy",
    "UtteranceBuilder",
    "evaluate_closure",
    # Intent
    "IntentClassifier",
    "IntentResult",
    "MockIntentClassifier",
    "PatternIntentClassifier",
    "classify_intent",
    "should_continue",
    "should_trigger",
    # Generation
    "GenerationError",
    "GenerationRequest",
    "GenerationSource",
    "GenerationTimeoutError",
    "HTTPGenerationConfig",
    "HTTPGenerationSource",
    "MockGenerationSource",
    "StreamFlushPolicy",
    "coalesce_stream",
    # Transcription
    "MockTranscriptionSource",
    "SpeechEnded",
    "SpeechStarted",
    "TranscriptFragment",
    "TranscriptionSource",
    # Store
    "InMemorySessionStore",
    "SessionSnapshot",
    "SessionStore",
    # Orchestration
    "GenerationSettings",
    "OrchestratorConfig",
    "StreamingOrchestrator",
]
