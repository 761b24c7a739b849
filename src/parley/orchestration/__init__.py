"""Session orchestration."""

from parley.orchestration.config import GenerationSettings, OrchestratorConfig
from parley.orchestration.engine import StreamingOrchestrator

__all__ = ["GenerationSettings", "OrchestratorConfig", "StreamingOrchestrator"]
