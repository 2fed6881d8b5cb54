"""Generation pipeline: orchestration, fallback and narration."""

from .fallback import FallbackOrchestrator
from .narration import Narration, NarrationSynthesizer, attach_narration
from .orchestrator import TaskOrchestrator, create_orchestrator
from .registry import TaskRegistry, TaskWriter

__all__ = [
    "FallbackOrchestrator",
    "Narration",
    "NarrationSynthesizer",
    "TaskOrchestrator",
    "TaskRegistry",
    "TaskWriter",
    "attach_narration",
    "create_orchestrator",
]
