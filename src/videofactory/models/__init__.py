"""Data models for the video factory."""

from .request import AspectRatio, GenerationRequest, Language, Voice
from .result import GenerationResult, SingleSourceResult, StitchedResult
from .scene import Scene, join_narration
from .task import GenerationTask, TaskStatus
from .manifest import BatchManifest

__all__ = [
    "AspectRatio",
    "BatchManifest",
    "GenerationRequest",
    "GenerationResult",
    "GenerationTask",
    "Language",
    "Scene",
    "SingleSourceResult",
    "StitchedResult",
    "TaskStatus",
    "Voice",
    "join_narration",
]
