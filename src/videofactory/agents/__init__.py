"""Reasoning-service agents for scripts, captions, keywords and scenes."""

from .base import BaseAgent
from .captions import CaptionAgent, CaptionInput
from .keywords import KeywordAgent
from .scenes import SceneSegmenter, SegmentInput, parse_scenes, validate_scenes
from .script import ScriptAgent, ScriptInput

__all__ = [
    "BaseAgent",
    "CaptionAgent",
    "CaptionInput",
    "KeywordAgent",
    "SceneSegmenter",
    "SegmentInput",
    "ScriptAgent",
    "ScriptInput",
    "parse_scenes",
    "validate_scenes",
]
