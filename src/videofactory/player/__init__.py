"""Caption timelines and playback engines."""

from .captions import Cue, find_cue_index, normalize_caption_document, parse_cues
from .engine import (
    MultiClipPlaybackEngine,
    PlaybackState,
    SingleSourcePlayer,
    create_player,
    format_clock,
    scene_schedule,
)

__all__ = [
    "Cue",
    "MultiClipPlaybackEngine",
    "PlaybackState",
    "SingleSourcePlayer",
    "create_player",
    "find_cue_index",
    "format_clock",
    "normalize_caption_document",
    "parse_cues",
    "scene_schedule",
]
