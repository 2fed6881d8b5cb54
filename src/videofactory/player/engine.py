"""Playback engines for generated results.

A stitched result is several silent clips and one narration track. The
narration audio is the timing master: every time it reports progress the
engine looks up which caption cue the master clock is in and swaps the single
video element to the clip for that scene. Single-source results use the
simpler arrangement where the video drives and the narration follows.

The engines only talk to media elements through the small protocols below,
so they can be driven by a real player binding or by plain objects in tests.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from ..config import config
from ..models.result import SingleSourceResult, StitchedResult
from .captions import Cue, find_cue_index, parse_cues

logger = logging.getLogger(__name__)

# Max video/audio clock difference tolerated before the video is re-seeked
DRIFT_TOLERANCE = 0.5
# Max difference before a single-source narration track is re-seeked
SINGLE_SOURCE_SYNC_TOLERANCE = 0.3


class MediaElement(Protocol):
    src: Optional[str]
    current_time: float
    duration: float
    muted: bool

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...


class VideoElement(MediaElement, Protocol):
    captions_visible: bool


@dataclass
class PlaybackState:
    """Session state of one rendering instance."""

    active_index: int = -1
    playing: bool = False
    captions_enabled: bool = True
    muted: bool = False
    current_time: float = 0.0
    duration: float = 0.0


class MultiClipPlaybackEngine:
    """Drive several video sources off one narration/caption timeline."""

    def __init__(
        self,
        videos: Sequence[str],
        video: VideoElement,
        audio: Optional[MediaElement] = None,
        audio_src: Optional[str] = None,
        cues: Iterable[Cue] = (),
        captions_enabled: bool = True,
    ) -> None:
        if not videos:
            raise ValueError("A multi-clip player needs at least one video")

        self._videos: List[str] = list(videos)
        self._video = video
        self._audio = audio
        self._cues: List[Cue] = list(cues)
        self.state = PlaybackState(captions_enabled=captions_enabled)

        if self._audio is not None and audio_src:
            self._audio.src = audio_src
        self._video.muted = True
        self._switch_to(0)

    @property
    def cues(self) -> List[Cue]:
        return list(self._cues)

    @property
    def active_video(self) -> str:
        return self._videos[self.state.active_index]

    def load_captions(self, document: str) -> None:
        """Replace the scene timeline with the cues of a caption document."""
        self._cues = parse_cues(document)
        logger.debug(f"Loaded {len(self._cues)} cues for {len(self._videos)} clips")

    def scene_index_at(self, time: float) -> int:
        """Return the scene to show at ``time``, holding the current one when out of range."""
        index = find_cue_index(self._cues, time)
        if index == -1 or index >= len(self._videos):
            return self.state.active_index
        return index

    def on_time_update(self) -> None:
        """Handle a timing update from the master clock."""
        if self._audio is None:
            return
        time = self._audio.current_time
        self.state.current_time = time

        index = self.scene_index_at(time)
        if index != self.state.active_index:
            self._switch_to(index)
            if self.state.playing:
                self._video.play()

        self._correct_drift(time)

    def seek(self, time: float) -> None:
        """Move the master clock and show the matching scene immediately."""
        if self._audio is None:
            return
        if self.state.duration > 0:
            time = min(time, self.state.duration)
        time = max(0.0, time)
        self._audio.current_time = time
        self.on_time_update()

    def play(self) -> None:
        if self._audio is not None:
            self._audio.play()
        self._video.play()
        self.state.playing = True

    def pause(self) -> None:
        if self._audio is not None:
            self._audio.pause()
        self._video.pause()
        self.state.playing = False

    def toggle_play(self) -> None:
        if self.state.playing:
            self.pause()
        else:
            self.play()

    def replay(self) -> None:
        """Restart from the beginning and keep playing."""
        self.seek(0.0)
        self.play()

    def on_play(self) -> None:
        self.state.playing = True

    def on_pause(self) -> None:
        self.state.playing = False

    def on_ended(self) -> None:
        self.state.playing = False
        self._video.pause()

    def on_loaded_metadata(self) -> None:
        if self._audio is not None:
            self.state.duration = self._audio.duration

    def set_captions(self, enabled: bool) -> None:
        self.state.captions_enabled = enabled
        self._video.captions_visible = enabled

    def toggle_captions(self) -> None:
        self.set_captions(not self.state.captions_enabled)

    def toggle_mute(self) -> None:
        self.state.muted = not self.state.muted
        if self._audio is not None:
            self._audio.muted = self.state.muted

    def _switch_to(self, index: int) -> None:
        self.state.active_index = index
        self._video.src = self._videos[index]
        # a new source resets the timed-text track
        self._video.captions_visible = self.state.captions_enabled
        logger.debug(f"Switched to scene {index}: {self._videos[index]}")

    def _correct_drift(self, time: float) -> bool:
        if abs(self._video.current_time - time) > DRIFT_TOLERANCE:
            self._video.current_time = time
            return True
        return False


class SingleSourcePlayer:
    """Play one video, keeping an optional narration track in step with it."""

    def __init__(
        self,
        video_src: str,
        video: VideoElement,
        audio: Optional[MediaElement] = None,
        audio_src: Optional[str] = None,
        captions_enabled: bool = True,
    ) -> None:
        self._video = video
        self._audio = audio if audio_src else None
        self.state = PlaybackState(active_index=0, captions_enabled=captions_enabled)

        self._video.src = video_src
        self._video.muted = self._audio is not None
        self._video.captions_visible = captions_enabled
        if self._audio is not None:
            self._audio.src = audio_src

    def on_play(self) -> None:
        self.state.playing = True
        if self._audio is not None:
            self._audio.play()

    def on_pause(self) -> None:
        self.state.playing = False
        if self._audio is not None:
            self._audio.pause()

    def on_time_update(self) -> None:
        time = self._video.current_time
        self.state.current_time = time
        if self._audio is None:
            return
        if abs(time - self._audio.current_time) > SINGLE_SOURCE_SYNC_TOLERANCE:
            self._audio.current_time = time

    def on_loaded_metadata(self) -> None:
        self.state.duration = self._video.duration
        self._video.captions_visible = self.state.captions_enabled

    def replay(self) -> None:
        self._video.current_time = 0.0
        if self._audio is not None:
            self._audio.current_time = 0.0
        self._video.play()
        self.on_play()

    def set_captions(self, enabled: bool) -> None:
        self.state.captions_enabled = enabled
        self._video.captions_visible = enabled

    def toggle_captions(self) -> None:
        self.set_captions(not self.state.captions_enabled)


Player = Union[SingleSourcePlayer, MultiClipPlaybackEngine]


def create_player(
    result: Union[SingleSourceResult, StitchedResult],
    video: VideoElement,
    audio: Optional[MediaElement] = None,
    captions_document: Optional[str] = None,
    captions_enabled: Optional[bool] = None,
) -> Player:
    """Build the player matching a result variant.

    Captions start visible per ``config.subtitles_enabled`` unless overridden.

    Raises:
        TypeError: If ``result`` is not a known result variant.
    """
    if captions_enabled is None:
        captions_enabled = config.subtitles_enabled
    if isinstance(result, StitchedResult):
        cues = parse_cues(captions_document) if captions_document else []
        return MultiClipPlaybackEngine(
            videos=result.videos,
            video=video,
            audio=audio,
            audio_src=result.audio,
            cues=cues,
            captions_enabled=captions_enabled,
        )
    if isinstance(result, SingleSourceResult):
        return SingleSourcePlayer(
            video_src=result.video,
            video=video,
            audio=audio,
            audio_src=result.audio,
            captions_enabled=captions_enabled,
        )
    raise TypeError(f"Unsupported result type: {type(result).__name__}")


def scene_schedule(cues: Sequence[Cue], videos: Sequence[str]) -> List[Tuple[Cue, str]]:
    """Pair each cue with the clip shown during it; cues past the last clip are dropped."""
    return [(cue, videos[index]) for index, cue in enumerate(cues) if index < len(videos)]


def format_clock(seconds: float) -> str:
    """Render a position as MM:SS."""
    minutes, secs = divmod(int(max(seconds, 0.0)), 60)
    return f"{minutes:02d}:{secs:02d}"
