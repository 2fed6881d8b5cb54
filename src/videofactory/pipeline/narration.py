"""Narration synthesis: caption track plus spoken audio for a script."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

from ..agents import CaptionInput
from ..models import GenerationRequest, Language, Voice
from ..player.captions import normalize_caption_document, parse_cues
from ..services.speech import pcm_to_wav
from ..storage import ArtifactStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

# Relative difference between cue span and target duration worth a warning
DURATION_TOLERANCE = 0.5


class CaptionWriter(Protocol):
    async def run(self, input_data: CaptionInput) -> str:
        ...


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str, voice: Voice) -> bytes:
        ...


@dataclass(frozen=True)
class Narration:
    """WAV audio and the WebVTT document timed against it."""

    audio: bytes
    captions: str


def _ignore(message: str) -> None:
    pass


class NarrationSynthesizer:
    """Produce captions, then speech, for one script."""

    def __init__(self, caption_agent: CaptionWriter, speech_client: SpeechSynthesizer) -> None:
        self._captions = caption_agent
        self._speech = speech_client

    async def synthesize(
        self,
        script: str,
        duration: int,
        voice: Voice,
        language: Language,
        progress: Optional[ProgressCallback] = None,
    ) -> Narration:
        """Return narration for ``script``.

        Raises:
            MalformedResponseError: If the speech service returns no audio.
        """
        report = progress or _ignore
        logger.info(f"Narrating {len(script)}-char {language.value} script with {voice.value}")

        report("Generating subtitles...")
        raw = await self._captions.run(CaptionInput(script=script, duration=duration))
        captions = normalize_caption_document(raw)
        _check_span(captions, duration)

        report("Generating voiceover...")
        pcm = await self._speech.synthesize(script, voice)
        return Narration(audio=pcm_to_wav(pcm), captions=captions)


def _check_span(captions: str, duration: int) -> None:
    cues = parse_cues(captions)
    if not cues:
        logger.warning("Caption track has no parsable cues")
        return
    span = cues[-1].end - cues[0].start
    if abs(span - duration) > duration * DURATION_TOLERANCE:
        logger.warning(f"Caption cues span {span:.1f}s for a {duration}s target")


async def attach_narration(
    narrator: NarrationSynthesizer,
    store: ArtifactStore,
    task_id: str,
    request: GenerationRequest,
    script: Optional[str],
    progress: Optional[ProgressCallback] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """Synthesize narration if the request wants it and store it.

    Returns:
        (audio reference, caption reference), both None for silent requests.
    """
    if not request.wants_narration or not script:
        return None, None

    narration = await narrator.synthesize(
        script, request.duration, request.voice, request.language, progress
    )
    audio = store.save_audio(task_id, narration.audio)
    captions = store.save_captions(task_id, narration.captions)
    return audio, captions
