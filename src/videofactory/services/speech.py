"""Gemini text-to-speech client."""

import base64
import io
import logging
import wave
from typing import Any, Optional, Union

from google import genai
from google.genai import types

from ..config import config
from ..errors import MalformedResponseError
from ..models import Voice

logger = logging.getLogger(__name__)

SAMPLE_RATE = 24000
CHANNELS = 1
SAMPLE_WIDTH = 2  # 16-bit PCM


class SpeechClient:
    """Synthesize narration audio with a prebuilt Gemini voice."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        api_key = api_key or config.gemini_api_key
        if not api_key and client is None:
            raise ValueError("Gemini API key not provided. Set GEMINI_API_KEY env var.")

        self._client = client or genai.Client(api_key=api_key)
        self._model = model or config.tts_model

    async def synthesize(self, text: str, voice: Voice) -> bytes:
        """Return raw 24 kHz mono 16-bit PCM for ``text``.

        Raises:
            ValueError: If the silent voice is requested.
            MalformedResponseError: If the response carries no audio.
        """
        if voice is Voice.NONE:
            raise ValueError("Cannot synthesize speech with the silent voice")

        logger.info(f"Synthesizing {len(text)} characters with voice {voice.value}")
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=text,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice.value)
                    )
                ),
            ),
        )

        data = _inline_audio(response)
        if not data:
            raise MalformedResponseError("TTS generation failed.")
        return decode_audio(data)


def _inline_audio(response: Any) -> Optional[Union[bytes, str]]:
    try:
        part = response.candidates[0].content.parts[0]
    except (AttributeError, IndexError, TypeError):
        return None
    inline = getattr(part, "inline_data", None)
    return getattr(inline, "data", None) if inline is not None else None


def decode_audio(data: Union[bytes, str]) -> bytes:
    """Accept PCM as raw bytes or as base64 text."""
    if isinstance(data, str):
        return base64.b64decode(data)
    return data


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    sample_width: int = SAMPLE_WIDTH,
) -> bytes:
    """Wrap raw PCM samples in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()
