"""Narration script agent."""

from dataclasses import dataclass

from ..models import Language
from .base import BaseAgent


@dataclass
class ScriptInput:
    """Input data for script generation."""

    prompt: str
    duration: int
    language: Language = Language.ENGLISH


class ScriptAgent(BaseAgent[ScriptInput, str]):
    """Write a voiceover script that reads aloud in roughly the target duration."""

    max_tokens = 1024

    @property
    def name(self) -> str:
        return "ScriptAgent"

    @property
    def system_prompt(self) -> str:
        return (
            "You are a scriptwriter for short-form social videos. "
            "Return only the script text, without any labels, titles, or markdown formatting."
        )

    async def run(self, input_data: ScriptInput) -> str:
        self._logger.info(f"Writing {input_data.duration}s script for: '{input_data.prompt[:60]}'")
        prompt = (
            f"Create a short, engaging voiceover script in {input_data.language.display_name} "
            f"for a video about: \"{input_data.prompt}\". The script should take approximately "
            f"{input_data.duration} seconds to read aloud at a natural pace."
        )
        response = await self._create_message(prompt)
        return response.strip()
