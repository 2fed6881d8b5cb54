"""Caption track agent."""

from dataclasses import dataclass

from .base import BaseAgent


@dataclass
class CaptionInput:
    """Input data for caption generation."""

    script: str
    duration: int


class CaptionAgent(BaseAgent[CaptionInput, str]):
    """Turn a script into a WebVTT document spanning the target duration.

    The raw response is returned; header and fence cleanup happens in
    `player.captions.normalize_caption_document`.
    """

    max_tokens = 2048
    temperature = 0.2

    @property
    def name(self) -> str:
        return "CaptionAgent"

    @property
    def system_prompt(self) -> str:
        return "You produce WebVTT subtitle files. Output the WebVTT document only."

    async def run(self, input_data: CaptionInput) -> str:
        prompt = (
            "Convert the following script into a WebVTT format. "
            f"The total duration is {input_data.duration} seconds. "
            "Create several cues with appropriate start and end times that break up "
            "the script naturally.\n\n"
            f"SCRIPT:\n{input_data.script}"
        )
        response = await self._create_message(prompt)
        return response.strip()
