"""Search keyword agent."""

from urllib.parse import unquote

from .base import BaseAgent

MAX_KEYWORDS = 3


class KeywordAgent(BaseAgent[str, str]):
    """Reduce a prompt or scene description to a short stock-footage query."""

    max_tokens = 64
    temperature = 0.0

    @property
    def name(self) -> str:
        return "KeywordAgent"

    @property
    def system_prompt(self) -> str:
        return "You write concise search queries for stock video libraries."

    async def run(self, input_data: str) -> str:
        prompt = (
            "Extract the 2-3 most relevant keywords from this prompt for a video search. "
            "Return them on a single line separated by spaces, with no other text.\n\n"
            f"PROMPT: \"{input_data}\""
        )
        response = await self._create_message(prompt)
        return clean_keywords(response)


def clean_keywords(text: str) -> str:
    """Normalise a keyword response to at most three space-separated words."""
    lines = text.strip().splitlines()
    line = unquote(lines[0]) if lines else ""
    words = line.replace(",", " ").replace('"', " ").split()
    return " ".join(words[:MAX_KEYWORDS])
