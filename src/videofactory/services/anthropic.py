"""Claude client used by the script, caption, keyword and scene agents."""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from anthropic import (
    APIConnectionError,
    APIError,
    AsyncAnthropic,
    InternalServerError,
    RateLimitError,
)

from ..config import config
from ..errors import MalformedResponseError

logger = logging.getLogger(__name__)

# Transient failures worth another attempt; APITimeoutError is an APIConnectionError
RETRYABLE_ERRORS = (RateLimitError, APIConnectionError, InternalServerError)


class AnthropicClient:
    """Single-turn text completions with exponential backoff on transient errors."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        client: Optional[AsyncAnthropic] = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
            max_retries: Attempts per message, including the first.
            retry_delay: Base delay in seconds; doubled after each retry.
            client: Pre-built AsyncAnthropic instance.
        """
        api_key = api_key or config.anthropic_api_key
        if not api_key and client is None:
            raise ValueError("Anthropic API key not provided. Set ANTHROPIC_API_KEY env var.")

        self._client = client or AsyncAnthropic(api_key=api_key)
        self._model = model or config.default_model
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        return self._model

    async def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Send one user turn and return the concatenated text of the reply.

        Raises:
            APIError: If the request fails for good, or every retry is used up.
            MalformedResponseError: If the reply holds no text.
        """
        request = self._build_request(prompt, max_tokens, system, temperature)
        return _reply_text(await self._send(request))

    async def create_structured(
        self,
        prompt: str,
        tool_name: str,
        input_schema: Dict[str, Any],
        description: str = "",
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> Union[Dict[str, Any], str]:
        """Force a call to one tool and return the input Claude filled in.

        The tool's ``input_schema`` constrains the reply, so callers get
        decoded JSON instead of scraping it out of prose.

        Returns:
            The tool input, or the reply text if no tool call came back.

        Raises:
            APIError: If the request fails for good, or every retry is used up.
            MalformedResponseError: If the reply holds neither a tool call nor text.
        """
        request = self._build_request(prompt, max_tokens, system, temperature)
        tool: Dict[str, Any] = {"name": tool_name, "input_schema": input_schema}
        if description:
            tool["description"] = description
        request["tools"] = [tool]
        request["tool_choice"] = {"type": "tool", "name": tool_name}

        response = await self._send(request)
        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                logger.debug(f"Claude called {tool_name} (stop: {response.stop_reason})")
                return block.input
        logger.warning(f"Claude did not call {tool_name}; falling back to reply text")
        return _reply_text(response)

    def _build_request(
        self,
        prompt: str,
        max_tokens: int,
        system: Optional[str],
        temperature: float,
    ) -> Dict[str, Any]:
        request: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            request["system"] = system
        return request

    async def _send(self, request: Dict[str, Any]) -> Any:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._client.messages.create(**request)
            except RETRYABLE_ERRORS as e:
                if attempt >= self._max_retries:
                    logger.error(f"Claude request failed after {attempt} attempts: {e}")
                    raise
                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(f"{type(e).__name__} from Claude, retrying in {delay:.1f}s")
                await asyncio.sleep(delay)
            except APIError as e:
                logger.error(f"Claude API error: {e}")
                raise


def _reply_text(response: Any) -> str:
    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )
    if not text.strip():
        raise MalformedResponseError("Claude returned an empty response")
    logger.debug(f"Claude replied with {len(text)} chars (stop: {response.stop_reason})")
    return text
