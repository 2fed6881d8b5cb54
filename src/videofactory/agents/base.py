"""Common shape of the reasoning-service agents."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from ..config import config
from ..services.anthropic import AnthropicClient

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """One prompt shape sent to Claude, turned into a typed value.

    Subclasses name themselves, supply a system prompt and implement `run`.
    Sampling defaults live on the class so each agent can tune them without
    repeating them at every call site.
    """

    max_tokens: int = 4096
    temperature: float = 0.7

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: Shared AnthropicClient. A private one is created if omitted.
            model: Model override; only used when the client is created here.
        """
        self._client = client or AnthropicClient(model=model or config.default_model)
        self._logger = logging.getLogger(f"videofactory.agents.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        ...

    @abstractmethod
    async def run(self, input_data: InputT) -> OutputT:
        """Turn ``input_data`` into this agent's output."""
        ...

    async def _create_message(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Send ``prompt`` under this agent's system prompt and return the reply text."""
        self._logger.debug(f"Prompt of {len(prompt)} chars")
        try:
            return await self._client.create_message(
                prompt=prompt,
                max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
                system=self.system_prompt,
                temperature=temperature if temperature is not None else self.temperature,
            )
        except Exception as e:
            self._logger.error(f"{self.name} request failed: {e}")
            raise

    async def _create_structured(
        self,
        prompt: str,
        tool_name: str,
        input_schema: Dict[str, Any],
        description: str = "",
    ) -> Union[Dict[str, Any], str]:
        """Send ``prompt`` forcing ``tool_name``; returns its input, or reply text without a call."""
        self._logger.debug(f"Structured prompt of {len(prompt)} chars for tool {tool_name}")
        try:
            return await self._client.create_structured(
                prompt=prompt,
                tool_name=tool_name,
                input_schema=input_schema,
                description=description,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                temperature=self.temperature,
            )
        except Exception as e:
            self._logger.error(f"{self.name} request failed: {e}")
            raise
