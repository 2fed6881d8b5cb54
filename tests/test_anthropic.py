"""Tests for the Claude client wrapper."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from anthropic import BadRequestError, RateLimitError

from videofactory.errors import MalformedResponseError
from videofactory.services import AnthropicClient


def _status_error(cls, status):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return cls("failed", response=httpx.Response(status, request=request), body=None)


def _reply(*texts):
    blocks = [SimpleNamespace(type="text", text=text) for text in texts]
    return SimpleNamespace(content=blocks, stop_reason="end_turn")


def _client(*outcomes, max_retries=3):
    sdk = MagicMock()
    sdk.messages.create = AsyncMock(side_effect=list(outcomes))
    return AnthropicClient(client=sdk, model="test-model", max_retries=max_retries, retry_delay=0), sdk


@pytest.mark.asyncio
async def test_joins_text_blocks_and_passes_system_prompt():
    client, sdk = _client(_reply("Hello ", "world"))
    assert await client.create_message("hi", system="be brief", temperature=0.2) == "Hello world"

    kwargs = sdk.messages.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["system"] == "be brief"
    assert kwargs["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_rate_limit_is_retried():
    client, sdk = _client(_status_error(RateLimitError, 429), _reply("ok"))
    assert await client.create_message("hi") == "ok"
    assert sdk.messages.create.await_count == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_retries():
    client, sdk = _client(*[_status_error(RateLimitError, 429)] * 2, max_retries=2)
    with pytest.raises(RateLimitError):
        await client.create_message("hi")
    assert sdk.messages.create.await_count == 2


@pytest.mark.asyncio
async def test_bad_request_is_not_retried():
    client, sdk = _client(_status_error(BadRequestError, 400))
    with pytest.raises(BadRequestError):
        await client.create_message("hi")
    assert sdk.messages.create.await_count == 1


@pytest.mark.asyncio
async def test_empty_reply_is_malformed():
    client, _ = _client(_reply("  "))
    with pytest.raises(MalformedResponseError):
        await client.create_message("hi")


@pytest.mark.asyncio
async def test_structured_call_forces_tool_and_returns_its_input():
    tool_call = SimpleNamespace(type="tool_use", name="scenes", input={"scenes": []})
    client, sdk = _client(SimpleNamespace(content=[tool_call], stop_reason="tool_use"))
    schema = {"type": "object", "properties": {"scenes": {"type": "array"}}}

    reply = await client.create_structured("hi", tool_name="scenes", input_schema=schema)

    assert reply == {"scenes": []}
    kwargs = sdk.messages.create.call_args.kwargs
    assert kwargs["tools"] == [{"name": "scenes", "input_schema": schema}]
    assert kwargs["tool_choice"] == {"type": "tool", "name": "scenes"}


@pytest.mark.asyncio
async def test_structured_call_without_tool_use_returns_text():
    client, _ = _client(_reply('{"scenes": []}'))
    reply = await client.create_structured("hi", tool_name="scenes", input_schema={"type": "object"})
    assert reply == '{"scenes": []}'
