"""Tests for the quota fallback path."""

import pytest

from fakes import VTT, FakeAgent, FakeResolver, FakeSegmenter, FakeSpeech
from videofactory.config import FallbackStrategy
from videofactory.errors import FallbackError, MalformedResponseError
from videofactory.models import GenerationRequest, Scene, SingleSourceResult, StitchedResult, Voice
from videofactory.pipeline import FallbackOrchestrator, NarrationSynthesizer
from videofactory.services.stock import StockCredentials

PLACEHOLDER = "https://example.com/placeholder.mp4"
QUOTA = RuntimeError("You exceeded your current quota, please check your plan and billing details.")

SCENES = [
    Scene(description="first", narration="A"),
    Scene(description="second", narration="B"),
    Scene(description="third", narration="C"),
]


def _orchestrator(
    store,
    resolver=None,
    segmenter=None,
    script_agent=None,
    strategy=FallbackStrategy.MULTI_CLIP,
    speech=None,
):
    return FallbackOrchestrator(
        resolver=resolver or FakeResolver(),
        segmenter=segmenter or FakeSegmenter(SCENES),
        narrator=NarrationSynthesizer(FakeAgent(VTT), speech or FakeSpeech()),
        script_agent=script_agent or FakeAgent("A B C"),
        store=store,
        strategy=strategy,
        credentials=StockCredentials(pexels_api_key="k"),
        placeholder_url=PLACEHOLDER,
    )


@pytest.mark.parametrize(
    "message",
    ["Quota exceeded for veo", "Billing account disabled"],
)
def test_quota_and_billing_are_recoverable(message):
    assert FallbackOrchestrator.is_recoverable(RuntimeError(message))


def test_other_failures_are_not_recoverable():
    assert not FallbackOrchestrator.is_recoverable(RuntimeError("Requested entity was not found."))
    assert not FallbackOrchestrator.is_recoverable(RuntimeError("Internal error"))


@pytest.mark.asyncio
async def test_fatal_error_is_reraised_unchanged(store):
    error = RuntimeError("Internal error")
    fallback = _orchestrator(store)
    with pytest.raises(RuntimeError) as excinfo:
        await fallback.recover(error, "t1", GenerationRequest(prompt="x"), "A B C", lambda m: None)
    assert excinfo.value is error


@pytest.mark.asyncio
async def test_multi_clip_keeps_scene_order(store):
    # the first scene resolves last
    resolver = FakeResolver(
        urls={"first": "u1", "second": "u2", "third": "u3"},
        delays={"first": 0.03, "second": 0.01, "third": 0.0},
    )
    messages = []
    result = await _orchestrator(store, resolver=resolver).recover(
        QUOTA, "t1", GenerationRequest(prompt="x", duration=15), "A B C", messages.append
    )

    assert isinstance(result, StitchedResult)
    assert result.videos == ["u1", "u2", "u3"]
    assert result.is_fallback
    assert result.audio and result.captions
    assert messages[0] == "Primary generation failed. Creating fallback..."
    assert "Breaking script into scenes..." in messages
    assert "Searching for 3 video clips..." in messages
    assert messages[-1] == "Multi-clip video compiled!"


@pytest.mark.asyncio
async def test_missing_clips_become_placeholders(store):
    resolver = FakeResolver(
        urls={"second": "u2"},
        errors={"third": RuntimeError("provider exploded")},
    )
    result = await _orchestrator(store, resolver=resolver).recover(
        QUOTA, "t1", GenerationRequest(prompt="x"), "A B C", lambda m: None
    )
    assert result.videos == [PLACEHOLDER, "u2", PLACEHOLDER]


@pytest.mark.asyncio
async def test_narration_synthesized_once_for_whole_script(store):
    speech = FakeSpeech()
    await _orchestrator(store, speech=speech).recover(
        QUOTA, "t1", GenerationRequest(prompt="x"), "A B C", lambda m: None
    )
    assert speech.calls == [("A B C", GenerationRequest(prompt="x").voice)]


@pytest.mark.asyncio
async def test_silent_multi_clip_generates_script_but_no_audio(store):
    script_agent = FakeAgent("A B C")
    segmenter = FakeSegmenter(SCENES)
    result = await _orchestrator(store, segmenter=segmenter, script_agent=script_agent).recover(
        QUOTA, "t1", GenerationRequest(prompt="x", voice=Voice.NONE), None, lambda m: None
    )
    assert len(script_agent.calls) == 1
    assert segmenter.calls == [("A B C", 15)]
    assert result.audio is None and result.captions is None
    assert len(result.videos) == 3


@pytest.mark.asyncio
async def test_script_failure_aborts_fallback(store):
    fallback = _orchestrator(store, script_agent=FakeAgent(error=RuntimeError("llm down")))
    with pytest.raises(FallbackError, match="Cannot build fallback without narration script."):
        await fallback.recover(QUOTA, "t1", GenerationRequest(prompt="x"), None, lambda m: None)


@pytest.mark.asyncio
async def test_empty_script_aborts_fallback(store):
    fallback = _orchestrator(store, script_agent=FakeAgent("   "))
    with pytest.raises(FallbackError):
        await fallback.recover(QUOTA, "t1", GenerationRequest(prompt="x"), None, lambda m: None)


@pytest.mark.asyncio
async def test_segmentation_failure_propagates(store):
    segmenter = FakeSegmenter(error=MalformedResponseError("bad scenes"))
    with pytest.raises(MalformedResponseError):
        await _orchestrator(store, segmenter=segmenter).recover(
            QUOTA, "t1", GenerationRequest(prompt="x"), "A B C", lambda m: None
        )


@pytest.mark.asyncio
async def test_single_source_uses_prompt_lookup(store):
    resolver = FakeResolver(urls={"a lighthouse": "stock.mp4"})
    messages = []
    result = await _orchestrator(
        store, resolver=resolver, strategy=FallbackStrategy.SINGLE_SOURCE
    ).recover(QUOTA, "t1", GenerationRequest(prompt="a lighthouse"), "A B C", messages.append)

    assert isinstance(result, SingleSourceResult)
    assert result.video == "stock.mp4"
    assert result.is_fallback
    assert result.audio is not None
    assert "Searching for stock footage..." in messages
    assert messages[-1] == "Fallback video ready!"


@pytest.mark.asyncio
async def test_single_source_silent_needs_no_script(store):
    script_agent = FakeAgent("unused")
    result = await _orchestrator(
        store, script_agent=script_agent, strategy=FallbackStrategy.SINGLE_SOURCE
    ).recover(QUOTA, "t1", GenerationRequest(prompt="x", voice=Voice.NONE), None, lambda m: None)

    assert result.video == PLACEHOLDER
    assert result.audio is None
    assert script_agent.calls == []
