"""Tests for data models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from videofactory.errors import InvalidTransitionError
from videofactory.models import (
    AspectRatio,
    BatchManifest,
    GenerationRequest,
    GenerationResult,
    GenerationTask,
    Language,
    Scene,
    SingleSourceResult,
    StitchedResult,
    TaskStatus,
    Voice,
    join_narration,
)


class TestGenerationRequest:
    def test_defaults(self):
        request = GenerationRequest(prompt="  a lighthouse at dusk  ")
        assert request.prompt == "a lighthouse at dusk"
        assert request.duration == 15
        assert request.aspect_ratio is AspectRatio.PORTRAIT
        assert request.voice is Voice.KORE
        assert request.language is Language.ENGLISH
        assert request.script is None
        assert request.wants_narration

    def test_blank_prompt_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="   ")

    def test_blank_script_treated_as_missing(self):
        assert GenerationRequest(prompt="x", script=" \n").script is None

    def test_duration_bounds(self):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="x", duration=2)
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="x", duration=120)

    def test_silent_voice(self):
        assert not GenerationRequest(prompt="x", voice=Voice.NONE).wants_narration

    def test_immutable(self):
        request = GenerationRequest(prompt="x")
        with pytest.raises(ValidationError):
            request.prompt = "y"

    def test_orientation(self):
        assert AspectRatio.LANDSCAPE.orientation == "landscape"
        assert AspectRatio.PORTRAIT.orientation == "portrait"
        assert AspectRatio.SQUARE.orientation == "square"


class TestGenerationTask:
    def test_starts_pending(self):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        assert task.status is TaskStatus.PENDING
        assert task.progress_message == "Waiting in queue..."
        assert task.result is None and task.error is None

    def test_success_path(self):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        task.transition(TaskStatus.GENERATING)
        task.report("Downloading video...")
        task.succeed(SingleSourceResult(video="v.mp4"))
        assert task.status is TaskStatus.SUCCESS
        assert task.status.is_terminal
        assert task.progress_message == "Downloading video..."

    def test_failure_records_message(self):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        task.transition(TaskStatus.GENERATING)
        task.fail("boom")
        assert task.status is TaskStatus.ERROR
        assert task.error == "boom"

    @pytest.mark.parametrize("target", [TaskStatus.SUCCESS, TaskStatus.ERROR, TaskStatus.PENDING])
    def test_pending_can_only_start_generating(self, target):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        with pytest.raises(InvalidTransitionError):
            task.transition(target)

    def test_terminal_states_are_final(self):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        task.transition(TaskStatus.GENERATING)
        task.fail("boom")
        for status in TaskStatus:
            with pytest.raises(InvalidTransitionError):
                task.transition(status)

    def test_progress_rejected_outside_generation(self):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        with pytest.raises(InvalidTransitionError):
            task.report("too early")


class TestResults:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(GenerationResult)
        stitched = adapter.validate_python({"kind": "stitched", "videos": ["a", "b"]})
        assert isinstance(stitched, StitchedResult)
        assert stitched.is_fallback and stitched.is_stitched

        single = adapter.validate_python({"kind": "single", "video": "a"})
        assert isinstance(single, SingleSourceResult)
        assert not single.is_fallback and not single.is_stitched

    def test_stitched_needs_a_clip(self):
        with pytest.raises(ValidationError):
            StitchedResult(videos=[])

    def test_task_round_trips_result_variant(self):
        task = GenerationTask(request=GenerationRequest(prompt="x"))
        task.transition(TaskStatus.GENERATING)
        task.succeed(StitchedResult(videos=["a", "b"], audio="n.wav"))
        restored = GenerationTask.model_validate(task.model_dump(mode="json"))
        assert isinstance(restored.result, StitchedResult)
        assert restored.result.videos == ["a", "b"]


class TestScene:
    def test_accepts_wire_field_name(self):
        scene = Scene.model_validate({"scene_description": "waves", "narration": "The sea."})
        assert scene.description == "waves"

    def test_rejects_blank_fields(self):
        with pytest.raises(ValidationError):
            Scene(description="", narration="text")
        with pytest.raises(ValidationError):
            Scene.model_validate({"narration": "text"})

    def test_join_narration(self):
        scenes = [
            Scene(description="a", narration="A"),
            Scene(description="b", narration=" B "),
            Scene(description="c", narration="C"),
        ]
        assert join_narration(scenes) == "A B C"


def test_manifest_from_yaml(tmp_path):
    path = tmp_path / "batch.yaml"
    path.write_text(
        "name: coast\n"
        "requests:\n"
        "  - prompt: waves on rocks\n"
        "    duration: 10\n"
        "    aspect_ratio: '16:9'\n"
        "  - prompt: gulls\n"
        "    voice: none\n"
    )
    manifest = BatchManifest.from_yaml(path)
    assert manifest.name == "coast"
    assert manifest.requests[0].aspect_ratio is AspectRatio.LANDSCAPE
    assert manifest.requests[1].voice is Voice.NONE

    manifest.to_yaml(tmp_path / "copy.yaml")
    assert BatchManifest.from_yaml(tmp_path / "copy.yaml") == manifest


def test_empty_manifest(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert BatchManifest.from_yaml(path).requests == []


def test_manifest_defaults_apply_to_each_request(tmp_path):
    path = tmp_path / "batch.yaml"
    path.write_text(
        "defaults:\n"
        "  voice: Puck\n"
        "  language: zh\n"
        "requests:\n"
        "  - prompt: lanterns\n"
        "  - prompt: rain\n"
        "    voice: none\n"
    )
    manifest = BatchManifest.from_yaml(path)
    assert [request.voice for request in manifest.requests] == [Voice.PUCK, Voice.NONE]
    assert all(request.language is Language.CHINESE for request in manifest.requests)
