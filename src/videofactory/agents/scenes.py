"""Scene segmentation agent."""

import json
import re
from dataclasses import dataclass
from typing import Any, List

from pydantic import BaseModel, Field, ValidationError

from ..errors import MalformedResponseError
from ..models import Scene, join_narration
from .base import BaseAgent

SYSTEM_PROMPT = """You are a creative video director.
You break narration scripts into distinct scenes for stock-footage videos.

Record the breakdown with the scenes tool. Each scene has a "scene_description"
(what the footage shows) and the "narration" spoken over it. If the tool is
unavailable, output the same structure as JSON only: an object with a single key
"scenes" whose value is an array of those objects."""

_FENCED = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass
class SegmentInput:
    """Input data for the scene segmenter."""

    script: str
    duration: int


class _SceneList(BaseModel):
    scenes: List[Scene] = Field(..., min_length=1)


SCENES_TOOL = "scenes"
SCENES_SCHEMA = _SceneList.model_json_schema(by_alias=True)


class SceneSegmenter(BaseAgent[SegmentInput, List[Scene]]):
    """Agent splitting a script into (visual description, narration) scenes.

    The narration fragments are requested to reproduce the script exactly
    when concatenated; that is checked and logged but cannot be enforced.
    A response missing any required field is rejected as a whole.
    """

    temperature = 0.4

    @property
    def name(self) -> str:
        return "SceneSegmenter"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    async def segment(self, script: str, target_duration: int) -> List[Scene]:
        """Split ``script`` into scenes for a video of ``target_duration`` seconds."""
        return await self.run(SegmentInput(script=script, duration=target_duration))

    async def run(self, input_data: SegmentInput) -> List[Scene]:
        """Ask for the scene breakdown and validate it.

        The call forces the ``scenes`` tool so the reply arrives as
        schema-shaped input; a plain-text reply is parsed as JSON instead.

        Raises:
            MalformedResponseError: If the response is not a valid scene list.
        """
        self._logger.info(
            f"Segmenting {len(input_data.script)}-char script for {input_data.duration}s"
        )
        reply = await self._create_structured(
            self._build_prompt(input_data),
            tool_name=SCENES_TOOL,
            input_schema=SCENES_SCHEMA,
            description="Record the scene breakdown of the script.",
        )
        if isinstance(reply, str):
            self._logger.debug("No tool call in reply, parsing text")
            scenes = parse_scenes(reply)
        else:
            scenes = validate_scenes(reply)

        if " ".join(join_narration(scenes).split()) != " ".join(input_data.script.split()):
            self._logger.warning("Scene narration does not reproduce the original script")

        self._logger.info(f"Generated {len(scenes)} scenes")
        return scenes

    def _build_prompt(self, input_data: SegmentInput) -> str:
        return "\n".join([
            f"Based on the following script for a video that is approximately "
            f"{input_data.duration} seconds long, break it down into a series of distinct scenes.",
            "For each scene, provide a concise visual description (for finding stock footage) "
            "and identify the corresponding narration for that scene.",
            "",
            f"SCRIPT: \"{input_data.script}\"",
            "",
            "Ensure the \"narration\" parts, when combined, exactly match the original script.",
        ])


def parse_scenes(response: str) -> List[Scene]:
    """Validate a plain-text scene-list response, tolerating code fences and prose.

    A bare JSON array is accepted in place of the ``{"scenes": [...]}`` object.

    Raises:
        MalformedResponseError: If no scene JSON is found or a scene lacks a field.
    """
    return validate_scenes(_load_scene_json(response))


def validate_scenes(data: Any) -> List[Scene]:
    """Validate decoded scene data, either the ``scenes`` object or a bare array.

    Raises:
        MalformedResponseError: If a scene lacks a field or the list is empty.
    """
    if isinstance(data, list):
        data = {"scenes": data}
    try:
        return _SceneList.model_validate(data).scenes
    except ValidationError as e:
        raise MalformedResponseError(
            f"Scene response is missing required fields: {e.error_count()} error(s)"
        ) from e


def _looks_like_scenes(value: Any) -> bool:
    if isinstance(value, dict):
        return "scenes" in value
    return isinstance(value, list) and bool(value) and all(isinstance(item, dict) for item in value)


def _load_scene_json(response: str) -> Any:
    fenced = _FENCED.search(response)
    text = fenced.group(1) if fenced else response

    # Prose may hold bracketed fragments like "[1]" that decode but are not scenes
    decoder = json.JSONDecoder()
    for index, char in enumerate(text):
        if char not in "{[":
            continue
        try:
            value, _ = decoder.raw_decode(text, index)
        except json.JSONDecodeError:
            continue
        if _looks_like_scenes(value):
            return value
    raise MalformedResponseError(f"No scene JSON found in response: {response[:80]!r}")
