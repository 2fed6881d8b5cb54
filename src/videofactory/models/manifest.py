"""Batch manifest data model."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .request import GenerationRequest


class BatchManifest(BaseModel):
    """A list of generation requests processed together.

    Keys under ``defaults`` apply to every request that does not set them,
    so a batch can share one voice, language or aspect ratio.
    """

    name: Optional[str] = Field(None, description="Batch name")
    defaults: Dict[str, Any] = Field(default_factory=dict, description="Values shared by every request")
    requests: List[GenerationRequest] = Field(default_factory=list, description="Requests to generate")

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not data.get("defaults"):
            return data
        shared = data["defaults"]
        merged = [
            {**shared, **entry} if isinstance(entry, dict) else entry
            for entry in data.get("requests") or []
        ]
        return {**data, "requests": merged}

    @classmethod
    def from_yaml(cls, path: Path) -> "BatchManifest":
        """Load a manifest; an empty file is an empty batch."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: Path) -> None:
        """Save the manifest with defaults already folded into each request."""
        data = self.model_dump(mode="json", exclude={"defaults"})
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
