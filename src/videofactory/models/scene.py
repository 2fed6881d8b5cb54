"""Scene data model."""

from pydantic import BaseModel, Field, field_validator


class Scene(BaseModel):
    """One visual beat of a stitched video and the narration spoken over it."""

    description: str = Field(
        ...,
        alias="scene_description",
        description="Visual description used to search stock footage",
    )
    narration: str = Field(..., description="Fragment of the script spoken during this scene")

    class Config:
        """Pydantic config."""
        populate_by_name = True
        frozen = True

    @field_validator("description", "narration")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


def join_narration(scenes: list[Scene]) -> str:
    """Concatenate scene narration in order, one space between fragments."""
    return " ".join(scene.narration.strip() for scene in scenes)
