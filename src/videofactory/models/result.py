"""Generation result variants."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class SingleSourceResult(BaseModel):
    """One video, optionally dubbed with a separate narration track."""

    kind: Literal["single"] = "single"
    video: str = Field(..., description="Video URL or local path")
    audio: Optional[str] = Field(None, description="Narration audio URL or local path")
    captions: Optional[str] = Field(None, description="WebVTT caption track URL or local path")
    is_fallback: bool = Field(default=False, description="True if the primary service was bypassed")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def is_stitched(self) -> bool:
        return False


class StitchedResult(BaseModel):
    """Several silent clips sharing one narration track and one caption track."""

    kind: Literal["stitched"] = "stitched"
    videos: List[str] = Field(..., description="Clip references in scene order", min_length=1)
    audio: Optional[str] = Field(None, description="Narration audio URL or local path")
    captions: Optional[str] = Field(None, description="WebVTT caption track URL or local path")
    is_fallback: bool = Field(default=True, description="Stitched results only come from the fallback path")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def is_stitched(self) -> bool:
        return True


GenerationResult = Annotated[
    Union[SingleSourceResult, StitchedResult],
    Field(discriminator="kind"),
]
