"""Generation request model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AspectRatio(str, Enum):
    """Supported output aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"
    CLASSIC = "4:3"
    VERTICAL = "3:4"

    @property
    def orientation(self) -> str:
        """Return the stock-search orientation matching this ratio."""
        width, height = (int(part) for part in self.value.split(":"))
        if width > height:
            return "landscape"
        if width < height:
            return "portrait"
        return "square"


class Voice(str, Enum):
    """Narration voices; NONE produces a silent video."""
    NONE = "none"
    KORE = "Kore"
    PUCK = "Puck"
    CHARON = "Charon"
    FENRIR = "Fenrir"
    ZEPHYR = "Zephyr"


class Language(str, Enum):
    """Narration language."""
    ENGLISH = "en"
    CHINESE = "zh"

    @property
    def display_name(self) -> str:
        return "Mandarin Chinese" if self is Language.CHINESE else "English"


class GenerationRequest(BaseModel):
    """Immutable description of one video the user asked for."""

    prompt: str = Field(..., description="What the video should show")
    script: Optional[str] = Field(None, description="Pre-authored narration script")
    duration: int = Field(default=15, description="Target duration in seconds", ge=5, le=60)
    aspect_ratio: AspectRatio = Field(default=AspectRatio.PORTRAIT, description="Output aspect ratio")
    voice: Voice = Field(default=Voice.KORE, description="Narration voice")
    language: Language = Field(default=Language.ENGLISH, description="Narration language")

    class Config:
        """Pydantic config."""
        frozen = True

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Prompt cannot be empty")
        return value.strip()

    @field_validator("script")
    @classmethod
    def _blank_script_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def wants_narration(self) -> bool:
        """Return True unless the silent voice was selected."""
        return self.voice is not Voice.NONE
