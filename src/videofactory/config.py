"""Configuration management."""

import os
from enum import Enum
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

PLACEHOLDER_VIDEO_URL = (
    "https://storage.googleapis.com/gtv-videos-bucket/sample/ForBiggerFun.mp4"
)


class FallbackStrategy(str, Enum):
    """How a quota-blocked request is substituted with stock footage."""

    SINGLE_SOURCE = "single"
    MULTI_CLIP = "multi"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
        description="Gemini API key (Veo video generation and speech synthesis)"
    )
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (scripts, captions, keywords, scenes)"
    )
    pexels_api_key: str = Field(
        default_factory=lambda: os.getenv("PEXELS_API_KEY", ""),
        description="Pexels API key for stock footage"
    )
    pixabay_api_key: str = Field(
        default_factory=lambda: os.getenv("PIXABAY_API_KEY", ""),
        description="Pixabay API key for stock footage"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("VIDEO_FACTORY_WORKSPACE", "./output")),
        description="Directory receiving generated artifacts"
    )

    # Model settings
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default Claude model"
    )
    video_model: str = Field(
        default="veo-3.1-fast-generate-preview",
        description="Veo model used for primary generation"
    )
    tts_model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Gemini model used for speech synthesis"
    )
    video_resolution: str = Field(default="720p", description="Requested video resolution")

    # Pipeline behaviour
    poll_interval: float = Field(
        default_factory=lambda: float(os.getenv("VIDEO_FACTORY_POLL_INTERVAL", "10")),
        description="Seconds between operation polls",
        gt=0,
    )
    fallback_strategy: FallbackStrategy = Field(
        default_factory=lambda: FallbackStrategy(
            os.getenv("VIDEO_FACTORY_FALLBACK", FallbackStrategy.MULTI_CLIP.value)
        ),
        description="Substitute path used when primary generation is quota-blocked"
    )
    placeholder_video_url: str = Field(
        default_factory=lambda: os.getenv("VIDEO_FACTORY_PLACEHOLDER_URL", PLACEHOLDER_VIDEO_URL),
        description="Generic clip used when no stock footage matches"
    )
    subtitles_enabled: bool = Field(
        default_factory=lambda: _env_bool("VIDEO_FACTORY_SUBTITLES", True),
        description="Whether captions are shown by default during playback"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def has_stock_credentials(self) -> bool:
        """Return True if at least one stock footage provider is configured."""
        return bool(self.pexels_api_key or self.pixabay_api_key)

    def validate_generation_required(self) -> None:
        """Validate that everything a generation run needs is set.

        Raises:
            ValueError: If any required configuration is missing.
        """
        missing: list[str] = []

        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set the corresponding environment variables."
            )


# Global config instance
config = Config()
