"""External service integrations."""

from .anthropic import AnthropicClient
from .speech import SpeechClient, pcm_to_wav
from .stock import (
    PexelsProvider,
    PixabayProvider,
    StockCredentials,
    StockSourceResolver,
)
from .veo import VeoClient

__all__ = [
    "AnthropicClient",
    "PexelsProvider",
    "PixabayProvider",
    "SpeechClient",
    "StockCredentials",
    "StockSourceResolver",
    "VeoClient",
    "pcm_to_wav",
]
