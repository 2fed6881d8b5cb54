"""Video Factory - prompt-to-video generation with stock-footage fallback."""

__version__ = "0.1.0"
