"""External service integrations."""

from .anthropic import AnthropicClient
from .imagen import ImagenClient, ImageResult
from .speech import SpeechClient, SpeechResult
from .veo import VeoClient, GenerationStatus, VeoResult

__all__ = [
    "AnthropicClient",
    "ImagenClient",
    "ImageResult",
    "SpeechClient",
    "SpeechResult",
    "VeoClient",
    "GenerationStatus",
    "VeoResult",
]
