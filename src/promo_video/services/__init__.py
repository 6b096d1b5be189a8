"""External service integrations."""

from .gemini import (
    GeminiClient,
    GenerationResult,
    GenerationStatus,
    ImageResult,
    decode_data_uri,
    to_data_uri,
)

__all__ = [
    "GeminiClient",
    "GenerationResult",
    "GenerationStatus",
    "ImageResult",
    "decode_data_uri",
    "to_data_uri",
]
