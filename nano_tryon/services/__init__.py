"""External collaborators: codec, fetch and the generation provider."""

from .codec import ImageCodec, sniff_media_type, strip_data_url
from .gemini_client import GeminiImageClient
from .provider import (
    GenerationRequest,
    GenerationResponse,
    ImageGenerationProvider,
    InlineImage,
    RequestPart,
)

__all__ = [
    "ImageCodec",
    "sniff_media_type",
    "strip_data_url",
    "GeminiImageClient",
    "GenerationRequest",
    "GenerationResponse",
    "ImageGenerationProvider",
    "InlineImage",
    "RequestPart",
]
