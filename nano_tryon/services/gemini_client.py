"""Gemini API client implementing the image generation provider boundary."""

import base64
import logging

import httpx
from google import genai
from google.genai import errors, types

from ..config import GeminiConfig
from ..errors import ProviderError
from .provider import (
    Candidate,
    GenerationRequest,
    GenerationResponse,
    InlineImage,
    ResponsePart,
)

logger = logging.getLogger(__name__)


class GeminiImageClient:
    """Client for Gemini's image-capable models ("Nano Banana")."""

    def __init__(
        self,
        config: GeminiConfig,
        api_key: str | None,
    ):
        self.config = config
        self.api_key = api_key
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        """Get or create the SDK client."""
        if not self.api_key:
            raise ProviderError("API key not found")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send one generate_content call and translate the response.

        SDK and transport failures are raised as ProviderError.
        """
        contents = [self._to_sdk_part(part) for part in request.parts]
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            image_config=types.ImageConfig(aspect_ratio=request.aspect_ratio),
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.config.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            raise ProviderError(f"Gemini request failed ({e.code}): {e.message}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini request failed: {e}") from e

        return self._from_sdk_response(response)

    def _to_sdk_part(self, part) -> types.Part:
        if part.inline_image is not None:
            return types.Part.from_bytes(
                data=base64.b64decode(part.inline_image.data),
                mime_type=part.inline_image.media_type,
            )
        return types.Part.from_text(text=part.text or "")

    def _from_sdk_response(self, response: types.GenerateContentResponse) -> GenerationResponse:
        candidates = []
        for sdk_candidate in response.candidates or []:
            parts = []
            content = sdk_candidate.content
            for sdk_part in (content.parts if content and content.parts else []):
                inline = sdk_part.inline_data
                if inline is not None and inline.data:
                    parts.append(ResponsePart(inline_image=InlineImage(
                        data=base64.b64encode(inline.data).decode("ascii"),
                        media_type=inline.mime_type or "image/png",
                    )))
                elif sdk_part.text:
                    parts.append(ResponsePart(text=sdk_part.text))
            candidates.append(Candidate(parts=parts))

        if not candidates:
            logger.warning("Gemini returned no candidates for model=%s", self.config.model)
        return GenerationResponse(candidates=candidates)
