"""Generation pipeline: garment synthesis and try-on composition."""

import logging

from ..config import GeminiConfig
from ..errors import NoImageProduced, ProviderError, TryOnError
from ..services import (
    GenerationRequest,
    GenerationResponse,
    ImageGenerationProvider,
    InlineImage,
    RequestPart,
    sniff_media_type,
)

logger = logging.getLogger(__name__)


GARMENT_PROMPT_TEMPLATE = (
    "Generate a high-quality, standalone image of a clothing item: {description}. "
    "The clothing should be on a plain white or neutral background, suitable for "
    "a virtual try-on application. Flat lay or mannequin style."
)

TRYON_PROMPT = (
    "Generate a realistic full-body photo of the person from the first image "
    "wearing the clothing from the second image. Maintain the person's exact pose, "
    "facial features, body shape, and the background. Ensure the clothing fits "
    "naturally with realistic lighting and shadows. High quality, photorealistic."
)


class GenerationPipeline:
    """Two single-round-trip operations over an image generation provider.

    Both return the base64 payload of the first image in the response. A call
    that fails raises ProviderError (from the provider); a call that returns
    no image raises NoImageProduced.
    """

    def __init__(
        self,
        provider: ImageGenerationProvider,
        config: GeminiConfig | None = None,
    ):
        self.provider = provider
        self.config = config or GeminiConfig()

    async def generate_garment(self, prompt: str) -> str:
        """Synthesize a standalone garment image from a text description."""
        description = prompt.strip()
        if not description:
            raise ValueError("Garment prompt must not be empty")

        request = GenerationRequest(
            parts=[RequestPart.from_text(GARMENT_PROMPT_TEMPLATE.format(description=description))],
            aspect_ratio=self.config.garment_aspect_ratio,
        )
        response = await self._call_provider(request)
        image = self._extract_image(response, "No image generated.")
        logger.info("Generated garment image for prompt %r", description[:80])
        return image.data

    async def compose_try_on(self, person_b64: str, garment_b64: str) -> InlineImage:
        """Dress the person from the first image in the garment from the second.

        Returns the result payload with the media type the provider declared.
        """
        request = GenerationRequest(
            parts=[
                RequestPart.from_image(person_b64, sniff_media_type(person_b64)),
                RequestPart.from_image(garment_b64, sniff_media_type(garment_b64)),
                RequestPart.from_text(TRYON_PROMPT),
            ],
            aspect_ratio=self.config.tryon_aspect_ratio,
        )
        response = await self._call_provider(request)
        image = self._extract_image(response, "No try-on image generated.")
        logger.info("Composed try-on image")
        return image

    def _extract_image(self, response: GenerationResponse, message: str) -> InlineImage:
        # Any accompanying text parts are discarded
        image = response.first_image()
        if image is None:
            raise NoImageProduced(message)
        return image

    async def _call_provider(self, request: GenerationRequest) -> GenerationResponse:
        try:
            return await self.provider.generate(request)
        except TryOnError:
            raise
        except Exception as e:
            raise ProviderError(f"Generation call failed: {e}") from e
