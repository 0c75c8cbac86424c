# Test fixtures and configuration
import asyncio
import base64
import io
import sys
from pathlib import Path

import httpx
import pytest
from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from nano_tryon.config import GeminiConfig, PresetConfig
from nano_tryon.pipeline import GenerationPipeline, TryOnSession
from nano_tryon.registry import AssetRegistry
from nano_tryon.services import GenerationRequest, GenerationResponse, ImageCodec
from nano_tryon.services.provider import Candidate, InlineImage, ResponsePart


PERSON_URL = "https://images.example.com/person.png"
GARMENT_URL = "https://images.example.com/garment.jpg"


def make_image_bytes(color=(200, 30, 30), size=(4, 4), image_format="PNG") -> bytes:
    """Render a small solid-colour image with Pillow."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=image_format)
    return buf.getvalue()


def image_response(data: bytes, media_type: str = "image/png", text: str | None = None) -> GenerationResponse:
    """A provider response holding one image part, optionally preceded by text."""
    parts = []
    if text:
        parts.append(ResponsePart(text=text))
    parts.append(ResponsePart(inline_image=InlineImage(
        data=base64.b64encode(data).decode(),
        media_type=media_type,
    )))
    return GenerationResponse(candidates=[Candidate(parts=parts)])


class FakeProvider:
    """Provider double that records requests and replays queued outcomes.

    Each queued outcome is either a GenerationResponse or an exception to raise.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[GenerationRequest] = []
        self.is_configured = True

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        await asyncio.sleep(0)  # Yield like a real network call
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def png_bytes():
    """Small valid PNG image bytes."""
    return make_image_bytes()


@pytest.fixture
def jpeg_bytes():
    """Small valid JPEG image bytes."""
    return make_image_bytes(color=(20, 40, 220), image_format="JPEG")


@pytest.fixture
def result_bytes():
    """Image bytes returned by the provider as a try-on result."""
    return make_image_bytes(color=(10, 160, 60), size=(3, 4))


@pytest.fixture
def fetch_log():
    """URLs requested through the mock transport."""
    return []


@pytest.fixture
def remote_images(png_bytes, jpeg_bytes):
    """Images served by the mock transport, keyed by URL."""
    return {PERSON_URL: png_bytes, GARMENT_URL: jpeg_bytes}


@pytest.fixture
def codec(remote_images, fetch_log):
    """Codec whose HTTP client is served by an in-memory transport."""
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        fetch_log.append(url)
        if url in remote_images:
            return httpx.Response(200, content=remote_images[url])
        return httpx.Response(404)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageCodec(client=client)


@pytest.fixture
def registry(codec):
    """Registry seeded with one remote person and one remote garment preset."""
    return AssetRegistry(codec, PresetConfig(persons=[PERSON_URL], garments=[GARMENT_URL]))


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def session(registry, provider):
    """Session wired to the seeded registry and the fake provider."""
    return TryOnSession(registry, GenerationPipeline(provider, GeminiConfig()))
