"""Image codec: base64 payloads, data URLs and remote fetches."""

import base64
import binascii
import io
import logging
from urllib.parse import urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from ..config import FetchConfig
from ..errors import AssetCreationError, FetchError

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"


def strip_data_url(text: str) -> str:
    """Return the base64 payload of a data URL, or the text unchanged."""
    if text.startswith("data:"):
        # Remove data URL prefix (e.g., "data:image/png;base64,")
        _, _, encoded = text.partition(",")
        return encoded
    return text


def sniff_media_type(data: bytes | str) -> str:
    """Detect the image media type from magic bytes.

    Accepts raw bytes or a base64 payload. Falls back to JPEG, which the
    provider accepts for any common photo format.
    """
    if isinstance(data, str):
        # 16 base64 chars decode to the 12 header bytes we need
        try:
            data = base64.b64decode(strip_data_url(data)[:16])
        except (binascii.Error, ValueError):
            return DEFAULT_MEDIA_TYPE

    if data[:3] == b'\xff\xd8\xff':
        return "image/jpeg"
    if data[:8] == b'\x89PNG\r\n\x1a\n':
        return "image/png"
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return "image/webp"
    if data[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"
    return DEFAULT_MEDIA_TYPE


class ImageCodec:
    """Converts between raw image bytes, base64 payloads and display references."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or FetchConfig()
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    @staticmethod
    def encode(raw: bytes) -> str:
        """Encode raw bytes as a pure base64 payload (no data URL prefix)."""
        return base64.b64encode(raw).decode("ascii")

    @staticmethod
    def decode(payload: str) -> bytes:
        """Decode a base64 payload or data URL back to raw bytes."""
        try:
            return base64.b64decode(strip_data_url(payload), validate=True)
        except (binascii.Error, ValueError) as e:
            raise AssetCreationError(f"Invalid base64 image data: {e}") from e

    @staticmethod
    def to_display_ref(payload: str, media_type: str = "image/png") -> str:
        """Build a data URL the rendering layer can show directly."""
        return f"data:{media_type};base64,{payload}"

    @staticmethod
    def decode_display_ref(display_ref: str) -> tuple[bytes, str]:
        """Split a data URL into raw bytes and its media type."""
        if not display_ref.startswith("data:"):
            raise ValueError("Only data URL display references can be decoded")
        header, _, encoded = display_ref.partition(",")
        media_type = header[len("data:"):].split(";", 1)[0] or DEFAULT_MEDIA_TYPE
        return base64.b64decode(encoded), media_type

    @staticmethod
    def validate_image(raw: bytes) -> str:
        """Check the bytes decode as an image and return their media type."""
        try:
            with Image.open(io.BytesIO(raw)) as img:
                image_format = img.format
        except (UnidentifiedImageError, OSError) as e:
            raise AssetCreationError(f"Unreadable image data: {e}") from e
        return Image.MIME.get(image_format or "", sniff_media_type(raw))

    async def fetch_and_encode(self, url: str) -> str:
        """Download an image and return its base64 payload.

        Data URLs are decoded locally. Any transport failure or non-success
        status raises FetchError.
        """
        if url.startswith("data:"):
            return strip_data_url(url)

        # Browser-like headers help with hotlink protection
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
            "Referer": origin + "/",
            "Origin": origin,
        }

        logger.debug("Fetching image %s", url)
        try:
            response = await self.client.get(url, headers=headers, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Failed to fetch image {url}: HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Failed to fetch image {url}: {e}") from e

        return self.encode(response.content)

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
