"""Asset registry: person and garment collections, selection and lazy encoding."""

import asyncio
import logging
import uuid

from .config import PresetConfig
from .errors import AssetCreationError
from .models import AssetCollection, AssetKind, ImageAsset, Provenance
from .services import ImageCodec

logger = logging.getLogger(__name__)


class AssetRegistry:
    """Holds one ordered collection per asset kind.

    New assets are prepended and auto-selected. Encodings are materialized
    lazily through ``resolve_encoding``, with at most one fetch in flight per
    asset.
    """

    def __init__(self, codec: ImageCodec, presets: PresetConfig | None = None):
        self.codec = codec
        self.collections: dict[AssetKind, AssetCollection] = {
            kind: AssetCollection(kind=kind) for kind in AssetKind
        }
        self._inflight: dict[str, asyncio.Future[str]] = {}

        if presets is not None:
            self.seed(AssetKind.PERSON, presets.persons)
            self.seed(AssetKind.GARMENT, presets.garments)

    def collection(self, kind: AssetKind) -> AssetCollection:
        return self.collections[kind]

    def seed(self, kind: AssetKind, urls: list[str]) -> None:
        """Append built-in preset assets, keeping the configured order."""
        collection = self.collections[kind]
        for url in urls:
            collection.assets.append(ImageAsset(
                id=f"preset-{kind.value}-{len(collection.assets) + 1}",
                display_ref=url,
                provenance=Provenance.PRESET,
            ))

    def add_asset(
        self,
        kind: AssetKind,
        data: bytes | str,
        provenance: Provenance,
        display_ref: str | None = None,
    ) -> ImageAsset:
        """Create an asset from raw bytes, base64 or a data URL.

        The asset is prepended to its collection and becomes the selection.
        Raises AssetCreationError if the data is not a decodable image.
        """
        if isinstance(data, str):
            raw = self.codec.decode(data)
        else:
            raw = data
        if not raw:
            raise AssetCreationError("Empty image data")

        media_type = self.codec.validate_image(raw)
        encoding = self.codec.encode(raw)

        asset = ImageAsset(
            id=uuid.uuid4().hex,
            display_ref=display_ref or self.codec.to_display_ref(encoding, media_type),
            provenance=provenance,
            media_type=media_type,
            encoding=encoding,
        )
        collection = self.collections[kind]
        collection.prepend(asset)
        collection.select(asset.id)

        logger.info("Added %s %s asset %s", provenance.value, kind.value, asset.id)
        return asset

    def select(self, kind: AssetKind, asset_id: str) -> ImageAsset:
        """Select an asset; raises NotFoundError if the id is absent."""
        return self.collections[kind].select(asset_id)

    def selected(self, kind: AssetKind) -> ImageAsset | None:
        return self.collections[kind].selected

    async def resolve_encoding(self, asset: ImageAsset) -> str:
        """Return the asset's base64 payload, fetching and caching it once.

        Concurrent callers for the same asset share one in-flight fetch. A
        failed fetch raises FetchError and is not cached.
        """
        if asset.encoding is not None:
            return asset.encoding

        task = self._inflight.get(asset.id)
        if task is None:
            task = asyncio.ensure_future(self._fetch_encoding(asset))
            self._inflight[asset.id] = task
            task.add_done_callback(lambda _: self._inflight.pop(asset.id, None))

        # Shielded so one cancelled waiter does not cancel the shared fetch
        return await asyncio.shield(task)

    async def _fetch_encoding(self, asset: ImageAsset) -> str:
        encoding = await self.codec.fetch_and_encode(asset.display_ref)
        asset.encoding = encoding
        logger.debug("Cached encoding for asset %s", asset.id)
        return encoding
