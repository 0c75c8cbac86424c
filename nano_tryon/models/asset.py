"""Image asset and collection models."""

from enum import Enum

from pydantic import BaseModel, Field

from ..errors import NotFoundError


class Provenance(str, Enum):
    """Where an asset came from. Set once at creation."""
    PRESET = "preset"
    UPLOADED = "uploaded"
    GENERATED = "generated"


class AssetKind(str, Enum):
    """Names the two independent asset collections."""
    PERSON = "person"
    GARMENT = "garment"


class ImageAsset(BaseModel):
    """A person or garment image with identity, provenance and cached encoding.

    Everything except ``encoding`` is frozen. ``encoding`` is filled in at most
    once, either at creation or lazily by the registry.
    """

    id: str = Field(frozen=True)
    display_ref: str = Field(frozen=True, description="URL or data URL used to render the image")
    provenance: Provenance = Field(frozen=True)
    media_type: str | None = Field(default=None, frozen=True)
    # Not serialised; display_ref already carries the payload
    encoding: str | None = Field(default=None, exclude=True, description="Base64 payload, no data URL prefix")


class AssetCollection(BaseModel):
    """Ordered assets of one kind, newest first, with at most one selection."""

    kind: AssetKind
    assets: list[ImageAsset] = Field(default_factory=list)
    selected_id: str | None = None

    def get(self, asset_id: str) -> ImageAsset | None:
        """Find an asset by id."""
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        return None

    def prepend(self, asset: ImageAsset) -> None:
        """Insert a new asset at the front of the collection."""
        if self.get(asset.id) is not None:
            raise ValueError(f"Duplicate {self.kind.value} asset id: {asset.id}")
        self.assets.insert(0, asset)

    def select(self, asset_id: str) -> ImageAsset:
        """Mark an asset as selected. Re-selecting the same id changes nothing."""
        asset = self.get(asset_id)
        if asset is None:
            raise NotFoundError(f"No {self.kind.value} asset with id {asset_id!r}")
        self.selected_id = asset_id
        return asset

    @property
    def selected(self) -> ImageAsset | None:
        if self.selected_id is None:
            return None
        return self.get(self.selected_id)
