"""Data models for the Nano Try-On session core."""

from .asset import AssetCollection, AssetKind, ImageAsset, Provenance
from .session import SessionSnapshot, SessionState, Step

__all__ = [
    "AssetCollection",
    "AssetKind",
    "ImageAsset",
    "Provenance",
    "SessionSnapshot",
    "SessionState",
    "Step",
]
