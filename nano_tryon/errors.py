"""Error taxonomy for the try-on session core."""


class TryOnError(Exception):
    """Base class for failures the session converts into ``last_error``."""


class AssetCreationError(TryOnError):
    """Input bytes could not be decoded into an image asset."""


class NotFoundError(TryOnError):
    """A selection referenced an asset id missing from its collection."""


class FetchError(TryOnError):
    """A remote image could not be retrieved (network, status or CORS denial)."""


class ProviderError(TryOnError):
    """The generation call itself failed (network, auth, quota)."""


class NoImageProduced(TryOnError):
    """The generation call succeeded but returned no image part."""
