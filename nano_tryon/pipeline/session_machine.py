"""Try-on session: the three-step wizard, in-flight slots and result history."""

import logging

from ..config import TryOnConfig
from ..errors import AssetCreationError, NotFoundError, TryOnError
from ..models import (
    AssetKind,
    ImageAsset,
    Provenance,
    SessionSnapshot,
    SessionState,
    Step,
)
from ..registry import AssetRegistry
from ..services import GeminiImageClient, ImageCodec, sniff_media_type
from .generation import GenerationPipeline

logger = logging.getLogger(__name__)


UPLOAD_ERROR = "Failed to upload image."
SELECT_ERROR = "The selected image is no longer available."
GARMENT_ERROR = "Garment generation failed, please try again later."
TRYON_ERROR = (
    "Try-on generation failed. The network may be unavailable "
    "or an image could not be accessed (CORS)."
)


class TryOnSession:
    """Orchestrates one user's try-on session.

    Flow:
    1. Choose (or upload) a person image
    2. Choose, upload or generate a garment image
    3. Compose the try-on result and keep it in history

    Every failure from the layers below is caught here and turned into
    ``state.last_error`` plus a defined transition; none of them end the
    session.
    """

    def __init__(
        self,
        registry: AssetRegistry,
        pipeline: GenerationPipeline,
    ):
        self.registry = registry
        self.pipeline = pipeline
        self.state = SessionState()

    @property
    def selected_person(self) -> ImageAsset | None:
        return self.registry.selected(AssetKind.PERSON)

    @property
    def selected_garment(self) -> ImageAsset | None:
        return self.registry.selected(AssetKind.GARMENT)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can_go_to(self, target: Step) -> bool:
        """Whether moving to ``target`` is allowed from the current state."""
        if target.order <= self.state.step.order:
            return True
        if target == Step.CHOOSING_GARMENT:
            return self.selected_person is not None
        if target == Step.VIEWING_RESULT:
            return self.state.current_result is not None or self.state.generating
        return False

    def go_to_step(self, target: Step) -> None:
        """Navigate the wizard. Invalid forward moves are silently ignored."""
        if target == self.state.step:
            return
        if not self.can_go_to(target):
            logger.debug("Ignoring move from %s to %s", self.state.step.value, target.value)
            return
        self.state.step = target
        self.state.last_error = None

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def upload_person(self, data: bytes | str, display_ref: str | None = None) -> ImageAsset | None:
        return self._upload(AssetKind.PERSON, data, display_ref)

    def upload_garment(self, data: bytes | str, display_ref: str | None = None) -> ImageAsset | None:
        return self._upload(AssetKind.GARMENT, data, display_ref)

    def _upload(self, kind: AssetKind, data: bytes | str, display_ref: str | None) -> ImageAsset | None:
        try:
            return self.registry.add_asset(kind, data, Provenance.UPLOADED, display_ref)
        except AssetCreationError as e:
            logger.warning("%s upload failed: %s", kind.value.capitalize(), e)
            self.state.last_error = UPLOAD_ERROR
            return None

    def select_person(self, asset_id: str) -> None:
        self._select(AssetKind.PERSON, asset_id)

    def select_garment(self, asset_id: str) -> None:
        self._select(AssetKind.GARMENT, asset_id)

    def _select(self, kind: AssetKind, asset_id: str) -> None:
        try:
            self.registry.select(kind, asset_id)
        except NotFoundError as e:
            logger.warning("Selection failed: %s", e)
            self.state.last_error = SELECT_ERROR

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_garment_from_prompt(self, prompt: str) -> ImageAsset | None:
        """Generate a garment from text and add it as the selected garment.

        Blank prompts and submissions while a garment is already generating
        are ignored. The current step never changes.
        """
        if not prompt.strip() or self.state.generating_garment:
            return None

        self.state.generating_garment = True
        self.state.last_error = None
        try:
            garment_b64 = await self.pipeline.generate_garment(prompt)
            return self.registry.add_asset(
                AssetKind.GARMENT,
                garment_b64,
                Provenance.GENERATED,
            )
        except TryOnError as e:
            logger.warning("Garment generation failed: %s", e)
            self.state.last_error = f"{GARMENT_ERROR} ({e})"
            return None
        finally:
            self.state.generating_garment = False

    async def start_try_on(self) -> str | None:
        """Compose the selected person and garment into a try-on result.

        Returns the result display ref, or None when the call was ignored or
        failed. On failure the session goes back to garment selection.
        """
        person = self.selected_person
        garment = self.selected_garment
        if person is None or garment is None or self.state.generating:
            return None

        self.state.generating = True
        self.state.step = Step.VIEWING_RESULT
        self.state.last_error = None
        self.state.current_result = None

        try:
            person_b64 = await self.registry.resolve_encoding(person)
            garment_b64 = await self.registry.resolve_encoding(garment)
            result = await self.pipeline.compose_try_on(person_b64, garment_b64)

            media_type = result.media_type or sniff_media_type(result.data)
            result_ref = self.registry.codec.to_display_ref(result.data, media_type)
            self.state.record_result(result_ref)
            logger.info("Try-on complete (%d results in history)", len(self.state.history))
            return result_ref

        except TryOnError as e:
            logger.warning("Try-on failed: %s", e)
            self.state.last_error = f"{TRYON_ERROR} ({e})"
            self.state.current_result = None
            self.state.step = Step.CHOOSING_GARMENT
            return None

        finally:
            self.state.generating = False

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def dismiss_error(self) -> None:
        self.state.last_error = None

    def result_image(self) -> tuple[bytes, str] | None:
        """Raw bytes and media type of the current result, for download."""
        if self.state.current_result is None:
            return None
        return self.registry.codec.decode_display_ref(self.state.current_result)

    def snapshot(self) -> SessionSnapshot:
        """Copy of the session state and both collections."""
        return SessionSnapshot(
            state=self.state.model_copy(deep=True),
            persons=self.registry.collection(AssetKind.PERSON).model_copy(deep=True),
            garments=self.registry.collection(AssetKind.GARMENT).model_copy(deep=True),
        )

    async def close(self):
        """Release the codec's HTTP client."""
        await self.registry.codec.close()


def create_session(config: TryOnConfig) -> TryOnSession:
    """Wire a session with the Gemini provider and configured presets."""
    codec = ImageCodec(config.fetch)
    registry = AssetRegistry(codec, config.presets)
    provider = GeminiImageClient(config.gemini, config.api_key)
    pipeline = GenerationPipeline(provider, config.gemini)
    return TryOnSession(registry, pipeline)
