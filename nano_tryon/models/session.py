"""Session state and snapshot models."""

from enum import Enum

from pydantic import BaseModel, Field

from .asset import AssetCollection


class Step(str, Enum):
    """Wizard steps, in forward order."""
    CHOOSING_PERSON = "choosing_person"
    CHOOSING_GARMENT = "choosing_garment"
    VIEWING_RESULT = "viewing_result"

    @property
    def order(self) -> int:
        return list(Step).index(self)


class SessionState(BaseModel):
    """Mutable state of one try-on session.

    ``generating`` and ``generating_garment`` are the two in-flight slots and are
    orthogonal to ``step``: the result view may be showing while a try-on is
    still pending.
    """

    step: Step = Step.CHOOSING_PERSON
    generating: bool = False
    generating_garment: bool = False
    current_result: str | None = None  # Display ref of the latest composition
    history: list[str] = Field(default_factory=list)  # Newest first, successes only
    last_error: str | None = None

    def record_result(self, display_ref: str) -> None:
        """Store a successful composition as current and prepend it to history."""
        self.current_result = display_ref
        self.history.insert(0, display_ref)


class SessionSnapshot(BaseModel):
    """Serialisable copy of the session and both asset collections."""

    state: SessionState
    persons: AssetCollection
    garments: AssetCollection
