"""Generation provider boundary: request and response shapes."""

from typing import Protocol

from pydantic import BaseModel, Field


class InlineImage(BaseModel):
    """A base64 image payload tagged with its media type."""
    data: str
    media_type: str = "image/png"


class RequestPart(BaseModel):
    """One ordered request part: either a text instruction or an inline image."""
    text: str | None = None
    inline_image: InlineImage | None = None

    @classmethod
    def from_text(cls, text: str) -> "RequestPart":
        return cls(text=text)

    @classmethod
    def from_image(cls, data: str, media_type: str) -> "RequestPart":
        return cls(inline_image=InlineImage(data=data, media_type=media_type))


class GenerationRequest(BaseModel):
    """Ordered parts plus an aspect-ratio hint ("1:1", "3:4", ...)."""
    parts: list[RequestPart]
    aspect_ratio: str


class ResponsePart(BaseModel):
    text: str | None = None
    inline_image: InlineImage | None = None


class Candidate(BaseModel):
    parts: list[ResponsePart] = Field(default_factory=list)


class GenerationResponse(BaseModel):
    """Zero or more candidates, each an ordered list of parts."""
    candidates: list[Candidate] = Field(default_factory=list)

    def first_image(self) -> InlineImage | None:
        """Return the first inline image of the first candidate, if any."""
        if not self.candidates:
            return None
        for part in self.candidates[0].parts:
            if part.inline_image is not None and part.inline_image.data:
                return part.inline_image
        return None


class ImageGenerationProvider(Protocol):
    """Anything that can turn a GenerationRequest into a GenerationResponse.

    Implementations raise ProviderError when the call itself fails.
    """

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        ...
