"""Unit tests for GenerationPipeline - request building and response handling."""

import pytest

from nano_tryon.config import GeminiConfig
from nano_tryon.errors import NoImageProduced, ProviderError
from nano_tryon.pipeline import GenerationPipeline
from nano_tryon.services import GenerationResponse, ImageCodec
from nano_tryon.services.provider import Candidate, ResponsePart

from conftest import FakeProvider, image_response


class TestGenerateGarment:
    """Tests for garment synthesis from text."""

    @pytest.mark.asyncio
    async def test_returns_first_image_payload(self, result_bytes):
        provider = FakeProvider(image_response(result_bytes))
        pipeline = GenerationPipeline(provider)

        payload = await pipeline.generate_garment("red silk jacket")

        assert payload == ImageCodec.encode(result_bytes)

    @pytest.mark.asyncio
    async def test_request_is_single_square_text_part(self, result_bytes):
        provider = FakeProvider(image_response(result_bytes))
        pipeline = GenerationPipeline(provider)

        await pipeline.generate_garment("  red silk jacket  ")

        request = provider.requests[0]
        assert len(provider.requests) == 1
        assert request.aspect_ratio == "1:1"
        assert len(request.parts) == 1
        assert "clothing item: red silk jacket." in request.parts[0].text
        assert "neutral background" in request.parts[0].text

    @pytest.mark.asyncio
    async def test_blank_prompt_is_rejected_without_call(self):
        provider = FakeProvider()
        pipeline = GenerationPipeline(provider)

        with pytest.raises(ValueError):
            await pipeline.generate_garment("   ")

        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_text_only_response_raises_no_image(self):
        text_only = GenerationResponse(candidates=[Candidate(parts=[ResponsePart(text="Sorry")])])
        pipeline = GenerationPipeline(FakeProvider(text_only))

        with pytest.raises(NoImageProduced):
            await pipeline.generate_garment("red silk jacket")

    @pytest.mark.asyncio
    async def test_empty_response_raises_no_image(self):
        pipeline = GenerationPipeline(FakeProvider(GenerationResponse()))

        with pytest.raises(NoImageProduced):
            await pipeline.generate_garment("red silk jacket")

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self):
        pipeline = GenerationPipeline(FakeProvider(ProviderError("quota exceeded")))

        with pytest.raises(ProviderError, match="quota"):
            await pipeline.generate_garment("red silk jacket")

    @pytest.mark.asyncio
    async def test_unexpected_provider_failure_becomes_provider_error(self):
        pipeline = GenerationPipeline(FakeProvider(RuntimeError("socket closed")))

        with pytest.raises(ProviderError, match="socket closed"):
            await pipeline.generate_garment("red silk jacket")


class TestComposeTryOn:
    """Tests for try-on composition."""

    @pytest.mark.asyncio
    async def test_request_orders_person_garment_instruction(self, png_bytes, jpeg_bytes, result_bytes):
        provider = FakeProvider(image_response(result_bytes))
        pipeline = GenerationPipeline(provider)
        person_b64 = ImageCodec.encode(png_bytes)
        garment_b64 = ImageCodec.encode(jpeg_bytes)

        payload = await pipeline.compose_try_on(person_b64, garment_b64)

        request = provider.requests[0]
        assert payload.data == ImageCodec.encode(result_bytes)
        assert payload.media_type == "image/png"
        assert request.aspect_ratio == "3:4"
        assert request.parts[0].inline_image.data == person_b64
        assert request.parts[0].inline_image.media_type == "image/png"
        assert request.parts[1].inline_image.data == garment_b64
        assert request.parts[1].inline_image.media_type == "image/jpeg"
        assert "exact pose" in request.parts[2].text

    @pytest.mark.asyncio
    async def test_text_parts_are_discarded(self, png_bytes, result_bytes):
        provider = FakeProvider(image_response(result_bytes, text="Here is your image"))
        pipeline = GenerationPipeline(provider)
        b64 = ImageCodec.encode(png_bytes)

        result = await pipeline.compose_try_on(b64, b64)

        assert result.data == ImageCodec.encode(result_bytes)

    @pytest.mark.asyncio
    async def test_only_first_candidate_is_used(self, png_bytes, result_bytes):
        response = GenerationResponse(candidates=[
            Candidate(parts=[ResponsePart(text="no image here")]),
            image_response(result_bytes).candidates[0],
        ])
        pipeline = GenerationPipeline(FakeProvider(response))
        b64 = ImageCodec.encode(png_bytes)

        with pytest.raises(NoImageProduced):
            await pipeline.compose_try_on(b64, b64)

    @pytest.mark.asyncio
    async def test_aspect_ratios_come_from_config(self, png_bytes, result_bytes):
        provider = FakeProvider(image_response(result_bytes), image_response(result_bytes))
        pipeline = GenerationPipeline(
            provider, GeminiConfig(garment_aspect_ratio="4:3", tryon_aspect_ratio="9:16")
        )
        b64 = ImageCodec.encode(png_bytes)

        await pipeline.generate_garment("linen shirt")
        await pipeline.compose_try_on(b64, b64)

        assert [r.aspect_ratio for r in provider.requests] == ["4:3", "9:16"]
