"""
Image Orchestrator Tests

Run with:
    python -m pytest tests/test_image_orchestrator.py -v
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import APIConfig, Config, GenerationConfig
from core.errors import CredentialError, GenerationError, MissingOutputError, ValidationError
from services.media_generation import (
    AssetKind,
    BinaryMaterializer,
    ImageOrchestrator,
    ImageResponse,
    ImageSize,
    read_handle,
)
from fakes import PNG_BYTES, FakeGate, FakeMediaService, image_response


@pytest.fixture
def config(tmp_path):
    return Config(
        api=APIConfig(gemini_api_key="test-key"),
        generation=GenerationConfig(output_dir=str(tmp_path)),
    )


def make_orchestrator(tmp_path, config, service, gate=None):
    return ImageOrchestrator(service, gate or FakeGate(), BinaryMaterializer(tmp_path), config=config)


class TestImageGeneration:

    @pytest.mark.asyncio
    async def test_generate(self, tmp_path, config):
        service = FakeMediaService(image_response=image_response())
        orchestrator = make_orchestrator(tmp_path, config, service)

        asset = await orchestrator.generate("Hero shot", {"size": "4K", "aspect_ratio": "16:9"})

        assert asset.kind is AssetKind.IMAGE
        assert asset.prompt_used == "Hero shot"
        assert read_handle(asset.local_handle) == PNG_BYTES

        request, model = service.image_requests[0]
        assert model == config.models.image_model
        assert request.output_config.size is ImageSize.SIZE_4K

    @pytest.mark.asyncio
    async def test_requires_privileged_credential(self, tmp_path, config):
        gate = FakeGate(privileged=False)
        service = FakeMediaService(image_response=image_response())

        with pytest.raises(CredentialError):
            await make_orchestrator(tmp_path, config, service, gate).generate("Hero shot")

        assert service.image_requests == []

    @pytest.mark.asyncio
    async def test_text_only_response(self, tmp_path, config):
        service = FakeMediaService(image_response=ImageResponse(text_parts=["I can't draw that."]))

        with pytest.raises(MissingOutputError) as exc_info:
            await make_orchestrator(tmp_path, config, service).generate("Hero shot")

        assert exc_info.value.message == "No image generated"

    @pytest.mark.asyncio
    async def test_service_failure_is_wrapped(self, tmp_path, config):
        service = FakeMediaService(image_response=RuntimeError("safety block"))

        with pytest.raises(GenerationError) as exc_info:
            await make_orchestrator(tmp_path, config, service).generate("Hero shot")

        assert exc_info.value.message == "Image request failed: safety block"

    @pytest.mark.asyncio
    async def test_invalid_size(self, tmp_path, config):
        service = FakeMediaService()

        with pytest.raises(ValidationError):
            await make_orchestrator(tmp_path, config, service).generate("Hero shot", {"size": "3K"})

        assert service.image_requests == []


class TestImageEditing:

    @pytest.mark.asyncio
    async def test_edit_uses_standard_key(self, tmp_path, config):
        """Editing never consults the privileged credential gate."""
        gate = FakeGate(privileged=False)
        edited = b"\x89PNG\r\n\x1a\nedited"
        service = FakeMediaService(edit_response=image_response(edited))

        asset = await make_orchestrator(tmp_path, config, service, gate).edit(PNG_BYTES, "Add a sunset")

        assert read_handle(asset.local_handle) == edited
        assert asset.prompt_used == "Add a sunset"
        assert gate.checks == 0
        assert gate.prompts == 0

        request, model = service.edit_requests[0]
        assert model == config.models.edit_model
        assert request.reference_image.data == PNG_BYTES

    @pytest.mark.asyncio
    async def test_edit_without_output(self, tmp_path, config):
        service = FakeMediaService(edit_response=ImageResponse())

        with pytest.raises(MissingOutputError) as exc_info:
            await make_orchestrator(tmp_path, config, service).edit(PNG_BYTES, "Add a sunset")

        assert exc_info.value.message == "Image editing failed"

    @pytest.mark.asyncio
    async def test_edit_failure_is_wrapped(self, tmp_path, config):
        service = FakeMediaService(edit_response=RuntimeError("bad image"))

        with pytest.raises(GenerationError, match="Image edit request failed"):
            await make_orchestrator(tmp_path, config, service).edit(PNG_BYTES, "Add a sunset")


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
