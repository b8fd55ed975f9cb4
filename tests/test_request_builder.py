"""
Request Builder Tests

Run with:
    python -m pytest tests/test_request_builder.py -v
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.errors import ValidationError
from services.media_generation import (
    ImageAspectRatio,
    ImageConfig,
    ImageSize,
    InlineImage,
    VideoAspectRatio,
    VideoConfig,
    VideoResolution,
    build_edit_request,
    build_image_request,
    build_video_request,
)
from services.media_generation.request_builder import image_config, video_config
from fakes import PNG_BYTES


class TestVideoRequests:

    def test_defaults(self):
        request = build_video_request("A lighthouse at dusk")

        assert request.output_config == VideoConfig(VideoAspectRatio.LANDSCAPE, VideoResolution.HD)
        assert request.reference_image is None
        assert request.request_id

    def test_mapping_config(self):
        request = build_video_request("Portrait", {"aspect_ratio": "9:16", "resolution": "1080p"})

        assert request.output_config.aspect_ratio is VideoAspectRatio.PORTRAIT
        assert request.output_config.resolution is VideoResolution.FULL_HD

    def test_prompt_is_trimmed(self):
        assert build_video_request("  spaced out  ").prompt == "spaced out"

    def test_unsupported_values_are_rejected(self):
        with pytest.raises(ValidationError, match="aspect ratio"):
            build_video_request("x", {"aspect_ratio": "4:3"})
        with pytest.raises(ValidationError, match="resolution"):
            build_video_request("x", {"resolution": "4k"})

    def test_unknown_field(self):
        with pytest.raises(ValidationError, match="duration"):
            video_config({"duration": 8})

    def test_overrides(self):
        config = video_config(VideoConfig(), resolution="1080p")
        assert config.aspect_ratio is VideoAspectRatio.LANDSCAPE
        assert config.resolution is VideoResolution.FULL_HD

    @pytest.mark.parametrize("prompt", ["", "   ", None])
    def test_empty_prompt(self, prompt):
        with pytest.raises(ValidationError):
            build_video_request(prompt)

    def test_reference_bytes(self):
        request = build_video_request("With a first frame", reference_image=PNG_BYTES)
        assert request.reference_image == InlineImage(data=PNG_BYTES, mime_type="image/png")

    def test_unreadable_reference(self, tmp_path):
        with pytest.raises(ValidationError):
            build_video_request("x", reference_image=tmp_path / "missing.png")

    def test_request_ids_are_unique(self):
        assert build_video_request("a").request_id != build_video_request("a").request_id


class TestImageRequests:

    def test_defaults(self):
        request = build_image_request("Hero shot")
        assert request.output_config == ImageConfig(ImageSize.SIZE_1K, ImageAspectRatio.SQUARE)

    def test_all_sizes(self):
        for size in ("1K", "2K", "4K"):
            assert image_config({"size": size}).size.value == size

    def test_unsupported_size(self):
        with pytest.raises(ValidationError, match="image size"):
            build_image_request("x", {"size": "8K"})

    def test_wide_aspects(self):
        assert image_config(aspect_ratio="4:3").aspect_ratio is ImageAspectRatio.LANDSCAPE_4_3
        assert image_config(aspect_ratio="3:4").aspect_ratio is ImageAspectRatio.PORTRAIT_3_4


class TestEditRequests:

    def test_edit(self):
        request = build_edit_request(PNG_BYTES, "Make it blue")

        assert request.prompt == "Make it blue"
        assert request.reference_image.data == PNG_BYTES
        assert request.output_config is None

    def test_missing_image(self):
        with pytest.raises(ValidationError):
            build_edit_request(None, "Make it blue")

    def test_missing_instruction(self):
        with pytest.raises(ValidationError, match="edit instruction"):
            build_edit_request(PNG_BYTES, "")


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
