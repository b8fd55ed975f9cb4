"""
Media Request Builder

Assembles validated GenerationRequests. Unsupported config values are
rejected, never clamped to the nearest valid value.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from core.errors import ValidationError
from .materializer import BinaryMaterializer
from .models import (
    GenerationRequest,
    ImageAspectRatio,
    ImageConfig,
    ImageSize,
    InlineImage,
    VideoAspectRatio,
    VideoConfig,
    VideoResolution,
)

E = TypeVar("E", bound=Enum)

ReferenceImage = Union[InlineImage, str, Path, bytes]


def _coerce_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Unsupported {field_name} {value!r} (allowed: {allowed})")


def _require_prompt(prompt: Optional[str], label: str = "prompt") -> str:
    if prompt is None or not str(prompt).strip():
        raise ValidationError(f"A non-empty {label} is required")
    return str(prompt).strip()


def video_config(
    config: Union[VideoConfig, Mapping[str, Any], None] = None,
    **overrides: Any,
) -> VideoConfig:
    """Build a VideoConfig from an object, a mapping, or keyword values."""
    if isinstance(config, VideoConfig) and not overrides:
        return config

    values: dict[str, Any] = {}
    if isinstance(config, VideoConfig):
        values = {"aspect_ratio": config.aspect_ratio, "resolution": config.resolution}
    elif config:
        values = dict(config)
    values.update(overrides)

    unknown = set(values) - {"aspect_ratio", "resolution"}
    if unknown:
        raise ValidationError(f"Unknown video config field(s): {', '.join(sorted(unknown))}")

    return VideoConfig(
        aspect_ratio=_coerce_enum(VideoAspectRatio, values.get("aspect_ratio", VideoAspectRatio.LANDSCAPE), "aspect ratio"),
        resolution=_coerce_enum(VideoResolution, values.get("resolution", VideoResolution.HD), "resolution"),
    )


def image_config(
    config: Union[ImageConfig, Mapping[str, Any], None] = None,
    **overrides: Any,
) -> ImageConfig:
    """Build an ImageConfig from an object, a mapping, or keyword values."""
    if isinstance(config, ImageConfig) and not overrides:
        return config

    values: dict[str, Any] = {}
    if isinstance(config, ImageConfig):
        values = {"size": config.size, "aspect_ratio": config.aspect_ratio}
    elif config:
        values = dict(config)
    values.update(overrides)

    unknown = set(values) - {"size", "aspect_ratio"}
    if unknown:
        raise ValidationError(f"Unknown image config field(s): {', '.join(sorted(unknown))}")

    return ImageConfig(
        size=_coerce_enum(ImageSize, values.get("size", ImageSize.SIZE_1K), "image size"),
        aspect_ratio=_coerce_enum(ImageAspectRatio, values.get("aspect_ratio", ImageAspectRatio.SQUARE), "aspect ratio"),
    )


def build_video_request(
    prompt: str,
    output_config: Union[VideoConfig, Mapping[str, Any], None] = None,
    reference_image: Optional[ReferenceImage] = None,
) -> GenerationRequest:
    """
    Build a video generation request.

    Args:
        prompt: Text description of the video
        output_config: Aspect ratio (16:9, 9:16) and resolution (720p, 1080p)
        reference_image: Optional first-frame image (InlineImage, path, or bytes)

    Raises:
        ValidationError: Empty prompt, unsupported config, unreadable image
    """
    text = _require_prompt(prompt)
    config = video_config(output_config)
    inline = BinaryMaterializer.read_inline(reference_image) if reference_image is not None else None
    return GenerationRequest(prompt=text, output_config=config, reference_image=inline)


def build_image_request(
    prompt: str,
    output_config: Union[ImageConfig, Mapping[str, Any], None] = None,
) -> GenerationRequest:
    """Build an image generation request."""
    text = _require_prompt(prompt)
    return GenerationRequest(prompt=text, output_config=image_config(output_config))


def build_edit_request(image: ReferenceImage, instruction: str) -> GenerationRequest:
    """Build an image edit request: source image plus an edit instruction."""
    text = _require_prompt(instruction, label="edit instruction")
    if image is None:
        raise ValidationError("An image to edit is required")
    return GenerationRequest(prompt=text, reference_image=BinaryMaterializer.read_inline(image))
