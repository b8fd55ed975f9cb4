"""
Data model for media generation.

Requests and produced assets are immutable values; an Operation is the
mutable snapshot of a remote long-running job.
"""

import base64
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import unquote, urlparse


class AssetKind(str, Enum):
    """Kind of produced media."""
    IMAGE = "image"
    VIDEO = "video"


class VideoAspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class VideoResolution(str, Enum):
    HD = "720p"
    FULL_HD = "1080p"


class ImageSize(str, Enum):
    SIZE_1K = "1K"
    SIZE_2K = "2K"
    SIZE_4K = "4K"


class ImageAspectRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"


@dataclass(frozen=True)
class VideoConfig:
    """Output configuration for video generation."""
    aspect_ratio: VideoAspectRatio = VideoAspectRatio.LANDSCAPE
    resolution: VideoResolution = VideoResolution.HD


@dataclass(frozen=True)
class ImageConfig:
    """Output configuration for image generation."""
    size: ImageSize = ImageSize.SIZE_1K
    aspect_ratio: ImageAspectRatio = ImageAspectRatio.SQUARE


OutputConfig = Union[VideoConfig, ImageConfig]


@dataclass(frozen=True)
class InlineImage:
    """Image bytes ready to be embedded in a request."""
    data: bytes
    mime_type: str

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True)
class GenerationRequest:
    """Request for image or video generation. Constructed once per call."""
    prompt: str
    output_config: Optional[OutputConfig] = None
    reference_image: Optional[InlineImage] = None

    # Request metadata
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Operation:
    """
    Snapshot of a remote long-running job.

    `raw` is the service's own operation object; it is what gets passed back
    on every status refresh.
    """
    name: str
    done: bool = False
    error_message: Optional[str] = None
    has_error: bool = False
    video_uris: list[str] = field(default_factory=list)
    raw: Any = None

    @property
    def first_uri(self) -> Optional[str]:
        return self.video_uris[0] if self.video_uris else None


@dataclass(frozen=True)
class InlinePart:
    """Inline artifact from a synchronous response (base64 text or decoded bytes)."""
    data: Union[str, bytes]
    mime_type: Optional[str] = None


@dataclass
class ImageResponse:
    """First candidate of a synchronous image generation response."""
    inline_parts: list[InlinePart] = field(default_factory=list)
    text_parts: list[str] = field(default_factory=list)

    @property
    def first_inline(self) -> Optional[InlinePart]:
        return self.inline_parts[0] if self.inline_parts else None


@dataclass(frozen=True)
class GeneratedAsset:
    """A produced image or video, materialized on local disk."""
    kind: AssetKind
    local_handle: str
    prompt_used: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def path(self) -> Path:
        return handle_to_path(self.local_handle)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "local_handle": self.local_handle,
            "filename": self.path.name,
            "prompt_used": self.prompt_used,
            "created_at": self.created_at.isoformat(),
        }


def handle_to_path(handle: str) -> Path:
    """Resolve a file:// handle to a filesystem path."""
    parsed = urlparse(handle)
    if parsed.scheme != "file":
        raise ValueError(f"Not a local handle: {handle}")
    return Path(unquote(parsed.path))
