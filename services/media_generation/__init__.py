"""
Media Generation Service

Orchestrates image and video generation against the Gemini / Veo service:
- Video: submit -> poll -> download, with one credential re-selection retry
- Image: one synchronous call, inline artifact

Produced media is materialized to local files (file:// handles).
"""

from .gemini_service import GeminiMediaService, MediaService
from .materializer import BinaryMaterializer, read_handle
from .models import (
    AssetKind,
    GeneratedAsset,
    GenerationRequest,
    ImageAspectRatio,
    ImageConfig,
    ImageResponse,
    ImageSize,
    InlineImage,
    InlinePart,
    Operation,
    VideoAspectRatio,
    VideoConfig,
    VideoResolution,
)
from .orchestrator import ImageOrchestrator, VideoOrchestrator
from .poller import OperationPoller, PollState
from .request_builder import build_edit_request, build_image_request, build_video_request
from .retry_policy import SubmissionRetryPolicy

__all__ = [
    "GeminiMediaService",
    "MediaService",
    "BinaryMaterializer",
    "read_handle",
    "AssetKind",
    "GeneratedAsset",
    "GenerationRequest",
    "ImageAspectRatio",
    "ImageConfig",
    "ImageResponse",
    "ImageSize",
    "InlineImage",
    "InlinePart",
    "Operation",
    "VideoAspectRatio",
    "VideoConfig",
    "VideoResolution",
    "ImageOrchestrator",
    "VideoOrchestrator",
    "OperationPoller",
    "PollState",
    "build_edit_request",
    "build_image_request",
    "build_video_request",
    "SubmissionRetryPolicy",
]
