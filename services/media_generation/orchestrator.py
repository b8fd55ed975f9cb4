"""
Media Orchestrators

Public entry points for asset generation:
- VideoOrchestrator: credential check -> build -> submit (with bounded
  re-selection retry) -> poll -> validate -> download -> GeneratedAsset
- ImageOrchestrator: credential check -> build -> one synchronous call ->
  inline artifact -> GeneratedAsset

Each call keeps its own request, operation and poller; concurrent calls
share only the credential gate and the output directory.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Mapping, Optional, Union

from core.config import Config, get_config
from core.credentials import CredentialGate, ensure_privileged_credential
from core.errors import (
    CredentialError,
    GenerationError,
    MediaGenerationError,
    MissingOutputError,
    SubmissionError,
    is_entity_not_found,
)
from .gemini_service import MediaService
from .materializer import BinaryMaterializer
from .models import AssetKind, GeneratedAsset, ImageConfig, ImageResponse, VideoConfig
from .poller import OperationPoller, PollState, ProgressFn, SleepFn
from .request_builder import ReferenceImage, build_edit_request, build_image_request, build_video_request
from .retry_policy import SubmissionRetryPolicy

logger = logging.getLogger(__name__)


class _ProgressMixin:
    on_progress: Optional[ProgressFn] = None

    def _emit_progress(self, request_id: str, percent: int, message: str):
        """Emit progress update via callback."""
        if self.on_progress:
            try:
                self.on_progress(request_id, percent, message)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")


class VideoOrchestrator(_ProgressMixin):
    """
    Long-running video generation.

    Usage:
        orchestrator = VideoOrchestrator(service, gate, materializer)
        asset = await orchestrator.generate(
            "Slow dolly past the product on a marble counter",
            {"aspect_ratio": "9:16", "resolution": "720p"},
        )
    """

    def __init__(
        self,
        service: MediaService,
        gate: CredentialGate,
        materializer: BinaryMaterializer,
        config: Optional[Config] = None,
        sleep: SleepFn = asyncio.sleep,
        on_progress: Optional[ProgressFn] = None,
    ):
        self.service = service
        self.gate = gate
        self.materializer = materializer
        self.config = config or get_config()
        self.sleep = sleep
        self.on_progress = on_progress

    async def generate(
        self,
        prompt: str,
        output_config: Union[VideoConfig, Mapping[str, Any], None] = None,
        reference_image: Optional[ReferenceImage] = None,
    ) -> GeneratedAsset:
        """
        Generate a video and materialize it locally.

        Args:
            prompt: Text description of the video
            output_config: Aspect ratio and resolution
            reference_image: Optional first-frame image

        Returns:
            GeneratedAsset of kind video

        Raises:
            ValidationError, CredentialError, SubmissionError, GenerationError,
            MissingOutputError, NetworkError
        """
        await ensure_privileged_credential(self.gate)
        request = build_video_request(prompt, output_config, reference_image)
        model = self.config.models.video_model

        self._emit_progress(request.request_id, 0, "Starting video generation")
        logger.info(f"Starting video generation {request.request_id} with {model}")

        policy = SubmissionRetryPolicy(self.gate)
        try:
            operation = await policy.run(lambda: self.service.submit_video(request, model))
        except Exception as e:
            if isinstance(e, MediaGenerationError) and not is_entity_not_found(e):
                raise
            logger.error(f"Video generation request failed after {policy.attempts} attempt(s): {e}")
            raise SubmissionError(
                f"Video request failed: {e}",
                error_code="ENTITY_NOT_FOUND" if is_entity_not_found(e) else None,
            ) from e

        self._emit_progress(request.request_id, 10, f"Job submitted: {operation.name}")

        poller = OperationPoller(
            self.service.refresh_operation,
            interval=self.config.generation.poll_interval_seconds,
            max_polls=self.config.generation.poll_limit,
            sleep=self.sleep,
            on_progress=self.on_progress,
            request_id=request.request_id,
        )
        operation = await poller.run(operation)

        if poller.state is PollState.ERROR:
            message = operation.error_message or "Unknown error"
            logger.error(f"Video generation error payload: {message}")
            raise GenerationError(f"Video generation error: {message}")

        uri = operation.first_uri
        if not uri:
            raise MissingOutputError("Video generation completed but returned no URI.")

        # The download needs the key too; it may have been re-selected meanwhile
        await ensure_privileged_credential(self.gate)
        credential = self.gate.current_credential()
        if not credential:
            raise CredentialError("API key missing for video download")

        self._emit_progress(request.request_id, 95, "Downloading video")
        handle = await self.materializer.fetch_to_handle(uri, credential, AssetKind.VIDEO)

        self._emit_progress(request.request_id, 100, "Video ready")
        return GeneratedAsset(
            kind=AssetKind.VIDEO,
            local_handle=handle,
            prompt_used=request.prompt,
            created_at=datetime.now(timezone.utc),
        )


class ImageOrchestrator(_ProgressMixin):
    """
    Synchronous image generation and editing.

    Usage:
        orchestrator = ImageOrchestrator(service, gate, materializer)
        asset = await orchestrator.generate("Hero shot", {"size": "2K", "aspect_ratio": "1:1"})
        edited = await orchestrator.edit("product.png", "Add a warm sunset backdrop")
    """

    def __init__(
        self,
        service: MediaService,
        gate: CredentialGate,
        materializer: BinaryMaterializer,
        config: Optional[Config] = None,
        on_progress: Optional[ProgressFn] = None,
    ):
        self.service = service
        self.gate = gate
        self.materializer = materializer
        self.config = config or get_config()
        self.on_progress = on_progress

    async def _call(self, call: Awaitable[ImageResponse], label: str) -> ImageResponse:
        try:
            return await call
        except MediaGenerationError:
            raise
        except Exception as e:
            logger.error(f"{label} failed: {e}")
            raise GenerationError(f"{label} failed: {e}") from e

    async def _materialize(self, response: ImageResponse, prompt: str, failure: str) -> GeneratedAsset:
        part = response.first_inline
        if part is None:
            if response.text_parts:
                logger.warning(f"Model answered with text only: {response.text_parts[0][:100]}")
            raise MissingOutputError(failure)

        handle = await self.materializer.from_inline(part.data, part.mime_type, AssetKind.IMAGE)
        return GeneratedAsset(
            kind=AssetKind.IMAGE,
            local_handle=handle,
            prompt_used=prompt,
            created_at=datetime.now(timezone.utc),
        )

    async def generate(
        self,
        prompt: str,
        output_config: Union[ImageConfig, Mapping[str, Any], None] = None,
    ) -> GeneratedAsset:
        """Generate an image (privileged: high resolutions need a paid key)."""
        await ensure_privileged_credential(self.gate)
        request = build_image_request(prompt, output_config)
        self._emit_progress(request.request_id, 0, "Generating image")

        response = await self._call(self.service.generate_image(request, self.config.models.image_model), "Image request")
        asset = await self._materialize(response, request.prompt, "No image generated")

        self._emit_progress(request.request_id, 100, "Image ready")
        return asset

    async def edit(self, image: ReferenceImage, instruction: str) -> GeneratedAsset:
        """Edit an existing image with a text instruction (standard key)."""
        request = build_edit_request(image, instruction)
        self._emit_progress(request.request_id, 0, "Editing image")

        response = await self._call(self.service.edit_image(request, self.config.models.edit_model), "Image edit request")
        asset = await self._materialize(response, request.prompt, "Image editing failed")

        self._emit_progress(request.request_id, 100, "Edit ready")
        return asset
