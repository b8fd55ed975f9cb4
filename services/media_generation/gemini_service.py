"""
Gemini / Veo media service

The remote boundary the orchestrators depend on. Wraps the google-genai
async client and maps SDK objects into our Operation / ImageResponse
variants, so nothing past this module touches SDK types.

A client is built per call from the gate's current credential, so a key
picked by the selection flow takes effect on the very next request.
"""

import logging
from typing import Any, Callable, Optional, Protocol

from google import genai
from google.genai import types

from core.errors import CredentialError
from .models import (
    GenerationRequest,
    ImageConfig,
    ImageResponse,
    InlinePart,
    Operation,
    VideoConfig,
)

logger = logging.getLogger(__name__)


class MediaService(Protocol):
    """Remote operations consumed by the orchestrators."""

    async def submit_video(self, request: GenerationRequest, model: str) -> Operation:
        ...

    async def refresh_operation(self, operation: Operation) -> Operation:
        ...

    async def generate_image(self, request: GenerationRequest, model: str) -> ImageResponse:
        ...

    async def edit_image(self, request: GenerationRequest, model: str) -> ImageResponse:
        ...


def operation_from_sdk(raw: Any) -> Operation:
    """Map a GenerateVideosOperation into an Operation snapshot."""
    error = getattr(raw, "error", None)
    error_message = None
    if error:
        if isinstance(error, dict):
            error_message = error.get("message") or None
        else:
            error_message = getattr(error, "message", None) or str(error)

    uris: list[str] = []
    response = getattr(raw, "response", None) or getattr(raw, "result", None)
    for generated in getattr(response, "generated_videos", None) or []:
        video = getattr(generated, "video", None)
        uri = getattr(video, "uri", None)
        if uri:
            uris.append(uri)

    return Operation(
        name=getattr(raw, "name", None) or "",
        done=bool(getattr(raw, "done", False)),
        error_message=error_message,
        has_error=bool(error),
        video_uris=uris,
        raw=raw,
    )


def image_response_from_sdk(response: Any) -> ImageResponse:
    """Collect the first candidate's inline and text parts."""
    result = ImageResponse()
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return result

    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            result.inline_parts.append(InlinePart(data=inline.data, mime_type=getattr(inline, "mime_type", None)))
        elif getattr(part, "text", None):
            result.text_parts.append(part.text)
    return result


class GeminiMediaService:
    """
    MediaService backed by google-genai.

    Usage:
        service = GeminiMediaService(gate.current_credential)
        operation = await service.submit_video(request, "veo-3.1-fast-generate-preview")
    """

    def __init__(
        self,
        credential_provider: Callable[[], Optional[str]],
        client_factory: Callable[[str], Any] = lambda key: genai.Client(api_key=key),
    ):
        self.credential_provider = credential_provider
        self.client_factory = client_factory

    def _client(self):
        key = self.credential_provider()
        if not key:
            raise CredentialError("No API key available for the generative media service")
        return self.client_factory(key)

    async def submit_video(self, request: GenerationRequest, model: str) -> Operation:
        config = request.output_config if isinstance(request.output_config, VideoConfig) else VideoConfig()
        video_config = types.GenerateVideosConfig(
            number_of_videos=1,
            resolution=config.resolution.value,
            aspect_ratio=config.aspect_ratio.value,
        )

        kwargs: dict[str, Any] = {"model": model, "prompt": request.prompt, "config": video_config}
        if request.reference_image is not None:
            kwargs["image"] = types.Image(
                image_bytes=request.reference_image.data,
                mime_type=request.reference_image.mime_type,
            )

        logger.info(
            f"Submitting video: model={model}, aspect={config.aspect_ratio.value}, "
            f"resolution={config.resolution.value}, prompt={request.prompt[:50]}..."
        )
        raw = await self._client().aio.models.generate_videos(**kwargs)
        return operation_from_sdk(raw)

    async def refresh_operation(self, operation: Operation) -> Operation:
        raw = await self._client().aio.operations.get(operation.raw)
        return operation_from_sdk(raw)

    async def generate_image(self, request: GenerationRequest, model: str) -> ImageResponse:
        config = request.output_config if isinstance(request.output_config, ImageConfig) else ImageConfig()
        logger.info(f"Generating image: model={model}, size={config.size.value}, aspect={config.aspect_ratio.value}")

        response = await self._client().aio.models.generate_content(
            model=model,
            contents=[request.prompt],
            config=types.GenerateContentConfig(
                image_config=types.ImageConfig(
                    image_size=config.size.value,
                    aspect_ratio=config.aspect_ratio.value,
                ),
            ),
        )
        return image_response_from_sdk(response)

    async def edit_image(self, request: GenerationRequest, model: str) -> ImageResponse:
        source = request.reference_image
        if source is None:
            raise ValueError("edit_image needs a reference image on the request")

        logger.info(f"Editing image: model={model}, instruction={request.prompt[:50]}...")
        response = await self._client().aio.models.generate_content(
            model=model,
            contents=[
                types.Part.from_bytes(data=source.data, mime_type=source.mime_type),
                request.prompt,
            ],
        )
        return image_response_from_sdk(response)
