"""
Binary Materializer

Turns generated payloads into local binary handles:
- Inline base64 (synchronous image responses) -> file on disk
- Remote artifact URI (finished video jobs) -> authenticated download -> file on disk

And the inverse, for building requests:
- file / bytes -> InlineImage (bytes + MIME type)

Handles are file:// URIs, valid for as long as the output directory exists.
"""

import base64
import binascii
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import httpx

from core.errors import MissingOutputError, NetworkError, ValidationError
from .models import AssetKind, InlineImage, handle_to_path

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPES = {
    AssetKind.IMAGE: "image/png",
    AssetKind.VIDEO: "video/mp4",
}

# mimetypes' answers for these are either missing or odd (".jpe")
_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/quicktime": ".mov",
}

_MAGIC_PREFIXES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_image_mime(data: bytes) -> Optional[str]:
    """Best-effort MIME type from magic bytes."""
    for prefix, mime in _MAGIC_PREFIXES:
        if data.startswith(prefix):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def read_handle(handle: str) -> bytes:
    """Read back the bytes behind a local handle."""
    return handle_to_path(handle).read_bytes()


class BinaryMaterializer:
    """
    Writes generated media to a local output directory.

    Usage:
        materializer = BinaryMaterializer("output")

        handle = await materializer.from_inline(b64_data, "image/png", AssetKind.IMAGE)
        handle = await materializer.fetch_to_handle(video_uri, api_key, AssetKind.VIDEO)
    """

    def __init__(
        self,
        output_dir: Union[str, Path] = "output",
        http_client: Optional[httpx.AsyncClient] = None,
        download_timeout: float = 300.0,
    ):
        self.output_dir = Path(output_dir)
        self.download_timeout = download_timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.download_timeout)
        return self._http_client

    async def close(self):
        """Close the HTTP client if we created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _new_path(self, kind: AssetKind, mime_type: str) -> Path:
        extension = _EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ".bin"
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / f"{kind.value}_{uuid.uuid4().hex[:12]}{extension}"

    async def _write(self, kind: AssetKind, mime_type: str, payload: bytes) -> str:
        path = self._new_path(kind, mime_type)
        async with aiofiles.open(path, "wb") as f:
            await f.write(payload)
        logger.info(f"Materialized {kind.value}: {path} ({len(payload) / 1024:.1f} KB)")
        return path.resolve().as_uri()

    async def from_inline(
        self,
        data: Union[str, bytes],
        mime_type: Optional[str],
        kind: AssetKind = AssetKind.IMAGE,
    ) -> str:
        """
        Decode an inline payload and write it to disk.

        Args:
            data: Base64 text, or bytes the SDK already decoded
            mime_type: Payload MIME type (defaults per kind when missing)
            kind: Asset kind, used for naming and the default MIME type

        Returns:
            file:// handle to the written payload
        """
        if isinstance(data, str):
            try:
                payload = base64.b64decode(data, validate=True)
            except (binascii.Error, ValueError) as e:
                raise MissingOutputError(f"Inline payload is not valid base64: {e}")
        else:
            payload = bytes(data)

        if not payload:
            raise MissingOutputError("Inline payload is empty")

        return await self._write(kind, mime_type or DEFAULT_MIME_TYPES[kind], payload)

    async def fetch_to_handle(
        self,
        uri: str,
        credential: str,
        kind: AssetKind = AssetKind.VIDEO,
    ) -> str:
        """
        Download a remote artifact and stream it to disk.

        The credential travels as the `key` query parameter, which is what the
        generated-file endpoints expect. A partially written file is removed
        when the download fails.

        Raises:
            NetworkError: On transport failure or a non-success status
            MissingOutputError: If the body is empty
        """
        client = await self._get_client()
        path: Optional[Path] = None

        try:
            try:
                async with client.stream("GET", uri, params={"key": credential}, follow_redirects=True) as response:
                    if not response.is_success:
                        raise NetworkError(
                            f"Failed to download {kind.value}: {response.status_code} {response.reason_phrase}",
                            error_code=f"HTTP_{response.status_code}",
                            remote_status=response.status_code,
                            reason=response.reason_phrase,
                        )

                    content_type = response.headers.get("content-type", "").split(";")[0].strip()
                    if not content_type.startswith(f"{kind.value}/"):
                        content_type = DEFAULT_MIME_TYPES[kind]

                    path = self._new_path(kind, content_type)
                    size = 0
                    async with aiofiles.open(path, "wb") as f:
                        async for chunk in response.aiter_bytes():
                            await f.write(chunk)
                            size += len(chunk)
            except httpx.TimeoutException as e:
                raise NetworkError(
                    f"Artifact download timed out: {type(e).__name__}", error_code="DOWNLOAD_TIMEOUT"
                ) from e
            except httpx.RequestError as e:
                raise NetworkError(f"Artifact download failed: {type(e).__name__}: {e}") from e

            if size == 0:
                raise MissingOutputError(f"Downloaded {kind.value} is empty")
        except BaseException:
            if path is not None:
                path.unlink(missing_ok=True)
            raise

        logger.info(f"Materialized {kind.value}: {path} ({size / 1024:.1f} KB)")
        return path.resolve().as_uri()

    @staticmethod
    def read_inline(source: Union[InlineImage, str, Path, bytes], mime_type: Optional[str] = None) -> InlineImage:
        """
        Convert a reference image into inline bytes + MIME type.

        Raises:
            ValidationError: If the file is unreadable or empty
        """
        if isinstance(source, InlineImage):
            return source

        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
            guessed = None
        else:
            path = Path(source)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise ValidationError(f"Cannot read reference image {path}: {e}")
            guessed = mimetypes.guess_type(path.name)[0]

        if not data:
            raise ValidationError("Reference image is empty")

        resolved = mime_type or sniff_image_mime(data) or guessed or "image/png"
        return InlineImage(data=data, mime_type=resolved)
