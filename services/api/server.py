"""
Campaign Studio HTTP API

FastAPI server that provides:
- POST /plan - Research a brand and generate a campaign plan
- POST /assets/images - Generate an image
- POST /assets/videos - Generate a video (long-running, returns when ready)
- POST /assets/edits - Edit an image with a text instruction
- GET /assets/{filename} - Download a materialized asset
- GET /health - Health check

Usage:
    python -m uvicorn services.api.server:app --host 0.0.0.0 --port 8765

    # Or via main.py
    python main.py server
"""

import base64
import binascii
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from core.errors import MediaGenerationError, ValidationError
from services.campaign_planner import CampaignInput, CampaignPlan
from services.media_generation import InlineImage
from services.studio import Studio, build_studio

logger = logging.getLogger(__name__)


# Request/Response Models
class ImageRequestBody(BaseModel):
    """Request to generate an image."""
    prompt: str
    size: str = "1K"
    aspect_ratio: str = "1:1"


class InlineImageBody(BaseModel):
    """Base64 image payload."""
    data: str
    mime_type: str = "image/png"

    def to_inline(self) -> InlineImage:
        try:
            return InlineImage(data=base64.b64decode(self.data, validate=True), mime_type=self.mime_type)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Image data is not valid base64: {e}")


class PlanRequestBody(BaseModel):
    """Brand brief for planning. The product image travels inline, never as a server path."""
    brand_description: str
    product_image: Optional[InlineImageBody] = None
    website_url: str = ""
    target_audience: str = ""
    video_constraints: str = ""
    video_aspect_ratio: Literal["16:9", "9:16"] = "16:9"

    def to_campaign(self) -> CampaignInput:
        return CampaignInput(**self.model_dump(exclude={"product_image"}))


class VideoRequestBody(BaseModel):
    """Request to generate a video."""
    prompt: str
    aspect_ratio: str = "16:9"
    resolution: str = "720p"
    reference_image: Optional[InlineImageBody] = None


class EditRequestBody(BaseModel):
    """Request to edit an image."""
    image: InlineImageBody
    instruction: str


class AssetResponse(BaseModel):
    """A generated asset."""
    kind: str
    filename: str
    download_url: str
    local_handle: str
    prompt_used: str
    created_at: str


def _asset_response(asset) -> AssetResponse:
    payload = asset.to_dict()
    return AssetResponse(download_url=f"/assets/{payload['filename']}", **payload)


def create_app(studio: Optional[Studio] = None) -> FastAPI:
    """Build the API. Pass a Studio to override the default wiring (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Campaign Studio API...")
        app.state.studio = studio or build_studio()
        yield
        logger.info("Shutting down Campaign Studio API...")
        await app.state.studio.close()

    app = FastAPI(
        title="Campaign Studio API",
        description="Marketing plans, images and videos from a brand brief",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.exception_handler(MediaGenerationError)
    async def media_error_handler(request: Request, exc: MediaGenerationError):
        logger.warning(f"{request.url.path} failed: [{exc.error_code}] {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": exc.message},
        )

    @app.get("/health")
    async def health():
        current: Studio = app.state.studio
        return {
            "status": "ok",
            "privileged_credential": await current.gate.has_privileged_credential(),
            "config_issues": current.config.validate(),
        }

    @app.post("/plan", response_model=CampaignPlan)
    async def plan(body: PlanRequestBody):
        current: Studio = app.state.studio
        product_image = body.product_image.to_inline() if body.product_image else None
        research = await current.planner.research_brand(body.website_url)
        return await current.planner.generate_campaign_plan(body.to_campaign(), research, product_image)

    @app.post("/assets/images", response_model=AssetResponse)
    async def create_image(body: ImageRequestBody):
        current: Studio = app.state.studio
        asset = await current.images.generate(
            body.prompt, {"size": body.size, "aspect_ratio": body.aspect_ratio}
        )
        return _asset_response(asset)

    @app.post("/assets/videos", response_model=AssetResponse)
    async def create_video(body: VideoRequestBody):
        current: Studio = app.state.studio
        reference = body.reference_image.to_inline() if body.reference_image else None
        asset = await current.videos.generate(
            body.prompt,
            {"aspect_ratio": body.aspect_ratio, "resolution": body.resolution},
            reference_image=reference,
        )
        return _asset_response(asset)

    @app.post("/assets/edits", response_model=AssetResponse)
    async def edit_image(body: EditRequestBody):
        current: Studio = app.state.studio
        asset = await current.images.edit(body.image.to_inline(), body.instruction)
        return _asset_response(asset)

    @app.get("/assets/{filename}")
    async def download_asset(filename: str):
        current: Studio = app.state.studio
        output_dir = Path(current.config.generation.output_dir).resolve()
        path = (output_dir / filename).resolve()
        if path.parent != output_dir or not path.is_file():
            raise HTTPException(status_code=404, detail="Asset not found")
        return FileResponse(path, filename=path.name)

    return app


app = create_app()
