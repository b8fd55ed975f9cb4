"""
HTTP API Tests

Run with:
    python -m pytest tests/test_server.py -v
"""

import base64
import json
import os
import sys
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import APIConfig, Config, GenerationConfig
from services.api.server import create_app
from services.campaign_planner import CampaignPlan, CampaignPlanner
from services.media_generation import BinaryMaterializer
from services.studio import build_studio
from fakes import PNG_BYTES, VIDEO_BYTES, FakeGate, FakeMediaService, RecordingTransport, finished, image_response
from test_campaign_planner import PLAN_JSON


@pytest.fixture
def config(tmp_path):
    return Config(
        api=APIConfig(gemini_api_key="test-key"),
        generation=GenerationConfig(poll_interval_seconds=1.0, output_dir=str(tmp_path / "out")),
    )


@pytest.fixture
def gate():
    return FakeGate()


@pytest.fixture
def service():
    return FakeMediaService(
        submit_results=[finished()],
        image_response=image_response(),
        edit_response=image_response(b"\x89PNG\r\n\x1a\nedited"),
    )


@pytest.fixture
def planner():
    planner = MagicMock()
    planner.research_brand = AsyncMock(return_value="research notes")
    planner.generate_campaign_plan = AsyncMock(return_value=CampaignPlan(**PLAN_JSON, aspect_ratio="9:16"))
    return planner


@pytest.fixture
def client(config, gate, service, planner):
    materializer = BinaryMaterializer(
        config.generation.output_dir,
        http_client=httpx.AsyncClient(transport=RecordingTransport()),
    )
    studio = build_studio(config=config, service=service, gate=gate, planner=planner, materializer=materializer)
    with TestClient(create_app(studio)) as test_client:
        yield test_client


class TestStudioWiring:

    def test_default_collaborators(self, config):
        from core.credentials import SharedSelectionGate
        from services.media_generation import GeminiMediaService

        studio = build_studio(config=config)

        assert isinstance(studio.gate, SharedSelectionGate)
        assert isinstance(studio.videos.service, GeminiMediaService)
        assert studio.images.gate is studio.videos.gate
        assert studio.materializer.output_dir.name == "out"


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["privileged_credential"] is True
        assert body["config_issues"] == []


class TestAssets:

    def test_generate_and_download_image(self, client):
        response = client.post("/assets/images", json={"prompt": "Hero shot", "size": "2K"})

        assert response.status_code == 200
        asset = response.json()
        assert asset["kind"] == "image"
        assert asset["prompt_used"] == "Hero shot"
        assert asset["local_handle"].startswith("file://")

        download = client.get(asset["download_url"])
        assert download.status_code == 200
        assert download.content == PNG_BYTES

    def test_generate_video(self, client, service):
        reference = {"data": base64.b64encode(PNG_BYTES).decode("ascii"), "mime_type": "image/png"}

        response = client.post(
            "/assets/videos",
            json={"prompt": "Rooftop", "aspect_ratio": "9:16", "reference_image": reference},
        )

        assert response.status_code == 200
        assert response.json()["kind"] == "video"
        request, _ = service.submitted[0]
        assert request.reference_image.data == PNG_BYTES

        download = client.get(response.json()["download_url"])
        assert download.content == VIDEO_BYTES

    def test_edit(self, client, gate):
        gate.privileged = False
        body = {
            "image": {"data": base64.b64encode(PNG_BYTES).decode("ascii")},
            "instruction": "Add a sunset",
        }

        response = client.post("/assets/edits", json=body)

        assert response.status_code == 200
        assert response.json()["prompt_used"] == "Add a sunset"

    def test_validation_error(self, client):
        response = client.post("/assets/images", json={"prompt": "Hero", "size": "8K"})

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_invalid_base64(self, client):
        response = client.post("/assets/edits", json={"image": {"data": "%%%"}, "instruction": "x"})

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_missing_credential(self, client, gate):
        gate.privileged = False

        response = client.post("/assets/images", json={"prompt": "Hero"})

        assert response.status_code == 401
        assert response.json()["error"] == "CREDENTIAL_REQUIRED"

    def test_generation_failure(self, client, service):
        service.image_response = RuntimeError("safety block")

        response = client.post("/assets/images", json={"prompt": "Hero"})

        assert response.status_code == 502
        assert response.json()["message"] == "Image request failed: safety block"

    def test_unknown_asset(self, client):
        assert client.get("/assets/nothing.png").status_code == 404


class TestPlan:

    def test_plan(self, client, planner):
        response = client.post(
            "/plan",
            json={"brand_description": "Energy drink", "website_url": "https://example.com", "video_aspect_ratio": "9:16"},
        )

        assert response.status_code == 200
        assert response.json()["aspect_ratio"] == "9:16"
        planner.research_brand.assert_awaited_once_with("https://example.com")
        campaign, research, product_image = planner.generate_campaign_plan.call_args.args
        assert campaign.brand_description == "Energy drink"
        assert research == "research notes"
        assert product_image is None

    def test_inline_product_image(self, client, planner):
        response = client.post(
            "/plan",
            json={
                "brand_description": "Energy drink",
                "product_image": {"data": base64.b64encode(PNG_BYTES).decode("ascii"), "mime_type": "image/png"},
            },
        )

        assert response.status_code == 200
        _, _, product_image = planner.generate_campaign_plan.call_args.args
        assert product_image.data == PNG_BYTES
        assert product_image.mime_type == "image/png"

    def test_server_path_is_ignored(self, client, planner, tmp_path):
        secret = tmp_path / "secret.env"
        secret.write_text("GEMINI_API_KEY=do-not-leak")

        response = client.post(
            "/plan",
            json={"brand_description": "Energy drink", "product_image_path": str(secret)},
        )

        assert response.status_code == 200
        campaign, _, product_image = planner.generate_campaign_plan.call_args.args
        assert campaign.product_image_path is None
        assert product_image is None

    def test_server_path_never_reaches_the_model(self, config, gate, service, tmp_path):
        secret = tmp_path / "secret.env"
        secret.write_bytes(b"GEMINI_API_KEY=do-not-leak")
        genai_client = MagicMock()
        genai_client.aio.models.generate_content = AsyncMock(
            return_value=MagicMock(text=json.dumps(PLAN_JSON))
        )
        studio = build_studio(
            config=config, service=service, gate=gate,
            planner=CampaignPlanner(client=genai_client, config=config),
        )

        with TestClient(create_app(studio)) as api:
            response = api.post(
                "/plan",
                json={"brand_description": "Energy drink", "product_image_path": str(secret)},
            )

        assert response.status_code == 200
        contents = genai_client.aio.models.generate_content.call_args.kwargs["contents"]
        assert len(contents) == 1
        assert isinstance(contents[0], str)
        assert "do-not-leak" not in contents[0]

    def test_invalid_product_image(self, client, planner):
        response = client.post(
            "/plan",
            json={"brand_description": "Energy drink", "product_image": {"data": "not base64!"}},
        )

        assert response.status_code == 422
        planner.generate_campaign_plan.assert_not_called()


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
