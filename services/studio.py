"""
Studio wiring

Builds the shared collaborators (credential gate, media service,
materializer) once and hands out orchestrators that use them. Both the CLI
and the HTTP API go through here.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.config import Config, get_config
from core.credentials import CredentialGate, EnvCredentialGate, KeySelector, SharedSelectionGate
from services.campaign_planner import CampaignPlanner
from services.media_generation import (
    BinaryMaterializer,
    GeminiMediaService,
    ImageOrchestrator,
    MediaService,
    VideoOrchestrator,
)

logger = logging.getLogger(__name__)


@dataclass
class Studio:
    """Everything a caller needs to plan a campaign and generate its assets."""
    config: Config
    gate: CredentialGate
    materializer: BinaryMaterializer
    images: ImageOrchestrator
    videos: VideoOrchestrator
    planner: CampaignPlanner

    async def close(self):
        await self.materializer.close()


def build_studio(
    config: Optional[Config] = None,
    selector: Optional[KeySelector] = None,
    service: Optional[MediaService] = None,
    gate: Optional[CredentialGate] = None,
    planner: Optional[CampaignPlanner] = None,
    materializer: Optional[BinaryMaterializer] = None,
) -> Studio:
    """
    Wire up a Studio.

    Args:
        config: Configuration (defaults to the global config)
        selector: Interactive key selector for the credential gate
        service: Media service override (defaults to Gemini)
        gate: Credential gate override
        planner: Campaign planner override
        materializer: Materializer override (e.g. with a custom HTTP client)
    """
    config = config or get_config()
    gate = gate or SharedSelectionGate(EnvCredentialGate(selector=selector))
    service = service or GeminiMediaService(gate.current_credential)
    materializer = materializer or BinaryMaterializer(
        config.generation.output_dir,
        download_timeout=config.generation.download_timeout_seconds,
    )

    for issue in config.validate():
        logger.warning(f"Config: {issue}")

    return Studio(
        config=config,
        gate=gate,
        materializer=materializer,
        images=ImageOrchestrator(service, gate, materializer, config=config),
        videos=VideoOrchestrator(service, gate, materializer, config=config),
        planner=planner or CampaignPlanner(config=config, credential_provider=gate.current_credential),
    )
