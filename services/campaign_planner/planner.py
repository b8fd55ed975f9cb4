"""
Campaign Planner - turns a brand brief into a marketing plan

Two steps:
1. Brand research: grounded (Google Search) summary of the brand website
2. Plan generation: product image + brief + research -> structured plan
   with image prompts, a four-scene storyboard, script and video prompts

The plan's prompts feed the image and video orchestrators.
"""

import logging
from typing import Any, Callable, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from core.config import Config, get_config
from core.errors import CredentialError, PlanGenerationError
from services.media_generation.materializer import BinaryMaterializer
from services.media_generation.models import InlineImage
from .models import CampaignInput, CampaignPlan, CampaignPlanDraft

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an expert creative director. Focus on narrative continuity "
    "and visual consistency."
)


def build_plan_prompt(campaign: CampaignInput, research: str) -> str:
    """Planning prompt for a single continuous four-scene story."""
    return f"""Role: Lead campaign architect.
Goal: turn the inputs below into a complete marketing package.
The video assets and script must tell ONE continuous story: each scene leads into the next.

Inputs:
Brand description: {campaign.brand_description}
Target audience: {campaign.target_audience}
Video constraints: {campaign.video_constraints}
Video aspect ratio: {campaign.video_aspect_ratio} (design the storyboard for this format)
Website context: {research}

Steps:
1. Study the product image (if attached) and the text inputs.
2. Define visual anchors and the brand essence.
3. Develop one campaign concept with a clear sequential storyline.
4. Write 3 image generation prompts.
5. Storyboard 4 scenes: hook/context, action/tension, product hero moment, brand payoff.
6. Write a script for those 4 scenes with voiceover lines and sound design cues.
7. Write one video prompt per scene. Keep lighting, subject and environment identical
   across all four, and repeat the technical constraints in every prompt.

Answer with JSON matching the response schema.
"""


class CampaignPlanner:
    """
    Brand research and plan generation on Gemini.

    Usage:
        planner = CampaignPlanner()
        research = await planner.research_brand("https://example.com")
        plan = await planner.generate_campaign_plan(campaign_input, research)
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        config: Optional[Config] = None,
        credential_provider: Optional[Callable[[], Optional[str]]] = None,
        client_factory: Callable[[str], Any] = lambda key: genai.Client(api_key=key),
    ):
        self.config = config or get_config()
        self._client = client
        self.credential_provider = credential_provider or (lambda: self.config.api.gemini_api_key)
        self.client_factory = client_factory

    def _get_client(self):
        """Client for the current credential (built per call so a re-selected key applies)."""
        if self._client is not None:
            return self._client
        key = self.credential_provider()
        if not key:
            raise CredentialError("No API key available for campaign planning")
        return self.client_factory(key)

    async def research_brand(self, url: str) -> str:
        """
        Summarize a brand website's visual identity, mission and tone.

        Research is advisory: any failure yields an empty string.
        """
        if not url:
            return ""

        try:
            response = await self._get_client().aio.models.generate_content(
                model=self.config.models.research_model,
                contents=(
                    "Analyze the following website/brand to extract key visual identity "
                    f"themes, mission, and tone: {url}"
                ),
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
            return response.text or ""
        except Exception as e:
            logger.warning(f"Search grounding failed for {url}: {e}")
            return ""

    async def generate_campaign_plan(
        self,
        campaign: CampaignInput,
        research: str = "",
        product_image: Optional[InlineImage] = None,
    ) -> CampaignPlan:
        """
        Generate a structured campaign plan.

        Args:
            campaign: The brand brief
            research: Brand research text (may be empty)
            product_image: Product image bytes; when omitted, the brief's
                local product_image_path is read instead (CLI use)

        Raises:
            PlanGenerationError: If the model returns no text or unparseable JSON
            ValidationError: If the product image cannot be read
        """
        image = product_image
        if image is None and campaign.product_image_path:
            image = BinaryMaterializer.read_inline(campaign.product_image_path)

        contents: list[Any] = []
        if image is not None:
            contents.append(types.Part.from_bytes(data=image.data, mime_type=image.mime_type))
        contents.append(build_plan_prompt(campaign, research))

        logger.info(f"Generating campaign plan with {self.config.models.plan_model}")
        response = await self._get_client().aio.models.generate_content(
            model=self.config.models.plan_model,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                response_mime_type="application/json",
                response_schema=CampaignPlanDraft,
            ),
        )

        text = response.text
        if not text:
            raise PlanGenerationError("No plan generated")

        try:
            draft = CampaignPlanDraft.model_validate_json(text)
        except PydanticValidationError as e:
            raise PlanGenerationError(f"Plan did not match the expected schema: {e}") from e

        # Execution uses the format the user asked for, not whatever the model echoed
        return CampaignPlan(**draft.model_dump(), aspect_ratio=campaign.video_aspect_ratio)
