"""Campaign brief and plan models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

VideoAspect = Literal["16:9", "9:16"]


class CampaignInput(BaseModel):
    """Brand brief collected from the user."""
    brand_description: str
    product_image_path: Optional[str] = None
    website_url: str = ""
    target_audience: str = ""
    video_constraints: str = ""
    video_aspect_ratio: VideoAspect = "16:9"


class Concept(BaseModel):
    title: str
    hook: str
    visual_direction: str
    narrative_summary: Optional[str] = Field(
        default=None, description="The linear story connecting the four scenes"
    )


class PromptItem(BaseModel):
    label: str
    prompt: str


class ScriptLine(BaseModel):
    scene_label: str = Field(description="e.g. Scene 1: The Hook")
    dialogue: str = Field(description="Voiceover text or character dialogue")
    audio_cues: str = Field(description="Music style and sound effects")


class StoryboardScene(BaseModel):
    scene: str
    description: str


class CampaignPlanDraft(BaseModel):
    """Schema the planning model is asked to fill."""
    visual_anchors: List[str]
    brand_essence: str
    strategy_alignment: str = ""
    concept: Concept
    image_prompts: List[PromptItem]
    script: List[ScriptLine]
    storyboard: List[StoryboardScene] = Field(default_factory=list)
    video_prompts: List[PromptItem]


class CampaignPlan(CampaignPlanDraft):
    """A generated plan, tagged with the video format it was designed for."""
    aspect_ratio: VideoAspect = "16:9"
