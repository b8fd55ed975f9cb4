"""
Campaign Planner

Brand research (search-grounded) and structured plan generation.
"""

from .models import (
    CampaignInput,
    CampaignPlan,
    CampaignPlanDraft,
    Concept,
    PromptItem,
    ScriptLine,
    StoryboardScene,
)
from .planner import CampaignPlanner, build_plan_prompt

__all__ = [
    "CampaignInput",
    "CampaignPlan",
    "CampaignPlanDraft",
    "Concept",
    "PromptItem",
    "ScriptLine",
    "StoryboardScene",
    "CampaignPlanner",
    "build_plan_prompt",
]
