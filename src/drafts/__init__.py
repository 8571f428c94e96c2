"""Draft generation and refinement."""

from seo_agent.drafts.generator import DraftGenerator
from seo_agent.drafts.models import ContentType, Draft, DraftPayload, RefinedDraft
from seo_agent.drafts.refiner import DraftRefiner, apply_refinement
from seo_agent.drafts.services import DraftService

__all__ = [
    "ContentType",
    "Draft",
    "DraftGenerator",
    "DraftPayload",
    "DraftRefiner",
    "DraftService",
    "RefinedDraft",
    "apply_refinement",
]
