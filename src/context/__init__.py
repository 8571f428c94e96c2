"""Context assembly for SEO content generation."""

from seo_agent.context.assembler import ContextAssembler, ContextSource
from seo_agent.context.models import (
    BusinessModelSummary,
    ContextSnapshot,
    CustomerProfile,
    Hypothesis,
    KeywordCluster,
    Project,
)

__all__ = [
    "BusinessModelSummary",
    "ContextAssembler",
    "ContextSnapshot",
    "ContextSource",
    "CustomerProfile",
    "Hypothesis",
    "KeywordCluster",
    "Project",
]
