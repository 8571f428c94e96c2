"""Content idea generation and backlog management."""

from seo_agent.ideas.backlog import IdeaBacklog, normalize_key  # noqa: F401
from seo_agent.ideas.generator import IdeaGenerator  # noqa: F401
from seo_agent.ideas.models import (  # noqa: F401
    BacklogIdea,
    IdeaCandidate,
    IdeaCategory,
    IdeaStatus,
    PromotionResult,
    SearchIntent,
)
