"""Pydantic models for content ideas and the idea backlog."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from seo_agent.errors import InvalidTransitionError


class IdeaCategory(StrEnum):
    """Angle an idea takes on the customer profile."""

    PAIN = "PAIN"
    GOAL = "GOAL"
    TRIGGER = "TRIGGER"
    BENEFIT = "BENEFIT"
    FEATURE = "FEATURE"
    FAQ = "FAQ"
    INFO = "INFO"


class SearchIntent(StrEnum):
    COMMERCIAL = "commercial"
    TRANSACTIONAL = "transactional"
    INFORMATIONAL = "informational"
    NAVIGATIONAL = "navigational"


class IdeaStatus(StrEnum):
    BACKLOG = "backlog"
    SCHEDULED = "scheduled"
    ARCHIVED = "archived"


_TRANSITIONS: dict[IdeaStatus, frozenset[IdeaStatus]] = {
    IdeaStatus.BACKLOG: frozenset({IdeaStatus.SCHEDULED, IdeaStatus.ARCHIVED}),
    IdeaStatus.SCHEDULED: frozenset({IdeaStatus.ARCHIVED}),
    IdeaStatus.ARCHIVED: frozenset(),
}


class IdeaCandidate(BaseModel):
    """An unpersisted idea as returned by the LLM."""

    title: str
    summary: str = ""
    category: IdeaCategory
    search_volume: float | None = None
    difficulty: float | None = None
    opportunity_score: float | None = None
    intent: SearchIntent = SearchIntent.INFORMATIONAL
    cluster_title: str | None = None


class BacklogIdea(BaseModel):
    """A persisted content idea awaiting drafting."""

    id: str
    project_id: str
    hypothesis_id: str
    cluster_id: str | None = None
    title: str
    description: str = ""
    category: IdeaCategory
    status: IdeaStatus = IdeaStatus.BACKLOG
    created_by: str
    updated_by: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    def transition(self, status: IdeaStatus, user_id: str) -> BacklogIdea:
        """Return a copy moved to ``status``.

        Raises:
            InvalidTransitionError: The lifecycle does not allow the move.
        """
        if status not in _TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move idea {self.id} from {self.status} to {status}"
            )
        return self.model_copy(
            update={
                "status": status,
                "updated_by": user_id,
                "updated_at": datetime.now(tz=UTC),
            }
        )


class PromotionResult(BaseModel):
    """Outcome of promoting candidates into the backlog."""

    created: list[BacklogIdea] = Field(default_factory=list)
    skipped: list[IdeaCandidate] = Field(default_factory=list)
