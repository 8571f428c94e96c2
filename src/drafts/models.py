"""Pydantic models for generated drafts."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ContentType(StrEnum):
    """Kind of CMS entry a draft becomes."""

    ARTICLE = "article"
    WEBSITE_PAGE = "website_page"
    LANDING_PAGE = "landing_page"

    @property
    def is_page(self) -> bool:
        return self is not ContentType.ARTICLE


class DraftPayload(BaseModel):
    """Validated result of a draft generation call."""

    title: str
    summary: str
    body: str
    structure: dict[str, Any] = Field(default_factory=dict)
    model: str


class Draft(BaseModel):
    """A persisted draft; only the refiner replaces its body and summary."""

    id: str
    project_id: str
    hypothesis_id: str
    idea_id: str | None = None
    content_type: ContentType = ContentType.ARTICLE
    title: str
    summary: str = ""
    body: str = ""
    structure: dict[str, Any] = Field(default_factory=dict)
    model: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class RefinedDraft(BaseModel):
    """Result of a refine call."""

    body: str
    summary: str | None = None
