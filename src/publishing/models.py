"""Pydantic models for CMS connections, hero images and publish jobs."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class JobStatus(StrEnum):
    QUEUED = "queued"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        return self in (JobStatus.QUEUED, JobStatus.PUBLISHING)


class CmsSettings(BaseModel):
    """Per-site publishing defaults."""

    article_post_type: str = "posts"
    page_post_type: str = "pages"
    article_category_id: int | None = None
    page_category_id: int | None = None
    article_tag_ids: list[int] = Field(default_factory=list)
    page_tag_ids: list[int] = Field(default_factory=list)
    default_status: str = "draft"


class CmsConnection(BaseModel):
    """A configured WordPress site."""

    base_url: str
    username: str
    app_password: str
    settings: CmsSettings = Field(default_factory=CmsSettings)


class HeroImageAsset(BaseModel):
    """The hero image attached to a draft; one per draft."""

    draft_id: str
    url: str
    type: str = "hero"
    alt_text: str = ""


class PublishJob(BaseModel):
    """A request to publish one draft to the CMS."""

    id: str
    draft_id: str
    idea_id: str | None = None
    project_id: str
    hypothesis_id: str
    target_site: str
    status: JobStatus = JobStatus.QUEUED
    publish_at: datetime
    payload: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    message: str = ""
    started_at: datetime | None = None
    finished_at: datetime | None = None
    post_id: int | None = None
    post_url: str | None = None
    created_by: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
