"""Publish job service: enqueue, retry and list CMS publish jobs.

A draft has at most one job in ``queued`` or ``publishing`` at any time.
The check and the insert happen atomically in the repository, so two
concurrent requests for the same draft cannot both create a job.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from seo_agent.drafts.models import Draft
from seo_agent.errors import (
    DraftIncompleteError,
    DuplicateJobError,
    IntegrationNotConfiguredError,
    JobInFlightError,
    MissingHeroImageError,
    NotFoundError,
)
from seo_agent.publishing.connection import ConnectionResolver
from seo_agent.publishing.models import (
    CmsSettings,
    HeroImageAsset,
    JobStatus,
    PublishJob,
)
from seo_agent.publishing.slug import slugify

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


class JobRepository(Protocol):
    def get_draft(self, draft_id: str) -> Draft | None: ...

    def get_hero_image(self, draft_id: str) -> HeroImageAsset | None: ...

    def enqueue_job(
        self,
        job: PublishJob,
        refresh: Callable[[PublishJob], PublishJob] | None = None,
    ) -> tuple[PublishJob, bool]: ...

    def requeue_job(
        self, job_id: str, change: Callable[[PublishJob], PublishJob]
    ) -> tuple[PublishJob, PublishJob | None]: ...

    def list_jobs(
        self, project_id: str | None = None, hypothesis_id: str | None = None
    ) -> list[PublishJob]: ...


def build_payload(
    draft: Draft,
    hero: HeroImageAsset,
    settings: CmsSettings,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Derive the CMS payload for a draft from the site settings.

    Caller-supplied keys are kept, derived keys override them.
    """
    is_page = draft.content_type.is_page
    category_id = settings.page_category_id if is_page else settings.article_category_id
    tag_ids = settings.page_tag_ids if is_page else settings.article_tag_ids
    post_type = (settings.page_post_type or "pages") if is_page else (
        settings.article_post_type or "posts"
    )

    payload = dict(extra or {})
    payload.update(
        {
            "hero_url": hero.url,
            "hero_alt_text": hero.alt_text,
            "status": settings.default_status or "draft",
            "categories": [category_id] if isinstance(category_id, int) else [],
            "tags": [t for t in tag_ids if isinstance(t, int) and t > 0],
            "post_type": post_type,
            "slug": slugify(draft.title, f"draft-{draft.id}"),
            "content_type": str(draft.content_type),
        }
    )
    return payload


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIST_LIMIT
    return max(1, min(limit, MAX_LIST_LIMIT))


class PublishJobService:
    """Creates and manages publish jobs for drafts."""

    def __init__(self, repository: JobRepository, resolve_connection: ConnectionResolver) -> None:
        self._repository = repository
        self._resolve_connection = resolve_connection

    def enqueue(
        self,
        draft_id: str,
        user_id: str,
        *,
        idea_id: str | None = None,
        publish_at: datetime | None = None,
        payload: dict[str, Any] | None = None,
    ) -> PublishJob:
        """Queue a draft for publishing.

        Without ``publish_at`` a second request for a draft that already has
        an in-flight job is rejected. With ``publish_at`` the existing job is
        rescheduled in place instead.

        Args:
            draft_id: Draft to publish.
            user_id: Requesting user, recorded as the job creator.
            idea_id: Source idea; defaults to the draft's idea.
            publish_at: When to publish; defaults to now.
            payload: Extra payload keys (e.g. ``{"reason": "manual"}``).

        Returns:
            The new or refreshed job.

        Raises:
            IntegrationNotConfiguredError: No CMS connection.
            NotFoundError: The draft does not exist.
            DraftIncompleteError: The draft lacks a title or body.
            MissingHeroImageError: The draft has no hero image.
            DuplicateJobError: An in-flight job exists and no schedule was given.
        """
        connection = self._resolve_connection()
        if connection is None:
            raise IntegrationNotConfiguredError("WordPress integration is not configured")
        if publish_at is not None and publish_at.tzinfo is None:
            publish_at = publish_at.replace(tzinfo=UTC)

        draft = self._repository.get_draft(draft_id)
        if draft is None:
            raise NotFoundError(f"Draft not found: {draft_id}")
        if not draft.title.strip() or not draft.body.strip():
            raise DraftIncompleteError("Draft must have title and body before publishing")

        hero = self._repository.get_hero_image(draft_id)
        if hero is None or not hero.url.strip():
            raise MissingHeroImageError(
                "Hero image is required before publishing. Generate or upload one first."
            )

        job_payload = build_payload(draft, hero, connection.settings, payload)
        manual = job_payload.get("reason") == "manual"
        now = datetime.now(tz=UTC)

        def refresh(existing: PublishJob) -> PublishJob:
            return existing.model_copy(
                update={
                    "publish_at": publish_at,
                    "status": JobStatus.QUEUED,
                    "payload": job_payload,
                    "error": None,
                    "message": (
                        "Manual publish request refreshed" if manual else "Scheduled publish updated"
                    ),
                    "started_at": None,
                    "finished_at": None,
                    "updated_at": now,
                }
            )

        job = PublishJob(
            id=uuid.uuid4().hex,
            draft_id=draft.id,
            idea_id=idea_id or draft.idea_id,
            project_id=draft.project_id,
            hypothesis_id=draft.hypothesis_id,
            target_site=connection.base_url,
            publish_at=publish_at or now,
            payload=job_payload,
            message=(
                "Manual publish request enqueued" if manual else "Scheduled publish request enqueued"
            ),
            created_by=user_id,
            created_at=now,
            updated_at=now,
        )

        stored, created = self._repository.enqueue_job(
            job, refresh if publish_at is not None else None
        )
        if created:
            logger.info("Enqueued publish job %s for draft %s", stored.id, draft_id)
        elif publish_at is None:
            raise DuplicateJobError(
                "Draft already has a publish job in progress", job_id=stored.id
            )
        else:
            logger.info("Rescheduled publish job %s for draft %s", stored.id, draft_id)
        return stored

    def retry(self, job_id: str, user_id: str) -> PublishJob:
        """Re-queue a job that is not currently publishing.

        Raises:
            NotFoundError: The job does not exist.
            JobInFlightError: The job is publishing.
            DuplicateJobError: Another job for the same draft is in flight.
        """

        def requeue(job: PublishJob) -> PublishJob:
            if job.status == JobStatus.PUBLISHING:
                raise JobInFlightError("Cannot retry a job that is currently publishing")
            now = datetime.now(tz=UTC)
            return job.model_copy(
                update={
                    "status": JobStatus.QUEUED,
                    "publish_at": now,
                    "error": None,
                    "message": f"Retry requested by {user_id}",
                    "started_at": None,
                    "finished_at": None,
                    "updated_at": now,
                }
            )

        try:
            job, blocking = self._repository.requeue_job(job_id, requeue)
        except KeyError as exc:
            raise NotFoundError(f"Publish job not found: {job_id}") from exc
        if blocking is not None:
            raise DuplicateJobError(
                "Draft already has a publish job in progress", job_id=blocking.id
            )
        logger.info("Retry requested for job %s by %s", job_id, user_id)
        return job

    def list(
        self,
        project_id: str | None = None,
        hypothesis_id: str | None = None,
        limit: int | None = DEFAULT_LIST_LIMIT,
    ) -> list[PublishJob]:
        """Return jobs newest first, at most ``limit`` (clamped to 1-100)."""
        jobs = self._repository.list_jobs(project_id, hypothesis_id)
        jobs = sorted(jobs, key=lambda j: j.created_at, reverse=True)
        return jobs[: clamp_limit(limit)]
