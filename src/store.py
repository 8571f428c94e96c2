"""JSON-backed store for every SEO pipeline record.

Persists all records in a single JSON file, loaded on init and saved after
every write operation. Implements the repository protocols used by the
context assembler, idea backlog, draft service, publish job service and
publish worker.

Writes and read-modify-write sequences hold a process-wide lock, which
makes the publish job insert-if-absent atomic within one process.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from seo_agent.context.models import Hypothesis, KeywordCluster, Project
from seo_agent.drafts.models import Draft
from seo_agent.ideas.models import BacklogIdea
from seo_agent.publishing.models import CmsConnection, HeroImageAsset, JobStatus, PublishJob

logger = logging.getLogger(__name__)

STORE_FILENAME = "seo-agent-store.json"


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    projects: list[Project] = Field(default_factory=list)
    hypotheses: list[Hypothesis] = Field(default_factory=list)
    business_models: dict[str, dict[str, Any]] = Field(default_factory=dict)
    customer_profiles: dict[str, dict[str, Any]] = Field(default_factory=dict)
    clusters: list[KeywordCluster] = Field(default_factory=list)
    ideas: list[BacklogIdea] = Field(default_factory=list)
    drafts: list[Draft] = Field(default_factory=list)
    hero_images: list[HeroImageAsset] = Field(default_factory=list)
    jobs: list[PublishJob] = Field(default_factory=list)
    connection: CmsConnection | None = None


class SeoStore:
    """JSON-backed store for projects, ideas, drafts and publish jobs."""

    _lock = threading.RLock()

    def __init__(self, directory: Path) -> None:
        self._path = Path(directory) / STORE_FILENAME
        self._data = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt SEO store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(self._data.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def _find_job(self, job_id: str) -> int | None:
        for i, job in enumerate(self._data.jobs):
            if job.id == job_id:
                return i
        return None

    def _write_job(self, index: int | None, job: PublishJob) -> None:
        """Put ``job`` at ``index`` (append when None) and persist.

        The in-memory job list is restored if the write fails.
        """
        previous = list(self._data.jobs)
        if index is None:
            self._data.jobs.append(job)
        else:
            self._data.jobs[index] = job
        try:
            self._save()
        except OSError:
            self._data.jobs = previous
            raise

    # ── Context records ──────────────────────────────────────────

    def save_project(self, project: Project) -> None:
        with self._lock:
            self._data.projects = [p for p in self._data.projects if p.id != project.id]
            self._data.projects.append(project)
            self._save()

    def save_hypothesis(self, hypothesis: Hypothesis) -> None:
        with self._lock:
            self._data.hypotheses = [h for h in self._data.hypotheses if h.id != hypothesis.id]
            self._data.hypotheses.append(hypothesis)
            self._save()

    def save_business_model(self, hypothesis_id: str, record: dict[str, Any]) -> None:
        with self._lock:
            self._data.business_models[hypothesis_id] = dict(record)
            self._save()

    def save_customer_profile(self, hypothesis_id: str, record: dict[str, Any]) -> None:
        with self._lock:
            self._data.customer_profiles[hypothesis_id] = dict(record)
            self._save()

    def save_cluster(self, cluster: KeywordCluster) -> None:
        with self._lock:
            self._data.clusters = [c for c in self._data.clusters if c.id != cluster.id]
            self._data.clusters.append(cluster)
            self._save()

    def get_project(self, project_id: str) -> Project | None:
        return next((p for p in self._data.projects if p.id == project_id), None)

    def get_hypothesis(self, hypothesis_id: str) -> Hypothesis | None:
        return next((h for h in self._data.hypotheses if h.id == hypothesis_id), None)

    def list_hypotheses(self, project_id: str) -> list[Hypothesis]:
        return [h for h in self._data.hypotheses if h.project_id == project_id]

    def get_business_model(self, hypothesis_id: str) -> dict[str, Any] | None:
        return self._data.business_models.get(hypothesis_id)

    def get_customer_profile(self, hypothesis_id: str) -> dict[str, Any] | None:
        return self._data.customer_profiles.get(hypothesis_id)

    def list_clusters(self, project_id: str, hypothesis_id: str) -> list[KeywordCluster]:
        return [
            c
            for c in self._data.clusters
            if c.project_id == project_id and c.hypothesis_id == hypothesis_id
        ]

    # ── Ideas ────────────────────────────────────────────────────

    def add_ideas(self, ideas: list[BacklogIdea]) -> None:
        with self._lock:
            self._data.ideas.extend(ideas)
            self._save()

    def save_idea(self, idea: BacklogIdea) -> None:
        with self._lock:
            self._data.ideas = [i for i in self._data.ideas if i.id != idea.id]
            self._data.ideas.append(idea)
            self._save()

    def get_idea(self, idea_id: str) -> BacklogIdea | None:
        return next((i for i in self._data.ideas if i.id == idea_id), None)

    def list_ideas(self, project_id: str, hypothesis_id: str) -> list[BacklogIdea]:
        return [
            i
            for i in self._data.ideas
            if i.project_id == project_id and i.hypothesis_id == hypothesis_id
        ]

    def delete_idea(self, idea_id: str) -> bool:
        """Remove an idea permanently. Admin-only; normal flows archive instead."""
        with self._lock:
            before = len(self._data.ideas)
            self._data.ideas = [i for i in self._data.ideas if i.id != idea_id]
            if len(self._data.ideas) == before:
                return False
            self._save()
            return True

    # ── Drafts and images ────────────────────────────────────────

    def save_draft(self, draft: Draft) -> None:
        with self._lock:
            self._data.drafts = [d for d in self._data.drafts if d.id != draft.id]
            self._data.drafts.append(draft)
            self._save()

    def get_draft(self, draft_id: str) -> Draft | None:
        return next((d for d in self._data.drafts if d.id == draft_id), None)

    def save_hero_image(self, image: HeroImageAsset) -> None:
        """Attach a hero image, replacing any previous one for the draft."""
        with self._lock:
            self._data.hero_images = [
                i for i in self._data.hero_images if i.draft_id != image.draft_id
            ]
            self._data.hero_images.append(image)
            self._save()

    def get_hero_image(self, draft_id: str) -> HeroImageAsset | None:
        return next(
            (i for i in self._data.hero_images if i.draft_id == draft_id and i.type == "hero"),
            None,
        )

    # ── CMS connection ───────────────────────────────────────────

    def save_connection(self, connection: CmsConnection) -> None:
        with self._lock:
            self._data.connection = connection
            self._save()

    def get_connection(self) -> CmsConnection | None:
        return self._data.connection

    # ── Publish jobs ─────────────────────────────────────────────

    def enqueue_job(
        self,
        job: PublishJob,
        refresh: Callable[[PublishJob], PublishJob] | None = None,
    ) -> tuple[PublishJob, bool]:
        """Insert ``job`` unless its draft already has an in-flight job.

        When an in-flight job exists and ``refresh`` is given, the existing
        job is replaced by ``refresh(existing)``.

        Returns:
            Tuple of (stored job, whether a new job was inserted).
        """
        with self._lock:
            for i, existing in enumerate(self._data.jobs):
                if existing.draft_id == job.draft_id and existing.status.in_flight:
                    if refresh is None:
                        return existing, False
                    updated = refresh(existing)
                    self._write_job(i, updated)
                    return updated, False
            self._write_job(None, job)
            return job, True

    def update_job(
        self, job_id: str, change: Callable[[PublishJob], PublishJob]
    ) -> PublishJob:
        """Replace a job with ``change(job)`` under the store lock.

        Raises KeyError if the job does not exist.
        """
        with self._lock:
            index = self._find_job(job_id)
            if index is None:
                raise KeyError(job_id)
            updated = change(self._data.jobs[index])
            self._write_job(index, updated)
            return updated

    def requeue_job(
        self, job_id: str, change: Callable[[PublishJob], PublishJob]
    ) -> tuple[PublishJob, PublishJob | None]:
        """Apply ``change`` unless another job for the same draft is in flight.

        Returns:
            Tuple of (resulting job, conflicting in-flight job or None). On a
            conflict the job is left unchanged.

        Raises KeyError if the job does not exist.
        """
        with self._lock:
            index = self._find_job(job_id)
            if index is None:
                raise KeyError(job_id)
            current = self._data.jobs[index]
            blocking = next(
                (
                    j
                    for j in self._data.jobs
                    if j.id != job_id and j.draft_id == current.draft_id and j.status.in_flight
                ),
                None,
            )
            if blocking is not None:
                return current, blocking
            updated = change(current)
            self._write_job(index, updated)
            return updated, None

    def get_job(self, job_id: str) -> PublishJob | None:
        index = self._find_job(job_id)
        return None if index is None else self._data.jobs[index]

    def list_jobs(
        self, project_id: str | None = None, hypothesis_id: str | None = None
    ) -> list[PublishJob]:
        results = self._data.jobs
        if project_id is not None:
            results = [j for j in results if j.project_id == project_id]
        if hypothesis_id is not None:
            results = [j for j in results if j.hypothesis_id == hypothesis_id]
        return list(results)

    def claim_due(self, now: datetime) -> PublishJob | None:
        """Move the oldest due queued job to ``publishing``."""
        with self._lock:
            due = [
                (j.publish_at, i)
                for i, j in enumerate(self._data.jobs)
                if j.status == JobStatus.QUEUED and j.publish_at <= now
            ]
            if not due:
                return None
            _, index = min(due)
            claimed = self._data.jobs[index].model_copy(
                update={
                    "status": JobStatus.PUBLISHING,
                    "started_at": now,
                    "message": "Publishing",
                    "updated_at": now,
                }
            )
            self._write_job(index, claimed)
            return claimed

    def mark_published(self, job_id: str, post_id: int, post_url: str) -> PublishJob:
        now = datetime.now(tz=UTC)
        return self.update_job(
            job_id,
            lambda job: job.model_copy(
                update={
                    "status": JobStatus.PUBLISHED,
                    "post_id": post_id,
                    "post_url": post_url,
                    "error": None,
                    "message": "Published",
                    "finished_at": now,
                    "updated_at": now,
                }
            ),
        )

    def mark_failed(self, job_id: str, error: str) -> PublishJob:
        now = datetime.now(tz=UTC)
        return self.update_job(
            job_id,
            lambda job: job.model_copy(
                update={
                    "status": JobStatus.FAILED,
                    "error": error,
                    "message": "Publish failed",
                    "finished_at": now,
                    "updated_at": now,
                }
            ),
        )
