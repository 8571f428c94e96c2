"""Pull-based publish worker.

The worker claims one due job at a time, uploads the hero image, creates
the post and records the outcome on the job. Delivery is at-least-once: a
job left in ``publishing`` by a crashed worker is retried manually.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
import urllib.parse
import urllib.request
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from seo_agent.drafts.models import Draft
from seo_agent.errors import (
    DraftIncompleteError,
    IntegrationNotConfiguredError,
    MissingHeroImageError,
    SeoAgentError,
)
from seo_agent.integrations.wordpress import WordPressClient
from seo_agent.publishing.models import CmsConnection, HeroImageAsset, PublishJob

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CmsConnection], WordPressClient]


class JobQueue(Protocol):
    """Queue operations a worker needs; each call is atomic."""

    def claim_due(self, now: datetime) -> PublishJob | None: ...

    def mark_published(self, job_id: str, post_id: int, post_url: str) -> PublishJob: ...

    def mark_failed(self, job_id: str, error: str) -> PublishJob: ...


class PublishSource(Protocol):
    def get_draft(self, draft_id: str) -> Draft | None: ...

    def get_hero_image(self, draft_id: str) -> HeroImageAsset | None: ...


def load_image(url: str, timeout: int = 30) -> tuple[bytes, str, str]:
    """Fetch image bytes from an http(s) or ``data:`` URL.

    Returns:
        Tuple of (bytes, mime type, file name).
    """
    if url.startswith("data:"):
        header, _, encoded = url.partition(",")
        mime_type = header[5:].split(";")[0] or "image/png"
        try:
            data = base64.b64decode(encoded, validate=True)
        except binascii.Error as exc:
            raise ValueError("Hero image data URL is not valid base64") from exc
        ext = mimetypes.guess_extension(mime_type) or ".png"
        return data, mime_type, f"hero{ext}"

    with urllib.request.urlopen(url, timeout=timeout) as resp:
        data = resp.read()
        mime_type = resp.headers.get_content_type() or "image/jpeg"
    name = urllib.parse.urlparse(url).path.rsplit("/", 1)[-1] or "hero"
    if "." not in name:
        name += mimetypes.guess_extension(mime_type) or ".jpg"
    return data, mime_type, name


class PublishWorker:
    """Processes due publish jobs against the CMS."""

    def __init__(
        self,
        queue: JobQueue,
        source: PublishSource,
        resolve_connection: Callable[[], CmsConnection | None],
        client_factory: ClientFactory,
    ) -> None:
        self._queue = queue
        self._source = source
        self._resolve_connection = resolve_connection
        self._client_factory = client_factory

    def run_once(self, now: datetime | None = None) -> PublishJob | None:
        """Claim and process one due job.

        Returns:
            The finished job, or None when nothing was due. Failures are
            recorded on the job rather than raised.
        """
        job = self._queue.claim_due(now or datetime.now(tz=UTC))
        if job is None:
            return None
        logger.info("Publishing job %s (draft %s)", job.id, job.draft_id)

        try:
            post_id, post_url = self._publish(job)
        except (SeoAgentError, OSError, ValueError) as exc:
            logger.warning("Publish job %s failed: %s", job.id, exc)
            return self._queue.mark_failed(job.id, str(exc))
        except Exception as exc:
            logger.error("Publish job %s failed unexpectedly", job.id, exc_info=True)
            return self._queue.mark_failed(job.id, f"Unexpected error: {exc!r}")

        logger.info("Published job %s as post %s", job.id, post_id)
        return self._queue.mark_published(job.id, post_id, post_url)

    def _publish(self, job: PublishJob) -> tuple[int, str]:
        connection = self._resolve_connection()
        if connection is None:
            raise IntegrationNotConfiguredError("WordPress integration is not configured")
        draft = self._source.get_draft(job.draft_id)
        if draft is None or not draft.title.strip() or not draft.body.strip():
            raise DraftIncompleteError(f"Draft {job.draft_id} is missing or incomplete")
        hero = self._source.get_hero_image(job.draft_id)
        if hero is None:
            raise MissingHeroImageError(f"Draft {job.draft_id} has no hero image")

        client = self._client_factory(connection)
        data, mime_type, filename = load_image(hero.url)
        media = client.upload_media(filename, data, mime_type, alt_text=hero.alt_text or None)

        payload = job.payload
        post = client.create_post(
            draft.title,
            draft.body,
            post_type=payload.get("post_type", "posts"),
            status=payload.get("status", "draft"),
            excerpt=draft.summary or None,
            featured_media=media.id,
            slug=payload.get("slug"),
            categories=payload.get("categories") or None,
            tags=payload.get("tags") or None,
        )
        return post.id, post.link
