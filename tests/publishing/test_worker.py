"""Tests for the publish worker and hero image loading."""

from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from seo_agent.errors import CmsError
from seo_agent.integrations.wordpress import CreatedPost, MediaUpload
from seo_agent.publishing import JobStatus, PublishJobService, PublishWorker
from seo_agent.publishing.worker import load_image


@pytest.fixture
def wp_client() -> MagicMock:
    client = MagicMock()
    client.upload_media.return_value = MediaUpload(id=9, url="https://blog.example.com/hero.png")
    client.create_post.return_value = CreatedPost(
        id=42, link="https://blog.example.com/spot-churn-early", status="publish"
    )
    return client


@pytest.fixture
def worker(store, connection, wp_client) -> PublishWorker:
    return PublishWorker(store, store, lambda: connection, lambda conn: wp_client)


def _soon() -> datetime:
    return datetime.now(tz=UTC) + timedelta(seconds=1)


class TestLoadImage:
    def test_data_url(self, png_data_url):
        data, mime_type, name = load_image(png_data_url)
        assert data.startswith(b"\x89PNG")
        assert mime_type == "image/png"
        assert name == "hero.png"

    def test_invalid_base64(self):
        with pytest.raises(ValueError, match="not valid base64"):
            load_image("data:image/png;base64,@@@")

    def test_data_url_without_mime(self):
        encoded = base64.b64encode(b"raw").decode()
        data, mime_type, _ = load_image(f"data:;base64,{encoded}")
        assert data == b"raw"
        assert mime_type == "image/png"


class TestRunOnce:
    def test_nothing_due(self, worker, wp_client):
        assert worker.run_once() is None
        wp_client.upload_media.assert_not_called()

    def test_future_job_not_claimed(self, store, connection, draft, worker):
        service = PublishJobService(store, lambda: connection)
        service.enqueue("D1", "U1", publish_at=datetime.now(tz=UTC) + timedelta(days=1))
        assert worker.run_once() is None

    def test_publishes_draft(self, store, connection, draft, worker, wp_client):
        job = PublishJobService(store, lambda: connection).enqueue("D1", "U1")

        finished = worker.run_once(_soon())

        assert finished.id == job.id
        assert finished.status == JobStatus.PUBLISHED
        assert finished.post_id == 42
        assert finished.post_url == "https://blog.example.com/spot-churn-early"
        assert finished.finished_at is not None

        filename, data, mime_type = wp_client.upload_media.call_args[0]
        assert filename == "hero.png"
        assert mime_type == "image/png"
        assert wp_client.upload_media.call_args[1] == {"alt_text": "Chart"}

        args, kwargs = wp_client.create_post.call_args
        assert args == ("Spot Churn Early!", "<h2>One</h2><p>1</p>")
        assert kwargs["post_type"] == "posts"
        assert kwargs["status"] == "publish"
        assert kwargs["featured_media"] == 9
        assert kwargs["slug"] == "spot-churn-early"
        assert kwargs["categories"] == [3]
        assert kwargs["tags"] == [7, 8]
        assert kwargs["excerpt"] == "Lead"

    def test_cms_failure_recorded(self, store, connection, draft, worker, wp_client):
        job = PublishJobService(store, lambda: connection).enqueue("D1", "U1")
        wp_client.create_post.side_effect = CmsError(500, "Internal Server Error", "boom")

        finished = worker.run_once(_soon())

        assert finished.status == JobStatus.FAILED
        assert "500 Internal Server Error" in finished.error
        assert store.get_job(job.id).status == JobStatus.FAILED

    def test_unexpected_error_recorded_not_raised(
        self, store, connection, draft, worker, wp_client
    ):
        job = PublishJobService(store, lambda: connection).enqueue("D1", "U1")
        wp_client.upload_media.side_effect = KeyError("id")

        finished = worker.run_once(_soon())

        assert finished.status == JobStatus.FAILED
        assert "KeyError" in finished.error
        assert store.get_job(job.id).status == JobStatus.FAILED

    def test_connection_removed_after_enqueue(self, store, connection, draft, wp_client):
        PublishJobService(store, lambda: connection).enqueue("D1", "U1")
        worker = PublishWorker(store, store, lambda: None, lambda conn: wp_client)

        finished = worker.run_once(_soon())

        assert finished.status == JobStatus.FAILED
        assert "not configured" in finished.error
        wp_client.upload_media.assert_not_called()

    def test_failed_job_can_be_retried_and_published(
        self, store, connection, draft, worker, wp_client
    ):
        service = PublishJobService(store, lambda: connection)
        job = service.enqueue("D1", "U1")
        wp_client.create_post.side_effect = [
            CmsError(502, "Bad Gateway", ""),
            wp_client.create_post.return_value,
        ]

        assert worker.run_once(_soon()).status == JobStatus.FAILED
        service.retry(job.id, "U1")
        assert worker.run_once(_soon()).status == JobStatus.PUBLISHED
