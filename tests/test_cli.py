"""Smoke tests for the CLI."""

import urllib.error
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from seo_agent import __version__
from seo_agent.cli import app
from seo_agent.drafts import Draft
from seo_agent.ideas import BacklogIdea, IdeaCategory, IdeaStatus
from seo_agent.integrations.wordpress import CreatedPost, MediaUpload
from seo_agent.publishing import CmsConnection, HeroImageAsset, JobStatus
from seo_agent.store import SeoStore

PNG_DATA_URL = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path: Path):
    """Keep local config files and credentials out of CLI runs."""
    for key in (
        "ANTHROPIC_API_KEY",
        "SEO_AGENT_MODEL",
        "SEO_AGENT_STORE_DIR",
        "SEO_AGENT_LANGUAGE",
        "WORDPRESS_BASE_URL",
        "WORDPRESS_USERNAME",
        "WORDPRESS_APP_PASSWORD",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("seo_agent.config.CONFIG_SEARCH_PATHS", [])
    monkeypatch.setattr("seo_agent.config.GLOBAL_CONFIG_PATH", tmp_path / "missing.toml")


@pytest.fixture
def ready_draft(store) -> SeoStore:
    """Seeded store with a WordPress connection and a publishable draft."""
    store.save_connection(
        CmsConnection(base_url="https://blog.example.com", username="editor", app_password="pw")
    )
    store.save_draft(
        Draft(id="D1", project_id="P1", hypothesis_id="H1", title="Spot churn", body="<h2>A</h2>")
    )
    store.save_hero_image(HeroImageAsset(draft_id="D1", url=PNG_DATA_URL))
    return store


class TestCLI:
    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "ideas" in result.output
        assert "jobs" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestIdeasCommand:
    def test_generate_adds_to_backlog(self, runner, store, tmp_path, fake_llm) -> None:
        client = fake_llm(
            {
                "ideas": [
                    {"title": "Why churn hides", "summary": "Lagging metrics"},
                    {"title": "Churn alerts 101", "summary": "Leading signals"},
                ]
            }
        )
        with patch("seo_agent.cli.AnthropicChatClient", return_value=client):
            result = runner.invoke(
                app,
                ["--store", str(tmp_path), "ideas", "generate", "P1", "H1",
                 "--user", "U1", "--category", "FAQ", "--count", "2"],
            )

        assert result.exit_code == 0, result.output
        assert "Why churn hides" in result.output
        assert len(SeoStore(tmp_path).list_ideas("P1", "H1")) == 2

    def test_ownership_error_exits_nonzero(self, runner, store, tmp_path, fake_llm) -> None:
        with patch("seo_agent.cli.AnthropicChatClient", return_value=fake_llm()):
            result = runner.invoke(
                app, ["--store", str(tmp_path), "ideas", "generate", "P1", "H1", "--user", "U2"]
            )
        assert result.exit_code == 1
        assert "validation" in result.output

    def test_archive_then_list(self, runner, store, tmp_path) -> None:
        store.add_ideas(
            [
                BacklogIdea(
                    id="I1",
                    project_id="P1",
                    hypothesis_id="H1",
                    title="Churn glossary",
                    category=IdeaCategory.INFO,
                    created_by="U1",
                    updated_by="U1",
                )
            ]
        )
        base = ["--store", str(tmp_path), "ideas"]

        result = runner.invoke(app, [*base, "status", "I1", "archived", "-u", "U1"])
        assert result.exit_code == 0, result.output
        assert SeoStore(tmp_path).get_idea("I1").status == IdeaStatus.ARCHIVED

        listed = runner.invoke(app, [*base, "list", "P1", "H1", "--status", "backlog"])
        assert "No ideas" in listed.output

        reopened = runner.invoke(app, [*base, "status", "I1", "backlog", "-u", "U1"])
        assert reopened.exit_code == 1
        assert "conflict" in reopened.output


class TestJobsCommands:
    def test_list_empty(self, runner, tmp_path) -> None:
        result = runner.invoke(app, ["--store", str(tmp_path), "jobs", "list"])
        assert result.exit_code == 0
        assert "No publish jobs" in result.output

    def test_enqueue_then_list(self, runner, ready_draft, tmp_path) -> None:
        result = runner.invoke(app, ["--store", str(tmp_path), "jobs", "enqueue", "D1", "-u", "U1"])
        assert result.exit_code == 0, result.output
        assert "Manual publish request enqueued" in result.output

        listed = runner.invoke(app, ["--store", str(tmp_path), "jobs", "list"])
        assert listed.exit_code == 0
        assert "D1" in listed.output

    def test_duplicate_enqueue_is_conflict(self, runner, ready_draft, tmp_path) -> None:
        args = ["--store", str(tmp_path), "jobs", "enqueue", "D1", "-u", "U1"]
        runner.invoke(app, args)
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "conflict" in result.output

    def test_enqueue_without_connection(self, runner, store, tmp_path) -> None:
        result = runner.invoke(app, ["--store", str(tmp_path), "jobs", "enqueue", "D1", "-u", "U1"])
        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_retry_unknown_job(self, runner, tmp_path) -> None:
        result = runner.invoke(app, ["--store", str(tmp_path), "jobs", "retry", "nope", "-u", "U1"])
        assert result.exit_code == 1
        assert "Publish job not found" in result.output

    def test_stuck_job_can_be_failed_then_retried(self, runner, ready_draft, tmp_path) -> None:
        base = ["--store", str(tmp_path), "jobs"]
        runner.invoke(app, [*base, "enqueue", "D1", "-u", "U1"])
        job = SeoStore(tmp_path).claim_due(datetime.now(tz=UTC) + timedelta(seconds=1))

        blocked = runner.invoke(app, [*base, "retry", job.id, "-u", "U1"])
        assert blocked.exit_code == 1

        failed = runner.invoke(app, [*base, "fail", job.id, "--reason", "worker crashed"])
        assert failed.exit_code == 0, failed.output
        assert SeoStore(tmp_path).get_job(job.id).error == "worker crashed"

        retried = runner.invoke(app, [*base, "retry", job.id, "-u", "U1"])
        assert retried.exit_code == 0, retried.output
        assert SeoStore(tmp_path).get_job(job.id).status == JobStatus.QUEUED

    def test_fail_finished_job_is_conflict(self, runner, ready_draft, tmp_path) -> None:
        base = ["--store", str(tmp_path), "jobs"]
        runner.invoke(app, [*base, "enqueue", "D1", "-u", "U1"])
        job_id = SeoStore(tmp_path).list_jobs()[0].id
        runner.invoke(app, [*base, "fail", job_id])

        result = runner.invoke(app, [*base, "fail", job_id])

        assert result.exit_code == 1
        assert "conflict" in result.output

    def test_work_publishes_due_job(self, runner, ready_draft, tmp_path) -> None:
        runner.invoke(app, ["--store", str(tmp_path), "jobs", "enqueue", "D1", "-u", "U1"])
        wp = MagicMock()
        wp.upload_media.return_value = MediaUpload(id=9, url="https://blog.example.com/h.png")
        wp.create_post.return_value = CreatedPost(id=42, link="https://blog.example.com/spot-churn")

        with patch("seo_agent.cli.WordPressClient", return_value=wp):
            result = runner.invoke(app, ["--store", str(tmp_path), "jobs", "work"])

        assert result.exit_code == 0, result.output
        assert "https://blog.example.com/spot-churn" in result.output
        assert SeoStore(tmp_path).list_jobs()[0].status == JobStatus.PUBLISHED

    def test_work_without_due_jobs(self, runner, tmp_path) -> None:
        result = runner.invoke(app, ["--store", str(tmp_path), "jobs", "work"])
        assert result.exit_code == 0
        assert "No due jobs" in result.output


class TestWordPressCommands:
    def test_not_configured(self, runner, tmp_path) -> None:
        result = runner.invoke(app, ["--store", str(tmp_path), "wordpress", "test"])
        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_connection_ok(self, runner, ready_draft, tmp_path) -> None:
        wp = MagicMock()
        wp.base_url = "https://blog.example.com"
        with patch("seo_agent.cli.WordPressClient", return_value=wp):
            result = runner.invoke(app, ["--store", str(tmp_path), "wordpress", "test"])
        assert result.exit_code == 0
        assert "Connected to https://blog.example.com" in result.output
        wp.test_connection.assert_called_once()

    def test_unreachable_site_reports_error(self, runner, ready_draft, tmp_path) -> None:
        error = urllib.error.URLError("Connection refused")
        with patch("urllib.request.urlopen", side_effect=error):
            result = runner.invoke(app, ["--store", str(tmp_path), "wordpress", "test"])
        assert result.exit_code == 1
        assert "integration" in result.output
        assert "refused" in result.output


class TestGlobalOptions:
    def test_model_flag_sets_default_model(self, runner, store, tmp_path, fake_llm) -> None:
        client = fake_llm({"ideas": [{"title": "Why churn hides", "summary": "Lagging"}]})
        with patch("seo_agent.cli.AnthropicChatClient", return_value=client):
            result = runner.invoke(
                app,
                ["--store", str(tmp_path), "--model", "claude-haiku-4-5", "ideas", "generate",
                 "P1", "H1", "--user", "U1", "--count", "1"],
            )

        assert result.exit_code == 0, result.output
        assert client.calls[0]["model"] == "claude-haiku-4-5"

    def test_language_flag_is_fallback_language(self, runner, store, tmp_path, fake_llm) -> None:
        store.save_project(store.get_project("P1").model_copy(update={"settings": {}}))
        client = fake_llm({"ideas": [{"title": "Why churn hides", "summary": "Lagging"}]})
        with patch("seo_agent.cli.AnthropicChatClient", return_value=client):
            result = runner.invoke(
                app,
                ["--store", str(tmp_path), "--language", "German", "ideas", "generate",
                 "P1", "H1", "--user", "U1", "--count", "1"],
            )

        assert result.exit_code == 0, result.output
        assert "Write in German" in client.calls[0]["prompt"]
