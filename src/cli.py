"""CLI interface for seo-agent."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from seo_agent.config import SeoAgentConfig, load_config, merge_cli_overrides
from seo_agent.context import ContextAssembler
from seo_agent.drafts import ContentType, DraftGenerator, DraftRefiner, DraftService
from seo_agent.errors import InvalidTransitionError, NotFoundError, SeoAgentError
from seo_agent.ideas import IdeaBacklog, IdeaCategory, IdeaGenerator, IdeaStatus
from seo_agent.integrations.wordpress import WordPressClient
from seo_agent.llm import AnthropicChatClient
from seo_agent.publishing import PublishJobService, PublishWorker, make_connection_resolver
from seo_agent.publishing.connection import to_client_config
from seo_agent.store import SeoStore

app = typer.Typer(
    name="seo-agent",
    help="Generate SEO content ideas and drafts, and publish them to WordPress.",
)
ideas_app = typer.Typer(help="Generate and manage backlog ideas.")
drafts_app = typer.Typer(help="Generate and refine drafts.")
jobs_app = typer.Typer(help="Manage WordPress publish jobs.")
wordpress_app = typer.Typer(help="Inspect the WordPress connection.")
app.add_typer(ideas_app, name="ideas")
app.add_typer(drafts_app, name="drafts")
app.add_typer(jobs_app, name="jobs")
app.add_typer(wordpress_app, name="wordpress")

console = Console()

_state: dict[str, object] = {}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from seo_agent import __version__

        console.print(f"seo-agent {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .seo-agent.toml file."),
    ] = None,
    store_dir: Annotated[
        Optional[Path],
        typer.Option("--store", help="Directory holding the JSON store."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", help="Default LLM model for every command."),
    ] = None,
    language: Annotated[
        Optional[str],
        typer.Option("--language", help="Fallback content language."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """SEO Agent - from hypothesis to published article."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(config_path)
    _state["config"] = merge_cli_overrides(
        config,
        store_dir=str(store_dir) if store_dir else None,
        model=model,
        language=language,
    )


def _config() -> SeoAgentConfig:
    config = _state.get("config")
    return config if isinstance(config, SeoAgentConfig) else load_config()


def _store() -> SeoStore:
    return SeoStore(_config().store_path)


def _llm_client() -> AnthropicChatClient:
    llm = _config().llm
    return AnthropicChatClient(llm.api_key, timeout=llm.timeout)


def _fail(exc: SeoAgentError) -> NoReturn:
    console.print(f"[red]Error ({exc.kind}):[/red] {exc}")
    raise typer.Exit(1)


def _wordpress_client(store: SeoStore) -> WordPressClient:
    connection = make_connection_resolver(_config().wordpress, store)()
    if connection is None:
        console.print("[red]Error:[/red] WordPress integration is not configured")
        raise typer.Exit(1)
    return WordPressClient(to_client_config(connection))


# ── Ideas ────────────────────────────────────────────────────────


@ideas_app.command("generate")
def ideas_generate(
    project_id: Annotated[str, typer.Argument(help="Project id.")],
    hypothesis_id: Annotated[str, typer.Argument(help="Hypothesis id.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Requesting user id.")],
    category: Annotated[
        IdeaCategory, typer.Option("--category", help="Idea category.")
    ] = IdeaCategory.PAIN,
    count: Annotated[int, typer.Option("--count", "-n", min=1, max=20)] = 5,
    model: Annotated[Optional[str], typer.Option("--model", help="LLM model override.")] = None,
) -> None:
    """Generate ideas for a hypothesis and add new ones to the backlog."""
    config = _config()
    store = _store()
    try:
        context = ContextAssembler(store, config.content.default_language).load(
            project_id, hypothesis_id, user
        )
        candidates = IdeaGenerator(_llm_client(), config.llm).generate(
            context, category, count, model=model
        )
        result = IdeaBacklog(store).promote(context, candidates, user)
    except SeoAgentError as exc:
        _fail(exc)

    for idea in result.created:
        console.print(f"[green]+[/green] {idea.id}  {idea.title}")
    if result.skipped:
        console.print(f"[yellow]{len(result.skipped)} duplicate(s) skipped[/yellow]")


@ideas_app.command("list")
def ideas_list(
    project_id: Annotated[str, typer.Argument(help="Project id.")],
    hypothesis_id: Annotated[str, typer.Argument(help="Hypothesis id.")],
    status: Annotated[
        Optional[IdeaStatus], typer.Option("--status", help="Only ideas in this status.")
    ] = None,
) -> None:
    """List backlog ideas for a hypothesis."""
    ideas = [
        idea
        for idea in _store().list_ideas(project_id, hypothesis_id)
        if status is None or idea.status == status
    ]
    if not ideas:
        console.print("[yellow]No ideas.[/yellow]")
        return

    table = Table(title="Backlog ideas")
    table.add_column("ID")
    table.add_column("Category")
    table.add_column("Status")
    table.add_column("Title")
    for idea in ideas:
        table.add_row(idea.id, str(idea.category), str(idea.status), idea.title)
    console.print(table)


@ideas_app.command("status")
def ideas_status(
    idea_id: Annotated[str, typer.Argument(help="Backlog idea id.")],
    status: Annotated[IdeaStatus, typer.Argument(help="New status.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Requesting user id.")],
) -> None:
    """Schedule or archive a backlog idea."""
    store = _store()
    try:
        idea = store.get_idea(idea_id)
        if idea is None:
            raise NotFoundError(f"Idea not found: {idea_id}")
        ContextAssembler(store).load(idea.project_id, idea.hypothesis_id, user)
        updated = idea.transition(status, user)
    except SeoAgentError as exc:
        _fail(exc)
    store.save_idea(updated)
    console.print(f"[green]{updated.id}[/green] is now {updated.status}")


# ── Drafts ───────────────────────────────────────────────────────


def _draft_service(store: SeoStore) -> DraftService:
    config = _config()
    client = _llm_client()
    return DraftService(
        store,
        ContextAssembler(store, config.content.default_language),
        DraftGenerator(client, config.llm),
        DraftRefiner(client, config.llm),
    )


@drafts_app.command("generate")
def drafts_generate(
    idea_id: Annotated[str, typer.Argument(help="Backlog idea id.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Requesting user id.")],
    content_type: Annotated[
        ContentType, typer.Option("--content-type", help="CMS content type.")
    ] = ContentType.ARTICLE,
    model: Annotated[Optional[str], typer.Option("--model", help="LLM model override.")] = None,
    language: Annotated[Optional[str], typer.Option("--language", help="Output language.")] = None,
) -> None:
    """Generate and save a draft for a backlog idea."""
    store = _store()
    try:
        draft = _draft_service(store).generate_for_idea(
            idea_id, user, content_type, model=model, language=language
        )
    except SeoAgentError as exc:
        _fail(exc)
    console.print(f"[green]Draft {draft.id}[/green]: {draft.title} ({draft.model})")


@drafts_app.command("refine")
def drafts_refine(
    draft_id: Annotated[str, typer.Argument(help="Draft id.")],
    instructions: Annotated[str, typer.Option("--instructions", "-i", help="Editing request.")],
    user: Annotated[
        Optional[str], typer.Option("--user", "-u", help="Requesting user id.")
    ] = None,
    cta_url: Annotated[Optional[str], typer.Option("--cta-url")] = None,
    cta_text: Annotated[Optional[str], typer.Option("--cta-text")] = None,
) -> None:
    """Edit a draft in place."""
    store = _store()
    try:
        draft = _draft_service(store).refine(
            draft_id, instructions, user_id=user, cta_url=cta_url, cta_text=cta_text
        )
    except SeoAgentError as exc:
        _fail(exc)
    console.print(f"[green]Refined draft {draft.id}[/green]")


# ── Jobs ─────────────────────────────────────────────────────────


def _job_service(store: SeoStore) -> PublishJobService:
    return PublishJobService(store, make_connection_resolver(_config().wordpress, store))


@jobs_app.command("enqueue")
def jobs_enqueue(
    draft_id: Annotated[str, typer.Argument(help="Draft id.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Requesting user id.")],
    publish_at: Annotated[
        Optional[datetime],
        typer.Option("--publish-at", help="Schedule time (ISO 8601)."),
    ] = None,
) -> None:
    """Queue a draft for publishing."""
    store = _store()
    try:
        job = _job_service(store).enqueue(
            draft_id,
            user,
            publish_at=publish_at,
            payload={"reason": "scheduled" if publish_at else "manual"},
        )
    except SeoAgentError as exc:
        _fail(exc)
    console.print(f"[green]{job.id}[/green] {job.status}: {job.message}")


@jobs_app.command("list")
def jobs_list(
    project_id: Annotated[Optional[str], typer.Option("--project")] = None,
    hypothesis_id: Annotated[Optional[str], typer.Option("--hypothesis")] = None,
    limit: Annotated[int, typer.Option("--limit", "-n")] = 20,
) -> None:
    """List publish jobs, newest first."""
    jobs = _job_service(_store()).list(project_id, hypothesis_id, limit)
    if not jobs:
        console.print("[yellow]No publish jobs.[/yellow]")
        return

    table = Table(title="Publish jobs")
    table.add_column("ID")
    table.add_column("Draft")
    table.add_column("Status")
    table.add_column("Publish at")
    table.add_column("Message")
    for job in jobs:
        table.add_row(
            job.id,
            job.draft_id,
            str(job.status),
            job.publish_at.isoformat(timespec="minutes"),
            job.error or job.message,
        )
    console.print(table)


@jobs_app.command("retry")
def jobs_retry(
    job_id: Annotated[str, typer.Argument(help="Publish job id.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Requesting user id.")],
) -> None:
    """Re-queue a failed or queued job."""
    try:
        job = _job_service(_store()).retry(job_id, user)
    except SeoAgentError as exc:
        _fail(exc)
    console.print(f"[green]{job.id}[/green] {job.status}: {job.message}")


@jobs_app.command("fail")
def jobs_fail(
    job_id: Annotated[str, typer.Argument(help="Publish job id.")],
    reason: Annotated[
        str, typer.Option("--reason", help="Error recorded on the job.")
    ] = "Marked failed by operator",
) -> None:
    """Mark a queued or stuck publishing job as failed so it can be retried."""
    store = _store()
    try:
        job = store.get_job(job_id)
        if job is None:
            raise NotFoundError(f"Publish job not found: {job_id}")
        if not job.status.in_flight:
            raise InvalidTransitionError(f"Job {job_id} is already {job.status}")
    except SeoAgentError as exc:
        _fail(exc)
    failed = store.mark_failed(job_id, reason)
    console.print(f"[yellow]{failed.id}[/yellow] {failed.status}: {failed.error}")


@jobs_app.command("work")
def jobs_work() -> None:
    """Publish one due job, if any."""
    store = _store()
    worker = PublishWorker(
        store,
        store,
        make_connection_resolver(_config().wordpress, store),
        lambda connection: WordPressClient(to_client_config(connection)),
    )
    job = worker.run_once()
    if job is None:
        console.print("No due jobs.")
    elif job.error:
        console.print(f"[red]{job.id} failed:[/red] {job.error}")
        raise typer.Exit(1)
    else:
        console.print(f"[green]{job.id} published:[/green] {job.post_url}")


# ── WordPress ────────────────────────────────────────────────────


@wordpress_app.command("test")
def wordpress_test() -> None:
    """Check the WordPress credentials."""
    client = _wordpress_client(_store())
    try:
        client.test_connection()
    except SeoAgentError as exc:
        _fail(exc)
    console.print(f"[green]Connected to {client.base_url}[/green]")


@wordpress_app.command("taxonomies")
def wordpress_taxonomies() -> None:
    """List categories, tags and post types."""
    client = _wordpress_client(_store())
    try:
        categories = client.list_categories()
        tags = client.list_tags()
        post_types = client.list_post_types()
    except SeoAgentError as exc:
        _fail(exc)

    table = Table(title="WordPress taxonomies")
    table.add_column("Kind")
    table.add_column("ID / slug")
    table.add_column("Name")
    for category in categories:
        table.add_row("category", str(category.id), category.name)
    for tag in tags:
        table.add_row("tag", str(tag.id), tag.name)
    for post_type in post_types:
        table.add_row("post type", post_type.rest_base, post_type.name)
    console.print(table)


if __name__ == "__main__":
    app()
