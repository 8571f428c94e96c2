"""Promotion of idea candidates into the persisted backlog."""

from __future__ import annotations

import logging
import re
import unicodedata
import uuid
from typing import Protocol

from seo_agent.context.models import ContextSnapshot
from seo_agent.ideas.models import BacklogIdea, IdeaCandidate, PromotionResult

logger = logging.getLogger(__name__)

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


class IdeaRepository(Protocol):
    def list_ideas(self, project_id: str, hypothesis_id: str) -> list[BacklogIdea]: ...

    def add_ideas(self, ideas: list[BacklogIdea]) -> None: ...


def normalize_key(value: str) -> str:
    """Comparison key: NFKC, casefolded, punctuation dropped, whitespace collapsed."""
    text = unicodedata.normalize("NFKC", value).casefold()
    text = _PUNCT_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


class _Seen:
    """Title and summary keys already present in the backlog."""

    def __init__(self) -> None:
        self.titles: set[str] = set()
        self.summaries: set[str] = set()

    def add(self, title: str, summary: str) -> None:
        for keys, value in ((self.titles, title), (self.summaries, summary)):
            normalized = normalize_key(value)
            if normalized:
                keys.add(normalized)

    def contains(self, title: str, summary: str) -> bool:
        # Blank keys never match, e.g. an all-punctuation title
        title_key = normalize_key(title)
        if title_key and title_key in self.titles:
            return True
        summary_key = normalize_key(summary)
        return bool(summary_key) and summary_key in self.summaries


class IdeaBacklog:
    """Persists idea candidates, skipping anything already in the backlog."""

    def __init__(self, repository: IdeaRepository) -> None:
        self._repository = repository

    def promote(
        self,
        context: ContextSnapshot,
        candidates: list[IdeaCandidate],
        user_id: str,
        cluster_id: str | None = None,
    ) -> PromotionResult:
        """Persist candidates that do not duplicate existing ideas.

        Existing ideas of every status count, as do candidates accepted
        earlier in the same batch.
        """
        project_id = context.project.id
        hypothesis_id = context.hypothesis.id

        seen = _Seen()
        for existing in self._repository.list_ideas(project_id, hypothesis_id):
            seen.add(existing.title, existing.description)

        cluster_ids = {c.title.casefold(): c.id for c in context.clusters}
        result = PromotionResult()
        for candidate in candidates:
            if seen.contains(candidate.title, candidate.summary):
                logger.info("Skipping duplicate idea: %s", candidate.title)
                result.skipped.append(candidate)
                continue
            seen.add(candidate.title, candidate.summary)
            matched_cluster = cluster_id
            if matched_cluster is None and candidate.cluster_title:
                matched_cluster = cluster_ids.get(candidate.cluster_title.casefold())
            result.created.append(
                BacklogIdea(
                    id=uuid.uuid4().hex,
                    project_id=project_id,
                    hypothesis_id=hypothesis_id,
                    cluster_id=matched_cluster,
                    title=candidate.title,
                    description=candidate.summary,
                    category=candidate.category,
                    created_by=user_id,
                    updated_by=user_id,
                )
            )

        if result.created:
            self._repository.add_ideas(result.created)
        logger.info(
            "Promoted %d ideas (%d duplicates skipped) for hypothesis %s",
            len(result.created),
            len(result.skipped),
            hypothesis_id,
        )
        return result
