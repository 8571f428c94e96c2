"""Assembles a validated ContextSnapshot from the underlying records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypeVar

from seo_agent.config import DEFAULT_LANGUAGE
from seo_agent.context.fallbacks import (
    build_business_model,
    build_customer_profile,
    resolve_language,
)
from seo_agent.context.models import (
    BusinessModelSummary,
    ContextSnapshot,
    CustomerProfile,
    Hypothesis,
    KeywordCluster,
    Project,
)
from seo_agent.errors import (
    CrossReferenceError,
    InvalidIdentifierError,
    NotFoundError,
    OwnershipError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContextSource(Protocol):
    """Read access to the records a snapshot is built from."""

    def get_project(self, project_id: str) -> Project | None: ...

    def get_hypothesis(self, hypothesis_id: str) -> Hypothesis | None: ...

    def list_hypotheses(self, project_id: str) -> list[Hypothesis]: ...

    def get_business_model(self, hypothesis_id: str) -> Mapping[str, Any] | None: ...

    def get_customer_profile(self, hypothesis_id: str) -> Mapping[str, Any] | None: ...

    def list_clusters(self, project_id: str, hypothesis_id: str) -> list[KeywordCluster]: ...


def _require_id(value: str, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdentifierError(f"{name} must be a non-empty identifier")
    return value.strip()


class ContextAssembler:
    """Builds consistency-checked context snapshots.

    The project and hypothesis are mandatory and validated strictly. The
    business model, customer profile and clusters are loaded independently;
    a failure in any of them degrades that field instead of failing the
    whole snapshot.
    """

    def __init__(self, source: ContextSource, default_language: str = DEFAULT_LANGUAGE) -> None:
        self._source = source
        self._default_language = default_language

    def load(
        self,
        project_id: str,
        hypothesis_id: str,
        user_id: str | None = None,
    ) -> ContextSnapshot:
        """Load and cross-validate the context for one hypothesis.

        Args:
            project_id: Project to load.
            hypothesis_id: Hypothesis that must belong to the project.
            user_id: When given, must match the project owner.

        Returns:
            An immutable ContextSnapshot.

        Raises:
            InvalidIdentifierError: An identifier is blank.
            NotFoundError: The project or hypothesis does not exist.
            OwnershipError: The user does not own the project.
            CrossReferenceError: The hypothesis belongs to another project.
        """
        project_id = _require_id(project_id, "project_id")
        hypothesis_id = _require_id(hypothesis_id, "hypothesis_id")

        project = self._source.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}")
        if user_id is not None and project.owner_id != user_id:
            raise OwnershipError(f"Project {project_id} does not belong to user {user_id}")

        hypothesis = self._source.get_hypothesis(hypothesis_id)
        if hypothesis is None:
            raise NotFoundError(self._missing_hypothesis_message(project, hypothesis_id))
        if hypothesis.project_id != project.id:
            raise CrossReferenceError(
                f"Hypothesis {hypothesis_id} does not belong to project {project_id}"
            )

        business_raw = self._load_optional(
            "business model", lambda: self._source.get_business_model(hypothesis_id)
        )
        profile_raw = self._load_optional(
            "customer profile", lambda: self._source.get_customer_profile(hypothesis_id)
        )
        clusters = self._load_optional(
            "keyword clusters", lambda: self._source.list_clusters(project_id, hypothesis_id)
        )

        snapshot = ContextSnapshot(
            project=project,
            hypothesis=hypothesis,
            business_model=self._normalize(business_raw, build_business_model),
            customer_profile=self._normalize(profile_raw, build_customer_profile),
            clusters=tuple(clusters or ()),
            language=resolve_language(profile_raw, project, self._default_language),
        )
        logger.info(
            "Built context for project=%s hypothesis=%s (profile=%s, clusters=%d, language=%s)",
            project_id,
            hypothesis_id,
            snapshot.customer_profile is not None,
            len(snapshot.clusters),
            snapshot.language,
        )
        return snapshot

    def _missing_hypothesis_message(self, project: Project, hypothesis_id: str) -> str:
        try:
            available = [h.id for h in self._source.list_hypotheses(project.id)]
        except Exception:
            logger.warning("Could not list hypotheses for %s", project.id, exc_info=True)
            available = []
        listing = ", ".join(available) if available else "none"
        return (
            f"Hypothesis not found: {hypothesis_id} for project: {project.id} "
            f"({project.title}). Available hypotheses: {listing}"
        )

    @staticmethod
    def _load_optional(label: str, loader: Callable[[], T]) -> T | None:
        try:
            return loader()
        except Exception:
            logger.warning("Failed to load %s, continuing without it", label, exc_info=True)
            return None

    @staticmethod
    def _normalize(
        raw: Mapping[str, Any] | None,
        builder: Callable[[Mapping[str, Any]], BusinessModelSummary | CustomerProfile],
    ) -> Any:
        if not raw:
            return None
        try:
            return builder(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed record", exc_info=True)
            return None
