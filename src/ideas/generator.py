"""Idea generation: context + category → validated idea candidates."""

from __future__ import annotations

import logging
import math
from typing import Any

from seo_agent.config import LLMSectionConfig
from seo_agent.context.models import ContextSnapshot
from seo_agent.errors import InvalidRequestError, ResponseShapeError
from seo_agent.ideas.models import IdeaCandidate, IdeaCategory, SearchIntent
from seo_agent.ideas.prompts import IDEAS_SYSTEM_PROMPT, build_idea_prompt
from seo_agent.llm import ChatClient, complete_with_fallback, parse_json_object

logger = logging.getLogger(__name__)

MAX_IDEAS_PER_CALL = 20


def _coerce_number(value: Any) -> float | None:
    """Return a finite non-negative float, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, int | float) and math.isfinite(value) and value >= 0:
        return float(value)
    return None


def _coerce_intent(value: Any) -> SearchIntent:
    if isinstance(value, str):
        try:
            return SearchIntent(value.strip().lower())
        except ValueError:
            pass
    return SearchIntent.INFORMATIONAL


def _parse_idea(item: Any, index: int, category: IdeaCategory) -> IdeaCandidate:
    if not isinstance(item, dict):
        raise ResponseShapeError(f"Idea #{index + 1} is not a JSON object")
    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ResponseShapeError(f"Idea #{index + 1} has no title")
    summary = item.get("summary")
    cluster_title = item.get("clusterTitle") or item.get("cluster_title")
    return IdeaCandidate(
        title=title.strip(),
        summary=summary.strip() if isinstance(summary, str) else "",
        category=category,
        search_volume=_coerce_number(item.get("searchVolume")),
        difficulty=_coerce_number(item.get("difficulty")),
        opportunity_score=_coerce_number(item.get("opportunityScore")),
        intent=_coerce_intent(item.get("intent")),
        cluster_title=cluster_title.strip() if isinstance(cluster_title, str) else None,
    )


class IdeaGenerator:
    """Asks the LLM for a fixed number of ideas in one category."""

    def __init__(self, client: ChatClient, settings: LLMSectionConfig | None = None) -> None:
        self._client = client
        self._settings = settings or LLMSectionConfig()

    def generate(
        self,
        context: ContextSnapshot,
        category: IdeaCategory | str,
        count: int,
        language: str | None = None,
        model: str | None = None,
    ) -> list[IdeaCandidate]:
        """Generate exactly ``count`` idea candidates.

        Args:
            context: Assembled context snapshot.
            category: Idea category; unknown values raise.
            count: Number of ideas to request (1-20).
            language: Output language; defaults to the snapshot language.
            model: Model override; falls back to the configured default.

        Returns:
            The parsed candidates, in response order.

        Raises:
            InvalidRequestError: Bad category or count.
            ContractError: Empty, non-JSON or wrongly shaped response.
            LLMError: The provider failed with both models.
        """
        try:
            resolved_category = IdeaCategory(str(category).upper())
        except ValueError as exc:
            raise InvalidRequestError(f"Unknown idea category: {category}") from exc
        if not 1 <= count <= MAX_IDEAS_PER_CALL:
            raise InvalidRequestError(f"count must be between 1 and {MAX_IDEAS_PER_CALL}")

        prompt = build_idea_prompt(
            context, resolved_category, count, language or context.language
        )
        raw, used_model = complete_with_fallback(
            self._client,
            system=IDEAS_SYSTEM_PROMPT,
            prompt=prompt,
            model=model,
            default_model=self._settings.default_model,
            settings=self._settings.ideas,
            label="ideas",
        )
        payload = parse_json_object(raw, label="ideas")

        items = payload.get("ideas")
        if not isinstance(items, list):
            raise ResponseShapeError("LLM response has no 'ideas' array")
        if len(items) != count:
            raise ResponseShapeError(f"Expected {count} ideas, LLM returned {len(items)}")

        ideas = [_parse_idea(item, i, resolved_category) for i, item in enumerate(items)]
        logger.info(
            "Generated %d %s ideas for hypothesis %s using %s",
            len(ideas),
            resolved_category,
            context.hypothesis.id,
            used_model,
        )
        return ideas
