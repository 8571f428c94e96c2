"""Draft workflows that combine context loading, the LLM and persistence."""

from __future__ import annotations

import logging
import uuid
from typing import Protocol

from seo_agent.context.assembler import ContextAssembler
from seo_agent.drafts.generator import DraftGenerator
from seo_agent.drafts.models import ContentType, Draft
from seo_agent.drafts.refiner import DraftRefiner, apply_refinement
from seo_agent.errors import NotFoundError
from seo_agent.ideas.models import BacklogIdea

logger = logging.getLogger(__name__)


class DraftRepository(Protocol):
    def get_idea(self, idea_id: str) -> BacklogIdea | None: ...

    def get_draft(self, draft_id: str) -> Draft | None: ...

    def save_draft(self, draft: Draft) -> None: ...


class DraftService:
    """Generates and refines persisted drafts."""

    def __init__(
        self,
        repository: DraftRepository,
        assembler: ContextAssembler,
        generator: DraftGenerator,
        refiner: DraftRefiner,
    ) -> None:
        self._repository = repository
        self._assembler = assembler
        self._generator = generator
        self._refiner = refiner

    def generate_for_idea(
        self,
        idea_id: str,
        user_id: str,
        content_type: ContentType = ContentType.ARTICLE,
        *,
        model: str | None = None,
        language: str | None = None,
        content_goal: str | None = None,
        funnel_stage: str | None = None,
        special_requirements: str | None = None,
    ) -> Draft:
        """Generate a draft for a backlog idea and persist it."""
        idea = self._repository.get_idea(idea_id)
        if idea is None:
            raise NotFoundError(f"Idea not found: {idea_id}")
        context = self._assembler.load(idea.project_id, idea.hypothesis_id, user_id)

        payload = self._generator.generate(
            context,
            idea,
            content_type,
            content_goal=content_goal,
            funnel_stage=funnel_stage,
            special_requirements=special_requirements,
            language_override=language,
            model=model,
        )
        draft = Draft(
            id=uuid.uuid4().hex,
            project_id=idea.project_id,
            hypothesis_id=idea.hypothesis_id,
            idea_id=idea.id,
            content_type=content_type,
            title=payload.title,
            summary=payload.summary,
            body=payload.body,
            structure=payload.structure,
            model=payload.model,
        )
        self._repository.save_draft(draft)
        logger.info("Saved draft %s for idea %s", draft.id, idea.id)
        return draft

    def refine(
        self,
        draft_id: str,
        instructions: str,
        *,
        user_id: str | None = None,
        cta_url: str | None = None,
        cta_text: str | None = None,
        model: str | None = None,
    ) -> Draft:
        """Refine a persisted draft in place and save the replacement."""
        draft = self._repository.get_draft(draft_id)
        if draft is None:
            raise NotFoundError(f"Draft not found: {draft_id}")
        context = self._assembler.load(draft.project_id, draft.hypothesis_id, user_id)

        result = self._refiner.refine(
            draft,
            instructions,
            cta_url=cta_url,
            cta_text=cta_text,
            language=context.language,
            model=model,
        )
        updated = apply_refinement(draft, result)
        self._repository.save_draft(updated)
        return updated
