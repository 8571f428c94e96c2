"""Draft generation: context + backlog idea → structured article draft."""

from __future__ import annotations

import logging

from seo_agent.config import LLMSectionConfig
from seo_agent.context.models import ContextSnapshot
from seo_agent.drafts.models import ContentType, DraftPayload
from seo_agent.drafts.prompts import DRAFT_SYSTEM_PROMPT, build_draft_prompt
from seo_agent.drafts.structure import assemble_body
from seo_agent.drafts.templates import detect_template_type
from seo_agent.errors import IncompletePayloadError
from seo_agent.ideas.models import BacklogIdea
from seo_agent.llm import ChatClient, complete_with_fallback, parse_json_object

logger = logging.getLogger(__name__)


class DraftGenerator:
    """Turns a backlog idea into a multi-section HTML draft."""

    def __init__(self, client: ChatClient, settings: LLMSectionConfig | None = None) -> None:
        self._client = client
        self._settings = settings or LLMSectionConfig()

    def generate(
        self,
        context: ContextSnapshot,
        idea: BacklogIdea,
        content_type: ContentType = ContentType.ARTICLE,
        *,
        content_goal: str | None = None,
        funnel_stage: str | None = None,
        special_requirements: str | None = None,
        language_override: str | None = None,
        model: str | None = None,
    ) -> DraftPayload:
        """Generate a draft for an idea.

        The requested model is tried first; if it fails the default model is
        tried exactly once before the error propagates.

        Raises:
            ContractError: Empty, non-JSON or incomplete response.
            LLMError: Both model attempts failed.
        """
        language = (language_override or "").strip() or context.language
        detection = detect_template_type(idea)
        logger.debug(
            "Draft template for idea %s: %s (%s)",
            idea.id,
            detection.type,
            detection.reasoning,
        )

        prompt = build_draft_prompt(
            context,
            idea,
            content_type,
            detection.type,
            language,
            content_goal=content_goal,
            funnel_stage=funnel_stage,
            special_requirements=special_requirements,
        )
        raw, used_model = complete_with_fallback(
            self._client,
            system=DRAFT_SYSTEM_PROMPT,
            prompt=prompt,
            model=model,
            default_model=self._settings.default_model,
            settings=self._settings.drafts,
            label="draft",
        )
        payload = parse_json_object(raw, label="draft")

        title = payload.get("title")
        summary = payload.get("summary")
        outline = payload.get("outline")
        missing = [
            name
            for name, value in (("title", title), ("summary", summary))
            if not isinstance(value, str) or not value.strip()
        ]
        if not isinstance(outline, list) or not outline:
            missing.append("outline")
        if missing:
            raise IncompletePayloadError(f"Draft response missing {', '.join(missing)}")

        body = assemble_body(outline)
        if not body:
            raise IncompletePayloadError("Draft outline has no usable sections")

        logger.info("Generated draft for idea %s using %s", idea.id, used_model)
        return DraftPayload(
            title=title.strip(),
            summary=summary.strip(),
            body=body,
            structure=payload,
            model=used_model,
        )
