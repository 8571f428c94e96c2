"""In-place refinement of an existing draft."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from seo_agent.config import DEFAULT_LANGUAGE, LLMSectionConfig
from seo_agent.drafts.models import Draft, RefinedDraft
from seo_agent.drafts.prompts import REFINE_SYSTEM_PROMPT, build_refine_prompt
from seo_agent.drafts.structure import extract_headings
from seo_agent.errors import EmptyDraftError, MissingBodyError, StructureMismatchError
from seo_agent.llm import ChatClient, complete_with_fallback, parse_json_object

logger = logging.getLogger(__name__)


class DraftRefiner:
    """Edits a draft body per free-text instructions without losing sections."""

    def __init__(self, client: ChatClient, settings: LLMSectionConfig | None = None) -> None:
        self._client = client
        self._settings = settings or LLMSectionConfig()

    def refine(
        self,
        draft: Draft,
        instructions: str,
        *,
        cta_url: str | None = None,
        cta_text: str | None = None,
        language: str = DEFAULT_LANGUAGE,
        model: str | None = None,
    ) -> RefinedDraft:
        """Ask the LLM to edit the draft body in place.

        Raises:
            EmptyDraftError: The draft has no body; the LLM is not called.
            MissingBodyError: The response has no body.
            StructureMismatchError: The response changed the number of sections.
        """
        if not draft.body.strip():
            raise EmptyDraftError(f"Draft {draft.id} body is empty, nothing to refine")

        prompt = build_refine_prompt(
            draft.body,
            draft.summary,
            instructions,
            language,
            cta_url=(cta_url or "").strip() or None,
            cta_text=(cta_text or "").strip() or None,
        )
        raw, used_model = complete_with_fallback(
            self._client,
            system=REFINE_SYSTEM_PROMPT,
            prompt=prompt,
            model=model,
            default_model=self._settings.default_model,
            settings=self._settings.refine,
            label="refine",
        )
        payload = parse_json_object(raw, label="refine")

        body = payload.get("body")
        if not isinstance(body, str) or not body.strip():
            raise MissingBodyError("Refine response is missing 'body'")
        summary = payload.get("summary")

        before = extract_headings(draft.body)
        after = extract_headings(body)
        if len(before) != len(after):
            raise StructureMismatchError(
                f"Refined body has {len(after)} sections, original had {len(before)}"
            )

        logger.info("Refined draft %s using %s", draft.id, used_model)
        return RefinedDraft(
            body=body.strip(),
            summary=summary.strip() if isinstance(summary, str) and summary.strip() else None,
        )


def apply_refinement(draft: Draft, result: RefinedDraft) -> Draft:
    """Return the draft with body and summary fully replaced by the result."""
    return draft.model_copy(
        update={
            "body": result.body,
            "summary": result.summary if result.summary is not None else draft.summary,
            "updated_at": datetime.now(tz=UTC),
        }
    )
