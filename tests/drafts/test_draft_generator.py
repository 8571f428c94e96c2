"""Tests for DraftGenerator: draft JSON contract, body assembly and fallback."""

from __future__ import annotations

import pytest

from seo_agent.config import LLMSectionConfig
from seo_agent.context import ContextAssembler
from seo_agent.drafts import ContentType, DraftGenerator
from seo_agent.errors import IncompletePayloadError, InvalidJSONError, LLMError, ResponseShapeError
from seo_agent.ideas import BacklogIdea, IdeaCategory

DRAFT_RESPONSE = {
    "title": "How to Spot Churn Before MRR Drops",
    "summary": "A practical early-warning system for churn.",
    "outline": [
        {"heading": "Why churn hides", "body": "<p>Lagging metrics.</p>"},
        {"heading": "Leading signals", "body": "<ul><li>Usage dips</li></ul>"},
        {"heading": "Next steps", "body": "<p>Start with cohorts.</p>"},
    ],
    "seo": {"keywords": ["churn"], "slug_hint": "spot-churn"},
}


@pytest.fixture
def context(store):
    return ContextAssembler(store).load("P1", "H1", "U1")


@pytest.fixture
def idea():
    return BacklogIdea(
        id="I1",
        project_id="P1",
        hypothesis_id="H1",
        title="Spotting churn early",
        description="Leading indicators of churn",
        category=IdeaCategory.PAIN,
        created_by="U1",
        updated_by="U1",
    )


class TestGenerate:
    def test_assembles_body_from_outline(self, fake_llm, context, idea):
        draft = DraftGenerator(fake_llm(DRAFT_RESPONSE)).generate(context, idea)

        assert draft.title == "How to Spot Churn Before MRR Drops"
        assert draft.summary == "A practical early-warning system for churn."
        assert draft.body.startswith("<h2>Why churn hides</h2>\n\n<p>Lagging metrics.</p>")
        assert draft.body.index("Leading signals") < draft.body.index("Next steps")
        assert draft.body.count("<h2>") == 3
        assert draft.structure["seo"]["slug_hint"] == "spot-churn"

    def test_prompt_contents(self, fake_llm, context, idea):
        client = fake_llm(DRAFT_RESPONSE)
        DraftGenerator(client).generate(
            context,
            idea,
            ContentType.WEBSITE_PAGE,
            content_goal="Book demos",
            special_requirements="Mention GDPR",
        )

        prompt = client.calls[0]["prompt"]
        assert "Content type: website_page" in prompt
        assert "Detected template type: pain_point" in prompt
        assert "Content goal / KPI: Book demos" in prompt
        assert "Additional requirements: Mention GDPR" in prompt
        assert "Funnel stage: Solution-aware" in prompt
        assert "Spotting churn early" in prompt
        assert "Language: English" in prompt

    @pytest.mark.parametrize("content_type", [ContentType.WEBSITE_PAGE, ContentType.LANDING_PAGE])
    def test_pages_get_page_blueprint(self, fake_llm, context, idea, content_type):
        client = fake_llm(DRAFT_RESPONSE)
        DraftGenerator(client).generate(context, idea, content_type)

        prompt = client.calls[0]["prompt"]
        assert "commercial website page, not a blog article" in prompt
        assert "hero" in prompt
        assert "- Churn analysis (informational): churn analysis, saas churn rate" in prompt
        assert "Page headline under 90 characters" in prompt
        assert "Name the pain precisely" not in prompt

    def test_articles_get_template_instructions(self, fake_llm, context, idea):
        client = fake_llm(DRAFT_RESPONSE)
        DraftGenerator(client).generate(context, idea, ContentType.ARTICLE)

        prompt = client.calls[0]["prompt"]
        assert "Name the pain precisely" in prompt
        assert "50-70 characters" in prompt
        assert "commercial website page" not in prompt

    def test_language_override(self, fake_llm, context, idea):
        client = fake_llm(DRAFT_RESPONSE)
        DraftGenerator(client).generate(context, idea, language_override="Russian")
        assert "Language: Russian" in client.calls[0]["prompt"]

    def test_uses_draft_call_settings(self, fake_llm, context, idea):
        client = fake_llm(DRAFT_RESPONSE)
        DraftGenerator(client).generate(context, idea)
        assert client.calls[0]["temperature"] == 0.5
        assert client.calls[0]["max_tokens"] == 4096


class TestContract:
    @pytest.mark.parametrize("missing", ["title", "summary", "outline"])
    def test_missing_required_field(self, fake_llm, context, idea, missing):
        response = {k: v for k, v in DRAFT_RESPONSE.items() if k != missing}
        with pytest.raises(IncompletePayloadError, match=missing):
            DraftGenerator(fake_llm(response)).generate(context, idea)

    def test_empty_outline(self, fake_llm, context, idea):
        with pytest.raises(IncompletePayloadError):
            DraftGenerator(fake_llm({**DRAFT_RESPONSE, "outline": []})).generate(context, idea)

    def test_non_object_payload(self, fake_llm, context, idea):
        with pytest.raises(ResponseShapeError):
            DraftGenerator(fake_llm('["not", "an", "object"]')).generate(context, idea)

    def test_non_json(self, fake_llm, context, idea):
        with pytest.raises(InvalidJSONError):
            DraftGenerator(fake_llm("I could not write that.")).generate(context, idea)


class TestModelFallback:
    def test_requested_model_used(self, fake_llm, context, idea):
        client = fake_llm(DRAFT_RESPONSE)
        draft = DraftGenerator(client).generate(context, idea, model="  custom-model ")
        assert draft.model == "custom-model"

    def test_blank_model_uses_default(self, fake_llm, context, idea):
        settings = LLMSectionConfig(default_model="house-model")
        client = fake_llm(DRAFT_RESPONSE)
        draft = DraftGenerator(client, settings).generate(context, idea, model="   ")
        assert draft.model == "house-model"
        assert client.calls[0]["model"] == "house-model"

    def test_retries_once_with_default(self, fake_llm, context, idea, llm_failure):
        settings = LLMSectionConfig(default_model="house-model")
        client = fake_llm(llm_failure, DRAFT_RESPONSE)

        draft = DraftGenerator(client, settings).generate(context, idea, model="custom-model")

        assert draft.model == "house-model"
        assert [c["model"] for c in client.calls] == ["custom-model", "house-model"]

    def test_second_failure_propagates(self, fake_llm, context, idea, llm_failure):
        settings = LLMSectionConfig(default_model="house-model")
        client = fake_llm(llm_failure, LLMError("still down"))

        with pytest.raises(LLMError, match="still down"):
            DraftGenerator(client, settings).generate(context, idea, model="custom-model")
        assert len(client.calls) == 2

    def test_default_model_failure_not_retried(self, fake_llm, context, idea, llm_failure):
        client = fake_llm(llm_failure)
        with pytest.raises(LLMError):
            DraftGenerator(client).generate(context, idea)
        assert len(client.calls) == 1
