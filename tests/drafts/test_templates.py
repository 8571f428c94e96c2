"""Tests for article template detection."""

from __future__ import annotations

import pytest

from seo_agent.drafts.templates import TemplateType, detect_template_type
from seo_agent.ideas import BacklogIdea, IdeaCategory


def _idea(title: str, category: IdeaCategory = IdeaCategory.INFO, description: str = ""):
    return BacklogIdea(
        id="I1",
        project_id="P1",
        hypothesis_id="H1",
        title=title,
        description=description,
        category=category,
        created_by="U1",
        updated_by="U1",
    )


@pytest.mark.parametrize(
    ("title", "category", "expected"),
    [
        ("Getting started with cohorts", IdeaCategory.PAIN, TemplateType.ONBOARDING),
        ("Anything at all", IdeaCategory.TRIGGER, TemplateType.TRIGGER),
        ("The churn problem nobody measures", IdeaCategory.GOAL, TemplateType.PAIN_POINT),
        ("Anything at all", IdeaCategory.FEATURE, TemplateType.FEATURE),
        ("Top questions about retention", IdeaCategory.GOAL, TemplateType.FAQ),
        ("How to build a retention dashboard", IdeaCategory.BENEFIT, TemplateType.BENEFIT),
        ("How to build a retention dashboard", IdeaCategory.GOAL, TemplateType.TUTORIAL),
        ("Mixpanel vs Amplitude", IdeaCategory.GOAL, TemplateType.COMPARISON),
        ("A success story from Berlin", IdeaCategory.GOAL, TemplateType.CASE_STUDY),
        ("Retention metrics glossary", IdeaCategory.INFO, TemplateType.INFO),
    ],
)
def test_detects_template(title, category, expected):
    assert detect_template_type(_idea(title, category)).type == expected


def test_description_is_considered():
    detection = detect_template_type(
        _idea("Retention", IdeaCategory.GOAL, description="A step-by-step tutorial")
    )
    assert detection.type == TemplateType.TUTORIAL


def test_general_fallback_is_low_confidence():
    detection = detect_template_type(_idea("Retention metrics glossary", IdeaCategory.GOAL))
    assert detection.type == TemplateType.GENERAL
    assert detection.confidence == "low"
