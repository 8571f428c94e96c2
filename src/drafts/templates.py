"""Keyword-based detection of the article template that fits an idea."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel

from seo_agent.ideas.models import BacklogIdea


class TemplateType(StrEnum):
    ONBOARDING = "onboarding"
    TRIGGER = "trigger"
    PAIN_POINT = "pain_point"
    FEATURE = "feature"
    FAQ = "faq"
    SOLUTION = "solution"
    BENEFIT = "benefit"
    TUTORIAL = "tutorial"
    COMPARISON = "comparison"
    CASE_STUDY = "case_study"
    INFO = "info"
    GENERAL = "general"


class TemplateDetection(BaseModel):
    type: TemplateType
    confidence: str
    reasoning: str


# (type, idea category that forces it, keyword pattern, confidence); first match wins
_RULES: list[tuple[TemplateType, str | None, re.Pattern[str], str]] = [
    (
        TemplateType.ONBOARDING,
        None,
        re.compile(r"onboarding|getting started|first steps|quick start", re.I),
        "high",
    ),
    (TemplateType.TRIGGER, "TRIGGER", re.compile(r"\btrigger", re.I), "high"),
    (
        TemplateType.PAIN_POINT,
        "PAIN",
        re.compile(r"\bpain|challenge|problem|\bissue", re.I),
        "high",
    ),
    (TemplateType.FEATURE, "FEATURE", re.compile(r"feature|how .*works", re.I), "high"),
    (TemplateType.FAQ, "FAQ", re.compile(r"\bfaq\b|question", re.I), "high"),
    (TemplateType.SOLUTION, None, re.compile(r"solution|service", re.I), "medium"),
    (TemplateType.BENEFIT, "BENEFIT", re.compile(r"benefit|advantage", re.I), "medium"),
    (TemplateType.TUTORIAL, None, re.compile(r"tutorial|how to|guide", re.I), "medium"),
    (TemplateType.COMPARISON, None, re.compile(r"comparison|compare|\bvs\.?\b", re.I), "medium"),
    (TemplateType.CASE_STUDY, None, re.compile(r"case study|success story", re.I), "medium"),
]


def detect_template_type(idea: BacklogIdea) -> TemplateDetection:
    """Pick the article template for an idea from its category and wording."""
    text = f"{idea.title} {idea.description}"
    for template, category, pattern, confidence in _RULES:
        if category is not None and idea.category == category:
            return TemplateDetection(
                type=template,
                confidence=confidence,
                reasoning=f"Idea category is {category}",
            )
        if pattern.search(text):
            return TemplateDetection(
                type=template,
                confidence=confidence,
                reasoning=f"Matched {template} keywords in title/description",
            )
    if idea.category == "INFO":
        return TemplateDetection(
            type=TemplateType.INFO,
            confidence="medium",
            reasoning="Idea category is INFO",
        )
    return TemplateDetection(
        type=TemplateType.GENERAL,
        confidence="low",
        reasoning="No specific type detected, using general template",
    )
