"""Pydantic models for the assembled SEO context snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Project(_Frozen):
    """A customer project; the root of ownership checks."""

    id: str
    owner_id: str
    title: str
    description: str = ""
    language: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    info: dict[str, Any] = Field(default_factory=dict)


class Hypothesis(_Frozen):
    """A business hypothesis that belongs to exactly one project."""

    id: str
    project_id: str
    title: str
    description: str = ""


class BusinessModelSummary(_Frozen):
    """Lean canvas excerpt normalized from the raw hypothesis core record."""

    problems: tuple[str, ...] = ()
    customer_segments: tuple[str, ...] = ()
    unique_value_proposition: str | None = None
    solutions: tuple[str, ...] = ()
    unfair_advantages: tuple[str, ...] = ()
    key_metrics: tuple[str, ...] = ()
    channels: tuple[str, ...] = ()


class CustomerProfile(_Frozen):
    """Ideal customer profile normalized across schema generations."""

    persona: str | None = None
    pains: tuple[str, ...] = ()
    goals: tuple[str, ...] = ()
    gains: tuple[str, ...] = ()
    pain_relievers: tuple[str, ...] = ()
    triggers: tuple[str, ...] = ()
    objections: tuple[str, ...] = ()
    jtbd: str | None = None
    customer_journey: str | None = None
    language: str | None = None
    locale: str | None = None


class KeywordCluster(_Frozen):
    """A group of related search keywords scoped to a hypothesis."""

    id: str
    project_id: str
    hypothesis_id: str
    title: str
    intent: str = "informational"
    keywords: tuple[str, ...] = ()


class ContextSnapshot(_Frozen):
    """Everything a generator needs to know about one hypothesis.

    Built fresh per request and never mutated afterwards.
    """

    project: Project
    hypothesis: Hypothesis
    business_model: BusinessModelSummary | None = None
    customer_profile: CustomerProfile | None = None
    clusters: tuple[KeywordCluster, ...] = ()
    language: str
