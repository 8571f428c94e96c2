"""Shared fixtures: a scripted LLM client and a seeded JSON store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from seo_agent.context.models import Hypothesis, KeywordCluster, Project
from seo_agent.errors import LLMError
from seo_agent.store import SeoStore


class FakeChatClient:
    """ChatClient returning scripted responses in order.

    A response that is an exception instance is raised instead of returned.
    Every call is recorded in ``calls``.
    """

    def __init__(self, responses: list[object]) -> None:
        self._responses = list(responses)
        self.calls: list[dict] = []

    def complete(self, *, system, prompt, model, temperature, max_tokens) -> str:
        self.calls.append(
            {
                "system": system,
                "prompt": prompt,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if not self._responses:
            raise AssertionError("FakeChatClient ran out of scripted responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict | list):
            return json.dumps(response)
        return str(response)


@pytest.fixture
def fake_llm():
    """Factory: ``fake_llm(resp1, resp2, ...)`` builds a FakeChatClient."""

    def _make(*responses: object) -> FakeChatClient:
        return FakeChatClient(list(responses))

    return _make


@pytest.fixture
def llm_failure() -> LLMError:
    return LLMError("provider unavailable")


@pytest.fixture
def store(tmp_path: Path) -> SeoStore:
    """Store seeded with project P1 (owner U1), hypotheses H1/H2 and project P2/H9."""
    s = SeoStore(tmp_path)
    s.save_project(
        Project(
            id="P1",
            owner_id="U1",
            title="Acme Analytics",
            description="Self-serve product analytics for small SaaS teams",
            settings={"language": "en"},
        )
    )
    s.save_project(Project(id="P2", owner_id="U2", title="Other Project"))
    s.save_hypothesis(
        Hypothesis(
            id="H1",
            project_id="P1",
            title="Founders need retention insight",
            description="Early-stage founders cannot see why users churn",
        )
    )
    s.save_hypothesis(Hypothesis(id="H2", project_id="P1", title="Agencies want white-label"))
    s.save_hypothesis(Hypothesis(id="H9", project_id="P2", title="Foreign hypothesis"))
    s.save_customer_profile(
        "H1",
        {
            "personaName": "Seed-stage founder",
            "userPains": ["Churn is invisible until MRR drops", "Dashboards take weeks"],
            "goals": ["Find the aha moment"],
            "triggers": ["First churned enterprise customer"],
            "objections": ["We already use spreadsheets"],
        },
    )
    s.save_business_model(
        "H1",
        {
            "problems": ["No visibility into churn"],
            "uniqueProposition": "Retention answers in minutes",
            "solutions": ["Cohort explorer", "Churn alerts"],
            "channels": [{"channelType": "SEO"}],
        },
    )
    s.save_cluster(
        KeywordCluster(
            id="C1",
            project_id="P1",
            hypothesis_id="H1",
            title="Churn analysis",
            intent="informational",
            keywords=("churn analysis", "saas churn rate"),
        )
    )
    return s
