"""Fixtures for publishing tests: a connected store with a ready draft."""

from __future__ import annotations

import pytest

from seo_agent.drafts import ContentType, Draft
from seo_agent.publishing import CmsConnection, CmsSettings, HeroImageAsset

# 1x1 transparent PNG
PNG_DATA_URL = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.fixture
def png_data_url() -> str:
    return PNG_DATA_URL


@pytest.fixture
def connection() -> CmsConnection:
    return CmsConnection(
        base_url="https://blog.example.com",
        username="editor",
        app_password="secret",
        settings=CmsSettings(
            article_category_id=3,
            page_category_id=None,
            article_tag_ids=[7, 0, -1, 8],
            page_tag_ids=[11],
            page_post_type="landing",
            default_status="publish",
        ),
    )


@pytest.fixture
def draft(store) -> Draft:
    draft = Draft(
        id="D1",
        project_id="P1",
        hypothesis_id="H1",
        idea_id="I1",
        title="Spot Churn Early!",
        summary="Lead",
        body="<h2>One</h2><p>1</p>",
    )
    store.save_draft(draft)
    store.save_hero_image(HeroImageAsset(draft_id="D1", url=PNG_DATA_URL, alt_text="Chart"))
    return draft


@pytest.fixture
def page_draft(store) -> Draft:
    draft = Draft(
        id="D2",
        project_id="P1",
        hypothesis_id="H1",
        content_type=ContentType.LANDING_PAGE,
        title="Pricing",
        body="<h2>Plans</h2>",
    )
    store.save_draft(draft)
    store.save_hero_image(HeroImageAsset(draft_id="D2", url=PNG_DATA_URL))
    return draft
