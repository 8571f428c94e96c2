"""Resolution of the active WordPress connection."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from seo_agent.config import WordPressSectionConfig
from seo_agent.integrations.wordpress import WordPressConfig
from seo_agent.publishing.models import CmsConnection, CmsSettings

logger = logging.getLogger(__name__)

ConnectionResolver = Callable[[], CmsConnection | None]


class ConnectionRepository(Protocol):
    def get_connection(self) -> CmsConnection | None: ...


def make_connection_resolver(
    wordpress: WordPressSectionConfig,
    repository: ConnectionRepository,
) -> ConnectionResolver:
    """Prefer credentials from config/env, then the persisted connection.

    Configured credentials keep the persisted connection's publishing
    settings when one exists.
    """

    def resolve() -> CmsConnection | None:
        stored = repository.get_connection()
        if wordpress.is_configured:
            return CmsConnection(
                base_url=wordpress.base_url.rstrip("/"),
                username=wordpress.username,
                app_password=wordpress.app_password,
                settings=stored.settings if stored else CmsSettings(),
            )
        if stored is not None:
            return stored.model_copy(update={"base_url": stored.base_url.rstrip("/")})
        logger.debug("No WordPress connection configured")
        return None

    return resolve


def to_client_config(connection: CmsConnection, timeout: int = 30) -> WordPressConfig:
    return WordPressConfig(
        base_url=connection.base_url,
        username=connection.username,
        app_password=connection.app_password,
        timeout=timeout,
    )
