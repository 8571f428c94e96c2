"""Unified configuration loaded from .seo-agent.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".seo-agent.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "seo-agent" / "config.toml"

DEFAULT_MODEL = "claude-sonnet-4-6"
DEFAULT_LANGUAGE = "English"


class CallSettings(BaseModel):
    """Sampling settings for one kind of LLM call."""

    temperature: float = 0.5
    max_tokens: int = 4096


class LLMSectionConfig(BaseModel):
    """[llm] section."""

    api_key: str = ""
    default_model: str = DEFAULT_MODEL
    timeout: int = 120
    ideas: CallSettings = Field(
        default_factory=lambda: CallSettings(temperature=0.7, max_tokens=1000)
    )
    drafts: CallSettings = Field(
        default_factory=lambda: CallSettings(temperature=0.5, max_tokens=4096)
    )
    refine: CallSettings = Field(
        default_factory=lambda: CallSettings(temperature=0.3, max_tokens=4000)
    )


class WordPressSectionConfig(BaseModel):
    """[wordpress] section."""

    base_url: str = ""
    username: str = ""
    app_password: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.username and self.app_password)


class StoreSectionConfig(BaseModel):
    """[store] section."""

    directory: str = "./.seo-agent"


class ContentSectionConfig(BaseModel):
    """[content] section."""

    default_language: str = DEFAULT_LANGUAGE


class SeoAgentConfig(BaseModel):
    """Top-level configuration model for the SEO pipeline."""

    llm: LLMSectionConfig = Field(default_factory=LLMSectionConfig)
    wordpress: WordPressSectionConfig = Field(default_factory=WordPressSectionConfig)
    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)
    content: ContentSectionConfig = Field(default_factory=ContentSectionConfig)

    @property
    def store_path(self) -> Path:
        return Path(self.store.directory).expanduser()


def load_config(path: str | Path | None = None) -> SeoAgentConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .seo-agent.toml in CWD
    3. ~/.config/seo-agent/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged SeoAgentConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = (
        SeoAgentConfig.model_validate(_deep_merge(SeoAgentConfig().model_dump(), data))
        if data
        else SeoAgentConfig()
    )
    return _apply_env_vars(config)


def merge_cli_overrides(config: SeoAgentConfig, **cli_kwargs: object) -> SeoAgentConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only values that are not None override the loaded config.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_dir": ("store", "directory"),
        "model": ("llm", "default_model"),
        "language": ("content", "default_language"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return SeoAgentConfig.model_validate(data)


def _deep_merge(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    """Overlay ``override`` onto ``base``, recursing into nested tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: SeoAgentConfig) -> SeoAgentConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "ANTHROPIC_API_KEY": ("llm", "api_key"),
        "SEO_AGENT_MODEL": ("llm", "default_model"),
        "SEO_AGENT_STORE_DIR": ("store", "directory"),
        "SEO_AGENT_LANGUAGE": ("content", "default_language"),
        "WORDPRESS_BASE_URL": ("wordpress", "base_url"),
        "WORDPRESS_USERNAME": ("wordpress", "username"),
        "WORDPRESS_APP_PASSWORD": ("wordpress", "app_password"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    timeout_raw = os.environ.get("SEO_AGENT_LLM_TIMEOUT")
    if timeout_raw is not None:
        try:
            data["llm"]["timeout"] = int(timeout_raw)
        except ValueError:
            logger.warning("Ignoring non-integer SEO_AGENT_LLM_TIMEOUT=%r", timeout_raw)

    return SeoAgentConfig.model_validate(data)
