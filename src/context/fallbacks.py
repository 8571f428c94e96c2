"""Ordered field-fallback chains for records with schema drift.

Stored profiles and lean canvases were written by several generations of
the product, so the same concept lives under different keys. Each chain is a
tuple of accessor functions tried in order; the first non-empty value wins.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from seo_agent.context.models import BusinessModelSummary, CustomerProfile, Project

Accessor = Callable[[Mapping[str, Any]], Any]


def key(name: str) -> Accessor:
    """Accessor reading a top-level key."""

    def _get(record: Mapping[str, Any]) -> Any:
        return record.get(name)

    _get.__name__ = f"key[{name}]"
    return _get


def path(*names: str) -> Accessor:
    """Accessor reading a nested key, e.g. ``path("settings", "language")``."""

    def _get(record: Mapping[str, Any]) -> Any:
        current: Any = record
        for name in names:
            if not isinstance(current, Mapping):
                return None
            current = current.get(name)
        return current

    _get.__name__ = f"path[{'.'.join(names)}]"
    return _get


def _clean_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _clean_list(value: Any) -> tuple[str, ...]:
    """Coerce a stored list (of strings or named objects) into strings."""
    if isinstance(value, str):
        text = value.strip()
        return (text,) if text else ()
    if not isinstance(value, list | tuple):
        return ()
    items: list[str] = []
    for item in value:
        if isinstance(item, Mapping):
            item = item.get("name") or item.get("title") or item.get("channelType")
        text = _clean_text(item)
        if text:
            items.append(text)
    return tuple(items)


def first_text(record: Mapping[str, Any], chain: tuple[Accessor, ...]) -> str | None:
    """Return the first non-empty trimmed string produced by the chain."""
    for accessor in chain:
        text = _clean_text(accessor(record))
        if text:
            return text
    return None


def first_list(record: Mapping[str, Any], chain: tuple[Accessor, ...]) -> tuple[str, ...]:
    """Return the first non-empty list produced by the chain."""
    for accessor in chain:
        items = _clean_list(accessor(record))
        if items:
            return items
    return ()


# ── Customer profile chains ──────────────────────────────────────

PERSONA_CHAIN: tuple[Accessor, ...] = (
    key("persona"),
    key("personaName"),
    key("profileTitle"),
    key("profileName"),
    key("title"),
    key("name"),
    key("segment"),
    key("segmentName"),
)
PAINS_CHAIN = (key("userPains"), key("pains"))
GOALS_CHAIN = (key("userGoals"), key("goals"))
GAINS_CHAIN = (key("userGains"), key("gains"), key("benefits"))
PAIN_RELIEVERS_CHAIN = (key("painRelievers"),)
TRIGGERS_CHAIN = (key("triggers"), key("buyingTriggers"))
OBJECTIONS_CHAIN = (key("objections"),)
JTBD_CHAIN = (key("jtbd"), key("jobsToBeDone"))
JOURNEY_CHAIN = (key("customerJourney"), key("journey"))

# ── Lean canvas chains ───────────────────────────────────────────

PROBLEMS_CHAIN = (key("problems"), key("problem"))
SEGMENTS_CHAIN = (key("customerSegments"), key("segments"))
UVP_CHAIN = (key("uniqueProposition"), key("uniqueValueProposition"), key("uvp"))
SOLUTIONS_CHAIN = (key("solutions"), key("solution"))
ADVANTAGES_CHAIN = (key("unfairAdvantages"), key("unfairAdvantage"))
METRICS_CHAIN = (key("keyMetrics"), key("metrics"))
CHANNELS_CHAIN = (key("channels"),)

# ── Language chain ───────────────────────────────────────────────

PROFILE_LANGUAGE_CHAIN = (key("language"), key("locale"))
PROJECT_LANGUAGE_CHAIN = (
    key("language"),
    path("settings", "language"),
    path("info", "language"),
)

_ENGLISH = {"en", "eng", "english", "en-us", "en-gb", "английский"}
_RUSSIAN = {"ru", "rus", "russian", "ru-ru", "русский"}


def normalize_language(value: str | None) -> str | None:
    """Map common codes and spellings onto a display language name."""
    text = _clean_text(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in _ENGLISH:
        return "English"
    if lowered in _RUSSIAN:
        return "Russian"
    if text == lowered or text == text.upper():
        return text[0].upper() + text[1:].lower()
    return text


def resolve_language(
    profile: Mapping[str, Any] | None,
    project: Project,
    default: str,
) -> str:
    """Pick the content language: profile, then project, then the default."""
    if profile:
        found = normalize_language(first_text(profile, PROFILE_LANGUAGE_CHAIN))
        if found:
            return found
    found = normalize_language(first_text(project.model_dump(), PROJECT_LANGUAGE_CHAIN))
    return found or default


def build_customer_profile(raw: Mapping[str, Any]) -> CustomerProfile:
    """Normalize a raw person-profile record."""
    return CustomerProfile(
        persona=first_text(raw, PERSONA_CHAIN),
        pains=first_list(raw, PAINS_CHAIN),
        goals=first_list(raw, GOALS_CHAIN),
        gains=first_list(raw, GAINS_CHAIN),
        pain_relievers=first_list(raw, PAIN_RELIEVERS_CHAIN),
        triggers=first_list(raw, TRIGGERS_CHAIN),
        objections=first_list(raw, OBJECTIONS_CHAIN),
        jtbd=first_text(raw, JTBD_CHAIN),
        customer_journey=first_text(raw, JOURNEY_CHAIN),
        language=first_text(raw, (key("language"),)),
        locale=first_text(raw, (key("locale"),)),
    )


def build_business_model(raw: Mapping[str, Any]) -> BusinessModelSummary:
    """Normalize a raw lean canvas record."""
    return BusinessModelSummary(
        problems=first_list(raw, PROBLEMS_CHAIN),
        customer_segments=first_list(raw, SEGMENTS_CHAIN),
        unique_value_proposition=first_text(raw, UVP_CHAIN),
        solutions=first_list(raw, SOLUTIONS_CHAIN),
        unfair_advantages=first_list(raw, ADVANTAGES_CHAIN),
        key_metrics=first_list(raw, METRICS_CHAIN),
        channels=first_list(raw, CHANNELS_CHAIN),
    )
