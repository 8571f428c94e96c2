"""LLM client interface and JSON-contract helpers.

Generators receive a ``ChatClient`` through their constructor. The default
implementation talks to the Anthropic API; tests pass a scripted fake.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol

from seo_agent.config import DEFAULT_MODEL, CallSettings
from seo_agent.errors import (
    EmptyResponseError,
    InvalidJSONError,
    LLMError,
    MissingAPIKeyError,
    ResponseShapeError,
)

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


class ChatClient(Protocol):
    """One system instruction plus one user message in, text out."""

    def complete(
        self,
        *,
        system: str,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


class AnthropicChatClient:
    """ChatClient backed by the Anthropic Messages API."""

    def __init__(self, api_key: str, *, timeout: int = 120) -> None:
        if not api_key.strip():
            raise MissingAPIKeyError("ANTHROPIC_API_KEY not set")
        import anthropic

        self._anthropic = anthropic
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    def complete(
        self,
        *,
        system: str,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        logger.debug("Calling Anthropic API model=%s", model)
        try:
            response = self._client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except self._anthropic.APIError as exc:
            raise LLMError(f"Anthropic API call failed ({model}): {exc}") from exc

        text_parts: list[str] = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
        return "\n".join(text_parts)


def strip_json_fences(text: str) -> str:
    """Strip markdown code fences from LLM JSON output.

    Handles the tendency to wrap JSON in ```json ... ``` blocks.
    """
    text = text.strip()
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    brace_start = text.find("{")
    bracket_start = text.find("[")

    candidates: list[tuple[int, str, str]] = []
    if brace_start != -1:
        candidates.append((brace_start, "{", "}"))
    if bracket_start != -1:
        candidates.append((bracket_start, "[", "]"))

    # Earliest delimiter wins
    candidates.sort()

    for start, _start_char, end_char in candidates:
        end = text.rfind(end_char)
        if end > start:
            return text[start : end + 1]

    return text


def parse_json_object(raw: str, *, label: str) -> dict[str, Any]:
    """Parse an LLM response that must be a single JSON object.

    Raises:
        EmptyResponseError: The response is blank.
        InvalidJSONError: The response is not JSON.
        ResponseShapeError: The JSON is not an object.
    """
    if not raw or not raw.strip():
        raise EmptyResponseError(f"Empty response from LLM ({label})")
    try:
        payload = json.loads(strip_json_fences(raw))
    except json.JSONDecodeError as exc:
        raise InvalidJSONError(f"LLM returned invalid JSON ({label}): {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseShapeError(
            f"LLM returned {type(payload).__name__}, expected a JSON object ({label})"
        )
    return payload


def resolve_model(requested: str | None, default_model: str = DEFAULT_MODEL) -> str:
    """Return the requested model when non-blank, otherwise the default."""
    if requested and requested.strip():
        return requested.strip()
    return default_model


def complete_with_fallback(
    client: ChatClient,
    *,
    system: str,
    prompt: str,
    model: str | None,
    default_model: str,
    settings: CallSettings,
    label: str,
) -> tuple[str, str]:
    """Call the LLM, retrying once with the default model on failure.

    Only ``LLMError`` triggers the retry. Contract problems in the response
    are the caller's concern.

    Returns:
        Tuple of (response text, model that produced it).
    """
    requested = resolve_model(model, default_model)
    try:
        text = client.complete(
            system=system,
            prompt=prompt,
            model=requested,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
        return text, requested
    except LLMError:
        if requested == default_model:
            raise
        logger.warning(
            "Model %s failed for %s, retrying with %s",
            requested,
            label,
            default_model,
            exc_info=True,
        )

    text = client.complete(
        system=system,
        prompt=prompt,
        model=default_model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    return text, default_model
