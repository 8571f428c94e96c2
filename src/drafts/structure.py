"""Draft body assembly and section heading inspection."""

from __future__ import annotations

import re
from typing import Any

_H2_RE = re.compile(r"<h2\b[^>]*>(.*?)</h2\s*>", re.IGNORECASE | re.DOTALL)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def assemble_body(outline: list[Any]) -> str:
    """Join outline sections into an HTML body in outline order.

    Each section renders as ``<h2>heading</h2>`` followed by its body. A
    section with neither heading nor body is dropped.
    """
    sections: list[str] = []
    for item in outline:
        if not isinstance(item, dict):
            continue
        heading = _text(item.get("heading"))
        body = _text(item.get("body"))
        heading_html = f"<h2>{heading}</h2>" if heading else ""
        if heading_html and body:
            sections.append(f"{heading_html}\n\n{body}")
        elif heading_html or body:
            sections.append(heading_html or body)
    return "\n\n".join(sections)


def extract_headings(body: str) -> list[str]:
    """Return the text of every ``<h2>`` heading, in document order."""
    return [re.sub(r"<[^>]+>", "", match).strip() for match in _H2_RE.findall(body)]
