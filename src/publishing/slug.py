"""URL slug generation for published posts."""

from __future__ import annotations

import re
import unicodedata

_DROP_RE = re.compile(r"[^\w\s-]")
_SEP_RE = re.compile(r"[\s_-]+")


def slugify(text: str, fallback: str) -> str:
    """Lower-case, hyphen-separated slug; ``fallback`` when nothing is left.

    >>> slugify("Hello, World!", "draft-1")
    'hello-world'
    """
    normalized = unicodedata.normalize("NFKD", text or "").lower()
    slug = _SEP_RE.sub("-", _DROP_RE.sub("", normalized)).strip("-")
    return slug or fallback
