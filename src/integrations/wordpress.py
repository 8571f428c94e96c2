"""WordPress integration: config and REST API client.

Talks to the ``/wp-json/wp/v2`` REST API with an application password over
HTTP Basic auth.
"""

from __future__ import annotations

import base64
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from pydantic import BaseModel

from seo_agent.errors import CmsError, CmsResponseError, CmsUnreachableError

logger = logging.getLogger(__name__)

REST_PREFIX = "/wp-json/wp/v2"
PAGE_SIZE = 100

# Built-in types that never hold publishable content
SYSTEM_POST_TYPES = frozenset(
    {
        "attachment",
        "nav_menu_item",
        "wp_block",
        "wp_template",
        "wp_template_part",
        "wp_global_styles",
        "wp_navigation",
        "wp_font_family",
        "wp_font_face",
    }
)


class WordPressConfig(BaseModel):
    """Connection settings for a WordPress site."""

    base_url: str = ""
    username: str = ""
    app_password: str = ""
    timeout: int = 30

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.username and self.app_password)


class MediaUpload(BaseModel):
    id: int
    url: str


class CreatedPost(BaseModel):
    id: int
    link: str = ""
    status: str = ""


class Taxonomy(BaseModel):
    """A category or tag term."""

    id: int
    name: str
    slug: str = ""


class PostType(BaseModel):
    slug: str
    name: str
    rest_base: str


def _require_id(data: Any, kind: str) -> int:
    try:
        return int(data["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise CmsResponseError(f"WordPress returned no usable {kind} id: {data!r:.200}") from exc


class WordPressClient:
    """Client for the WordPress REST API.

    Every method raises ``CmsError`` carrying status, reason and body when
    the site answers with a non-2xx status, ``CmsUnreachableError`` when the
    host cannot be reached and ``CmsResponseError`` when a success reply
    lacks the expected fields.
    """

    def __init__(self, config: WordPressConfig) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def _auth_header(self) -> str:
        token = base64.b64encode(
            f"{self.config.username}:{self.config.app_password}".encode()
        ).decode("ascii")
        return f"Basic {token}"

    def _open(self, req: urllib.request.Request) -> tuple[Any, dict[str, str]]:
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                raw = resp.read().decode("utf-8")
                headers = {k.lower(): v for k, v in resp.headers.items()}
        except urllib.error.HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
            raise CmsError(exc.code, str(exc.reason), body) from exc
        except (urllib.error.URLError, TimeoutError) as exc:
            reason = getattr(exc, "reason", exc)
            raise CmsUnreachableError(
                f"Cannot reach WordPress at {self.base_url}: {reason}"
            ) from exc
        try:
            return (json.loads(raw) if raw.strip() else {}), headers
        except json.JSONDecodeError as exc:
            raise CmsResponseError(f"WordPress returned invalid JSON: {exc}") from exc

    def _request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        query: dict[str, Any] | None = None,
    ) -> tuple[Any, dict[str, str]]:
        """Make an authenticated JSON request to the REST API."""
        url = f"{self.base_url}{REST_PREFIX}{path}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"

        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(
            url,
            data=body,
            method=method,
            headers={
                "Authorization": self._auth_header(),
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        return self._open(req)

    def _fetch_all_pages(self, path: str) -> list[dict]:
        """GET every page of a collection, following ``X-WP-TotalPages``."""
        items: list[dict] = []
        page = 1
        while True:
            data, headers = self._request("GET", path, query={"per_page": PAGE_SIZE, "page": page})
            if isinstance(data, list):
                items.extend(data)
            try:
                total_pages = int(headers.get("x-wp-totalpages", "1"))
            except ValueError:
                total_pages = 1
            if page >= total_pages:
                return items
            page += 1

    # ── Media ────────────────────────────────────────────────────

    def upload_media(
        self,
        filename: str,
        data: bytes,
        mime_type: str,
        alt_text: str | None = None,
    ) -> MediaUpload:
        """Upload a binary file to the media library.

        A failure to set the alt text afterwards is logged, not raised.
        """
        req = urllib.request.Request(
            f"{self.base_url}{REST_PREFIX}/media",
            data=data,
            method="POST",
            headers={
                "Authorization": self._auth_header(),
                "Content-Type": mime_type,
                "Content-Disposition": f'attachment; filename="{filename}"',
            },
        )
        media, _ = self._open(req)
        media_id = _require_id(media, "media")

        if alt_text:
            try:
                self._request("POST", f"/media/{media_id}", {"alt_text": alt_text})
            except (CmsError, CmsResponseError, CmsUnreachableError):
                logger.warning("Failed to set alt text on media %s", media_id, exc_info=True)

        url = media.get("source_url") or (media.get("guid") or {}).get("rendered", "")
        return MediaUpload(id=media_id, url=url)

    # ── Posts ────────────────────────────────────────────────────

    def create_post(
        self,
        title: str,
        content: str,
        *,
        post_type: str = "posts",
        status: str = "draft",
        excerpt: str | None = None,
        featured_media: int | None = None,
        slug: str | None = None,
        categories: list[int] | None = None,
        tags: list[int] | None = None,
    ) -> CreatedPost:
        """Create a post (or page, or custom type) and return its id and link."""
        post_data: dict[str, Any] = {
            "title": title,
            "content": content,
            "status": status or "draft",
        }
        if excerpt:
            post_data["excerpt"] = excerpt
        if featured_media:
            post_data["featured_media"] = featured_media
        if slug:
            post_data["slug"] = slug
        if categories:
            post_data["categories"] = categories
        if tags:
            post_data["tags"] = tags

        result, _ = self._request("POST", f"/{post_type or 'posts'}", post_data)
        return CreatedPost(
            id=_require_id(result, "post"),
            link=result.get("link", ""),
            status=result.get("status", ""),
        )

    # ── Discovery ────────────────────────────────────────────────

    def test_connection(self) -> None:
        """Verify the credentials with a cheap authenticated read.

        Raises:
            CmsError: The credentials were rejected or the site is unreachable.
        """
        self._request("GET", "/posts", query={"per_page": 1})

    def list_categories(self) -> list[Taxonomy]:
        return [Taxonomy.model_validate(c) for c in self._fetch_all_pages("/categories")]

    def list_tags(self) -> list[Taxonomy]:
        return [Taxonomy.model_validate(t) for t in self._fetch_all_pages("/tags")]

    def list_post_types(self) -> list[PostType]:
        """Return content post types, excluding system types."""
        data, _ = self._request("GET", "/types")
        types: list[PostType] = []
        for slug, info in (data or {}).items():
            if slug in SYSTEM_POST_TYPES or not isinstance(info, dict):
                continue
            rest_base = info.get("rest_base")
            if not rest_base:
                continue
            types.append(PostType(slug=slug, name=info.get("name", slug), rest_base=rest_base))
        return types
