"""JSON-LD structured data: per-post ``schema.json`` overrides and the Article fallback."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from blogkit.models.post import Post, PostMeta

logger = logging.getLogger(__name__)


def load_schema_override(path: Path) -> Optional[List[Any]]:
    """Load the structured-data override at *path*.

    A single JSON object is wrapped in a list and an array is returned
    verbatim. A missing file gives ``None``; so does a malformed one, which
    is logged and otherwise ignored so the auto-derived record is used.
    """
    if not path.is_file():
        return None

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring malformed schema override %s: %s", path, exc)
        return None

    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        return [raw]

    logger.warning(
        "Ignoring schema override %s: expected an object or array, got %s",
        path,
        type(raw).__name__,
    )
    return None


def article_structured_data(
    post: PostMeta, site_url: str, publisher_name: str
) -> List[Dict[str, Any]]:
    """Return the single schema.org ``Article`` record derived from *post*."""
    site_url = site_url.rstrip("/")
    article: Dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "Article",
        "headline": post.title,
        "description": post.description,
        "datePublished": post.date,
        "author": {"@type": "Organization", "name": post.author},
        "publisher": {"@type": "Organization", "name": publisher_name, "url": site_url},
        "mainEntityOfPage": {"@type": "WebPage", "@id": f"{site_url}/blog/{post.slug}"},
    }
    if post.image:
        article["image"] = f"{site_url}{post.image}"
    return [article]


def resolve_structured_data(post: Post, site_url: str, publisher_name: str) -> List[Any]:
    """The post's override when it has one, else the auto-derived Article record."""
    if post.schema_override is not None:
        return post.schema_override
    return article_structured_data(post, site_url, publisher_name)
