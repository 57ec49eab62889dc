"""Read-only endpoints serving rendered posts and their metadata."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from blogkit.config import Settings, get_settings
from blogkit.dependencies import get_engine
from blogkit.models.post import PostMeta
from blogkit.models.response import PostResponse
from blogkit.services.engine import BlogEngine
from blogkit.services.structured_data import resolve_structured_data

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


def _rate_limit() -> str:
    return get_settings().rate_limit


@router.get("/posts", response_model=List[PostMeta], summary="List all posts, newest first")
@limiter.limit(_rate_limit)
def list_posts(request: Request, engine: BlogEngine = Depends(get_engine)) -> List[PostMeta]:
    """Return the normalized front matter of every post."""
    return engine.list_posts_meta()


@router.get("/posts/{slug}", response_model=PostResponse, summary="Render a single post")
@limiter.limit(_rate_limit)
def get_post(
    request: Request,
    slug: str,
    engine: BlogEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> PostResponse:
    """Return the post's metadata, sanitized HTML and JSON-LD structured data.

    ``content`` is pre-sanitized and must be injected without re-escaping.
    ``structuredData`` is the post's ``schema.json`` when it has a valid one,
    otherwise a single auto-derived ``Article`` record.
    """
    logger.info("Post requested", extra={"slug": slug})

    post = engine.get_post(slug)
    if post is None:
        logger.info("Post not found: %s", slug)
        raise HTTPException(status_code=404, detail="Post not found")

    structured_data = resolve_structured_data(post, settings.site_url, settings.publisher_name)
    return PostResponse(**post.model_dump(), structured_data=structured_data)
