from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostMeta(BaseModel):
    """Normalized front matter of one post."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    slug: str
    date: str  # always YYYY-MM-DD
    author: str
    reading_minutes: int = Field(default=0, ge=0, alias="readingMinutes")
    keywords: List[str] = Field(default_factory=list)
    image: Optional[str] = None
    image_alt: Optional[str] = Field(default=None, alias="imageAlt")


class Post(PostMeta):
    content: str  # sanitized HTML fragment, safe to inject without re-escaping
    schema_override: Optional[List[Any]] = Field(default=None, alias="schema", exclude=True)
