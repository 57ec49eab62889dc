from typing import Any, List

from pydantic import Field

from blogkit.models.post import Post


class PostResponse(Post):
    """A rendered post together with the JSON-LD records for its page."""

    structured_data: List[Any] = Field(
        alias="structuredData",
        description=(
            "Either the post's schema.json override verbatim, or a single "
            "auto-derived schema.org Article record."
        ),
    )
