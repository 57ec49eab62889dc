"""Content directory access: one sub-directory per slug holding ``index.md``
and an optional ``schema.json``."""

import logging
from pathlib import Path
from typing import List, Optional

from blogkit.exceptions import FrontMatterError
from blogkit.models.post import Post, PostMeta
from blogkit.services.frontmatter import parse_document
from blogkit.services.pipeline import markdown_to_html
from blogkit.services.structured_data import load_schema_override

logger = logging.getLogger(__name__)

INDEX_FILE = "index.md"
SCHEMA_FILE = "schema.json"


def _is_safe_slug(slug: str) -> bool:
    return bool(slug) and slug not in (".", "..") and not any(
        char in slug for char in ("/", "\\", "\x00")
    )


def _has_index(entry: Path) -> bool:
    try:
        return (entry / INDEX_FILE).is_file()
    except OSError:
        return False


class BlogEngine:
    """Lists and renders the posts below *content_dir*."""

    def __init__(self, content_dir: Path, default_author: str = "Team") -> None:
        self.content_dir = Path(content_dir)
        self.default_author = default_author

    def list_slugs(self) -> List[str]:
        """Slugs of all posts, sorted by name.

        A missing or unreadable content directory yields an empty list.
        """
        try:
            entries = sorted(self.content_dir.iterdir())
        except OSError as exc:
            logger.info("Content directory %s not readable: %s", self.content_dir, exc)
            return []
        return [entry.name for entry in entries if _has_index(entry)]

    def list_posts_meta(self) -> List[PostMeta]:
        """Metadata of every post, newest first.

        Posts that cannot be read or whose front matter is malformed are
        skipped with a warning.
        """
        posts: List[PostMeta] = []
        for slug in self.list_slugs():
            path = self.content_dir / slug / INDEX_FILE
            try:
                meta, _ = parse_document(path, self.default_author, slug)
            except (OSError, UnicodeDecodeError, FrontMatterError) as exc:
                logger.warning("Skipping post %s – %s", slug, exc)
                continue
            posts.append(meta)
        return sorted(posts, key=lambda meta: meta.date, reverse=True)

    def get_post(self, slug: str) -> Optional[Post]:
        """Load and render the post *slug*, or return ``None`` if it does not exist.

        Errors reading an existing post (IO, encoding, malformed front matter)
        propagate to the caller.
        """
        if not _is_safe_slug(slug):
            return None
        path = self.content_dir / slug / INDEX_FILE
        if not path.is_file():
            return None

        meta, body = parse_document(path, self.default_author, slug)
        html = markdown_to_html(body)
        schema = load_schema_override(path.parent / SCHEMA_FILE)
        return Post(**meta.model_dump(), content=html, schema_override=schema)
