"""Front matter extraction: header/body split, date normalisation and reading time."""

import logging
import math
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from blogkit.exceptions import FrontMatterError
from blogkit.models.post import PostMeta

logger = logging.getLogger(__name__)

# Average adult silent-reading speed used for the reading-time estimate.
WORDS_PER_MINUTE = 200

# A header block opens on the very first line with ``---`` and closes with the
# next ``---`` (or YAML's ``...``) line.
_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps impossible timestamps (``2024-02-30``) as strings."""

    def construct_yaml_timestamp(self, node):
        try:
            return super().construct_yaml_timestamp(node)
        except ValueError:
            return self.construct_scalar(node)


_FrontMatterLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", _FrontMatterLoader.construct_yaml_timestamp
)


def split_front_matter(raw: str) -> Tuple[Dict[str, Any], str]:
    """Split *raw* into its parsed YAML header mapping and the body text.

    Documents without a header yield an empty mapping and the full text.

    Raises:
        FrontMatterError: the header block exists but is not valid YAML.
    """
    raw = raw.lstrip("\ufeff")
    match = _FRONT_MATTER_RE.match(raw)
    if not match:
        return {}, raw

    try:
        data = yaml.load(match.group(1), Loader=_FrontMatterLoader)
    except yaml.YAMLError as exc:
        raise FrontMatterError(
            "Invalid front matter", details={"error": str(exc)}
        ) from exc

    if not isinstance(data, dict):
        data = {}
    return data, raw[match.end():]


def _parse_date(value: Any) -> Optional[date]:
    # YAML already turns bare ``2024-01-15`` values into date objects.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def normalize_date(value: Any, mtime: float) -> str:
    """Return *value* as an ISO ``YYYY-MM-DD`` string.

    Missing or unparsable values fall back to the UTC calendar date of the
    file's last-modified timestamp *mtime*; this never raises.
    """
    parsed = _parse_date(value)
    if parsed is None:
        fallback = datetime.fromtimestamp(mtime, tz=timezone.utc).date()
        logger.debug("Unusable date %r, falling back to file mtime %s", value, fallback)
        return fallback.isoformat()
    return parsed.isoformat()


def reading_minutes(body: str) -> int:
    """Estimated reading time of the unrendered *body*, rounded up to whole minutes."""
    words = len(body.split())
    return math.ceil(words / WORDS_PER_MINUTE)


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return _text(value)


def _keywords(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [_text(item) for item in value if item is not None]
    return [_text(value)]


def extract_metadata(
    raw: str,
    default_author: str,
    mtime: float,
    slug: str = "",
) -> Tuple[PostMeta, str]:
    """Build the normalized :class:`PostMeta` for *raw* and return it with the body.

    Args:
        raw:            Full document text (header + body).
        default_author: Author used when the header omits one.
        mtime:          Last-modified timestamp of the source, for the date fallback.
        slug:           Slug used when the header omits one (the post's directory name).
    """
    data, body = split_front_matter(raw)

    meta = PostMeta(
        title=_text(data.get("title")),
        description=_text(data.get("description")),
        slug=_text(data.get("slug"), slug) or slug,
        date=normalize_date(data.get("date"), mtime),
        author=_text(data.get("author"), default_author) or default_author,
        reading_minutes=reading_minutes(body),
        keywords=_keywords(data.get("keywords")),
        image=_optional_text(data.get("image")),
        image_alt=_optional_text(data.get("imageAlt")),
    )
    return meta, body


def parse_document(path: Path, default_author: str, slug: str = "") -> Tuple[PostMeta, str]:
    """Read the document at *path* and extract its metadata and body.

    IO failures (missing file, permissions, bad encoding) propagate.
    """
    raw = path.read_text(encoding="utf-8")
    mtime = path.stat().st_mtime
    return extract_metadata(raw, default_author, mtime, slug or path.parent.name)
