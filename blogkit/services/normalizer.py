"""Slug generation for heading anchors."""

import re
import unicodedata
from typing import Set

# Runs of anything that is not a letter or digit (underscore included)
_SEPARATOR_RE = re.compile(r"[\W_]+")

FALLBACK_SLUG = "section"


def slugify(text: str) -> str:
    """Return a lowercase, hyphen-separated slug for *text*.

    Runs of whitespace and punctuation collapse to a single hyphen and leading
    or trailing hyphens are dropped. Letters and digits of any script are kept,
    so the result may be empty only when *text* has none.
    """
    slug = unicodedata.normalize("NFKC", text).lower()
    return _SEPARATOR_RE.sub("-", slug).strip("-")


class HeadingSlugger:
    """Hands out slugs that are unique within one document.

    A repeated base slug gets ``-1``, ``-2``, … appended; reserved values
    (ids already present in the document) are never handed out.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def reserve(self, value: str) -> bool:
        """Mark *value* as taken; return False when it already was."""
        if value in self._seen:
            return False
        self._seen.add(value)
        return True

    def slug(self, text: str) -> str:
        base = slugify(text) or FALLBACK_SLUG
        candidate = base
        counter = 0
        while candidate in self._seen:
            counter += 1
            candidate = f"{base}-{counter}"
        self._seen.add(candidate)
        return candidate
