"""Blog element classifier.

Recognises the prose conventions used by our writers and tags the matching
elements with CSS classes so the frontend can style them:

  - Key Takeaways box  -> ``blockquote.key-takeaways``
  - Callout boxes      -> ``blockquote.callout.callout--{variant}``
  - Table of contents  -> ``h2.toc-heading`` + ``ul.toc``
  - Citeable snippets  -> ``p.citeable-snippet`` (bold-led paragraph right after an H2)

Classes are only ever appended; no element or text is added, removed or
moved. The pass runs after sanitization, so the classes it adds are never
stripped.
"""

import re
from typing import Optional, Tuple

from bs4 import NavigableString, Tag
from bs4.element import PageElement

KEY_TAKEAWAYS_PREFIX = "Key Takeaways"

# Tried in order; the first match wins.
CALLOUT_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"^Key insight:", re.IGNORECASE), "callout--insight"),
    (re.compile(r"^Bottom line:", re.IGNORECASE), "callout--bottom-line"),
    (re.compile(r"^By the numbers:", re.IGNORECASE), "callout--stat"),
    (re.compile(r"^Pro tip:", re.IGNORECASE), "callout--tip"),
)

TOC_HEADING_TEXT = "contents"


def add_class(tag: Tag, *class_names: str) -> None:
    """Append *class_names* to the classes of *tag*, keeping existing ones."""
    existing = tag.get("class") or []
    if isinstance(existing, str):
        existing = existing.split()
    tag["class"] = [*existing, *class_names]


def _next_significant_sibling(tag: Tag) -> Optional[PageElement]:
    """Return the first following sibling that is not whitespace-only text."""
    for sibling in tag.next_siblings:
        if isinstance(sibling, NavigableString) and not sibling.strip():
            continue
        return sibling
    return None


def _classify_blockquote(tag: Tag) -> None:
    text = tag.get_text().strip()

    if text.startswith(KEY_TAKEAWAYS_PREFIX):
        add_class(tag, "key-takeaways")
        return

    for pattern, variant in CALLOUT_PATTERNS:
        if pattern.match(text):
            add_class(tag, "callout", variant)
            return


def _classify_h2(tag: Tag) -> None:
    sibling = _next_significant_sibling(tag)

    # Table of contents
    if tag.get_text().strip().lower() == TOC_HEADING_TEXT:
        add_class(tag, "toc-heading")
        if isinstance(sibling, Tag) and sibling.name == "ul":
            add_class(sibling, "toc")

    # Citeable snippet
    if isinstance(sibling, Tag) and sibling.name == "p" and sibling.contents:
        first = sibling.contents[0]
        if isinstance(first, Tag) and first.name == "strong":
            add_class(sibling, "citeable-snippet")


def classify(root: Tag) -> Tag:
    """Tag blog elements below *root* in one depth-first, document-order walk."""
    for tag in root.find_all(True):
        if tag.name == "blockquote":
            _classify_blockquote(tag)
        elif tag.name == "h2":
            _classify_h2(tag)
    return root
