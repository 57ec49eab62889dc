"""Markdown -> sanitized, annotated HTML.

    parse -> lower -> sanitize -> heading ids -> heading links -> classify -> serialize

Each call owns every tree it builds, so concurrent calls share nothing.
"""

from blogkit.services.classifier import classify
from blogkit.services.headings import add_heading_ids, autolink_headings
from blogkit.services.lowering import lower
from blogkit.services.parser import parse_markdown
from blogkit.services.sanitizer import DEFAULT_SCHEMA, SanitizeSchema, sanitize_tree
from blogkit.services.serializer import serialize


def markdown_to_html(markdown: str, schema: SanitizeSchema = DEFAULT_SCHEMA) -> str:
    """Render *markdown* to an HTML fragment that is safe to inject as-is."""
    tree = lower(parse_markdown(markdown))
    sanitize_tree(tree, schema)
    add_heading_ids(tree)
    autolink_headings(tree)
    classify(tree)
    return serialize(tree)
