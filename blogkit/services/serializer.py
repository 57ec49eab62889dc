"""HTML serialization of the final fragment tree."""

from bs4 import NavigableString, Tag
from bs4.element import PageElement
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

# Escapes &, < and > in text and attribute values (quotes are handled when an
# attribute value is quoted) while leaving non-ASCII characters as they are.
# Void elements render as <br>, valueless attributes as bare names.
_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)


def serialize_node(node: PageElement) -> str:
    if isinstance(node, Tag):
        return node.decode(formatter=_FORMATTER)
    if isinstance(node, NavigableString):
        return node.output_ready(formatter=_FORMATTER)
    return ""


def serialize(root: Tag) -> str:
    """Render the children of *root* (a fragment container) to an HTML string."""
    return "".join(serialize_node(child) for child in root.contents)
