"""Allowlist-based HTML sanitizer.

Everything not explicitly permitted by a :class:`SanitizeSchema` is removed:

* elements whose tag is not allowed are dropped together with their whole
  subtree (a ``<script><b>safe</b></script>`` loses ``safe`` as well);
* comments, doctypes, CDATA sections and processing instructions are dropped;
* attributes not allowed for the element (or globally via ``"*"``) are dropped,
  as are values outside an attribute's fixed value set;
* URL-valued attributes are dropped unless their protocol is allowed.

The pass only ever removes things, so running it twice yields the same tree.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString


class Attr(str, Enum):
    """Attribute names the pipeline reads or writes itself."""

    HREF = "href"
    SRC = "src"
    CITE = "cite"
    LONGDESC = "longdesc"
    CLASS = "class"
    ID = "id"
    TITLE = "title"
    ALT = "alt"
    ALIGN = "align"
    START = "start"
    STYLE = "style"
    TYPE = "type"
    CHECKED = "checked"
    DISABLED = "disabled"
    ARIA_LABEL = "aria-label"
    ARIA_DESCRIBEDBY = "aria-describedby"
    ARIA_LABELLEDBY = "aria-labelledby"
    DATA_FOOTNOTES = "data-footnotes"
    DATA_FOOTNOTE_REF = "data-footnote-ref"
    DATA_FOOTNOTE_BACKREF = "data-footnote-backref"
    SRCSET = "srcset"
    ITEMTYPE = "itemtype"


class AttributeRule(NamedTuple):
    name: str
    # None permits any value; otherwise only these values survive. For
    # multi-valued attributes (``class``) each token is checked on its own.
    values: Optional[FrozenSet[str]] = None


def _rule(name, *values: str) -> AttributeRule:
    key = name.value if isinstance(name, Attr) else name
    return AttributeRule(key, frozenset(values) if values else None)


@dataclass(frozen=True)
class SanitizeSchema:
    tag_names: FrozenSet[str]
    attributes: Mapping[str, Tuple[AttributeRule, ...]] = field(default_factory=dict)
    protocols: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    def rules_for(self, tag_name: str) -> Dict[str, Optional[FrozenSet[str]]]:
        """Return the permitted attributes of *tag_name* mapped to their value sets."""
        rules: Dict[str, Optional[FrozenSet[str]]] = {}
        for rule in self.attributes.get("*", ()):
            rules[rule.name] = rule.values
        for rule in self.attributes.get(tag_name, ()):
            rules[rule.name] = rule.values
        return rules


# Attributes allowed on every permitted element
_GLOBAL_ATTRIBUTES = (
    "abbr", "accept", "accept-charset", "accesskey", "action", "align", "alt",
    "axis", "border", "cellpadding", "cellspacing", "char", "charoff", "charset",
    "checked", "clear", "colspan", "color", "cols", "compact", "coords",
    "datetime", "dir", "enctype", "frame", "hspace", "headers", "height",
    "hreflang", "for", "id", "ismap", "itemprop", "label", "lang", "maxlength",
    "media", "method", "multiple", "name", "noshade", "nowrap", "open", "prompt",
    "readonly", "rev", "rowspan", "rows", "rules", "scope", "selected", "shape",
    "size", "span", "start", "summary", "tabindex", "title", "usemap", "valign",
    "value", "width",
)

DEFAULT_SCHEMA = SanitizeSchema(
    tag_names=frozenset(
        {
            "a", "b", "blockquote", "br", "code", "dd", "del", "details", "div",
            "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i",
            "img", "input", "ins", "kbd", "li", "ol", "p", "picture", "pre", "q",
            "rp", "rt", "ruby", "s", "samp", "section", "source", "span",
            "strike", "strong", "sub", "summary", "sup", "table", "tbody", "td",
            "tfoot", "th", "thead", "tr", "tt", "ul", "var",
        }
    ),
    attributes={
        "*": tuple(_rule(name) for name in _GLOBAL_ATTRIBUTES),
        "a": (
            _rule(Attr.HREF),
            _rule(Attr.ARIA_DESCRIBEDBY),
            _rule(Attr.ARIA_LABEL),
            _rule(Attr.ARIA_LABELLEDBY),
            _rule(Attr.DATA_FOOTNOTE_REF),
            _rule(Attr.DATA_FOOTNOTE_BACKREF),
            _rule(Attr.CLASS, "anchor", "data-footnote-backref"),
        ),
        "blockquote": (_rule(Attr.CITE), _rule(Attr.CLASS)),
        "code": (_rule(Attr.CLASS),),
        "del": (_rule(Attr.CITE),),
        "ins": (_rule(Attr.CITE),),
        "q": (_rule(Attr.CITE),),
        "div": (_rule("itemscope"), _rule(Attr.ITEMTYPE)),
        "h2": (_rule(Attr.CLASS),),
        "img": (_rule(Attr.SRC), _rule(Attr.LONGDESC)),
        "input": (_rule(Attr.DISABLED), _rule(Attr.TYPE, "checkbox")),
        "li": (_rule(Attr.CLASS, "task-list-item"),),
        "ol": (_rule(Attr.CLASS, "contains-task-list"),),
        "ul": (_rule(Attr.CLASS),),
        "p": (_rule(Attr.CLASS),),
        "section": (_rule(Attr.CLASS, "footnotes"), _rule(Attr.DATA_FOOTNOTES)),
        "source": (_rule(Attr.SRCSET),),
        "th": (_rule(Attr.STYLE),),
        "td": (_rule(Attr.STYLE),),
    },
    protocols={
        # "" permits relative and scheme-less URLs ("#id", "/path", "img.png")
        Attr.HREF.value: frozenset({"http", "https", "irc", "ircs", "mailto", "xmpp", ""}),
        Attr.SRC.value: frozenset({"http", "https", ""}),
        Attr.CITE.value: frozenset({"http", "https", ""}),
        Attr.LONGDESC.value: frozenset({"http", "https", ""}),
        Attr.SRCSET.value: frozenset({"http", "https", ""}),
        Attr.ITEMTYPE.value: frozenset({"http", "https"}),
    },
)

# Browsers ignore ASCII whitespace and control characters inside URLs, so
# "java\tscript:" must be read as "javascript:".
_URL_IGNORED_RE = re.compile(r"[\x00-\x20\x7f]")


def protocol_of(url: str) -> str:
    """Return the lowercased scheme of *url*, or ``""`` when it has none.

    A colon only introduces a scheme when no ``/``, ``?`` or ``#`` precedes it.
    """
    value = _URL_IGNORED_RE.sub("", url)
    colon = value.find(":")
    if colon == -1:
        return ""
    for marker in "/?#":
        index = value.find(marker)
        if index != -1 and index < colon:
            return ""
    return value[:colon].lower()


def _urls_in(attribute: str, value: str) -> List[str]:
    """Split a URL-valued attribute into the URLs it holds."""
    if attribute == Attr.SRCSET:
        # "a.png 1x, b.png 2x": the URL is the first token of each candidate
        return [part.split()[0] for part in value.split(",") if part.strip()] or [""]
    if attribute == Attr.ITEMTYPE:
        return value.split() or [""]
    return [value]


def _sanitize_attributes(tag: Tag, schema: SanitizeSchema) -> None:
    rules = schema.rules_for(tag.name)
    for name in list(tag.attrs):
        key = name.lower()
        if key not in rules:
            del tag[name]
            continue

        value = tag[name]
        allowed_values = rules[key]
        if allowed_values is not None:
            if isinstance(value, list):
                kept = [token for token in value if token in allowed_values]
                if kept:
                    tag[name] = kept
                else:
                    del tag[name]
            elif value not in allowed_values:
                del tag[name]
            continue

        protocols = schema.protocols.get(key)
        if protocols is not None:
            text = " ".join(value) if isinstance(value, list) else str(value)
            if any(protocol_of(url) not in protocols for url in _urls_in(key, text)):
                del tag[name]


def sanitize_tree(root: Tag, schema: SanitizeSchema = DEFAULT_SCHEMA) -> Tag:
    """Sanitize every descendant of *root* in place and return *root*.

    *root* itself (usually the fragment's ``BeautifulSoup`` object) is only a
    container and is not checked.
    """
    stack = list(root.contents)
    while stack:
        node = stack.pop()
        if isinstance(node, Tag):
            if node.name not in schema.tag_names:
                node.decompose()
                continue
            _sanitize_attributes(node, schema)
            stack.extend(node.contents)
        elif isinstance(node, PreformattedString):
            # Comment, CData, Doctype, Declaration, ProcessingInstruction
            node.extract()
    return root


def new_fragment() -> BeautifulSoup:
    """Return an empty document used as the container of an HTML fragment."""
    return BeautifulSoup("", "html.parser")


def parse_fragment(markup: str) -> BeautifulSoup:
    """Parse an HTML *markup* fragment into a fresh, unsanitized container.

    lxml parses the fragment as the content of ``<body>``, the way a browser
    would, and the resulting nodes are moved into a bare container.
    """
    parsed = BeautifulSoup(f"<body>{markup}</body>", "lxml")
    fragment = new_fragment()
    body = parsed.body
    if body is not None:
        for child in list(body.contents):
            fragment.append(child.extract())
    return fragment


def sanitize(html: str, schema: SanitizeSchema = DEFAULT_SCHEMA) -> BeautifulSoup:
    """Parse *html* and return the sanitized fragment tree."""
    return sanitize_tree(parse_fragment(html), schema)
