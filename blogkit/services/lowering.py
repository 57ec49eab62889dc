"""Lowering: Markdown tree -> HTML element tree.

Every :class:`NodeKind` has exactly one rule in ``_RULES``; the table is
checked for completeness at import time so a new node kind cannot silently
fall through.

Raw HTML is not escaped here. It is parsed into real elements so that the
sanitizer, which runs next, can inspect it node by node.
"""

from typing import Callable, Dict, List, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement

from blogkit.models.ast import MdNode, NodeKind
from blogkit.services.sanitizer import new_fragment, parse_fragment
from blogkit.services.serializer import serialize_node

Rule = Callable[[MdNode, BeautifulSoup], List[PageElement]]

FOOTNOTE_LABEL_ID = "footnote-label"
_ID_PREFIX = "user-content-"


def lower(ast: MdNode) -> BeautifulSoup:
    """Lower *ast* into a fresh fragment container."""
    soup = new_fragment()
    for element in _lower(ast, soup):
        soup.append(element)
    return soup


def _lower(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return _RULES[node.kind](node, soup)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _newline() -> NavigableString:
    return NavigableString("\n")


def _join(tag: Tag, groups: Sequence[List[PageElement]], wrap: bool = True) -> Tag:
    """Append *groups* to *tag*, separated (and wrapped) by newline text nodes."""
    if not groups:
        return tag
    if wrap:
        tag.append(_newline())
    for index, group in enumerate(groups):
        if index:
            tag.append(_newline())
        for element in group:
            tag.append(element)
    if wrap:
        tag.append(_newline())
    return tag


def _append_blocks(tag: Tag, children: List[MdNode], soup: BeautifulSoup) -> Tag:
    return _join(tag, [_lower(child, soup) for child in children])


def _append_inlines(tag: Tag, children: List[MdNode], soup: BeautifulSoup) -> Tag:
    """Append lowered inline *children* to *tag*.

    Inline raw HTML usually arrives split over several nodes (``<b>``, text,
    ``</b>``), so a run containing any is serialized and re-parsed as one piece
    of markup, which lets the opening and closing tags pair up.
    """
    if any(child.kind == NodeKind.RAW_INLINE for child in children):
        parts: List[str] = []
        for child in children:
            if child.kind == NodeKind.RAW_INLINE:
                parts.append(child.value)
            else:
                parts.extend(serialize_node(element) for element in _lower(child, soup))
        elements: List[PageElement] = list(parse_fragment("".join(parts)).contents)
    else:
        elements = [element for child in children for element in _lower(child, soup)]

    for element in elements:
        tag.append(element)
    return tag


def _raw(markup: str) -> List[PageElement]:
    return list(parse_fragment(markup).contents)


def _fnref_id(node: MdNode) -> str:
    suffix = f"-{node.ref_index + 1}" if node.ref_index else ""
    return f"{_ID_PREFIX}fnref-{node.number}{suffix}"


# ---------------------------------------------------------------------------
# Block rules
# ---------------------------------------------------------------------------


def _root(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    elements: List[PageElement] = []
    for index, child in enumerate(node.children):
        if index:
            elements.append(_newline())
        elements.extend(_lower(child, soup))
    return elements


def _heading(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    level = min(max(node.level, 1), 6)
    return [_append_inlines(soup.new_tag(f"h{level}"), node.children, soup)]


def _paragraph(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return [_append_inlines(soup.new_tag("p"), node.children, soup)]


def _list(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    tag = soup.new_tag("ol" if node.ordered else "ul")
    if node.ordered and node.start not in (None, 1):
        tag["start"] = str(node.start)
    if any(item.checked is not None for item in node.children):
        tag["class"] = ["contains-task-list"]

    groups = []
    for item in node.children:
        if item.kind == NodeKind.LIST_ITEM:
            groups.append([_list_item_element(item, soup, tight=node.tight)])
        else:
            groups.append(_lower(item, soup))
    return [_join(tag, groups)]


def _list_item(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return [_list_item_element(node, soup, tight=False)]


def _list_item_element(node: MdNode, soup: BeautifulSoup, tight: bool) -> Tag:
    li = soup.new_tag("li")

    if tight:
        # Paragraphs of tight lists are unwrapped into the item itself.
        for index, child in enumerate(node.children):
            if index:
                li.append(_newline())
            if child.kind == NodeKind.PARAGRAPH:
                _append_inlines(li, child.children, soup)
            else:
                for element in _lower(child, soup):
                    li.append(element)
        if node.children and node.children[-1].kind != NodeKind.PARAGRAPH:
            li.append(_newline())
    else:
        _append_blocks(li, node.children, soup)

    if node.checked is not None:
        li["class"] = ["task-list-item"]
        checkbox = soup.new_tag("input", attrs={"type": "checkbox", "disabled": ""})
        if node.checked:
            checkbox["checked"] = ""
        _insert_checkbox(li, checkbox)
    return li


def _insert_checkbox(li: Tag, checkbox: Tag) -> None:
    target = li
    for child in li.contents:
        if isinstance(child, NavigableString) and not child.strip():
            continue
        if isinstance(child, Tag) and child.name == "p":
            target = child
        break
    target.insert(0, NavigableString(" "))
    target.insert(0, checkbox)


def _container(name: str) -> Rule:
    def rule(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
        return [_append_blocks(soup.new_tag(name), node.children, soup)]

    return rule


def _table_cell(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    tag = soup.new_tag("th" if node.header else "td")
    if node.align:
        tag["align"] = node.align
    return [_append_inlines(tag, node.children, soup)]


def _code_block(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    pre = soup.new_tag("pre")
    code = soup.new_tag("code")
    if node.lang:
        code["class"] = [f"language-{node.lang}"]
    code.append(NavigableString(node.value))
    pre.append(code)
    return [pre]


def _thematic_break(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return [soup.new_tag("hr")]


def _raw_block(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return _raw(node.value.strip())


def _footnote_section(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    section = soup.new_tag(
        "section", attrs={"class": ["footnotes"], "data-footnotes": ""}
    )
    heading = soup.new_tag("h2", attrs={"id": FOOTNOTE_LABEL_ID, "class": ["sr-only"]})
    heading.append(NavigableString("Footnotes"))
    items = _append_blocks(soup.new_tag("ol"), node.children, soup)
    return [_join(section, [[heading], [items]])]


def _footnote_definition(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    li = soup.new_tag("li", attrs={"id": f"{_ID_PREFIX}fn-{node.number}"})
    return [_append_blocks(li, node.children, soup)]


# ---------------------------------------------------------------------------
# Inline rules
# ---------------------------------------------------------------------------


def _text(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return [NavigableString(node.value)]


def _wrapper(name: str) -> Rule:
    def rule(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
        return [_append_inlines(soup.new_tag(name), node.children, soup)]

    return rule


def _link(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    tag = soup.new_tag("a", attrs={"href": node.href})
    if node.title:
        tag["title"] = node.title
    return [_append_inlines(tag, node.children, soup)]


def _image(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    tag = soup.new_tag("img", attrs={"src": node.href, "alt": node.alt})
    if node.title:
        tag["title"] = node.title
    return [tag]


def _inline_code(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    tag = soup.new_tag("code")
    tag.append(NavigableString(node.value))
    return [tag]


def _line_break(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return [soup.new_tag("br"), _newline()]


def _raw_inline(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    return _raw(node.value)


def _footnote_reference(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    sup = soup.new_tag("sup")
    link = soup.new_tag(
        "a",
        attrs={
            "href": f"#{_ID_PREFIX}fn-{node.number}",
            "id": _fnref_id(node),
            "data-footnote-ref": "",
            "aria-describedby": FOOTNOTE_LABEL_ID,
        },
    )
    link.append(NavigableString(str(node.number)))
    sup.append(link)
    return [sup]


def _footnote_backref(node: MdNode, soup: BeautifulSoup) -> List[PageElement]:
    link = soup.new_tag(
        "a",
        attrs={
            "href": f"#{_fnref_id(node)}",
            "data-footnote-backref": "",
            "class": ["data-footnote-backref"],
            "aria-label": f"Back to reference {node.number}",
        },
    )
    link.append(NavigableString("↩"))
    return [NavigableString(" "), link]


_RULES: Dict[NodeKind, Rule] = {
    NodeKind.ROOT: _root,
    NodeKind.HEADING: _heading,
    NodeKind.PARAGRAPH: _paragraph,
    NodeKind.LIST: _list,
    NodeKind.LIST_ITEM: _list_item,
    NodeKind.TABLE: _container("table"),
    NodeKind.TABLE_HEAD: _container("thead"),
    NodeKind.TABLE_BODY: _container("tbody"),
    NodeKind.TABLE_ROW: _container("tr"),
    NodeKind.TABLE_CELL: _table_cell,
    NodeKind.CODE_BLOCK: _code_block,
    NodeKind.BLOCKQUOTE: _container("blockquote"),
    NodeKind.THEMATIC_BREAK: _thematic_break,
    NodeKind.RAW_BLOCK: _raw_block,
    NodeKind.FOOTNOTE_SECTION: _footnote_section,
    NodeKind.FOOTNOTE_DEFINITION: _footnote_definition,
    NodeKind.TEXT: _text,
    NodeKind.EMPHASIS: _wrapper("em"),
    NodeKind.STRONG: _wrapper("strong"),
    NodeKind.DELETE: _wrapper("del"),
    NodeKind.LINK: _link,
    NodeKind.IMAGE: _image,
    NodeKind.INLINE_CODE: _inline_code,
    NodeKind.LINE_BREAK: _line_break,
    NodeKind.RAW_INLINE: _raw_inline,
    NodeKind.FOOTNOTE_REFERENCE: _footnote_reference,
    NodeKind.FOOTNOTE_BACKREF: _footnote_backref,
}

_missing = set(NodeKind) - set(_RULES)
if _missing:
    raise RuntimeError(f"No lowering rule for node kinds: {sorted(k.value for k in _missing)}")
