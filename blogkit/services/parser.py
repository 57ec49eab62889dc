"""Markdown parser: GitHub-flavoured Markdown text -> :class:`MdNode` tree.

markdown-it-py does the tokenising (CommonMark + tables, strikethrough,
autolinked URLs and footnotes); this module folds its ``SyntaxTreeNode`` view
into our own closed set of node kinds and adds task-list items on top.

Raw HTML is kept as ``RAW_BLOCK`` / ``RAW_INLINE`` nodes and is *not* escaped
here: policing it is the sanitizer's job.
"""

import re
from typing import List, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.footnote import footnote_plugin

from blogkit.models.ast import MdNode, NodeKind

# ``[ ]`` / ``[x]`` at the very start of a list item's first paragraph
_TASK_RE = re.compile(r"^\[([ xX])\](?=\s|$)[ \t]?")

_ALIGN_RE = re.compile(r"text-align\s*:\s*(left|center|right)", re.IGNORECASE)

# Container tokens whose children are block nodes
_BLOCK_CONTAINERS = {
    "blockquote": NodeKind.BLOCKQUOTE,
    "table": NodeKind.TABLE,
    "thead": NodeKind.TABLE_HEAD,
    "tbody": NodeKind.TABLE_BODY,
    "tr": NodeKind.TABLE_ROW,
    "footnote_block": NodeKind.FOOTNOTE_SECTION,
}

# Inline tokens that simply wrap other inline content
_INLINE_WRAPPERS = {
    "em": NodeKind.EMPHASIS,
    "strong": NodeKind.STRONG,
    "s": NodeKind.DELETE,
}


def _make_parser() -> MarkdownIt:
    # A fresh instance per call keeps parsing free of shared mutable state.
    return MarkdownIt("gfm-like").use(footnote_plugin)


def parse_markdown(text: str) -> MdNode:
    """Parse *text* into a ``ROOT`` node.

    Never raises on malformed Markdown; constructs markdown-it cannot make
    sense of come through as literal text.
    """
    tokens = _make_parser().parse(text)
    tree = SyntaxTreeNode(tokens)
    return MdNode(kind=NodeKind.ROOT, children=_blocks(tree.children))


# ---------------------------------------------------------------------------
# Block level
# ---------------------------------------------------------------------------


def _blocks(nodes: List[SyntaxTreeNode]) -> List[MdNode]:
    result: List[MdNode] = []
    for node in nodes:
        result.extend(_block(node))
    return result


def _block(node: SyntaxTreeNode) -> List[MdNode]:
    kind = node.type

    if kind == "heading":
        level = int(node.tag[1]) if node.tag[1:].isdigit() else 1
        return [MdNode(kind=NodeKind.HEADING, level=level, children=_inline_children(node))]

    if kind == "paragraph":
        return [MdNode(kind=NodeKind.PARAGRAPH, children=_inline_children(node))]

    if kind in ("bullet_list", "ordered_list"):
        return [_list(node)]

    if kind == "list_item":
        return [_list_item(node)]

    if kind in ("th", "td"):
        return [_table_cell(node)]

    if kind in _BLOCK_CONTAINERS:
        return [MdNode(kind=_BLOCK_CONTAINERS[kind], children=_blocks(node.children))]

    if kind in ("fence", "code_block"):
        info = (node.info or "").strip()
        lang = info.split()[0] if info else ""
        return [MdNode(kind=NodeKind.CODE_BLOCK, lang=lang, value=node.content)]

    if kind == "hr":
        return [MdNode(kind=NodeKind.THEMATIC_BREAK)]

    if kind == "html_block":
        return [MdNode(kind=NodeKind.RAW_BLOCK, value=node.content)]

    if kind == "footnote":
        number = _meta_int(node, "id") + 1
        return [
            MdNode(
                kind=NodeKind.FOOTNOTE_DEFINITION,
                number=number,
                children=_blocks(node.children),
            )
        ]

    if kind == "footnote_anchor":
        return [_footnote_backref(node)]

    if kind == "inline":
        return [MdNode(kind=NodeKind.PARAGRAPH, children=_inlines(node.children))]

    # Anything else degrades to its content: children if it has any,
    # otherwise its literal source text.
    if node.children:
        return _blocks(node.children)
    if node.content:
        return [MdNode(kind=NodeKind.PARAGRAPH, children=[_text(node.content)])]
    return []


def _inline_children(node: SyntaxTreeNode) -> List[MdNode]:
    """Inline content of a paragraph-like block.

    Footnote back references are emitted by markdown-it as siblings of the
    ``inline`` child, so they are folded in here.
    """
    result: List[MdNode] = []
    for child in node.children:
        if child.type == "inline":
            result.extend(_inlines(child.children))
        elif child.type == "footnote_anchor":
            result.append(_footnote_backref(child))
        else:
            result.extend(_inline(child))
    return result


def _list(node: SyntaxTreeNode) -> MdNode:
    ordered = node.type == "ordered_list"
    start: Optional[int] = None
    if ordered:
        raw_start = node.attrs.get("start")
        try:
            start = int(raw_start) if raw_start is not None else 1
        except (TypeError, ValueError):
            start = 1

    # markdown-it hides every paragraph of a tight list
    paragraphs = [
        child
        for item in node.children
        for child in item.children
        if child.type == "paragraph"
    ]
    tight = bool(paragraphs[0].hidden) if paragraphs else True

    return MdNode(
        kind=NodeKind.LIST,
        ordered=ordered,
        start=start,
        tight=tight,
        children=_blocks(node.children),
    )


def _list_item(node: SyntaxTreeNode) -> MdNode:
    children = _blocks(node.children)
    checked: Optional[bool] = None

    if children and children[0].kind == NodeKind.PARAGRAPH:
        first = children[0]
        if first.children and first.children[0].kind == NodeKind.TEXT:
            match = _TASK_RE.match(first.children[0].value)
            if match:
                checked = match.group(1) in "xX"
                remainder = first.children[0].value[match.end():]
                if remainder:
                    first.children[0].value = remainder
                else:
                    first.children.pop(0)

    return MdNode(kind=NodeKind.LIST_ITEM, checked=checked, children=children)


def _table_cell(node: SyntaxTreeNode) -> MdNode:
    align = None
    match = _ALIGN_RE.search(str(node.attrs.get("style", "")))
    if match:
        align = match.group(1).lower()
    return MdNode(
        kind=NodeKind.TABLE_CELL,
        header=node.type == "th",
        align=align,
        children=_inline_children(node),
    )


# ---------------------------------------------------------------------------
# Inline level
# ---------------------------------------------------------------------------


def _inlines(nodes: List[SyntaxTreeNode]) -> List[MdNode]:
    result: List[MdNode] = []
    for node in nodes:
        result.extend(_inline(node))
    return result


def _inline(node: SyntaxTreeNode) -> List[MdNode]:
    kind = node.type

    if kind in ("text", "text_special"):
        return [_text(node.content)]

    if kind == "softbreak":
        return [_text("\n")]

    if kind == "hardbreak":
        return [MdNode(kind=NodeKind.LINE_BREAK)]

    if kind in _INLINE_WRAPPERS:
        return [MdNode(kind=_INLINE_WRAPPERS[kind], children=_inlines(node.children))]

    if kind == "link":
        return [
            MdNode(
                kind=NodeKind.LINK,
                href=str(node.attrs.get("href", "")),
                title=_optional_attr(node, "title"),
                children=_inlines(node.children),
            )
        ]

    if kind == "image":
        alt = "".join(child.text_content() for child in _inlines(node.children))
        return [
            MdNode(
                kind=NodeKind.IMAGE,
                href=str(node.attrs.get("src", "")),
                alt=alt or node.content,
                title=_optional_attr(node, "title"),
            )
        ]

    if kind == "code_inline":
        return [MdNode(kind=NodeKind.INLINE_CODE, value=node.content)]

    if kind == "html_inline":
        return [MdNode(kind=NodeKind.RAW_INLINE, value=node.content)]

    if kind == "footnote_ref":
        return [
            MdNode(
                kind=NodeKind.FOOTNOTE_REFERENCE,
                number=_meta_int(node, "id") + 1,
                ref_index=_meta_int(node, "subId"),
            )
        ]

    if node.children:
        return _inlines(node.children)
    return [_text(node.content)] if node.content else []


def _text(value: str) -> MdNode:
    return MdNode(kind=NodeKind.TEXT, value=value)


def _footnote_backref(node: SyntaxTreeNode) -> MdNode:
    return MdNode(
        kind=NodeKind.FOOTNOTE_BACKREF,
        number=_meta_int(node, "id") + 1,
        ref_index=_meta_int(node, "subId"),
    )


def _optional_attr(node: SyntaxTreeNode, name: str) -> Optional[str]:
    value = node.attrs.get(name)
    return str(value) if value else None


def _meta_int(node: SyntaxTreeNode, key: str) -> int:
    meta = node.meta or {}
    try:
        return int(meta.get(key, 0))
    except (TypeError, ValueError):
        return 0
