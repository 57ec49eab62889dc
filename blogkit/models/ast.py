"""Markdown syntax tree produced by the parser and consumed by the lowering stage."""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    # Block kinds
    ROOT = "root"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_BODY = "table_body"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    CODE_BLOCK = "code_block"
    BLOCKQUOTE = "blockquote"
    THEMATIC_BREAK = "thematic_break"
    RAW_BLOCK = "raw_block"
    FOOTNOTE_SECTION = "footnote_section"
    FOOTNOTE_DEFINITION = "footnote_definition"
    # Inline kinds
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    DELETE = "delete"
    LINK = "link"
    IMAGE = "image"
    INLINE_CODE = "inline_code"
    LINE_BREAK = "line_break"
    RAW_INLINE = "raw_inline"
    FOOTNOTE_REFERENCE = "footnote_reference"
    FOOTNOTE_BACKREF = "footnote_backref"


INLINE_KINDS = frozenset(
    {
        NodeKind.TEXT,
        NodeKind.EMPHASIS,
        NodeKind.STRONG,
        NodeKind.DELETE,
        NodeKind.LINK,
        NodeKind.IMAGE,
        NodeKind.INLINE_CODE,
        NodeKind.LINE_BREAK,
        NodeKind.RAW_INLINE,
        NodeKind.FOOTNOTE_REFERENCE,
        NodeKind.FOOTNOTE_BACKREF,
    }
)

Alignment = Literal["left", "center", "right"]


class MdNode(BaseModel):
    """One node of the Markdown tree.

    Only the fields relevant to ``kind`` are populated; everything else keeps
    its default.
    """

    kind: NodeKind
    children: List["MdNode"] = Field(default_factory=list)

    # TEXT, INLINE_CODE, CODE_BLOCK, RAW_BLOCK, RAW_INLINE
    value: str = ""
    # HEADING
    level: int = 0
    # LIST
    ordered: bool = False
    start: Optional[int] = None
    tight: bool = False
    # LIST_ITEM: None for a plain item, True/False for a task-list item
    checked: Optional[bool] = None
    # TABLE_CELL
    header: bool = False
    align: Optional[Alignment] = None
    # CODE_BLOCK
    lang: str = ""
    # LINK, IMAGE
    href: str = ""
    title: Optional[str] = None
    alt: str = ""
    # FOOTNOTE_* nodes
    number: int = 0
    ref_index: int = 0

    @property
    def is_inline(self) -> bool:
        return self.kind in INLINE_KINDS

    def text_content(self) -> str:
        """Return the concatenated literal text below this node."""
        if self.kind in (NodeKind.TEXT, NodeKind.INLINE_CODE):
            return self.value
        if self.kind == NodeKind.IMAGE:
            return self.alt
        return "".join(child.text_content() for child in self.children)


MdNode.model_rebuild()
