"""Parse CommonMark text into the document tree."""

from __future__ import annotations

import logging
from typing import Callable

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from cmarktrans.document import (
    Alignment,
    Block,
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    Emphasis,
    Heading,
    Image,
    Inline,
    LineBreak,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    RawHtmlBlock,
    RawHtmlInline,
    SoftBreak,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)

logger = logging.getLogger(__name__)

_ALIGNMENTS: dict[str, Alignment] = {
    "text-align:left": "left",
    "text-align:center": "center",
    "text-align:right": "right",
}


def _keep_link(url: str) -> str:
    """Return a link destination as written, without percent-encoding."""
    return url


def _keep_link_text(text: str) -> str:
    return text


def _accept_link(url: str) -> bool:
    """Accept every link destination, whatever its scheme."""
    return True


def create_parser() -> MarkdownIt:
    """Create the markdown-it parser used for CommonMark input.

    Link destinations are kept exactly as written: no percent-encoding and no
    rejection of unusual schemes, so a translated document links to the same
    places as its source.
    """
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    md.normalizeLink = _keep_link
    md.normalizeLinkText = _keep_link_text
    md.validateLink = _accept_link
    return md


_PARSER = create_parser()


def document_from_cmark(text: str) -> Document:
    """Parse CommonMark text into a Document."""
    root = SyntaxTreeNode(_PARSER.parse(text))
    converter = _TreeConverter(text.splitlines())
    return Document(children=converter.convert_blocks(root.children))


class _TreeConverter:
    """Walk a markdown-it syntax tree and build document nodes."""

    def __init__(self, source_lines: list[str]) -> None:
        self._source_lines = source_lines
        self._block_handlers: dict[str, Callable[[SyntaxTreeNode], Block]] = {
            "paragraph": self._convert_paragraph,
            "heading": self._convert_heading,
            "bullet_list": self._convert_list,
            "ordered_list": self._convert_list,
            "blockquote": self._convert_blockquote,
            "fence": self._convert_code,
            "code_block": self._convert_code,
            "hr": lambda node: ThematicBreak(),
            "html_block": lambda node: RawHtmlBlock(literal=node.content),
            "table": self._convert_table,
        }

    def convert_blocks(self, nodes: list[SyntaxTreeNode]) -> list[Block]:
        blocks: list[Block] = []
        for node in nodes:
            handler = self._block_handlers.get(node.type)
            if handler is None:
                logger.debug("Keeping unsupported block %r as raw HTML", node.type)
                blocks.append(RawHtmlBlock(literal=self._source_of(node)))
                continue
            blocks.append(handler(node))
        return blocks

    def _source_of(self, node: SyntaxTreeNode) -> str:
        if node.map is None:
            return node.content
        start, end = node.map
        return "\n".join(self._source_lines[start:end]) + "\n"

    def _convert_paragraph(self, node: SyntaxTreeNode) -> Paragraph:
        return Paragraph(children=convert_inlines(node.children))

    def _convert_heading(self, node: SyntaxTreeNode) -> Heading:
        return Heading(level=int(node.tag[1]), children=convert_inlines(node.children))

    def _convert_list(self, node: SyntaxTreeNode) -> ListBlock:
        ordered = node.type == "ordered_list"
        start = None
        if ordered:
            start = int(node.attrs.get("start", 1))
        items = [
            ListItem(children=self.convert_blocks(item.children))
            for item in node.children
        ]
        return ListBlock(ordered=ordered, start=start, tight=_is_tight(node), items=items)

    def _convert_blockquote(self, node: SyntaxTreeNode) -> BlockQuote:
        return BlockQuote(children=self.convert_blocks(node.children))

    def _convert_code(self, node: SyntaxTreeNode) -> CodeBlock:
        info = node.info.strip() if node.type == "fence" else ""
        return CodeBlock(info_string=info, literal_text=node.content)

    def _convert_table(self, node: SyntaxTreeNode) -> Table:
        rows: list[TableRow] = []
        alignments: list[Alignment] = []
        for section in node.children:
            for row in section.children:
                cells = []
                for cell in row.children:
                    cells.append(
                        TableCell(
                            is_header=cell.type == "th",
                            children=convert_inlines(cell.children),
                        )
                    )
                    if not rows:
                        style = str(cell.attrs.get("style", ""))
                        alignments.append(_ALIGNMENTS.get(style))
                rows.append(TableRow(cells=cells))
        return Table(alignments=alignments, rows=rows)


def _is_tight(list_node: SyntaxTreeNode) -> bool:
    # markdown-it hides the paragraphs of tight list items
    for item in list_node.children:
        for child in item.children:
            if child.type == "paragraph" and not child.hidden:
                return False
    return True


def convert_inlines(nodes: list[SyntaxTreeNode]) -> list[Inline]:
    """Convert markdown-it inline nodes, merging adjacent text runs."""
    inlines: list[Inline] = []
    for node in nodes:
        if node.type == "inline":
            for inline in convert_inlines(node.children):
                _append_inline(inlines, inline)
            continue
        _append_inline(inlines, _convert_inline(node))
    return inlines


def _append_inline(inlines: list[Inline], inline: Inline) -> None:
    if isinstance(inline, Text) and not inline.content:
        return
    if isinstance(inline, Text) and inlines and isinstance(inlines[-1], Text):
        inlines[-1] = Text(inlines[-1].content + inline.content)
        return
    inlines.append(inline)


def _convert_inline(node: SyntaxTreeNode) -> Inline:
    kind = node.type
    if kind in ("text", "text_special"):
        return Text(node.content)
    if kind == "softbreak":
        return SoftBreak()
    if kind == "hardbreak":
        return LineBreak()
    if kind == "em":
        return Emphasis(children=convert_inlines(node.children))
    if kind == "strong":
        return Strong(children=convert_inlines(node.children))
    if kind == "s":
        return Strikethrough(children=convert_inlines(node.children))
    if kind == "link":
        title = node.attrs.get("title")
        return Link(
            destination=str(node.attrs.get("href", "")),
            title=str(title) if title else None,
            children=convert_inlines(node.children),
            autolink=node.markup == "autolink",
        )
    if kind == "image":
        title = node.attrs.get("title")
        return Image(
            destination=str(node.attrs.get("src", "")),
            title=str(title) if title else None,
            alt=node.content,
        )
    if kind == "code_inline":
        return CodeSpan(literal=node.content)
    if kind == "html_inline":
        return RawHtmlInline(literal=node.content)

    logger.debug("Keeping unsupported inline %r as raw HTML", kind)
    return RawHtmlInline(literal=node.content)
