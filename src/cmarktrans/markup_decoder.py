"""Decode (translated) XML markup back into CommonMark."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from lxml import etree

try:
    from bs4 import BeautifulSoup
    from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for markup parsing (pip install beautifulsoup4)."
    ) from exc

from cmarktrans.cmark_renderer import cmark_from_document
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
from cmarktrans.exceptions import MarkupDecodeError
from cmarktrans.markup_encoder import CHAR_TAG, ROOT_TAG

logger = logging.getLogger(__name__)

_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_ALIGNMENTS: dict[str, Alignment] = {"left": "left", "center": "center", "right": "right", "none": None}


def cmark_from_markup(markup_text: str, *, unwrap_root: bool = True) -> str:
    """Convert translation markup back into CommonMark text.

    Args:
        markup_text: Markup produced by the encoder, possibly translated.
        unwrap_root: If True, the markup must be a single ``<document>``
            element, which is stripped before rendering.

    Returns:
        The CommonMark text.

    Raises:
        MarkupDecodeError: If the markup is not well-formed or uses a tag
            outside the vocabulary where a block is expected.
    """
    return cmark_from_document(document_from_markup(markup_text, unwrap_root=unwrap_root))


def document_from_markup(markup_text: str, *, unwrap_root: bool = True) -> Document:
    """Parse markup into a Document."""
    if not markup_text.strip():
        return Document()

    source = markup_text if unwrap_root else f"<{ROOT_TAG}>{markup_text}</{ROOT_TAG}>"
    _check_well_formed(source)

    soup = BeautifulSoup(source, "xml")
    roots = [child for child in soup.children if isinstance(child, Tag)]
    if len(roots) != 1 or roots[0].name != ROOT_TAG:
        found = ", ".join(f"<{root.name}>" for root in roots) or "nothing"
        raise MarkupDecodeError(f"Expected a single <{ROOT_TAG}> root element, found {found}")

    return Document(children=_MarkupReader().read_blocks(roots[0]))


def _check_well_formed(source: str) -> None:
    # BeautifulSoup recovers from broken markup silently, lxml's XML parser does not.
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        etree.fromstring(source.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MarkupDecodeError(f"Malformed markup: {exc}") from exc


class _MarkupReader:
    """Rebuild document nodes from the parsed markup tree."""

    def __init__(self) -> None:
        self._block_readers: dict[str, Callable[[Tag], Block]] = {
            "p": lambda tag: Paragraph(children=self.read_inlines(tag)),
            "heading": self._read_heading,
            "list": self._read_list,
            "blockquote": lambda tag: BlockQuote(children=self.read_blocks(tag)),
            "pre": lambda tag: CodeBlock(info_string=tag.get("info", ""), literal_text=_literal_text(tag)),
            "table": self._read_table,
            "hr": lambda tag: ThematicBreak(),
            "rawblock": lambda tag: RawHtmlBlock(literal=_literal_text(tag)),
        }
        self._inline_readers: dict[str, Callable[[Tag], Inline]] = {
            "em": lambda tag: Emphasis(children=self.read_inlines(tag)),
            "strong": lambda tag: Strong(children=self.read_inlines(tag)),
            "del": lambda tag: Strikethrough(children=self.read_inlines(tag)),
            "a": self._read_link,
            "img": self._read_image,
            "code": lambda tag: CodeSpan(literal=_literal_text(tag)),
            "raw": lambda tag: RawHtmlInline(literal=_literal_text(tag)),
            "softbreak": lambda tag: SoftBreak(),
            "br": lambda tag: LineBreak(),
            CHAR_TAG: lambda tag: Text(_char_of(tag)),
        }

    def read_blocks(self, container: Tag) -> list[Block]:
        blocks: list[Block] = []
        for tag in _child_elements(container):
            reader = self._block_readers.get(tag.name)
            if reader is None:
                raise MarkupDecodeError(f"Unexpected <{tag.name}> inside <{container.name}>")
            blocks.append(reader(tag))
        return blocks

    def read_inlines(self, container: Tag) -> list[Inline]:
        inlines: list[Inline] = []
        for child in container.children:
            if isinstance(child, _SKIPPED_STRINGS):
                continue
            if isinstance(child, NavigableString):
                _append_text(inlines, str(child))
                continue
            if not isinstance(child, Tag):
                continue
            reader = self._inline_readers.get(child.name)
            if reader is None:
                logger.debug("Passing through unknown inline tag <%s>", child.name)
                for inline in self.read_inlines(child):
                    _append_inline(inlines, inline)
                continue
            _append_inline(inlines, reader(child))
        return inlines

    def _read_heading(self, tag: Tag) -> Heading:
        level = _int_attribute(tag, "level")
        if level is None or not 1 <= level <= 6:
            raise MarkupDecodeError(f"Invalid heading level {tag.get('level')!r}")
        return Heading(level=level, children=self.read_inlines(tag))

    def _read_list(self, tag: Tag) -> ListBlock:
        ordered = tag.get("ordered") == "true"
        start = None
        if ordered:
            start = _int_attribute(tag, "start")
            if start is None:
                start = 1
        items = [
            ListItem(children=self.read_blocks(item))
            for item in _child_elements(tag, expected="li")
        ]
        return ListBlock(ordered=ordered, start=start, tight=tag.get("tight") != "false", items=items)

    def _read_table(self, tag: Tag) -> Table:
        alignments: list[Alignment] = []
        align = tag.get("align", "")
        for value in align.split(",") if align else []:
            if value not in _ALIGNMENTS:
                raise MarkupDecodeError(f"Invalid table alignment {value!r}")
            alignments.append(_ALIGNMENTS[value])
        rows = []
        for row in _child_elements(tag, expected="tr"):
            cells = [
                TableCell(is_header=cell.get("header") == "true", children=self.read_inlines(cell))
                for cell in _child_elements(row, expected="td")
            ]
            rows.append(TableRow(cells=cells))
        return Table(alignments=alignments, rows=rows)

    def _read_link(self, tag: Tag) -> Link:
        return Link(
            destination=tag.get("href", ""),
            title=tag.get("title"),
            children=self.read_inlines(tag),
            autolink=tag.get("autolink") == "true",
        )

    def _read_image(self, tag: Tag) -> Image:
        return Image(destination=tag.get("src", ""), title=tag.get("title"), alt=_literal_text(tag))


def _child_elements(container: Tag, expected: str | None = None) -> Iterator[Tag]:
    """Yield element children of a block container.

    Whitespace between elements is ignored; any other text, or an element
    other than ``expected`` when given, is a decode error.
    """
    for child in container.children:
        if isinstance(child, _SKIPPED_STRINGS):
            continue
        if isinstance(child, NavigableString):
            if child.strip():
                raise MarkupDecodeError(f"Unexpected text {str(child)[:40]!r} inside <{container.name}>")
            continue
        if not isinstance(child, Tag):
            continue
        if expected is not None and child.name != expected:
            raise MarkupDecodeError(f"Expected <{expected}> inside <{container.name}>, found <{child.name}>")
        yield child


def _int_attribute(tag: Tag, name: str) -> int | None:
    value = tag.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise MarkupDecodeError(f"Attribute {name}={value!r} of <{tag.name}> is not an integer") from exc


def _char_of(tag: Tag) -> str:
    code = _int_attribute(tag, "code")
    if code is None or not 0 <= code <= 0x10FFFF:
        raise MarkupDecodeError(f"Invalid character code {tag.get('code')!r} in <{CHAR_TAG}>")
    return chr(code)


def _literal_text(tag: Tag) -> str:
    """Return the verbatim text of ``tag``, restoring ``<char>`` elements."""
    parts: list[str] = []
    for node in tag.descendants:
        if isinstance(node, Tag):
            if node.name == CHAR_TAG:
                parts.append(_char_of(node))
        elif isinstance(node, NavigableString) and not isinstance(node, _SKIPPED_STRINGS):
            parts.append(str(node))
    return "".join(parts)


def _append_text(inlines: list[Inline], content: str) -> None:
    _append_inline(inlines, Text(content))


def _append_inline(inlines: list[Inline], inline: Inline) -> None:
    if isinstance(inline, Text) and not inline.content:
        return
    if isinstance(inline, Text) and inlines and isinstance(inlines[-1], Text):
        inlines[-1] = Text(inlines[-1].content + inline.content)
        return
    inlines.append(inline)
