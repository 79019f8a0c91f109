"""Serialize CommonMark documents as XML markup for tag-aware translation.

Every block and inline variant maps to exactly one element. Verbatim content
(code, raw HTML) goes into elements that the translator is told to ignore,
so only character data of the remaining elements is translated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable
from xml.sax.saxutils import escape

from cmarktrans.cmark_parser import document_from_cmark
from cmarktrans.document import (
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
from cmarktrans.exceptions import ParseError

ROOT_TAG = "document"
IGNORE_TAG = "ignore-tag"
CHAR_TAG = "char"

BLOCK_TAGS = frozenset(
    {"p", "heading", "list", "li", "blockquote", "pre", "table", "tr", "td", "hr", "rawblock"}
)
INLINE_TAGS = frozenset(
    {"em", "strong", "del", "a", "img", "code", "raw", "softbreak", "br", CHAR_TAG}
)
PROTECTED_TAGS = frozenset({"pre", "code", "rawblock", "raw"})

_ATTR_ENTITIES = {'"': "&quot;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}
# characters XML 1.0 cannot carry, not even as character references
_INVALID_XML_CHAR_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@dataclass(frozen=True)
class TagOptions:
    """Tag handling parameters sent along with translated markup."""

    ignore_tags: tuple[str, ...]
    splitting_tags: tuple[str, ...]
    non_splitting_tags: tuple[str, ...]


DEFAULT_TAG_OPTIONS = TagOptions(
    ignore_tags=("pre", "code", "rawblock", "raw", IGNORE_TAG),
    splitting_tags=("blockquote", "li", "p", "heading", "td"),
    non_splitting_tags=("em", "strong", "del", "a", "img"),
)


def markup_from_cmark(markdown_text: str, *, wrap_in_root: bool = True) -> str:
    """Convert CommonMark text into translation markup.

    Args:
        markdown_text: CommonMark source.
        wrap_in_root: If True, wrap the output in a single ``<document>``
            element so it is one well-formed XML document.

    Returns:
        The markup text.
    """
    return markup_from_document(document_from_cmark(markdown_text), wrap_in_root=wrap_in_root)


def markup_from_document(document: Document, *, wrap_in_root: bool = True) -> str:
    """Serialize a Document depth-first into markup."""
    body = encode_blocks(document.children)
    if wrap_in_root:
        return _element(ROOT_TAG, body)
    return body


def encode_blocks(blocks: list[Block]) -> str:
    return "".join(_encode_block(block) for block in blocks)


def encode_inlines(inlines: list[Inline]) -> str:
    return "".join(_encode_inline(inline) for inline in inlines)


def _encode_block(block: Block) -> str:
    encoder = _BLOCK_ENCODERS.get(type(block))
    if encoder is None:
        raise TypeError(f"Unsupported block node: {type(block).__name__}")
    return encoder(block)


def _encode_inline(inline: Inline) -> str:
    encoder = _INLINE_ENCODERS.get(type(inline))
    if encoder is None:
        raise TypeError(f"Unsupported inline node: {type(inline).__name__}")
    return encoder(inline)


def _element(name: str, content: str | None, attrs: dict[str, str] | None = None) -> str:
    for key, value in (attrs or {}).items():
        match = _INVALID_XML_CHAR_RE.search(value)
        if match:
            raise ParseError(
                f"Attribute {key} of <{name}> contains U+{ord(match.group()):04X}, which markup cannot carry"
            )
    rendered_attrs = "".join(
        f' {key}="{escape(value, _ATTR_ENTITIES)}"' for key, value in (attrs or {}).items()
    )
    if content is None:
        return f"<{name}{rendered_attrs}/>"
    return f"<{name}{rendered_attrs}>{content}</{name}>"


def escape_content(value: str) -> str:
    """Escape character data, writing XML-invalid characters as ``<char code="N"/>``."""
    return _INVALID_XML_CHAR_RE.sub(
        lambda match: _element(CHAR_TAG, None, {"code": str(ord(match.group()))}), escape(value)
    )


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _encode_list(block: ListBlock) -> str:
    attrs = {"ordered": _bool(block.ordered)}
    if block.ordered:
        attrs["start"] = str(block.start if block.start is not None else 1)
    attrs["tight"] = _bool(block.tight)
    return _element("list", "".join(_encode_block(item) for item in block.items), attrs)


def _encode_code_block(block: CodeBlock) -> str:
    attrs = {"info": block.info_string} if block.info_string else None
    return _element("pre", escape_content(block.literal_text), attrs)


def _encode_table(block: Table) -> str:
    attrs = {"align": ",".join(alignment or "none" for alignment in block.alignments)}
    return _element("table", "".join(_encode_block(row) for row in block.rows), attrs)


def _encode_cell(block: TableCell) -> str:
    attrs = {"header": "true"} if block.is_header else None
    return _element("td", encode_inlines(block.children), attrs)


def _encode_link(inline: Link) -> str:
    attrs = {"href": inline.destination}
    if inline.title is not None:
        attrs["title"] = inline.title
    if inline.autolink:
        attrs["autolink"] = "true"
    return _element("a", encode_inlines(inline.children), attrs)


def _encode_image(inline: Image) -> str:
    attrs = {"src": inline.destination}
    if inline.title is not None:
        attrs["title"] = inline.title
    return _element("img", escape_content(inline.alt), attrs)


_BLOCK_ENCODERS: dict[type, Callable] = {
    Paragraph: lambda block: _element("p", encode_inlines(block.children)),
    Heading: lambda block: _element(
        "heading", encode_inlines(block.children), {"level": str(block.level)}
    ),
    ListBlock: _encode_list,
    ListItem: lambda block: _element("li", encode_blocks(block.children)),
    BlockQuote: lambda block: _element("blockquote", encode_blocks(block.children)),
    CodeBlock: _encode_code_block,
    Table: _encode_table,
    TableRow: lambda block: _element("tr", "".join(_encode_block(cell) for cell in block.cells)),
    TableCell: _encode_cell,
    ThematicBreak: lambda block: _element("hr", None),
    RawHtmlBlock: lambda block: _element("rawblock", escape_content(block.literal)),
}

_INLINE_ENCODERS: dict[type, Callable] = {
    Text: lambda inline: escape_content(inline.content),
    Emphasis: lambda inline: _element("em", encode_inlines(inline.children)),
    Strong: lambda inline: _element("strong", encode_inlines(inline.children)),
    Strikethrough: lambda inline: _element("del", encode_inlines(inline.children)),
    Link: _encode_link,
    Image: _encode_image,
    CodeSpan: lambda inline: _element("code", escape_content(inline.literal)),
    RawHtmlInline: lambda inline: _element("raw", escape_content(inline.literal)),
    SoftBreak: lambda inline: _element("softbreak", None),
    LineBreak: lambda inline: _element("br", None),
}
