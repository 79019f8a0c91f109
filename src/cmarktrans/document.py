"""Document tree shared by the CommonMark and markup converters.

The block and inline variants form closed unions: encoder, decoder and
renderer dispatch on the concrete classes listed in ``Block`` and ``Inline``
and nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

Alignment = Optional[Literal["left", "center", "right"]]


# Inline nodes


@dataclass
class Text:
    content: str


@dataclass
class Emphasis:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Strong:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Strikethrough:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Link:
    destination: str
    title: str | None = None
    children: list[Inline] = field(default_factory=list)
    autolink: bool = False


@dataclass
class Image:
    destination: str
    title: str | None = None
    alt: str = ""


@dataclass
class CodeSpan:
    literal: str
    verbatim: bool = field(default=True, init=False)


@dataclass
class RawHtmlInline:
    literal: str
    verbatim: bool = field(default=True, init=False)


@dataclass
class SoftBreak:
    """Line ending inside a paragraph."""


@dataclass
class LineBreak:
    """Hard line break."""


Inline = Union[
    Text,
    Emphasis,
    Strong,
    Strikethrough,
    Link,
    Image,
    CodeSpan,
    RawHtmlInline,
    SoftBreak,
    LineBreak,
]


# Block nodes


@dataclass
class Paragraph:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Heading:
    level: int
    children: list[Inline] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be between 1 and 6, got {self.level}")


@dataclass
class ListItem:
    children: list[Block] = field(default_factory=list)


@dataclass
class ListBlock:
    ordered: bool
    start: int | None = None
    tight: bool = True
    items: list[ListItem] = field(default_factory=list)


@dataclass
class BlockQuote:
    children: list[Block] = field(default_factory=list)


@dataclass
class CodeBlock:
    info_string: str
    literal_text: str
    verbatim: bool = field(default=True, init=False)


@dataclass
class TableCell:
    is_header: bool = False
    children: list[Inline] = field(default_factory=list)


@dataclass
class TableRow:
    cells: list[TableCell] = field(default_factory=list)


@dataclass
class Table:
    alignments: list[Alignment] = field(default_factory=list)
    rows: list[TableRow] = field(default_factory=list)


@dataclass
class ThematicBreak:
    """Horizontal rule."""


@dataclass
class RawHtmlBlock:
    literal: str
    verbatim: bool = field(default=True, init=False)


Block = Union[
    Paragraph,
    Heading,
    ListBlock,
    ListItem,
    BlockQuote,
    CodeBlock,
    Table,
    TableRow,
    TableCell,
    ThematicBreak,
    RawHtmlBlock,
]


@dataclass
class Document:
    children: list[Block] = field(default_factory=list)
