"""Tests for CommonMark parsing into the document tree."""

from __future__ import annotations

from cmarktrans.cmark_parser import document_from_cmark
from cmarktrans.document import (
    CodeBlock,
    CodeSpan,
    Emphasis,
    Heading,
    Image,
    LineBreak,
    Link,
    ListBlock,
    Paragraph,
    RawHtmlBlock,
    RawHtmlInline,
    SoftBreak,
    Strikethrough,
    Strong,
    Table,
    Text,
    ThematicBreak,
)


class TestBlocks:
    """Tests for block-level parsing."""

    def test_heading_and_paragraph(self) -> None:
        """ATX headings keep their level, paragraphs their inlines."""
        document = document_from_cmark("## Title\n\nHello *world*")

        heading, paragraph = document.children
        assert heading == Heading(level=2, children=[Text("Title")])
        assert paragraph == Paragraph(children=[Text("Hello "), Emphasis(children=[Text("world")])])

    def test_setext_heading(self) -> None:
        """Setext headings become regular headings."""
        document = document_from_cmark("Title\n=====")

        assert document.children == [Heading(level=1, children=[Text("Title")])]

    def test_tight_and_loose_lists(self) -> None:
        """List tightness follows blank lines between items."""
        tight = document_from_cmark("- a\n- b").children[0]
        loose = document_from_cmark("- a\n\n- b").children[0]

        assert isinstance(tight, ListBlock) and tight.tight is True
        assert isinstance(loose, ListBlock) and loose.tight is False

    def test_ordered_list_start(self) -> None:
        """Ordered lists record their start number."""
        block = document_from_cmark("3. three\n4. four").children[0]

        assert isinstance(block, ListBlock)
        assert block.ordered is True
        assert block.start == 3
        assert len(block.items) == 2

    def test_fenced_and_indented_code(self) -> None:
        """Fenced code keeps its info string, indented code gets none."""
        fenced = document_from_cmark("```python\nprint(1)\n```").children[0]
        indented = document_from_cmark("    print(1)\n").children[0]

        assert fenced == CodeBlock(info_string="python", literal_text="print(1)\n")
        assert indented == CodeBlock(info_string="", literal_text="print(1)\n")

    def test_table_alignments(self) -> None:
        """Tables record per-column alignment and header cells."""
        table = document_from_cmark("| a | b | c |\n| :--- | :---: | --- |\n| 1 | 2 | 3 |").children[0]

        assert isinstance(table, Table)
        assert table.alignments == ["left", "center", None]
        assert [cell.is_header for cell in table.rows[0].cells] == [True, True, True]
        assert [cell.is_header for cell in table.rows[1].cells] == [False, False, False]

    def test_thematic_break_and_html_block(self) -> None:
        """Thematic breaks and raw HTML blocks are kept."""
        document = document_from_cmark("---\n\n<div>\nhi\n</div>\n")

        assert document.children[0] == ThematicBreak()
        assert document.children[1] == RawHtmlBlock(literal="<div>\nhi\n</div>\n")


class TestInlines:
    """Tests for inline parsing."""

    def _inlines(self, text: str) -> list:
        paragraph = document_from_cmark(text).children[0]
        assert isinstance(paragraph, Paragraph)
        return paragraph.children

    def test_strong_and_strikethrough(self) -> None:
        """Strong emphasis and strikethrough are recognised."""
        inlines = self._inlines("**bold** ~~gone~~")

        assert inlines == [
            Strong(children=[Text("bold")]),
            Text(" "),
            Strikethrough(children=[Text("gone")]),
        ]

    def test_link_destination_kept_as_written(self) -> None:
        """Link destinations are not percent-encoded."""
        inlines = self._inlines('[docs](https://example.com/a%20b?q=ü "Title")')

        assert inlines == [
            Link(
                destination="https://example.com/a%20b?q=ü",
                title="Title",
                children=[Text("docs")],
            )
        ]

    def test_autolink(self) -> None:
        """Angle-bracket autolinks are flagged."""
        inlines = self._inlines("<https://example.com>")

        assert inlines == [
            Link(destination="https://example.com", children=[Text("https://example.com")], autolink=True)
        ]

    def test_reference_link_becomes_inline(self) -> None:
        """Reference links resolve to their definition."""
        inlines = self._inlines("[docs][ref]\n\n[ref]: https://example.com")

        assert inlines == [Link(destination="https://example.com", children=[Text("docs")])]

    def test_image_alt_text(self) -> None:
        """Image alt text is the raw label."""
        inlines = self._inlines("![a *cat*](cat.png)")

        assert inlines == [Image(destination="cat.png", alt="a *cat*")]

    def test_code_span_and_raw_html(self) -> None:
        """Code spans and inline HTML are verbatim nodes."""
        inlines = self._inlines("use `x` <b>now</b>")

        assert inlines == [
            Text("use "),
            CodeSpan(literal="x"),
            Text(" "),
            RawHtmlInline(literal="<b>"),
            Text("now"),
            RawHtmlInline(literal="</b>"),
        ]

    def test_breaks(self) -> None:
        """Soft and hard line breaks are distinct."""
        inlines = self._inlines("a\nb\\\nc")

        assert inlines == [Text("a"), SoftBreak(), Text("b"), LineBreak(), Text("c")]

    def test_escaped_characters_merge_into_text(self) -> None:
        """Backslash escapes leave a single text node."""
        assert self._inlines("1 \\* 2") == [Text("1 * 2")]

    def test_backslash_escape_in_destination(self) -> None:
        """An escaped backslash in a destination is one literal backslash."""
        inlines = self._inlines("[a](c:\\\\*)")

        assert inlines == [Link(destination="c:\\*", children=[Text("a")])]

    def test_adjacent_emphasis_has_no_empty_text(self) -> None:
        """Delimiter runs leave no empty text nodes between emphasis nodes."""
        inlines = self._inlines("*a*_b_")

        assert inlines == [Emphasis(children=[Text("a")]), Emphasis(children=[Text("b")])]
