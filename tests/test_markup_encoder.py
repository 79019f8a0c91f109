"""Tests for CommonMark to markup encoding."""

from __future__ import annotations

import pytest

from cmarktrans.document import CodeSpan, Document, Link, Paragraph, Text
from cmarktrans.exceptions import ParseError
from cmarktrans.markup_encoder import (
    BLOCK_TAGS,
    DEFAULT_TAG_OPTIONS,
    INLINE_TAGS,
    PROTECTED_TAGS,
    markup_from_cmark,
    markup_from_document,
)


class TestTagOptions:
    """Tests for the tag handling parameters."""

    def test_protected_tags_are_ignored(self) -> None:
        """Every verbatim element and the ignore marker are ignored."""
        assert set(DEFAULT_TAG_OPTIONS.ignore_tags) == PROTECTED_TAGS | {"ignore-tag"}

    def test_tag_groups_use_known_tags(self) -> None:
        """Splitting tags are blocks, non-splitting tags are inlines."""
        assert set(DEFAULT_TAG_OPTIONS.splitting_tags) <= BLOCK_TAGS
        assert set(DEFAULT_TAG_OPTIONS.non_splitting_tags) <= INLINE_TAGS


class TestMarkupFromCmark:
    """Tests for markup_from_cmark."""

    def test_heading_with_emphasis(self) -> None:
        """Headings carry their level as an attribute."""
        assert markup_from_cmark("# Hello *world*") == (
            '<document><heading level="1">Hello <em>world</em></heading></document>'
        )

    def test_bullet_list(self) -> None:
        """Bullet lists omit the start attribute."""
        assert markup_from_cmark("- a\n- b") == (
            '<document><list ordered="false" tight="true">'
            "<li><p>a</p></li><li><p>b</p></li></list></document>"
        )

    def test_ordered_list(self) -> None:
        """Ordered lists always carry their start number."""
        assert markup_from_cmark("2. x\n\n3. y") == (
            '<document><list ordered="true" start="2" tight="false">'
            "<li><p>x</p></li><li><p>y</p></li></list></document>"
        )

    def test_code_block_is_escaped(self) -> None:
        """Code content stays well-formed XML."""
        assert markup_from_cmark("```js\na < b && c\n```") == (
            '<document><pre info="js">a &lt; b &amp;&amp; c\n</pre></document>'
        )

    def test_table(self) -> None:
        """Tables list column alignments and mark header cells."""
        assert markup_from_cmark("| a | b |\n| --- | ---: |\n| 1 | 2 |") == (
            '<document><table align="none,right">'
            '<tr><td header="true">a</td><td header="true">b</td></tr>'
            "<tr><td>1</td><td>2</td></tr></table></document>"
        )

    def test_link_attributes_are_escaped(self) -> None:
        """Quotes in attribute values become entities."""
        assert markup_from_cmark('[x](http://a.b "say \\"hi\\"")') == (
            '<document><p><a href="http://a.b" title="say &quot;hi&quot;">x</a></p></document>'
        )

    def test_image_alt_is_content(self) -> None:
        """Image alt text is element content so it gets translated."""
        assert markup_from_cmark("![a cat](cat.png)") == (
            '<document><p><img src="cat.png">a cat</img></p></document>'
        )

    def test_text_is_escaped(self) -> None:
        """Markup characters in text are escaped."""
        assert markup_from_cmark("a < b & c") == "<document><p>a &lt; b &amp; c</p></document>"

    def test_xml_invalid_characters_become_char_elements(self) -> None:
        """Control characters XML cannot carry are written as <char> elements."""
        assert markup_from_cmark("page\x0cbreak") == (
            '<document><p>page<char code="12"/>break</p></document>'
        )
        assert markup_from_cmark("```\na\x0bb\n```") == (
            '<document><pre>a<char code="11"/>b\n</pre></document>'
        )

    def test_breaks_and_thematic_break(self) -> None:
        """Breaks are empty elements."""
        assert markup_from_cmark("a\nb\\\nc\n\n---") == (
            "<document><p>a<softbreak/>b<br/>c</p><hr/></document>"
        )

    def test_raw_html_is_protected(self) -> None:
        """Raw HTML goes into protected elements."""
        assert markup_from_cmark("<div>x</div>\n") == (
            "<document><rawblock>&lt;div&gt;x&lt;/div&gt;\n</rawblock></document>"
        )

    def test_empty_input(self) -> None:
        """Empty input gives an empty root, or nothing when unwrapped."""
        assert markup_from_cmark("") == "<document></document>"
        assert markup_from_cmark("", wrap_in_root=False) == ""

    def test_unwrapped_output(self) -> None:
        """Without the root wrapper only the blocks are emitted."""
        assert markup_from_cmark("para", wrap_in_root=False) == "<p>para</p>"


class TestMarkupFromDocument:
    """Tests for markup_from_document."""

    def test_invalid_character_in_attribute(self) -> None:
        """Attributes cannot hold <char> elements, so such input is rejected."""
        link = Link(destination="a\x01b", children=[Text("x")])
        document = Document(children=[Paragraph(children=[link])])

        with pytest.raises(ParseError, match=r"U\+0001"):
            markup_from_document(document)

    def test_code_span(self) -> None:
        """Code spans are protected inline elements."""
        document = Document(children=[Paragraph(children=[Text("run "), CodeSpan(literal="a<b")])])

        assert markup_from_document(document) == (
            "<document><p>run <code>a&lt;b</code></p></document>"
        )
