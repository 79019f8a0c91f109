"""Render the document tree back into CommonMark text.

Rendering is deterministic: bullets are written as ``-``, ordered items as
``N.`` counting up from the list start, fences use backticks, hard breaks use
a trailing backslash. Adjacent lists of the same kind switch to ``*`` / ``N)``
so they stay separate lists when parsed again. Emphasis uses ``*`` unless it
would touch another ``*`` run, in which case ``_`` is used where a word
boundary allows it.
"""

from __future__ import annotations

import re
import string

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

_ASCII_PUNCTUATION = frozenset(string.punctuation)
_ENTITY_RE = re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});")
_BACKSLASH_BEFORE_PUNCTUATION_RE = re.compile(rf"\\(?=[{re.escape(string.punctuation)}]|$)")
_HEADING_CLOSE_RE = re.compile(r"(^|[ \t])(#+)([ \t]*)$")
_ORDERED_START_RE = re.compile(r"(\d{1,9})([.)])(?=[ \t]|$)")
_ALIGN_MARKERS: dict[Alignment, str] = {
    None: "---",
    "left": ":---",
    "center": ":---:",
    "right": "---:",
}


def cmark_from_document(document: Document) -> str:
    """Render a Document as CommonMark text without a trailing newline."""
    return _render_blocks(document.children)


def _render_blocks(blocks: list[Block], *, tight: bool = False) -> str:
    separator = "\n" if tight else "\n\n"
    rendered: list[str] = []
    previous: Block | None = None
    previous_text = ""
    for block in blocks:
        if isinstance(block, ListBlock):
            alternate = (
                isinstance(previous, ListBlock)
                and previous.ordered == block.ordered
                and not _uses_alternate(previous_text, block.ordered)
            )
            text = _render_list(block, alternate=alternate)
        elif isinstance(block, ThematicBreak) and tight and isinstance(previous, Paragraph):
            # "---" right under a paragraph line would be a setext underline
            text = "***"
        else:
            text = _render_block(block)
        previous = block
        previous_text = text
        if text:
            rendered.append(text)
    return separator.join(rendered)


def _uses_alternate(rendered_list: str, ordered: bool) -> bool:
    if ordered:
        match = _ORDERED_START_RE.match(rendered_list)
        return bool(match) and match.group(2) == ")"
    return rendered_list.startswith("*")


def _render_block(block: Block) -> str:
    if isinstance(block, Paragraph):
        return _render_paragraph(block)
    if isinstance(block, Heading):
        return _render_heading(block)
    if isinstance(block, ListBlock):
        return _render_list(block)
    if isinstance(block, BlockQuote):
        body = _render_blocks(block.children)
        return "\n".join(f"> {line}" if line else ">" for line in body.split("\n"))
    if isinstance(block, CodeBlock):
        return _render_code_block(block)
    if isinstance(block, Table):
        return _render_table(block)
    if isinstance(block, ThematicBreak):
        return "---"
    if isinstance(block, RawHtmlBlock):
        return block.literal.rstrip("\n")
    raise TypeError(f"Cannot render {type(block).__name__} outside its container")


def _render_paragraph(block: Paragraph) -> str:
    content = render_inlines(block.children).strip()
    return "\n".join(_escape_line_start(line) for line in content.split("\n"))


def _render_heading(block: Heading) -> str:
    marker = "#" * block.level
    content = render_inlines(block.children).replace("\n", " ").strip()
    if not content:
        return marker
    # a trailing run of "#" would be read as the closing sequence
    content = _HEADING_CLOSE_RE.sub(lambda m: f"{m.group(1)}\\{m.group(2)}{m.group(3)}", content)
    return f"{marker} {content}"


def _render_list(block: ListBlock, *, alternate: bool = False) -> str:
    bullet = "*" if alternate else "-"
    delimiter = ")" if alternate else "."
    start = block.start if block.start is not None else 1
    items: list[str] = []
    for index, item in enumerate(block.items):
        marker = f"{start + index}{delimiter}" if block.ordered else bullet
        body = _render_blocks(item.children, tight=block.tight)
        items.append(_prefix_lines(body, f"{marker} ", " " * (len(marker) + 1)))
    return ("\n" if block.tight else "\n\n").join(items)


def _prefix_lines(text: str, first: str, rest: str) -> str:
    if not text:
        return first.rstrip()
    lines = text.split("\n")
    prefixed = [first + lines[0]]
    prefixed.extend(rest + line if line else "" for line in lines[1:])
    return "\n".join(prefixed)


def _render_code_block(block: CodeBlock) -> str:
    fence_char = "~" if "`" in block.info_string else "`"
    runs = re.findall(rf"^[ ]{{0,3}}({re.escape(fence_char)}{{3,}})", block.literal_text, re.MULTILINE)
    fence = fence_char * max([3] + [len(run) + 1 for run in runs])
    literal = block.literal_text
    if literal and not literal.endswith("\n"):
        literal += "\n"
    return f"{fence}{block.info_string}\n{literal}{fence}"


def _render_table(block: Table) -> str:
    columns = max([len(block.alignments)] + [len(row.cells) for row in block.rows])
    alignments = list(block.alignments) + [None] * (columns - len(block.alignments))
    lines = []
    for index, row in enumerate(block.rows):
        # the row splitter turns every "\|" back into "|" before inline parsing
        values = [render_inlines(cell.children).strip().replace("|", "\\|") for cell in row.cells]
        values += [""] * (columns - len(values))
        lines.append("| " + " | ".join(values) + " |")
        if index == 0:
            lines.append("| " + " | ".join(_ALIGN_MARKERS[a] for a in alignments) + " |")
    return "\n".join(lines)


def render_inlines(inlines: list[Inline], *, before: str = "", after: str = "") -> str:
    """Render inline nodes as CommonMark inline text.

    ``before`` and ``after`` are the characters written right outside the
    rendered run, used to pick emphasis delimiters that do not merge with
    their neighbours.
    """
    parts: list[str] = []
    for index, inline in enumerate(inlines):
        if isinstance(inline, (SoftBreak, LineBreak)) and parts:
            # trailing spaces before a line ending would turn it into a hard break
            parts[-1] = parts[-1].rstrip(" \t")
        previous = next((part[-1] for part in reversed(parts) if part), before)
        following = _leading_char(inlines[index + 1]) if index + 1 < len(inlines) else after
        parts.append(_render_inline(inline, before=previous, after=following))
    return "".join(parts)


def _render_inline(inline: Inline, *, before: str = "", after: str = "") -> str:
    if isinstance(inline, Text):
        return escape_text(inline.content)
    if isinstance(inline, (Emphasis, Strong)):
        return _render_emphasis(inline, before=before, after=after)
    if isinstance(inline, Strikethrough):
        return _wrap_delimited("~~", render_inlines(inline.children, before="~", after="~"))
    if isinstance(inline, Link):
        return _render_link(inline)
    if isinstance(inline, Image):
        alt = _escape_label(inline.alt)
        return f"![{alt}]({_format_destination(inline.destination)}{_format_title(inline.title)})"
    if isinstance(inline, CodeSpan):
        return _render_code_span(inline.literal)
    if isinstance(inline, RawHtmlInline):
        return inline.literal
    if isinstance(inline, SoftBreak):
        return "\n"
    if isinstance(inline, LineBreak):
        return "\\\n"
    raise TypeError(f"Unsupported inline node: {type(inline).__name__}")


def _render_emphasis(inline: Emphasis | Strong, *, before: str, after: str) -> str:
    width = 1 if isinstance(inline, Emphasis) else 2
    char = "_" if "*" in (before, after) and _underscore_fits(before, after) else "*"
    content = render_inlines(inline.children, before=char, after=char)
    stripped = content.strip(" ")
    if char == "*" and "*" in (stripped[:1], stripped[-1:]) and _underscore_fits(before, after):
        # "***x***" reads as emphasis around strong, whatever the nesting was
        char = "_"
        content = render_inlines(inline.children, before=char, after=char)
    return _wrap_delimited(char * width, content)


def _underscore_fits(before: str, after: str) -> bool:
    # "_" runs cannot open or close inside a word
    return not any(char.isalnum() or char == "_" for char in (before, after))


def _leading_char(inline: Inline) -> str:
    """Return the first character ``inline`` renders to with default delimiters."""
    if isinstance(inline, Text):
        return escape_text(inline.content)[:1]
    if isinstance(inline, (Emphasis, Strong, Strikethrough)):
        if not inline.children:
            return ""
        if _leading_char(inline.children[0]) == " ":
            return " "
        return "~" if isinstance(inline, Strikethrough) else "*"
    if isinstance(inline, Link):
        return "["
    if isinstance(inline, Image):
        return "!"
    if isinstance(inline, CodeSpan):
        return "`"
    if isinstance(inline, RawHtmlInline):
        return inline.literal[:1]
    if isinstance(inline, SoftBreak):
        return "\n"
    return "\\"


def _wrap_delimited(delimiter: str, content: str) -> str:
    # Delimiters must touch the text, so surrounding spaces move outside.
    stripped = content.strip(" ")
    if not stripped:
        return content
    leading = content[: len(content) - len(content.lstrip(" "))]
    trailing = content[len(content.rstrip(" ")) :]
    return f"{leading}{delimiter}{stripped}{delimiter}{trailing}"


def _render_link(inline: Link) -> str:
    if inline.autolink and inline.title is None:
        plain = "".join(child.content for child in inline.children if isinstance(child, Text))
        only_text = all(isinstance(child, Text) for child in inline.children)
        if only_text and inline.destination in (plain, f"mailto:{plain}"):
            return f"<{plain}>"
    text = render_inlines(inline.children, before="[", after="]")
    return f"[{text}]({_format_destination(inline.destination)}{_format_title(inline.title)})"


def _format_destination(destination: str) -> str:
    if not destination:
        return "<>"
    escaped = _BACKSLASH_BEFORE_PUNCTUATION_RE.sub(r"\\\\", destination)
    if re.search(r"[\s<>]", destination) or not _parens_balanced(destination):
        escaped = escaped.replace("<", "\\<").replace(">", "\\>")
        return f"<{escaped}>"
    return escaped


def _escape_label(text: str) -> str:
    """Escape the brackets of ``text`` that would end or unbalance a link label."""
    unmatched: set[int] = set()
    opened: list[int] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "[":
            opened.append(index)
        elif char == "]":
            if opened:
                opened.pop()
            else:
                unmatched.add(index)
        index += 1
    unmatched.update(opened)
    escaped = "".join("\\" + char if i in unmatched else char for i, char in enumerate(text))
    if (len(escaped) - len(escaped.rstrip("\\"))) % 2:
        escaped += "\\"
    return escaped


def _parens_balanced(value: str) -> bool:
    depth = 0
    for char in value:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def _format_title(title: str | None) -> str:
    if title is None:
        return ""
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f' "{escaped}"'


def _render_code_span(literal: str) -> str:
    runs = {len(run) for run in re.findall(r"`+", literal)}
    length = 1
    while length in runs:
        length += 1
    fence = "`" * length
    needs_padding = (
        literal.startswith("`")
        or literal.endswith("`")
        or (literal.startswith(" ") and literal.endswith(" ") and literal.strip(" "))
    )
    if needs_padding:
        literal = f" {literal} "
    return f"{fence}{literal}{fence}"


def escape_text(text: str) -> str:
    """Backslash-escape characters that would otherwise be read as markup."""
    escaped: list[str] = []
    length = len(text)
    for index, char in enumerate(text):
        previous = text[index - 1] if index > 0 else ""
        following = text[index + 1] if index + 1 < length else ""
        if char in "*`[]":
            escaped.append("\\" + char)
        elif char == "\\":
            needs_escape = not following or following in _ASCII_PUNCTUATION
            escaped.append("\\\\" if needs_escape else char)
        elif char == "_":
            intraword = previous.isalnum() and following.isalnum()
            escaped.append(char if intraword else "\\_")
        elif char == "~":
            escaped.append("\\~" if "~" in (previous, following) else char)
        elif char == "<":
            tag_like = following.isalpha() or following in ("/", "!", "?")
            escaped.append("\\<" if tag_like else char)
        elif char == "&":
            escaped.append("\\&" if _ENTITY_RE.match(text, index) else char)
        else:
            escaped.append(char)
    return "".join(escaped)


def _escape_line_start(line: str) -> str:
    if re.match(r"#{1,6}(?:[ \t]|$)", line) or line.startswith(">"):
        return "\\" + line
    if re.match(r"[-+](?:[ \t]|$)", line) or re.fullmatch(r"(?:=+|-+)[ \t]*", line):
        return "\\" + line
    match = _ORDERED_START_RE.match(line)
    if match:
        return f"{match.group(1)}\\{line[len(match.group(1)):]}"
    return line
