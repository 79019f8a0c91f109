"""Front matter splitting and TOML field translation."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Awaitable, Callable, NamedTuple

import tomlkit
from tomlkit.exceptions import TOMLKitError

from cmarktrans.exceptions import ParseError

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITERS = ("+++", "---")

# Only these values are translated; every other key is copied as-is.
TRANSLATED_KEYS = ("title", "description")
TRANSLATED_EXTRA_KEYS = ("time",)

Translator = Callable[[list[str]], Awaitable[list[str]]]


class SplitDocument(NamedTuple):
    """A document split into front matter and body."""

    delimiter: str
    frontmatter: str | None
    body: str


def split_frontmatter(text: str) -> SplitDocument:
    """Split a leading ``+++`` or ``---`` delimited block from the body.

    Without a closed front matter block the whole text is the body and the
    delimiter is empty.
    """
    lines = text.splitlines(keepends=True)
    if lines and lines[0].rstrip("\r\n") in FRONTMATTER_DELIMITERS:
        delimiter = lines[0].rstrip("\r\n")
        for index in range(1, len(lines)):
            if lines[index].rstrip("\r\n") == delimiter:
                return SplitDocument(
                    delimiter=delimiter,
                    frontmatter="".join(lines[1:index]),
                    body="".join(lines[index + 1 :]),
                )
    return SplitDocument(delimiter="", frontmatter=None, body=text)


def join_frontmatter(delimiter: str, frontmatter: str | None, body: str) -> str:
    """Reassemble a document from its parts."""
    if frontmatter is None:
        return body
    if frontmatter and not frontmatter.endswith("\n"):
        frontmatter += "\n"
    return f"{delimiter}\n{frontmatter}{delimiter}\n{body}"


async def translate_toml(frontmatter: str, translate: Translator) -> str:
    """Translate the selected string values of TOML front matter.

    Args:
        frontmatter: TOML text between the delimiters.
        translate: Batch translator, returning one string per input in order.

    Returns:
        The TOML text with only ``title``, ``description`` and
        ``extra.time`` replaced.

    Raises:
        ParseError: If the front matter is not valid TOML.
    """
    try:
        document = tomlkit.parse(frontmatter)
    except TOMLKitError as exc:
        raise ParseError(f"Invalid TOML front matter: {exc}") from exc

    targets = _translatable_values(document)
    if not targets:
        return frontmatter

    translated = await translate([str(table[key]) for table, key in targets])
    for (table, key), value in zip(targets, translated):
        table[key] = value

    result = tomlkit.dumps(document)
    logger.debug("Translated TOML:\n%s", result)
    return result


def _translatable_values(document: MutableMapping) -> list[tuple[MutableMapping, str]]:
    targets: list[tuple[MutableMapping, str]] = []
    for key in TRANSLATED_KEYS:
        if isinstance(document.get(key), str):
            targets.append((document, key))
    extra = document.get("extra")
    if isinstance(extra, MutableMapping):
        for key in TRANSLATED_EXTRA_KEYS:
            if isinstance(extra.get(key), str):
                targets.append((extra, key))
    return targets
