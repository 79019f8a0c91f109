"""Protect configured phrases from translation with ignore markers."""

from __future__ import annotations

import re
from typing import Iterable, Iterator
from xml.sax.saxutils import escape, unescape

from cmarktrans.markup_encoder import IGNORE_TAG, PROTECTED_TAGS

_TAG_RE = re.compile(r"<(/?)([A-Za-z][\w.:-]*)(?:\s[^>]*?)?(/?)>")
_MARKER_RE = re.compile(rf"</?{re.escape(IGNORE_TAG)}>")
_SKIPPED_TAGS = PROTECTED_TAGS | {IGNORE_TAG}


class IgnoreList:
    """Reusable matcher wrapping phrases in ``<ignore-tag>`` markers.

    Phrases are matched case-insensitively, longest first, and only in
    character data outside protected elements. Built once and shared between
    documents.
    """

    def __init__(self, phrases: Iterable[str]) -> None:
        unique = {phrase for phrase in phrases if phrase.strip()}
        self.phrases = tuple(sorted(unique, key=lambda phrase: (-len(phrase), phrase)))
        self._pattern: re.Pattern[str] | None = None
        if self.phrases:
            alternatives = "|".join(re.escape(escape(phrase)) for phrase in self.phrases)
            # an entity that no phrase starts with is consumed whole, so no phrase splits it
            self._pattern = re.compile(rf"(?:{alternatives})|(&#?\w+;)", re.IGNORECASE)

    def apply(self, markup: str) -> str:
        if self._pattern is None:
            return markup
        return "".join(
            self._pattern.sub(_wrap_match, text) if translatable else text
            for text, translatable in _segments(markup)
        )


def _wrap_match(match: re.Match[str]) -> str:
    if match.group(1):
        return match.group(0)
    return f"<{IGNORE_TAG}>{match.group(0)}</{IGNORE_TAG}>"


def apply_ignore_list(markup: str, phrases: Iterable[str]) -> str:
    """Wrap every occurrence of ``phrases`` in translatable text with ignore markers."""
    return IgnoreList(phrases).apply(markup)


def strip_ignore_markers(markup: str) -> str:
    """Remove ignore markers, keeping the wrapped text."""
    return _MARKER_RE.sub("", markup)


def translatable_spans(markup: str) -> list[str]:
    """Return the character data a translator would see, unescaped."""
    return [unescape(text) for text, translatable in _segments(markup) if translatable and text]


def _segments(markup: str) -> Iterator[tuple[str, bool]]:
    """Split markup into tags and text runs, flagging translatable text."""
    protected_depth = 0
    position = 0
    for match in _TAG_RE.finditer(markup):
        if match.start() > position:
            yield markup[position : match.start()], protected_depth == 0
        closing, name, self_closing = match.groups()
        if name in _SKIPPED_TAGS and not self_closing:
            protected_depth = max(0, protected_depth - 1) if closing else protected_depth + 1
        yield match.group(0), False
        position = match.end()
    if position < len(markup):
        yield markup[position:], protected_depth == 0
