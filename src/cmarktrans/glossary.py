"""Read glossaries from TOML files and prepare them for registration."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Iterable

from cmarktrans.exceptions import ConfigError

logger = logging.getLogger(__name__)


def read_glossary(name: str, path: Path) -> list[tuple[str, str]]:
    """Read the ``[glossaries.<name>]`` table of a TOML file.

    Args:
        name: Glossary name, the key under ``glossaries``.
        path: TOML file holding ``source = "target"`` entries.

    Returns:
        ``(source, target)`` pairs in file order.

    Raises:
        ConfigError: If the file cannot be parsed or has no such glossary.
    """
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Cannot parse glossary file {path}: {exc}") from exc

    glossaries = data.get("glossaries")
    if not isinstance(glossaries, dict):
        raise ConfigError(f"No [glossaries] table in {path}")
    table = glossaries.get(name)
    if not isinstance(table, dict):
        raise ConfigError(f"Glossary {name!r} not found in {path}")
    return [(str(source), str(target)) for source, target in table.items()]


def prepare_entries(entries: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Trim entries, drop blank ones, and sort them by source term.

    Duplicate source terms are kept but logged, since the provider rejects
    or overrides them.
    """
    cleaned = sorted(
        (source.strip(), target.strip())
        for source, target in entries
        if source.strip() and target.strip()
    )
    previous = None
    for source, _ in cleaned:
        if source == previous:
            logger.warning("Duplicated glossary key: %r", source)
        previous = source
    return cleaned


def entries_to_tsv(entries: Iterable[tuple[str, str]]) -> str:
    return "\n".join(f"{source}\t{target}" for source, target in entries)
