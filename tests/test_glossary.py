"""Tests for glossary file handling."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cmarktrans.exceptions import ConfigError
from cmarktrans.glossary import entries_to_tsv, prepare_entries, read_glossary

GLOSSARY_TOML = """\
[glossaries.tech]
"pull request" = "プルリクエスト"
commit = "コミット"

[glossaries.other]
x = "y"
"""


class TestReadGlossary:
    """Tests for read_glossary."""

    def test_reads_named_table(self, tmp_path: Path) -> None:
        """Entries of the named glossary are returned in file order."""
        path = tmp_path / "glossary.toml"
        path.write_text(GLOSSARY_TOML, encoding="utf-8")

        assert read_glossary("tech", path) == [
            ("pull request", "プルリクエスト"),
            ("commit", "コミット"),
        ]

    def test_unknown_glossary(self, tmp_path: Path) -> None:
        """ConfigError when the glossary is not in the file."""
        path = tmp_path / "glossary.toml"
        path.write_text(GLOSSARY_TOML, encoding="utf-8")

        with pytest.raises(ConfigError, match="not found"):
            read_glossary("missing", path)

    def test_no_glossaries_table(self, tmp_path: Path) -> None:
        """ConfigError when the file has no [glossaries] table."""
        path = tmp_path / "glossary.toml"
        path.write_text('a = "b"\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="No \\[glossaries\\]"):
            read_glossary("tech", path)


class TestPrepareEntries:
    """Tests for prepare_entries and entries_to_tsv."""

    def test_trims_sorts_and_drops_blanks(self) -> None:
        """Entries are cleaned up before registration."""
        entries = [(" b ", "2"), ("a", " 1 "), ("", "x"), ("c", "  ")]

        assert prepare_entries(entries) == [("a", "1"), ("b", "2")]

    def test_warns_on_duplicates(self, caplog: pytest.LogCaptureFixture) -> None:
        """Duplicated source terms are logged."""
        with caplog.at_level(logging.WARNING, logger="cmarktrans.glossary"):
            prepare_entries([("a", "1"), ("a", "2")])

        assert "Duplicated glossary key" in caplog.text

    def test_tsv(self) -> None:
        """Entries are tab separated, one per line."""
        assert entries_to_tsv([("a", "1"), ("b", "2")]) == "a\t1\nb\t2"
