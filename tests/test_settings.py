"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from cmarktrans.exceptions import ConfigError
from cmarktrans.schemas import Settings
from cmarktrans.settings import load_settings

SETTINGS_TOML = """\
api_key = "abc:fx"
project_name = "blog"
backup_original_text = true

[target_extensions]
blog = [".MD", "markdown"]

[glossaries.blog]
en_ja = "gloss-1"

[glossaries.other]
en_de = "gloss-2"

[ignores]
blog = ["DeepL", "Rust"]
"""


class TestLoadSettings:
    """Tests for load_settings."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """An explicit settings file is read."""
        path = tmp_path / "deepl.toml"
        path.write_text(SETTINGS_TOML, encoding="utf-8")

        settings = load_settings(path)

        assert settings.api_key == "abc:fx"
        assert settings.project_name == "blog"
        assert settings.backup_original_text is True

    def test_search_paths(self, tmp_path: Path) -> None:
        """The first existing default location is used."""
        missing = tmp_path / "missing.toml"
        found = tmp_path / "found.toml"
        found.write_text('api_key = "xyz"\n', encoding="utf-8")

        with patch("cmarktrans.settings.SETTINGS_SEARCH_PATHS", (missing, found)):
            settings = load_settings()

        assert settings.api_key == "xyz"

    def test_no_settings_file(self, tmp_path: Path) -> None:
        """ConfigError when no location has a settings file."""
        with patch("cmarktrans.settings.SETTINGS_SEARCH_PATHS", (tmp_path / "none.toml",)):
            with pytest.raises(ConfigError, match="No settings file"):
                load_settings()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """ConfigError when an explicit file does not exist."""
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "none.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """ConfigError on unparseable TOML."""
        path = tmp_path / "deepl.toml"
        path.write_text("api_key = ", encoding="utf-8")

        with pytest.raises(ConfigError, match="Cannot parse"):
            load_settings(path)

    def test_missing_api_key(self, tmp_path: Path) -> None:
        """ConfigError when the API key is missing or empty."""
        path = tmp_path / "deepl.toml"
        path.write_text('api_key = "  "\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(path)


class TestSettings:
    """Tests for Settings lookups."""

    @pytest.fixture
    def loaded(self, tmp_path: Path) -> Settings:
        path = tmp_path / "deepl.toml"
        path.write_text(SETTINGS_TOML, encoding="utf-8")
        return load_settings(path)

    def test_free_api_key(self, loaded: Settings) -> None:
        """Keys ending in :fx are free-plan keys."""
        assert loaded.is_free_api_key is True
        assert Settings(api_key="abc").is_free_api_key is False

    def test_extensions_are_normalised(self, loaded: Settings) -> None:
        """Extensions lose their dot and are lowercased."""
        assert loaded.extensions_for() == ("md", "markdown")
        assert loaded.extensions_for("unknown") == ("md",)

    def test_ignore_phrases(self, loaded: Settings) -> None:
        """Ignore phrases are looked up per project."""
        assert loaded.ignore_phrases() == ["DeepL", "Rust"]
        assert loaded.ignore_phrases("other") == []

    def test_glossary_id(self, loaded: Settings) -> None:
        """The project table wins, other tables are a fallback."""
        assert loaded.glossary_id("en", "ja") == "gloss-1"
        assert loaded.glossary_id("en", "de") == "gloss-2"
        assert loaded.glossary_id("en", "fr") is None

    def test_settings_are_frozen(self, loaded: Settings) -> None:
        """Settings cannot be modified after loading."""
        with pytest.raises(ValueError):
            loaded.project_name = "other"  # type: ignore[misc]
