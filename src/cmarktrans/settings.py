"""Load translation settings from a TOML file."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from cmarktrans.config import SETTINGS_SEARCH_PATHS
from cmarktrans.exceptions import ConfigError
from cmarktrans.schemas import Settings

logger = logging.getLogger(__name__)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path`` or the first default location found.

    Default locations are ``deepl.toml`` in the working directory, then
    ``~/.deepl.toml``.

    Args:
        path: Explicit settings file. When given, no other location is tried.

    Returns:
        The parsed, immutable settings.

    Raises:
        ConfigError: If no settings file exists or it cannot be parsed.
    """
    if path is not None:
        return _read_settings(path)

    for candidate in SETTINGS_SEARCH_PATHS:
        if not candidate.is_file():
            logger.debug("Settings file %s not found", candidate)
            continue
        logger.debug("Reading settings from %s", candidate)
        return _read_settings(candidate)

    searched = ", ".join(str(candidate) for candidate in SETTINGS_SEARCH_PATHS)
    raise ConfigError(f"No settings file found (searched {searched})")


def _read_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Settings file {path} not found") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Cannot parse settings file {path}: {exc}") from exc

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc
