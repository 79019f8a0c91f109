"""Local configuration for cmarktrans."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_FETCH_TIMEOUT_S = 30.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_BACKOFF_S = 0.5
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_USER_AGENT = "cmarktrans/0.1"

DEEPL_FREE_ENDPOINT = "https://api-free.deepl.com/v2/"
DEEPL_PRO_ENDPOINT = "https://api.deepl.com/v2/"

# Character limit of the DeepL free plan, used when the usage response has none.
MAX_TRANSLATE_LENGTH = 500_000

SETTINGS_FILENAME = "deepl.toml"
SETTINGS_SEARCH_PATHS = (
    Path(SETTINGS_FILENAME),
    Path.home() / f".{SETTINGS_FILENAME}",
)

CMARKTRANS_FETCH_TIMEOUT_S = float(os.getenv("CMARKTRANS_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
CMARKTRANS_FETCH_MAX_RETRIES = int(os.getenv("CMARKTRANS_FETCH_MAX_RETRIES", str(DEFAULT_FETCH_MAX_RETRIES)))
CMARKTRANS_FETCH_BACKOFF_S = float(os.getenv("CMARKTRANS_FETCH_BACKOFF_S", str(DEFAULT_FETCH_BACKOFF_S)))
CMARKTRANS_MAX_CONCURRENCY = int(os.getenv("CMARKTRANS_MAX_CONCURRENCY", str(DEFAULT_MAX_CONCURRENCY)))
CMARKTRANS_USER_AGENT = os.getenv("CMARKTRANS_USER_AGENT", DEFAULT_USER_AGENT)
CMARKTRANS_LOG_LEVEL = os.getenv("CMARKTRANS_LOG_LEVEL", "")
