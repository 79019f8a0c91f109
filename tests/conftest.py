"""Test setup for cmarktrans."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cmarktrans.exceptions import ProviderError  # noqa: E402
from cmarktrans.schemas import Settings, Usage  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (make real DeepL API calls)",
    )


@pytest.fixture
def settings() -> Settings:
    """Settings with a pro key, so no quota pre-flight is made."""
    return Settings(
        api_key="test-key",
        project_name="docs",
        ignores={"docs": ["DeepL"]},
        glossaries={"docs": {"en_ja": "glossary-123"}},
    )


@pytest.fixture
def free_settings() -> Settings:
    """Settings with a free-plan key."""
    return Settings(api_key="test-key:fx", project_name="docs")


class FakeDeeplClient:
    """In-memory stand-in for DeeplClient.

    Translation replaces every key of ``translations`` found in the payload
    with its value; markup containing ``fail_on`` raises ProviderError.
    """

    def __init__(self) -> None:
        self.translations: dict[str, str] = {}
        self.usage = Usage(character_count=0, character_limit=500_000)
        self.fail_on: str | None = None
        self.markups: list[str] = []
        self.strings: list[str] = []
        self.glossary_ids: list[str | None] = []
        self.usage_calls = 0

    async def translate_markup(self, markup, source, target, formality=None, tag_options=None, glossary_id=None):
        self.markups.append(markup)
        self.glossary_ids.append(glossary_id)
        if self.fail_on and self.fail_on in markup:
            raise ProviderError("HTTP 500 from translate")
        for original, translated in self.translations.items():
            markup = markup.replace(original, translated)
        return markup

    async def translate_strings(self, texts, source, target, formality=None, glossary_id=None):
        self.strings.extend(texts)
        return [self.translations.get(text, text) for text in texts]

    async def get_usage(self) -> Usage:
        self.usage_calls += 1
        return self.usage

    async def __aenter__(self) -> FakeDeeplClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@pytest.fixture
def fake_client() -> FakeDeeplClient:
    return FakeDeeplClient()
