"""DeepL API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Translation(BaseModel):
    """A single translated text."""

    detected_source_language: str | None = None
    text: str


class TranslationResponse(BaseModel):
    """Response of the ``translate`` endpoint."""

    translations: list[Translation] = Field(default_factory=list)


class Usage(BaseModel):
    """Character usage of the current billing period."""

    character_count: int = 0
    character_limit: int = 0


class Glossary(BaseModel):
    """A glossary registered with DeepL."""

    glossary_id: str
    name: str
    ready: bool = False
    source_lang: str
    target_lang: str
    creation_time: str | None = None
    entry_count: int = 0


class GlossaryList(BaseModel):
    """Response of the ``glossaries`` listing endpoint."""

    glossaries: list[Glossary] = Field(default_factory=list)
