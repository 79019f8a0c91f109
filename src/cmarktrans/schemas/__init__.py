"""Shared schemas for cmarktrans."""

from cmarktrans.schemas.deepl import Glossary, TranslationResponse, Usage
from cmarktrans.schemas.settings import Settings

__all__ = ["Glossary", "Settings", "TranslationResponse", "Usage"]
