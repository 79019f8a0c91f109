"""cmarktrans: translate CommonMark documents through DeepL's XML tag handling."""

from cmarktrans.exceptions import (
    CmarkTransError,
    ConfigError,
    MarkupDecodeError,
    ParseError,
    ProviderError,
    QuotaExceededError,
    RateLimitError,
    TranslationError,
)
from cmarktrans.ignore_tags import IgnoreList, apply_ignore_list, strip_ignore_markers
from cmarktrans.markup_decoder import cmark_from_markup
from cmarktrans.markup_encoder import DEFAULT_TAG_OPTIONS, TagOptions, markup_from_cmark
from cmarktrans.translation import DocumentTranslator, TranslationOptions

__all__ = [
    "DEFAULT_TAG_OPTIONS",
    "CmarkTransError",
    "ConfigError",
    "DocumentTranslator",
    "IgnoreList",
    "MarkupDecodeError",
    "ParseError",
    "ProviderError",
    "QuotaExceededError",
    "RateLimitError",
    "TagOptions",
    "TranslationError",
    "TranslationOptions",
    "apply_ignore_list",
    "cmark_from_markup",
    "markup_from_cmark",
    "strip_ignore_markers",
]
