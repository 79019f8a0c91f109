"""Custom exceptions for cmarktrans."""


class CmarkTransError(Exception):
    """Base exception for cmarktrans operations."""


class ParseError(CmarkTransError):
    """Error during document or front matter parsing."""


class MarkupDecodeError(ParseError):
    """Translated markup is malformed or uses a tag outside the vocabulary."""


class ConfigError(CmarkTransError):
    """Settings file is missing or invalid."""


class TranslationError(CmarkTransError):
    """Error at the translation provider boundary."""


class ProviderError(TranslationError):
    """Translation provider returned a non-success response."""


class RateLimitError(ProviderError):
    """Rate limited by the translation provider."""


class QuotaExceededError(TranslationError):
    """Character budget of the translation provider is exhausted."""
