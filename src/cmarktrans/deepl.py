"""Async client for the DeepL REST API."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from cmarktrans.config import (
    CMARKTRANS_FETCH_TIMEOUT_S,
    CMARKTRANS_USER_AGENT,
    DEEPL_FREE_ENDPOINT,
    DEEPL_PRO_ENDPOINT,
)
from cmarktrans.exceptions import ProviderError
from cmarktrans.glossary import entries_to_tsv, prepare_entries
from cmarktrans.http_utils import request_with_retries
from cmarktrans.markup_encoder import DEFAULT_TAG_OPTIONS, TagOptions
from cmarktrans.schemas import Glossary, Settings, TranslationResponse, Usage
from cmarktrans.schemas.deepl import GlossaryList

logger = logging.getLogger(__name__)

_Model = TypeVar("_Model", bound=BaseModel)


class Language(str, Enum):
    """Languages supported for translation."""

    DE = "de"
    ES = "es"
    EN = "en"
    FR = "fr"
    IT = "it"
    JA = "ja"
    NL = "nl"
    PT = "pt"
    PT_BR = "pt-br"
    RU = "ru"

    @property
    def code(self) -> str:
        """Language code sent to the API."""
        if self is Language.PT:
            return Language.PT_BR.value
        return self.value

    @classmethod
    def parse(cls, value: str) -> Language:
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            supported = ", ".join(language.value for language in cls)
            raise ValueError(f"Unsupported language {value!r} (expected one of {supported})") from exc


class Formality(str, Enum):
    """Translation output formality."""

    DEFAULT = "default"
    FORMAL = "formal"
    INFORMAL = "informal"

    @property
    def api_value(self) -> str:
        return {
            Formality.DEFAULT: "default",
            Formality.FORMAL: "prefer_more",
            Formality.INFORMAL: "prefer_less",
        }[self]

    @classmethod
    def parse(cls, value: str | None) -> Formality:
        if value is None:
            return cls.DEFAULT
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported formality {value!r}") from exc


class DeeplClient:
    """Thin async wrapper over the DeepL endpoints used by cmarktrans.

    Use as an async context manager. An existing ``httpx.AsyncClient`` can be
    passed for connection pooling (or testing); it is then left open on exit.
    """

    def __init__(self, settings: Settings, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> DeeplClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(CMARKTRANS_FETCH_TIMEOUT_S))
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def base_url(self) -> str:
        if self._settings.is_free_api_key:
            return DEEPL_FREE_ENDPOINT
        return DEEPL_PRO_ENDPOINT

    def endpoint(self, api: str) -> str:
        return f"{self.base_url}{api}"

    async def translate_strings(
        self,
        texts: Sequence[str],
        source: Language,
        target: Language,
        formality: Formality = Formality.DEFAULT,
        glossary_id: str | None = None,
    ) -> list[str]:
        """Translate a batch of plain strings, preserving order."""
        if not texts:
            return []
        data = self._translate_params(source, target, formality, glossary_id)
        data["text"] = list(texts)
        response = await self._request("POST", "translate", data=data)
        translations = _parse(TranslationResponse, response).translations
        if len(translations) != len(texts):
            raise ProviderError(
                f"Expected {len(texts)} translations, received {len(translations)}"
            )
        return [translation.text for translation in translations]

    async def translate_markup(
        self,
        markup: str,
        source: Language,
        target: Language,
        formality: Formality = Formality.DEFAULT,
        tag_options: TagOptions = DEFAULT_TAG_OPTIONS,
        glossary_id: str | None = None,
    ) -> str:
        """Translate one XML document using DeepL's tag handling."""
        data = self._translate_params(source, target, formality, glossary_id)
        data.update(
            {
                "tag_handling": "xml",
                "ignore_tags": ",".join(tag_options.ignore_tags),
                "splitting_tags": ",".join(tag_options.splitting_tags),
                "non_splitting_tags": ",".join(tag_options.non_splitting_tags),
                "text": markup,
            }
        )
        response = await self._request("POST", "translate", data=data)
        translations = _parse(TranslationResponse, response).translations
        if not translations:
            return ""
        return translations[0].text

    async def get_usage(self) -> Usage:
        response = await self._request("GET", "usage")
        return _parse(Usage, response)

    async def list_glossaries(self) -> list[Glossary]:
        response = await self._request("GET", "glossaries")
        return _parse(GlossaryList, response).glossaries

    async def register_glossary(
        self,
        name: str,
        source: Language,
        target: Language,
        entries: Sequence[tuple[str, str]],
    ) -> Glossary:
        """Register a glossary from ``(source, target)`` term pairs."""
        data = {
            "name": name,
            "source_lang": source.code,
            "target_lang": target.code,
            "entries_format": "tsv",
            "entries": entries_to_tsv(prepare_entries(entries)),
        }
        response = await self._request("POST", "glossaries", data=data)
        return _parse(Glossary, response)

    async def remove_glossary(self, glossary_id: str) -> None:
        await self._request("DELETE", f"glossaries/{glossary_id}")

    def _translate_params(
        self,
        source: Language,
        target: Language,
        formality: Formality,
        glossary_id: str | None,
    ) -> dict[str, str | list[str]]:
        params: dict[str, str | list[str]] = {
            "source_lang": source.code,
            "target_lang": target.code,
            "preserve_formatting": "1",
            "formality": formality.api_value,
        }
        if glossary_id:
            logger.debug("Using glossary %s", glossary_id)
            params["glossary_id"] = glossary_id
        return params

    async def _request(
        self, method: str, api: str, *, data: dict | None = None
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("DeeplClient must be used as an async context manager")
        headers = {
            "Authorization": f"DeepL-Auth-Key {self._settings.api_key}",
            "User-Agent": CMARKTRANS_USER_AGENT,
        }
        return await request_with_retries(
            self._client, method, self.endpoint(api), data=data, headers=headers
        )


def _parse(model: type[_Model], response: httpx.Response) -> _Model:
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise ProviderError(f"Unexpected response from {response.request.url}: {exc}") from exc
