"""HTTP utilities for calling the translation API with retry logic."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final

import httpx

from cmarktrans.config import CMARKTRANS_FETCH_BACKOFF_S, CMARKTRANS_FETCH_MAX_RETRIES
from cmarktrans.exceptions import ProviderError, QuotaExceededError, RateLimitError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

# DeepL answers 456 once the character quota is used up.
QUOTA_EXCEEDED_STATUS: Final[int] = 456


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    data: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Send a request, retrying transient failures with exponential backoff.

    Args:
        client: The httpx.AsyncClient used for connection pooling.
        method: HTTP method.
        url: The URL to call.
        data: Optional form fields. List values are sent as repeated fields.
        params: Optional query parameters.
        headers: Optional extra request headers.

    Returns:
        The successful response.

    Raises:
        QuotaExceededError: If the provider reports an exhausted quota.
        RateLimitError: If the provider keeps rate limiting after all retries.
        ProviderError: For any other non-success response or transport failure.
    """
    last_exc: Exception | None = None

    for attempt in range(CMARKTRANS_FETCH_MAX_RETRIES + 1):
        try:
            response = await client.request(
                method, url, data=data, params=params, headers=headers
            )
        except httpx.RequestError as exc:
            last_exc = exc
        else:
            if response.status_code == QUOTA_EXCEEDED_STATUS:
                raise QuotaExceededError(f"Translation quota exceeded ({method} {url})")
            if response.status_code == 429:
                last_exc = RateLimitError(f"HTTP 429 from {url}")
            elif response.status_code in RETRY_STATUS_CODES:
                last_exc = ProviderError(f"HTTP {response.status_code} from {url}")
            elif response.is_error:
                raise ProviderError(
                    f"HTTP {response.status_code} from {method} {url}: {response.text.strip()}"
                )
            else:
                return response

        if attempt < CMARKTRANS_FETCH_MAX_RETRIES:
            backoff = CMARKTRANS_FETCH_BACKOFF_S * (2**attempt)
            logger.debug("Retrying %s %s in %.1fs after %s", method, url, backoff, last_exc)
            await asyncio.sleep(backoff)

    if isinstance(last_exc, ProviderError):
        raise last_exc
    raise ProviderError(f"Failed to call {url}: {last_exc}")
