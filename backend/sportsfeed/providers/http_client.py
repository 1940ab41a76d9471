import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from sportsfeed.config import settings
from sportsfeed.providers.errors import ProviderRateLimited, ProviderRequestError

logger = logging.getLogger("sportsfeed.http_client")

_BODY_SNIPPET_CHARS = 200


def _rate_limit_delay(attempt: int) -> float:
    return min(5.0, 0.5 * attempt)


def _http_error_delay(attempt: int) -> float:
    return min(2.0 * attempt, 8.0)


def _network_error_delay(attempt: int) -> float:
    return min(0.5 * attempt, 3.0)


def _safe_url(url: str) -> str:
    """Strip query params (may contain API keys) for safe logging."""
    parsed = urlparse(str(url))
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


class ResilientClient:
    """httpx.AsyncClient wrapper with bounded retry and per-failure-kind backoff.

    `fetch` never raises just because a 2xx body is not JSON: some providers
    answer with plain-text error messages, which are returned as str.
    """

    def __init__(
        self,
        name: str,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._name = name
        self._max_retries = int(max_retries or settings.FETCH_MAX_RETRIES)
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.FETCH_TIMEOUT_SECONDS,
            transport=transport,
            follow_redirects=True,
        )

    @property
    def name(self) -> str:
        return self._name

    async def fetch(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        max_retries: Optional[int] = None,
    ) -> Any:
        """GET `url` and return the decoded JSON body (or raw text).

        Raises ProviderRequestError (ProviderRateLimited for a trailing 429)
        once all attempts are used up.
        """
        attempts = max(1, int(max_retries or self._max_retries))
        last_status: Optional[int] = None
        last_message = "no attempt made"

        for attempt in range(1, attempts + 1):
            final = attempt >= attempts
            try:
                resp = await self._client.get(url, params=params, headers=headers)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                last_status = None
                last_message = f"{type(exc).__name__}: {exc}"
                logger.warning(
                    "[%s] Network error on GET %s (attempt %d/%d): %s",
                    self._name, _safe_url(url), attempt, attempts, last_message,
                )
                if not final:
                    await asyncio.sleep(_network_error_delay(attempt))
                continue

            if resp.is_success:
                try:
                    return resp.json()
                except ValueError:
                    logger.warning(
                        "[%s] Non-JSON body from %s, returning text",
                        self._name, _safe_url(url),
                    )
                    return resp.text

            last_status = resp.status_code
            if resp.status_code == 429:
                last_message = f"HTTP 429 rate limited by {_safe_url(url)}"
                logger.warning(
                    "[%s] Rate limited (429) on GET %s (attempt %d/%d)",
                    self._name, _safe_url(url), attempt, attempts,
                )
                if not final:
                    await asyncio.sleep(_rate_limit_delay(attempt))
                continue

            body = resp.text[:_BODY_SNIPPET_CHARS] if resp.content else ""
            last_message = f"HTTP {resp.status_code} {resp.reason_phrase} - {body}".rstrip(" -")
            logger.warning(
                "[%s] HTTP %d on GET %s (attempt %d/%d)",
                self._name, resp.status_code, _safe_url(url), attempt, attempts,
            )
            if not final:
                await asyncio.sleep(_http_error_delay(attempt))

        logger.error(
            "[%s] All %d attempts failed for GET %s: %s",
            self._name, attempts, _safe_url(url), last_message,
        )
        if last_status == 429:
            raise ProviderRateLimited(last_message)
        raise ProviderRequestError(last_message, status_code=last_status)

    async def aclose(self) -> None:
        await self._client.aclose()
