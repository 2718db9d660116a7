"""HTTP retrieval with retry/backoff against rate-limited upstreams."""
from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from keyword_engine.config import (
    DEFAULT_HEADERS,
    FETCH_BACKOFF_MS,
    FETCH_MAX_RETRIES,
    HTTP_TIMEOUT_SECONDS,
    JITTER_MS,
    SNIPPET_LENGTH,
)
from keyword_engine.errors import BadUpstreamFormat, FetchError

logger = logging.getLogger(__name__)

# Google Trends prepends this to every JSON body to defeat JSON hijacking.
XSSI_PREFIX = ")]}'"

Sleep = Callable[[float], Awaitable[None]]
Jitter = Callable[[], float]


def _default_jitter() -> float:
    return random.uniform(0, JITTER_MS)


def backoff_delay_ms(attempt: int, base_backoff_ms: float, jitter: Jitter = _default_jitter) -> float:
    """Delay before retrying after the zero-based *attempt*."""
    return base_backoff_ms * (2 ** attempt) + jitter()


def is_retryable(status: int) -> bool:
    return status == 429 or status >= 500


def strip_xssi_prefix(text: str) -> str:
    """Remove the ``)]}'`` guard (and the comma some endpoints add after it)."""
    body = text.lstrip()
    if body.startswith(XSSI_PREFIX):
        body = body[len(XSSI_PREFIX):].lstrip()
        if body.startswith(","):
            body = body[1:]
    return body


def _looks_like_html(text: str) -> bool:
    head = text.lstrip()[:64].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


def decode_body(text: str, content_type: str, expect_json: bool = False) -> Any:
    """Parse JSON-typed (or JSON-expected) bodies, return everything else as text."""
    ctype = (content_type or "").lower()
    is_json = "application/json" in ctype or "+json" in ctype
    if not (is_json or expect_json):
        return text

    body = strip_xssi_prefix(text)
    if _looks_like_html(body):
        raise BadUpstreamFormat(
            "Expected JSON but received an HTML page", snippet=text[:SNIPPET_LENGTH]
        )
    try:
        return json.loads(body)
    except ValueError as exc:
        raise BadUpstreamFormat(
            f"Unparseable JSON body: {exc}", snippet=text[:SNIPPET_LENGTH]
        ) from exc


def new_client(timeout: float = HTTP_TIMEOUT_SECONDS, **kwargs: Any) -> httpx.AsyncClient:
    """Shared client for one invocation; redirects followed like a browser would."""
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, **kwargs)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    headers: Optional[Dict[str, str]] = None,
    max_retries: int = FETCH_MAX_RETRIES,
    base_backoff_ms: float = FETCH_BACKOFF_MS,
    *,
    params: Optional[Dict[str, Any]] = None,
    expect_json: bool = False,
    sleep: Sleep = asyncio.sleep,
    jitter: Jitter = _default_jitter,
) -> Any:
    """GET *url*, retrying 429/5xx and transport errors with exponential backoff.

    Makes at most ``max_retries + 1`` attempts.  Returns parsed JSON for
    JSON bodies and raw text otherwise.

    Raises
    ------
    FetchError
        Non-retryable status, or retries exhausted.
    BadUpstreamFormat
        JSON was expected but the body is HTML or unparseable.
    """
    merged_headers = {**DEFAULT_HEADERS, **(headers or {})}
    last_error: Optional[FetchError] = None

    for attempt in range(max_retries + 1):
        try:
            response = await client.get(url, headers=merged_headers, params=params)
        except httpx.TransportError as exc:
            last_error = FetchError(f"Transport error for {url}: {exc}")
        else:
            if response.is_success:
                return decode_body(
                    response.text, response.headers.get("content-type", ""), expect_json
                )
            snippet = response.text[:SNIPPET_LENGTH]
            last_error = FetchError(
                f"HTTP {response.status_code}: {snippet}",
                status=response.status_code,
                snippet=snippet,
            )
            if not is_retryable(response.status_code):
                raise last_error

        if attempt < max_retries:
            wait_ms = backoff_delay_ms(attempt, base_backoff_ms, jitter)
            logger.info(
                f"Retrying {url} in {wait_ms:.0f} ms (attempt {attempt + 1}/{max_retries + 1}): {last_error}"
            )
            await sleep(wait_ms / 1000)

    logger.warning(f"Giving up on {url} after {max_retries + 1} attempts")
    raise last_error or FetchError(f"No attempt made for {url}")
