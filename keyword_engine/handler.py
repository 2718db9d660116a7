"""Request boundary: query parameters in, always-200 JSON response out."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional

from .config import CACHE_TTL_MS, Settings, load_settings
from .models import KeywordResponse
from .pipeline import fetch_trending_keywords

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def shape_body(response: KeywordResponse, shape: str = "array") -> Any:
    """Lay out the payload for the deployment's response shape.

    A bare array cannot carry a note, so an ``array`` response with a
    diagnostic is promoted to ``{items, note}``.
    """
    items = response.payload()
    if shape == "array" and response.note is None:
        return items
    key = "keywords" if shape == "keywords" else "items"
    body: Dict[str, Any] = {key: items}
    if response.note is not None:
        body["note"] = response.note
    return body


def build_response(body: Any, ttl_ms: int = CACHE_TTL_MS) -> Dict[str, Any]:
    return {
        "statusCode": 200,
        "headers": {
            "content-type": "application/json; charset=utf-8",
            "cache-control": f"public, max-age={max(0, ttl_ms // 1000)}",
        },
        "body": json.dumps(body, ensure_ascii=False),
    }


async def handle_request(
    query_params: Optional[Mapping[str, Any]] = None,
    settings: Optional[Settings] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Answer one request; upstream failures become a note, never a 5xx."""
    params = query_params or {}
    try:
        settings = settings or load_settings()
    except Exception as exc:  # noqa: BLE001
        logger.error(f"Invalid settings, using defaults: {exc}")
        settings = Settings()

    try:
        response = await fetch_trending_keywords(
            nocache=is_truthy(params.get("nocache")), settings=settings, **kwargs
        )
    except Exception as exc:  # noqa: BLE001
        logger.error(f"Unexpected failure answering request: {exc}")
        response = KeywordResponse(items=[], note=f"Internal error: {exc}", source="empty")

    return build_response(shape_body(response, settings.response_shape), settings.cache_ttl_ms)


def handler(event: Optional[Mapping[str, Any]] = None, context: Any = None) -> Dict[str, Any]:
    """Synchronous entry point for function hosts passing a ``queryStringParameters`` event."""
    params = (event or {}).get("queryStringParameters") or {}
    return asyncio.run(handle_request(params))
