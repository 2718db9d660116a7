"""Google Trends client: related-query discovery and interest-over-time.

The public Trends web API is a two-step dance: ``explore`` returns one
widget per chart, each carrying a token and a request blob, and the
``widgetdata/*`` endpoints return the chart data for that token.  Every
response body starts with the ``)]}'`` guard, which
:func:`fetchers.http_fetcher.fetch_with_retry` strips.
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Tuple

import httpx

from keyword_engine.config import (
    FETCH_BACKOFF_MS,
    TRENDS_BASE_URL,
    TRENDS_BUCKETS,
    TRENDS_GEO,
    TRENDS_LANGUAGE,
    TRENDS_MAX_RETRIES,
    TRENDS_TZ_OFFSET,
    TRENDS_WINDOW,
)
from keyword_engine.errors import BadUpstreamFormat

from .http_fetcher import fetch_with_retry

logger = logging.getLogger(__name__)

TIMESERIES_WIDGET = "TIMESERIES"
RELATED_QUERIES_WIDGET = "RELATED_QUERIES"
# Rising queries report growth in percent ("+5000%"); cap them to the 0-100 relevance scale.
MAX_RELATED_WEIGHT = 100


def heat_from_timeline(data: Any, buckets: int = TRENDS_BUCKETS) -> int:
    """Rounded mean of the last *buckets* timeline values, 0 when there are none."""
    try:
        points = data["default"]["timelineData"] or []
    except (KeyError, TypeError):
        return 0
    values = []
    for point in points[-buckets:]:
        raw = (point.get("value") or [0])[0] if isinstance(point, dict) else 0
        try:
            values.append(float(raw or 0))
        except (TypeError, ValueError):
            values.append(0.0)
    if not values:
        return 0
    mean = sum(values) / len(values)
    # half-up, so 49.5 reads as 50 like the Trends UI
    return max(0, min(100, int(math.floor(mean + 0.5))))


def related_from_widget(data: Any) -> List[Tuple[str, float]]:
    """``(query, weight)`` pairs from a related-searches payload (top + rising)."""
    try:
        ranked_lists = data["default"]["rankedList"] or []
    except (KeyError, TypeError):
        return []
    pairs: List[Tuple[str, float]] = []
    for ranked in ranked_lists:
        for entry in ranked.get("rankedKeyword", []) if isinstance(ranked, dict) else []:
            query = entry.get("query") or entry.get("topic", {}).get("title")
            if not query:
                continue
            try:
                weight = float(entry.get("value") or 0)
            except (TypeError, ValueError):
                continue
            pairs.append((str(query), min(weight, MAX_RELATED_WEIGHT)))
    return pairs


class GoogleTrendsClient:
    """Thin async wrapper over the Trends explore/widgetdata endpoints."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        geo: str = TRENDS_GEO,
        window: str = TRENDS_WINDOW,
        max_retries: int = TRENDS_MAX_RETRIES,
        base_backoff_ms: float = FETCH_BACKOFF_MS,
        **fetch_kwargs,
    ):
        self.client = client
        self.geo = geo
        self.window = window
        self.max_retries = max_retries
        self.base_backoff_ms = base_backoff_ms
        self.fetch_kwargs = fetch_kwargs

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        query = {"hl": TRENDS_LANGUAGE, "tz": TRENDS_TZ_OFFSET, **params}
        return await fetch_with_retry(
            self.client,
            f"{TRENDS_BASE_URL}/{path}",
            None,
            self.max_retries,
            self.base_backoff_ms,
            params=query,
            expect_json=True,
            **self.fetch_kwargs,
        )

    async def explore(self, keyword: str) -> Dict[str, Dict[str, Any]]:
        """Return the explore widgets for *keyword*, keyed by widget id."""
        req = {
            "comparisonItem": [{"keyword": keyword, "time": self.window, "geo": self.geo}],
            "category": 0,
            "property": "",
        }
        data = await self._get_json("explore", {"req": json.dumps(req, ensure_ascii=False)})
        widgets = data.get("widgets") if isinstance(data, dict) else None
        if not isinstance(widgets, list):
            raise BadUpstreamFormat(f"Explore response for {keyword!r} has no widgets")
        return {w.get("id"): w for w in widgets if isinstance(w, dict) and w.get("token")}

    async def _widget_data(self, keyword: str, widget_id: str, path: str) -> Any:
        widgets = await self.explore(keyword)
        widget = widgets.get(widget_id)
        if widget is None:
            raise BadUpstreamFormat(f"Explore response for {keyword!r} lacks {widget_id}")
        return await self._get_json(
            path,
            {
                "req": json.dumps(widget.get("request", {}), ensure_ascii=False),
                "token": widget["token"],
            },
        )

    async def interest_over_time(self, keyword: str) -> Any:
        return await self._widget_data(keyword, TIMESERIES_WIDGET, "widgetdata/multiline")

    async def related_queries(self, keyword: str) -> List[Tuple[str, float]]:
        data = await self._widget_data(keyword, RELATED_QUERIES_WIDGET, "widgetdata/relatedsearches")
        return related_from_widget(data)

    async def heat(self, keyword: str) -> int:
        """Heat of *keyword* over the trailing window; raises on upstream failure."""
        return heat_from_timeline(await self.interest_over_time(keyword))
