"""In-process stand-ins for PTT and Google Trends, served through ``httpx.MockTransport``."""
from __future__ import annotations

import json
from typing import Dict, List, Optional, Tuple

import httpx

GUARD = ")]}'"


def listing_page(titles: List[str], previous_index: Optional[int] = None) -> str:
    paging = f'<a class="btn wide" href="/bbs/Stock/index{previous_index}.html">‹ 上頁</a>' if previous_index else ""
    rows = "".join(f'<div class="r-ent"><div class="title"><a href="#">{t}</a></div></div>' for t in titles)
    return f"<html><body><div class='btn-group'>{paging}</div>{rows}</body></html>"


class FakeUpstreams:
    """Routes PTT listing and Trends explore/widgetdata requests to canned data."""

    def __init__(
        self,
        pages: Dict[int, List[str]],
        heat: Optional[Dict[str, List[int]]] = None,
        related: Optional[Dict[str, List[Tuple[str, int]]]] = None,
        failing_terms: Tuple[str, ...] = (),
        ptt_down: bool = False,
        trends_down: bool = False,
    ):
        self.pages = pages
        self.heat = heat or {}
        self.related = related or {}
        self.failing_terms = set(failing_terms)
        self.ptt_down = ptt_down
        self.trends_down = trends_down
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "www.ptt.cc":
            return self._ptt(request)
        return self._trends(request)

    def _ptt(self, request: httpx.Request) -> httpx.Response:
        if self.ptt_down:
            return httpx.Response(503, text="Service Unavailable")
        path = request.url.path
        newest = max(self.pages)
        if path == "/bbs/Stock/index.html":
            return self._html(listing_page(self.pages[newest], previous_index=newest))
        number = int(path.rsplit("index", 1)[1].split(".")[0])
        if number not in self.pages:
            return httpx.Response(404, text="404 - Not Found")
        return self._html(listing_page(self.pages[number]))

    def _trends(self, request: httpx.Request) -> httpx.Response:
        if self.trends_down:
            return httpx.Response(429, text="Too Many Requests")
        req = json.loads(request.url.params["req"])
        path = request.url.path
        if path.endswith("/explore"):
            keyword = req["comparisonItem"][0]["keyword"]
            if keyword in self.failing_terms:
                return httpx.Response(200, text="<!DOCTYPE html><html>unusual traffic</html>",
                                      headers={"content-type": "text/html"})
            widgets = [
                {"id": "TIMESERIES", "token": f"ts-{keyword}", "request": {"keyword": keyword}},
                {"id": "RELATED_QUERIES", "token": f"rq-{keyword}", "request": {"keyword": keyword}},
            ]
            return self._json({"widgets": widgets}, prefix=GUARD + "\n")
        keyword = req["keyword"]
        if path.endswith("/widgetdata/multiline"):
            points = [{"value": [v]} for v in self.heat.get(keyword, [])]
            return self._json({"default": {"timelineData": points}}, prefix=GUARD + ",\n")
        if path.endswith("/widgetdata/relatedsearches"):
            ranked = [{"query": q, "value": v} for q, v in self.related.get(keyword, [])]
            return self._json({"default": {"rankedList": [{"rankedKeyword": ranked}, {"rankedKeyword": []}]}},
                              prefix=GUARD + ",\n")
        return httpx.Response(404, text="unknown")

    @staticmethod
    def _html(text: str) -> httpx.Response:
        return httpx.Response(200, text=text, headers={"content-type": "text/html; charset=utf-8"})

    @staticmethod
    def _json(data, prefix: str) -> httpx.Response:
        return httpx.Response(
            200,
            text=prefix + json.dumps(data, ensure_ascii=False),
            headers={"content-type": "application/json; charset=utf-8"},
        )
