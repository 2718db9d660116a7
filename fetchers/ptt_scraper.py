"""PTT Stock board scraper: listing pages in, post titles out."""
from __future__ import annotations

import logging
import re
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from keyword_engine.config import PTT_BOARD_URL, PTT_COOKIE, PTT_PAGE_URL, PTT_PAGES
from keyword_engine.errors import FetchError
from keyword_engine.outcomes import Outcome, capture, failures, successes

from .http_fetcher import fetch_with_retry

logger = logging.getLogger(__name__)

_INDEX_LINK_RE = re.compile(r'href="/bbs/Stock/index(\d+)\.html"')


def extract_titles(markup: object) -> List[str]:
    """Return the trimmed, non-empty text of every ``.title a`` anchor.

    A page that cannot be parsed yields an empty list; one bad page must not
    abort a multi-page crawl.
    """
    if not isinstance(markup, str) or not markup.strip():
        return []
    try:
        soup = BeautifulSoup(markup, "html.parser")
        anchors = soup.select(".title a")
    except Exception as exc:  # noqa: BLE001
        logger.warning(f"Could not parse listing markup: {exc}")
        return []
    titles = []
    for anchor in anchors:
        text = anchor.get_text().strip()
        if text:
            titles.append(text)
    return titles


def latest_index(markup: object) -> Optional[int]:
    """Highest ``indexNNNN.html`` number linked from the board's front page."""
    if not isinstance(markup, str):
        return None
    numbers = [int(n) for n in _INDEX_LINK_RE.findall(markup)]
    return max(numbers) if numbers else None


def page_urls(latest: Optional[int], pages: int = PTT_PAGES) -> List[str]:
    """Listing URLs walking backwards from *latest*.

    Without a discovered index only the front page is crawled, so its
    titles are not counted once per page slot.
    """
    if not latest:
        return [PTT_BOARD_URL]
    return [PTT_PAGE_URL.format(index=latest - offset) for offset in range(pages) if latest - offset > 0]


class PttScraper:
    """Sequential, failure-isolated crawl of the most recent board pages."""

    def __init__(self, client: httpx.AsyncClient, pages: int = PTT_PAGES, **fetch_kwargs):
        self.client = client
        self.pages = pages
        self.fetch_kwargs = fetch_kwargs
        self.headers = {"cookie": PTT_COOKIE}

    async def _fetch(self, url: str) -> str:
        body = await fetch_with_retry(self.client, url, self.headers, **self.fetch_kwargs)
        if not isinstance(body, str):
            raise FetchError(f"Expected markup from {url}, got {type(body).__name__}")
        return body

    async def discover_latest(self) -> Optional[int]:
        try:
            front = await self._fetch(PTT_BOARD_URL)
        except FetchError as exc:
            logger.warning(f"PTT index fetch failed: {exc}")
            return None
        return latest_index(front)

    async def fetch_pages(self) -> List[Outcome[str]]:
        """Fetch every listing page in order, one :class:`Outcome` per page."""
        latest = await self.discover_latest()
        outcomes: List[Outcome[str]] = []
        for url in page_urls(latest, self.pages):
            outcome = await capture(url, lambda url=url: self._fetch(url))
            if not outcome.ok:
                logger.warning(f"PTT page fetch failed, skipping {url}: {outcome.error}")
            outcomes.append(outcome)
        return outcomes

    async def crawl_titles(self) -> List[str]:
        outcomes = await self.fetch_pages()
        titles: List[str] = []
        for markup in successes(outcomes):
            titles.extend(extract_titles(markup))
        fetched = len(outcomes) - len(failures(outcomes))
        logger.info(f"Collected {len(titles)} titles from {fetched}/{len(outcomes)} PTT pages")
        return titles
