"""End-to-end keyword pipeline: sources -> filter -> aggregate -> enrich -> rank."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import httpx

from fetchers.google_trends import GoogleTrendsClient
from fetchers.http_fetcher import new_client
from fetchers.ptt_scraper import PttScraper

from .aggregator import Pool, aggregate, aggregate_weighted, merge_pools, top_candidates
from .cache import CacheManager, CacheStorage, Clock, JsonFileStorage, system_clock
from .config import RELATED_SEEDS, Settings, load_settings
from .enricher import TrendsEnricher
from .errors import EmptyCandidatePool
from .models import KeywordResponse, RankedKeyword
from .outcomes import Outcome, capture, successes
from .ranker import rank

logger = logging.getLogger(__name__)


class KeywordPipeline:
    """One stateless run of the trending-keyword computation."""

    def __init__(
        self,
        settings: Settings,
        scraper: Optional[PttScraper] = None,
        trends: Optional[GoogleTrendsClient] = None,
        clock: Clock = system_clock,
        seeds: Tuple[str, ...] = RELATED_SEEDS,
    ):
        self.settings = settings
        self.scraper = scraper
        self.trends = trends
        self.clock = clock
        self.seeds = seeds
        heat_fn = trends.heat if (trends is not None and settings.enrich) else None
        self.enricher = TrendsEnricher(
            heat_fn,
            batch_size=settings.enrich_batch_size,
            top_k=settings.enrich_top_k,
        )

    @classmethod
    def from_client(
        cls,
        client: httpx.AsyncClient,
        settings: Settings,
        clock: Clock = system_clock,
        **fetch_kwargs,
    ):
        """Wire both upstreams onto one shared client; *fetch_kwargs* reach every fetch."""
        return cls(
            settings,
            scraper=PttScraper(client, pages=settings.ptt_pages, **fetch_kwargs),
            trends=GoogleTrendsClient(client, **fetch_kwargs),
            clock=clock,
        )

    async def scrape_pool(self) -> Pool:
        if self.scraper is None:
            return {}
        titles = await self.scraper.crawl_titles()
        return aggregate(titles)

    async def related_pool(self) -> Pool:
        if self.trends is None:
            return {}
        outcomes: List[Outcome[List[Tuple[str, float]]]] = []
        for seed in self.seeds:
            outcome = await capture(seed, lambda seed=seed: self.trends.related_queries(seed))
            if not outcome.ok:
                logger.warning(f"Related queries failed for seed {seed!r}: {outcome.error}")
            outcomes.append(outcome)
        pairs = [pair for batch in successes(outcomes) for pair in batch]
        return aggregate_weighted(pairs)

    async def collect_pool(self) -> Pool:
        pools = []
        if "ptt" in self.settings.sources:
            pools.append(await self.scrape_pool())
        if "related" in self.settings.sources:
            pools.append(await self.related_pool())
        return merge_pools(*pools)

    async def run(self) -> List[RankedKeyword]:
        pool = await self.collect_pool()
        if not pool:
            raise EmptyCandidatePool("No admissible terms after filtering")
        logger.info(f"Candidate pool holds {len(pool)} terms")

        # the enricher bounds lookups to its top_k; every candidate stays rankable
        candidates = top_candidates(pool)
        enriched = await self.enricher.enrich(candidates)
        now = datetime.fromtimestamp(self.clock() / 1000, tz=timezone.utc)
        return rank(enriched, self.settings.max_terms, self.settings.weights, now)


async def fetch_trending_keywords(
    nocache: bool = False,
    settings: Optional[Settings] = None,
    storage: Optional[CacheStorage] = None,
    clock: Clock = system_clock,
    client: Optional[httpx.AsyncClient] = None,
    **fetch_kwargs,
) -> KeywordResponse:
    """Cached entry point: fresh cache, else a full run, else stale/empty fallback."""
    settings = settings or load_settings()
    storage = storage if storage is not None else JsonFileStorage(settings.cache_path)

    async def _run_with(http: httpx.AsyncClient) -> KeywordResponse:
        pipeline = KeywordPipeline.from_client(http, settings, clock=clock, **fetch_kwargs)
        manager = CacheManager(
            pipeline.run,
            storage,
            ttl_ms=settings.cache_ttl_ms,
            scope=settings.freshness_scope,
            clock=clock,
        )
        return await manager.get(nocache=nocache)

    if client is not None:
        return await _run_with(client)
    async with new_client() as http:
        return await _run_with(http)
