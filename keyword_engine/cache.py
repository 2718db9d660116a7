"""Time-boxed cache around the keyword pipeline, with stale/empty fallback.

The cache owns exactly one slot.  The clock and the storage backend are
injected, so freshness can be tested without real timers or disk:

* :class:`MemoryStorage` keeps the slot in the process (tests, warm workers);
* :class:`JsonFileStorage` persists it as ``{timestamp, freshnessKey?, payload}``.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Protocol
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from .config import CACHE_PATH, CACHE_TTL_MS, MARKET_TIMEZONE
from .errors import CachePersistenceError, EmptyCandidatePool
from .models import CacheEntry, KeywordResponse, RankedKeyword

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
Pipeline = Callable[[], Awaitable[List[RankedKeyword]]]
SCOPES = ("day", "week")


def system_clock() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def freshness_key(epoch_ms: int, scope: Optional[str], tz: str = MARKET_TIMEZONE) -> Optional[str]:
    """Coarse period id for *epoch_ms*: market-local date, ISO week, or None."""
    if scope is None:
        return None
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).astimezone(ZoneInfo(tz))
    if scope == "day":
        return moment.date().isoformat()
    if scope == "week":
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    raise ValueError(f"Unknown freshness scope: {scope!r}")


class CacheStorage(Protocol):
    def read(self) -> Optional[str]:
        ...

    def write(self, text: str) -> None:
        ...


class MemoryStorage:
    """In-process slot."""

    def __init__(self, text: Optional[str] = None):
        self.text = text
        self.reads = 0
        self.writes = 0

    def read(self) -> Optional[str]:
        self.reads += 1
        return self.text

    def write(self, text: str) -> None:
        self.writes += 1
        self.text = text


class JsonFileStorage:
    """Slot persisted as a JSON file (``/tmp`` survives warm serverless starts)."""

    def __init__(self, path: str | Path = CACHE_PATH):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self.path)


def encode_entry(entry: CacheEntry) -> str:
    return json.dumps(entry.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False)


def decode_entry(text: Optional[str]) -> Optional[CacheEntry]:
    """Parse a stored slot; absent or corrupt slots read as a miss."""
    if not text:
        return None
    try:
        return CacheEntry.model_validate_json(text)
    except (ValidationError, ValueError) as exc:
        logger.warning(f"Ignoring corrupt cache entry: {exc}")
        return None


class CacheManager:
    """Serve fresh cache, else recompute, else fall back to stale or empty."""

    def __init__(
        self,
        pipeline: Pipeline,
        storage: CacheStorage,
        ttl_ms: int = CACHE_TTL_MS,
        scope: Optional[str] = None,
        clock: Clock = system_clock,
    ):
        self.pipeline = pipeline
        self.storage = storage
        if scope is not None and scope not in SCOPES:
            raise ValueError(f"Unknown freshness scope: {scope!r}; expected one of {SCOPES}")
        self.ttl_ms = ttl_ms
        self.scope = scope
        self.clock = clock

    def _load(self) -> Optional[CacheEntry]:
        try:
            return decode_entry(self.storage.read())
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Cache read failed, treating as miss: {exc}")
            return None

    def is_fresh(self, entry: CacheEntry, now: int) -> bool:
        if now - entry.written_at >= self.ttl_ms:
            return False
        if self.scope is not None and entry.freshness_key != freshness_key(now, self.scope):
            return False
        return True

    def _persist(self, entry: CacheEntry) -> None:
        try:
            self.storage.write(encode_entry(entry))
        except Exception as exc:  # noqa: BLE001
            error = CachePersistenceError(f"Could not write cache slot: {exc}")
            logger.warning(f"{error}; serving result anyway")

    async def get(self, nocache: bool = False) -> KeywordResponse:
        """Return ranked keywords; never raises."""
        now = self.clock()
        cached = self._load()

        if cached is not None and not nocache and self.is_fresh(cached, now):
            logger.info(f"Serving {len(cached.payload)} cached keywords")
            return KeywordResponse(items=cached.payload, source="cache")

        try:
            items = await self.pipeline()
            if not items:
                raise EmptyCandidatePool("Pipeline produced no ranked keywords")
        except Exception as exc:  # noqa: BLE001 - recovered at this boundary
            logger.error(f"Keyword pipeline failed: {exc}")
            if cached is not None:
                return KeywordResponse(
                    items=cached.payload,
                    note=f"Serving last cached result: {exc}",
                    source="stale-cache",
                )
            return KeywordResponse(items=[], note=f"No data available: {exc}", source="empty")

        self._persist(
            CacheEntry(written_at=now, freshness_key=freshness_key(now, self.scope), payload=items)
        )
        return KeywordResponse(items=items, source="fresh")
