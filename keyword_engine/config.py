"""Named constants and environment settings for the keyword engine.

Every tunable that shapes the ranking lives here so the filtering and
scoring behaviour can be audited (and tested) without reading the
pipeline code.  Runtime overrides come from environment variables, loaded
through ``python-dotenv`` so a local ``.env`` file works the same way it
does for the fetchers.
"""
from __future__ import annotations

import os
from typing import FrozenSet, Literal, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Upstreams
# ---------------------------------------------------------------------------

PTT_BOARD_URL = "https://www.ptt.cc/bbs/Stock/index.html"
PTT_PAGE_URL = "https://www.ptt.cc/bbs/Stock/index{index}.html"
PTT_COOKIE = "over18=1"

TRENDS_BASE_URL = "https://trends.google.com/trends/api"
TRENDS_GEO = "TW"
TRENDS_LANGUAGE = "zh-TW"
TRENDS_TZ_OFFSET = -480  # minutes, UTC+8
TRENDS_WINDOW = "now 7-d"
TRENDS_BUCKETS = 24  # trailing buckets averaged into a heat value

DEFAULT_HEADERS = {
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124 Safari/537.36"
    ),
    "accept": "*/*",
}

# ---------------------------------------------------------------------------
# Retry / batching bounds
# ---------------------------------------------------------------------------

FETCH_MAX_RETRIES = 3
FETCH_BACKOFF_MS = 800
TRENDS_MAX_RETRIES = 2
JITTER_MS = 250
HTTP_TIMEOUT_SECONDS = 10.0
SNIPPET_LENGTH = 200

PTT_PAGES = 6
MAX_TERMS = 20
ENRICH_TOP_K = MAX_TERMS * 2
ENRICH_BATCH_SIZE = 5

# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


class FusionWeights(BaseModel):
    """Weights of the fused score ``local * local_weight + heat * external_weight``.

    0.6 / 0.4 is the canonical pair: forum mentions dominate, search heat
    breaks up terms that the forum talks about equally.
    """

    local: float = 0.6
    external: float = 0.4

    model_config = {
        "frozen": True,
    }


DEFAULT_WEIGHTS = FusionWeights()

KEY_MAX_LENGTH = 12
MIN_TOKEN_LENGTH = 2

# "up" for the first ranks is presentational only: no trend is computed.
TREND_UP_RANKS = 3
TREND_UP = "up"
TREND_FLAT = "→"

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

CACHE_PATH = "/tmp/stock_trends_tw_cache.json"
CACHE_TTL_MS = 60 * 60 * 1000
MARKET_TIMEZONE = "Asia/Taipei"

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

WHITELIST: Tuple[str, ...] = (
    # companies
    "台積電", "聯發科", "鴻海", "廣達", "緯創", "技嘉", "英業達", "仁寶", "華碩", "宏碁",
    "創意", "世芯", "聯詠", "聯電", "日月光", "南亞科", "台達電", "瑞昱", "臺灣高鐵",
    "台泥", "亞泥", "長榮", "陽明", "萬海", "中鋼", "大立光", "國巨", "欣興", "南電", "景碩",
    "鴻準", "統一", "台灣大", "中華電", "遠傳", "緯穎", "微星", "台光電", "聯嘉",
    "鴻華先進", "廣運", "力積電", "世界先進", "台表科", "台耀", "中美晶", "穩懋", "矽力", "矽格",
    # ETFs
    "0050", "0056", "006208", "00878", "00929", "00940", "00939",
    # macro events, flows and sectors
    "降息", "升息", "通膨", "聯準會", "FED", "外資", "投信", "自營商",
    "融資", "融券", "除權息", "除息", "財報", "營收", "法說", "庫藏股", "合併", "重組",
    "AI", "AI伺服器", "生成式AI", "車用電子", "半導體", "矽光子", "封測", "資料中心",
)

# Admitted without a whitelist hit.
ALWAYS_ALLOW: FrozenSet[str] = frozenset({
    "TSMC", "NVIDIA", "輝達", "蘋果", "特斯拉", "ASML", "Apple", "Tesla",
})

STOPWORDS: FrozenSet[str] = frozenset({
    "Re", "RE", "Fw", "FW",
    "[情報]", "[新聞]", "[討論]", "[請益]", "[心得]", "[標的]", "[閒聊]", "[公告]",
    "情報", "新聞", "討論", "請益", "標的", "公告",
    "問", "爆", "標題", "閒聊", "盤後", "心得", "求", "轉", "分享", "問卦", "心得文",
    "盤中", "盤勢", "持股", "散戶", "老師", "YT", "直播",
})

# Broad labels that match too much to be informative.
TOO_GENERIC: FrozenSet[str] = frozenset({
    "今天", "昨天", "明天", "大家", "問題", "請問", "新聞", "影片", "台股", "股票",
    "盤勢", "大盤", "股市", "散戶", "老師", "操作", "紀錄", "分享", "分析", "整理", "重點",
})

# Seeds for the related-queries source.
RELATED_SEEDS: Tuple[str, ...] = ("台股", "股票", "ETF", "半導體")

SourceName = Literal["ptt", "related"]
ResponseShape = Literal["array", "keywords", "items"]
FreshnessScope = Literal["day", "week"]


class Settings(BaseModel):
    """Runtime settings for one invocation of the keyword pipeline."""

    cache_path: str = Field(CACHE_PATH, description="JSON file holding the cache slot")
    cache_ttl_ms: int = Field(CACHE_TTL_MS, gt=0, description="Freshness window in milliseconds")
    freshness_scope: Optional[FreshnessScope] = Field(
        None, description="Force recomputation when the calendar day/week changes"
    )
    ptt_pages: int = Field(PTT_PAGES, ge=1, le=20)
    max_terms: int = Field(MAX_TERMS, ge=1, le=100)
    enrich_top_k: int = Field(ENRICH_TOP_K, ge=0)
    enrich_batch_size: int = Field(ENRICH_BATCH_SIZE, ge=1, le=8)
    enrich: bool = True
    sources: Tuple[SourceName, ...] = ("ptt",)
    response_shape: ResponseShape = "array"
    weights: FusionWeights = DEFAULT_WEIGHTS

    model_config = {
        "frozen": True,
    }


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Build :class:`Settings` from ``TREND_*`` environment variables."""
    load_dotenv()

    values: dict = {}
    if os.getenv("TREND_CACHE_PATH"):
        values["cache_path"] = os.environ["TREND_CACHE_PATH"]
    if os.getenv("TREND_CACHE_TTL_MS"):
        values["cache_ttl_ms"] = int(os.environ["TREND_CACHE_TTL_MS"])
    if os.getenv("TREND_FRESHNESS_SCOPE"):
        values["freshness_scope"] = os.environ["TREND_FRESHNESS_SCOPE"].strip().lower()
    if os.getenv("TREND_PTT_PAGES"):
        values["ptt_pages"] = int(os.environ["TREND_PTT_PAGES"])
    if os.getenv("TREND_MAX_TERMS"):
        max_terms = int(os.environ["TREND_MAX_TERMS"])
        values["max_terms"] = max_terms
        values["enrich_top_k"] = max_terms * 2
    if os.getenv("TREND_SOURCES"):
        values["sources"] = tuple(
            s.strip().lower() for s in os.environ["TREND_SOURCES"].split(",") if s.strip()
        )
    if os.getenv("TREND_RESPONSE_SHAPE"):
        values["response_shape"] = os.environ["TREND_RESPONSE_SHAPE"].strip().lower()
    values["enrich"] = _env_bool("TREND_ENRICH", True)

    return Settings(**values)
