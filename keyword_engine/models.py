"""Pydantic data models used across the keyword engine."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CandidateTerm(BaseModel):
    """A token that passed the admission filter, with its merged local score."""

    term: str = Field(..., min_length=1, description="Normalized dedup key, e.g. '台積電'")
    local_score: float = Field(..., ge=0, description="Occurrence count or summed related-query weight")
    order: int = Field(0, ge=0, description="Discovery order, used as the last tie-break")

    model_config = {
        "frozen": True,
    }


class EnrichedTerm(BaseModel):
    """A candidate plus its external heat and the fused score derived from both."""

    term: str
    local_score: float = Field(..., ge=0)
    order: int = 0
    external_heat: int = Field(0, ge=0, le=100, description="0 when enrichment failed or had no data")
    enriched: bool = Field(False, description="True when the external signal answered")
    fused_score: float = 0.0

    model_config = {
        "frozen": True,
    }


class Provenance(BaseModel):
    """Constituent scores kept on every ranked keyword for debugging."""

    local_score: float = Field(..., alias="localScore")
    external_heat: int = Field(..., alias="externalHeat")
    fused_score: float = Field(..., alias="fusedScore")
    enriched: bool = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RankedKeyword(BaseModel):
    """Final output record, 1-indexed by rank."""

    id: int = Field(..., ge=1)
    keyword: str
    rank: int = Field(..., ge=1)
    display_volume: str = Field(..., alias="displayVolume")
    trend_direction: str = Field(..., alias="trendDirection")
    last_update: str = Field(..., alias="lastUpdate", description="ISO-8601 timestamp of the run")
    provenance: Provenance

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class CacheEntry(BaseModel):
    """The single persisted cache slot."""

    written_at: int = Field(..., alias="timestamp", description="Epoch milliseconds of the write")
    freshness_key: Optional[str] = Field(None, alias="freshnessKey")
    payload: List[RankedKeyword] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


ResponseSource = Literal["fresh", "cache", "stale-cache", "empty"]


class KeywordResponse(BaseModel):
    """What the cache manager hands back to the request boundary."""

    items: List[RankedKeyword] = Field(default_factory=list)
    note: Optional[str] = None
    source: ResponseSource = "fresh"

    model_config = {
        "frozen": True,
    }

    def payload(self) -> List[dict]:
        return [item.to_json_dict() for item in self.items]
