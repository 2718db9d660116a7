"""Score fusion and final ranking."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .config import DEFAULT_WEIGHTS, MAX_TERMS, TREND_FLAT, TREND_UP, TREND_UP_RANKS, FusionWeights
from .models import EnrichedTerm, Provenance, RankedKeyword


def fused_score(term: EnrichedTerm, weights: FusionWeights = DEFAULT_WEIGHTS) -> float:
    return term.local_score * weights.local + term.external_heat * weights.external


def trend_direction(rank: int) -> str:
    """Presentational label only: the first ranks read "up", the rest are flat.

    No time series is compared here.
    """
    return TREND_UP if rank <= TREND_UP_RANKS else TREND_FLAT


def display_volume(term: EnrichedTerm) -> str:
    """External heat when there is one, else the local count; never "0"."""
    volume = term.external_heat if term.external_heat > 0 else term.local_score
    return str(max(1, int(round(volume))))


def fuse(terms: Sequence[EnrichedTerm], weights: FusionWeights = DEFAULT_WEIGHTS) -> List[EnrichedTerm]:
    return [t.model_copy(update={"fused_score": fused_score(t, weights)}) for t in terms]


def rank(
    terms: Sequence[EnrichedTerm],
    limit: int = MAX_TERMS,
    weights: FusionWeights = DEFAULT_WEIGHTS,
    now: Optional[datetime] = None,
) -> List[RankedKeyword]:
    """Fuse, sort and truncate *terms* into 1-indexed :class:`RankedKeyword` records.

    Order: fused score desc, then external heat desc, then discovery order.
    """
    fused = fuse(terms, weights)
    ordered = sorted(fused, key=lambda t: (-t.fused_score, -t.external_heat, t.order))
    stamp = (now or datetime.now(timezone.utc)).isoformat()

    ranked = []
    for position, term in enumerate(ordered[: max(0, limit)], start=1):
        ranked.append(
            RankedKeyword(
                id=position,
                keyword=term.term,
                rank=position,
                display_volume=display_volume(term),
                trend_direction=trend_direction(position),
                last_update=stamp,
                provenance=Provenance(
                    local_score=term.local_score,
                    external_heat=term.external_heat,
                    fused_score=round(term.fused_score, 4),
                    enriched=term.enriched,
                ),
            )
        )
    return ranked
