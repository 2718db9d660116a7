"""External heat enrichment of the top candidates, in rate-limit friendly batches."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from .config import ENRICH_BATCH_SIZE, ENRICH_TOP_K
from .models import CandidateTerm, EnrichedTerm
from .outcomes import Outcome, capture

logger = logging.getLogger(__name__)

HeatFn = Callable[[str], Awaitable[int]]


def _clamp_heat(value: object) -> int:
    try:
        heat = int(round(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, heat))


class TrendsEnricher:
    """Attach an interest-over-time heat (0-100) to candidate terms.

    Only the first ``top_k`` candidates are looked up.  Lookups run
    concurrently inside a batch of ``batch_size`` and batches run one after
    another, which bounds the number of in-flight upstream calls.
    """

    def __init__(
        self,
        heat_fn: Optional[HeatFn],
        batch_size: int = ENRICH_BATCH_SIZE,
        top_k: int = ENRICH_TOP_K,
    ):
        self.heat_fn = heat_fn
        self.batch_size = max(1, batch_size)
        self.top_k = max(0, top_k)

    async def try_score(self, term: str) -> Outcome[int]:
        if self.heat_fn is None:
            return Outcome.success(term, 0)
        outcome = await capture(term, lambda: self.heat_fn(term))
        if outcome.ok:
            return Outcome.success(term, _clamp_heat(outcome.value))
        return outcome

    async def score(self, term: str) -> int:
        """Heat for *term*; any failure, rate limiting included, scores 0."""
        outcome = await self.try_score(term)
        if not outcome.ok:
            logger.warning(f"Trends lookup failed for {term!r}: {outcome.error}")
        return outcome.value_or(0)

    async def enrich(self, candidates: Sequence[CandidateTerm]) -> List[EnrichedTerm]:
        head = list(candidates[: self.top_k])
        tail = list(candidates[self.top_k:])
        enriched: List[EnrichedTerm] = []
        failed = 0

        for start in range(0, len(head), self.batch_size):
            batch = head[start:start + self.batch_size]
            outcomes = await asyncio.gather(*(self.try_score(c.term) for c in batch))
            for candidate, outcome in zip(batch, outcomes):
                if not outcome.ok:
                    failed += 1
                    logger.warning(f"Trends lookup failed for {candidate.term!r}: {outcome.error}")
                enriched.append(
                    EnrichedTerm(
                        term=candidate.term,
                        local_score=candidate.local_score,
                        order=candidate.order,
                        external_heat=outcome.value_or(0),
                        enriched=outcome.ok and self.heat_fn is not None,
                    )
                )

        for candidate in tail:
            enriched.append(
                EnrichedTerm(term=candidate.term, local_score=candidate.local_score, order=candidate.order)
            )

        if head:
            logger.info(f"Enriched {len(head)} terms ({failed} lookups failed)")
        return enriched
