"""Frequency aggregation of admitted tokens into a ranked candidate pool."""
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .models import CandidateTerm
from .tokenizer import admitted_tokens, is_admissible, normalize_key, tokenize

# Insertion order of the dict is the discovery order.
Pool = Dict[str, float]


def aggregate(fragments: Iterable[str]) -> Pool:
    """Count admitted tokens across all *fragments*, merged by dedup key."""
    counts: Pool = {}
    for fragment in fragments:
        for key in admitted_tokens(fragment):
            counts[key] = counts.get(key, 0) + 1
    return counts


def aggregate_weighted(pairs: Iterable[Tuple[str, float]]) -> Pool:
    """Sum reported relevance weights per admitted term.

    *pairs* are ``(query, weight)`` tuples as surfaced by related-query
    lookups; a query may be reported by several seeds, and a query may
    carry more than one admissible token.
    """
    weights: Pool = {}
    for query, weight in pairs:
        try:
            value = float(weight)
        except (TypeError, ValueError):
            continue
        if value <= 0:
            continue
        for token in tokenize(query):
            if not is_admissible(token):
                continue
            key = normalize_key(token)
            weights[key] = weights.get(key, 0) + value
    return weights


def merge_pools(*pools: Pool) -> Pool:
    """Sum several pools; a key keeps the position of its first discovery."""
    merged: Pool = {}
    for pool in pools:
        for key, score in pool.items():
            merged[key] = merged.get(key, 0) + score
    return merged


def top_candidates(pool: Pool, k: int | None = None) -> List[CandidateTerm]:
    """Order *pool* by local score (desc) then discovery order, keep the first *k*."""
    ordered = sorted(
        enumerate(pool.items()),
        key=lambda item: (-item[1][1], item[0]),
    )
    if k is not None:
        ordered = ordered[:k]
    return [
        CandidateTerm(term=term, local_score=score, order=order)
        for order, (term, score) in ordered
    ]
