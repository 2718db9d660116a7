from datetime import datetime, timezone

import pytest

from keyword_engine.config import FusionWeights
from keyword_engine.models import EnrichedTerm
from keyword_engine.ranker import display_volume, rank, trend_direction

NOW = datetime(2025, 10, 9, 8, 0, tzinfo=timezone.utc)


def _term(term, local, heat, order, enriched=True) -> EnrichedTerm:
    return EnrichedTerm(term=term, local_score=local, external_heat=heat, order=order, enriched=enriched)


def test_fused_order_scenario() -> None:
    terms = [
        _term("台積電", 12, 80, 0),
        _term("聯發科", 9, 40, 1),
        _term("0050", 5, 90, 2),
    ]
    ranked = rank(terms, limit=20, weights=FusionWeights(local=0.6, external=0.4), now=NOW)

    assert [k.keyword for k in ranked] == ["台積電", "0050", "聯發科"]
    fused = [k.provenance.fused_score for k in ranked]
    assert fused == [pytest.approx(39.2), pytest.approx(39.0), pytest.approx(21.4)]


def test_ranks_are_contiguous_and_scores_non_increasing() -> None:
    terms = [_term(f"台積電{i}", i % 7, (i * 13) % 101, i) for i in range(30)]
    ranked = rank(terms, limit=20, now=NOW)

    assert [k.rank for k in ranked] == list(range(1, 21))
    assert [k.id for k in ranked] == list(range(1, 21))
    scores = [k.provenance.fused_score for k in ranked]
    assert scores == sorted(scores, reverse=True)


def test_ties_break_on_heat_then_discovery_order() -> None:
    terms = [
        _term("降息", 10, 0, 0),
        _term("升息", 0, 10, 1),
        _term("通膨", 10, 0, 2),
    ]
    ranked = rank(terms, weights=FusionWeights(local=0.5, external=0.5), now=NOW)
    assert len({k.provenance.fused_score for k in ranked}) == 1
    assert [k.keyword for k in ranked] == ["升息", "降息", "通膨"]


def test_limit_truncates() -> None:
    terms = [_term(f"聯發科{i}", 10 - i, 0, i) for i in range(5)]
    assert len(rank(terms, limit=3, now=NOW)) == 3
    assert rank([], limit=3, now=NOW) == []


def test_presentation_fields() -> None:
    terms = [_term(f"鴻海{i}", 5 - i, 0, i, enriched=False) for i in range(5)]
    ranked = rank(terms, now=NOW)

    assert [k.trend_direction for k in ranked] == ["up", "up", "up", "→", "→"]
    assert ranked[0].last_update == NOW.isoformat()
    assert ranked[0].display_volume == "5"
    assert ranked[-1].display_volume == "1"
    assert ranked[0].provenance.enriched is False


def test_display_volume_prefers_heat_and_never_shows_zero() -> None:
    assert display_volume(_term("台積電", 3, 72, 0)) == "72"
    assert display_volume(_term("台積電", 3, 0, 0)) == "3"
    assert display_volume(_term("台積電", 0, 0, 0)) == "1"


def test_trend_direction_is_rank_based() -> None:
    assert trend_direction(1) == "up"
    assert trend_direction(3) == "up"
    assert trend_direction(4) == "→"


def test_json_shape_uses_camel_case() -> None:
    ranked = rank([_term("台積電", 12, 80, 0)], now=NOW)
    record = ranked[0].to_json_dict()
    assert set(record) == {"id", "keyword", "rank", "displayVolume", "trendDirection", "lastUpdate", "provenance"}
    assert set(record["provenance"]) == {"localScore", "externalHeat", "fusedScore", "enriched"}
