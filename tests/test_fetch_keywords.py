import json
import sys
from datetime import datetime, timezone

import pandas as pd

from keyword_engine.models import EnrichedTerm, KeywordResponse
from keyword_engine.ranker import rank
from scripts import fetch_keywords
from scripts.fetch_keywords import generate_keywords_report, keywords_frame


def _response(note=None, source="fresh"):
    terms = [
        EnrichedTerm(term="台積電", local_score=12, external_heat=80, order=0, enriched=True),
        EnrichedTerm(term="聯發科", local_score=9, external_heat=0, order=1, enriched=False),
    ]
    items = rank(terms, now=datetime(2025, 10, 9, tzinfo=timezone.utc))
    return KeywordResponse(items=items, note=note, source=source)


def test_keywords_frame_has_one_row_per_keyword():
    df = keywords_frame(_response())

    assert list(df["keyword"]) == ["台積電", "聯發科"]
    assert list(df["rank"]) == [1, 2]
    assert list(df["enriched"]) == [True, False]
    assert df.loc[0, "fused_score"] == 39.2


def test_keywords_frame_empty_keeps_columns():
    df = keywords_frame(KeywordResponse(items=[], note="No data available: down", source="empty"))
    assert df.empty
    assert "external_heat" in df.columns


def test_report_mentions_source_note_and_ranking():
    response = _response(note="Serving last cached result: HTTP 503", source="stale-cache")
    report = generate_keywords_report(keywords_frame(response), response)

    assert "stale-cache" in report
    assert "Serving last cached result" in report
    assert "Enriched with Trends heat: 50%" in report
    assert "台積電" in report and "聯發科" in report


def test_report_for_empty_ranking():
    response = KeywordResponse(items=[], note="No data available: down", source="empty")
    assert "No keywords available." in generate_keywords_report(keywords_frame(response), response)


def test_main_writes_csv_and_forwards_flags(monkeypatch, tmp_path, capsys):
    seen = {}

    async def fake_fetch(nocache=False, settings=None):
        seen["nocache"] = nocache
        seen["max_terms"] = settings.max_terms
        return _response()

    csv_path = tmp_path / "out" / "ranking.csv"
    monkeypatch.setattr(fetch_keywords, "fetch_trending_keywords", fake_fetch)
    monkeypatch.setattr(sys, "argv", ["fetch_keywords.py", "--nocache", "--limit", "5", "--csv", str(csv_path)])

    fetch_keywords.main()

    assert seen == {"nocache": True, "max_terms": 5}
    saved = pd.read_csv(csv_path, encoding="utf-8-sig")
    assert list(saved["keyword"]) == ["台積電", "聯發科"]
    assert "TAIWAN STOCK TRENDING KEYWORDS" in capsys.readouterr().out


def test_main_json_prints_payload(monkeypatch, capsys):
    async def fake_fetch(nocache=False, settings=None):
        return _response()

    monkeypatch.setattr(fetch_keywords, "fetch_trending_keywords", fake_fetch)
    monkeypatch.setattr(sys, "argv", ["fetch_keywords.py", "--json"])

    fetch_keywords.main()

    payload = json.loads(capsys.readouterr().out)
    assert payload[0]["keyword"] == "台積電"
    assert payload[0]["trendDirection"] == "up"
