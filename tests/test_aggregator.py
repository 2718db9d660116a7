from keyword_engine.aggregator import aggregate, aggregate_weighted, merge_pools, top_candidates


def test_aggregate_counts_occurrences_across_titles() -> None:
    titles = [
        "[新聞] 台積電 法說 上修",
        "Re: [討論] 台積電 還能追嗎",
        "[標的] 聯發科 多",
        "[閒聊] 2024/10/01 盤後閒聊",
    ]
    counts = aggregate(titles)
    assert counts["台積電"] == 2
    assert counts["法說"] == 1
    assert counts["聯發科"] == 1
    assert "閒聊" not in counts
    assert "盤後閒聊" not in counts


def test_aggregate_merges_by_truncated_key() -> None:
    long_a = "台積電法說會重點整理第一篇"
    long_b = "台積電法說會重點整理第一次"
    counts = aggregate([long_a, long_b])
    assert counts == {"台積電法說會重點整理第一": 2}


def test_aggregate_preserves_discovery_order() -> None:
    counts = aggregate(["聯發科", "台積電", "聯發科"])
    assert list(counts) == ["聯發科", "台積電"]


def test_aggregate_weighted_sums_weights_across_seeds() -> None:
    pairs = [
        ("台積電 股價", 100),
        ("聯發科", 40),
        ("台積電", 25),
        ("天氣", 90),
        ("0050", 70),
        ("broken", "n/a"),
    ]
    weights = aggregate_weighted(pairs)
    assert weights == {"台積電": 125.0, "聯發科": 40.0}


def test_merge_pools_accumulates_instead_of_overwriting() -> None:
    merged = merge_pools({"台積電": 3, "降息": 1}, {"降息": 2, "聯發科": 5})
    assert merged == {"台積電": 3, "降息": 3, "聯發科": 5}
    assert list(merged) == ["台積電", "降息", "聯發科"]


def test_top_candidates_orders_by_score_then_discovery() -> None:
    pool = {"降息": 2, "台積電": 5, "聯發科": 2, "鴻海": 1}
    top = top_candidates(pool, k=3)
    assert [c.term for c in top] == ["台積電", "降息", "聯發科"]
    assert [c.local_score for c in top] == [5, 2, 2]
    assert top[1].order < top[2].order
