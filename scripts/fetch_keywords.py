#!/usr/bin/env python3

"""
Taiwan Stock Keywords Fetcher - Rank trending market terms from PTT + Google Trends.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from keyword_engine.config import load_settings
from keyword_engine.models import KeywordResponse
from keyword_engine.pipeline import fetch_trending_keywords

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


def keywords_frame(response: KeywordResponse) -> pd.DataFrame:
    """Flatten ranked keywords (provenance included) into one row per keyword."""
    rows = []
    for item in response.items:
        rows.append({
            'rank': item.rank,
            'keyword': item.keyword,
            'display_volume': item.display_volume,
            'trend': item.trend_direction,
            'local_score': item.provenance.local_score,
            'external_heat': item.provenance.external_heat,
            'fused_score': item.provenance.fused_score,
            'enriched': item.provenance.enriched,
            'last_update': item.last_update,
        })
    columns = ['rank', 'keyword', 'display_volume', 'trend', 'local_score',
               'external_heat', 'fused_score', 'enriched', 'last_update']
    return pd.DataFrame(rows, columns=columns)


def generate_keywords_report(df: pd.DataFrame, response: KeywordResponse) -> str:
    """Generate a plain-text ranking report."""
    report_lines = [
        "=" * 60,
        f"TAIWAN STOCK TRENDING KEYWORDS - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "=" * 60,
        "",
        f"📦 Source: {response.source}",
    ]
    if response.note:
        report_lines.append(f"⚠️ Note: {response.note}")

    if df.empty:
        report_lines.extend(["", "No keywords available."])
    else:
        enriched_share = df['enriched'].mean() * 100
        report_lines.extend([
            f"📊 Keywords: {len(df)}  |  Enriched with Trends heat: {enriched_share:.0f}%",
            "",
            "🔝 RANKING:",
        ])
        for _, row in df.iterrows():
            report_lines.append(
                f"  {row['rank']:>2}. {row['keyword']:<14} {row['trend']:<3} "
                f"vol {row['display_volume']:>4}  "
                f"(local {row['local_score']:g}, heat {row['external_heat']}, fused {row['fused_score']:.2f})"
            )

    report_lines.extend(["", "=" * 60])
    return "\n".join(report_lines)


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(description="Rank trending Taiwan stock keywords")
    parser.add_argument("--nocache", action="store_true", help="Bypass the fresh-cache check")
    parser.add_argument("--limit", type=int, default=None, help="Number of keywords to keep")
    parser.add_argument("--csv", type=Path, default=None, help="Write the ranking to this CSV file")
    parser.add_argument("--json", action="store_true", help="Print the JSON payload instead of a report")
    args = parser.parse_args()

    settings = load_settings()
    if args.limit:
        settings = settings.model_copy(update={'max_terms': args.limit, 'enrich_top_k': args.limit * 2})

    logger.info("📡 Fetching trending keywords…")
    response = asyncio.run(fetch_trending_keywords(nocache=args.nocache, settings=settings))

    if args.json:
        print(json.dumps(response.payload(), ensure_ascii=False, indent=2))
        return

    df = keywords_frame(response)
    if args.csv:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.csv, index=False, encoding='utf-8-sig')
        logger.info(f"💾 Ranking saved: {args.csv}")

    print(generate_keywords_report(df, response))
    logger.info("🎉 Keyword fetch complete")


if __name__ == "__main__":
    main()
