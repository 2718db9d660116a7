"""Taiwan stock trending-keyword engine.

Scrapes the PTT Stock board, filters titles down to market terms, enriches
the leaders with Google Trends heat and serves a ranked, cached top-N list.
"""

__version__ = "0.1.0"
