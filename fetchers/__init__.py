"""Upstream fetchers: HTTP retry layer, PTT scraper, Google Trends client."""
