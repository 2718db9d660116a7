"""Exception hierarchy shared by the fetchers and the keyword pipeline."""
from __future__ import annotations

from typing import Optional


class KeywordEngineError(Exception):
    """Base class for all keyword-engine failures."""


class FetchError(KeywordEngineError):
    """Non-retryable HTTP status, transport failure or exhausted retries."""

    def __init__(self, message: str, status: Optional[int] = None, snippet: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.snippet = snippet


class BadUpstreamFormat(FetchError):
    """The upstream answered, but not with the shape we expected (e.g. HTML for JSON)."""


class EmptyCandidatePool(KeywordEngineError):
    """Filtering admitted zero terms, so there is nothing to rank."""


class CachePersistenceError(KeywordEngineError):
    """The cache slot could not be written."""
