# File: contact_scout/errors.py
"""contact_scout.errors: error taxonomy of the contact discovery engine.

Only :class:`RateExceeded` ever reaches the caller of
:meth:`contact_scout.aggregator.Aggregator.resolve`; the other errors are
recovered where they are raised and degrade to "field absent".
"""
from __future__ import annotations

from typing import Literal, Optional

__all__ = [
    "EngineError",
    "FetchFailed",
    "InvalidTarget",
    "RateExceeded",
    "CrawlExhausted",
    "Window",
]

Window = Literal["minute", "day"]


class EngineError(Exception):
    """Base class for every error raised by ContactScout."""


class FetchFailed(EngineError):
    """A single page could not be retrieved (network error, timeout, non-2xx)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class InvalidTarget(EngineError, ValueError):
    """The supplied website string is not an absolute http(s) URL."""

    def __init__(self, value: object) -> None:
        super().__init__(f"not a crawlable URL: {value!r}")
        self.value = value


class RateExceeded(EngineError):
    """Admission control rejected the request for the given window."""

    def __init__(self, window: Window, limit: int, retry_after: Optional[float] = None) -> None:
        self.window = window
        self.limit = limit
        self.retry_after = retry_after
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        if self.window == "day":
            return f"Daily limit exceeded, limit: {self.limit}/day"
        return f"Too many requests, limit: {self.limit}/minute"


class CrawlExhausted(EngineError):
    """The page or time budget ran out without an email.

    Not raised by the engine: a normal empty result. The class names the
    outcome so callers that want an exception (``ContactCrawler.crawl(...,
    strict=True)``) can catch it.
    """

    def __init__(self, root_url: str, pages_fetched: int) -> None:
        super().__init__(f"no email found on {root_url} after {pages_fetched} pages")
        self.root_url = root_url
        self.pages_fetched = pages_fetched
