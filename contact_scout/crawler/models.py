# contact_scout/crawler/models.py
"""
Data models for the contact crawler.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, Optional, Set
from urllib.parse import urljoin, urlparse

from contact_scout.errors import InvalidTarget
from contact_scout.crawler.links import normalize_url, origin_of
from contact_scout.extractor import join_emails
from contact_scout.models import ContactRecord

__all__ = ["PageData", "CrawlTarget", "CrawlState"]


@dataclass(slots=True)
class PageData:
    """Requested URL and decoded body of a fetched page."""

    url: str
    content: str


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """Root of a crawl; ``origin`` is the same-site boundary."""

    root_url: str
    origin: str

    @classmethod
    def from_url(cls, raw: object) -> CrawlTarget:
        """Validate *raw* and build the target.

        A bare host such as ``artist.com`` or ``www.artist.com/home`` is
        taken as ``https://``. Anything that is not then an absolute
        http(s) URL raises :class:`InvalidTarget`.
        """
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidTarget(raw)
        value = raw.strip()
        if "://" not in value and not value.startswith("//"):
            value = "https://" + value
        try:
            parsed = urlparse(value)
            port = parsed.port
        except ValueError as exc:
            raise InvalidTarget(raw) from exc
        host = parsed.hostname or ""
        if parsed.scheme.lower() not in ("http", "https") or not host:
            raise InvalidTarget(raw)
        if any(ch.isspace() for ch in value) or ("." not in host and host != "localhost" and port is None):
            raise InvalidTarget(raw)
        root = normalize_url(value)
        return cls(root_url=root, origin=origin_of(root))

    def seed_urls(self, contact_paths: Iterable[str]) -> list[str]:
        """Root URL followed by each contact path, without and with trailing slash."""
        seeds = [self.root_url]
        base = self.origin + "/"
        for path in contact_paths:
            url = normalize_url(urljoin(base, path.strip("/")))
            seeds.append(url)
            seeds.append(url.rstrip("/") + "/")
        return seeds


@dataclass(slots=True)
class CrawlState:
    """Traversal state of one crawl call; never shared between crawls."""

    target: CrawlTarget
    max_frontier: int
    visited: Set[str] = field(default_factory=set)
    frontier: Deque[str] = field(default_factory=deque)
    enqueued: Set[str] = field(default_factory=set)
    pages_fetched: int = 0
    failures: int = 0
    found: bool = False
    emails: Set[str] = field(default_factory=set)
    instagram: Optional[str] = None
    track_link: Optional[str] = None

    @classmethod
    def seeded(cls, target: CrawlTarget, contact_paths: Iterable[str], max_frontier: int) -> CrawlState:
        state = cls(target=target, max_frontier=max_frontier)
        for url in target.seed_urls(contact_paths):
            state.enqueue(url, force=True)
        return state

    def enqueue(self, url: str, *, force: bool = False) -> bool:
        """Queue *url* unless already visited or queued, or the frontier is full."""
        if url in self.visited or url in self.enqueued:
            return False
        if not force and len(self.frontier) >= self.max_frontier:
            return False
        self.enqueued.add(url)
        self.frontier.append(url)
        return True

    def pop(self) -> Optional[str]:
        """Next unvisited URL in FIFO order, marked visited; None when drained."""
        while self.frontier:
            url = self.frontier.popleft()
            if url in self.visited:
                continue
            self.visited.add(url)
            return url
        return None

    def to_record(self) -> ContactRecord:
        return ContactRecord(
            website=self.target.root_url,
            instagram=self.instagram,
            email=join_emails(self.emails),
            track_link=self.track_link,
        )
