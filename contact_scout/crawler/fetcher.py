# contact_scout/crawler/fetcher.py
"""
Fetcher module: one bounded-timeout GET per page, no retries.

Redirects are followed by hand so that a hop to another origin is refused
before it is requested.
"""
from __future__ import annotations

import asyncio
from urllib.parse import urljoin

from aiohttp import ClientError, ClientSession, ClientTimeout

from contact_scout.crawler.links import origin_of
from contact_scout.crawler.models import PageData
from contact_scout.errors import FetchFailed

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
MAX_REDIRECTS = 5


class Fetcher:
    """Fetches text pages of one origin; every failure surfaces as :class:`FetchFailed`."""

    def __init__(self, session: ClientSession, timeout: float, origin: str) -> None:
        self.session = session
        self.timeout = ClientTimeout(total=timeout)
        self.origin = origin

    async def fetch(self, url: str) -> PageData:
        """
        GET *url* and return its decoded body with the final URL.

        Raises FetchFailed on network errors, timeouts, non-2xx statuses,
        non-text responses (images, archives …) and redirects that leave
        the origin.
        """
        current = url
        try:
            for _ in range(MAX_REDIRECTS + 1):
                async with self.session.get(
                    current, timeout=self.timeout, allow_redirects=False, raise_for_status=False
                ) as resp:
                    if resp.status in REDIRECT_STATUSES:
                        location = resp.headers.get("Location")
                        if not location:
                            raise FetchFailed(url, f"HTTP {resp.status} without Location")
                        current = urljoin(current, location)
                        if origin_of(current) != self.origin:
                            raise FetchFailed(url, f"redirect leaves the site: {current}")
                        continue
                    if not 200 <= resp.status < 300:
                        raise FetchFailed(url, f"HTTP {resp.status}")
                    mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    if mime and not (mime.startswith("text/") or "html" in mime or "xml" in mime):
                        raise FetchFailed(url, f"unsupported content type {mime}")
                    text = await resp.text(errors="replace")
                    return PageData(current, text)
        except asyncio.TimeoutError as exc:
            raise FetchFailed(url, "timeout") from exc
        except ClientError as exc:
            raise FetchFailed(url, f"{type(exc).__name__}: {exc}") from exc
        raise FetchFailed(url, "too many redirects")
