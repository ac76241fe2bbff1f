# === FILE: contact_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from typing import Optional

from aiohttp import ClientSession, ClientTimeout
from bs4 import BeautifulSoup, ParserRejectedMarkup

from contact_scout.config import EngineConfig
from contact_scout.crawler.fetcher import Fetcher
from contact_scout.crawler.links import extract_links, normalize_url
from contact_scout.crawler.models import CrawlState, CrawlTarget, PageData
from contact_scout.errors import CrawlExhausted, FetchFailed
from contact_scout.extractor import extract_emails, extract_social_link, extract_tracking_link
from contact_scout.logger import get_logger
from contact_scout.models import ContactRecord

__all__ = ("ContactCrawler",)


class ContactCrawler:
    """Breadth-first, same-origin crawl that stops at the first email.

    Each crawl is sequential: one page in flight at a time, so "first email
    wins" is deterministic for a given site. Concurrency comes from running
    several crawls side by side, each with its own :class:`CrawlState`.
    """

    def __init__(self, config: EngineConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session: Optional[ClientSession] = session
        self._owns_session = session is None
        self.logger = get_logger("crawler")

    async def __aenter__(self) -> ContactCrawler:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.fetch_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def crawl(
        self,
        root_url: str,
        *,
        deadline: Optional[float] = None,
        strict: bool = False,
    ) -> ContactRecord:
        """Crawl *root_url* and return what was found.

        *deadline* bounds the whole crawl in seconds: when it expires the
        crawl is cancelled and the partial result is returned. With *strict*
        an exhausted crawl (no email) raises :class:`CrawlExhausted` instead
        of returning the partial record.

        Raises :class:`~contact_scout.errors.InvalidTarget` for a malformed
        *root_url*.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")
        target = CrawlTarget.from_url(root_url)
        state = CrawlState.seeded(target, self.config.contact_paths, self.config.max_frontier)
        self.logger.info("Crawl started: %s", target.root_url)
        start = time.monotonic()

        task = asyncio.create_task(self._run(state, self.session))
        try:
            done, _ = await asyncio.wait({task}, timeout=deadline)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task in done:
            task.result()
        else:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            self.logger.info("Deadline of %.1f s reached for %s, keeping partial result", deadline, target.root_url)

        duration = time.monotonic() - start
        self.logger.info(
            "Finished %s: %d pages (%d failed) in %.2f s, email %s",
            target.root_url,
            state.pages_fetched,
            state.failures,
            duration,
            "found" if state.found else "not found",
        )
        if strict and not state.found:
            raise CrawlExhausted(target.root_url, state.pages_fetched)
        return state.to_record()

    async def _run(self, state: CrawlState, session: ClientSession) -> None:
        fetcher = Fetcher(session, self.config.fetch_timeout, state.target.origin)
        while not self._should_stop(state):
            url = state.pop()
            if url is None:
                break
            try:
                page = await fetcher.fetch(url)
            except FetchFailed as exc:
                state.failures += 1
                self.logger.debug("Skipped %s", exc)
                continue
            # redirect targets count as visited
            state.visited.add(normalize_url(page.url))
            state.pages_fetched += 1
            try:
                soup = BeautifulSoup(page.content, "html.parser")
            except ParserRejectedMarkup as exc:
                state.failures += 1
                self.logger.debug("Unparsable markup on %s: %s", page.url, exc)
                continue
            self._scan(state, page, soup)
            if state.found:
                break
            for link in extract_links(soup, page.url, state.target.origin):
                state.enqueue(link)

    def _should_stop(self, state: CrawlState) -> bool:
        return state.found or not state.frontier or state.pages_fetched >= self.config.max_pages

    def _scan(self, state: CrawlState, page: PageData, soup: BeautifulSoup) -> None:
        if state.instagram is None:
            state.instagram = extract_social_link(soup, self.config.instagram_marker)
        if state.track_link is None:
            state.track_link = extract_tracking_link(soup)
        emails = extract_emails(page.content)
        if emails:
            self.logger.debug("Email found on %s", page.url)
            state.emails.update(emails)
            state.found = True
