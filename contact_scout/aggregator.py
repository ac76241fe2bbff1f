# File: contact_scout/aggregator.py
"""contact_scout.aggregator: primary profile + fallback crawl → one ContactRecord."""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

from aiohttp import ClientError

from contact_scout.blacklists import is_blacklisted_website
from contact_scout.cache import ResultCache
from contact_scout.config import EngineConfig
from contact_scout.crawler.crawler import ContactCrawler
from contact_scout.crawler.models import CrawlTarget
from contact_scout.errors import InvalidTarget
from contact_scout.extractor import extract_emails, extract_tracking_link, join_emails
from contact_scout.logger import get_logger
from contact_scout.models import ContactRecord, PrimaryProfile, QuotaSession
from contact_scout.ratelimit import RateGovernor

__all__ = ["Aggregator"]

log = get_logger("aggregator")


class Aggregator:
    """Consult cache → else crawl (rate-governed) → merge → cache."""

    def __init__(
        self,
        config: EngineConfig,
        crawler: ContactCrawler,
        cache: ResultCache,
        governor: RateGovernor,
    ) -> None:
        self.config = config
        self.crawler = crawler
        self.cache = cache
        self.governor = governor

    def primary_record(self, profile: PrimaryProfile) -> Tuple[ContactRecord, Optional[str]]:
        """Fields derivable without network access, plus the crawlable root URL.

        The declared website is dropped when malformed or when it points at a
        platform on the website blacklist (Spotify, TikTok …). A website that
        is itself an Instagram profile fills the Instagram field instead of
        being crawled.
        """
        instagram = profile.social_link("instagram", self.config.instagram_base)
        website: Optional[str] = None
        crawl_root: Optional[str] = None

        declared = profile.declared_website
        if declared:
            try:
                target = CrawlTarget.from_url(declared)
            except InvalidTarget as exc:
                log.info("Ignoring website of %s: %s", profile.display_name, exc)
            else:
                if is_blacklisted_website(target.root_url):
                    log.debug("Blacklisted website for %s: %s", profile.display_name, declared)
                elif self.config.instagram_marker in target.origin:
                    instagram = instagram or declared.strip()
                else:
                    website = declared.strip()
                    crawl_root = target.root_url

        record = ContactRecord(
            website=website,
            instagram=instagram,
            email=join_emails(extract_emails(profile.bio_text)),
            track_link=extract_tracking_link(profile.bio_text),
        )
        return record, crawl_root

    async def resolve(
        self,
        profile: PrimaryProfile,
        client_key: str,
        session: QuotaSession,
    ) -> ContactRecord:
        """Unified contact record of *profile*.

        Raises :class:`~contact_scout.errors.RateExceeded` when a crawl was
        needed but not admitted; every other failure degrades to absent
        fields.
        """
        record, crawl_root = self.primary_record(profile)
        if record.is_complete() or crawl_root is None:
            return record

        found = self.cache.get(crawl_root)
        if found is None:
            self.governor.admit(client_key, session).raise_for_rejection()
            log.info(
                "Crawling %s for %s (missing: %s)",
                crawl_root,
                profile.display_name,
                ", ".join(record.missing_fields()),
            )
            try:
                found = await self.crawler.crawl(crawl_root, deadline=self.config.email_deadline)
            except (ClientError, asyncio.TimeoutError) as exc:
                log.warning("Crawl of %s failed: %s", crawl_root, exc)
                found = ContactRecord(website=crawl_root)
            self.cache.put(crawl_root, found)
        return record.merge(found)
