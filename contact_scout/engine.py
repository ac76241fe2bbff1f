# File: contact_scout/engine.py
"""contact_scout.engine: facade wiring config, cache, governor, crawler and aggregator."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from contact_scout.aggregator import Aggregator
from contact_scout.cache import ResultCache
from contact_scout.config import EngineConfig
from contact_scout.crawler.crawler import ContactCrawler
from contact_scout.errors import RateExceeded
from contact_scout.logger import logger
from contact_scout.models import ContactRecord, PrimaryProfile, QuotaSession
from contact_scout.ratelimit import RateGovernor

__all__ = ["Engine", "Resolution", "resolve_profiles", "crawl_site"]


@dataclass(slots=True)
class Resolution:
    """Outcome of one profile in a batch: a record, or a rate rejection."""

    name: str
    record: Optional[ContactRecord] = None
    error: Optional[RateExceeded] = None

    def to_dict(self) -> Dict[str, Any]:
        fields = (self.record or ContactRecord()).to_dict()
        return {
            "name": self.name,
            **fields,
            "error": self.error.user_message if self.error else None,
        }


class Engine:
    """Entry point for the CLI and tests; an async context manager owning the HTTP session.

    The cache and the governor are process-wide state: pass the same
    instances to every Engine that should share them.
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        cache: Optional[ResultCache] = None,
        governor: Optional[RateGovernor] = None,
        crawler: Optional[ContactCrawler] = None,
    ) -> None:
        self.config = config
        if cache is None:
            cache = ResultCache(config.cache_ttl, max_entries=config.cache_max_entries)
        self.cache = cache
        self.governor = governor or RateGovernor(
            per_minute=config.rate_per_minute,
            window=config.rate_window,
            per_day=config.daily_limit,
            daily_window=config.daily_window,
        )
        self.crawler = crawler or ContactCrawler(config)
        self.aggregator = Aggregator(config, self.crawler, self.cache, self.governor)

    async def __aenter__(self) -> Engine:
        await self.crawler.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.crawler.__aexit__(exc_type, exc, tb)

    async def resolve(
        self, profile: PrimaryProfile, caller_identity: str, session: QuotaSession
    ) -> ContactRecord:
        """Resolve one profile; raises RateExceeded when not admitted."""
        return await self.aggregator.resolve(profile, caller_identity, session)

    async def resolve_many(
        self,
        profiles: Sequence[PrimaryProfile],
        caller_identity: str,
        session: QuotaSession,
    ) -> List[Resolution]:
        """Resolve *profiles* with at most ``config.concurrency`` in flight.

        A rate rejection is recorded on its item; the rest of the batch goes on.
        """
        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def _one(profile: PrimaryProfile) -> Resolution:
            async with semaphore:
                try:
                    record = await self.resolve(profile, caller_identity, session)
                except RateExceeded as exc:
                    logger.warning("%s: %s", profile.display_name, exc.user_message)
                    return Resolution(profile.display_name, error=exc)
                return Resolution(profile.display_name, record=record)

        return list(await asyncio.gather(*(_one(p) for p in profiles)))

    async def crawl(
        self, url: str, *, deadline: Optional[float] = None, strict: bool = False
    ) -> ContactRecord:
        """Crawl *url* directly, bypassing cache and admission control."""
        return await self.crawler.crawl(url, deadline=deadline, strict=strict)


async def resolve_profiles(
    config: EngineConfig,
    profiles: Sequence[PrimaryProfile],
    caller_identity: str,
    session: QuotaSession,
) -> List[Resolution]:
    """Open an Engine, resolve *profiles* and close it again."""
    logger.info("Resolving %d profile(s)…", len(profiles))
    async with Engine(config) as engine:
        return await engine.resolve_many(profiles, caller_identity, session)


async def crawl_site(
    config: EngineConfig, url: str, *, deadline: Optional[float] = None, strict: bool = False
) -> ContactRecord:
    """Open an Engine and crawl a single site."""
    async with Engine(config) as engine:
        return await engine.crawl(url, deadline=deadline, strict=strict)
