# File: tests/test_crawler.py
# Test-suite for the contact crawler against local aiohttp sites
from __future__ import annotations

import asyncio
import time

import pytest
from aiohttp import web

from contact_scout.config import EngineConfig
from contact_scout.crawler import ContactCrawler
from contact_scout.errors import CrawlExhausted, InvalidTarget

#: seconds a "slow" handler sleeps
SLOW_SLEEP: float = 3.0


async def run_crawler(config: EngineConfig, url: str, **kwargs):
    """Run one crawl inside a generous outer timeout."""
    async with ContactCrawler(config) as crawler:
        return await asyncio.wait_for(crawler.crawl(url, **kwargs), timeout=30)


@pytest.mark.asyncio()
async def test_three_page_site_stops_at_first_email(bare_config, fake_site):
    site = await fake_site(
        {
            "/": '<a href="/b">B</a><a href="/c">C</a>',
            "/b": "<p>Nothing here</p>",
            "/c": "<p>Demos to demo@artistmail.com</p>",
        }
    )
    record = await run_crawler(bare_config, site.url("/"))

    assert record.email == "demo@artistmail.com"
    assert site.served <= {"/", "/b", "/c"}
    assert sum(site.hits.values()) == 3


@pytest.mark.asyncio()
async def test_email_on_root_fetches_one_page(engine_config, fake_site):
    site = await fake_site(
        {
            "/": '<footer>hello@artistmail.com</footer><a href="/other">o</a>',
            "/other": "<p>other@artistmail.com</p>",
        }
    )
    record = await run_crawler(engine_config, site.url("/"))

    assert record.email == "hello@artistmail.com"
    assert dict(site.hits) == {"/": 1}


@pytest.mark.asyncio()
async def test_contact_paths_are_seeded_before_discovered_links(engine_config, fake_site):
    site = await fake_site(
        {
            "/": '<a href="/deep/page">deep</a>',
            "/about/": "<p>mgmt@bigroom.agency or me@artistmail.com</p>",
            "/deep/page": "<p>deep@artistmail.com</p>",
        }
    )
    record = await run_crawler(engine_config, site.url("/"))

    assert record.email == "me@artistmail.com"
    assert "/deep/page" not in site.hits
    # seeded contact pages that 404 are skipped, not fatal
    assert site.hits["/contact"] == 1


@pytest.mark.asyncio()
async def test_never_leaves_origin(bare_config, fake_site):
    other = await fake_site({"/": "<p>offsite@artistmail.com</p>"})
    site = await fake_site({"/": f'<a href="{other.url("/")}">partner</a><a href="/b">b</a>', "/b": "<p>-</p>"})
    record = await run_crawler(bare_config, site.url("/"))

    assert record.email is None
    assert not other.hits
    assert site.served == {"/", "/b"}


@pytest.mark.asyncio()
async def test_page_budget(fake_site):
    pages = {"/": "".join(f'<a href="/p{i}">p{i}</a>' for i in range(20))}
    pages.update({f"/p{i}": "<p>nothing</p>" for i in range(20)})
    site = await fake_site(pages)
    config = EngineConfig(fetch_timeout=2.0, max_pages=5, contact_paths=())

    record = await run_crawler(config, site.url("/"))

    assert record.email is None
    assert sum(site.hits.values()) == 5


@pytest.mark.asyncio()
async def test_failed_pages_are_skipped(bare_config, fake_site):
    async def broken(_):
        return web.Response(status=500, text="boom")

    async def image(_):
        return web.Response(body=b"\x89PNG", content_type="image/png")

    site = await fake_site(
        {
            "/": '<a href="/broken">x</a><a href="/pic">y</a><a href="/missing">z</a><a href="/ok">ok</a>',
            "/broken": broken,
            "/pic": image,
            "/ok": "<p>ok@artistmail.com</p>",
        }
    )
    record = await run_crawler(bare_config, site.url("/"))

    assert record.email == "ok@artistmail.com"
    assert site.hits["/broken"] == 1  # no retries


@pytest.mark.asyncio()
async def test_slow_page_times_out_and_crawl_continues(fake_site):
    async def slow(_):
        await asyncio.sleep(SLOW_SLEEP)
        return web.Response(text="<p>slow@artistmail.com</p>", content_type="text/html")

    site = await fake_site(
        {
            "/": '<a href="/slow">s</a><a href="/fast">f</a>',
            "/slow": slow,
            "/fast": "<p>fast@artistmail.com</p>",
        }
    )
    config = EngineConfig(fetch_timeout=0.5, contact_paths=(), email_deadline=None)
    record = await run_crawler(config, site.url("/"))

    assert record.email == "fast@artistmail.com"


@pytest.mark.asyncio()
async def test_deadline_returns_partial_result(fake_site):
    async def slow(_):
        await asyncio.sleep(SLOW_SLEEP)
        return web.Response(text="<p>late@artistmail.com</p>", content_type="text/html")

    site = await fake_site(
        {
            "/": '<a href="https://instagram.com/dj_nova">ig</a><a href="/slow">s</a>',
            "/slow": slow,
        }
    )
    config = EngineConfig(fetch_timeout=10.0, contact_paths=())
    start = time.perf_counter()
    record = await run_crawler(config, site.url("/"), deadline=0.5)
    elapsed = time.perf_counter() - start

    assert elapsed < SLOW_SLEEP
    assert record.email is None
    assert record.instagram == "https://instagram.com/dj_nova"


@pytest.mark.asyncio()
async def test_social_and_tracking_links_accumulate_across_pages(bare_config, fake_site):
    site = await fake_site(
        {
            "/": '<a href="https://instagram.com/first">ig</a><a href="/b">b</a>',
            "/b": '<a href="https://instagram.com/second">ig</a><a href="https://tstack.app/dj_nova">t</a><a href="/c">c</a>',
            "/c": "<p>dj@artistmail.com https://tstack.app/other</p>",
        }
    )
    record = await run_crawler(bare_config, site.url("/"))

    assert record.instagram == "https://instagram.com/first"
    assert record.track_link == "https://tstack.app/dj_nova"
    assert record.email == "dj@artistmail.com"
    assert record.website == site.url("/")


@pytest.mark.asyncio()
async def test_strict_crawl_raises_when_exhausted(bare_config, fake_site):
    site = await fake_site({"/": "<p>nothing</p>"})
    with pytest.raises(CrawlExhausted):
        await run_crawler(bare_config, site.url("/"), strict=True)


@pytest.mark.asyncio()
async def test_invalid_target(bare_config):
    with pytest.raises(InvalidTarget):
        await run_crawler(bare_config, "not a url")


@pytest.mark.asyncio()
async def test_concurrent_crawls_do_not_share_state(bare_config, fake_site):
    a = await fake_site({"/": "<p>a@artistmail.com</p>"})
    b = await fake_site({"/": '<a href="/x">x</a>', "/x": "<p>b@artistmail.com</p>"})
    async with ContactCrawler(bare_config) as crawler:
        ra, rb = await asyncio.gather(crawler.crawl(a.url("/")), crawler.crawl(b.url("/")))
    assert ra.email == "a@artistmail.com"
    assert rb.email == "b@artistmail.com"


@pytest.mark.asyncio()
async def test_crawl_without_session_fails(bare_config):
    with pytest.raises(RuntimeError):
        await ContactCrawler(bare_config).crawl("https://artist.com")


@pytest.mark.asyncio()
async def test_unparsable_page_is_skipped(engine_config, fake_site):
    site = await fake_site(
        {
            "/": "<p>hello</p><![ x",
            "/contact": "<p>Demos to demo@artistmail.com</p>",
        }
    )
    record = await run_crawler(engine_config, site.url("/"))

    assert record.email == "demo@artistmail.com"
    assert site.hits["/"] == 1


@pytest.mark.asyncio()
async def test_redirect_off_site_is_not_followed(engine_config, fake_site):
    other = await fake_site({"/contact": "<p>agent@othersite.net</p>"})

    async def moved(_):
        raise web.HTTPFound(other.url("/contact"))

    site = await fake_site({"/": "<p>home</p>", "/contact": moved})
    record = await run_crawler(engine_config, site.url("/"))

    assert record.email is None
    assert not other.hits
    assert site.hits["/contact"] == 1


@pytest.mark.asyncio()
async def test_redirect_within_site_is_followed(bare_config, fake_site):
    async def moved(_):
        raise web.HTTPFound("/new")

    site = await fake_site(
        {
            "/": '<a href="/old">old</a><a href="/new">new</a>',
            "/old": moved,
            "/new": "<p>moved@artistmail.com</p>",
        }
    )
    record = await run_crawler(bare_config, site.url("/"))

    assert record.email == "moved@artistmail.com"
    assert site.hits["/new"] == 1
