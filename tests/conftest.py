# File: tests/conftest.py
from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Dict, Union

import pytest
import pytest_asyncio
from aiohttp import web

from contact_scout.config import EngineConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
PageSource = Union[str, Handler]


@dataclass
class FakeSite:
    """A running test server: base URL plus per-path hit counter."""

    base: str
    hits: Counter = field(default_factory=Counter)

    def url(self, path: str = "/") -> str:
        return f"{self.base}{path}"

    @property
    def served(self) -> set[str]:
        return set(self.hits)


class FakeClock:
    """Manually advanced clock for TTL and rate-window tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def _serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on an ephemeral port, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def fake_site() -> AsyncIterator[Callable[[Dict[str, PageSource]], Awaitable[FakeSite]]]:
    """
    Factory fixture: ``await fake_site({"/": "<html>…", "/b": handler})``.

    String pages are served as text/html; unknown paths answer 404. Every
    request, served or not, is counted in ``FakeSite.hits``.
    """
    generators = []

    async def _make(pages: Dict[str, PageSource]) -> FakeSite:
        hits: Counter = Counter()

        @web.middleware
        async def count_hits(request: web.Request, handler: Handler) -> web.StreamResponse:
            hits[request.path] += 1
            return await handler(request)

        app = web.Application(middlewares=[count_hits])
        for path, source in pages.items():
            if isinstance(source, str):
                async def _handler(_request: web.Request, body: str = source) -> web.Response:
                    return web.Response(text=body, content_type="text/html")
                app.router.add_get(path, _handler)
            else:
                app.router.add_get(path, source)

        gen = _serve_app(app)
        base = await gen.__anext__()
        generators.append(gen)
        return FakeSite(base=base, hits=hits)

    yield _make

    for gen in generators:
        await gen.aclose()


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def engine_config() -> EngineConfig:
    """Fast limits for tests; contact-page seeding left at its defaults."""
    return EngineConfig(fetch_timeout=2.0, email_deadline=5.0, max_pages=40)


@pytest.fixture()
def bare_config() -> EngineConfig:
    """Like engine_config but without seeded contact paths."""
    return EngineConfig(fetch_timeout=2.0, email_deadline=5.0, max_pages=40, contact_paths=())
