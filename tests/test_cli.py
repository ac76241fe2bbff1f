# File: tests/test_cli.py
"""Tests of the click CLI (`contact_scout.cli`) with click.testing.CliRunner.

Cover `resolve`, `crawl`, `config`, `--version` and error handling; the
engine calls are patched out so no network is touched.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import importlib

# The package re-exports the `cli` Group under the same name as the submodule,
# so fetch the module object itself for monkeypatching.
cli_module = importlib.import_module("contact_scout.cli")
from contact_scout.cli import EXIT_RATE_LIMITED, cli
from contact_scout.engine import Resolution
from contact_scout.errors import CrawlExhausted, RateExceeded
from contact_scout.models import ContactRecord, QuotaSession

RECORD = ContactRecord(
    website="https://djnova.com",
    instagram="https://instagram.com/dj_nova",
    email="demo@artistmail.com",
    track_link=None,
)


@pytest.fixture()
def profiles_file(tmp_path):
    path = tmp_path / "profiles.json"
    path.write_text(
        json.dumps(
            [
                {"display_name": "DJ Nova", "bio_text": "demo@artistmail.com", "declared_website": "djnova.com"},
                {"display_name": "MC Late", "declared_website": "https://mclate.net"},
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def calls(monkeypatch):
    """Patch resolve_profiles: first profile resolves, the rest are rate-limited."""
    seen = {}

    async def fake_resolve(cfg, profiles, caller, session):
        seen.update(cfg=cfg, caller=caller, names=[p.display_name for p in profiles])
        session.daily_count += 1
        out = [Resolution(profiles[0].display_name, record=RECORD)]
        out += [Resolution(p.display_name, error=RateExceeded("minute", 15)) for p in profiles[1:]]
        return out

    monkeypatch.setattr(cli_module, "resolve_profiles", fake_resolve)
    return seen


def invoke(*args):
    return CliRunner().invoke(cli, ["--log-level", "ERROR", *map(str, args)])


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "ContactScout" in result.output


def test_show_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg_file = tmp_path / "engine.json"
    cfg_file.write_text(json.dumps({"max_pages": 12, "daily_limit": 7}), encoding="utf-8")

    result = invoke("--config", cfg_file, "--limit", 3, "config")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["max_pages"] == 3
    assert data["daily_limit"] == 7


def test_bad_config_fails(tmp_path):
    cfg_file = tmp_path / "engine.yaml"
    cfg_file.write_text("max_pages: -1", encoding="utf-8")
    result = invoke("--config", cfg_file, "config")
    assert result.exit_code == 1
    assert "Failed to load config" in result.output


def test_resolve_stdout(tmp_path, monkeypatch, calls):
    monkeypatch.chdir(tmp_path)
    single = tmp_path / "one.json"
    single.write_text(json.dumps({"display_name": "DJ Nova"}), encoding="utf-8")

    result = invoke("resolve", single, "--caller", "10.0.0.7")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data == [
        {
            "name": "DJ Nova",
            "website": "https://djnova.com",
            "instagram": "https://instagram.com/dj_nova",
            "email": "demo@artistmail.com",
            "track_link": None,
            "error": None,
        }
    ]
    assert calls["caller"] == "10.0.0.7"


def test_resolve_rate_limited_exit_code(tmp_path, monkeypatch, profiles_file, calls):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "contacts.json"

    result = invoke("resolve", profiles_file, "--json", out)
    assert result.exit_code == EXIT_RATE_LIMITED
    assert "MC Late: Too many requests, limit: 15/minute" in result.output

    data = json.loads(out.read_text(encoding="utf-8"))
    assert [row["name"] for row in data] == ["DJ Nova", "MC Late"]
    assert data[1]["error"] == "Too many requests, limit: 15/minute"
    assert data[1]["email"] is None


def test_resolve_persists_session(tmp_path, monkeypatch, calls):
    monkeypatch.chdir(tmp_path)
    single = tmp_path / "one.json"
    single.write_text(json.dumps([{"display_name": "DJ Nova"}]), encoding="utf-8")
    session_file = tmp_path / "state" / "session.json"

    for _ in range(2):
        assert invoke("resolve", single, "--session-file", session_file).exit_code == 0
    assert QuotaSession.load(session_file).daily_count == 2


def test_resolve_html_report(tmp_path, monkeypatch, profiles_file, calls):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "report.html"
    result = invoke("resolve", profiles_file, "--html", out)
    assert result.exit_code == EXIT_RATE_LIMITED
    html = out.read_text(encoding="utf-8")
    assert "DJ Nova" in html
    assert "demo@artistmail.com" in html


def test_resolve_invalid_profiles(tmp_path, monkeypatch, calls):
    monkeypatch.chdir(tmp_path)
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"bio_text": "no name"}]), encoding="utf-8")
    result = invoke("resolve", bad)
    assert result.exit_code == 1
    assert "Invalid input" in result.output
    assert "names" not in calls


def test_crawl_prints_record(monkeypatch):
    async def fake_crawl(cfg, url, *, deadline=None, strict=False):
        await asyncio.sleep(0)
        assert url == "djnova.com"
        assert deadline == 2.0
        return RECORD

    monkeypatch.setattr(cli_module, "crawl_site", fake_crawl)
    result = invoke("crawl", "djnova.com", "--deadline", "2")
    assert result.exit_code == 0
    assert json.loads(result.output)["email"] == "demo@artistmail.com"


def test_crawl_strict_nothing_found(monkeypatch):
    async def fake_crawl(cfg, url, *, deadline=None, strict=False):
        assert strict
        raise CrawlExhausted("https://djnova.com/", 4)

    monkeypatch.setattr(cli_module, "crawl_site", fake_crawl)
    result = invoke("crawl", "djnova.com", "--strict")
    assert result.exit_code == 1
    assert "Nothing found" in result.output


def test_crawl_invalid_url():
    result = invoke("crawl", "ftp://djnova.com")
    assert result.exit_code == 1
    assert "not a crawlable URL" in result.output


def test_resolve_corrupt_session_file(tmp_path, monkeypatch, profiles_file, calls):
    monkeypatch.chdir(tmp_path)
    session_file = tmp_path / "session.json"
    session_file.write_text('{"daily_count": 3, "started_at": "yesterday"}', encoding="utf-8")

    result = invoke("resolve", profiles_file, "--session-file", session_file)
    assert result.exit_code == 1
    assert "Invalid input" in result.output
    assert "names" not in calls
