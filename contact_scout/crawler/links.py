# contact_scout/crawler/links.py
"""
Link extraction and URL normalization utilities for the contact crawler.
"""
from __future__ import annotations

import posixpath
from typing import List
from urllib.parse import parse_qsl, quote, unquote, urlencode, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from contact_scout.blacklists import has_file_extension

__all__ = ["normalize_url", "origin_of", "extract_links"]

_SKIP_SCHEMES = ("mailto:", "javascript:", "tel:", "sms:", "data:")


def normalize_url(url: str) -> str:
    """
    Canonical form used for the visited set and cache keys.

    Lower-cases scheme and host, collapses ``.``/``..`` segments, keeps a
    trailing slash, sorts the query and drops the fragment.
    """
    parsed = urlparse(url.strip())
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if parsed.path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    # posixpath keeps a leading double slash
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    norm = quote(norm, safe="/")
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, norm, "", query, ""))


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` of *url*, lower-cased."""
    parsed = urlparse(url)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def extract_links(soup: BeautifulSoup, page_url: str, origin: str) -> List[str]:
    """
    Same-origin links of a parsed page, normalized, in document order.

    Ignores mailto:/javascript:/tel: hrefs, other origins and links to
    static files (images, archives, PDFs).
    """
    seen: set[str] = set()
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip().split("#", 1)[0]
        if not raw or raw.lower().startswith(_SKIP_SCHEMES):
            continue
        try:
            absolute = urljoin(page_url, raw)
            parsed = urlparse(absolute)
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https") or origin_of(absolute) != origin:
            continue
        if has_file_extension(parsed.path):
            continue
        norm = normalize_url(absolute)
        if norm not in seen:
            seen.add(norm)
            links.append(norm)
    return links
