# File: contact_scout/extractor.py
"""contact_scout.extractor: contact signals found in page text or markup.

Pure functions, no I/O. Everything operates on text that was already fetched:

* :func:`extract_emails` – candidate addresses, role accounts and file names
  filtered out;
* :func:`extract_social_link` – a profile link of one service (Instagram …),
  page metadata first, then anchors;
* :func:`extract_tracking_link` – the tstack.app link-in-bio page.

Functions that read markup accept either a string or an already parsed
:class:`~bs4.BeautifulSoup`, so the crawler parses each page only once.
"""
from __future__ import annotations

import html
import re
from typing import Iterable, Optional, Set, Union
from urllib.parse import unquote

from bs4 import BeautifulSoup, ParserRejectedMarkup

from contact_scout.blacklists import has_file_extension, is_blacklisted_email
from contact_scout.models import EMAIL_SEPARATOR

__all__ = [
    "EMAIL_RE",
    "TRACKING_LINK_RE",
    "extract_emails",
    "join_emails",
    "extract_social_link",
    "extract_tracking_link",
    "parse_markup",
]

Markup = Union[str, BeautifulSoup]

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", re.IGNORECASE)
TRACKING_LINK_RE = re.compile(r"https://(?:www\.)?tstack\.app/[a-zA-Z0-9_]+", re.IGNORECASE)


def _is_web_link(value: str, marker: str) -> bool:
    low = value.strip().lower()
    return low.startswith(("http://", "https://", "//")) and marker in low


def parse_markup(markup: Markup) -> BeautifulSoup:
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup, "html.parser")


def _clean_candidate(raw: str) -> str:
    # %20info@… from url-encoded hrefs, stray dots from sentence punctuation
    return unquote(raw).strip().strip(".").lower()


def extract_emails(text: str) -> Set[str]:
    """Return the lower-cased addresses found in *text*.

    Matches on the role-account blacklist (agency, management, booking …,
    placeholder domains) and matches ending in an image/archive/document
    extension are dropped.
    """
    if not text:
        return set()
    found: Set[str] = set()
    for match in EMAIL_RE.findall(html.unescape(text)):
        cand = _clean_candidate(match)
        if not EMAIL_RE.fullmatch(cand):
            continue
        if has_file_extension(cand) or is_blacklisted_email(cand):
            continue
        found.add(cand)
    return found


def join_emails(emails: Iterable[str]) -> Optional[str]:
    """Render a set of addresses the way :class:`ContactRecord` stores them."""
    return EMAIL_SEPARATOR.join(sorted(set(emails))) or None


def extract_social_link(markup: Markup, service_marker: str) -> Optional[str]:
    """First link to *service_marker* (e.g. ``"instagram.com"``) on the page.

    The ``og:url`` meta tag, then ``<link rel="canonical">``, win when they
    point at the service; otherwise the first matching ``<a href>``.
    """
    marker = service_marker.lower()
    try:
        soup = parse_markup(markup)
    except ParserRejectedMarkup:
        return None

    og = soup.find("meta", attrs={"property": re.compile(r"^og:url$", re.IGNORECASE)})
    if og is not None:
        content = og.get("content")
        if isinstance(content, str) and _is_web_link(content, marker):
            return content.strip()

    canonical = soup.find("link", rel="canonical", href=True)
    if canonical is not None:
        href = canonical.get("href")
        if isinstance(href, str) and _is_web_link(href, marker):
            return href.strip()

    for tag in soup.find_all("a", href=True):
        href = tag.get("href")
        if isinstance(href, str) and _is_web_link(href, marker):
            return href.strip()
    return None


def extract_tracking_link(markup: Markup) -> Optional[str]:
    """First tstack.app link: anchors first, then anywhere in the raw text."""
    text = markup if isinstance(markup, str) else str(markup)
    if isinstance(markup, BeautifulSoup) or "<" in markup:
        try:
            soup = parse_markup(markup)
        except ParserRejectedMarkup:
            # unparsable markup falls back to the plain-text scan
            soup = None
        if soup is not None:
            for tag in soup.find_all("a", href=True):
                href = tag.get("href")
                if isinstance(href, str):
                    match = TRACKING_LINK_RE.search(href)
                    if match:
                        return match.group(0)
            text = str(soup)
    match = TRACKING_LINK_RE.search(text)
    return match.group(0) if match else None
