# File: contact_scout/blacklists.py
"""Filters shared by the extractor, the crawler and the aggregator."""
from __future__ import annotations

import re
from typing import Final

__all__ = [
    "BLACKLISTED_WEBSITES",
    "BLACKLISTED_EMAIL_TERMS",
    "BLACKLISTED_EXTENSIONS",
    "is_blacklisted_website",
    "is_blacklisted_email",
    "has_file_extension",
]

# Declared "websites" that are really other platforms and never hold contact info.
BLACKLISTED_WEBSITES: Final[re.Pattern[str]] = re.compile(
    r"tiktok|spotify|music\.apple\.com", re.IGNORECASE
)

# Role accounts (management, booking, press …) and placeholder/vendor domains.
BLACKLISTED_EMAIL_TERMS: Final[re.Pattern[str]] = re.compile(
    r"agency|management|entertainment|talent|mgmt|booking|press"
    r"|domain\.com|example|sentry|teamwass",
    re.IGNORECASE,
)

# File names such as ``logo@2x.png`` look like addresses in minified markup.
BLACKLISTED_EXTENSIONS: Final[tuple[str, ...]] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".svg",
    ".gif",
    ".tga",
    ".bmp",
    ".zip",
    ".pdf",
    ".webp",
)


def is_blacklisted_website(url: str) -> bool:
    return bool(BLACKLISTED_WEBSITES.search(url))


def is_blacklisted_email(email: str) -> bool:
    return bool(BLACKLISTED_EMAIL_TERMS.search(email))


def has_file_extension(value: str) -> bool:
    return value.lower().endswith(BLACKLISTED_EXTENSIONS)
