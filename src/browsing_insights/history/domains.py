"""Host extraction and display shortening for visited URLs."""

from __future__ import annotations

from urllib.parse import urlsplit

# Removed wherever they occur, not only as a suffix.
TOP_LEVEL_DOMAINS = (".com", ".edu", ".gov", ".org", ".net", ".int", ".mil", ".arpa", ".io", ".tv")

MAX_SHORT_DOMAIN_LENGTH = 30


def host_of(url: str) -> str:
    """Host component of ``url``; empty string when it has none or cannot be parsed."""
    try:
        return urlsplit((url or "").strip()).hostname or ""
    except ValueError:
        return ""


def shorten(domain: str) -> str:
    """Drop the first ``www.`` and the first occurrence of each TLD substring.

    ``docs.google.com`` -> ``docs.google``. A domain like ``news.comics.net``
    loses its inner ``.com`` as well; that is the established display policy.
    """
    short = domain.replace("www.", "", 1)
    for tld in TOP_LEVEL_DOMAINS:
        short = short.replace(tld, "", 1)
    return short


def is_displayable(short_domain: str) -> bool:
    return 0 < len(short_domain) <= MAX_SHORT_DOMAIN_LENGTH
