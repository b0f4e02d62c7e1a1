"""URL normalizer utilities.

Functions to normalize/clean URLs, remove tracking params and resolve
relative links against a source's base URL.
"""

from __future__ import annotations

from typing import Iterable
from urllib.parse import ParseResult, parse_qsl, urlencode, urljoin, urlparse, urlunparse

DEFAULT_REMOVE_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "fbclid",
    "gclid",
}


def normalize_url(
    url: str, remove_params: Iterable[str] | None = None, strip_fragment: bool = True
) -> str:
    """Return a normalized URL: cleaned query and optional fragment removal.

    This function is intentionally conservative: it only removes common tracking
    params and strips empty query strings.
    """
    remove = set(remove_params or DEFAULT_REMOVE_PARAMS)
    p: ParseResult = urlparse(url)
    q = [
        (k, v) for k, v in parse_qsl(p.query, keep_blank_values=True) if k not in remove
    ]
    query = urlencode(q, doseq=True)
    fragment = "" if strip_fragment else p.fragment
    cleaned = urlunparse(
        (p.scheme, p.netloc, p.path or "", p.params or "", query or "", fragment or "")
    )
    return cleaned


def ensure_scheme(url: str, default: str = "https") -> str:
    """`edition.cnn.com` -> `https://edition.cnn.com`."""
    url = (url or "").strip()
    if url.startswith(("http://", "https://")):
        return url
    return f"{default}://{url.lstrip('/')}"


def resolve_url(href: str, base_url: str) -> str:
    """Absolute URL for `href` found on a page under `base_url`."""
    href = (href or "").strip()
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(ensure_scheme(base_url).rstrip("/") + "/", href)


def is_http_url(url: str) -> bool:
    p = urlparse(url or "")
    return p.scheme in ("http", "https") and bool(p.netloc)
