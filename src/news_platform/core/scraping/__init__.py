"""Core scraping primitives exported for reuse across crawlers and flows.

This package contains small, well-tested building blocks: Fetcher, Parser
(with its two backends), the selector translator, Detector, Normalizer and
the throttling helpers used for listing -> detail crawls.
"""

from .dates import coerce_datetime
from .detector import ResourceType, detect_resource_type, sniff_resource_type
from .fetcher import Fetcher
from .normalizer import normalize_url, resolve_url
from .parser import HtmlParser, extract_links, parse_html, strip_tags
from .selectors import css_to_xpath, split_selector_group
from .throttle import BoundedWorkList, RateLimiter

__all__ = [
    "Fetcher",
    "HtmlParser",
    "parse_html",
    "strip_tags",
    "extract_links",
    "css_to_xpath",
    "split_selector_group",
    "detect_resource_type",
    "sniff_resource_type",
    "ResourceType",
    "normalize_url",
    "resolve_url",
    "coerce_datetime",
    "BoundedWorkList",
    "RateLimiter",
]
