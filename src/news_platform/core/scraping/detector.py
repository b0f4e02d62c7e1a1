"""Detect whether a URL or payload is a syndication feed.

Provides a small ResourceType enum, `detect_resource_type` for URLs and
`sniff_resource_type` for payloads served under URLs that give nothing away.
"""

from __future__ import annotations

import re
from enum import Enum


class ResourceType(str, Enum):
    RSS = "rss"
    ATOM = "atom"
    UNKNOWN = "unknown"

    @property
    def is_feed(self) -> bool:
        return self in (ResourceType.RSS, ResourceType.ATOM)


_RSS_RE = re.compile(r"<(rss|rdf:RDF)[\s>]", re.IGNORECASE)
_ATOM_RE = re.compile(r"<feed[\s>]", re.IGNORECASE)

# feeds declare themselves within the first few KB
_SNIFF_WINDOW = 4096


def detect_resource_type(url: str) -> ResourceType:
    """Detect a feed by URL suffix."""
    path = (url or "").lower().split("?", 1)[0]
    if path.endswith((".rss", "/rss", "rss.xml", "/feed", "feed.xml")):
        return ResourceType.RSS
    if path.endswith(("atom.xml", ".atom")):
        return ResourceType.ATOM
    return ResourceType.UNKNOWN


def sniff_resource_type(text: str) -> ResourceType:
    """Guess the type of a payload from its first bytes."""
    head = (text or "").lstrip()[:_SNIFF_WINDOW]
    if _RSS_RE.search(head):
        return ResourceType.RSS
    if _ATOM_RE.search(head):
        return ResourceType.ATOM
    return ResourceType.UNKNOWN
