"""Translate a small CSS-selector grammar into XPath.

Supported forms (each may be combined with a leading tag name and chained):

    tag            elements with that tag name
    .cls           class token list contains `cls`
    #id            id equals `id`
    [attr]         attribute present
    [attr="v"]     attribute equals `v` (`class` keeps token semantics)
    [attr*="v"]    attribute value contains `v`
    sel1, sel2     union, all matches of sel1 then those of sel2

Every expression starts with the `descendant::` axis so a query evaluated
from an element never leaves its subtree. Anything outside the grammar
degrades to a tag-name query on the leading identifier; adapters always try
several candidates, so a selector matching nothing is acceptable.
"""

from __future__ import annotations

import re
from typing import List, Optional

_NAME = r"[A-Za-z_][\w-]*"

_TAG_RE = re.compile(rf"^(?P<tag>{_NAME}|\*)")
_CLASS_RE = re.compile(rf"^\.(?P<value>{_NAME})")
_ID_RE = re.compile(rf"^#(?P<value>{_NAME})")
_ATTR_RE = re.compile(
    rf"""^\[\s*(?P<attr>{_NAME})\s*
        (?:(?P<op>\*?=)\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]\s]+))\s*)?
        \]""",
    re.VERBOSE,
)
_LEADING_NAME_RE = re.compile(rf"^\s*({_NAME})")
_CLASS_EQ_RE = re.compile(
    r"""\[\s*class\s*=\s*(?:"([^"]*)"|'([^']*)')\s*\]"""
)


def split_selector_group(selector: str) -> List[str]:
    """Split `a, b[x="1,2"]` on top-level commas, honouring quotes and brackets."""
    parts: List[str] = []
    buf: List[str] = []
    quote: Optional[str] = None
    depth = 0
    for ch in selector:
        if quote:
            buf.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            parts.append("".join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf).strip())
    return [p for p in parts if p]


def xpath_literal(value: str) -> str:
    """Quote `value` as an XPath string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    pieces = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in pieces) + ")"


def _class_token(value: str) -> str:
    return (
        "contains(concat(' ', normalize-space(@class), ' '), "
        f"{xpath_literal(' ' + value + ' ')})"
    )


def _attr_predicate(attr: str, op: Optional[str], value: Optional[str]) -> str:
    attr = attr.lower()
    if op is None:
        return f"@{attr}"
    if op == "*=":
        return f"contains(@{attr}, {xpath_literal(value or '')})"
    if attr == "class":
        return _class_token(value or "")
    return f"@{attr}={xpath_literal(value or '')}"


def _fallback_xpath(selector: str) -> Optional[str]:
    m = _LEADING_NAME_RE.match(selector)
    if not m:
        return None
    return f"descendant::{m.group(1).lower()}"


def css_to_xpath(selector: str) -> Optional[str]:
    """Translate one compound selector (no commas) to a descendant XPath.

    Returns None when the text contains nothing usable at all.
    """
    rest = selector.strip()
    if not rest:
        return None

    tag = "*"
    m = _TAG_RE.match(rest)
    if m:
        tag = m.group("tag").lower()
        rest = rest[m.end():]

    predicates: List[str] = []
    while rest:
        m = _CLASS_RE.match(rest)
        if m:
            predicates.append(_class_token(m.group("value")))
            rest = rest[m.end():]
            continue
        m = _ID_RE.match(rest)
        if m:
            predicates.append(f"@id={xpath_literal(m.group('value'))}")
            rest = rest[m.end():]
            continue
        m = _ATTR_RE.match(rest)
        if m:
            value = next(
                (v for v in (m.group("dq"), m.group("sq"), m.group("bare")) if v is not None),
                None,
            )
            predicates.append(_attr_predicate(m.group("attr"), m.group("op"), value))
            rest = rest[m.end():]
            continue
        # outside the grammar (combinators, pseudo-classes, ...)
        return _fallback_xpath(selector)

    return f"descendant::{tag}" + "".join(f"[{p}]" for p in predicates)


def compile_selector(selector: str) -> List[str]:
    """Translate a selector group into one XPath per member, in order."""
    xpaths: List[str] = []
    for part in split_selector_group(selector):
        xp = css_to_xpath(part)
        if xp:
            xpaths.append(xp)
    return xpaths


def normalize_for_css(selector: str) -> str:
    """Rewrite `[class="v"]` as `.v` so a CSS engine keeps token semantics."""

    def repl(m: re.Match) -> str:
        value = m.group(1) if m.group(1) is not None else m.group(2)
        tokens = value.split()
        return "".join(f".{t}" for t in tokens) if tokens else m.group(0)

    return _CLASS_EQ_RE.sub(repl, selector)


def fallback_tag(selector: str) -> Optional[str]:
    """Leading identifier of a selector, used when a CSS engine rejects it."""
    m = _LEADING_NAME_RE.match(selector)
    return m.group(1).lower() if m else None
