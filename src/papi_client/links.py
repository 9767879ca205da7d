from __future__ import annotations

import re
from typing import Optional
from urllib.parse import SplitResult, urlsplit

from .errors import InvalidResponseLinkError

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _split(link: str) -> SplitResult:
    # urlsplit is lenient; reject the inputs a strict URL parser would.
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in link):
        raise ValueError("invalid control character in URL")
    if link.startswith(":"):
        raise ValueError("missing protocol scheme")
    head = re.split(r"[?#]", link, maxsplit=1)[0]
    if not _SCHEME.match(head) and ":" in head.split("/", 1)[0]:
        raise ValueError("first path segment in URL cannot contain colon")
    if _BAD_ESCAPE.search(link):
        raise ValueError("invalid URL escape")
    return urlsplit(link)


def parse_link(link: str, *, operation: Optional[str] = None) -> str:
    """Return the last path segment of a creation link, e.g. '/papi/v1/cpcodes/123?..' -> '123'."""
    try:
        parts = _split(link)
    except ValueError as exc:
        raise InvalidResponseLinkError(
            link, f"invalid link: {exc}", operation=operation
        ) from exc

    identifier = parts.path.split("/")[-1]
    if not identifier:
        raise InvalidResponseLinkError(
            link, "link has no identifier segment", operation=operation
        )
    return identifier


def parse_link_number(link: str, *, operation: Optional[str] = None) -> int:
    identifier = parse_link(link, operation=operation)
    try:
        return int(identifier)
    except ValueError as exc:
        raise InvalidResponseLinkError(
            link, "invalid link: not a number", operation=operation
        ) from exc


__all__ = ["parse_link", "parse_link_number"]
