from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import feedparser

from ..errors import ParseError
from ..summarize.clean import clean_text, strip_markup
from ..types import RawItem

logger = logging.getLogger(__name__)

ITEMS_PER_SOURCE = 5

_UTF8_HEADERS = {"content-type": "application/xml; charset=utf-8"}


@dataclass
class FeedParseResult:
    ok: bool
    items: List[RawItem] = field(default_factory=list)
    reason: Optional[str] = None


def parse_feed(
    text: str,
    *,
    limit: int = ITEMS_PER_SOURCE,
    content_fields: Sequence[str] = ("content",),
) -> FeedParseResult:
    """
    Parse RSS or Atom text into at most `limit` RawItems, feed order kept.

    content_fields names the entry fields holding full encoded content;
    feedparser exposes <content:encoded> as `content`. The first non-empty
    field wins. Malformed input yields ok False, never an exception.
    """
    try:
        entries = _entries_or_raise(text)
    except ParseError as e:
        logger.warning("feed parse failed: %s", e)
        return FeedParseResult(ok=False, reason=f"parse error: {e}")

    items = [_to_raw_item(e, content_fields) for e in entries[: max(0, limit)]]
    return FeedParseResult(ok=True, items=items)


def _entries_or_raise(text: str) -> list:
    if not text or not text.strip():
        raise ParseError("empty document")
    try:
        # a stream, so a body that looks like a URL or path is never opened;
        # the text was already decoded once, the header charset says so
        d = feedparser.parse(io.BytesIO(text.encode("utf-8")), response_headers=_UTF8_HEADERS)
    except Exception as e:
        raise ParseError(str(e)) from e

    entries = list(getattr(d, "entries", None) or [])
    # bozo alone is common (bad encodings, undeclared entities); only fail
    # when nothing usable came out of the document
    if getattr(d, "bozo", False) and not entries:
        exc = getattr(d, "bozo_exception", None)
        raise ParseError(str(exc) if exc else "malformed feed")
    if not entries and not getattr(d, "version", ""):
        raise ParseError("not an RSS or Atom document")
    return entries


def _entry_content(e: Any, fields: Sequence[str]) -> str:
    for name in fields:
        v = e.get(name)
        if isinstance(v, list):
            # feedparser: [{"type": ..., "value": ...}, ...]
            for block in v:
                value = block.get("value") if isinstance(block, dict) else None
                if value and value.strip():
                    return value.strip()
        elif isinstance(v, str) and v.strip():
            return v.strip()
    return ""


def _to_raw_item(e: Any, content_fields: Sequence[str]) -> RawItem:
    content = _entry_content(e, content_fields)
    description = (e.get("description") or e.get("summary") or "").strip()
    published = None
    for k in ("published", "updated", "created"):
        v = e.get(k)
        if v:
            published = str(v).strip()
            break
    return RawItem(
        title=clean_text(strip_markup(e.get("title") or "")),
        description=description,
        content=content,
        content_snippet=strip_markup(content) if content else "",
        link=(e.get("link") or "").strip(),
        published=published,
    )
