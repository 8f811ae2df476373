from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from tqdm import tqdm

from ..config import NewsSettings
from ..io_utils import write_json_document
from ..rss.feed import parse_feed
from ..rss.fetch import FetchResult, fetch_with_retry
from ..summarize.routing import build_backend
from ..summarize.summarizer import Summarizer
from ..types import ErrorRecord, ProcessedItem, RunResult, Source, SourceEntry

logger = logging.getLogger(__name__)

Fetcher = Callable[..., FetchResult]

FEED_HEADERS = {"Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8"}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def process_source(
    category: str,
    source: Source,
    *,
    settings: NewsSettings,
    summarizer: Summarizer,
    fetch: Fetcher,
    errors: List[ErrorRecord],
    run_ts: str,
) -> SourceEntry:
    """Fetch, parse and summarize one source. Failures become entry.error."""
    fetched = fetch(
        source.url,
        headers=FEED_HEADERS,
        max_attempts=settings.fetch_attempts,
        timeout=settings.fetch_timeout,
        backoff=settings.retry_backoff,
    )
    if not fetched.ok:
        reason = fetched.reason or "fetch failed"
        errors.append(ErrorRecord(category, source.name, reason))
        return SourceEntry(source=source.name, source_url=source.url, error=reason)

    parsed = parse_feed(fetched.body, limit=settings.items_per_source)
    if not parsed.ok:
        reason = parsed.reason or "parse error"
        errors.append(ErrorRecord(category, source.name, reason))
        return SourceEntry(source=source.name, source_url=source.url, error=reason)

    items: List[ProcessedItem] = []
    for raw in parsed.items:
        res = summarizer.summarize(raw)
        if res.error:
            errors.append(ErrorRecord(category, source.name, f"summary: {res.error}"))
        items.append(
            ProcessedItem(
                title=raw.title or "No title",
                translated_title=res.translated_title,
                summary=res.summary,
                url=raw.link,
                published_at=raw.published or run_ts,
            )
        )
    return SourceEntry(source=source.name, source_url=source.url, items=items)


def collect_news(
    settings: NewsSettings,
    *,
    summarizer: Optional[Summarizer] = None,
    fetch: Fetcher = fetch_with_retry,
    sleep: Callable[[float], None] = time.sleep,
    now: Optional[str] = None,
) -> RunResult:
    """
    Walk every category and source in order and build the RunResult.

    Sources are processed strictly one after another with settings.source_delay
    seconds between them. Each category ends up with exactly one entry per
    configured source, whatever failed on the way.
    """
    if summarizer is None:
        summarizer = Summarizer(build_backend(settings), settings)
    run_ts = now or _now_iso()
    result = RunResult(updated_at=run_ts)

    total = sum(len(v) for v in settings.sources.values())
    bar = tqdm(total=total, desc="sources", disable=total == 0)
    done = 0
    try:
        for category, sources in settings.sources.items():
            logger.info("collecting %s (%d sources)", category, len(sources))
            entries: List[SourceEntry] = []
            for source in sources:
                if done:
                    sleep(settings.source_delay)
                logger.info("  -> %s", source.name)
                entry = process_source(
                    category,
                    source,
                    settings=settings,
                    summarizer=summarizer,
                    fetch=fetch,
                    errors=result.errors,
                    run_ts=run_ts,
                )
                if entry.error:
                    logger.warning("%s / %s: %s", category, source.name, entry.error)
                entries.append(entry)
                done += 1
                bar.update(1)

            # pad so the renderer always gets one card per configured source
            for source in sources[len(entries):]:
                result.errors.append(ErrorRecord(category, source.name, "missing result"))
                entries.append(SourceEntry(source=source.name, source_url=source.url, error="missing result"))
            result.categories[category] = entries
    finally:
        bar.close()
    return result


def run_news(settings: NewsSettings, **kwargs) -> Path:
    """Collect and write the news document. WriteError propagates."""
    result = collect_news(settings, **kwargs)
    write_json_document(settings.output_path, result.to_dict(), backup=settings.backup)
    counts = ", ".join(
        f"{cat}: {sum(len(e.items) for e in entries)}" for cat, entries in result.categories.items()
    )
    logger.info("news written to %s (%s, %d errors)", settings.output_path, counts, len(result.errors))
    return Path(settings.output_path)
