from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..config import MarketSettings, MarketTarget
from ..errors import ScrapeError
from ..io_utils import write_json_document
from ..marketcap.scrape import scrape_top_n
from ..rss.fetch import FetchResult, fetch_with_retry
from ..types import CompanyRank, ErrorRecord, LeaderboardResult

logger = logging.getLogger(__name__)

Fetcher = Callable[..., FetchResult]


def scrape_market(market: MarketTarget, n: int, *, fetch: Fetcher, attempts: int) -> List[CompanyRank]:
    """Exactly n scraped rows, or ScrapeError. Partial scrapes are failures."""
    fetched = fetch(market.url, max_attempts=attempts, timeout=market.timeout)
    if not fetched.ok:
        raise ScrapeError(f"fetch failed: {fetched.reason}")
    rows = scrape_top_n(fetched.body, n, name_cell=market.name_cell)
    if len(rows) < n:
        raise ScrapeError(f"only {len(rows)} companies extracted (need {n})")
    return rows[:n]


def collect_leaderboard(
    market: MarketTarget,
    n: int,
    *,
    fetch: Fetcher = fetch_with_retry,
    attempts: int = 2,
) -> Tuple[List[CompanyRank], Optional[str]]:
    """Scraped top n, or the market's static defaults plus the failure reason."""
    logger.info("scraping %s top %d", market.code, n)
    try:
        rows = scrape_market(market, n, fetch=fetch, attempts=attempts)
        logger.info("%s scrape ok: %s ~ %s", market.code, rows[0].company, rows[-1].company)
        return rows, None
    except ScrapeError as e:
        logger.warning("%s scrape failed: %s; using default list", market.code, e)
        return list(market.defaults[:n]), str(e)


def collect_marketcap(settings: MarketSettings, *, fetch: Fetcher = fetch_with_retry) -> LeaderboardResult:
    result = LeaderboardResult(updated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"))
    for market in settings.markets:
        rows, reason = collect_leaderboard(
            market, settings.top_n, fetch=fetch, attempts=settings.fetch_attempts
        )
        result.markets[market.code] = rows
        if reason:
            result.errors.append(ErrorRecord("marketcap", market.code, reason))
    return result


def run_marketcap(settings: MarketSettings, *, fetch: Fetcher = fetch_with_retry) -> Path:
    """Collect, back up the previous file, write the new one."""
    result = collect_marketcap(settings, fetch=fetch)
    prev = write_json_document(settings.output_path, result.to_dict(), backup=settings.backup)
    logger.info(
        "market cap written to %s (backup: %s) %s",
        settings.output_path,
        prev or "none",
        " | ".join(f"{code}: {len(rows)}" for code, rows in result.markets.items()),
    )
    return Path(settings.output_path)
