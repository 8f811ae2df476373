from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import orjson

from .errors import ConfigError
from .types import CompanyRank, Source

# Env vars
# - OPENAI_API_KEY         credential for the openai backend
# - DAILYDIGEST_BACKEND    openai, ollama, auto or none
# - DAILYDIGEST_BASE_URL   base URL of an OpenAI compatible server
# - DAILYDIGEST_MODEL      model name for the chosen backend
# - DAILYDIGEST_LANGUAGE   target language of titles and summaries
# - DAILYDIGEST_OUTPUT     output path of the news document

DEFAULT_NEWS_OUTPUT = "src/data/daily-news.json"
DEFAULT_MARKETCAP_OUTPUT = "src/data/marketcap-top10.json"

DEFAULT_NEWS_SOURCES: Dict[str, List[Source]] = {
    "world": [
        Source("BBC World", "http://feeds.bbc.co.uk/news/world/rss.xml"),
        Source("The Guardian World", "https://www.theguardian.com/world/rss"),
        Source("Al Jazeera English", "https://www.aljazeera.com/xml/rss/all.xml"),
    ],
    "science": [
        Source("ScienceDaily", "https://www.sciencedaily.com/rss/all.xml"),
        Source("Nature News", "https://www.nature.com/nature.rss"),
        Source("Phys.org", "https://phys.org/rss-feed/"),
    ],
    "economy": [
        Source("CNBC", "https://www.cnbc.com/id/100003114/device/rss/rss.html"),
        Source("MarketWatch", "https://feeds.content.dowjones.io/public/rss/mw_topstories"),
        Source("The Guardian Business", "https://www.theguardian.com/uk/business/rss"),
    ],
}


@dataclass
class NewsSettings:
    """Everything one news run needs. CLI options override from_env()."""
    output_path: Path = Path(DEFAULT_NEWS_OUTPUT)
    sources: Dict[str, List[Source]] = field(default_factory=lambda: dict(DEFAULT_NEWS_SOURCES))
    items_per_source: int = 5
    backup: bool = False

    # fetcher
    fetch_attempts: int = 3
    fetch_timeout: float = 10.0
    retry_backoff: float = 0.0
    source_delay: float = 1.0

    # remote model
    backend: str = "openai"
    model: Optional[str] = None  # None: the backend default
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 900
    request_timeout: float = 60.0

    # summary policy
    target_language: str = "Korean"
    min_sentences: int = 8
    max_sentences: int = 12
    min_input_chars: int = 100
    fallback_char_budget: int = 800
    prompt_max_words: int = 400

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_env(cls, **overrides) -> "NewsSettings":
        env = {
            "api_key": os.getenv("OPENAI_API_KEY"),
            "backend": os.getenv("DAILYDIGEST_BACKEND"),
            "base_url": os.getenv("DAILYDIGEST_BASE_URL"),
            "model": os.getenv("DAILYDIGEST_MODEL"),
            "target_language": os.getenv("DAILYDIGEST_LANGUAGE"),
            "output_path": os.getenv("DAILYDIGEST_OUTPUT"),
        }
        values = {k: v for k, v in env.items() if v}
        values.update({k: v for k, v in overrides.items() if v is not None})
        if "output_path" in values:
            values["output_path"] = Path(values["output_path"])
        settings = cls(**values)
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.min_sentences < 1 or self.max_sentences < self.min_sentences:
            raise ConfigError(
                f"sentence band must satisfy 1 <= min <= max, got {self.min_sentences}-{self.max_sentences}"
            )
        if self.fetch_attempts < 1:
            raise ConfigError("fetch_attempts must be at least 1")
        if self.items_per_source < 1:
            raise ConfigError("items_per_source must be at least 1")
        if not self.sources:
            raise ConfigError("no sources configured")


# -----------------------------
# Market cap
# -----------------------------

DEFAULT_KR = [
    "Samsung Electronics", "SK Hynix", "NAVER", "Kakao", "Hyundai Motor",
    "LG Electronics", "POSCO Holdings", "Samsung SDI", "Samsung SDS", "SK Telecom",
]

DEFAULT_US = [
    "Apple Inc.", "Microsoft Corporation", "Saudi Aramco", "Alphabet Inc.",
    "Amazon.com Inc.", "Tesla Inc.", "Berkshire Hathaway Inc.",
    "Nvidia Corporation", "Meta Platforms Inc.", "Broadcom Inc.",
]


def ranked(names: List[str]) -> List[CompanyRank]:
    return [CompanyRank(rank=i + 1, company=n) for i, n in enumerate(names)]


@dataclass
class MarketTarget:
    """One leaderboard page and the list used when scraping falls short."""
    code: str
    url: str
    defaults: List[CompanyRank]
    name_cell: int = 1
    timeout: float = 10.0


DEFAULT_MARKETS: List[MarketTarget] = [
    MarketTarget(
        code="KR",
        url="https://finance.naver.com/sise/entSiseMarketcap.naver",
        defaults=ranked(DEFAULT_KR),
        timeout=10.0,
    ),
    MarketTarget(
        code="US",
        url="https://companiesmarketcap.com/usa/largest-companies-by-market-cap/",
        defaults=ranked(DEFAULT_US),
        timeout=15.0,
    ),
]


@dataclass
class MarketSettings:
    output_path: Path = Path(DEFAULT_MARKETCAP_OUTPUT)
    markets: List[MarketTarget] = field(default_factory=lambda: list(DEFAULT_MARKETS))
    top_n: int = 10
    fetch_attempts: int = 2
    backup: bool = True


# -----------------------------
# Sources file
# -----------------------------

def load_sources(path: str) -> Dict[str, List[Source]]:
    """
    Read {"category": [{"name": ..., "url": ...}, ...]} from a JSON file.
    Category order in the file is the processing order.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"sources file not found: {path}")
    try:
        raw = orjson.loads(p.read_bytes())
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"sources file is not valid JSON: {e}") from e

    if not isinstance(raw, dict) or not raw:
        raise ConfigError("sources file must map category names to lists")

    out: Dict[str, List[Source]] = {}
    for category, entries in raw.items():
        if not isinstance(entries, list):
            raise ConfigError(f"category {category!r} must be a list")
        sources = []
        for i, e in enumerate(entries):
            if not isinstance(e, dict) or not e.get("name") or not e.get("url"):
                raise ConfigError(f"{category}[{i}] needs non-empty name and url")
            sources.append(Source(name=str(e["name"]), url=str(e["url"])))
        out[str(category)] = sources
    return out
