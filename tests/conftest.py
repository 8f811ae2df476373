"""Shared fixtures: sample feeds, a recording chat backend and a scripted fetcher."""
from typing import Dict, List, Optional

import pytest

from dailydigest.config import NewsSettings
from dailydigest.rss.fetch import FetchResult
from dailydigest.summarize.backends.base import ChatBackend, GenerationResult
from dailydigest.types import Source

LONG_BODY = (
    "The central bank raised its benchmark rate by a quarter point on Tuesday. "
    "Officials said inflation remained above target for a third straight quarter. "
    "Markets had largely priced in the move ahead of the announcement. "
    "The decision was unanimous among the nine voting members. "
    "Analysts expect one more increase before the end of the year."
)


def make_rss(n_items: int = 3, *, body: str = LONG_BODY) -> str:
    items = []
    for i in range(n_items):
        items.append(
            f"""
    <item>
      <title>Headline {i}</title>
      <link>https://example.com/news/{i}</link>
      <description>Short teaser {i}</description>
      <content:encoded><![CDATA[<p>{body}</p>]]></content:encoded>
      <pubDate>Mon, 06 Oct 2025 0{i % 10}:00:00 GMT</pubDate>
    </item>"""
        )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example feed</title>
    <link>https://example.com/</link>
    <description>Example</description>{''.join(items)}
  </channel>
</rss>
"""


class FakeBackend(ChatBackend):
    """Returns canned replies and records every call."""

    name = "fake"

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[str] = None) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[list] = []

    def generate(self, messages, params, strict=False):
        self.calls.append(messages)
        if self.error:
            return GenerationResult(text="", model_used="fake-model", error=self.error)
        text = self.replies.pop(0) if self.replies else ""
        return GenerationResult(text=text, model_used="fake-model")


class ScriptedFetcher:
    """fetch_with_retry stand-in keyed by URL."""

    def __init__(self, responses: Dict[str, FetchResult]) -> None:
        self.responses = responses
        self.calls: List[str] = []

    def __call__(self, url, **kwargs):
        self.calls.append(url)
        return self.responses.get(url, FetchResult(ok=False, reason="status 404", attempts=1))


@pytest.fixture
def sample_rss():
    return make_rss()


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def news_settings(tmp_path):
    return NewsSettings(
        output_path=tmp_path / "data" / "daily-news.json",
        sources={
            "world": [
                Source("Alpha", "https://alpha.test/rss"),
                Source("Beta", "https://beta.test/rss"),
            ],
            "science": [
                Source("Gamma", "https://gamma.test/rss"),
            ],
        },
        source_delay=0.0,
        api_key=None,
    )
