"""Tests for parse_feed."""
from conftest import LONG_BODY, make_rss

from dailydigest.rss.feed import parse_feed


def test_parses_items_with_encoded_content(sample_rss):
    res = parse_feed(sample_rss)

    assert res.ok is True
    assert [it.title for it in res.items] == ["Headline 0", "Headline 1", "Headline 2"]
    first = res.items[0]
    assert first.link == "https://example.com/news/0"
    assert first.description == "Short teaser 0"
    assert "<p>" in first.content
    assert first.content_snippet == LONG_BODY
    assert first.published.startswith("Mon, 06 Oct 2025")


def test_truncates_to_limit_keeping_order():
    res = parse_feed(make_rss(8), limit=5)

    assert res.ok is True
    assert [it.title for it in res.items] == [f"Headline {i}" for i in range(5)]


def test_best_text_prefers_content():
    item = parse_feed(make_rss(1)).items[0]
    assert item.best_text().startswith("<p>The central bank")


def test_atom_feed_uses_summary_as_description():
    atom = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom example</title>
  <id>urn:example</id>
  <updated>2025-10-06T00:00:00Z</updated>
  <entry>
    <title>Atom headline</title>
    <link href="https://example.org/a"/>
    <id>urn:example:a</id>
    <updated>2025-10-06T00:00:00Z</updated>
    <summary>Atom summary text</summary>
  </entry>
</feed>"""
    res = parse_feed(atom)

    assert res.ok is True
    item = res.items[0]
    assert item.title == "Atom headline"
    assert item.link == "https://example.org/a"
    assert item.description == "Atom summary text"
    assert item.published == "2025-10-06T00:00:00Z"


def test_malformed_document_is_parse_failure():
    res = parse_feed("<html><body>Service temporarily down <b>oops</body>")

    assert res.ok is False
    assert res.items == []
    assert res.reason.startswith("parse error")


def test_empty_body_is_parse_failure():
    res = parse_feed("   ")
    assert res.ok is False
    assert res.reason == "parse error: empty document"


def test_well_formed_feed_without_items():
    empty = '<?xml version="1.0"?><rss version="2.0"><channel><title>t</title></channel></rss>'
    res = parse_feed(empty)

    assert res.ok is True
    assert res.items == []


def test_body_naming_a_local_file_is_not_opened(tmp_path):
    feed_file = tmp_path / "feed.xml"
    feed_file.write_text(make_rss(2), encoding="utf-8")

    res = parse_feed(str(feed_file))

    assert res.ok is False
    assert res.items == []


def test_decoded_non_ascii_text_survives():
    res = parse_feed(make_rss(1, body="서울 증시가 상승 마감했다. 외국인 매수세가 이어졌다."))

    assert res.ok is True
    assert res.items[0].content_snippet.startswith("서울 증시가")
