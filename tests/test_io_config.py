"""Tests for JSON writing, settings and the sources file."""
import json

import pytest

from dailydigest.config import NewsSettings, load_sources
from dailydigest.errors import ConfigError, WriteError
from dailydigest.io_utils import backup_path_for, read_json_document, write_json_document
from dailydigest.types import Source


def test_backup_path_for():
    assert backup_path_for("src/data/daily-news.json").name == "daily-news.prev.json"


def test_write_creates_parents_and_overwrites(tmp_path):
    out = tmp_path / "a" / "b" / "doc.json"

    assert write_json_document(out, {"v": 1}) is None
    write_json_document(out, {"v": 2, "text": "한국어"})

    assert read_json_document(out) == {"v": 2, "text": "한국어"}
    assert not (tmp_path / "a" / "b" / "doc.prev.json").exists()
    assert [p.name for p in out.parent.iterdir()] == ["doc.json"]


def test_write_with_backup(tmp_path):
    out = tmp_path / "doc.json"
    write_json_document(out, {"v": 1})

    prev = write_json_document(out, {"v": 2}, backup=True)

    assert prev == tmp_path / "doc.prev.json"
    assert read_json_document(prev) == {"v": 1}
    assert read_json_document(out) == {"v": 2}


def test_write_failure_is_write_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(WriteError):
        write_json_document(blocker / "doc.json", {"v": 1})


def test_unserializable_payload_is_write_error(tmp_path):
    with pytest.raises(WriteError):
        write_json_document(tmp_path / "doc.json", {"v": object()})


def test_from_env_reads_credential(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("DAILYDIGEST_LANGUAGE", "Spanish")
    monkeypatch.delenv("DAILYDIGEST_BACKEND", raising=False)

    s = NewsSettings.from_env(model="gpt-test", base_url=None)

    assert s.has_credential
    assert s.api_key == "sk-env"
    assert s.target_language == "Spanish"
    assert s.model == "gpt-test"
    assert s.backend == "openai"


def test_from_env_override_wins(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    s = NewsSettings.from_env(api_key="sk-cli", output_path="out/news.json")
    assert s.api_key == "sk-cli"
    assert str(s.output_path) == "out/news.json"


def test_blank_key_is_no_credential(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert not NewsSettings(api_key="   ").has_credential
    assert not NewsSettings.from_env().has_credential


@pytest.mark.parametrize("kw", [
    {"min_sentences": 0},
    {"min_sentences": 9, "max_sentences": 8},
    {"fetch_attempts": 0},
    {"sources": {}},
])
def test_invalid_settings(kw):
    with pytest.raises(ConfigError):
        NewsSettings(**kw).validate()


def test_load_sources_keeps_order(tmp_path):
    p = tmp_path / "sources.json"
    p.write_text(json.dumps({
        "tech": [{"name": "A", "url": "https://a.test/rss"}],
        "world": [{"name": "B", "url": "https://b.test/rss"}, {"name": "C", "url": "https://c.test/rss"}],
    }))

    sources = load_sources(str(p))

    assert list(sources) == ["tech", "world"]
    assert sources["world"][1] == Source("C", "https://c.test/rss")


@pytest.mark.parametrize("content", [
    "not json",
    "[]",
    '{"world": {"name": "A"}}',
    '{"world": [{"name": "A"}]}',
])
def test_load_sources_rejects_bad_shapes(tmp_path, content):
    p = tmp_path / "sources.json"
    p.write_text(content)
    with pytest.raises(ConfigError):
        load_sources(str(p))


def test_load_sources_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_sources(str(tmp_path / "nope.json"))
