"""Tests for the local fallback summarizer."""
import pytest
from conftest import LONG_BODY

from dailydigest.summarize.fallback import (
    DEFAULT_SUMMARY,
    local_summary,
    split_sentences,
    title_seeded_summary,
)

MANY = " ".join(f"Sentence number {i} carries some content." for i in range(30))


def test_split_keeps_terminators_and_decimals():
    parts = split_sentences("Growth hit 3.5 percent. Was it enough? Yes!")
    assert parts == ["Growth hit 3.5 percent.", "Was it enough?", "Yes!"]


def test_split_drops_punctuation_only_fragments():
    assert split_sentences("... !!! Real sentence here.") == ["Real sentence here."]


def test_caps_at_max_sentences():
    out = local_summary(MANY, 2, 4, char_budget=10_000)
    assert len(split_sentences(out)) == 4
    assert out.startswith("Sentence number 0 carries some content.")


def test_pads_by_repeating_last_sentence():
    out = local_summary("First point. Second point.", 4, 6)
    assert out == "First point. Second point. Second point. Second point."


def test_never_uses_filler_tokens():
    out = local_summary("Only one sentence here.", 8, 12)
    assert "[" not in out
    assert "limited" not in out.lower()


def test_strips_markup_and_newlines():
    out = local_summary("<p>Line one.\n\n<b>Line two</b> continues.</p>", 1, 5)
    assert out == "Line one. Line two continues."
    assert "\n" not in out


def test_truncates_to_char_budget_and_ends_with_period():
    out = local_summary("a" * 50 + " word and more words", 1, 3, char_budget=20)
    assert out == "a" * 20 + "."


def test_default_band_with_real_text():
    out = local_summary(LONG_BODY)
    n = len(split_sentences(out))
    assert 8 <= n <= 12
    assert out.endswith(".")


@pytest.mark.parametrize("text", ["", "   ", "<br/>", "..."])
def test_empty_input_falls_back_to_title_then_default(text):
    assert local_summary(text, 8, 12, title="Quake hits coast") == "Quake hits coast."
    assert local_summary(text, 8, 12) == DEFAULT_SUMMARY


def test_idempotent():
    assert local_summary(LONG_BODY, 8, 12) == local_summary(LONG_BODY, 8, 12)


def test_title_seeded_summary_leads_with_title():
    out = title_seeded_summary("Storm warning issued", "Coastal towns told to prepare.", 2, 4)
    assert out == "Storm warning issued. Coastal towns told to prepare."


def test_title_seeded_summary_does_not_repeat_title_as_body():
    out = title_seeded_summary("Storm warning issued", "Storm warning issued", 1, 4)
    assert out == "Storm warning issued."


def test_title_seeded_summary_with_nothing():
    assert title_seeded_summary("", "", 8, 12) == DEFAULT_SUMMARY
