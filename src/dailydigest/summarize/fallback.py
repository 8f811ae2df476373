from __future__ import annotations

import re
from typing import List

from .clean import clean_text, ensure_terminal, strip_markup

DEFAULT_MIN_SENTENCES = 8
DEFAULT_MAX_SENTENCES = 12
DEFAULT_CHAR_BUDGET = 800
DEFAULT_SUMMARY = "No summary is available for this article."

_sentence_split_re = re.compile(r"(?<=[.!?])\s+")
_word_re = re.compile(r"\w")


def split_sentences(text: str) -> List[str]:
    """
    Split on ., ! or ? followed by whitespace.
    Fragments without a single word character are dropped.
    """
    out = []
    for frag in _sentence_split_re.split(text or ""):
        frag = frag.strip()
        if frag and _word_re.search(frag):
            out.append(ensure_terminal(frag))
    return out


def local_summary(
    text: str,
    min_sentences: int = DEFAULT_MIN_SENTENCES,
    max_sentences: int = DEFAULT_MAX_SENTENCES,
    *,
    char_budget: int = DEFAULT_CHAR_BUDGET,
    title: str = "",
) -> str:
    """
    Deterministic paragraph built only from the given text.

    Markup is stripped and the text cut to char_budget before splitting.
    Short inputs are padded by repeating the last sentence, never with filler.
    Empty input falls back to the title, then to DEFAULT_SUMMARY.
    """
    max_sentences = max(1, max_sentences)
    min_sentences = max(1, min(min_sentences, max_sentences))

    plain = strip_markup(text)[: max(0, char_budget)]
    sentences = split_sentences(plain)[:max_sentences]
    if not sentences:
        t = clean_text(strip_markup(title))
        return ensure_terminal(t) if t else DEFAULT_SUMMARY

    while len(sentences) < min_sentences:
        sentences.append(sentences[-1])
    return " ".join(sentences)


def title_seeded_summary(
    title: str,
    text: str,
    min_sentences: int = DEFAULT_MIN_SENTENCES,
    max_sentences: int = DEFAULT_MAX_SENTENCES,
    *,
    char_budget: int = DEFAULT_CHAR_BUDGET,
) -> str:
    """Local summary for inputs too short for a model call: title, then text."""
    t = clean_text(strip_markup(title))
    body = clean_text(strip_markup(text))
    parts = [ensure_terminal(t)] if t else []
    if body and body != t:
        parts.append(body)
    return local_summary(
        " ".join(parts),
        min_sentences,
        max_sentences,
        char_budget=char_budget,
        title=t,
    )
