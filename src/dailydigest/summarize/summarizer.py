from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from ..config import NewsSettings
from ..errors import RemoteSummaryError
from ..types import RawItem, SummaryResult
from .backends.base import ChatBackend, GenerationParams
from .clean import clean_text, strip_markup, to_paragraph
from .fallback import DEFAULT_SUMMARY, local_summary, title_seeded_summary
from .prompt import build_summary_messages

logger = logging.getLogger(__name__)

LOCAL_MODEL = "local_fallback"
TITLE_MODEL = "title_seeded"

_fence_re = re.compile(r"```(?:json)?\s*([\s\S]+?)```")
_brace_re = re.compile(r"\{[\s\S]*?\}")
_title_keys = ("translatedTitle", "titleKo", "translated_title", "title")


def parse_summary_payload(raw: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model reply.

    Tries the whole reply, then a ```json fence, then every {...} substring
    from the left. Raises RemoteSummaryError when nothing parses.
    """
    candidate = (raw or "").strip()
    if not candidate:
        raise RemoteSummaryError("empty reply")

    attempts = [candidate]
    attempts += [m.strip() for m in _fence_re.findall(candidate)]
    start = candidate.find("{")
    end = candidate.rfind("}")
    if 0 <= start < end:
        attempts.append(candidate[start:end + 1])
    attempts += _brace_re.findall(candidate)

    for text in attempts:
        try:
            obj = json.loads(text)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            return obj
    raise RemoteSummaryError("reply did not contain a JSON object")


def _coerce_summary(value: Any) -> str:
    if isinstance(value, list):
        value = " ".join(str(v) for v in value if v)
    if not isinstance(value, str):
        return ""
    return clean_text(value)


class Summarizer:
    """
    Turns a RawItem into a SummaryResult and never raises.

    Order of attempts:
      1) input shorter than min_input_chars: title seeded local summary
      2) no backend (no credential): local fallback over the input
      3) remote model, falling back locally on any failure
    Every summary leaves here as one paragraph with terminal punctuation.
    """

    def __init__(self, backend: Optional[ChatBackend], settings: NewsSettings) -> None:
        self.backend = backend
        self.settings = settings
        self.params = GenerationParams(
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    @property
    def has_credential(self) -> bool:
        return self.backend is not None

    def summarize(self, item: RawItem) -> SummaryResult:
        s = self.settings
        title = clean_text(strip_markup(item.title))
        input_text = item.best_text()
        plain = clean_text(strip_markup(input_text))

        if len(plain) < s.min_input_chars:
            summary = title_seeded_summary(
                title, plain, s.min_sentences, s.max_sentences, char_budget=s.fallback_char_budget
            )
            return self._finish(title, summary, TITLE_MODEL)

        if not self.has_credential:
            return self._finish(title, self._local(input_text, title), LOCAL_MODEL)

        try:
            return self._remote(title, input_text)
        except RemoteSummaryError as e:
            logger.warning("remote summary failed for %r: %s", title[:80], e)
            return self._finish(title, self._local(input_text, title), LOCAL_MODEL, error=str(e))

    # -----------------------------
    # Internals
    # -----------------------------
    def _local(self, text: str, title: str) -> str:
        s = self.settings
        return local_summary(
            text,
            s.min_sentences,
            s.max_sentences,
            char_budget=s.fallback_char_budget,
            title=title,
        )

    def _remote(self, title: str, text: str) -> SummaryResult:
        s = self.settings
        messages = build_summary_messages(
            title=title,
            text=text,
            language=s.target_language,
            min_sentences=s.min_sentences,
            max_sentences=s.max_sentences,
            max_words=s.prompt_max_words,
        )
        try:
            result = self.backend.generate(messages, self.params, strict=False)
        except RemoteSummaryError:
            raise
        except Exception as e:
            raise RemoteSummaryError(f"{type(e).__name__}: {e}") from e
        if result.error or not result.text:
            raise RemoteSummaryError(result.error or "empty reply")
        if result.usage is not None:
            logger.debug(
                "%s tokens: prompt=%s completion=%s total=%s",
                result.model_used,
                result.usage.prompt_tokens,
                result.usage.completion_tokens,
                result.usage.total_tokens,
            )

        payload = parse_summary_payload(result.text)
        summary = _coerce_summary(payload.get("summary"))
        if not summary:
            raise RemoteSummaryError("reply has no summary field")
        translated = ""
        for key in _title_keys:
            v = payload.get(key)
            if isinstance(v, str) and v.strip():
                translated = clean_text(v)
                break
        return self._finish(translated or title, summary, result.model_used or s.model or self.backend.name)

    @staticmethod
    def _finish(title: str, summary: str, model: str, error: Optional[str] = None) -> SummaryResult:
        paragraph = to_paragraph(summary) or DEFAULT_SUMMARY
        return SummaryResult(translated_title=title or "No title", summary=paragraph, model=model, error=error)
