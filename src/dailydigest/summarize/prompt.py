from __future__ import annotations

from typing import List

from .backends.base import MessageDict
from .clean import clean_text, strip_markup


SYSTEM_TEMPLATE = (
    "You are a professional news translator and editor. "
    "Translate the article title into {language} and write a summary in {language}. "
    "The summary is a single paragraph of {min_sentences} to {max_sentences} sentences. "
    "Do not use bullet points, numbering, headings or line breaks. "
    "Use only facts present in the input and keep names and figures unchanged. "
    "Reply with a JSON object only."
)


def trim_text_for_context(text: str, max_words: int = 400) -> str:
    """Keep the first max_words words of the plain text body."""
    if not text:
        return ""
    words = clean_text(strip_markup(text)).split()
    return " ".join(words[:max_words])


def build_summary_messages(
    *,
    title: str,
    text: str,
    language: str,
    min_sentences: int,
    max_sentences: int,
    max_words: int = 400,
) -> List[MessageDict]:
    """
    One system message with the summary policy, one user message with the
    article and the expected reply shape.
    """
    system_msg: MessageDict = {
        "role": "system",
        "content": SYSTEM_TEMPLATE.format(
            language=language,
            min_sentences=min_sentences,
            max_sentences=max_sentences,
        ),
    }
    user_lines = [
        f"Title: {clean_text(title)}",
        f"Text: {trim_text_for_context(text, max_words)}",
        "",
        "Respond exactly in this JSON shape:",
        '{"translatedTitle": "...", "summary": "..."}',
    ]
    user_msg: MessageDict = {"role": "user", "content": "\n".join(user_lines)}
    return [system_msg, user_msg]
