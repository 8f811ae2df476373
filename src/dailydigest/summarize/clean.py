import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

_whitespace_re = re.compile(r"\s+")
_terminal = (".", "!", "?")


def clean_text(text: str) -> str:
    t = text or ""
    # Remove boilerplate artifacts that often appear
    t = t.replace("\u00a0", " ")
    t = t.replace("\u200b", "")
    # Collapse whitespace, line breaks included
    t = _whitespace_re.sub(" ", t).strip()
    return t


def strip_markup(text: str) -> str:
    """Drop HTML tags and entities, return plain collapsed text."""
    if not text:
        return ""
    if "<" not in text and "&" not in text:
        return clean_text(text)
    with warnings.catch_warnings():
        # feed summaries are sometimes just a bare URL
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        plain = BeautifulSoup(text, "html.parser").get_text(" ", strip=True)
    return clean_text(plain)


def ensure_terminal(text: str) -> str:
    t = text.rstrip()
    if t and not t.endswith(_terminal):
        t += "."
    return t


def to_paragraph(text: str) -> str:
    """One paragraph, no embedded newlines, ends with sentence punctuation."""
    return ensure_terminal(clean_text(text))
