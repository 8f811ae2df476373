from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# -----------------------------
# Inputs
# -----------------------------

@dataclass(frozen=True)
class Source:
    """A named feed or page URL configured under a category."""
    name: str
    url: str


@dataclass
class RawItem:
    """
    One feed entry as extracted by the parser.
    Consumed once by the summarizer and then discarded.
    """
    title: str = ""
    description: str = ""
    content: str = ""
    content_snippet: str = ""
    link: str = ""
    published: Optional[str] = None

    def best_text(self) -> str:
        # content > snippet > description > title
        for candidate in (self.content, self.content_snippet, self.description, self.title):
            if candidate and candidate.strip():
                return candidate.strip()
        return ""


# -----------------------------
# Summaries
# -----------------------------

@dataclass
class SummaryResult:
    """
    Translated title plus a one-paragraph summary.
    model tells which tier produced it; error keeps a recovered remote failure.
    """
    translated_title: str
    summary: str
    model: str
    error: Optional[str] = None


# -----------------------------
# Output records
# -----------------------------

@dataclass
class ProcessedItem:
    title: str
    translated_title: str
    summary: str
    url: str
    published_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "translatedTitle": self.translated_title,
            "summary": self.summary,
            "url": self.url,
            "publishedAt": self.published_at,
        }


@dataclass
class SourceEntry:
    """Always present in the output, even when the source failed."""
    source: str
    source_url: str
    items: List[ProcessedItem] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "sourceUrl": self.source_url,
            "items": [it.to_dict() for it in self.items],
            "error": self.error,
        }


@dataclass
class ErrorRecord:
    category: str
    source: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"category": self.category, "source": self.source, "reason": self.reason}


@dataclass
class RunResult:
    updated_at: str
    categories: Dict[str, List[SourceEntry]] = field(default_factory=dict)
    errors: List[ErrorRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updatedAt": self.updated_at,
            "categories": {
                name: [entry.to_dict() for entry in entries]
                for name, entries in self.categories.items()
            },
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class CompanyRank:
    rank: int
    company: str

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, "company": self.company}


@dataclass
class LeaderboardResult:
    """Market code -> ranked companies. Codes become top level keys on disk."""
    updated_at: str
    markets: Dict[str, List[CompanyRank]] = field(default_factory=dict)
    errors: List[ErrorRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"updatedAt": self.updated_at}
        for code, rows in self.markets.items():
            out[code] = [r.to_dict() for r in rows]
        out["errors"] = [e.to_dict() for e in self.errors]
        return out
