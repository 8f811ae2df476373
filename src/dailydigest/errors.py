from __future__ import annotations

from typing import Optional


class DigestError(Exception):
    """Base class for every error raised inside the package."""


class FetchError(DigestError):
    """One HTTP attempt failed. The fetcher turns these into reasons."""

    reason: str = "error"

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class FetchTimeout(FetchError):
    reason = "timeout"


class FetchStatusError(FetchError):
    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"status {status}")


class ParseError(DigestError):
    """Feed or page could not be parsed."""


class ScrapeError(DigestError):
    """A leaderboard page did not yield enough rows."""


class RemoteSummaryError(DigestError):
    """Chat model call failed or returned something unusable."""


class WriteError(DigestError):
    """The output document could not be persisted. Fatal for a run."""


class ConfigError(DigestError):
    """Invalid settings or sources file."""
