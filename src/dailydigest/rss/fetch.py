from __future__ import annotations

import logging
import socket
import time
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import FetchError, FetchStatusError, FetchTimeout

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


@dataclass
class FetchResult:
    """
    Outcome of fetch_with_retry.
    ok True carries status and body; ok False carries the last failure reason.
    """
    ok: bool
    status: Optional[int] = None
    body: str = ""
    reason: Optional[str] = None
    attempts: int = 0


def fetch_with_retry(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    max_attempts: int = 3,
    timeout: float = 10.0,
    backoff: float = 0.0,
) -> FetchResult:
    """
    GET url with a per attempt timeout (seconds) and a bounded attempt count.

    Timeouts, non 2xx statuses and transport errors are all retryable.
    Nothing raises out of here; the caller gets the last reason instead.
    backoff waits backoff * attempt seconds between attempts, 0 disables it.
    """
    reason = "no attempts made"
    attempts = max(1, int(max_attempts))
    for attempt in range(1, attempts + 1):
        try:
            status, body = _get_once(url, headers=headers, timeout=timeout)
            return FetchResult(ok=True, status=status, body=body, attempts=attempt)
        except FetchError as e:
            reason = e.reason
            logger.warning("GET %s attempt %d/%d failed: %s", url, attempt, attempts, reason)
        if backoff > 0 and attempt < attempts:
            time.sleep(backoff * attempt)
    return FetchResult(ok=False, reason=reason, attempts=attempts)


def _get_once(url: str, *, headers: Optional[Dict[str, str]], timeout: float):
    hdrs = {"User-Agent": DEFAULT_USER_AGENT}
    hdrs.update(headers or {})
    req = Request(url=url, method="GET", headers=hdrs)
    try:
        with urlopen(req, timeout=timeout) as resp:
            status = getattr(resp, "status", None) or resp.getcode()
            if not 200 <= int(status) < 300:
                raise FetchStatusError(int(status))
            raw = resp.read()
            charset = resp.headers.get_content_charset() or "utf-8"
    except HTTPError as he:
        raise FetchStatusError(he.code) from he
    except URLError as ue:
        if isinstance(ue.reason, (socket.timeout, TimeoutError)):
            raise FetchTimeout() from ue
        raise FetchError(f"error: {ue.reason}") from ue
    except (socket.timeout, TimeoutError) as te:
        raise FetchTimeout() from te
    except OSError as oe:
        raise FetchError(f"error: {oe}") from oe
    return int(status), _decode(raw, charset)


def _decode(raw: bytes, charset: str) -> str:
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        # unknown charset label in the Content-Type header
        return raw.decode("utf-8", errors="replace")
