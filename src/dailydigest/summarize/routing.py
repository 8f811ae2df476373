from __future__ import annotations

import logging
import socket
from typing import Optional, Tuple
from urllib.parse import urlparse

from ..config import NewsSettings
from ..errors import ConfigError
from .backends.base import ChatBackend
from .backends.ollama_backend import DEFAULT_OLLAMA_MODEL, DEFAULT_OLLAMA_URL, OllamaBackend
from .backends.openai_compatible_backend import DEFAULT_OPENAI_MODEL, DEFAULT_OPENAI_URL, OpenAICompatibleBackend

logger = logging.getLogger(__name__)

ALLOWED_BACKENDS = {"openai", "ollama", "auto", "none"}


def _is_port_open(host: str, port: int, timeout: float = 0.2) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def _host_port_from_url(url: str) -> Tuple[Optional[str], Optional[int]]:
    try:
        u = urlparse(url)
        return u.hostname, u.port
    except ValueError:
        return None, None


def pick_backend_name(settings: NewsSettings) -> str:
    """
    Resolve `auto`:
      1) openai when an API key is configured
      2) ollama when its default port answers
      3) none, the local fallback summarizer only
    """
    chosen = (settings.backend or "openai").lower().strip()
    if chosen not in ALLOWED_BACKENDS:
        raise ConfigError(f"unknown backend {settings.backend!r}, expected one of {sorted(ALLOWED_BACKENDS)}")
    if chosen != "auto":
        return chosen

    if settings.has_credential:
        return "openai"
    h, p = _host_port_from_url(DEFAULT_OLLAMA_URL)
    if h and p and _is_port_open(h, p):
        return "ollama"
    return "none"


def build_backend(settings: NewsSettings) -> Optional[ChatBackend]:
    """
    Backend for the Summarizer, or None when remote calls are disabled.
    The openai backend without an API key counts as disabled.
    """
    chosen = pick_backend_name(settings)

    if chosen == "none":
        logger.info("remote summaries disabled, using local fallback")
        return None

    if chosen == "ollama":
        return OllamaBackend(
            base_url=settings.base_url or DEFAULT_OLLAMA_URL,
            default_model=settings.model or DEFAULT_OLLAMA_MODEL,
            timeout=settings.request_timeout,
        )

    if not settings.has_credential:
        logger.warning("OPENAI_API_KEY not set, using local fallback summaries")
        return None
    return OpenAICompatibleBackend(
        base_url=settings.base_url or DEFAULT_OPENAI_URL,
        api_key=settings.api_key,
        default_model=settings.model or DEFAULT_OPENAI_MODEL,
        timeout=settings.request_timeout,
    )
