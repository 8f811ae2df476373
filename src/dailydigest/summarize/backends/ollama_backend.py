from __future__ import annotations

import json
import logging
from typing import Any, Dict, List
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin
from urllib.request import Request, urlopen

from .base import (
    BackendError,
    ChatBackend,
    GenerationParams,
    GenerationResult,
    GenerationUsage,
    MessageDict,
    normalize_messages,
)

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://127.0.0.1:11434"
DEFAULT_OLLAMA_MODEL = "llama3"


class OllamaBackend(ChatBackend):
    """
    Local Ollama server via /api/chat, non streaming.

    No API key. Generation knobs go into `options`; max_tokens maps to
    num_predict and json_mode to format=json.
    """

    name: str = "ollama"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_OLLAMA_URL,
        default_model: str = DEFAULT_OLLAMA_MODEL,
        timeout: float = 300.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.timeout = timeout

    def generate(
        self,
        messages: List[MessageDict],
        params: GenerationParams,
        strict: bool = False,
    ) -> GenerationResult:
        model = (params.model or self.default_model).strip()
        try:
            msgs = normalize_messages(messages)
            options: Dict[str, Any] = {"temperature": float(params.temperature)}
            if params.max_tokens and params.max_tokens > 0:
                options["num_predict"] = int(params.max_tokens)

            payload: Dict[str, Any] = {
                "model": model,
                "messages": [{"role": m["role"], "content": m["content"]} for m in msgs],
                "stream": False,
                "options": options,
            }
            if params.json_mode:
                payload["format"] = "json"

            resp = self._post_json("/api/chat", payload)

            # {"model": ..., "message": {"role": "assistant", "content": ...},
            #  "prompt_eval_count": n, "eval_count": m}
            model_used = resp.get("model") or model
            message = resp.get("message") or {}
            text = (message.get("content") or "").strip() if isinstance(message, dict) else ""

            pt = resp.get("prompt_eval_count")
            ct = resp.get("eval_count")
            usage = GenerationUsage(
                prompt_tokens=pt if isinstance(pt, int) else None,
                completion_tokens=ct if isinstance(ct, int) else None,
                total_tokens=pt + ct if isinstance(pt, int) and isinstance(ct, int) else None,
            )

            if not text:
                return GenerationResult(text="", model_used=model_used, usage=usage, error="ollama_empty_response")
            return GenerationResult(text=text, model_used=model_used, usage=usage)

        except Exception as e:
            if strict:
                raise BackendError(str(e)) from e
            logger.debug("ollama backend failed", exc_info=True)
            return GenerationResult(text="", model_used=model, error=f"ollama_error: {e}")

    def _post_json(self, path: str, payload: dict) -> dict:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        req = Request(
            url=url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as he:
            raise BackendError(f"http {he.code}") from he
        except URLError as ue:
            raise BackendError(f"url error: {ue.reason}") from ue
        try:
            return json.loads(raw)
        except json.JSONDecodeError as je:
            raise BackendError(f"bad json body: {je}") from je
