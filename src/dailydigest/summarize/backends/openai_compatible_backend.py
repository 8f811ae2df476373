from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
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

DEFAULT_OPENAI_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class OpenAICompatibleBackend(ChatBackend):
    """
    /chat/completions client for OpenAI and servers that mimic it
    (LM Studio, llama.cpp server, gateways).

    The API key is sent as a Bearer token when given.
    """

    name: str = "openai"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_OPENAI_URL,
        api_key: Optional[str] = None,
        default_model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = 60.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
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
            body: Dict[str, Any] = {
                "model": model,
                "messages": [{"role": m["role"], "content": m["content"]} for m in msgs],
                "temperature": float(params.temperature),
                "max_tokens": int(params.max_tokens),
            }
            if params.json_mode:
                body["response_format"] = {"type": "json_object"}

            resp = self._post_json("chat/completions", body)

            # {"model": ..., "choices": [{"message": {"content": ...}}], "usage": {...}}
            model_used = resp.get("model") or model
            text = ""
            choices = resp.get("choices")
            if isinstance(choices, list) and choices and isinstance(choices[0], dict):
                msg = choices[0].get("message")
                if isinstance(msg, dict):
                    text = (msg.get("content") or "").strip()

            usage = None
            block = resp.get("usage")
            if isinstance(block, dict):
                usage = GenerationUsage(
                    prompt_tokens=_int_or_none(block.get("prompt_tokens")),
                    completion_tokens=_int_or_none(block.get("completion_tokens")),
                    total_tokens=_int_or_none(block.get("total_tokens")),
                )

            if not text:
                return GenerationResult(text="", model_used=model_used, usage=usage, error="openai_empty_response")
            return GenerationResult(text=text, model_used=model_used, usage=usage)

        except Exception as e:
            if strict:
                raise BackendError(str(e)) from e
            logger.debug("openai backend failed", exc_info=True)
            return GenerationResult(text="", model_used=model, error=f"openai_error: {e}")

    def _post_json(self, endpoint: str, payload: dict) -> dict:
        url = urljoin(self.base_url + "/", endpoint)
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        req = Request(url=url, data=json.dumps(payload).encode("utf-8"), method="POST", headers=headers)
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as he:
            try:
                detail = he.read().decode("utf-8", errors="replace")
            except Exception:
                detail = ""
            raise BackendError(f"http {he.code}: {detail[:300]}") from he
        except URLError as ue:
            raise BackendError(f"url error: {ue.reason}") from ue
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as je:
            raise BackendError(f"bad json body: {je}") from je
        if not isinstance(obj, dict):
            raise BackendError("unexpected response body")
        return obj


def _int_or_none(v: Any) -> Optional[int]:
    return v if isinstance(v, int) else None
