from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, TypedDict, Union

from ...errors import RemoteSummaryError

Role = Literal["system", "user", "assistant"]


class MessageDict(TypedDict):
    role: Role
    content: str


@dataclass
class GenerationParams:
    """
    Knobs for one summary request.
    model None means the backend's own default model.
    """
    model: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 900
    json_mode: bool = True


@dataclass
class GenerationUsage:
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


@dataclass
class GenerationResult:
    """When error is set the text is not trustworthy and the summarizer falls back."""
    text: str
    model_used: str
    usage: Optional[GenerationUsage] = None
    error: Optional[str] = None


class BackendError(RemoteSummaryError):
    """Transport or API failure inside a chat backend."""


class ChatBackend(abc.ABC):
    """Chat model the Summarizer asks for a translated title and summary as JSON."""

    name: str = "base"

    @abc.abstractmethod
    def generate(
        self,
        messages: List[MessageDict],
        params: GenerationParams,
        strict: bool = False,
    ) -> GenerationResult:
        raise NotImplementedError


def normalize_messages(messages: List[Union[MessageDict, Dict]]) -> List[MessageDict]:
    """Trim contents, drop empty ones, reject unknown roles."""
    out: List[MessageDict] = []
    for i, m in enumerate(messages):
        role = m.get("role")  # type: ignore
        content = m.get("content")  # type: ignore
        if role not in ("system", "user", "assistant"):
            raise BackendError(f"invalid role at index {i}: {role}")
        if not isinstance(content, str):
            raise BackendError(f"content must be str at index {i}")
        content = content.strip()
        if content:
            out.append(MessageDict(role=role, content=content))
    if not out:
        raise BackendError("empty messages")
    return out
