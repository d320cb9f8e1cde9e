"""LLM call wrapper.

Keeps the OpenAI client behind a small protocol so the classifier and the
refine engine can be exercised in tests with a fake backend.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Protocol, Sequence

from dotenv import load_dotenv
from openai import OpenAI

load_dotenv()

LOGGER = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class LLMBackend(Protocol):
    """Minimal interface for pluggable chat-completion providers."""

    def complete(
        self,
        messages: Sequence[Dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> str:
        ...


def _content_to_text(content: Any) -> str:
    """Chat APIs sometimes return string or list content."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item.get("text") or ""))
            elif isinstance(item, str):
                parts.append(item)
        return "\n".join(parts)
    if content is None:
        return ""
    return str(content)


class OpenAIBackend:
    """Chat completions over the OpenAI client (OpenAI or an OpenAI-compatible host)."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        if client is None:
            key = api_key or os.getenv("OPENAI_API_KEY")
            if not key:
                raise RuntimeError("OPENAI_API_KEY is not configured")
            client = OpenAI(api_key=key, base_url=base_url) if base_url else OpenAI(api_key=key)
        self._client = client
        self.last_usage: Optional[Dict[str, Optional[int]]] = None

    @classmethod
    def for_openrouter(cls, api_key: Optional[str] = None) -> "OpenAIBackend":
        key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not key:
            raise RuntimeError("OPENROUTER_API_KEY is not configured")
        return cls(api_key=key, base_url=OPENROUTER_BASE_URL)

    def complete(
        self,
        messages: Sequence[Dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> str:
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": list(messages),
            "temperature": temperature,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        completion = self._client.chat.completions.create(**kwargs)

        usage = getattr(completion, "usage", None)
        self.last_usage = {
            "prompt_tokens": getattr(usage, "prompt_tokens", None),
            "completion_tokens": getattr(usage, "completion_tokens", None),
        }
        if not completion.choices:
            return ""
        message = completion.choices[0].message
        content = message["content"] if isinstance(message, dict) else message.content  # type: ignore[index]
        text = _content_to_text(content)
        LOGGER.debug("LLM raw output (%s): %s", model, text)
        return text
