"""OpenAI-compatible chat-completions client (AI gateway and Perplexity)."""

import logging
from typing import Any, Dict, List

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"
REQUEST_TIMEOUT = 30


class ChatCompletionError(UpstreamError):
    """Raised on a non-2xx or malformed chat-completions response."""


def complete(
    url: str,
    api_key: str,
    model: str,
    messages: List[Dict[str, str]],
    *,
    temperature: float = 0.7,
    max_tokens: int = 800,
) -> str:
    """Send one chat request and return the first choice's message content."""
    body = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    try:
        response = _SESSION.post(url, json=body, headers=headers, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise ChatCompletionError(f"chat completion request failed: {exc}") from exc

    if response.status_code >= 400:
        logger.error("Chat completion error %s: %s", response.status_code, response.text[:300])
        raise ChatCompletionError(f"chat completion returned HTTP {response.status_code}", status_code=response.status_code)

    try:
        data: Dict[str, Any] = response.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise ChatCompletionError("chat completion response had no message content") from exc
    if not isinstance(content, str):
        raise ChatCompletionError("chat completion content was not text")
    return content
