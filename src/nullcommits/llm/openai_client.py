"""
Client for an OpenAI compatible chat completions API.

This client wraps HTTP requests to the ``/chat/completions`` endpoint.
On error conditions (HTTP errors, timeouts, malformed responses), a
:class:`LLMError` is raised.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict

import requests


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


SYSTEM_PROMPT = (
    "You are a helpful assistant that generates clear, informative git commit "
    "messages. You respond only with the commit message itself, no explanations "
    "or markdown formatting."
)

_ERROR_MESSAGES = {
    "invalid_api_key": "Invalid OpenAI API key. Please check your configuration.",
    "insufficient_quota": "OpenAI API quota exceeded. Please check your billing.",
}


class LLMError(Exception):
    """Raised when communication with the language model fails."""

    pass


def strip_thinking_tags(text: str) -> str:
    """Remove reasoning blocks such as ``<think>...</think>`` from a reply.

    >>> strip_thinking_tags("<think>reasoning...</think>Answer")
    'Answer'
    """
    result = text
    for tag in ("think", "thinking", "thought", "reasoning"):
        result = re.sub(rf"<{tag}>.*?</{tag}>", "", result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


def _error_code(response: Any) -> str:
    try:
        error = response.json().get("error") or {}
    except (ValueError, AttributeError):
        return ""
    if isinstance(error, dict):
        return error.get("code") or ""
    return ""


@dataclass
class OpenAIClient:
    """Client for a chat completions endpoint.

    Parameters
    ----------
    api_key : str
        Bearer token sent in the ``Authorization`` header.
    model : str
        Name of the chat model, e.g. ``"gpt-5.1"``.
    base_url : str, optional
        Base URL of the API. Defaults to the public OpenAI endpoint.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 60 seconds.
    """

    api_key: str
    model: str = "gpt-5.1"
    base_url: str = "https://api.openai.com/v1"
    request_timeout: float = 60.0

    def _endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    def generate(self, prompt: str) -> str:
        """Send ``prompt`` as the user message and return the reply text.

        Raises
        ------
        LLMError
            If the request fails or the server returns an error or an
            empty reply.
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        url = self._endpoint()
        logger.debug("Sending request to %s (model %s, %d prompt chars)", url, self.model, len(prompt))
        try:
            response = requests.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to LLM: %s", exc)
            raise LLMError(str(exc)) from exc

        if response.status_code != 200:
            code = _error_code(response)
            logger.error("LLM returned non-200 status %s: %s", response.status_code, response.text)
            if code in _ERROR_MESSAGES:
                raise LLMError(_ERROR_MESSAGES[code])
            raise LLMError(f"OpenAI API error: status {response.status_code}: {response.text}")

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse LLM response: %s", exc)
            raise LLMError("Failed to parse LLM response") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError("Unexpected response structure from LLM") from exc
        if not content or not content.strip():
            raise LLMError(f"No response received from {self.model}")
        return strip_thinking_tags(content)
