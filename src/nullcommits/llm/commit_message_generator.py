"""
Commit message rewriting using a language model.

The :class:`CommitMessageGenerator` combines the message the user typed
with the assembled staged diff and asks the language model for an
improved message.
"""

from __future__ import annotations

import logging
from textwrap import dedent

from nullcommits.llm.openai_client import LLMError, OpenAIClient


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PROMPT_TEMPLATE = dedent(
    """
    Rewrite the following git commit message so that it accurately describes
    the staged changes. Keep the intent of the original message.

    Format:
    - A subject line of at most 72 characters in the imperative mood
    - A blank line
    - A short body explaining what changed and why

    Original commit message:
    {original_message}

    Staged changes:
    {diff}
    """
).strip()


def clean_message(message: str) -> str:
    """Strip whitespace and a single pair of quotes wrapping the whole message."""
    cleaned = message.strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in {'"', "'"}:
        cleaned = cleaned[1:-1].strip()
    return cleaned


class CommitMessageGenerator:
    """Rewrite commit messages with a language model."""

    def __init__(self, client: OpenAIClient) -> None:
        self.client = client

    def build_prompt(self, original_message: str, diff: str) -> str:
        return PROMPT_TEMPLATE.format(original_message=original_message, diff=diff)

    def rewrite(self, original_message: str, diff: str) -> str:
        """Return the rewritten message.

        Raises
        ------
        LLMError
            If the model fails or replies with an empty message.
        """
        prompt = self.build_prompt(original_message, diff)
        message = clean_message(self.client.generate(prompt))
        if not message:
            raise LLMError("Language model returned an empty commit message")
        logger.debug("Rewrote commit message (%d -> %d chars)", len(original_message), len(message))
        return message
