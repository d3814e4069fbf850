"""
Language model integration for nullcommits.

This package contains the :class:`OpenAIClient` for talking to a chat
completions API and the :class:`CommitMessageGenerator` which uses it
to rewrite commit messages.
"""

from .openai_client import LLMError, OpenAIClient  # noqa: F401
from .commit_message_generator import CommitMessageGenerator  # noqa: F401
