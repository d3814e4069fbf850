"""
Processing of a commit message file on behalf of the git hook.

The ``prepare-commit-msg`` hook calls ``nullcommits process <file>``.
:func:`process_commit_message` reads the message, collects the staged
diff within the configured budget and replaces the message with the one
produced by the language model.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from nullcommits.diff.budget import DEFAULT_DIFF_BUDGET
from nullcommits.diff.diff_extractor import collect_staged_diff
from nullcommits.llm.commit_message_generator import CommitMessageGenerator


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Messages git or the user generated for special commits are left alone.
SKIP_PREFIXES = ("Merge ", "Revert ", "fixup!", "squash!")


def read_message(msg_file: Path) -> str:
    """Read a commit message file, dropping git's ``#`` comment lines."""
    content = msg_file.read_text(encoding="utf-8")
    lines = [line for line in content.splitlines() if not line.startswith("#")]
    return "\n".join(lines).strip()


def should_skip(message: str) -> bool:
    return message.startswith(SKIP_PREFIXES)


def process_commit_message(
    msg_file: Path,
    vcs_client: Any,
    make_generator: Callable[[], CommitMessageGenerator],
    diff_budget: int = DEFAULT_DIFF_BUDGET,
    max_workers: int = 1,
) -> bool:
    """Rewrite the commit message stored in ``msg_file``.

    Parameters
    ----------
    msg_file : Path
        The file git passes to the ``prepare-commit-msg`` hook.
    vcs_client : object
        Client used to collect the staged diff.
    make_generator : Callable[[], CommitMessageGenerator]
        Returns the generator producing the replacement message. Only
        called once the message is known to need rewriting, so special
        commits and empty diffs never touch the configuration.
    diff_budget : int, optional
        Maximum number of diff characters sent to the model.
    max_workers : int, optional
        Number of concurrent per-file diff fetches.

    Returns
    -------
    bool
        True if the file was rewritten, False if it was left untouched.

    Raises
    ------
    FileNotFoundError
        If ``msg_file`` does not exist.
    LLMError
        If the language model fails.
    ConfigError
        Propagated from ``make_generator`` when the configuration is invalid.
    """
    if not msg_file.exists():
        raise FileNotFoundError(f"Commit message file not found: {msg_file}")

    original = read_message(msg_file)
    if should_skip(original):
        logger.info("Special commit message detected; leaving it unchanged")
        return False

    result = collect_staged_diff(vcs_client, total_budget=diff_budget, max_workers=max_workers)
    if result.is_empty:
        logger.warning("No changes detected in diff. Using original message.")
        return False

    logger.info(
        "Rewriting commit message for %d file(s), %d line(s) changed",
        result.file_count,
        result.total_lines_changed,
    )
    message = make_generator().rewrite(original, result.diff)
    msg_file.write_text(message + "\n", encoding="utf-8")
    return True
