"""
Git client implementation for nullcommits.

This module wraps the read-only Git queries needed to build the staged
diff for a commit message. All subprocess calls are executed through
:meth:`GitClient._run` so that unit tests can mock them easily.

The queries used by the diff collector never raise: when the staged
query fails (for example in a repository without any commit yet) a diff
against ``HEAD`` is tried, and when that fails too an empty result is
returned.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for querying a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached. ``.git`` may be a file for worktrees and
        submodules.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command cannot be started, or exits with a non-zero
            status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Failed to execute Git: %s", exc)
            raise GitError(f"Failed to execute git: {exc}") from exc

        if check and result.returncode != 0:
            logger.debug(
                "Git command failed: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    def _query(self, *attempts: List[str]) -> Optional[str]:
        """Return the output of the first command in ``attempts`` that succeeds."""
        for args in attempts:
            try:
                return self._run(args, check=True).stdout
            except GitError as exc:
                logger.debug("Git query %s failed (%s); trying fallback", args, exc)
        return None

    # ------------------------------------------------------------------
    # Staged changes
    # ------------------------------------------------------------------
    def get_staged_files(self) -> List[str]:
        """Get the paths staged for the next commit, in Git's order.

        Falls back to the files changed against ``HEAD`` and finally to an
        empty list. Never raises.
        """
        output = self._query(
            ["diff", "--cached", "--name-only", "-z"],
            ["diff", "HEAD", "--name-only", "-z"],
        )
        if output is None:
            logger.warning("Unable to list staged files; continuing without changes")
            return []
        return [path for path in output.split("\0") if path.strip()]

    def get_file_diff(self, file_path: str) -> str:
        """Get the staged diff of a single file.

        Falls back to the diff against ``HEAD`` and finally to an empty
        string. Never raises.
        """
        output = self._query(
            ["diff", "--cached", "--no-color", "--", file_path],
            ["diff", "HEAD", "--no-color", "--", file_path],
        )
        if output is None:
            logger.debug("No diff available for %s", file_path)
            return ""
        return output
