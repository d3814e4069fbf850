"""
Version control system (VCS) integration.

The :class:`GitClient` exposes the read-only queries used to collect
the staged diff of a pending commit.
"""

from .git_client import GitClient, GitError  # noqa: F401
