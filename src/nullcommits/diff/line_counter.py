"""
Counting of added and removed lines in a unified diff.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LineChanges:
    """Number of added and removed lines in a diff body."""

    added: int = 0
    removed: int = 0

    @property
    def total(self) -> int:
        return self.added + self.removed


def count_line_changes(diff: str) -> LineChanges:
    """Count added and removed lines in ``diff``.

    Lines are separated by ``\\n`` only, as git emits them. The
    ``+++``/``---`` file header markers are not counted.
    """
    added = 0
    removed = 0
    for line in diff.split("\n"):
        if line.startswith("+") and not line.startswith("+++"):
            added += 1
        elif line.startswith("-") and not line.startswith("---"):
            removed += 1
    return LineChanges(added=added, removed=removed)
