"""
Collection of the staged diff within a character budget.

:mod:`nullcommits.diff.diff_extractor` drives the collection,
:mod:`nullcommits.diff.budget` splits the budget among files and
:mod:`nullcommits.diff.media` decides which files are listed by name only.
"""

from .budget import DEFAULT_DIFF_BUDGET, BudgetPlan, allocate  # noqa: F401
from .diff_extractor import DiffResult, FileDiffRecord, assemble, collect_staged_diff  # noqa: F401
from .line_counter import LineChanges, count_line_changes  # noqa: F401
from .media import FileKind, classify_path, is_media  # noqa: F401
