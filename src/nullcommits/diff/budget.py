"""
Character budget allocation for per-file diffs.

The language model only accepts a bounded amount of text, so the
assembled diff is limited to a total number of characters. Every code
file first receives an even share of that budget (the *baseline*).
Files whose diff fits inside the baseline are rendered in full and the
room they leave unused (the *slack*) is split evenly among the files
that overflow the baseline.

The redistribution is a single pass. All overflowing files receive the
same top-up regardless of their size, and the top-up is rounded down,
so up to ``len(overflowing) - 1`` characters of slack may stay unused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_DIFF_BUDGET = 128_000


@dataclass(frozen=True)
class BudgetPlan:
    """Result of a budget allocation run.

    Attributes
    ----------
    total_budget : int
        Total number of characters available for all code file diffs.
    baseline : int
        Even per-file share of ``total_budget``.
    slack : int
        Characters left unused by files that fit in the baseline.
    allocations : Dict[str, int]
        Character allowance for each overflowing file. Files that fit in
        the baseline have no entry and are rendered in full.
    """

    total_budget: int
    baseline: int
    slack: int = 0
    allocations: Dict[str, int] = field(default_factory=dict)

    def allowance(self, path: str) -> Optional[int]:
        """Return the allowance for ``path`` or ``None`` when it is unbounded."""
        return self.allocations.get(path)

    def is_truncated(self, path: str) -> bool:
        return path in self.allocations


def allocate(lengths: Mapping[str, int], total_budget: int) -> BudgetPlan:
    """Split ``total_budget`` characters among the diffs in ``lengths``.

    Parameters
    ----------
    lengths : Mapping[str, int]
        Mapping of file path to the length of its diff in characters.
        Must contain at least one entry.
    total_budget : int
        Total number of characters available. Must be positive; the
        configuration layer validates user supplied values.

    Returns
    -------
    BudgetPlan
        The baseline, slack and per-file allowance of every file that
        exceeds the baseline.

    Raises
    ------
    ValueError
        If ``lengths`` is empty or ``total_budget`` is not positive.
    """
    if total_budget <= 0:
        raise ValueError(f"total_budget must be positive, got {total_budget}")
    if not lengths:
        raise ValueError("allocate() requires at least one file")

    baseline = total_budget // len(lengths)
    slack = 0
    overflowing = []
    for path, length in lengths.items():
        if length <= baseline:
            slack += baseline - length
        else:
            overflowing.append(path)

    allowance = baseline
    if slack > 0 and overflowing:
        allowance = baseline + slack // len(overflowing)

    allocations = {path: allowance for path in overflowing}
    logger.debug(
        "Budget %d over %d file(s): baseline=%d slack=%d overflowing=%d allowance=%d",
        total_budget,
        len(lengths),
        baseline,
        slack,
        len(overflowing),
        allowance,
    )
    return BudgetPlan(
        total_budget=total_budget,
        baseline=baseline,
        slack=slack,
        allocations=allocations,
    )
