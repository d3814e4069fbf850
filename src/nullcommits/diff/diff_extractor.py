"""
Collection and assembly of the staged diff.

:func:`collect_staged_diff` asks the VCS client for the staged files,
separates media assets from code files, fetches one diff per code file,
and assembles a single text bounded by a character budget (see
:mod:`nullcommits.diff.budget`). The callers provide a VCS client that
implements ``get_staged_files()`` and ``get_file_diff(file_path)``; both
are expected to degrade to empty results instead of raising.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from nullcommits.diff.budget import DEFAULT_DIFF_BUDGET, BudgetPlan, allocate
from nullcommits.diff.line_counter import count_line_changes
from nullcommits.diff.media import is_media


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


MEDIA_HEADER = "Media files (binary content omitted):"
MEDIA_MARKER = "[media]"


@dataclass
class FileDiffRecord:
    """Diff of a single staged code file.

    Attributes
    ----------
    path : str
        Path relative to the repository root.
    diff : str
        Raw diff text as reported by the VCS.
    added, removed : int
        Number of added and removed lines in ``diff``.
    exceeds_baseline : bool
        True if the diff is longer than the even per-file share.
    allocated_budget : Optional[int]
        Number of characters of ``diff`` that may be rendered. Only set
        for files exceeding the baseline.
    """

    path: str
    diff: str
    added: int = 0
    removed: int = 0
    exceeds_baseline: bool = False
    allocated_budget: Optional[int] = None

    @property
    def length(self) -> int:
        return len(self.diff)

    @property
    def lines_changed(self) -> int:
        return self.added + self.removed

    @property
    def omitted(self) -> int:
        """Number of characters cut from the rendered diff."""
        if self.allocated_budget is None:
            return 0
        return max(self.length - self.allocated_budget, 0)

    def render(self) -> str:
        if self.allocated_budget is None:
            return self.diff
        return self.diff[: self.allocated_budget]


@dataclass(frozen=True)
class DiffResult:
    """Assembled diff handed to the commit message rewriter."""

    diff: str
    total_lines_changed: int
    file_count: int

    @property
    def is_empty(self) -> bool:
        return not self.diff.strip()


def build_records(diffs: Dict[str, str], order: Sequence[str]) -> List[FileDiffRecord]:
    """Create one :class:`FileDiffRecord` per path in ``order``."""
    records = []
    for path in order:
        diff = diffs.get(path, "")
        changes = count_line_changes(diff)
        records.append(
            FileDiffRecord(path=path, diff=diff, added=changes.added, removed=changes.removed)
        )
    return records


def apply_plan(records: Iterable[FileDiffRecord], plan: BudgetPlan) -> None:
    """Mark the records that exceed the baseline and store their allowance."""
    for record in records:
        allowance = plan.allowance(record.path)
        record.exceeds_baseline = allowance is not None
        record.allocated_budget = allowance


def assemble(media_files: Sequence[str], records: Sequence[FileDiffRecord]) -> str:
    """Render media files and code diffs into one text.

    Media files are listed by name only, followed by a blank line. Each
    code diff is rendered in full or cut to its allocated budget; a cut
    diff is followed by a line naming the file and how many characters
    were dropped.
    """
    parts: List[str] = []
    if media_files:
        parts.append(MEDIA_HEADER)
        parts.extend(f"{MEDIA_MARKER} {path}" for path in media_files)
        parts.append("")
    for record in records:
        parts.append(record.render())
        if record.omitted:
            parts.append(f"... [{record.path}: {record.omitted} chars omitted]")
    return "\n".join(parts)


def fetch_diffs(vcs_client: Any, paths: Sequence[str], max_workers: int = 1) -> Dict[str, str]:
    """Fetch the diff of every path in ``paths``.

    With ``max_workers`` greater than one the fetches run on a thread
    pool. The returned mapping is keyed by path, so completion order
    does not matter to the caller.
    """
    diffs: Dict[str, str] = {}
    if max_workers <= 1 or len(paths) <= 1:
        for path in paths:
            diffs[path] = vcs_client.get_file_diff(path)
        return diffs

    workers = min(max_workers, len(paths))
    logger.debug("Fetching %d diff(s) with %d worker(s)", len(paths), workers)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_path = {executor.submit(vcs_client.get_file_diff, path): path for path in paths}
        for future in concurrent.futures.as_completed(future_to_path):
            diffs[future_to_path[future]] = future.result()
    return diffs


def collect_staged_diff(
    vcs_client: Any,
    total_budget: int = DEFAULT_DIFF_BUDGET,
    max_workers: int = 1,
) -> DiffResult:
    """Collect the staged changes and assemble them within ``total_budget``.

    Parameters
    ----------
    vcs_client : object
        Must implement ``get_staged_files()`` and ``get_file_diff(path)``.
    total_budget : int
        Total characters allowed for code diffs. Media listings are not
        counted against it.
    max_workers : int, optional
        Number of concurrent diff fetches. Defaults to sequential.

    Returns
    -------
    DiffResult
        The assembled text, the number of added and removed lines over
        all code files (counted before truncation) and the number of
        staged files.
    """
    staged = list(vcs_client.get_staged_files())
    if not staged:
        logger.debug("No staged files found")
        return DiffResult(diff="", total_lines_changed=0, file_count=0)

    media_files = [path for path in staged if is_media(path)]
    code_files = [path for path in staged if not is_media(path)]
    logger.debug("Staged files: %d code, %d media", len(code_files), len(media_files))

    records: List[FileDiffRecord] = []
    if code_files:
        diffs = fetch_diffs(vcs_client, code_files, max_workers=max_workers)
        records = build_records(diffs, code_files)
        plan = allocate({record.path: record.length for record in records}, total_budget)
        apply_plan(records, plan)
        for record in records:
            if record.omitted:
                logger.debug("Truncating %s: %d chars omitted", record.path, record.omitted)

    return DiffResult(
        diff=assemble(media_files, records),
        total_lines_changed=sum(record.lines_changed for record in records),
        file_count=len(staged),
    )
