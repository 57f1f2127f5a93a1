"""Line diffs between two version snapshots, grouped into unified-diff hunks."""

from __future__ import annotations

import difflib
import logging
from typing import TYPE_CHECKING

from agent_desk.models.diff import DiffHunk, DiffLine, DiffLineType, DiffResult, DiffStats

if TYPE_CHECKING:
    from pathlib import Path

    from agent_desk.storage.repositories.versions import VersionRepository

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = 3


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, ignoring one final newline so ``"a\\n"`` and ``"a"`` compare equal.

    Carriage returns and other Unicode line breaks stay part of the line, so
    a CRLF to LF conversion shows up as a change.
    """
    if not content:
        return []
    return content.removesuffix("\n").split("\n")


def _range_start(start: int, count: int) -> int:
    """Unified-diff start: 1-based, or the preceding line for an empty range."""
    return start + 1 if count else start


def compute_hunks(old: str, new: str, context: int = DEFAULT_CONTEXT) -> list[DiffHunk]:
    """Group the line-level changes from ``old`` to ``new`` into hunks."""
    a, b = split_lines(old), split_lines(new)
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)
    hunks: list[DiffHunk] = []

    for group in matcher.get_grouped_opcodes(context):
        first, last = group[0], group[-1]
        old_count = last[2] - first[1]
        new_count = last[4] - first[3]
        hunk = DiffHunk(
            old_start=_range_start(first[1], old_count),
            old_count=old_count,
            new_start=_range_start(first[3], new_count),
            new_count=new_count,
        )
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                for offset, text in enumerate(a[i1:i2]):
                    hunk.lines.append(
                        DiffLine(
                            kind=DiffLineType.CONTEXT,
                            line_number=i1 + offset + 1,
                            content=text,
                            old_line_number=i1 + offset + 1,
                            new_line_number=j1 + offset + 1,
                        )
                    )
                continue
            for offset, text in enumerate(a[i1:i2]):
                hunk.lines.append(
                    DiffLine(
                        kind=DiffLineType.REMOVED,
                        line_number=i1 + offset + 1,
                        content=text,
                        old_line_number=i1 + offset + 1,
                    )
                )
            for offset, text in enumerate(b[j1:j2]):
                hunk.lines.append(
                    DiffLine(
                        kind=DiffLineType.ADDED,
                        line_number=j1 + offset + 1,
                        content=text,
                        new_line_number=j1 + offset + 1,
                    )
                )
        hunks.append(hunk)
    return hunks


def compute_stats(hunks: list[DiffHunk]) -> DiffStats:
    additions = sum(1 for h in hunks for line in h.lines if line.kind == DiffLineType.ADDED)
    deletions = sum(1 for h in hunks for line in h.lines if line.kind == DiffLineType.REMOVED)
    return DiffStats(additions=additions, deletions=deletions, changes=additions + deletions)


def diff_contents(old: str, new: str, context: int = DEFAULT_CONTEXT) -> DiffResult:
    """Diff two raw strings; version numbers are reported as 0."""
    hunks = compute_hunks(old, new, context)
    return DiffResult(from_version=0, to_version=0, hunks=hunks, stats=compute_stats(hunks))


def generate_diff(
    document: Path,
    from_version: int,
    to_version: int,
    repo: VersionRepository,
    context: int = DEFAULT_CONTEXT,
) -> DiffResult | None:
    """Diff two stored versions. Returns None if either is missing or evicted."""
    history = repo.load(document)
    from_entry = history.find(from_version)
    to_entry = history.find(to_version)
    if from_entry is None or to_entry is None:
        logger.info(
            "Diff requested for unavailable version — path=%s from=%d to=%d first=%s",
            document,
            from_version,
            to_version,
            history.first_available_version,
        )
        return None

    hunks = compute_hunks(from_entry.content, to_entry.content, context)
    return DiffResult(
        from_version=from_version,
        to_version=to_version,
        from_timestamp=from_entry.timestamp,
        to_timestamp=to_entry.timestamp,
        hunks=hunks,
        stats=compute_stats(hunks),
    )


def touches_range(old: str, new: str, start_line: int, end_line: int) -> bool:
    """True when the change from ``old`` to ``new`` alters lines ``start_line..end_line`` of ``old``.

    Insertions strictly inside the range count as a change; insertions just
    before or after it do not.
    """
    lo, hi = start_line - 1, end_line  # 0-based half-open range in ``old``
    a, b = split_lines(old), split_lines(new)
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)
    for tag, i1, i2, _j1, _j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        if i1 == i2:
            if lo < i1 < hi:
                return True
        elif i1 < hi and lo < i2:
            return True
    return False
