"""Snapshot similarity scoring — positional line comparison of ARIA snapshots.

The score counts lines that are equal at the same position and divides by
the length of the longer snapshot. It is not an edit distance:
a single inserted or removed line shifts every following line and all of
them count as mismatches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_SIMILARITY_THRESHOLD = 95.0

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")


@dataclass(frozen=True)
class LineDifference:
    expected_lines: int
    actual_lines: int
    percentage: float


@dataclass(frozen=True)
class SimilarityScore:
    percentage: float
    expected_line_count: int
    actual_line_count: int
    line_diff_percentage: float

    def passes(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> bool:
        return self.percentage >= threshold


def normalize_snapshot(text: str) -> str:
    """Absorb incidental whitespace differences from dynamic rendering."""
    collapsed = _HORIZONTAL_WS.sub(" ", text.strip().replace("\r\n", "\n"))
    lines = (line.strip() for line in collapsed.split("\n"))
    return "\n".join(line for line in lines if line)


def calculate_similarity(expected: str, actual: str) -> float:
    """Percentage of positions where the normalized lines are equal."""
    expected_lines = [line for line in expected.split("\n") if line]
    actual_lines = [line for line in actual.split("\n") if line]

    max_length = max(len(expected_lines), len(actual_lines))
    if max_length == 0:
        return 100.0

    matching = sum(1 for a, b in zip(expected_lines, actual_lines) if a == b)
    return matching * 100 / max_length


def calculate_difference(expected: str, actual: str) -> LineDifference:
    """Compare raw line counts; informational only."""
    expected_lines = len(expected.split("\n"))
    actual_lines = len(actual.split("\n"))
    max_lines = max(expected_lines, actual_lines)
    line_diff = abs(expected_lines - actual_lines)
    return LineDifference(
        expected_lines=expected_lines,
        actual_lines=actual_lines,
        percentage=round(line_diff / max_lines * 100, 2),
    )


def score(expected: str, actual: str) -> SimilarityScore:
    """Score a fresh snapshot against its baseline."""
    percentage = calculate_similarity(
        normalize_snapshot(expected), normalize_snapshot(actual)
    )
    diff = calculate_difference(expected, actual)
    return SimilarityScore(
        percentage=percentage,
        expected_line_count=diff.expected_lines,
        actual_line_count=diff.actual_lines,
        line_diff_percentage=diff.percentage,
    )
