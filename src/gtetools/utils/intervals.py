"""Genomic interval operations.

This module provides the half-open interval type used throughout gtetools
and a few set-style helpers built on it:

- Validated construction
- Envelope (bounding interval) of many intervals
- Interval merging
- Gaps between intervals (introns)

All coordinates are 0-based, half-open: ``[start, end)``.

Example:
    >>> from gtetools.utils.intervals import Interval, envelope
    >>> Interval.from_coords(100, 300).length
    200
    >>> envelope([Interval(400, 500), Interval(100, 300)])
    Interval(start=100, end=500)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from gtetools.exceptions import InvalidInterval

# =============================================================================
# Data Structures
# =============================================================================


class Interval(NamedTuple):
    """A half-open genomic interval.

    Zero-length intervals are allowed; use ``from_coords`` to reject
    inverted or negative coordinates.

    Attributes:
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
    """

    start: int
    end: int

    @classmethod
    def from_coords(cls, start: int, end: int) -> Interval:
        """Create an interval, validating its coordinates.

        Args:
            start: Start position (0-based, inclusive).
            end: End position (0-based, exclusive).

        Returns:
            The validated interval.

        Raises:
            InvalidInterval: If start > end or either coordinate is negative.
        """
        if start < 0 or end < 0:
            raise InvalidInterval(f"interval coordinates must be non-negative: [{start},{end})")
        if start > end:
            raise InvalidInterval()
        return cls(start, end)

    @property
    def length(self) -> int:
        """Get interval length."""
        return self.end - self.start

    def envelops(self, other: Interval) -> bool:
        """Check if another interval lies completely within this one."""
        return self.start <= other.start and other.end <= self.end


# =============================================================================
# Envelope and Merge Operations
# =============================================================================


def envelope(intervals: Iterable[tuple[int, int]]) -> Interval:
    """Get the minimal interval containing all given intervals.

    Args:
        intervals: Intervals or (start, end) tuples.

    Returns:
        Bounding interval.

    Raises:
        ValueError: If no intervals are given.
    """
    items = list(intervals)
    if not items:
        raise ValueError("Cannot compute the envelope of zero intervals")
    return Interval(min(start for start, _ in items), max(end for _, end in items))


def merge_intervals(intervals: Iterable[tuple[int, int]]) -> list[Interval]:
    """Merge overlapping or touching intervals.

    Args:
        intervals: Intervals or (start, end) tuples.

    Returns:
        Sorted list of merged intervals.
    """
    sorted_intervals = sorted(Interval(start, end) for start, end in intervals)
    if not sorted_intervals:
        return []

    merged = [sorted_intervals[0]]
    for current in sorted_intervals[1:]:
        last = merged[-1]
        if current.start <= last.end:
            merged[-1] = Interval(last.start, max(last.end, current.end))
        else:
            merged.append(current)

    return merged


def interval_gaps(intervals: Iterable[tuple[int, int]]) -> list[Interval]:
    """Find the gaps between consecutive intervals.

    For the exons of a transcript these are its introns.

    Args:
        intervals: Intervals or (start, end) tuples, in any order.

    Returns:
        Sorted list of gap intervals (empty for fewer than two intervals).
    """
    merged = merge_intervals(intervals)
    return [Interval(left.end, right.start) for left, right in zip(merged, merged[1:])]


def total_length(intervals: Iterable[tuple[int, int]]) -> int:
    """Sum of interval lengths, counting overlapping bases once."""
    return sum(interval.length for interval in merge_intervals(intervals))
