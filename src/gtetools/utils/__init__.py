"""Utility functions for gtetools.

- Interval operations (envelope, merge, gaps)
- Logging configuration

Example:
    >>> from gtetools.utils import Interval, interval_gaps
    >>> interval_gaps([(100, 300), (400, 500)])
    [Interval(start=300, end=400)]
"""

from gtetools.utils.intervals import Interval, envelope, interval_gaps, merge_intervals, total_length

__all__ = ["Interval", "envelope", "interval_gaps", "merge_intervals", "total_length"]
