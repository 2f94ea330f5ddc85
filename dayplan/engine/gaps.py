"""Free-interval detection within a day window.

Intervals are minutes from midnight, half-open ``[start, end)``.
"""

from typing import Iterable, List

from ..models.schedule import Gap, Interval

DEFAULT_MIN_GAP_MINUTES = 5


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort and merge overlapping or touching intervals; empty ones are dropped."""
    ordered = sorted((i for i in intervals if i.end > i.start), key=lambda i: (i.start, i.end))
    merged: List[Interval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def detect_gaps(
    intervals: Iterable[Interval],
    window_start: int,
    window_end: int,
    min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES,
) -> List[Gap]:
    """Gaps of at least ``min_gap_minutes`` between busy intervals in the window.

    Busy intervals are clamped to the window and merged first. Shorter gaps
    are dropped on purpose: a three-minute sliver is not a usable slot.
    """
    if window_end <= window_start:
        return []

    clamped = [
        Interval(max(window_start, i.start), min(window_end, i.end))
        for i in intervals
    ]

    gaps: List[Gap] = []
    cursor = window_start
    for busy in merge_intervals(clamped):
        if busy.start - cursor >= min_gap_minutes:
            gaps.append(Gap(cursor, busy.start, busy.start - cursor))
        cursor = max(cursor, busy.end)
        if cursor >= window_end:
            break

    if window_end - cursor >= min_gap_minutes:
        gaps.append(Gap(cursor, window_end, window_end - cursor))
    return gaps
