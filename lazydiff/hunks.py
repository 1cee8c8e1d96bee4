"""Hunk-header lookups relative to the current scroll position."""

from __future__ import annotations

import bisect
from collections.abc import Sequence


def next_hunk_index(hunk_index: Sequence[int], start: int) -> int | None:
    """Return the first hunk line strictly below ``start``, or ``None``."""
    pos = bisect.bisect_right(hunk_index, start)
    if pos >= len(hunk_index):
        return None
    return hunk_index[pos]


def prev_hunk_index(hunk_index: Sequence[int], start: int) -> int | None:
    """Return the last hunk line strictly above ``start``, or ``None``."""
    pos = bisect.bisect_left(hunk_index, start)
    if pos <= 0:
        return None
    return hunk_index[pos - 1]
