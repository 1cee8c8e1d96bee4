"""Word-level diff segments supplied by an external differ.

Segments are cleaned the same way line text is (control bytes escaped, tabs
expanded) and then trimmed to the horizontal scroll window before rendering.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .document import DEFAULT_TAB_WIDTH, expand_tabs, sanitize_terminal_text


@dataclass(frozen=True)
class WordDiffSegment:
    text: str
    is_changed: bool


def normalize_word_diff_segments(
    segments: Sequence[WordDiffSegment],
    tab_width: int = DEFAULT_TAB_WIDTH,
    start_col: int = 1,
) -> tuple[WordDiffSegment, ...]:
    """Shape segment text like its line so columns match.

    ``start_col`` is where the first segment begins; the diff marker takes
    column 0. Tab stops carry across segment boundaries.
    """
    col = start_col
    shaped: list[WordDiffSegment] = []
    for segment in segments:
        text = expand_tabs(sanitize_terminal_text(segment.text), tab_width, col)
        shaped.append(WordDiffSegment(text=text, is_changed=segment.is_changed))
        col += len(text)
    return tuple(shaped)


def slice_word_diff_segments(
    segments: Sequence[WordDiffSegment],
    text_x: int,
    width: int,
) -> list[WordDiffSegment]:
    """Trim ``segments`` to columns ``[text_x, text_x + width)``.

    Empty slices are dropped; each kept slice retains its changed flag.
    """
    if width <= 0:
        return []
    text_x = max(0, text_x)
    end = text_x + width
    result: list[WordDiffSegment] = []
    pos = 0
    for segment in segments:
        seg_end = pos + len(segment.text)
        if seg_end <= text_x:
            pos = seg_end
            continue
        if pos >= end:
            break
        slice_start = max(0, text_x - pos)
        slice_end = min(len(segment.text), end - pos)
        text = segment.text[slice_start:slice_end]
        if text:
            result.append(WordDiffSegment(text=text, is_changed=segment.is_changed))
        pos = seg_end
    return result
