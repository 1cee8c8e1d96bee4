"""ANSI-aware text measurement and line shaping utilities.

Provides clipping, slicing, and column-range styling that preserve escape
sequences, so overlays can be layered onto already-coloured rows.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
SGR_RE = re.compile(r"\x1b\[([0-9;]*)m")
RESET = "\033[0m"


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks consume no columns and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def ansi_display_width(text: str) -> int:
    """Return display width after removing ANSI escape sequences."""
    return sum(char_display_width(ch) for ch in strip_ansi(text))


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        w = char_display_width(text[i])
        if col + w > max_cols:
            break
        out.append(text[i])
        col += w
        i += 1

    return "".join(out)


def slice_ansi_line(text: str, start_char: int, max_cols: int) -> str:
    """Return a horizontal window of a styled line.

    The window starts at visible character ``start_char`` and includes up to
    ``max_cols`` display columns. If the window begins after a style sequence,
    the latest pending SGR sequence is injected so visible text keeps the
    original styling.
    """
    if max_cols <= 0 or not text:
        return ""
    start_char = max(0, start_char)

    out: list[str] = []
    visible_idx = 0
    shown = 0
    i = 0
    n = len(text)
    pending_sgr = ""
    injected_style = False
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                seq = match.group(0)
                if seq.endswith("m"):
                    pending_sgr = seq
                if visible_idx >= start_char:
                    out.append(seq)
                    injected_style = True
                i = match.end()
                continue
        ch = text[i]
        if visible_idx < start_char:
            visible_idx += 1
            i += 1
            continue
        w = char_display_width(ch)
        if shown + w > max_cols:
            break
        if not injected_style and pending_sgr:
            out.append(pending_sgr)
            injected_style = True
        out.append(ch)
        shown += w
        visible_idx += 1
        i += 1

    return "".join(out)


def _visible_spans(text: str) -> tuple[list[int], list[int]]:
    visible_start: list[int] = []
    visible_end: list[int] = []
    idx = 0
    text_len = len(text)
    while idx < text_len:
        if text[idx] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, idx)
            if match:
                idx = match.end()
                continue
        visible_start.append(idx)
        idx += 1
        visible_end.append(idx)
    return visible_start, visible_end


def style_ansi_char_range(text: str, start: int, end: int, on_sgr: str, off_sgr: str) -> str:
    """Wrap visible characters ``[start, end)`` in ``on_sgr``/``off_sgr``.

    Style sequences inside the range get ``on_sgr`` re-applied after them so a
    nested reset cannot cancel the overlay part-way.
    """
    if not text or end <= start:
        return text
    visible_start, visible_end = _visible_spans(text)
    if not visible_start:
        return text

    start_idx = max(0, start)
    end_idx = min(len(visible_start), end)
    if end_idx <= start_idx:
        return text

    raw_start = visible_start[start_idx]
    raw_end = visible_end[end_idx - 1]
    segment = SGR_RE.sub(lambda match: f"{match.group(0)}\033[{on_sgr}m", text[raw_start:raw_end])
    return f"{text[:raw_start]}\033[{on_sgr}m{segment}\033[{off_sgr}m{text[raw_end:]}"


def apply_line_background(line: str, bg_sgr: str, boost=None) -> str:
    """Apply a persistent background SGR to an ANSI-coded line.

    ``boost`` optionally rewrites each SGR parameter string first (used to keep
    dim foregrounds legible on coloured backgrounds).
    """

    def _inject_bg(match: re.Match[str]) -> str:
        params = match.group(1)
        if boost is not None:
            params = boost(params)
        if params and params != "0":
            return f"\033[{params};{bg_sgr}m"
        if params == "0":
            return f"\033[0;{bg_sgr}m"
        return f"\033[{bg_sgr}m"

    line_with_persistent_bg = SGR_RE.sub(_inject_bg, line)
    return f"\033[{bg_sgr}m{line_with_persistent_bg}\033[K{RESET}"
