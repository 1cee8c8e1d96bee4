"""Turn a ``ViewerSnapshot`` into terminal rows.

Code content is coloured with Pygments; added/removed lines get readable
diff backgrounds; search hits, changed words and the visual selection are
layered on top. Rendering is presentation-only and side-effect free.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .ansi import RESET, apply_line_background, clip_ansi_line, slice_ansi_line, style_ansi_char_range
from .document import LineKind
from .viewer import ViewerSnapshot, VisibleLine

DEFAULT_STYLE = "monokai"
LINE_NUMBER_GUTTER = 6

ADDED_BG_SGR = "48;2;36;74;52"
REMOVED_BG_SGR = "48;2;92;43;49"
ADDED_WORD_BG_SGR = "48;2;46;120;72"
REMOVED_WORD_BG_SGR = "48;2;150;52;62"
SELECTION_BG_SGR = "48;2;58;92;188"
_DIFF_CONTRAST_8BIT = "246"

_CURRENT_HIT_ON, _CURRENT_HIT_OFF = "7;1", "27;22"
_OTHER_HIT_ON, _OTHER_HIT_OFF = "1;4", "22;24"
_PLAIN_SELECTION_SGR = "7"
_HEADER_ON = "\033[1m"
_HUNK_ON = "\033[36m"
_STATUS_ON = "\033[7m"
_GUTTER_ON = "\033[2;38;5;245m"


@dataclass(frozen=True)
class RenderOptions:
    style: str = DEFAULT_STYLE
    no_color: bool = False
    line_numbers: bool = False
    show_header: bool = True


@functools.lru_cache(maxsize=32)
def normalize_style(style: str) -> str:
    """Return ``style`` when Pygments knows it, else the default style."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


@functools.lru_cache(maxsize=32)
def _formatter_for_style(style: str) -> Terminal256Formatter:
    return Terminal256Formatter(style=normalize_style(style))


@functools.lru_cache(maxsize=64)
def _lexer_for_path(file_path: str | None):
    if not file_path:
        return TextLexer()
    try:
        return get_lexer_for_filename(file_path)
    except ClassNotFound:
        return TextLexer()


@functools.lru_cache(maxsize=4096)
def colorize_code(content: str, file_path: str | None, style: str) -> str:
    """Syntax-colour one line of code content (without its diff marker)."""
    if not content:
        return content
    rendered = pygments_highlight(content, _lexer_for_path(file_path), _formatter_for_style(style))
    return rendered.rstrip("\n")


def _boost_foreground_contrast(params: str) -> str:
    """Replace near-background greys so dim tokens stay readable on diff backgrounds."""
    parts = [part for part in params.split(";") if part]
    boosted: list[str] = []
    index = 0
    while index < len(parts):
        token = parts[index]
        if token in {"38", "48"} and index + 2 < len(parts) and parts[index + 1] == "5":
            color_token = parts[index + 2]
            if token == "38" and color_token.isdigit() and 232 <= int(color_token) <= 248:
                boosted.extend(["38", "5", _DIFF_CONTRAST_8BIT])
            else:
                boosted.extend([token, "5", color_token])
            index += 3
            continue
        # Faint text is unreadable on a coloured background.
        if token == "2":
            index += 1
            continue
        if token in {"30", "90"}:
            boosted.extend(["38", "5", _DIFF_CONTRAST_8BIT])
            index += 1
            continue
        boosted.append(token)
        index += 1
    return ";".join(boosted)


def _styled_full_line(visible: VisibleLine, file_path: str | None, style: str) -> str:
    line = visible.line
    kind = line.kind
    if kind is LineKind.HEADER:
        return f"{_HEADER_ON}{line.text}{RESET}"
    if kind is LineKind.HUNK:
        return f"{_HUNK_ON}{line.text}{RESET}"
    if kind in (LineKind.ADD, LineKind.DEL):
        return line.text[:1] + colorize_code(line.text[1:], file_path, style)
    if line.text.startswith(" "):
        return " " + colorize_code(line.text[1:], file_path, style)
    return line.text


def _changed_word_ranges(visible: VisibleLine) -> list[tuple[int, int]]:
    if not visible.segments:
        return []
    ranges: list[tuple[int, int]] = []
    pos = 0
    for segment in visible.segments:
        if segment.is_changed:
            ranges.append((pos, pos + len(segment.text)))
        pos += len(segment.text)
    return ranges


def _hit_ranges(snapshot: ViewerSnapshot, line_index: int) -> list[tuple[int, int, bool]]:
    ranges: list[tuple[int, int, bool]] = []
    for match in snapshot.search_matches:
        if match.line_index != line_index:
            continue
        start = match.char_offset - snapshot.text_x
        end = start + match.length
        if end <= 0 or start >= snapshot.text_width:
            continue
        ranges.append((max(0, start), min(snapshot.text_width, end), match == snapshot.current_match))
    return ranges


def _overlay_hits(snapshot: ViewerSnapshot, visible: VisibleLine, row: str) -> str:
    for start, end, is_current in _hit_ranges(snapshot, visible.index):
        if is_current:
            row = style_ansi_char_range(row, start, end, _CURRENT_HIT_ON, _CURRENT_HIT_OFF)
        else:
            row = style_ansi_char_range(row, start, end, _OTHER_HIT_ON, _OTHER_HIT_OFF)
    return row


def render_body_row(snapshot: ViewerSnapshot, visible: VisibleLine, options: RenderOptions) -> str:
    """Render one visible document line clipped to the horizontal window."""
    width = snapshot.text_width
    if options.no_color:
        # Monochrome attributes still mark hits and the selection.
        row = _overlay_hits(snapshot, visible, clip_ansi_line(visible.line.text[snapshot.text_x:], width))
        if visible.selected:
            return apply_line_background(row, _PLAIN_SELECTION_SGR)
        return row

    row = slice_ansi_line(_styled_full_line(visible, snapshot.file_path, options.style), snapshot.text_x, width)
    kind = visible.line.kind
    line_bg: str | None = None
    if visible.selected:
        line_bg = SELECTION_BG_SGR
        row = apply_line_background(row, line_bg)
    elif kind in (LineKind.ADD, LineKind.DEL):
        line_bg = ADDED_BG_SGR if kind is LineKind.ADD else REMOVED_BG_SGR
        row = apply_line_background(row, line_bg, _boost_foreground_contrast)
        word_bg = ADDED_WORD_BG_SGR if kind is LineKind.ADD else REMOVED_WORD_BG_SGR
        for start, end in _changed_word_ranges(visible):
            row = style_ansi_char_range(row, start, end, word_bg, line_bg)

    row = _overlay_hits(snapshot, visible, row)
    if line_bg is None and "\x1b" in row:
        return f"{row}{RESET}"
    return row


def _gutter(visible: VisibleLine, options: RenderOptions) -> str:
    if not options.line_numbers:
        return ""
    number = visible.line.display_line_number
    label = f"{number:>{LINE_NUMBER_GUTTER - 1}} " if number is not None else " " * LINE_NUMBER_GUTTER
    if options.no_color:
        return label
    return f"{_GUTTER_ON}{label}{RESET}"


def status_row(snapshot: ViewerSnapshot, width: int) -> str:
    """Plain-text status row: search prompt while typing, else readouts."""
    if snapshot.draft_query is not None:
        parts = [f"/{snapshot.draft_query}"]
        if snapshot.search_text:
            parts.append(f"[{snapshot.search_text}]")
        elif snapshot.draft_query:
            parts.append("[no matches]")
        text = "  ".join(parts)
    else:
        parts = [snapshot.position_text]
        if snapshot.search_text:
            parts.append(f"/{snapshot.search_query} [{snapshot.search_text}]")
        if snapshot.visual_text:
            parts.append(f"-- VISUAL -- {snapshot.visual_text}")
        text = "  ".join(parts)
    return clip_ansi_line(text, width)


def render_screen(snapshot: ViewerSnapshot, options: RenderOptions | None = None) -> list[str]:
    """Return header (optional), ``body_height`` body rows and a status row."""
    if options is None:
        options = RenderOptions()
    gutter_width = LINE_NUMBER_GUTTER if options.line_numbers else 0
    width = snapshot.text_width + gutter_width
    rows: list[str] = []

    if options.show_header:
        title = snapshot.file_path or "(diff)"
        header = clip_ansi_line(title, width)
        rows.append(header if options.no_color else f"{_HEADER_ON}{header}{RESET}")

    for visible in snapshot.lines:
        rows.append(_gutter(visible, options) + render_body_row(snapshot, visible, options))
    for _ in range(max(0, snapshot.body_height - len(snapshot.lines))):
        rows.append("~" if options.no_color else f"\033[2m~{RESET}")

    status = status_row(snapshot, width)
    if options.no_color:
        rows.append(status)
    else:
        rows.append(f"{_STATUS_ON}{status}{' ' * max(0, width - len(status))}{RESET}")
    return rows


def render_document(snapshot: ViewerSnapshot, options: RenderOptions | None = None) -> str:
    """Render only the body rows as newline-terminated text (non-interactive output)."""
    if options is None:
        options = RenderOptions()
    out: list[str] = []
    for visible in snapshot.lines:
        out.append(_gutter(visible, options) + render_body_row(snapshot, visible, options))
        out.append("\n")
    return "".join(out)
