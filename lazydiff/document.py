"""Classify unified-diff text into semantic lines.

A ``DiffDocument`` is built once per diff blob and never mutated; callers
replace it wholesale when the text changes. Parsing is total: anything that is
not a header, hunk header, addition or removal falls back to context.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

DEFAULT_TAB_WIDTH = 4

_HEADER_PREFIXES = ("diff --git", "index ", "+++", "---")
_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


class LineKind(enum.Enum):
    HEADER = "header"
    HUNK = "hunk"
    ADD = "add"
    DEL = "del"
    CONTEXT = "context"


def classify(line: str) -> LineKind:
    """Return the kind of one raw diff line.

    ``+++``/``---`` file headers also start with ``+``/``-``, so header
    prefixes are checked before single-character markers.
    """
    if line.startswith(_HEADER_PREFIXES):
        return LineKind.HEADER
    if line.startswith("@@"):
        return LineKind.HUNK
    if line.startswith("+"):
        return LineKind.ADD
    if line.startswith("-"):
        return LineKind.DEL
    return LineKind.CONTEXT


@dataclass(frozen=True)
class DiffLine:
    text: str
    kind: LineKind
    line_number: int  # 1-based position in the document
    old_line_number: int | None = None
    new_line_number: int | None = None

    @property
    def display_line_number(self) -> int | None:
        """Gutter number: old side for removals, new side otherwise."""
        if self.kind is LineKind.DEL:
            return self.old_line_number
        if self.kind in (LineKind.ADD, LineKind.CONTEXT):
            return self.new_line_number
        return None


@dataclass(frozen=True)
class DiffDocument:
    lines: tuple[DiffLine, ...] = ()
    hunk_index: tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def max_line_width(self) -> int:
        return max((len(line.text) for line in self.lines), default=0)

    @property
    def file_path(self) -> PurePosixPath | None:
        """Path named by the ``+++``/``---`` file headers, if any."""
        fallback: PurePosixPath | None = None
        for line in self.lines:
            if line.kind is not LineKind.HEADER:
                continue
            if line.text.startswith("+++ "):
                path = _header_path(line.text[4:])
                if path is not None:
                    return path
            elif line.text.startswith("--- ") and fallback is None:
                fallback = _header_path(line.text[4:])
        return fallback


def _header_path(raw: str) -> PurePosixPath | None:
    name = raw.split("\t", 1)[0].strip()
    if not name or name == "/dev/null":
        return None
    if name[:2] in {"a/", "b/"}:
        name = name[2:]
    return PurePosixPath(name)


def expand_tabs(text: str, tab_width: int = DEFAULT_TAB_WIDTH, start_col: int = 0) -> str:
    """Expand tabs to spaces so character offsets equal display columns.

    ``start_col`` is the column ``text`` begins at, for fragments of a line.
    """
    if "\t" not in text:
        return text
    out: list[str] = []
    col = start_col
    for ch in text:
        if ch == "\t":
            spaces = tab_width - (col % tab_width)
            out.append(" " * spaces)
            col += spaces
        else:
            out.append(ch)
            col += 1
    return "".join(out)


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes in one line; tabs pass through for expansion."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def build_document(raw_lines: list[str], tab_width: int = DEFAULT_TAB_WIDTH) -> DiffDocument:
    """Classify already-split lines and record hunk positions and line numbers."""
    lines: list[DiffLine] = []
    hunk_index: list[int] = []
    old_no: int | None = None
    new_no: int | None = None

    for idx, raw in enumerate(raw_lines):
        text = expand_tabs(sanitize_terminal_text(raw.rstrip("\r\n")), max(1, tab_width))
        kind = classify(text)
        old_line: int | None = None
        new_line: int | None = None

        if kind is LineKind.HUNK:
            hunk_index.append(idx)
            match = _HUNK_RE.match(text)
            if match:
                old_no = int(match.group(1))
                new_no = int(match.group(3))
            else:
                old_no = new_no = None
        elif kind is LineKind.HEADER:
            if text.startswith("diff --git"):
                old_no = new_no = None
        elif kind is LineKind.ADD:
            if new_no is not None:
                new_line = new_no
                new_no += 1
        elif kind is LineKind.DEL:
            if old_no is not None:
                old_line = old_no
                old_no += 1
        elif old_no is not None and new_no is not None and not text.startswith("\\"):
            old_line, new_line = old_no, new_no
            old_no += 1
            new_no += 1

        lines.append(
            DiffLine(
                text=text,
                kind=kind,
                line_number=idx + 1,
                old_line_number=old_line,
                new_line_number=new_line,
            )
        )

    return DiffDocument(lines=tuple(lines), hunk_index=tuple(hunk_index))


def split_diff_lines(text: str) -> list[str]:
    """Split diff text on newlines; a trailing newline adds no empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_diff(text: str, tab_width: int = DEFAULT_TAB_WIDTH) -> DiffDocument:
    """Build a document from raw unified-diff text."""
    return build_document(split_diff_lines(text), tab_width)
