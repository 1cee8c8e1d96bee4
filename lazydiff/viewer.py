"""Single-document diff viewer.

``DiffViewer`` owns one ``ViewerState`` and is the only thing that replaces
it. The host pushes content, dimensions, focus and key tokens in; the renderer
reads a ``ViewerSnapshot`` back out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace

from . import navigation
from .document import DEFAULT_TAB_WIDTH, DiffDocument, DiffLine, LineKind, build_document, parse_diff
from .input.dispatch import apply_key
from .search import SearchMatch
from .state import SearchEntryMode, ViewerState
from .viewport import Viewport
from .word_diff import WordDiffSegment, normalize_word_diff_segments, slice_word_diff_segments

logger = logging.getLogger(__name__)

DEFAULT_CHROME_ROWS = 2


@dataclass(frozen=True)
class VisibleLine:
    index: int
    line: DiffLine
    segments: tuple[WordDiffSegment, ...] | None = None
    selected: bool = False


@dataclass(frozen=True)
class ViewerSnapshot:
    """Everything the renderer needs for one frame."""

    lines: tuple[VisibleLine, ...]
    offset: int
    total_lines: int
    body_height: int
    text_x: int
    text_width: int
    search_query: str
    search_matches: tuple[SearchMatch, ...]
    current_match: SearchMatch | None
    search_text: str
    visual_text: str
    draft_query: str | None
    file_path: str | None

    @property
    def position_text(self) -> str:
        if self.total_lines <= 0:
            return "0-0/0"
        end = min(self.total_lines, self.offset + max(1, self.body_height))
        return f"{self.offset + 1}-{end}/{self.total_lines}"

    @property
    def in_search_entry(self) -> bool:
        return self.draft_query is not None


class DiffViewer:
    """Interactive state for one diff blob."""

    def __init__(
        self,
        text: str = "",
        *,
        total_rows: int = 24,
        width: int = 80,
        chrome_rows: int = DEFAULT_CHROME_ROWS,
        tab_width: int = DEFAULT_TAB_WIDTH,
        on_query_change: Callable[[str], None] | None = None,
    ) -> None:
        self.chrome_rows = max(0, chrome_rows)
        self.tab_width = max(1, tab_width)
        self.on_query_change = on_query_change
        document = parse_diff(text, self.tab_width)
        body_height = max(0, total_rows - self.chrome_rows)
        self.state = ViewerState(
            document=document,
            viewport=Viewport().resize(body_height, len(document)),
            text_width=max(1, width),
        )

    @property
    def document(self) -> DiffDocument:
        return self.state.document

    @property
    def active(self) -> bool:
        return self.state.active

    def focus(self) -> None:
        self.state = replace(self.state, active=True)

    def blur(self) -> None:
        self.state = replace(self.state, active=False)

    def set_text(self, text: str) -> None:
        """Replace the document with freshly parsed ``text``."""
        self._replace_document(parse_diff(text, self.tab_width))

    def set_lines(self, lines: Sequence[str]) -> None:
        self._replace_document(build_document(list(lines), self.tab_width))

    def _replace_document(self, document: DiffDocument) -> None:
        state = self.state
        logger.debug("document rebuilt: %d lines, %d hunks", len(document), len(document.hunk_index))
        viewport = state.viewport.resize(state.viewport.body_height, len(document))
        state = replace(
            state,
            document=document,
            viewport=viewport,
            selection=None,
            word_diffs={},
        )
        state = replace(state, text_x=min(state.text_x, state.max_text_x))
        query = state.mode.draft_query if isinstance(state.mode, SearchEntryMode) else state.search.query
        if query:
            state = replace(state, search=navigation.set_query(state, query).search)
        else:
            state = navigation.clear_search(state)
        self.state = state

    def set_word_diffs(self, word_diffs: Mapping[int, Sequence[WordDiffSegment]]) -> None:
        """Attach word-diff segments for added/removed lines; others are ignored.

        Segment text is tab-expanded and escaped like the line it describes.
        """
        lines = self.state.document.lines
        kept: dict[int, tuple[WordDiffSegment, ...]] = {}
        for line_index, segments in word_diffs.items():
            if not 0 <= line_index < len(lines):
                continue
            if lines[line_index].kind not in (LineKind.ADD, LineKind.DEL):
                continue
            kept[line_index] = normalize_word_diff_segments(segments, self.tab_width)
        self.state = replace(self.state, word_diffs=kept)

    def resize(self, total_rows: int, width: int) -> None:
        """Apply host terminal dimensions."""
        state = self.state
        body_height = max(0, total_rows - self.chrome_rows)
        viewport = state.viewport.resize(body_height, len(state.document))
        state = replace(state, viewport=viewport, text_width=max(1, width))
        self.state = replace(state, text_x=min(state.text_x, state.max_text_x))

    def handle_key(self, key: str) -> bool:
        """Apply one key token; returns whether the viewer consumed it."""
        outcome = apply_key(self.state, key)
        self.state = outcome.state
        if outcome.query_changed and self.on_query_change is not None:
            self.on_query_change(self.draft_query or "")
        return outcome.handled

    @property
    def draft_query(self) -> str | None:
        mode = self.state.mode
        if isinstance(mode, SearchEntryMode):
            return mode.draft_query
        return None

    def snapshot(self) -> ViewerSnapshot:
        state = self.state
        start, end = state.viewport.visible_range()
        selection = state.selection
        visible: list[VisibleLine] = []
        for index in range(start, end):
            line = state.document.lines[index]
            segments = state.word_diffs.get(index)
            sliced: tuple[WordDiffSegment, ...] | None = None
            if segments is not None:
                # Segments describe the content after the one-column marker.
                marked = (WordDiffSegment(line.text[:1], False), *segments)
                sliced = tuple(slice_word_diff_segments(marked, state.text_x, state.text_width))
            visible.append(
                VisibleLine(
                    index=index,
                    line=line,
                    segments=sliced,
                    selected=selection is not None and selection.contains(index),
                )
            )
        file_path = state.document.file_path
        return ViewerSnapshot(
            lines=tuple(visible),
            offset=state.viewport.offset,
            total_lines=state.viewport.total_lines,
            body_height=state.viewport.body_height,
            text_x=state.text_x,
            text_width=state.text_width,
            search_query=state.search.query,
            search_matches=state.search.matches,
            current_match=state.search.current_match,
            search_text=state.search.status_text(),
            visual_text=selection.status_text() if selection is not None else "",
            draft_query=self.draft_query,
            file_path=str(file_path) if file_path is not None else None,
        )
