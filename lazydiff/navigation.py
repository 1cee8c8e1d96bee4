"""State-level navigation operations.

Each function takes a ``ViewerState`` and returns the next one. They combine
the search index, hunk lookups and visual selection with the viewport so the
target line is brought into view. Nothing here has UI concerns.
"""

from __future__ import annotations

from dataclasses import replace

from .hunks import next_hunk_index, prev_hunk_index
from .search import SearchState
from .selection import VisualSelection
from .state import ViewerState

HORIZONTAL_STEP = 4


def set_query(state: ViewerState, query: str) -> ViewerState:
    """Rebuild matches for ``query`` and jump to the first hit."""
    search = SearchState.build(state.document.lines, query)
    viewport = state.viewport
    first = search.current_match
    if first is not None:
        viewport = viewport.jump_to(first.line_index)
    return replace(state, search=search, viewport=viewport)


def clear_search(state: ViewerState) -> ViewerState:
    return replace(state, search=SearchState())


def _jump_to_current_match(state: ViewerState, search: SearchState) -> ViewerState:
    match = search.current_match
    if match is None:
        return state
    return replace(state, search=search, viewport=state.viewport.jump_to(match.line_index))


def next_match(state: ViewerState) -> ViewerState:
    return _jump_to_current_match(state, state.search.next_match())


def prev_match(state: ViewerState) -> ViewerState:
    return _jump_to_current_match(state, state.search.prev_match())


def next_hunk(state: ViewerState) -> ViewerState:
    target = next_hunk_index(state.document.hunk_index, state.viewport.offset)
    if target is None:
        return state
    return replace(state, viewport=state.viewport.jump_to(target))


def prev_hunk(state: ViewerState) -> ViewerState:
    target = prev_hunk_index(state.document.hunk_index, state.viewport.offset)
    if target is None:
        return state
    return replace(state, viewport=state.viewport.jump_to(target))


def enter_visual(state: ViewerState) -> ViewerState:
    if state.selection is not None:
        return state
    selection = VisualSelection.enter(state.viewport)
    if selection is None:
        return state
    return replace(state, selection=selection)


def exit_visual(state: ViewerState) -> ViewerState:
    if state.selection is None:
        return state
    return replace(state, selection=None)


def toggle_visual(state: ViewerState) -> ViewerState:
    if state.selection is None:
        return enter_visual(state)
    return exit_visual(state)


def _track_extent(state: ViewerState, selection: VisualSelection) -> ViewerState:
    # Recenter on the extent after it moved, not before.
    viewport = state.viewport.jump_to(selection.extent - max(0, state.viewport.body_height) // 2)
    return replace(state, selection=selection, viewport=viewport)


def extend_up(state: ViewerState) -> ViewerState:
    if state.selection is None:
        return state
    return _track_extent(state, state.selection.extend_up(state.viewport.total_lines))


def extend_down(state: ViewerState) -> ViewerState:
    if state.selection is None:
        return state
    return _track_extent(state, state.selection.extend_down(state.viewport.total_lines))


def scroll_horizontal(state: ViewerState, delta: int) -> ViewerState:
    text_x = max(0, min(state.text_x + delta, state.max_text_x))
    if text_x == state.text_x:
        return state
    return replace(state, text_x=text_x)
