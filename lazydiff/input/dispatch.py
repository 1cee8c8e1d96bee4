"""Mode-aware keystroke dispatch for the diff viewer.

``apply_key`` is the viewer's transition function: it takes the current
``ViewerState`` and one key token and returns the next state. Priority is
fixed: an inactive viewer ignores keys, search entry captures every key as
text, and only then are normal-mode bindings consulted. Visual mode only
reinterprets vertical line movement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .. import navigation
from ..state import NORMAL, SearchEntryMode, ViewerState
from .key_registry import KeyComboBinding, KeyComboRegistry

logger = logging.getLogger(__name__)

ERASE_KEYS = ("BACKSPACE", "DELETE")


@dataclass(frozen=True)
class KeyOutcome:
    """Result of one keystroke: next state plus host-facing flags."""

    state: ViewerState
    handled: bool
    query_changed: bool = False


def is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def apply_key(state: ViewerState, key: str) -> KeyOutcome:
    """Route ``key`` to exactly one handler based on the current mode."""
    if not state.active:
        return KeyOutcome(state, handled=False)
    mode = state.mode
    if isinstance(mode, SearchEntryMode):
        return handle_search_entry_key(state, mode, key)
    return handle_normal_key(state, key)


def handle_search_entry_key(state: ViewerState, mode: SearchEntryMode, key: str) -> KeyOutcome:
    """Treat every key as query editing; nothing reaches navigation."""
    draft = mode.draft_query
    if key == "ESC":
        logger.debug("search cancelled (draft=%r)", draft)
        next_state = replace(navigation.clear_search(state), mode=NORMAL)
        return KeyOutcome(next_state, handled=True, query_changed=True)
    if key == "ENTER":
        logger.debug("search committed (query=%r, matches=%d)", draft, len(state.search.matches))
        return KeyOutcome(replace(state, mode=NORMAL), handled=True)
    if key in ERASE_KEYS:
        if not draft:
            return KeyOutcome(state, handled=True)
        return _apply_draft(state, draft[:-1])
    if is_text_key(key):
        return _apply_draft(state, draft + key)
    return KeyOutcome(state, handled=True)


def _apply_draft(state: ViewerState, draft: str) -> KeyOutcome:
    next_state = navigation.set_query(state, draft)
    next_state = replace(next_state, mode=SearchEntryMode(draft_query=draft))
    return KeyOutcome(next_state, handled=True, query_changed=True)


def handle_normal_key(state: ViewerState, key: str) -> KeyOutcome:
    """Handle one normal-mode key, with or without an active visual selection."""
    visual = state.visual_active
    viewport = state.viewport

    def with_viewport(next_viewport) -> ViewerState:
        return replace(state, viewport=next_viewport)

    def line_up_action() -> ViewerState:
        if visual:
            return navigation.extend_up(state)
        return with_viewport(viewport.line_up())

    def line_down_action() -> ViewerState:
        if visual:
            return navigation.extend_down(state)
        return with_viewport(viewport.line_down())

    def open_search_action() -> ViewerState:
        logger.debug("search entry opened")
        return replace(state, mode=SearchEntryMode(draft_query=""))

    def toggle_visual_action() -> ViewerState:
        next_state = navigation.toggle_visual(state)
        logger.debug("visual mode %s", "on" if next_state.visual_active else "off")
        return next_state

    def match_action(forward: bool) -> ViewerState | None:
        if visual or not state.search.has_matches:
            return None
        return navigation.next_match(state) if forward else navigation.prev_match(state)

    def escape_action() -> ViewerState | None:
        if not visual:
            return None
        logger.debug("visual mode off")
        return navigation.exit_visual(state)

    bindings: KeyComboRegistry[ViewerState] = KeyComboRegistry().register_bindings(
        KeyComboBinding(("UP", "k"), line_up_action),
        KeyComboBinding(("DOWN", "j"), line_down_action),
        KeyComboBinding(("PAGE_UP", "CTRL_U"), lambda: with_viewport(viewport.page_up())),
        KeyComboBinding(("PAGE_DOWN", "CTRL_D"), lambda: with_viewport(viewport.page_down())),
        KeyComboBinding(("HOME", "g"), lambda: with_viewport(viewport.goto_top())),
        KeyComboBinding(("END", "G"), lambda: with_viewport(viewport.goto_bottom())),
        KeyComboBinding(("LEFT", "h"), lambda: navigation.scroll_horizontal(state, -navigation.HORIZONTAL_STEP)),
        KeyComboBinding(("RIGHT", "l"), lambda: navigation.scroll_horizontal(state, navigation.HORIZONTAL_STEP)),
        KeyComboBinding(("/",), open_search_action),
        KeyComboBinding(("V",), toggle_visual_action),
        KeyComboBinding(("n",), lambda: match_action(True)),
        KeyComboBinding(("N",), lambda: match_action(False)),
        KeyComboBinding(("[",), lambda: navigation.prev_hunk(state)),
        KeyComboBinding(("]",), lambda: navigation.next_hunk(state)),
        KeyComboBinding(("ESC",), escape_action),
    )

    next_state = bindings.dispatch(key)
    if next_state is None:
        return KeyOutcome(state, handled=False)
    return KeyOutcome(next_state, handled=True, query_changed=key == "/")
