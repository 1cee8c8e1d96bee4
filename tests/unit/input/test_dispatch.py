"""Tests for mode-aware keystroke dispatch.

Covers the fixed priority (inactive, search entry, normal), visual-mode
reinterpretation of vertical movement, and query-change notifications.
"""

from __future__ import annotations

import unittest
from dataclasses import replace

from lazydiff.document import parse_diff
from lazydiff.input.dispatch import apply_key
from lazydiff.selection import VisualSelection
from lazydiff.state import NORMAL, SearchEntryMode, ViewerState
from lazydiff.viewport import Viewport


def _diff_text(hunks: int = 3, lines_per_hunk: int = 6) -> str:
    rows = ["diff --git a/app.py b/app.py", "--- a/app.py", "+++ b/app.py"]
    for hunk in range(hunks):
        start = 1 + hunk * 100
        rows.append(f"@@ -{start},{lines_per_hunk} +{start},{lines_per_hunk} @@")
        for idx in range(lines_per_hunk):
            marker = "+" if idx % 3 == 0 else "-" if idx % 3 == 1 else " "
            rows.append(f"{marker}value_{hunk}_{idx} = {idx}")
    return "\n".join(rows)


def _state(text: str | None = None, body_height: int = 4, **changes) -> ViewerState:
    document = parse_diff(_diff_text() if text is None else text)
    state = ViewerState(document=document, viewport=Viewport().resize(body_height, len(document)))
    return replace(state, **changes) if changes else state


def _feed(state: ViewerState, *keys: str) -> ViewerState:
    for key in keys:
        state = apply_key(state, key).state
    return state


class PriorityTests(unittest.TestCase):
    def test_inactive_viewer_ignores_every_key(self) -> None:
        state = _state(active=False)
        for key in ("j", "/", "V", "]", "ESC", "a"):
            outcome = apply_key(state, key)
            self.assertFalse(outcome.handled)
            self.assertIs(outcome.state, state)

    def test_search_entry_captures_navigation_letters_as_text(self) -> None:
        state = _feed(_state(), "/", "j", "k", "n", "V", "]", "q")
        self.assertEqual(state.mode, SearchEntryMode(draft_query="jknV]q"))
        self.assertIsNone(state.selection)

    def test_search_entry_swallows_named_keys(self) -> None:
        state = _feed(_state(), "/")
        for key in ("UP", "DOWN", "PAGE_DOWN", "HOME", "TAB", "CTRL_D"):
            outcome = apply_key(state, key)
            self.assertTrue(outcome.handled)
            self.assertIs(outcome.state, state)

    def test_unknown_normal_key_is_unhandled(self) -> None:
        state = _state()
        outcome = apply_key(state, "z")
        self.assertFalse(outcome.handled)
        self.assertIs(outcome.state, state)


class SearchEntryTests(unittest.TestCase):
    def test_slash_opens_empty_draft_and_notifies(self) -> None:
        outcome = apply_key(_state(), "/")
        self.assertTrue(outcome.handled)
        self.assertTrue(outcome.query_changed)
        self.assertEqual(outcome.state.mode, SearchEntryMode(draft_query=""))

    def test_typing_updates_matches_incrementally_and_jumps(self) -> None:
        state = _feed(_state(), "/")
        outcome = apply_key(_feed(state, "v", "a", "l", "u", "e", "_", "2"), "_")
        self.assertTrue(outcome.query_changed)
        search = outcome.state.search
        self.assertEqual(search.query, "value_2_")
        self.assertEqual(len(search.matches), 6)
        self.assertEqual(outcome.state.viewport.offset, search.current_match.line_index)

    def test_backspace_erases_and_empty_backspace_is_quiet(self) -> None:
        state = _feed(_state(), "/", "a", "b")
        outcome = apply_key(state, "BACKSPACE")
        self.assertEqual(outcome.state.mode, SearchEntryMode(draft_query="a"))
        self.assertTrue(outcome.query_changed)
        emptied = _feed(outcome.state, "DELETE")
        quiet = apply_key(emptied, "BACKSPACE")
        self.assertTrue(quiet.handled)
        self.assertFalse(quiet.query_changed)
        self.assertEqual(quiet.state.mode, SearchEntryMode(draft_query=""))

    def test_enter_commits_and_keeps_matches(self) -> None:
        state = _feed(_state(), "/", "v", "a", "l")
        outcome = apply_key(state, "ENTER")
        self.assertEqual(outcome.state.mode, NORMAL)
        self.assertFalse(outcome.query_changed)
        self.assertEqual(outcome.state.search.query, "val")
        self.assertEqual(len(outcome.state.search.matches), 18)

    def test_escape_cancels_and_clears_query(self) -> None:
        state = _feed(_state(), "/", "v", "a", "l")
        outcome = apply_key(state, "ESC")
        self.assertEqual(outcome.state.mode, NORMAL)
        self.assertTrue(outcome.query_changed)
        self.assertEqual(outcome.state.search.query, "")
        self.assertEqual(outcome.state.search.matches, ())

    def test_n_cycles_matches_after_commit(self) -> None:
        state = _feed(_state(body_height=2), "/", "v", "a", "l", "u", "e", "_", "1", "ENTER")
        first = state.search.current
        state = _feed(state, "n")
        self.assertEqual(state.search.current, first + 1)
        self.assertEqual(state.viewport.offset, state.search.current_match.line_index)
        state = _feed(state, "N", "N")
        self.assertEqual(state.search.current, len(state.search.matches) - 1)

    def test_n_without_matches_is_unhandled(self) -> None:
        state = _state()
        self.assertFalse(apply_key(state, "n").handled)
        self.assertFalse(apply_key(state, "N").handled)


class NormalNavigationTests(unittest.TestCase):
    def test_vertical_keys_and_aliases(self) -> None:
        state = _state(body_height=4)
        self.assertEqual(_feed(state, "j").viewport.offset, 1)
        self.assertEqual(_feed(state, "DOWN", "DOWN", "k").viewport.offset, 1)
        self.assertEqual(_feed(state, "PAGE_DOWN").viewport.offset, 2)
        self.assertEqual(_feed(state, "CTRL_D", "CTRL_U").viewport.offset, 0)
        self.assertEqual(_feed(state, "G").viewport.offset, state.viewport.max_offset)
        self.assertEqual(_feed(state, "END", "HOME").viewport.offset, 0)
        self.assertEqual(_feed(state, "G", "g").viewport.offset, 0)

    def test_hunk_jumps(self) -> None:
        state = _state(body_height=4)
        hunks = state.document.hunk_index
        state = _feed(state, "]")
        self.assertEqual(state.viewport.offset, hunks[0])
        state = _feed(state, "]")
        self.assertEqual(state.viewport.offset, hunks[1])
        state = _feed(state, "[")
        self.assertEqual(state.viewport.offset, hunks[0])
        self.assertEqual(_feed(state, "[", "[").viewport.offset, hunks[0])

    def test_hunk_jump_past_last_hunk_is_a_no_op(self) -> None:
        state = _feed(_state(body_height=4), "]", "]", "]")
        self.assertIs(_feed(state, "]"), state)

    def test_horizontal_scroll_is_clamped(self) -> None:
        text = "+" + "x" * 30
        state = _state(text=text, body_height=4, text_width=20)
        self.assertEqual(_feed(state, "RIGHT").text_x, 4)
        self.assertEqual(_feed(state, "l", "l", "l", "l").text_x, 11)
        self.assertEqual(_feed(state, "l", "h", "LEFT").text_x, 0)


class VisualModeTests(unittest.TestCase):
    def test_v_enters_at_center_and_j_extends_with_recentering(self) -> None:
        state = _feed(_state(body_height=4), "V")
        self.assertEqual(state.selection, VisualSelection(anchor=2, extent=2))
        state = _feed(state, "j")
        self.assertEqual(state.selection.extent, 3)
        self.assertEqual(state.viewport.offset, 1)
        state = _feed(state, "DOWN")
        self.assertEqual(state.selection.extent, 4)
        self.assertEqual(state.selection.selected_count(), 3)
        self.assertEqual(state.viewport.offset, 2)

    def test_k_extends_upward_past_anchor(self) -> None:
        state = _feed(_state(body_height=4), "G", "V", "k", "k")
        anchor = state.selection.anchor
        self.assertEqual(state.selection.extent, anchor - 2)
        self.assertEqual(state.selection.selected_count(), 3)

    def test_v_twice_and_escape_exit(self) -> None:
        self.assertIsNone(_feed(_state(), "V", "V").selection)
        outcome = apply_key(_feed(_state(), "V"), "ESC")
        self.assertTrue(outcome.handled)
        self.assertIsNone(outcome.state.selection)

    def test_reentering_visual_anchors_at_new_viewport_center(self) -> None:
        state = _feed(_state(body_height=4), "V")
        self.assertEqual(state.selection.anchor, 2)
        state = _feed(state, "V", "PAGE_DOWN", "j")
        self.assertIsNone(state.selection)
        self.assertEqual(state.viewport.offset, 3)
        state = _feed(state, "V")
        self.assertEqual(state.selection, VisualSelection(anchor=5, extent=5))
        self.assertEqual(state.selection.anchor, state.viewport.center())
        self.assertEqual(state.selection.selected_count(), 1)

    def test_escape_without_selection_is_unhandled(self) -> None:
        self.assertFalse(apply_key(_state(), "ESC").handled)

    def test_match_keys_are_ignored_while_selecting(self) -> None:
        state = _feed(_state(), "/", "v", "a", "l", "ENTER", "V")
        outcome = apply_key(state, "n")
        self.assertFalse(outcome.handled)
        self.assertIs(outcome.state, state)

    def test_page_and_hunk_keys_scroll_without_moving_selection(self) -> None:
        state = _feed(_state(body_height=4), "V")
        selection = state.selection
        moved = _feed(state, "]", "PAGE_DOWN")
        self.assertEqual(moved.selection, selection)
        self.assertGreater(moved.viewport.offset, state.viewport.offset)

    def test_search_entry_keeps_selection(self) -> None:
        state = _feed(_state(body_height=4), "V", "/", "j", "ESC")
        self.assertEqual(state.mode, NORMAL)
        self.assertEqual(state.selection, VisualSelection(anchor=2, extent=2))

    def test_visual_on_empty_document_stays_off(self) -> None:
        outcome = apply_key(_state(text=""), "V")
        self.assertTrue(outcome.handled)
        self.assertIsNone(outcome.state.selection)


if __name__ == "__main__":
    unittest.main()
