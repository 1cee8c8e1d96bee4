"""Tests for diff line classification and document construction.

Covers prefix precedence, hunk indexing, per-side line numbers and the
file path read from ``+++``/``---`` headers.
"""

from __future__ import annotations

import unittest
from pathlib import PurePosixPath

from lazydiff.document import (
    DiffDocument,
    LineKind,
    build_document,
    classify,
    expand_tabs,
    parse_diff,
    sanitize_terminal_text,
    split_diff_lines,
)

SAMPLE = "\n".join(
    [
        "diff --git a/src/app.py b/src/app.py",
        "index 1111111..2222222 100644",
        "--- a/src/app.py",
        "+++ b/src/app.py",
        "@@ -10,3 +10,4 @@ def main():",
        " keep = 1",
        "-old = 2",
        "+new = 2",
        "+extra = 3",
        " tail = 4",
        "@@ -40,2 +41,2 @@",
        "-gone",
        "+here",
    ]
)


class ClassifyTests(unittest.TestCase):
    def test_file_headers_win_over_single_markers(self) -> None:
        self.assertEqual(classify("+++ b/file.py"), LineKind.HEADER)
        self.assertEqual(classify("--- a/file.py"), LineKind.HEADER)
        self.assertEqual(classify("diff --git a/x b/x"), LineKind.HEADER)
        self.assertEqual(classify("index abc..def"), LineKind.HEADER)

    def test_markers_and_fallback(self) -> None:
        self.assertEqual(classify("@@ -1 +1 @@"), LineKind.HUNK)
        self.assertEqual(classify("+added"), LineKind.ADD)
        self.assertEqual(classify("-removed"), LineKind.DEL)
        self.assertEqual(classify(" context"), LineKind.CONTEXT)
        self.assertEqual(classify(""), LineKind.CONTEXT)
        self.assertEqual(classify("plain prose"), LineKind.CONTEXT)

    def test_near_miss_prefixes_fall_through(self) -> None:
        self.assertEqual(classify("++x"), LineKind.ADD)
        self.assertEqual(classify("--x"), LineKind.DEL)
        self.assertEqual(classify("@ not a hunk"), LineKind.CONTEXT)
        self.assertEqual(classify("diff -u a b"), LineKind.CONTEXT)


class BuildDocumentTests(unittest.TestCase):
    def test_minimal_diff_kinds(self) -> None:
        doc = parse_diff("diff --git a/f b/f\n@@ -1,2 +1,2 @@\n-old\n+new\ncontext")
        self.assertEqual(
            [line.kind for line in doc.lines],
            [LineKind.HEADER, LineKind.HUNK, LineKind.DEL, LineKind.ADD, LineKind.CONTEXT],
        )
        self.assertEqual(doc.hunk_index, (1,))
        self.assertEqual([line.line_number for line in doc.lines], [1, 2, 3, 4, 5])

    def test_hunk_index_is_strictly_increasing_and_points_at_hunks(self) -> None:
        doc = parse_diff(SAMPLE)
        self.assertEqual(doc.hunk_index, (4, 10))
        for index in doc.hunk_index:
            self.assertEqual(doc.lines[index].kind, LineKind.HUNK)

    def test_trailing_newline_adds_no_line(self) -> None:
        self.assertEqual(len(parse_diff("+a\n-b\n")), 2)
        self.assertEqual(split_diff_lines(""), [])

    def test_empty_text_gives_empty_document(self) -> None:
        doc = parse_diff("")
        self.assertEqual(len(doc), 0)
        self.assertEqual(doc.hunk_index, ())
        self.assertEqual(doc.max_line_width, 0)
        self.assertIsNone(doc.file_path)

    def test_carriage_returns_are_stripped(self) -> None:
        doc = parse_diff("+a\r\n-b\r\n")
        self.assertEqual([line.text for line in doc.lines], ["+a", "-b"])

    def test_old_and_new_line_numbers_follow_hunk_header(self) -> None:
        doc = parse_diff(SAMPLE)
        by_text = {line.text: line for line in doc.lines}
        self.assertEqual((by_text[" keep = 1"].old_line_number, by_text[" keep = 1"].new_line_number), (10, 10))
        self.assertEqual(by_text["-old = 2"].old_line_number, 11)
        self.assertIsNone(by_text["-old = 2"].new_line_number)
        self.assertEqual(by_text["+new = 2"].new_line_number, 11)
        self.assertEqual(by_text["+extra = 3"].new_line_number, 12)
        self.assertEqual((by_text[" tail = 4"].old_line_number, by_text[" tail = 4"].new_line_number), (12, 13))
        self.assertEqual(by_text["-gone"].display_line_number, 40)
        self.assertEqual(by_text["+here"].display_line_number, 41)

    def test_headers_and_no_newline_marker_have_no_line_number(self) -> None:
        doc = parse_diff("@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b")
        self.assertIsNone(doc.lines[0].display_line_number)
        self.assertIsNone(doc.lines[2].display_line_number)
        self.assertEqual(doc.lines[3].display_line_number, 1)

    def test_lines_outside_hunks_are_unnumbered(self) -> None:
        doc = build_document(["+orphan", " context"])
        self.assertIsNone(doc.lines[0].display_line_number)
        self.assertIsNone(doc.lines[1].display_line_number)

    def test_file_path_prefers_new_side(self) -> None:
        self.assertEqual(parse_diff(SAMPLE).file_path, PurePosixPath("src/app.py"))

    def test_file_path_falls_back_to_old_side_for_deletions(self) -> None:
        doc = parse_diff("--- a/removed.txt\n+++ /dev/null\n@@ -1 +0,0 @@\n-bye")
        self.assertEqual(doc.file_path, PurePosixPath("removed.txt"))

    def test_document_without_file_headers_has_no_path(self) -> None:
        self.assertIsNone(DiffDocument().file_path)
        self.assertIsNone(parse_diff("@@ -1 +1 @@\n-a\n+b").file_path)


class TextShapingTests(unittest.TestCase):
    def test_expand_tabs_aligns_to_tab_stops(self) -> None:
        self.assertEqual(expand_tabs("+\tx", 4), "+   x")
        self.assertEqual(expand_tabs("ab\tc", 4), "ab  c")
        self.assertEqual(expand_tabs("no tabs", 4), "no tabs")

    def test_tabs_expand_with_configured_width(self) -> None:
        doc = parse_diff("+\tx", tab_width=8)
        self.assertEqual(doc.lines[0].text, "+       x")

    def test_carriage_return_inside_line_is_escaped(self) -> None:
        doc = parse_diff("+a\rb")
        self.assertEqual(len(doc), 1)
        self.assertEqual(doc.lines[0].text, "+a\\x0db")
        self.assertEqual(doc.lines[0].kind, LineKind.ADD)
        self.assertEqual(sanitize_terminal_text("x\ry"), "x\\x0dy")

    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x1b[2Jb"), "a\\x1b[2Jb")
        self.assertEqual(sanitize_terminal_text("bell\x07"), "bell\\x07")
        doc = parse_diff("+x\x1by")
        self.assertEqual(doc.lines[0].text, "+x\\x1by")
        self.assertEqual(doc.lines[0].kind, LineKind.ADD)


if __name__ == "__main__":
    unittest.main()
