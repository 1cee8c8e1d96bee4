"""Command-line front door for lazydiff.

Parses CLI options, loads diff text from a file or stdin, and merges flags
over the stored preferences. Then dispatches into the interactive pager.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from dataclasses import replace
from pathlib import Path

from .config import ViewerSettings, load_settings
from .render import LINE_NUMBER_GUTTER, render_screen
from .runtime import render_options_for, run_pager
from .viewer import DiffViewer


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def read_stdin_text() -> str:
    return sys.stdin.buffer.read().decode("utf-8", errors="replace")


def render_first_screen(text: str, settings: ViewerSettings, columns: int, rows: int, query: str | None) -> str:
    """Render one pager frame for ``text`` as plain newline-separated rows."""
    options = render_options_for(settings)
    gutter = LINE_NUMBER_GUTTER if options.line_numbers else 0
    viewer = DiffViewer(
        text,
        total_rows=rows,
        width=max(1, columns - gutter),
        chrome_rows=settings.chrome_rows,
        tab_width=settings.tab_width,
    )
    if query:
        viewer.handle_key("/")
        for ch in query:
            viewer.handle_key(ch)
        viewer.handle_key("ENTER")
    return "\n".join(render_screen(viewer.snapshot(), options)) + "\n"


def _configure_logging(log_file: str | None) -> None:
    if log_file is None:
        logging.getLogger("lazydiff").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and page a unified diff.

    ``PATH`` may be ``-`` (or omitted with piped input) to read from stdin.
    """
    parser = argparse.ArgumentParser(description="Page a unified diff with search, hunk jumps and visual selection.")
    parser.add_argument("path", nargs="?", default=None, help="Diff file, or '-' for stdin.")
    parser.add_argument("--style", default=None, help="Pygments style name.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--line-numbers", action="store_true", help="Show a line-number gutter.")
    parser.add_argument("--tab-width", type=_positive_int, default=None, help="Tab stop width.")
    parser.add_argument("--nopager", action="store_true", help="Print output directly without interactive paging.")
    parser.add_argument("--render", action="store_true", help="Render the first screen and exit.")
    parser.add_argument("--search", metavar="QUERY", default=None, help="Search query applied before --render.")
    parser.add_argument("--max-cols", type=_positive_int, default=None, help="Columns for --render output.")
    parser.add_argument("--rows", type=_positive_int, default=None, help="Rows for --render output.")
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file.")
    args = parser.parse_args(argv)

    _configure_logging(args.log_file)

    settings = load_settings()
    if args.style is not None:
        settings = replace(settings, style=args.style)
    if args.no_color:
        settings = replace(settings, no_color=True)
    if args.line_numbers:
        settings = replace(settings, line_numbers=True)
    if args.tab_width is not None:
        settings = replace(settings, tab_width=args.tab_width)

    if args.path in (None, "-"):
        if args.path is None and sys.stdin.isatty():
            raise SystemExit("No diff given: pass a file path or pipe a diff on stdin.")
        text = read_stdin_text()
    else:
        path = Path(args.path)
        if not path.is_file():
            raise SystemExit(f"Path not found: {path}")
        text = read_text(path)

    if args.render:
        term = shutil.get_terminal_size((80, 24))
        columns = args.max_cols if args.max_cols is not None else term.columns
        rows = args.rows if args.rows is not None else term.lines
        sys.stdout.write(render_first_screen(text, settings, columns, rows, args.search))
        return

    run_pager(text, settings, args.nopager)


if __name__ == "__main__":
    main()
