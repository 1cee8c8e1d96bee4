"""Interactive pager loop around one ``DiffViewer``.

The loop is wiring only: poll the terminal size, render a frame, read a key,
hand it to the viewer, and quit on keys the viewer leaves unhandled.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import sys
from collections.abc import Callable, Iterator

from .config import ViewerSettings
from .input import read_key
from .render import LINE_NUMBER_GUTTER, RenderOptions, render_document, render_screen
from .terminal import TerminalController
from .viewer import DiffViewer

logger = logging.getLogger(__name__)

KEY_POLL_TIMEOUT_MS = 200
QUIT_KEYS = frozenset({"q", "Q", "ESC"})


def render_options_for(settings: ViewerSettings) -> RenderOptions:
    return RenderOptions(
        style=settings.style,
        no_color=settings.no_color,
        line_numbers=settings.line_numbers,
        show_header=settings.chrome_rows >= 2,
    )


def compose_frame(rows: list[str]) -> str:
    """Full-screen redraw payload: home cursor, rows with line clears, clear rest."""
    return "\033[H" + "\033[K\r\n".join(rows) + "\033[K\033[J"


def run_loop(
    viewer: DiffViewer,
    *,
    read_key: Callable[[], str],
    write: Callable[[str], None],
    terminal_size: Callable[[], tuple[int, int]],
    options: RenderOptions,
) -> None:
    """Run until a quit key, ``CTRL_C`` or closed input.

    ``read_key`` returns ``""`` on idle and raises ``EOFError`` when the key
    source is gone.
    """
    gutter = LINE_NUMBER_GUTTER if options.line_numbers else 0
    last_size: tuple[int, int] | None = None
    dirty = True
    while True:
        columns, rows = terminal_size()
        if (columns, rows) != last_size:
            viewer.resize(rows, max(1, columns - gutter))
            last_size = (columns, rows)
            dirty = True
        if dirty:
            write(compose_frame(render_screen(viewer.snapshot(), options)))
            dirty = False

        try:
            key = read_key()
        except EOFError:
            logger.debug("key input closed; leaving pager")
            return
        if not key:
            continue
        if key == "CTRL_C":
            return
        if viewer.handle_key(key):
            dirty = True
            continue
        if key in QUIT_KEYS:
            return
        logger.debug("unhandled key %r", key)


@contextlib.contextmanager
def _key_input_fd() -> Iterator[int]:
    """Yield a tty fd for keys; stdin may be carrying the diff itself."""
    if sys.stdin.isatty():
        yield sys.stdin.fileno()
        return
    fd = os.open("/dev/tty", os.O_RDONLY)
    try:
        yield fd
    finally:
        os.close(fd)


def print_document(text: str, settings: ViewerSettings, width: int) -> str:
    """Render the whole document without paging."""
    options = render_options_for(settings)
    gutter = LINE_NUMBER_GUTTER if options.line_numbers else 0
    viewer = DiffViewer(text, tab_width=settings.tab_width, chrome_rows=0)
    viewer.resize(len(viewer.document), max(1, width - gutter))
    return render_document(viewer.snapshot(), options)


def run_pager(text: str, settings: ViewerSettings, nopager: bool = False) -> None:
    """Page ``text`` interactively, or print it when output is not a terminal."""
    if nopager or not sys.stdout.isatty():
        width = shutil.get_terminal_size((80, 24)).columns
        sys.stdout.write(print_document(text, settings, width))
        return

    viewer = DiffViewer(text, chrome_rows=settings.chrome_rows, tab_width=settings.tab_width)
    options = render_options_for(settings)

    def terminal_size() -> tuple[int, int]:
        size = shutil.get_terminal_size((80, 24))
        return size.columns, size.lines

    with _key_input_fd() as key_fd:
        terminal = TerminalController(key_fd, sys.stdout.fileno())
        with terminal.raw_mode():
            run_loop(
                viewer,
                read_key=lambda: read_key(key_fd, timeout_ms=KEY_POLL_TIMEOUT_MS),
                write=terminal.write,
                terminal_size=terminal_size,
                options=options,
            )
