"""Public package surface for lazydiff.

Exports the diff viewer engine and ``main`` for programmatic CLI invocation.
Most implementation lives in submodules under ``lazydiff``.
"""

from __future__ import annotations

from .document import DiffDocument, DiffLine, LineKind, classify, parse_diff
from .viewer import DiffViewer, ViewerSnapshot, VisibleLine
from .word_diff import WordDiffSegment


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "DiffDocument",
    "DiffLine",
    "DiffViewer",
    "LineKind",
    "ViewerSnapshot",
    "VisibleLine",
    "WordDiffSegment",
    "classify",
    "main",
    "parse_diff",
]
