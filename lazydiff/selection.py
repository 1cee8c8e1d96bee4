"""Visual (line-range) selection over document line indices.

The anchor is fixed when the selection starts; only the extent moves. An
inactive selection is represented by ``None`` at the owner.
"""

from __future__ import annotations

from dataclasses import dataclass

from .viewport import Viewport


def _clamp_line(line_index: int, total_lines: int) -> int:
    return max(0, min(line_index, total_lines - 1))


@dataclass(frozen=True)
class VisualSelection:
    anchor: int
    extent: int

    @classmethod
    def enter(cls, viewport: Viewport) -> VisualSelection | None:
        """Start a selection at the vertical center of ``viewport``.

        Returns ``None`` for an empty document.
        """
        if viewport.total_lines <= 0:
            return None
        line = _clamp_line(viewport.center(), viewport.total_lines)
        return cls(anchor=line, extent=line)

    def extend_up(self, total_lines: int) -> VisualSelection:
        return VisualSelection(self.anchor, _clamp_line(self.extent - 1, total_lines))

    def extend_down(self, total_lines: int) -> VisualSelection:
        return VisualSelection(self.anchor, _clamp_line(self.extent + 1, total_lines))

    def selected_range(self) -> tuple[int, int]:
        """Inclusive ``(first, last)`` selected line indices."""
        return min(self.anchor, self.extent), max(self.anchor, self.extent)

    def selected_count(self) -> int:
        return abs(self.extent - self.anchor) + 1

    def contains(self, line_index: int) -> bool:
        first, last = self.selected_range()
        return first <= line_index <= last

    def status_text(self) -> str:
        return f"{self.selected_count()} lines selected"
