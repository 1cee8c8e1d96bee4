"""Vertical scroll window over a diff document.

Every operation returns a new ``Viewport`` whose offset is clamped to
``[0, max_offset]``; clamping an already-clamped viewport is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Viewport:
    offset: int = 0
    body_height: int = 0
    total_lines: int = 0

    @property
    def max_offset(self) -> int:
        return max(0, self.total_lines - max(0, self.body_height))

    def clamped(self) -> Viewport:
        body_height = max(0, self.body_height)
        total_lines = max(0, self.total_lines)
        max_offset = max(0, total_lines - body_height)
        offset = max(0, min(self.offset, max_offset))
        if (offset, body_height, total_lines) == (self.offset, self.body_height, self.total_lines):
            return self
        return Viewport(offset=offset, body_height=body_height, total_lines=total_lines)

    def _with_offset(self, offset: int) -> Viewport:
        return Viewport(offset=offset, body_height=self.body_height, total_lines=self.total_lines).clamped()

    def line_up(self) -> Viewport:
        return self._with_offset(self.offset - 1)

    def line_down(self) -> Viewport:
        return self._with_offset(self.offset + 1)

    def page_up(self) -> Viewport:
        return self._with_offset(self.offset - max(0, self.body_height) // 2)

    def page_down(self) -> Viewport:
        return self._with_offset(self.offset + max(0, self.body_height) // 2)

    def goto_top(self) -> Viewport:
        return self._with_offset(0)

    def goto_bottom(self) -> Viewport:
        return self._with_offset(self.max_offset)

    def jump_to(self, line_index: int) -> Viewport:
        """Scroll so ``line_index`` becomes the first row, as far as bounds allow."""
        return self._with_offset(line_index)

    def resize(self, body_height: int, total_lines: int) -> Viewport:
        """Apply new dimensions from the host and re-clamp the offset."""
        return Viewport(offset=self.offset, body_height=body_height, total_lines=total_lines).clamped()

    def visible_range(self) -> tuple[int, int]:
        """Return half-open ``(start, end)`` document indices shown on screen."""
        end = min(self.total_lines, self.offset + max(0, self.body_height))
        return self.offset, max(self.offset, end)

    def center(self) -> int:
        return self.offset + max(0, self.body_height) // 2
