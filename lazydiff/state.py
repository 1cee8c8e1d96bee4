from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

from .document import DiffDocument
from .search import SearchState
from .selection import VisualSelection
from .viewport import Viewport
from .word_diff import WordDiffSegment


@dataclass(frozen=True)
class NormalMode:
    pass


@dataclass(frozen=True)
class SearchEntryMode:
    draft_query: str = ""


Mode = Union[NormalMode, SearchEntryMode]

NORMAL = NormalMode()


@dataclass(frozen=True)
class ViewerState:
    document: DiffDocument = field(default_factory=DiffDocument)
    viewport: Viewport = field(default_factory=Viewport)
    search: SearchState = field(default_factory=SearchState)
    selection: VisualSelection | None = None
    mode: Mode = NORMAL
    text_x: int = 0
    text_width: int = 80
    active: bool = True
    word_diffs: Mapping[int, tuple[WordDiffSegment, ...]] = field(default_factory=dict)

    @property
    def visual_active(self) -> bool:
        return self.selection is not None

    @property
    def in_search_entry(self) -> bool:
        return isinstance(self.mode, SearchEntryMode)

    @property
    def max_text_x(self) -> int:
        return max(0, self.document.max_line_width - max(1, self.text_width))
