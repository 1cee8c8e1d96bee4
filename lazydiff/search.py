"""In-document text search with cyclic match traversal.

Matching is a case-insensitive literal scan; every non-overlapping hit on
every line is recorded, so the match list is ordered by
``(line_index, char_offset)``. The scan is redone from scratch whenever the
query or the document changes.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from .document import DiffLine


@dataclass(frozen=True)
class SearchMatch:
    line_index: int
    char_offset: int
    length: int


def find_matches(lines: Sequence[DiffLine], query: str) -> tuple[SearchMatch, ...]:
    """Scan all line texts for ``query`` left to right."""
    if not query:
        return ()
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    matches: list[SearchMatch] = []
    for line_index, line in enumerate(lines):
        for found in pattern.finditer(line.text):
            matches.append(
                SearchMatch(
                    line_index=line_index,
                    char_offset=found.start(),
                    length=found.end() - found.start(),
                )
            )
    return tuple(matches)


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    matches: tuple[SearchMatch, ...] = ()
    current: int = 0

    @classmethod
    def build(cls, lines: Sequence[DiffLine], query: str) -> SearchState:
        if not query:
            return cls()
        return cls(query=query, matches=find_matches(lines, query), current=0)

    @property
    def has_matches(self) -> bool:
        return bool(self.matches)

    @property
    def current_match(self) -> SearchMatch | None:
        if not self.matches:
            return None
        return self.matches[self.current]

    def next_match(self) -> SearchState:
        if not self.matches:
            return self
        return SearchState(self.query, self.matches, (self.current + 1) % len(self.matches))

    def prev_match(self) -> SearchState:
        if not self.matches:
            return self
        return SearchState(self.query, self.matches, (self.current - 1) % len(self.matches))

    def matches_on_line(self, line_index: int) -> list[SearchMatch]:
        return [match for match in self.matches if match.line_index == line_index]

    def status_text(self) -> str:
        if not self.matches:
            return ""
        return f"{self.current + 1}/{len(self.matches)}"
