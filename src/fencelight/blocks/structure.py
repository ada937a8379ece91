"""Structural fence markers for a document.

The locator only needs to know where code fences open and close. Hosts with
a live syntax tree can supply their own :class:`StructureIndex`; the default
:class:`LineStructureIndex` derives the same markers from line text.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Literal, Optional, Protocol

from fencelight.buffer import TextDocument

OPEN_FENCE = re.compile(r"^`{3,}(\S*)")
FENCE = "```"

MarkerKind = Literal["begin", "end"]


def is_closing_fence(text: str) -> bool:
    return text.strip().startswith(FENCE)


@dataclass(frozen=True, slots=True)
class FenceMarker:
    """A fence line; ``offset``/``line_end`` bound the line text."""

    kind: MarkerKind
    line_number: int
    offset: int
    line_end: int


class StructureIndex(Protocol):
    def markers(self, start: int, end: int) -> Iterator[FenceMarker]:
        """Yield fence markers whose line intersects ``[start, end]``."""
        ...

    def enclosing_opener(self, offset: int) -> Optional[FenceMarker]:
        """Return the opening marker of the block spanning ``offset``."""
        ...


class LineStructureIndex:
    """Fence structure computed once per document snapshot."""

    def __init__(self, document: TextDocument) -> None:
        self.version = document.version
        self._length = document.length
        self._markers: List[FenceMarker] = []
        self._blocks: List[tuple[FenceMarker, Optional[FenceMarker]]] = []

        opener: Optional[FenceMarker] = None
        for number, text in enumerate(document.snapshot(), start=1):
            if opener is None and OPEN_FENCE.match(text):
                line = document.line(number)
                opener = FenceMarker("begin", number, line.start, line.end)
                self._markers.append(opener)
            elif opener is not None and is_closing_fence(text):
                line = document.line(number)
                closer = FenceMarker("end", number, line.start, line.end)
                self._markers.append(closer)
                self._blocks.append((opener, closer))
                opener = None
        if opener is not None:
            self._blocks.append((opener, None))

        self._marker_offsets = [marker.offset for marker in self._markers]
        self._block_offsets = [begin.offset for begin, _ in self._blocks]

    @property
    def block_count(self) -> int:
        return len(self._blocks)

    def markers(self, start: int, end: int) -> Iterator[FenceMarker]:
        lower = max(bisect_right(self._marker_offsets, start) - 1, 0)
        upper = bisect_right(self._marker_offsets, end)
        for marker in self._markers[lower:upper]:
            if marker.line_end >= start:
                yield marker

    def enclosing_opener(self, offset: int) -> Optional[FenceMarker]:
        index = bisect_right(self._block_offsets, offset) - 1
        if index < 0:
            return None
        begin, end = self._blocks[index]
        limit = end.line_end if end is not None else self._length
        return begin if offset <= limit else None


__all__ = [
    "FENCE",
    "OPEN_FENCE",
    "FenceMarker",
    "LineStructureIndex",
    "StructureIndex",
    "is_closing_fence",
]
