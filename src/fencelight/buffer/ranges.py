"""Offset ranges used for dirty regions and viewports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List

if TYPE_CHECKING:  # pragma: no cover
    from .changes import ChangeSet


@dataclass(frozen=True, slots=True)
class OffsetRange:
    """Closed interval ``[start, end]`` of document offsets."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end

    def intersects(self, start: int, end: int) -> bool:
        return start <= self.end and end >= self.start

    def clip(self, start: int, end: int) -> OffsetRange | None:
        lo = max(self.start, start)
        hi = min(self.end, end)
        if lo > hi:
            return None
        return OffsetRange(lo, hi)


def merge_ranges(ranges: Iterable[OffsetRange]) -> List[OffsetRange]:
    """Sort and coalesce overlapping or touching ranges."""

    merged: List[OffsetRange] = []
    for current in sorted(ranges, key=lambda r: (r.start, r.end)):
        if merged and current.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = OffsetRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def subtract_ranges(
    ranges: Iterable[OffsetRange], removed: Iterable[OffsetRange]
) -> List[OffsetRange]:
    """Return the parts of ``ranges`` not covered by ``removed``.

    Boundaries are treated as covered by both sides, so a range that merely
    touches a removed one loses nothing but the shared offset.
    """

    holes = merge_ranges(removed)
    result: List[OffsetRange] = []
    for current in merge_ranges(ranges):
        pieces = [current]
        for hole in holes:
            next_pieces: List[OffsetRange] = []
            for piece in pieces:
                if not piece.intersects(hole.start, hole.end):
                    next_pieces.append(piece)
                    continue
                if piece.start < hole.start:
                    next_pieces.append(OffsetRange(piece.start, hole.start - 1))
                if piece.end > hole.end:
                    next_pieces.append(OffsetRange(hole.end + 1, piece.end))
            pieces = next_pieces
        result.extend(pieces)
    return result


def map_range(span: OffsetRange, changes: "ChangeSet") -> OffsetRange:
    """Map ``span`` through ``changes``, keeping it non-inverted."""

    start = changes.map_pos(span.start, assoc=-1)
    end = changes.map_pos(span.end, assoc=1)
    return OffsetRange(start, max(start, end))


__all__ = ["OffsetRange", "merge_ranges", "subtract_ranges", "map_range"]
