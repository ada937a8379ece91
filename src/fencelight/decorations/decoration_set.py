"""Ordered decoration container with range eviction and edit remapping."""

from __future__ import annotations

from bisect import bisect_left
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from fencelight.buffer import ChangeSet

from .models import Decoration

StartFilter = Callable[[int], bool]


class DecorationSet:
    """Decorations kept sorted by ``(start, end, style_key)``.

    The set is mutated in place; the coordinator owns the only instance.
    """

    __slots__ = ("_items", "_starts")

    def __init__(self, decorations: Iterable[Decoration] = ()) -> None:
        self._items: List[Decoration] = sorted(decorations)
        self._starts: List[int] = [item.start for item in self._items]

    def __iter__(self) -> Iterator[Decoration]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def snapshot(self) -> Tuple[Decoration, ...]:
        return tuple(self._items)

    def between(self, start: int, end: int) -> List[Decoration]:
        """Decorations whose start lies in ``[start, end)``."""

        lo = bisect_left(self._starts, start)
        hi = bisect_left(self._starts, end)
        return self._items[lo:hi]

    def _reset(self, items: List[Decoration]) -> None:
        items.sort()
        self._items = items
        self._starts = [item.start for item in items]

    def map(self, changes: ChangeSet) -> int:
        """Shift offsets through ``changes``; drop decorations the edit cuts.

        Returns the number of decorations invalidated.
        """

        if changes.empty or not self._items:
            return 0
        kept: List[Decoration] = []
        dropped = 0
        for item in self._items:
            if changes.overlaps(item.start, item.end):
                dropped += 1
                continue
            start = changes.map_pos(item.start, assoc=1)
            end = changes.map_pos(item.end, assoc=-1)
            if end <= start:
                dropped += 1
                continue
            kept.append(item.shifted(start, end))
        self._reset(kept)
        return dropped

    def update(
        self,
        *,
        filter: Optional[StartFilter] = None,
        add: Iterable[Decoration] = (),
    ) -> None:
        """Keep entries where ``filter(start)`` is true, then insert ``add``."""

        items = self._items if filter is None else [
            item for item in self._items if filter(item.start)
        ]
        self._reset([*items, *add])

    def clear(self) -> None:
        self._reset([])


__all__ = ["DecorationSet", "StartFilter"]
