"""Edit deltas expressed in pre-edit (``a``) and post-edit (``b``) offsets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple


@dataclass(frozen=True, slots=True)
class ChangeSpan:
    """Replacement of ``[from_a, to_a)`` by ``inserted`` landing at ``[from_b, to_b)``."""

    from_a: int
    to_a: int
    from_b: int
    to_b: int
    deleted: str = ""
    inserted: str = ""

    @property
    def delta(self) -> int:
        return (self.to_b - self.from_b) - (self.to_a - self.from_a)


class ChangeSet:
    """Ordered, non-overlapping list of :class:`ChangeSpan` for one edit."""

    __slots__ = ("_spans",)

    def __init__(self, spans: Iterable[ChangeSpan] = ()) -> None:
        ordered = tuple(sorted(spans, key=lambda s: s.from_a))
        for prev, nxt in zip(ordered, ordered[1:]):
            if nxt.from_a < prev.to_a:
                raise ValueError("ChangeSet spans must not overlap")
        self._spans = ordered

    @classmethod
    def single(
        cls, start: int, end: int, inserted: str, *, deleted: str = ""
    ) -> "ChangeSet":
        span = ChangeSpan(
            from_a=start,
            to_a=end,
            from_b=start,
            to_b=start + len(inserted),
            deleted=deleted,
            inserted=inserted,
        )
        return cls((span,))

    @classmethod
    def from_replacements(
        cls, replacements: Iterable[Tuple[int, int, str, str]]
    ) -> "ChangeSet":
        """Build from ``(start, end, deleted, inserted)`` in pre-edit offsets."""

        spans = []
        shift = 0
        for start, end, deleted, inserted in sorted(replacements):
            from_b = start + shift
            spans.append(
                ChangeSpan(start, end, from_b, from_b + len(inserted), deleted, inserted)
            )
            shift += len(inserted) - (end - start)
        return cls(spans)

    @property
    def spans(self) -> Tuple[ChangeSpan, ...]:
        return self._spans

    @property
    def empty(self) -> bool:
        return not self._spans

    def __iter__(self) -> Iterator[ChangeSpan]:
        return iter(self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    def map_pos(self, pos: int, assoc: int = 1) -> int:
        """Map a pre-edit offset to its post-edit position.

        Offsets inside a replaced span collapse to its start (``assoc < 0``)
        or to the end of the inserted text (``assoc >= 0``).
        """

        shift = 0
        for span in self._spans:
            if pos < span.from_a:
                break
            if pos > span.to_a:
                shift += span.delta
                continue
            if pos == span.to_a and span.to_a > span.from_a:
                return span.to_b
            return span.from_b if assoc < 0 else span.to_b
        return pos + shift

    def overlaps(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` (pre-edit) is cut by a change.

        A pure insertion counts when it lands strictly inside the range.
        """

        for span in self._spans:
            if span.from_a == span.to_a:
                if start < span.from_a < end:
                    return True
            elif start < span.to_a and end > span.from_a:
                return True
        return False


__all__ = ["ChangeSpan", "ChangeSet"]
