"""Line-model document snapshots with offset lookups."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Sequence


@dataclass(frozen=True, slots=True)
class Line:
    """One document line; ``end`` excludes the trailing line break."""

    number: int
    start: int
    end: int
    text: str


@dataclass(slots=True)
class TextDocument:
    """Immutable text snapshot stored as a list of lines.

    Lines are split on ``"\\n"`` only, so every offset is an exact index into
    :attr:`text`. Edits produce a new document with a bumped ``version``.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0
    _starts: List[int] = field(init=False, repr=False)
    _text: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self._lines:
            self._lines = [""]
        starts = []
        running = 0
        for line in self._lines:
            starts.append(running)
            running += len(line) + 1
        self._starts = starts
        self._text = "\n".join(self._lines)

    @classmethod
    def from_text(cls, text: str, *, version: int = 0) -> "TextDocument":
        return cls(_lines=text.split("\n"), version=version)

    def snapshot(self) -> Sequence[str]:
        """Return the lines without exposing internal mutability."""

        return tuple(self._lines)

    @property
    def text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return self._starts[-1] + len(self._lines[-1])

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line(self, number: int) -> Line:
        """Return the 1-based line ``number``."""

        if number < 1 or number > len(self._lines):
            raise IndexError(f"Line {number} out of range 1..{len(self._lines)}")
        start = self._starts[number - 1]
        text = self._lines[number - 1]
        return Line(number=number, start=start, end=start + len(text), text=text)

    def line_at(self, offset: int) -> Line:
        """Return the line containing ``offset`` (clamped to the document)."""

        offset = min(max(offset, 0), self.length)
        return self.line(bisect_right(self._starts, offset))

    def slice(self, start: int, end: int) -> str:
        return self._text[start:end]


__all__ = ["Line", "TextDocument"]
