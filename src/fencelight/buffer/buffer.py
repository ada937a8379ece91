"""Editable buffer façade that plays the host role for the engine."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Iterable, List, Optional, Sequence, Tuple

from fencelight.runtime import telemetry

from .changes import ChangeSet
from .document import TextDocument
from .ranges import OffsetRange
from .validation import ensure_span


@dataclass(slots=True)
class BufferDelta:
    version: int
    changes: ChangeSet
    label: str


@dataclass(slots=True)
class Viewport:
    """Window of ``height`` lines starting at 1-based ``first_line``."""

    first_line: int = 1
    height: Optional[int] = None


class Buffer:
    """Holds the current :class:`TextDocument` and a line-window viewport.

    Satisfies :class:`~fencelight.buffer.sync.HostView`.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[TextDocument] = None,
        viewport: Optional[Viewport] = None,
    ) -> None:
        self.name = name
        self.document = document or TextDocument()
        self.viewport = viewport or Viewport()

    @classmethod
    def from_text(
        cls, text: str, *, name: str = "default", height: Optional[int] = None
    ) -> "Buffer":
        return cls(
            name=name,
            document=TextDocument.from_text(text),
            viewport=Viewport(height=height),
        )

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def visible_ranges(self) -> Sequence[OffsetRange]:
        doc = self.document
        first = min(max(self.viewport.first_line, 1), doc.line_count)
        if self.viewport.height is None:
            last = doc.line_count
        else:
            last = min(first + max(self.viewport.height, 1) - 1, doc.line_count)
        return (OffsetRange(doc.line(first).start, doc.line(last).end),)

    def set_viewport(self, first_line: int, height: Optional[int] = None) -> None:
        line_count = self.document.line_count
        self.viewport = Viewport(
            first_line=min(max(first_line, 1), line_count),
            height=height if height is not None else self.viewport.height,
        )

    def scroll_by(self, lines: int) -> None:
        self.set_viewport(self.viewport.first_line + lines)

    def replace_range(self, start: int, end: int, text: str, *, label: str) -> BufferDelta:
        return self.apply_edits(((start, end, text),), label=label)

    def apply_edits(
        self, edits: Iterable[Tuple[int, int, str]], *, label: str
    ) -> BufferDelta:
        """Apply non-overlapping ``(start, end, text)`` edits in pre-edit offsets."""

        with Transaction(self, label) as tx:
            before = self.document
            replacements: List[Tuple[int, int, str, str]] = []
            for start, end, text in edits:
                start, end = ensure_span(before, start, end)
                replacements.append((start, end, before.slice(start, end), text))
            changes = ChangeSet.from_replacements(replacements)

            source = before.text
            pieces: List[str] = []
            cursor = 0
            for span in changes:
                pieces.append(source[cursor : span.from_a])
                pieces.append(span.inserted)
                cursor = span.to_a
            pieces.append(source[cursor:])
            self.document = TextDocument.from_text(
                "".join(pieces), version=before.version + 1
            )
            tx.commit(changes)

        return BufferDelta(version=self.document.version, changes=changes, label=label)

    def insert_text(self, offset: int, text: str) -> BufferDelta:
        return self.replace_range(offset, offset, text, label="insert_text")

    def delete_range(self, start: int, end: int) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete_range")


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self.changes: Optional[ChangeSet] = None
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def commit(self, changes: ChangeSet) -> None:
        self.changes = changes
        if self._handle is not None:
            self._handle.add_metadata("spans", len(changes))
            self._handle.add_metadata("version", self.buffer.document.version)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False
