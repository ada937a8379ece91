"""Adapter boundary types describing what the engine needs from a host."""

from __future__ import annotations

from typing import Protocol, Sequence

from .document import TextDocument
from .ranges import OffsetRange


class HostView(Protocol):
    """Read-only view of the host editor consumed by the coordinator."""

    @property
    def document(self) -> TextDocument:
        """Current document snapshot (post-edit when an edit is reported)."""
        ...

    @property
    def visible_ranges(self) -> Sequence[OffsetRange]:
        """Offset ranges currently rendered by the host."""
        ...


class BufferValidationError(RuntimeError):
    """Raised when a host or buffer supplies out-of-bounds offsets."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset
