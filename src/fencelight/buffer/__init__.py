"""Document snapshots, edit deltas and the host-side buffer."""

from .buffer import Buffer, BufferDelta, Transaction, Viewport
from .changes import ChangeSet, ChangeSpan
from .document import Line, TextDocument
from .ranges import OffsetRange, map_range, merge_ranges, subtract_ranges
from .sync import BufferValidationError, HostView
from .validation import ensure_offset, ensure_span

__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferValidationError",
    "ChangeSet",
    "ChangeSpan",
    "HostView",
    "Line",
    "OffsetRange",
    "TextDocument",
    "Transaction",
    "Viewport",
    "ensure_offset",
    "ensure_span",
    "map_range",
    "merge_ranges",
    "subtract_ranges",
]
