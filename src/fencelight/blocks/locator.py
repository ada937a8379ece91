"""Locate fenced code blocks intersecting a set of offset ranges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Set

from fencelight.buffer import OffsetRange, TextDocument
from fencelight.config import PLAIN_LANGUAGE

from .structure import (
    OPEN_FENCE,
    FenceMarker,
    LineStructureIndex,
    StructureIndex,
    is_closing_fence,
)

AliasResolver = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced block; ``start_offset`` is the opening fence line start."""

    start_offset: int
    content_start: int
    content_end: int
    language: str

    @property
    def extent(self) -> OffsetRange:
        return OffsetRange(self.start_offset, self.content_end)


def parse_fence_tag(text: str) -> str:
    match = OPEN_FENCE.match(text)
    return match.group(1) if match and match.group(1) else PLAIN_LANGUAGE


class BlockLocator:
    """Turns structural fence markers into :class:`CodeBlock` records.

    ``resolve_alias`` is looked up at scan time, so alias changes apply to
    the next scan only.
    """

    def __init__(self, resolve_alias: Optional[AliasResolver] = None) -> None:
        self.resolve_alias: AliasResolver = resolve_alias or (lambda tag: tag)

    def locate(
        self,
        document: TextDocument,
        ranges: Iterable[OffsetRange],
        index: Optional[StructureIndex] = None,
    ) -> List[CodeBlock]:
        index = index or LineStructureIndex(document)
        seen: Set[int] = set()
        blocks: List[CodeBlock] = []

        for span in ranges:
            openers: List[FenceMarker] = []
            enclosing = index.enclosing_opener(span.start)
            if enclosing is not None:
                openers.append(enclosing)
            openers.extend(
                marker
                for marker in index.markers(span.start, span.end)
                if marker.kind == "begin"
            )

            for marker in openers:
                line = document.line_at(marker.offset)
                if line.start in seen:
                    continue
                seen.add(line.start)
                block = self._read_block(document, line.number)
                if block is not None:
                    blocks.append(block)
        return blocks

    def _read_block(self, document: TextDocument, opener_number: int) -> Optional[CodeBlock]:
        opener = document.line(opener_number)
        tag = parse_fence_tag(opener.text)
        language = self.resolve_alias(tag) or PLAIN_LANGUAGE

        content_start = opener.end + 1
        if content_start >= document.length:
            return None

        content_end = document.length
        for number in range(opener_number + 1, document.line_count + 1):
            line = document.line(number)
            if is_closing_fence(line.text):
                content_end = line.start
                break

        if content_start >= content_end:
            return None
        return CodeBlock(
            start_offset=opener.start,
            content_start=content_start,
            content_end=content_end,
            language=language,
        )


__all__ = ["AliasResolver", "BlockLocator", "CodeBlock", "parse_fence_tag"]
