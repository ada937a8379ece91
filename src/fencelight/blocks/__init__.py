"""Fence structure scanning and code block location."""

from .locator import AliasResolver, BlockLocator, CodeBlock, parse_fence_tag
from .structure import (
    FenceMarker,
    LineStructureIndex,
    StructureIndex,
    is_closing_fence,
)

__all__ = [
    "AliasResolver",
    "BlockLocator",
    "CodeBlock",
    "FenceMarker",
    "LineStructureIndex",
    "StructureIndex",
    "is_closing_fence",
    "parse_fence_tag",
]
