"""Textual host adapter for the highlight engine."""

from .controller import (
    TextualHighlightAdapter,
    TextualHighlightHooks,
    block_style,
    style_from_key,
)

__all__ = [
    "TextualHighlightAdapter",
    "TextualHighlightHooks",
    "block_style",
    "style_from_key",
]
