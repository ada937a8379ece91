"""Decoration records, the decoration set and the block renderer."""

from .decoration_set import DecorationSet, StartFilter
from .engine import DecorationEngine
from .models import Decoration, style_key, token_style_key

__all__ = [
    "Decoration",
    "DecorationEngine",
    "DecorationSet",
    "StartFilter",
    "style_key",
    "token_style_key",
]
