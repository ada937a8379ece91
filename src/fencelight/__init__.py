"""Incremental highlight decorations for fenced code blocks."""

__all__ = [
    "adapters",
    "blocks",
    "buffer",
    "config",
    "coordinator",
    "decorations",
    "runtime",
    "tokenizer",
]

__version__ = "0.1.0"
