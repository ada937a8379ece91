"""Tokenizer protocol, Pygments adapter and language loading."""

from .loader import LanguageLoader, LoadStatus
from .models import (
    FontStyle,
    ThemeColors,
    ThemeNotFoundError,
    Token,
    TokenizationError,
    TokenizerAdapter,
    TokenLines,
    split_lines,
)
from .pygments_adapter import PygmentsTokenizer

__all__ = [
    "FontStyle",
    "LanguageLoader",
    "LoadStatus",
    "PygmentsTokenizer",
    "ThemeColors",
    "ThemeNotFoundError",
    "Token",
    "TokenLines",
    "TokenizationError",
    "TokenizerAdapter",
    "split_lines",
]
