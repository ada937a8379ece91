"""Token types and the tokenizer protocol consumed by the engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import List, Mapping, Optional, Protocol, Sequence, Tuple


class FontStyle(IntFlag):
    NONE = 0
    ITALIC = 1
    BOLD = 2
    UNDERLINE = 4


@dataclass(frozen=True, slots=True)
class Token:
    text: str
    color: str
    style_flags: FontStyle = FontStyle.NONE


@dataclass(frozen=True, slots=True)
class ThemeColors:
    foreground: str
    background: str


TokenLines = List[List[Token]]


class ThemeNotFoundError(LookupError):
    """Raised when a theme id cannot be resolved by the tokenizer."""

    def __init__(self, theme_id: str) -> None:
        super().__init__(f"Unknown theme '{theme_id}'")
        self.theme_id = theme_id


class TokenizationError(RuntimeError):
    """Raised by adapters when a loaded language fails to tokenize."""

    def __init__(self, language_id: str, reason: str) -> None:
        super().__init__(f"Failed to tokenize '{language_id}': {reason}")
        self.language_id = language_id


class TokenizerAdapter(Protocol):
    """Grammar/tokenizer engine as seen by the highlighter."""

    def known_languages(self) -> Mapping[str, Tuple[str, ...]]:
        """Canonical language ids mapped to their accepted aliases."""
        ...

    def resolve_language(self, language_id: str) -> Optional[str]:
        """Return the canonical id for ``language_id`` or ``None``."""
        ...

    def is_language_loaded(self, language_id: str) -> bool: ...

    async def load_language(self, language_id: str) -> None:
        """Load a grammar; raising signals failure."""
        ...

    def tokenize(self, code: str, language_id: str, theme_id: str) -> TokenLines:
        """Return one token list per line of ``code``."""
        ...

    def load_theme(self, theme_id: str) -> ThemeColors:
        """Make ``theme_id`` available; raises :class:`ThemeNotFoundError`."""
        ...

    def theme_colors(self, theme_id: str) -> Optional[ThemeColors]: ...


def split_lines(pieces: Sequence[Tuple[str, str, FontStyle]]) -> TokenLines:
    """Group ``(text, color, flags)`` runs into per-line :class:`Token` lists.

    Newlines are consumed as line separators, never emitted as tokens.
    """

    lines: TokenLines = [[]]
    for text, color, flags in pieces:
        parts = text.split("\n")
        for index, part in enumerate(parts):
            if index:
                lines.append([])
            if part:
                lines[-1].append(Token(part, color, flags))
    return lines


__all__ = [
    "FontStyle",
    "ThemeColors",
    "ThemeNotFoundError",
    "Token",
    "TokenLines",
    "TokenizationError",
    "TokenizerAdapter",
    "split_lines",
]
