"""Tokenizer adapter backed by Pygments lexers (grammars) and styles (themes)."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pygments.lexer import Lexer
from pygments.lexers import get_all_lexers, get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.token import Token as PygmentsToken
from pygments.util import ClassNotFound

from fencelight.runtime.telemetry import record_event

from .models import (
    FontStyle,
    ThemeColors,
    ThemeNotFoundError,
    TokenizationError,
    TokenLines,
    split_lines,
)

FALLBACK_FOREGROUND = "inherit"


def _hex(value: str | None) -> str | None:
    return f"#{value}" if value else None


def restore_carriage_returns(
    code: str, pieces: List[Tuple[str, str, FontStyle]]
) -> List[Tuple[str, str, FontStyle]]:
    """Put back the ``"\\r"`` characters Pygments folds into ``"\\n"``.

    Lexers see ``"\\r\\n"`` and a lone ``"\\r"`` as a plain ``"\\n"``; walking the
    original code next to the token values recovers the exact source text.
    """

    if "\r" not in code:
        return pieces
    restored: List[Tuple[str, str, FontStyle]] = []
    position = 0
    for text, color, flags in pieces:
        chars: List[str] = []
        for char in text:
            if char == "\n" and code.startswith("\r\n", position):
                chars.append("\r\n")
                position += 2
            elif char == "\n" and code.startswith("\r", position):
                chars.append("\r")
                position += 1
            else:
                chars.append(char)
                position += 1
        restored.append(("".join(chars), color, flags))
    return restored


class PygmentsTokenizer:
    """Implements :class:`~fencelight.tokenizer.models.TokenizerAdapter`.

    Lexers are created with newline stripping disabled so token text maps
    one-to-one onto the source characters.
    """

    def __init__(
        self,
        *,
        preload: Iterable[str] = (),
        themes: Iterable[str] = (),
        logger_name: str | None = None,
    ) -> None:
        self._logger_name = logger_name
        self._catalog: Optional[Dict[str, Tuple[str, ...]]] = None
        self._aliases: Dict[str, str] = {}
        self._lexers: Dict[str, Lexer] = {}
        self._styles: Dict[str, Any] = {}
        self._style_cache: Dict[Tuple[str, Any], Tuple[str, FontStyle]] = {}
        for theme_id in themes:
            self.load_theme(theme_id)
        for language_id in preload:
            self.preload(language_id)

    # -- language catalog -------------------------------------------------

    def _ensure_catalog(self) -> Dict[str, Tuple[str, ...]]:
        if self._catalog is None:
            catalog: Dict[str, Tuple[str, ...]] = {}
            for name, aliases, _filenames, _mimetypes in get_all_lexers(plugins=False):
                if not aliases:
                    continue
                canonical = aliases[0]
                catalog[canonical] = tuple(aliases)
                self._aliases.setdefault(name.lower(), canonical)
                for alias in aliases:
                    self._aliases.setdefault(alias.lower(), canonical)
            self._catalog = catalog
        return self._catalog

    def known_languages(self) -> Mapping[str, Tuple[str, ...]]:
        return dict(self._ensure_catalog())

    def resolve_language(self, language_id: str) -> Optional[str]:
        self._ensure_catalog()
        return self._aliases.get(language_id.strip().lower())

    def is_language_loaded(self, language_id: str) -> bool:
        canonical = self.resolve_language(language_id)
        return canonical is not None and canonical in self._lexers

    @property
    def loaded_languages(self) -> Tuple[str, ...]:
        return tuple(sorted(self._lexers))

    def _create_lexer(self, canonical: str) -> Lexer:
        return get_lexer_by_name(canonical, stripnl=False, ensurenl=False)

    def preload(self, language_id: str) -> str:
        """Load a language synchronously (startup path for sync hosts)."""

        canonical = self.resolve_language(language_id)
        if canonical is None:
            raise LookupError(f"Unknown language '{language_id}'")
        if canonical not in self._lexers:
            self._lexers[canonical] = self._create_lexer(canonical)
        return canonical

    async def load_language(self, language_id: str) -> None:
        canonical = self.resolve_language(language_id)
        if canonical is None:
            raise LookupError(f"Unknown language '{language_id}'")
        if canonical in self._lexers:
            return
        lexer = await asyncio.to_thread(self._create_lexer, canonical)
        self._lexers[canonical] = lexer

    # -- themes -----------------------------------------------------------

    def load_theme(self, theme_id: str) -> ThemeColors:
        style = self._styles.get(theme_id)
        if style is None:
            try:
                style = get_style_by_name(theme_id)
            except ClassNotFound as exc:
                raise ThemeNotFoundError(theme_id) from exc
            self._styles[theme_id] = style
            record_event(
                "theme.loaded",
                level="debug",
                data={"theme": theme_id},
                logger_name=self._logger_name,
            )
        return self._colors(style)

    def theme_colors(self, theme_id: str) -> Optional[ThemeColors]:
        try:
            return self.load_theme(theme_id)
        except ThemeNotFoundError:
            return None

    @staticmethod
    def _colors(style: Any) -> ThemeColors:
        foreground = (
            _hex(style.style_for_token(PygmentsToken.Text)["color"])
            or _hex(style.style_for_token(PygmentsToken)["color"])
            or FALLBACK_FOREGROUND
        )
        return ThemeColors(
            foreground=foreground,
            background=style.background_color or "transparent",
        )

    def _token_style(self, theme_id: str, ttype: Any) -> Tuple[str, FontStyle]:
        key = (theme_id, ttype)
        cached = self._style_cache.get(key)
        if cached is not None:
            return cached

        style = self._styles[theme_id]
        entry = style.style_for_token(ttype)
        flags = FontStyle.NONE
        if entry.get("italic"):
            flags |= FontStyle.ITALIC
        if entry.get("bold"):
            flags |= FontStyle.BOLD
        if entry.get("underline"):
            flags |= FontStyle.UNDERLINE
        color = _hex(entry.get("color")) or self._colors(style).foreground
        self._style_cache[key] = (color, flags)
        return color, flags

    # -- tokenization -----------------------------------------------------

    def tokenize(self, code: str, language_id: str, theme_id: str) -> TokenLines:
        canonical = self.resolve_language(language_id)
        lexer = self._lexers.get(canonical) if canonical else None
        if lexer is None:
            raise TokenizationError(language_id, "language not loaded")
        self.load_theme(theme_id)

        pieces: List[Tuple[str, str, FontStyle]] = []
        try:
            for ttype, value in lexer.get_tokens(code):
                color, flags = self._token_style(theme_id, ttype)
                pieces.append((value, color, flags))
        except Exception as exc:
            raise TokenizationError(language_id, str(exc)) from exc
        return split_lines(restore_carriage_returns(code, pieces))


__all__ = ["FALLBACK_FOREGROUND", "PygmentsTokenizer", "restore_carriage_returns"]
