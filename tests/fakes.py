from __future__ import annotations

import asyncio
import re
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from fencelight.tokenizer import (
    FontStyle,
    ThemeColors,
    ThemeNotFoundError,
    Token,
    TokenizationError,
    TokenLines,
)

THEMES: Dict[str, ThemeColors] = {
    "A": ThemeColors(foreground="#aaaaaa", background="#000000"),
    "B": ThemeColors(foreground="#bbbbbb", background="#111111"),
}
KEYWORDS = {"const", "let", "def", "return"}
_RUN = re.compile(r"\s+|\S+")


class FakeTokenizer:
    """Word/space tokenizer whose colors depend on the theme."""

    def __init__(
        self,
        *,
        loaded: Iterable[str] = ("javascript", "python", "text"),
        fail_loads: Iterable[str] = (),
        fail_tokenize: Iterable[str] = (),
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.catalog: Dict[str, Tuple[str, ...]] = {
            "javascript": ("js",),
            "python": ("py",),
            "text": ("plain",),
        }
        self.loaded: Set[str] = set(loaded)
        self.fail_loads = set(fail_loads)
        self.fail_tokenize = set(fail_tokenize)
        self.gate = gate
        self.load_calls: List[str] = []
        self.tokenize_calls: List[str] = []

    def known_languages(self) -> Mapping[str, Tuple[str, ...]]:
        return dict(self.catalog)

    def resolve_language(self, language_id: str) -> Optional[str]:
        if language_id in self.catalog:
            return language_id
        for canonical, aliases in self.catalog.items():
            if language_id in aliases:
                return canonical
        return None

    def is_language_loaded(self, language_id: str) -> bool:
        return self.resolve_language(language_id) in self.loaded

    async def load_language(self, language_id: str) -> None:
        self.load_calls.append(language_id)
        if self.gate is not None:
            await self.gate.wait()
        if language_id in self.fail_loads:
            raise RuntimeError(f"grammar {language_id} unavailable")
        self.loaded.add(language_id)

    def tokenize(self, code: str, language_id: str, theme_id: str) -> TokenLines:
        self.tokenize_calls.append(language_id)
        canonical = self.resolve_language(language_id)
        if canonical in self.fail_tokenize:
            raise TokenizationError(language_id, "boom")
        colors = self.load_theme(theme_id)
        lines: TokenLines = []
        for line in code.split("\n"):
            tokens = []
            for match in _RUN.finditer(line):
                text = match.group(0)
                flags = FontStyle.BOLD if text in KEYWORDS else FontStyle.NONE
                tokens.append(Token(text, colors.foreground, flags))
            lines.append(tokens)
        return lines

    def load_theme(self, theme_id: str) -> ThemeColors:
        if theme_id not in THEMES:
            raise ThemeNotFoundError(theme_id)
        return THEMES[theme_id]

    def theme_colors(self, theme_id: str) -> Optional[ThemeColors]:
        return THEMES.get(theme_id)


class ScriptedTokenizer(FakeTokenizer):
    """Returns a fixed token stream regardless of the input code."""

    def __init__(self, lines: TokenLines) -> None:
        super().__init__()
        self.lines = lines

    def tokenize(self, code: str, language_id: str, theme_id: str) -> TokenLines:
        self.tokenize_calls.append(language_id)
        return self.lines


async def drain(rounds: int = 10) -> None:
    """Let pending tasks and their done callbacks run."""

    for _ in range(rounds):
        await asyncio.sleep(0)


def covered_text(text: str, decorations) -> str:
    return "".join(text[d.start : d.end] for d in decorations)
