"""Decoration records and style-key encoding."""

from __future__ import annotations

from dataclasses import dataclass

from fencelight.tokenizer.models import FontStyle, Token

_FLAG_PROPERTIES = (
    (FontStyle.ITALIC, "font-style: italic;"),
    (FontStyle.BOLD, "font-weight: bold;"),
    (FontStyle.UNDERLINE, "text-decoration: underline;"),
)


def style_key(color: str, flags: FontStyle | int = FontStyle.NONE) -> str:
    """Encode a token color and font flags as an inline CSS string."""

    parts = [f"color: {color};"]
    for flag, prop in _FLAG_PROPERTIES:
        if flags & flag:
            parts.append(prop)
    return "".join(parts)


def token_style_key(token: Token) -> str:
    return style_key(token.color, token.style_flags)


@dataclass(frozen=True, slots=True, order=True)
class Decoration:
    """Styled half-open span ``[start, end)``."""

    start: int
    end: int
    style_key: str

    def shifted(self, start: int, end: int) -> "Decoration":
        return Decoration(start, end, self.style_key)


__all__ = ["Decoration", "style_key", "token_style_key"]
