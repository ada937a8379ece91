"""Highlight settings: active theme and fence-tag language aliases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from fencelight.runtime.telemetry import env

DEFAULT_THEME = "monokai"
PLAIN_LANGUAGE = "text"


def parse_language_map(raw: str) -> Dict[str, str]:
    """Parse ``"alias=target,alias=target"`` into a mapping.

    Malformed entries (no ``=``, empty side) are skipped.
    """

    mapping: Dict[str, str] = {}
    for entry in raw.split(","):
        alias, sep, target = entry.partition("=")
        alias, target = alias.strip(), target.strip()
        if sep and alias and target:
            mapping[alias] = target
    return mapping


@dataclass(slots=True)
class HighlightSettings:
    """Recognized options: ``theme`` and ``language_mappings``."""

    theme: str = DEFAULT_THEME
    language_mappings: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "HighlightSettings":
        """Merge stored settings over the defaults.

        Accepts ``languageMappings`` as well as ``language_mappings`` so data
        saved by other front-ends loads unchanged.
        """

        data = data or {}
        theme = data.get("theme") or DEFAULT_THEME
        mappings = data.get("language_mappings", data.get("languageMappings")) or {}
        return cls(
            theme=str(theme),
            language_mappings={str(k): str(v) for k, v in dict(mappings).items()},
        )

    @classmethod
    def from_env(cls, base: Optional["HighlightSettings"] = None) -> "HighlightSettings":
        """Apply ``FENCELIGHT_THEME`` / ``FENCELIGHT_LANGUAGE_MAP`` overrides."""

        settings = base.copy() if base else cls()
        theme = env("THEME")
        if theme:
            settings.theme = theme.strip()
        raw_map = env("LANGUAGE_MAP")
        if raw_map:
            settings.language_mappings.update(parse_language_map(raw_map))
        return settings

    def copy(self) -> "HighlightSettings":
        return HighlightSettings(
            theme=self.theme, language_mappings=dict(self.language_mappings)
        )

    def resolve_language(self, tag: str) -> str:
        """Map a declared fence tag to a tokenizer language id."""

        if not tag:
            return PLAIN_LANGUAGE
        return self.language_mappings.get(tag) or tag

    def to_mapping(self) -> Dict[str, Any]:
        return {"theme": self.theme, "languageMappings": dict(self.language_mappings)}


__all__ = [
    "DEFAULT_THEME",
    "PLAIN_LANGUAGE",
    "HighlightSettings",
    "parse_language_map",
]
