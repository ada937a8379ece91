"""Bridges the change coordinator to Textual widgets through rich text."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Optional, Sequence

from rich.style import Style
from rich.text import Text

from fencelight.buffer import Buffer, BufferDelta
from fencelight.coordinator import (
    DECORATIONS_CHANGED,
    LANGUAGE_FAILED,
    LANGUAGE_LOADED,
    THEME_CHANGED,
    ChangeCoordinator,
    ViewUpdate,
)
from fencelight.tokenizer import ThemeColors, ThemeNotFoundError


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@lru_cache(maxsize=512)
def style_from_key(style_key: str) -> Style:
    """Translate an inline CSS style key into a rich :class:`Style`."""

    props: Dict[str, str] = {}
    for chunk in style_key.split(";"):
        name, sep, value = chunk.partition(":")
        if sep:
            props[name.strip()] = value.strip()
    color = props.get("color", "")
    return Style(
        color=color if color.startswith("#") else None,
        italic=props.get("font-style") == "italic" or None,
        bold=props.get("font-weight") == "bold" or None,
        underline=props.get("text-decoration") == "underline" or None,
    )


@lru_cache(maxsize=64)
def block_style(colors: ThemeColors) -> Style:
    """Base style for a whole code block, fences included."""

    def usable(value: str) -> Optional[str]:
        return value if value.startswith("#") else None

    return Style(color=usable(colors.foreground), bgcolor=usable(colors.background))


@dataclass(slots=True)
class TextualHighlightHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_view: Callable[[Text], None]
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


class TextualHighlightAdapter:
    """Routes host actions to the buffer + coordinator and repaints on events."""

    def __init__(
        self,
        buffer: Buffer,
        coordinator: ChangeCoordinator,
        hooks: TextualHighlightHooks,
    ) -> None:
        self.buffer = buffer
        self.coordinator = coordinator
        self.hooks = hooks
        self._subscribe_events()
        self._refresh_view()

    def render(self) -> Text:
        """Visible window of the buffer with decorations applied."""

        document = self.buffer.document
        window = self.buffer.visible_ranges[0]
        start, end = window.start, window.end
        text = Text(document.slice(start, end))
        base = block_style(self.coordinator.theme_colors)
        for block in self.coordinator.code_blocks([window]):
            block_end = document.length
            if block.content_end < document.length:
                block_end = document.line_at(block.content_end).end
            lo, hi = max(block.start_offset, start), min(block_end, end)
            if lo < hi:
                text.stylize(base, lo - start, hi - start)
        for decoration in self.coordinator.decorations:
            if decoration.end <= start or decoration.start >= end:
                continue
            text.stylize(
                style_from_key(decoration.style_key),
                max(decoration.start, start) - start,
                min(decoration.end, end) - start,
            )
        return text

    def edit(self, start: int, end: int, replacement: str) -> BufferDelta:
        delta = self.buffer.replace_range(start, end, replacement, label="host_edit")
        self._log_state("edit ->", start=start, end=end, inserted=len(replacement))
        self.coordinator.update(ViewUpdate(changes=delta.changes, viewport_changed=True))
        return delta

    def scroll(self, lines: int) -> None:
        self.buffer.scroll_by(lines)
        self._log_state("scroll ->", lines=lines)
        self.coordinator.handle_viewport_change()

    def resize(self, height: int) -> None:
        self.buffer.set_viewport(self.buffer.viewport.first_line, max(height, 1))
        self.coordinator.handle_viewport_change()

    def set_theme(self, theme_id: str) -> bool:
        try:
            self.coordinator.set_theme(theme_id)
        except ThemeNotFoundError as exc:
            self.hooks.update_status(str(exc))
            self._log_state("theme !", theme=theme_id)
            return False
        return True

    def cycle_theme(self, themes: Sequence[str]) -> Optional[str]:
        if not themes:
            return None
        current = self.coordinator.settings.theme
        index = themes.index(current) + 1 if current in themes else 0
        candidate = themes[index % len(themes)]
        return candidate if self.set_theme(candidate) else None

    def _subscribe_events(self) -> None:
        bus = self.coordinator.bus
        for event in (DECORATIONS_CHANGED, LANGUAGE_LOADED, LANGUAGE_FAILED, THEME_CHANGED):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        if name != DECORATIONS_CHANGED:
            self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == DECORATIONS_CHANGED:
            self._refresh_view()
        elif name == THEME_CHANGED:
            self.hooks.update_status(f"theme::{self.coordinator.settings.theme}")
        elif name == LANGUAGE_LOADED:
            self.hooks.update_status(f"language::{payload}")
        elif name == LANGUAGE_FAILED and isinstance(payload, dict):
            self.hooks.update_status(f"language failed::{payload.get('language')}")

    def _refresh_view(self) -> None:
        self.hooks.update_view(self.render())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "buffer": self.buffer.name,
            "version": self.buffer.document.version,
            "first_line": self.buffer.viewport.first_line,
            "theme": self.coordinator.settings.theme,
            "decorations": len(self.coordinator.decorations),
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))


__all__ = [
    "TextualHighlightAdapter",
    "TextualHighlightHooks",
    "block_style",
    "style_from_key",
]
