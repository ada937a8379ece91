"""Executable Textual viewer that hosts the highlight engine."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Sequence

from pygments.styles import get_all_styles
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Static

from fencelight.buffer import Buffer
from fencelight.config import HighlightSettings, parse_language_map
from fencelight.coordinator import ChangeCoordinator
from fencelight.runtime import telemetry
from fencelight.tokenizer import PygmentsTokenizer

from .controller import TextualHighlightAdapter, TextualHighlightHooks

CHROME_LINES = 3


def preload_languages(tokenizer: PygmentsTokenizer, names: Sequence[str]) -> List[str]:
    """Load ``names`` up front and return the ones Pygments does not know."""

    unknown: List[str] = []
    for name in names:
        try:
            tokenizer.preload(name)
        except LookupError:
            unknown.append(name)
            telemetry.record_event(
                "language.preload_unknown", level="warning", data={"language": name}
            )
    return unknown


class FencelightApp(App[None]):
    """Scrollable, theme-switchable view of a markdown document."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#document-view {
		height: 1fr;
		padding: 0 1;
		content-align: left top;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("j", "scroll(1)", "Down"),
        ("k", "scroll(-1)", "Up"),
        ("t", "cycle_theme", "Theme"),
        ("d", "duplicate_line", "Duplicate line"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        text: str,
        *,
        settings: Optional[HighlightSettings] = None,
        preload: Sequence[str] = (),
    ) -> None:
        super().__init__()
        self._text = text
        self._settings = settings or HighlightSettings()
        self._preload = tuple(preload)
        self._themes: List[str] = sorted(get_all_styles())
        self.adapter: TextualHighlightAdapter | None = None
        self._view_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self._view_widget = Static("", id="document-view")
        yield self._view_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    async def on_mount(self) -> None:
        buffer = Buffer.from_text(
            self._text, name="document", height=max(self.size.height - CHROME_LINES, 1)
        )
        tokenizer = PygmentsTokenizer()
        unknown = preload_languages(tokenizer, self._preload)
        coordinator = ChangeCoordinator(buffer, tokenizer, settings=self._settings)
        hooks = TextualHighlightHooks(
            update_view=self._update_view,
            update_status=self._update_status,
            log=self._log_line,
        )
        self.adapter = TextualHighlightAdapter(buffer, coordinator, hooks)
        if unknown:
            self._update_status(f"unknown language::{','.join(unknown)}")
        else:
            self._update_status(f"theme::{self._settings.theme}")

    def on_resize(self, event: events.Resize) -> None:
        if self.adapter:
            self.adapter.resize(event.size.height - CHROME_LINES)

    def action_scroll(self, lines: int) -> None:
        if self.adapter:
            self.adapter.scroll(lines)

    def action_cycle_theme(self) -> None:
        if self.adapter:
            self.adapter.cycle_theme(self._themes)

    def action_duplicate_line(self) -> None:
        if not self.adapter:
            return
        buffer = self.adapter.buffer
        line = buffer.document.line(buffer.viewport.first_line)
        self.adapter.edit(line.start, line.start, line.text + "\n")

    def _update_view(self, text: Text) -> None:
        if self._view_widget:
            self._view_widget.update(text)

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        telemetry.record_event("textual.adapter", level="debug", data={"line": line})


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="View a markdown file with live fenced-code highlighting."
    )
    parser.add_argument("path", type=Path, help="Markdown file to open")
    parser.add_argument(
        "--theme",
        default=None,
        help="Pygments style name (default: FENCELIGHT_THEME or monokai)",
    )
    parser.add_argument(
        "--alias",
        action="append",
        default=[],
        metavar="TAG=LANG",
        help="Map a fence tag to a language id; may be repeated",
    )
    parser.add_argument(
        "--preload",
        default=telemetry.env("PRELOAD", ""),
        help="Comma-separated languages to load before the first paint",
    )
    parser.add_argument(
        "--telemetry",
        default=telemetry.env("TELEMETRY_PRESET"),
        choices=("development", "production", "silent"),
        help="Telemetry preset (default: FENCELIGHT_TELEMETRY_PRESET)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.telemetry:
        telemetry.configure(preset=args.telemetry)
    settings = HighlightSettings.from_env()
    if args.theme:
        settings.theme = args.theme
    settings.language_mappings.update(parse_language_map(",".join(args.alias)))
    preload = [name.strip() for name in args.preload.split(",") if name.strip()]

    text = args.path.read_text(encoding="utf-8")
    FencelightApp(text, settings=settings, preload=preload).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
