"""Top-level driver reconciling decorations with edits, viewport and theme."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from fencelight.blocks import BlockLocator, CodeBlock, LineStructureIndex
from fencelight.blocks.structure import OPEN_FENCE, is_closing_fence
from fencelight.buffer import (
    ChangeSet,
    ChangeSpan,
    HostView,
    OffsetRange,
    TextDocument,
    map_range,
    merge_ranges,
    subtract_ranges,
)
from fencelight.config import HighlightSettings
from fencelight.decorations import Decoration, DecorationEngine, DecorationSet
from fencelight.runtime import telemetry
from fencelight.tokenizer import LanguageLoader, ThemeColors, TokenizerAdapter

from .bus import (
    DECORATIONS_CHANGED,
    LANGUAGE_FAILED,
    LANGUAGE_LOADED,
    REFRESH_REQUESTED,
    THEME_CHANGED,
    HighlightBus,
)


@dataclass(slots=True)
class ViewUpdate:
    """One host notification; any combination of flags may be set."""

    changes: Optional[ChangeSet] = None
    viewport_changed: bool = False
    theme_changed: bool = False


class ChangeCoordinator:
    """Owns the decoration set and decides which regions to re-scan.

    The theme in ``settings`` is loaded eagerly; an unknown theme raises
    :class:`~fencelight.tokenizer.ThemeNotFoundError` from the constructor.
    Coordinators built on the same tokenizer share one
    :class:`~fencelight.tokenizer.LanguageLoader` unless ``loader`` is given.
    """

    def __init__(
        self,
        view: HostView,
        tokenizer: TokenizerAdapter,
        *,
        settings: Optional[HighlightSettings] = None,
        bus: Optional[HighlightBus] = None,
        loader: Optional[LanguageLoader] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        logger_name: str | None = "fencelight.coordinator",
    ) -> None:
        self.view = view
        self.tokenizer = tokenizer
        self.settings = settings or HighlightSettings()
        self.bus = bus or HighlightBus()
        self.logger_name = logger_name
        self.theme_colors: ThemeColors = tokenizer.load_theme(self.settings.theme)

        self.loader = loader or LanguageLoader.for_tokenizer(tokenizer, loop=loop)
        self._unsubscribe_loader = self.loader.subscribe(
            self._language_loaded, self._language_failed
        )
        self.locator = BlockLocator(lambda tag: self.settings.resolve_language(tag))
        self.engine = DecorationEngine(
            tokenizer,
            self.loader,
            theme_id=self.settings.theme,
            logger_name=logger_name,
        )
        self._decorations = DecorationSet()
        self._index: Optional[LineStructureIndex] = None
        self._index_document: Optional[TextDocument] = None
        self._visible: List[OffsetRange] = list(view.visible_ranges)
        self._reconcile(self._visible, self._visible, reason="initial")

    @property
    def decorations(self) -> Tuple[Decoration, ...]:
        return self._decorations.snapshot()

    # -- host notifications ---------------------------------------------

    def handle_edit(self, changes: ChangeSet) -> None:
        self.update(ViewUpdate(changes=changes))

    def handle_viewport_change(self) -> None:
        self.update(ViewUpdate(viewport_changed=True))

    def set_theme(self, theme_id: str) -> None:
        """Switch the active theme and recolor everything visible.

        Raises :class:`~fencelight.tokenizer.ThemeNotFoundError` for an
        unknown theme, leaving the current theme in place.
        """

        colors = self.tokenizer.load_theme(theme_id)
        previous = self.settings.theme
        self.settings.theme = theme_id
        self.engine.theme_id = theme_id
        self.theme_colors = colors
        telemetry.record_event(
            "theme.changed",
            data={"from": previous, "to": theme_id},
            logger_name=self.logger_name,
        )
        self.bus.emit(THEME_CHANGED, colors)
        self.bus.emit(REFRESH_REQUESTED, "theme")
        self.update(ViewUpdate(theme_changed=True))

    def set_language_aliases(self, mapping: Mapping[str, str]) -> None:
        """Replace the alias map; already rendered blocks keep their styling."""

        self.settings.language_mappings = dict(mapping)

    def refresh_visible(self) -> None:
        visible = list(self.view.visible_ranges)
        self._visible = visible
        self._reconcile(visible, visible, reason="refresh")

    def code_blocks(
        self, ranges: Optional[Sequence[OffsetRange]] = None
    ) -> List[CodeBlock]:
        """Blocks intersecting ``ranges``, the visible ranges by default."""

        document = self.view.document
        scan = self.view.visible_ranges if ranges is None else ranges
        return self.locator.locate(
            document, self._clip(scan, document.length), self._structure(document)
        )

    def update(self, update: ViewUpdate) -> None:
        scan: List[OffsetRange] = []
        evict: List[OffsetRange] = []

        changes = update.changes
        if changes is not None and not changes.empty:
            dropped = self._decorations.map(changes)
            self._visible = [map_range(span, changes) for span in self._visible]
            edited_scan, edited_evict = self._edit_ranges(changes)
            scan.extend(edited_scan)
            evict.extend(edited_evict)
            telemetry.record_event(
                "coordinator.edit",
                level="debug",
                data={"spans": len(changes), "invalidated": dropped},
                logger_name=self.logger_name,
            )

        visible = list(self.view.visible_ranges)
        if update.theme_changed:
            scan.extend(visible)
        else:
            scan.extend(subtract_ranges(visible, self._visible))
        self._visible = visible

        evict.extend(scan)
        if scan or evict:
            self._reconcile(scan, evict, reason=self._reason(update))

    def close(self) -> None:
        """Drop every decoration and stop listening for loads (document closed)."""

        self._unsubscribe_loader()
        self._decorations.clear()
        self._index = None
        self._index_document = None
        self.bus.emit(DECORATIONS_CHANGED, self.decorations)

    # -- internals --------------------------------------------------------

    @staticmethod
    def _reason(update: ViewUpdate) -> str:
        if update.theme_changed:
            return "theme"
        if update.changes is not None and not update.changes.empty:
            return "edit"
        return "viewport"

    def _structure(self, document: TextDocument) -> LineStructureIndex:
        if self._index is None or self._index_document is not document:
            self._index = LineStructureIndex(document)
            self._index_document = document
        return self._index

    def _edit_ranges(
        self, changes: ChangeSet
    ) -> Tuple[List[OffsetRange], List[OffsetRange]]:
        document = self.view.document
        visible = list(self.view.visible_ranges)
        scan: List[OffsetRange] = []
        evict: List[OffsetRange] = []
        for span in changes:
            edited = OffsetRange(span.from_b, span.to_b)
            scan.append(edited)
            evict.append(edited)
            if self._touches_fence(document, span):
                # Fence pairing after this point may have flipped.
                tail = OffsetRange(span.from_b, document.length)
                evict.append(tail)
                for window in visible:
                    clipped = window.clip(tail.start, tail.end)
                    if clipped is not None:
                        scan.append(clipped)
        return scan, evict

    def _touches_fence(self, document: TextDocument, span: ChangeSpan) -> bool:
        if self._index is not None and any(
            True for _ in self._index.markers(span.from_a, span.to_a)
        ):
            return True
        first = document.line_at(span.from_b).number
        last = document.line_at(span.to_b).number
        for number in range(first, last + 1):
            text = document.line(number).text
            if OPEN_FENCE.match(text) or is_closing_fence(text):
                return True
        return False

    def _clip(self, ranges: Iterable[OffsetRange], length: int) -> List[OffsetRange]:
        clipped = []
        for span in ranges:
            piece = span.clip(0, length)
            if piece is not None:
                clipped.append(piece)
        return merge_ranges(clipped)

    def _reconcile(
        self,
        scan: Sequence[OffsetRange],
        evict: Sequence[OffsetRange],
        *,
        reason: str,
    ) -> None:
        document = self.view.document
        with telemetry.span(
            "coordinator::reconcile",
            logger_name=self.logger_name,
            component="coordinator",
            metadata={"reason": reason, "version": document.version},
        ) as handle:
            scan_ranges = self._clip(scan, document.length)
            blocks = self.locator.locate(document, scan_ranges, self._structure(document))

            added: List[Decoration] = []
            evicted = list(evict)
            for block in blocks:
                added.extend(self.engine.render_block(document, block))
                evicted.append(block.extent)
            evicted = merge_ranges(evicted)

            def keep(start: int) -> bool:
                return not any(window.contains(start) for window in evicted)

            self._decorations.update(filter=keep, add=added)
            handle.add_metadata("blocks", len(blocks))
            handle.add_metadata("added", len(added))
        self.bus.emit(DECORATIONS_CHANGED, self.decorations)

    def _language_loaded(self, language_id: str) -> None:
        self.bus.emit(LANGUAGE_LOADED, language_id)
        self.bus.emit(REFRESH_REQUESTED, language_id)
        self.refresh_visible()

    def _language_failed(self, language_id: str, error: BaseException) -> None:
        self.bus.emit(LANGUAGE_FAILED, {"language": language_id, "error": error})


__all__ = ["ChangeCoordinator", "ViewUpdate"]
