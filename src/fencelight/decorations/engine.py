"""Turn a code block's token stream into styled decorations."""

from __future__ import annotations

from typing import List, Optional

from fencelight.blocks import CodeBlock
from fencelight.buffer import TextDocument
from fencelight.config import DEFAULT_THEME
from fencelight.runtime.telemetry import record_event, span
from fencelight.tokenizer import LanguageLoader, TokenizerAdapter

from .models import Decoration, token_style_key


class DecorationEngine:
    """Renders one block at a time; never raises for per-block failures."""

    def __init__(
        self,
        tokenizer: TokenizerAdapter,
        loader: LanguageLoader,
        *,
        theme_id: str = DEFAULT_THEME,
        logger_name: str | None = None,
    ) -> None:
        self._tokenizer = tokenizer
        self._loader = loader
        self.theme_id = theme_id
        self._logger_name = logger_name

    def render_block(self, document: TextDocument, block: CodeBlock) -> List[Decoration]:
        if block.content_end <= block.content_start:
            return []

        if not self._tokenizer.is_language_loaded(block.language):
            self._loader.ensure_loaded(block.language)
            return []

        with span(
            "decorations::render_block",
            logger_name=self._logger_name,
            metadata={"language": block.language, "block": block.start_offset},
        ) as handle:
            code = document.slice(block.content_start, block.content_end)
            try:
                lines = self._tokenizer.tokenize(code, block.language, self.theme_id)
            except Exception as exc:
                record_event(
                    "decorations.tokenize_failed",
                    level="error",
                    data={
                        "language": block.language,
                        "block": block.start_offset,
                        "error": repr(exc),
                    },
                    logger_name=self._logger_name,
                )
                return []

            decorations = self._walk(document, block, lines)
            handle.add_metadata("decorations", len(decorations))
            return decorations

    def _walk(self, document: TextDocument, block: CodeBlock, lines) -> List[Decoration]:
        decorations: List[Decoration] = []
        cursor = block.content_start
        limit = block.content_end
        first_line = document.line_at(block.content_start).number

        for index, line in enumerate(lines):
            for token in line:
                if not token.text:
                    continue
                end = cursor + len(token.text)
                if end > limit:
                    overflow = self._clamp(document, block, cursor, end)
                    if overflow is not None:
                        decorations.append(
                            Decoration(cursor, overflow, token_style_key(token))
                        )
                    return decorations
                decorations.append(Decoration(cursor, end, token_style_key(token)))
                cursor = end

            if cursor >= limit:
                continue
            number = first_line + index
            source = document.line(number) if number <= document.line_count else None
            if source is not None and cursor <= source.end:
                # Skips trailing text the tokenizer elided along with the break.
                cursor = min(source.end + 1, limit)
            elif document.slice(cursor, cursor + 1) == "\n":
                cursor += 1
        return decorations

    def _clamp(
        self, document: TextDocument, block: CodeBlock, cursor: int, end: int
    ) -> Optional[int]:
        # Token lengths disagree with the source; keep what fits on this line.
        record_event(
            "decorations.token_overflow",
            level="debug",
            data={
                "language": block.language,
                "block": block.start_offset,
                "overflow": end - block.content_end,
            },
            logger_name=self._logger_name,
        )
        stop = min(document.line_at(cursor).end, block.content_end)
        return stop if cursor < stop else None


__all__ = ["DecorationEngine"]
