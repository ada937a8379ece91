from __future__ import annotations

from fencelight.blocks import BlockLocator, CodeBlock, LineStructureIndex, parse_fence_tag
from fencelight.buffer import OffsetRange, TextDocument
from fencelight.config import HighlightSettings

NESTED = "intro\n```js\nline1\nline2\n```\noutro"


def locate(text: str, *ranges: OffsetRange, locator: BlockLocator | None = None):
    document = TextDocument.from_text(text)
    ranges = ranges or (OffsetRange(0, document.length),)
    return (locator or BlockLocator()).locate(document, ranges), document


def test_locates_single_javascript_block() -> None:
    (block,), document = locate("```js\nconst x = 1;\n```")

    assert block == CodeBlock(
        start_offset=0, content_start=6, content_end=19, language="js"
    )
    assert document.slice(block.content_start, block.content_end) == "const x = 1;\n"


def test_alias_mapping_resolves_fence_tag() -> None:
    settings = HighlightSettings(language_mappings={"dataviewjs": "javascript"})
    locator = BlockLocator(settings.resolve_language)

    (block,), _ = locate("```dataviewjs\nlet a;\n```", locator=locator)

    assert block.language == "javascript"


def test_missing_tag_means_plain_text() -> None:
    assert parse_fence_tag("```") == "text"
    assert parse_fence_tag("````python extra") == "python"

    (block,), _ = locate("```\nplain words\n```")
    assert block.language == "text"


def test_unterminated_block_runs_to_document_end() -> None:
    (block,), document = locate("```py\nprint(1)\nmore")

    assert block.content_end == document.length
    assert document.slice(block.content_start, block.content_end) == "print(1)\nmore"


def test_empty_body_and_trailing_opener_are_skipped() -> None:
    blocks, _ = locate("```js\n```")
    assert blocks == []

    blocks, _ = locate("intro\n```js")
    assert blocks == []


def test_range_inside_body_finds_enclosing_block() -> None:
    (block,), document = locate(NESTED, OffsetRange(19, 20))

    assert block.start_offset == 6
    assert document.slice(block.content_start, block.content_end) == "line1\nline2\n"


def test_range_outside_blocks_finds_nothing() -> None:
    blocks, _ = locate(NESTED, OffsetRange(29, 31))
    assert blocks == []

    blocks, _ = locate(NESTED, OffsetRange(0, 3))
    assert blocks == []


def test_overlapping_ranges_report_block_once() -> None:
    blocks, _ = locate(NESTED, OffsetRange(0, 13), OffsetRange(12, 20))

    assert len(blocks) == 1


def test_indented_closing_fence_closes_block() -> None:
    (block,), document = locate("```py\nx = 1\n  ```\nafter")

    assert document.slice(block.content_start, block.content_end) == "x = 1\n"


def test_structure_index_markers_and_enclosing_opener() -> None:
    document = TextDocument.from_text(NESTED + "\n```py\nopen")
    index = LineStructureIndex(document)

    assert index.block_count == 2
    kinds = [marker.kind for marker in index.markers(0, document.length)]
    assert kinds == ["begin", "end", "begin"]
    assert [m.line_number for m in index.markers(12, 24)] == [5]
    assert index.enclosing_opener(3) is None
    assert index.enclosing_opener(30) is None
    assert index.enclosing_opener(document.length).line_number == 7
