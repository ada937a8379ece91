from __future__ import annotations

import asyncio

import pytest
from fakes import covered_text

from fencelight.buffer import Buffer
from fencelight.config import HighlightSettings
from fencelight.coordinator import ChangeCoordinator
from fencelight.tokenizer import (
    FontStyle,
    PygmentsTokenizer,
    ThemeNotFoundError,
    TokenizationError,
)

CODE = "def f():\n    return 1\n"


def test_language_resolution_uses_lexer_aliases() -> None:
    tokenizer = PygmentsTokenizer()

    assert tokenizer.resolve_language("js") == "javascript"
    assert tokenizer.resolve_language("Python") == "python"
    assert tokenizer.resolve_language("foobar123") is None
    assert "python" in tokenizer.known_languages()


def test_tokens_reproduce_source_lines() -> None:
    tokenizer = PygmentsTokenizer(preload=["py"])

    lines = tokenizer.tokenize(CODE, "python", "monokai")

    assert "\n".join("".join(token.text for token in line) for line in lines) == CODE
    assert all("\n" not in token.text for line in lines for token in line)
    keyword = lines[0][0]
    assert keyword.text == "def"
    assert keyword.color == "#66d9ef"


def test_carriage_returns_survive_tokenization() -> None:
    tokenizer = PygmentsTokenizer(preload=["python", "text"])

    for code, language in (
        ("x = 1\r\ny = 2\r\n", "python"),
        ("ab\rcd\nxy\n", "text"),
    ):
        lines = tokenizer.tokenize(code, language, "monokai")
        joined = "\n".join("".join(token.text for token in line) for line in lines)
        assert joined == code


def test_lone_carriage_return_stays_inside_its_decoration() -> None:
    text = "```text\nab\rcd\nxy\n```"
    coordinator = ChangeCoordinator(
        Buffer.from_text(text),
        PygmentsTokenizer(preload=["text"]),
        settings=HighlightSettings(theme="monokai"),
    )

    assert covered_text(text, coordinator.decorations) == "ab\rcd" + "xy"


def test_default_style_marks_keywords_bold() -> None:
    tokenizer = PygmentsTokenizer(preload=["python"])

    keyword = tokenizer.tokenize(CODE, "python", "default")[0][0]

    assert keyword.style_flags & FontStyle.BOLD


def test_themes_resolve_or_raise() -> None:
    tokenizer = PygmentsTokenizer()

    assert tokenizer.load_theme("monokai").background == "#272822"
    with pytest.raises(ThemeNotFoundError):
        tokenizer.load_theme("no-such-theme")
    assert tokenizer.theme_colors("no-such-theme") is None


def test_unloaded_language_cannot_tokenize() -> None:
    tokenizer = PygmentsTokenizer()

    with pytest.raises(TokenizationError):
        tokenizer.tokenize("{}", "json", "monokai")
    with pytest.raises(LookupError):
        tokenizer.preload("foobar123")


def test_async_load_makes_language_available() -> None:
    tokenizer = PygmentsTokenizer()

    asyncio.run(tokenizer.load_language("json"))

    assert tokenizer.is_language_loaded("json")
    assert tokenizer.loaded_languages == ("json",)


def test_coordinator_theme_switch_with_pygments() -> None:
    text = "# Notes\n```python\n" + CODE + "```\n"
    buffer = Buffer.from_text(text)
    coordinator = ChangeCoordinator(
        buffer,
        PygmentsTokenizer(preload=["python"]),
        settings=HighlightSettings(theme="monokai"),
    )
    before = coordinator.decorations
    assert before

    coordinator.set_theme("default")

    after = coordinator.decorations
    assert [(d.start, d.end) for d in before] == [(d.start, d.end) for d in after]
    keyword = text.index("def")
    assert before[0].start == keyword
    assert before[0].style_key != after[0].style_key
