from __future__ import annotations

import pytest

from fencelight.adapters.textual.app import _parse_args, preload_languages
from fencelight.runtime import telemetry
from fencelight.tokenizer import PygmentsTokenizer


def test_env_helpers_use_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FENCELIGHT_SOMETHING", "value")
    monkeypatch.setenv("FENCELIGHT_FLAG", " Yes ")

    assert telemetry.env("SOMETHING") == "value"
    assert telemetry.env("MISSING", "fallback") == "fallback"
    assert telemetry.env_flag("FLAG") is True
    assert telemetry.env_flag("MISSING") is False


def test_configure_rejects_bad_arguments() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="silent")


def test_options_follow_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FENCELIGHT_LOG_LEVEL", "debug")
    monkeypatch.setenv("FENCELIGHT_NO_COLOR", "1")
    monkeypatch.setenv("FENCELIGHT_LOG_BUFFERED", "on")
    monkeypatch.setenv("FENCELIGHT_LOG_BUFFER_SIZE", "16")

    options = telemetry.TelemetryOptions.from_env()

    assert options.level == "DEBUG"
    assert options.console is True
    assert options.colored is False
    assert options.buffer_size == 16


def test_presets_pick_output(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FENCELIGHT_LOG_FILE", raising=False)

    production = telemetry.TelemetryOptions.preset("Production")
    assert (production.level, production.console) == ("WARNING", False)
    assert production.log_file == "fencelight.log"
    assert telemetry.TelemetryOptions.preset("silent").level == "ERROR"
    with pytest.raises(ValueError):
        telemetry.TelemetryOptions.preset("verbose")


def test_span_reraises_after_reporting() -> None:
    telemetry.configure(preset="silent")
    try:
        with pytest.raises(KeyError):
            with telemetry.span("test::failing", component=True, metadata={"k": 1}):
                raise KeyError("boom")
    finally:
        telemetry.configure()


def test_cli_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FENCELIGHT_PRELOAD", "python,js")

    args = _parse_args(
        ["notes.md", "--theme", "default", "--alias", "dataviewjs=javascript"]
    )

    assert args.theme == "default"
    assert args.alias == ["dataviewjs=javascript"]
    assert args.preload == "python,js"
    assert args.telemetry is None


def test_unknown_preload_names_are_reported_not_raised() -> None:
    tokenizer = PygmentsTokenizer()

    assert preload_languages(tokenizer, ["python", "nope"]) == ["nope"]
    assert tokenizer.is_language_loaded("python")
