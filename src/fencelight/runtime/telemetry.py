"""Structured logging and profiling for fencelight on top of telelog.

Everything the engine logs goes through three calls: :func:`record_event`
for one-off facts (a load started, a block failed to tokenize),
:func:`span` for timed work (a reconciliation pass, a buffer edit) and
:func:`get_logger` when a caller needs the raw telelog logger.

Output is chosen once per process from ``FENCELIGHT_*`` environment
variables, or explicitly through :func:`configure`.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "FENCELIGHT_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "fencelight")
_TRUTHY = frozenset({"1", "true", "yes", "on"})

_loggers: MutableMapping[str, Any] = {}
_config: Optional[Any] = None


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read ``FENCELIGHT_<name>``."""

    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool = False) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class TelemetryOptions:
    """Output settings translated into a telelog config by :meth:`build`."""

    level: str = "INFO"
    console: bool = True
    colored: bool = True
    json: bool = False
    log_file: Optional[str] = None
    buffer_size: Optional[int] = None

    @classmethod
    def from_env(cls) -> "TelemetryOptions":
        buffered = env_flag("LOG_BUFFERED")
        return cls(
            level=(env("LOG_LEVEL") or "INFO").upper(),
            console=not env_flag("DISABLE_CONSOLE"),
            colored=not env_flag("NO_COLOR"),
            json=env_flag("LOG_JSON"),
            log_file=env("LOG_FILE") or None,
            buffer_size=int(env("LOG_BUFFER_SIZE") or "2048") if buffered else None,
        )

    @classmethod
    def preset(cls, name: str) -> "TelemetryOptions":
        """``development`` is chatty, ``production`` writes warnings to a file,
        ``silent`` keeps only errors and prints nothing."""

        key = name.lower()
        if key == "development":
            return cls(level="DEBUG")
        if key == "production":
            return cls(
                level="WARNING",
                console=False,
                log_file=env("LOG_FILE") or "fencelight.log",
                buffer_size=2048,
            )
        if key == "silent":
            return cls(level="ERROR", console=False)
        raise ValueError(f"Unknown telemetry preset '{name}'.")

    def build(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.colored)
        if self.json:
            config.with_json_format(True)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffer_size:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        # Spans rely on profiling being on.
        config.with_profiling(True)
        return config


def configure(
    *,
    options: Optional[TelemetryOptions] = None,
    preset: Optional[str] = None,
    config: Optional[Any] = None,
) -> None:
    """Switch logging output; at most one of the arguments may be given.

    With no arguments the environment decides (see
    :meth:`TelemetryOptions.from_env`). Loggers handed out earlier keep their
    old config; later :func:`get_logger` calls pick up the new one.
    """

    global _config
    if sum(arg is not None for arg in (options, preset, config)) > 1:
        raise ValueError("Pass only one of `options`, `preset` or `config`.")

    if config is None:
        if preset is not None:
            options = TelemetryOptions.preset(preset)
        config = (options or TelemetryOptions.from_env()).build()
    else:
        config.with_profiling(True)
    _config = config
    _loggers.clear()


def get_logger(name: Optional[str] = None) -> Any:
    logger_name = name or DEFAULT_LOGGER_NAME
    logger = _loggers.get(logger_name)
    if logger is None:
        if _config is None:
            configure()
        logger = tl.Logger.with_config(logger_name, _config)
        _loggers[logger_name] = logger
    return logger


def _text(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return repr(value)
    return value if isinstance(value, str) else str(value)


def _log(logger: Any, level: str, message: str, fields: Dict[str, Any]) -> None:
    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in fields.items()])
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {fields}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>``; ``data`` becomes key/value fields."""

    _log(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        fields: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            fields["component"] = self.component_name
        fields["reason"] = reason
        _log(self.logger, "error", "span::fail", fields)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Time the enclosed block under ``name``.

    ``component=True`` also tracks the block as a component called ``name``;
    a string picks another component name. ``metadata`` is attached as logger
    context while the block runs. An escaping exception is logged as
    ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        handle = SpanHandle(log, name, component_name, dict(context))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


__all__ = [
    "SpanHandle",
    "TelemetryOptions",
    "configure",
    "env",
    "env_flag",
    "get_logger",
    "record_event",
    "span",
]
