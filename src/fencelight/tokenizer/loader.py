"""Deduplicated asynchronous language loading."""

from __future__ import annotations

import asyncio
import weakref
from typing import Callable, FrozenSet, List, Literal, Optional, Set, Tuple

from fencelight.runtime.telemetry import record_event

from .models import TokenizerAdapter

LoadStatus = Literal["loaded", "loading", "started", "unknown", "deferred"]
LoadCallback = Callable[[str], None]
FailureCallback = Callable[[str, BaseException], None]

# Keyed by tokenizer id; an entry lives as long as some view holds its loader.
_shared: "weakref.WeakValueDictionary[int, LanguageLoader]" = weakref.WeakValueDictionary()


class LanguageLoader:
    """Tracks in-flight loads so each language is fetched at most once at a time.

    Loads run as tasks on the host's asyncio loop; completion callbacks fire
    on that same loop, so the pending set needs no locking. Views sharing a
    tokenizer should share its loader too (see :meth:`for_tokenizer`); every
    subscriber hears about every completed load.
    """

    def __init__(
        self,
        tokenizer: TokenizerAdapter,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        logger_name: str | None = None,
    ) -> None:
        self._tokenizer = tokenizer
        self._loading: Set[str] = set()
        self._tasks: Set[asyncio.Task[None]] = set()
        self._subscribers: List[Tuple[Optional[LoadCallback], Optional[FailureCallback]]] = []
        self._loop = loop
        self._logger_name = logger_name

    @classmethod
    def for_tokenizer(
        cls,
        tokenizer: TokenizerAdapter,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> "LanguageLoader":
        """Return the loader shared by everything using ``tokenizer``."""

        loader = _shared.get(id(tokenizer))
        if loader is None or loader._tokenizer is not tokenizer:
            loader = cls(tokenizer, loop=loop, logger_name="fencelight.loader")
            _shared[id(tokenizer)] = loader
        elif loader._loop is None:
            loader._loop = loop
        return loader

    def subscribe(
        self,
        on_loaded: Optional[LoadCallback] = None,
        on_failed: Optional[FailureCallback] = None,
    ) -> Callable[[], None]:
        """Register completion callbacks; the returned callable removes them."""

        entry = (on_loaded, on_failed)
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    @property
    def loading(self) -> FrozenSet[str]:
        return frozenset(self._loading)

    def ensure_loaded(self, language_id: str) -> LoadStatus:
        if self._tokenizer.is_language_loaded(language_id):
            return "loaded"

        canonical = self._tokenizer.resolve_language(language_id)
        if canonical is None:
            return "unknown"
        if canonical in self._loading:
            return "loading"

        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                record_event(
                    "language.load_deferred",
                    level="warning",
                    data={"language": canonical, "reason": "no running event loop"},
                    logger_name=self._logger_name,
                )
                return "deferred"

        self._loading.add(canonical)
        task = loop.create_task(self._tokenizer.load_language(canonical))
        self._tasks.add(task)
        task.add_done_callback(lambda done: self._finish(canonical, done))
        record_event(
            "language.load_started",
            level="debug",
            data={"language": canonical, "requested": language_id},
            logger_name=self._logger_name,
        )
        return "started"

    def _finish(self, language_id: str, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        self._loading.discard(language_id)

        if task.cancelled():
            record_event(
                "language.load_cancelled",
                level="warning",
                data={"language": language_id},
                logger_name=self._logger_name,
            )
            return

        error = task.exception()
        if error is not None:
            record_event(
                "language.load_failed",
                level="error",
                data={"language": language_id, "error": repr(error)},
                logger_name=self._logger_name,
            )
            for _, on_failed in list(self._subscribers):
                if on_failed is not None:
                    on_failed(language_id, error)
            return

        record_event(
            "language.loaded",
            data={"language": language_id},
            logger_name=self._logger_name,
        )
        for on_loaded, _ in list(self._subscribers):
            if on_loaded is not None:
                on_loaded(language_id)


__all__ = ["LanguageLoader", "LoadStatus"]
