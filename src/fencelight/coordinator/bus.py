"""Event bus the coordinator uses to talk back to its host."""

from __future__ import annotations

from typing import Callable, Dict, List

DECORATIONS_CHANGED = "decorations.changed"
REFRESH_REQUESTED = "refresh.requested"
LANGUAGE_LOADED = "language.loaded"
LANGUAGE_FAILED = "language.failed"
THEME_CHANGED = "theme.changed"

EVENTS = (
    DECORATIONS_CHANGED,
    REFRESH_REQUESTED,
    LANGUAGE_LOADED,
    LANGUAGE_FAILED,
    THEME_CHANGED,
)

Listener = Callable[[object], None]


class HighlightBus:
    """Minimal synchronous publish/subscribe channel."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Listener]] = {}

    def subscribe(self, event: str, callback: Listener) -> Callable[[], None]:
        """Register ``callback``; the returned callable unsubscribes it."""

        listeners = self._subscribers.setdefault(event, [])
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)


__all__ = [
    "DECORATIONS_CHANGED",
    "EVENTS",
    "HighlightBus",
    "LANGUAGE_FAILED",
    "LANGUAGE_LOADED",
    "Listener",
    "REFRESH_REQUESTED",
    "THEME_CHANGED",
]
