"""Change coordination and host-facing events."""

from .bus import (
    DECORATIONS_CHANGED,
    EVENTS,
    LANGUAGE_FAILED,
    LANGUAGE_LOADED,
    REFRESH_REQUESTED,
    THEME_CHANGED,
    HighlightBus,
)
from .coordinator import ChangeCoordinator, ViewUpdate

__all__ = [
    "ChangeCoordinator",
    "DECORATIONS_CHANGED",
    "EVENTS",
    "HighlightBus",
    "LANGUAGE_FAILED",
    "LANGUAGE_LOADED",
    "REFRESH_REQUESTED",
    "THEME_CHANGED",
    "ViewUpdate",
]
