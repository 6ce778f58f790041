"""Navigator state objects and persisted reader preferences.

:class:`NavigationState` is transient: the navigator recomputes it from
events and never stores it. :class:`PreferencesState` survives page loads
and is persisted through a :class:`StorageBackend` (``localStorage`` in the
browser, :class:`MemoryStorage` in tests).
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import typing as typ

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")


@dc.dataclass(slots=True)
class NavigationState:
    """Transient sidebar state owned by one navigator instance."""

    active_heading_id: str | None = None
    scroll_position: float = 0.0
    sidebar_collapsed: bool = False
    sidebar_top_offset: float | None = None
    sidebar_max_height: str | None = None
    mobile_open: bool = False


@dc.dataclass(frozen=True, slots=True)
class PreferencesState:
    """Reader preferences persisted between visits."""

    theme: str | None = None
    visited_chapters: frozenset[str] = frozenset()


class StorageBackend(typ.Protocol):
    """String key/value persistence, mirroring the Web Storage API."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key`` or ``None``."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        ...


@dc.dataclass(slots=True)
class MemoryStorage:
    """In-memory :class:`StorageBackend`."""

    items: dict[str, str] = dc.field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class PreferencesStore:
    """Load and persist :class:`PreferencesState` through a storage backend."""

    theme_key = "theme"
    visited_key = "visited-chapters"

    def __init__(self, storage: StorageBackend) -> None:
        self.storage = storage

    def load(self) -> PreferencesState:
        """Return stored preferences, ignoring unreadable values."""
        theme = self.storage.get_item(self.theme_key)
        if theme not in THEMES:
            theme = None
        return PreferencesState(theme=theme, visited_chapters=self._load_visited())

    def save(self, state: PreferencesState) -> None:
        if state.theme is not None:
            self.storage.set_item(self.theme_key, state.theme)
        self.storage.set_item(
            self.visited_key, json.dumps(sorted(state.visited_chapters))
        )

    def mark_visited(self, slug: str) -> PreferencesState:
        """Record ``slug`` as visited and return the updated preferences."""
        current = self.load()
        if slug in current.visited_chapters:
            return current
        updated = dc.replace(
            current, visited_chapters=current.visited_chapters | {slug}
        )
        self.save(updated)
        return updated

    def toggle_theme(self) -> PreferencesState:
        """Flip between light and dark themes (light when unset)."""
        current = self.load()
        theme = "light" if current.theme == "dark" else "dark"
        updated = dc.replace(current, theme=theme)
        self.save(updated)
        return updated

    def _load_visited(self) -> frozenset[str]:
        raw = self.storage.get_item(self.visited_key)
        if not raw:
            return frozenset()
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("discarding unreadable visited-chapters value %r", raw)
            return frozenset()
        if not isinstance(payload, list):
            return frozenset()
        return frozenset(str(slug) for slug in payload)


__all__ = [
    "THEMES",
    "MemoryStorage",
    "NavigationState",
    "PreferencesState",
    "PreferencesStore",
    "StorageBackend",
]
