"""Runtime table-of-contents navigator model.

The classes here model the sidebar that ``assets/navigator.js`` attaches to
chapter pages: heading collection and numbering, active-heading tracking,
sidebar placement, collapse and mobile overlay state, and persisted reader
preferences. Page access, timers, and storage are injected so the behaviour
can be exercised without a browser.
"""

from .grouping import NavGroup, filter_chapters, group_chapters, group_label
from .navigator import (
    ClickTarget,
    EventKind,
    HeadingElement,
    PageView,
    PanelEntry,
    TocNavigator,
    TocPanel,
    UiEvent,
    chapter_shortcut,
    compute_panel_offset,
    find_active_heading,
    marker_for,
    reading_progress,
)
from .scheduling import AsyncioScheduler, Debouncer, Scheduler
from .state import (
    MemoryStorage,
    NavigationState,
    PreferencesState,
    PreferencesStore,
    StorageBackend,
)

__all__ = [
    "AsyncioScheduler",
    "ClickTarget",
    "Debouncer",
    "EventKind",
    "HeadingElement",
    "MemoryStorage",
    "NavGroup",
    "NavigationState",
    "PageView",
    "PanelEntry",
    "PreferencesState",
    "PreferencesStore",
    "Scheduler",
    "StorageBackend",
    "TocNavigator",
    "TocPanel",
    "UiEvent",
    "chapter_shortcut",
    "compute_panel_offset",
    "filter_chapters",
    "find_active_heading",
    "group_chapters",
    "group_label",
    "marker_for",
    "reading_progress",
]
