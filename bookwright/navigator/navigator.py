"""Runtime table-of-contents navigator for rendered chapter pages.

The navigator builds a sidebar from the headings of the page it is attached
to, keeps the entry for the heading under the reading position highlighted,
and positions the sidebar below the page chrome. It talks to the page only
through :class:`PageView`, schedules deferred work through a
:class:`~bookwright.navigator.scheduling.Scheduler`, and persists reader
preferences through a :class:`~bookwright.navigator.state.PreferencesStore`,
so the same logic runs under tests and mirrors ``assets/navigator.js``.

Example
-------
>>> from bookwright.navigator.navigator import find_active_heading
>>> find_active_heading([("intro", 0), ("setup", 500), ("usage", 1200)], 720)
'setup'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import typing as typ

from ..headings import AnchorRegistry, HeadingCounter, HeadingNode, slugify_heading
from .scheduling import Debouncer
from .state import NavigationState

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .scheduling import Scheduler
    from .state import PreferencesState, PreferencesStore

logger = logging.getLogger(__name__)

ACTIVE_OFFSET = 120
PANEL_GAP = 20
PANEL_MIN_TOP = 80
PANEL_HEIGHT_MARGIN = 40
MOBILE_BREAKPOINT = 768
MIN_HEADINGS = 2
DEBOUNCE_SECONDS = 0.01
ESCAPE_KEY = "Escape"
PREVIOUS_CHAPTER_KEY = "ArrowLeft"
NEXT_CHAPTER_KEY = "ArrowRight"


class EventKind(enum.StrEnum):
    """Page events the navigator listens to."""

    SCROLL = "scroll"
    RESIZE = "resize"
    CLICK = "click"
    KEYDOWN = "keydown"


class ClickTarget(enum.StrEnum):
    """Where a click landed relative to the navigator's controls."""

    TOGGLE = "toggle"
    CLOSE_BUTTON = "close-button"
    COLLAPSE_BUTTON = "collapse-button"
    TOC_LINK = "toc-link"
    OUTSIDE = "outside"


@dc.dataclass(frozen=True, slots=True)
class UiEvent:
    """One event delivered by the page."""

    kind: EventKind
    target: ClickTarget | None = None
    key: str | None = None
    alt: bool = False
    heading_id: str | None = None


@dc.dataclass(slots=True)
class HeadingElement:
    """A heading element in the rendered page.

    ``element_id`` may be ``None`` for headings rendered without an id; the
    navigator assigns one on initialisation.
    """

    level: int
    text: str
    top: float
    element_id: str | None = None


@dc.dataclass(slots=True)
class PanelEntry:
    """One row of the sidebar."""

    element_id: str
    text: str
    level: int
    marker: str
    navigable: bool = True
    active: bool = False


@dc.dataclass(slots=True)
class TocPanel:
    """The sidebar mounted into the page."""

    entries: list[PanelEntry]

    def set_active(self, element_id: str | None) -> None:
        for entry in self.entries:
            entry.active = entry.navigable and entry.element_id == element_id

    @property
    def active_entry(self) -> PanelEntry | None:
        return next((entry for entry in self.entries if entry.active), None)


Handler = typ.Callable[[UiEvent], None]


class PageView(typ.Protocol):
    """The parts of a rendered page the navigator reads and mutates."""

    def headings(self) -> list[HeadingElement]:
        """Return heading elements of the chapter content in document order."""
        ...

    @property
    def scroll_y(self) -> float: ...

    @property
    def viewport_width(self) -> float: ...

    @property
    def header_height(self) -> float:
        """Height of the page header, ``0`` when the page has none."""
        ...

    @property
    def nav_height(self) -> float | None:
        """Height of the sticky navigation bar, ``None`` when absent."""
        ...

    def add_listener(self, kind: EventKind, handler: Handler) -> None: ...

    def remove_listener(self, kind: EventKind, handler: Handler) -> None: ...

    def mount_panel(self, panel: TocPanel) -> None: ...

    def unmount_panel(self) -> None:
        """Remove any navigator panel from the page, including stale ones."""
        ...

    def render_state(self, panel: TocPanel, state: NavigationState) -> None:
        """Reflect ``state`` (active entry, offsets, open/collapsed) in the page."""
        ...

    def scroll_to(self, element_id: str) -> None: ...

    def navigate_to(self, href: str) -> None:
        """Load another page, such as the next chapter."""
        ...

    def apply_theme(self, theme: str) -> None: ...


def marker_for(node: HeadingNode) -> str:
    """Return the sidebar marker for ``node``.

    Levels one and two are numbered (``1``, ``1.2``); level three gets a
    bullet and deeper levels a dash.
    """
    match node.level:
        case 1:
            return str(node.number_path[0])
        case 2:
            return f"{node.number_path[0]}.{node.number_path[1]}"
        case 3:
            return "•"
        case _:
            return "–"


def find_active_heading(
    positions: cabc.Sequence[tuple[str, float]], reading_line: float
) -> str | None:
    """Return the id of the heading the reader is currently in.

    Parameters
    ----------
    positions : Sequence[tuple[str, float]]
        ``(element_id, top)`` pairs of navigable headings in document order.
    reading_line : float
        Scroll position plus the activation offset.

    Returns
    -------
    str or None
        The heading at or above ``reading_line`` closest to it; the first heading
        when none qualifies; ``None`` when there are no headings.
    """
    if not positions:
        return None
    active: str | None = None
    closest = float("inf")
    for element_id, top in positions:
        distance = abs(reading_line - top)
        if top <= reading_line and distance < closest:
            active = element_id
            closest = distance
    return active if active is not None else positions[0][0]


def chapter_shortcut(
    event: UiEvent, previous_href: str | None, next_href: str | None
) -> str | None:
    """Return the page an Alt+Arrow key press should open, if any."""
    if event.kind is not EventKind.KEYDOWN or not event.alt:
        return None
    if event.key == PREVIOUS_CHAPTER_KEY:
        return previous_href
    if event.key == NEXT_CHAPTER_KEY:
        return next_href
    return None


def reading_progress(scroll_y: float, page_height: float, viewport_height: float) -> float:
    """Return how far through the page the reader is, from 0 to 100.

    Pages no taller than the viewport count as fully read.
    """
    scrollable = page_height - viewport_height
    if scrollable <= 0:
        return 100.0
    return min(100.0, max(0.0, scroll_y / scrollable * 100))


def compute_panel_offset(
    header_height: float,
    nav_height: float,
    scroll_y: float,
    *,
    gap: float = PANEL_GAP,
    minimum: float = PANEL_MIN_TOP,
) -> float:
    """Return the sidebar's top offset in pixels.

    While the header is still on screen the panel sits below header and
    navigation bar; once the header scrolls away it sits below the sticky
    navigation bar. The result is never above ``nav_height + gap`` nor
    ``minimum``.
    """
    if scroll_y <= header_height:
        top = header_height + nav_height + gap
    else:
        top = nav_height + gap
    return max(top, nav_height + gap, minimum)


class TocNavigator:
    """Attach a table-of-contents sidebar to one chapter page."""

    def __init__(
        self,
        view: PageView,
        *,
        scheduler: Scheduler,
        preferences: PreferencesStore | None = None,
        chapter_slug: str | None = None,
        previous_href: str | None = None,
        next_href: str | None = None,
        active_offset: float = ACTIVE_OFFSET,
        breakpoint: float = MOBILE_BREAKPOINT,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        self.view = view
        self.preferences = preferences
        self.chapter_slug = chapter_slug
        self.previous_href = previous_href
        self.next_href = next_href
        self.active_offset = active_offset
        self.breakpoint = breakpoint
        self.state = NavigationState()
        self.panel: TocPanel | None = None
        self.preferences_state: PreferencesState | None = None
        self._handlers: dict[EventKind, Handler] = {}
        self._positions: list[tuple[str, HeadingElement]] = []
        self._refresh_debouncer = Debouncer(scheduler, debounce_seconds, self._refresh)

    @property
    def handlers(self) -> dict[EventKind, Handler]:
        """Return a copy of the registered {event kind: handler} table."""
        return dict(self._handlers)

    @property
    def is_mobile(self) -> bool:
        return self.view.viewport_width <= self.breakpoint

    def initialize(self) -> bool:
        """Build and mount the sidebar, then start listening for events.

        Returns
        -------
        bool
            ``False`` when the page has fewer than two headings and no
            sidebar was mounted.
        """
        self.teardown()
        elements = self.view.headings()
        if len(elements) < MIN_HEADINGS:
            logger.debug("skipping navigator: %d heading(s)", len(elements))
            return False

        self.panel = TocPanel(entries=self._build_entries(elements))
        self.state = NavigationState()
        self.view.unmount_panel()
        self.view.mount_panel(self.panel)

        self._handlers = {
            EventKind.SCROLL: self._on_scroll,
            EventKind.RESIZE: self._on_resize,
            EventKind.CLICK: self._on_click,
            EventKind.KEYDOWN: self._on_keydown,
        }
        for kind, handler in self._handlers.items():
            self.view.add_listener(kind, handler)

        self._load_preferences()
        self.update_position()
        self.update_active()
        return True

    def teardown(self) -> None:
        """Remove listeners, cancel deferred work, and unmount the sidebar."""
        for kind, handler in self._handlers.items():
            self.view.remove_listener(kind, handler)
        self._handlers = {}
        self._refresh_debouncer.cancel()
        if self.panel is not None:
            self.view.unmount_panel()
            self.panel = None
        self._positions = []

    def update_active(self) -> str | None:
        """Recompute the active heading from the current scroll position."""
        if self.panel is None:
            return None
        scroll_y = self.view.scroll_y
        positions = [(element_id, element.top) for element_id, element in self._positions]
        active = find_active_heading(positions, scroll_y + self.active_offset)
        self.state.scroll_position = scroll_y
        self.state.active_heading_id = active
        self.panel.set_active(active)
        self._render()
        return active

    def update_position(self) -> None:
        """Recompute the sidebar offset; only applies above the breakpoint."""
        nav_height = self.view.nav_height
        if self.panel is None or nav_height is None or self.is_mobile:
            return
        top = compute_panel_offset(
            self.view.header_height, nav_height, self.view.scroll_y
        )
        self.state.sidebar_top_offset = top
        self.state.sidebar_max_height = (
            f"calc(100vh - {top + PANEL_HEIGHT_MARGIN:g}px)"
        )
        self._render()

    def toggle_collapsed(self) -> bool:
        self.state.sidebar_collapsed = not self.state.sidebar_collapsed
        self._render()
        return self.state.sidebar_collapsed

    def toggle_mobile(self) -> bool:
        self.state.mobile_open = not self.state.mobile_open
        self._render()
        return self.state.mobile_open

    def close_mobile(self) -> None:
        if self.state.mobile_open:
            self.state.mobile_open = False
            self._render()

    def toggle_theme(self) -> str | None:
        """Flip the persisted theme and apply it to the page."""
        if self.preferences is None:
            return None
        self.preferences_state = self.preferences.toggle_theme()
        theme = self.preferences_state.theme
        if theme:
            self.view.apply_theme(theme)
        return theme

    def _build_entries(self, elements: list[HeadingElement]) -> list[PanelEntry]:
        """Assign ids, numbers, and markers to the page headings."""
        registry = AnchorRegistry(
            element.element_id for element in elements if element.element_id
        )
        counter = HeadingCounter()
        seen: set[str] = set()
        entries: list[PanelEntry] = []
        for element in elements:
            if not element.element_id:
                element.element_id = registry.claim(slugify_heading(element.text))
            element_id = element.element_id
            navigable = element_id not in seen
            seen.add(element_id)
            node = HeadingNode(
                level=element.level,
                text=element.text,
                anchor_id=element_id,
                number_path=counter.advance(element.level),
                line=len(entries),
            )
            entries.append(
                PanelEntry(
                    element_id=element_id,
                    text=element.text,
                    level=element.level,
                    marker=marker_for(node),
                    navigable=navigable,
                )
            )
            if navigable:
                self._positions.append((element_id, element))
            else:
                logger.debug("heading id %r is duplicated; entry disabled", element_id)
        return entries

    def _load_preferences(self) -> None:
        if self.preferences is None:
            return
        if self.chapter_slug:
            self.preferences_state = self.preferences.mark_visited(self.chapter_slug)
        else:
            self.preferences_state = self.preferences.load()
        if self.preferences_state.theme:
            self.view.apply_theme(self.preferences_state.theme)

    def _render(self) -> None:
        if self.panel is not None:
            self.view.render_state(self.panel, self.state)

    def _refresh(self) -> None:
        self.update_position()
        self.update_active()

    def _on_scroll(self, _event: UiEvent) -> None:
        self._refresh_debouncer.trigger()

    def _on_resize(self, _event: UiEvent) -> None:
        self._refresh_debouncer.trigger()

    def _on_click(self, event: UiEvent) -> None:
        match event.target:
            case ClickTarget.TOGGLE:
                self.toggle_mobile()
            case ClickTarget.COLLAPSE_BUTTON:
                self.toggle_collapsed()
            case ClickTarget.CLOSE_BUTTON:
                self.close_mobile()
            case ClickTarget.TOC_LINK if event.heading_id:
                self.view.scroll_to(event.heading_id)
                if self.is_mobile:
                    self.close_mobile()
            case ClickTarget.OUTSIDE if self.is_mobile:
                self.close_mobile()
            case _:
                pass

    def _on_keydown(self, event: UiEvent) -> None:
        if event.key == ESCAPE_KEY:
            self.close_mobile()
            return
        target = chapter_shortcut(event, self.previous_href, self.next_href)
        if target:
            self.view.navigate_to(target)


__all__ = [
    "ACTIVE_OFFSET",
    "MOBILE_BREAKPOINT",
    "ClickTarget",
    "EventKind",
    "HeadingElement",
    "PageView",
    "PanelEntry",
    "TocNavigator",
    "TocPanel",
    "UiEvent",
    "chapter_shortcut",
    "compute_panel_offset",
    "find_active_heading",
    "marker_for",
    "reading_progress",
]
