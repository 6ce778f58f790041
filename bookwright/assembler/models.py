"""Shared dataclasses used by the assembly pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from ..authors import AuthorCredits
    from ..config import BookMetadata, BookProject
    from ..corpus import Chapter
    from ..headings import HeadingNode, TocEntry
    from .renderer import HtmlContentRenderer


@dc.dataclass(slots=True)
class ChapterDocument:
    """A chapter after heading extraction and rendering.

    Attributes
    ----------
    chapter : Chapter
        Source chapter this document was derived from.
    headings : list[HeadingNode]
        Every extracted heading, numbered and anchored.
    toc_entry : TocEntry
        Per-chapter aggregate used by combined tables of contents.
    html : str
        Rendered chapter body with heading anchors and rewritten links.
    """

    chapter: Chapter
    headings: list[HeadingNode]
    toc_entry: TocEntry
    html: str

    @property
    def slug(self) -> str:
        return self.chapter.slug

    @property
    def filename(self) -> str:
        """Return the rendered page name (``<slug>.html``)."""
        return f"{self.chapter.slug}.html"


@dc.dataclass(frozen=True, slots=True)
class NavLink:
    """A link to a neighbouring chapter page."""

    title: str
    href: str
    slug: str


@dc.dataclass(frozen=True, slots=True)
class ChapterNeighbours:
    """Previous/next links for one chapter; ``None`` means no link."""

    slug: str
    previous: NavLink | None
    next: NavLink | None


@dc.dataclass(frozen=True, slots=True)
class SitemapEntry:
    """One ``<url>`` element of ``sitemap.xml``."""

    loc: str
    priority: str
    changefreq: str = "monthly"


@dc.dataclass(slots=True)
class LoadedBook:
    """Everything the output targets need, produced once per build."""

    project: BookProject
    metadata: BookMetadata
    credits: AuthorCredits
    documents: list[ChapterDocument]
    renderer: HtmlContentRenderer

    @property
    def chapters(self) -> list[Chapter]:
        return [document.chapter for document in self.documents]


__all__ = [
    "ChapterDocument",
    "ChapterNeighbours",
    "LoadedBook",
    "NavLink",
    "SitemapEntry",
]
