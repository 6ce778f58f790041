"""Static website target.

:class:`WebSiteBuilder` turns a :class:`~bookwright.assembler.LoadedBook`
into a directory that can be served as-is (``docs/`` by default, ready for
GitHub Pages): a landing page with the chapter menu and author section, one
page per chapter with previous/next links, a sitemap, a robots file, the
navigator script and stylesheets, and a copy of the book's images.

Pages carry no build timestamps, so rebuilding unchanged sources produces
byte-identical output.

Example
-------
>>> from pathlib import Path
>>> from bookwright.assembler import BookPipeline, WebSiteBuilder
>>> from bookwright.config import BookProject
>>> book = BookPipeline(BookProject.at(Path("my-book"))).load()  # doctest: +SKIP
>>> WebSiteBuilder(book).run()  # doctest: +SKIP
[PosixPath('my-book/docs/index.html'), ...]
"""

from __future__ import annotations

import logging
import shutil
import typing as typ

from ..authors import about_authors_markdown
from ..navigator.grouping import group_chapters
from .models import ChapterNeighbours, NavLink, SitemapEntry
from .templating import ASSETS_DIR, build_environment, render_template

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .models import ChapterDocument, LoadedBook

logger = logging.getLogger(__name__)

CHAPTERS_SUBDIR = "chapters"
ASSETS_SUBDIR = "assets"
IMAGES_SUBDIR = "images"
STATIC_ASSETS = ("navigator.js", "navigator.css", "book.css")
HIGHLIGHT_CSS = "highlight.css"


def build_chapter_links(
    documents: cabc.Sequence[ChapterDocument],
) -> list[ChapterNeighbours]:
    """Return previous/next links for every chapter in corpus order.

    The first chapter has no previous link and the last has no next link;
    both are represented by ``None`` rather than an empty link.
    """
    links: list[NavLink] = [
        NavLink(title=document.chapter.title, href=document.filename, slug=document.slug)
        for document in documents
    ]
    neighbours: list[ChapterNeighbours] = []
    for index, document in enumerate(documents):
        neighbours.append(
            ChapterNeighbours(
                slug=document.slug,
                previous=links[index - 1] if index > 0 else None,
                next=links[index + 1] if index + 1 < len(links) else None,
            )
        )
    return neighbours


def build_sitemap_entries(
    documents: cabc.Sequence[ChapterDocument], base_url: str
) -> list[SitemapEntry]:
    """Return the landing page entry followed by one entry per chapter."""
    base = base_url.rstrip("/")
    entries = [SitemapEntry(loc=f"{base}/", priority="1.0", changefreq="weekly")]
    entries.extend(
        SitemapEntry(loc=f"{base}/{CHAPTERS_SUBDIR}/{document.filename}", priority="0.8")
        for document in documents
    )
    return entries


def robots_txt(base_url: str) -> str:
    """Return the robots file pointing crawlers at the sitemap."""
    return f"User-agent: *\nAllow: /\n\nSitemap: {base_url.rstrip('/')}/sitemap.xml\n"


class WebSiteBuilder:
    """Render the website target for a loaded book."""

    def __init__(
        self,
        book: LoadedBook,
        output_dir: Path | None = None,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the builder and Jinja environment.

        Parameters
        ----------
        book : LoadedBook
            Metadata, credits, and rendered chapters from the pipeline.
        output_dir : Path, optional
            Site root; defaults to the project's ``docs/`` directory.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.book = book
        self.output_dir = output_dir or book.project.web_dir
        self.env = build_environment(templates_dir)

    def run(self) -> list[Path]:
        """Write every site artifact and return their paths.

        Returns
        -------
        list[Path]
            Written files in a stable order: landing page, chapter pages,
            sitemap, robots file, then assets. Copied images are not listed.
        """
        chapters_dir = self.output_dir / CHAPTERS_SUBDIR
        chapters_dir.mkdir(parents=True, exist_ok=True)

        metadata = self.book.metadata
        menu = group_chapters(
            self.book.documents,
            title=lambda document: document.chapter.title,
            threshold=metadata.web.group_threshold,
            group_size=metadata.web.group_size,
        )
        context = {
            "book": metadata,
            "credits": self.book.credits,
            "menu": menu,
            "documents": self.book.documents,
        }

        written = [self._write_index(context)]
        for document, neighbours in zip(
            self.book.documents, build_chapter_links(self.book.documents), strict=True
        ):
            written.append(self._write_chapter(document, neighbours, context))

        sitemap_path = self.output_dir / "sitemap.xml"
        sitemap_path.write_text(
            render_template(
                self.env,
                "sitemap.xml.jinja",
                entries=build_sitemap_entries(self.book.documents, metadata.web.base_url),
            ),
            encoding="utf-8",
        )
        robots_path = self.output_dir / "robots.txt"
        robots_path.write_text(robots_txt(metadata.web.base_url), encoding="utf-8")
        written.extend([sitemap_path, robots_path])
        written.extend(self._write_assets())
        self._copy_images()
        return written

    def _write_index(self, context: dict[str, typ.Any]) -> Path:
        about_html = self.book.renderer.markdown(
            about_authors_markdown(self.book.credits)
        )
        html = render_template(
            self.env,
            "index_page.jinja",
            about_html=about_html,
            root="",
            **context,
        )
        path = self.output_dir / "index.html"
        path.write_text(html, encoding="utf-8")
        return path

    def _write_chapter(
        self,
        document: ChapterDocument,
        neighbours: ChapterNeighbours,
        context: dict[str, typ.Any],
    ) -> Path:
        html = render_template(
            self.env,
            "chapter_page.jinja",
            document=document,
            neighbours=neighbours,
            root="../",
            **context,
        )
        path = self.output_dir / CHAPTERS_SUBDIR / document.filename
        path.write_text(html, encoding="utf-8")
        return path

    def _write_assets(self) -> list[Path]:
        assets_dir = self.output_dir / ASSETS_SUBDIR
        assets_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for name in STATIC_ASSETS:
            target = assets_dir / name
            shutil.copyfile(ASSETS_DIR / name, target)
            written.append(target)
        highlight = assets_dir / HIGHLIGHT_CSS
        highlight.write_text(self.book.renderer.stylesheet + "\n", encoding="utf-8")
        written.append(highlight)
        return written

    def _copy_images(self) -> None:
        source = self.book.project.images_dir
        if not source.is_dir():
            logger.debug("no images directory at %s; skipping copy", source)
            return
        shutil.copytree(source, self.output_dir / IMAGES_SUBDIR, dirs_exist_ok=True)


__all__ = [
    "WebSiteBuilder",
    "build_chapter_links",
    "build_sitemap_entries",
    "robots_txt",
]
