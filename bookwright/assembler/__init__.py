"""Assemble loaded chapters into the book's output targets.

:class:`BookPipeline` loads metadata and chapters once; the resulting
:class:`LoadedBook` feeds the website (:class:`WebSiteBuilder`), the flat
manuscript used by the PDF and EPUB converters
(:func:`assemble_flat_manuscript`), and the platform upload bundle
(:func:`assemble_bundle`).
"""

from .bundle import PlatformBundle, assemble_bundle, write_bundle
from .link_rewriter import ChapterLinkExtension, rewrite_chapter_href
from .manuscript import (
    FlatManuscript,
    assemble_flat_manuscript,
    normalize_image_paths,
    pandoc_metadata,
    write_flat_manuscript,
)
from .models import ChapterDocument, ChapterNeighbours, LoadedBook, NavLink, SitemapEntry
from .pipeline import BookPipeline
from .renderer import HtmlContentRenderer
from .web import WebSiteBuilder, build_chapter_links, build_sitemap_entries

__all__ = [
    "BookPipeline",
    "ChapterDocument",
    "ChapterLinkExtension",
    "ChapterNeighbours",
    "FlatManuscript",
    "HtmlContentRenderer",
    "LoadedBook",
    "NavLink",
    "PlatformBundle",
    "SitemapEntry",
    "WebSiteBuilder",
    "assemble_bundle",
    "assemble_flat_manuscript",
    "build_chapter_links",
    "build_sitemap_entries",
    "normalize_image_paths",
    "pandoc_metadata",
    "rewrite_chapter_href",
    "write_bundle",
    "write_flat_manuscript",
]
