"""Rewrite Markdown cross-links between chapters to their rendered pages."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from .._constants import CHAPTER_SUFFIXES

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any


def rewrite_chapter_href(
    target: str | None, slugs: cabc.Container[str], *, page_prefix: str = ""
) -> str | None:
    """Return the rendered-page URL for a chapter link, or ``None``.

    Only relative links whose final path segment names a known chapter source
    (``02-body.md#setup``) are rewritten; external URLs, fragments and links
    to unknown files are left alone.

    Examples
    --------
    >>> rewrite_chapter_href("02-body.md#setup", {"02-body"})
    '02-body.html#setup'
    >>> rewrite_chapter_href("https://example.com/a.md", {"a"}) is None
    True
    """
    if not target or target.startswith(("#", "//")) or "://" in target:
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return None
    name = posixpath.basename(parsed.path)
    stem, suffix = posixpath.splitext(name)
    if suffix.lower() not in CHAPTER_SUFFIXES or stem not in slugs:
        return None
    url = f"{page_prefix}{stem}.html"
    if parsed.fragment:
        url = f"{url}#{parsed.fragment}"
    return url


class ChapterLinkExtension(Extension):
    """Rewrite links between chapter sources to the generated HTML pages.

    Authors link chapters the way they read on disk (``./02-body.md``); the
    website serves ``chapters/02-body.html``. Registering this extension on a
    ``markdown.Markdown`` instance keeps those links navigable.
    """

    def __init__(self, slugs: cabc.Iterable[str], page_prefix: str = "") -> None:
        self.slugs = frozenset(slugs)
        self.page_prefix = page_prefix

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the chapter-link treeprocessor on the Markdown instance."""
        processor = ChapterLinkTreeprocessor(md, self.slugs, self.page_prefix)
        md.treeprocessors.register(processor, "bookwright_chapter_links", 15)


class ChapterLinkTreeprocessor(Treeprocessor):
    """Rewrite ``<a href="NN-name.md">`` elements in the parsed tree."""

    def __init__(
        self, md: Markdown, slugs: frozenset[str], page_prefix: str
    ) -> None:
        super().__init__(md)
        self.slugs = slugs
        self.page_prefix = page_prefix

    def run(self, root: Element) -> Element:
        """Rewrite chapter anchors in the parsed markdown tree."""
        for element in root.iter():
            if element.tag == "a":
                rewritten = rewrite_chapter_href(
                    element.get("href"), self.slugs, page_prefix=self.page_prefix
                )
                if rewritten:
                    element.set("href", rewritten)
        return root


__all__ = [
    "ChapterLinkExtension",
    "ChapterLinkTreeprocessor",
    "rewrite_chapter_href",
]
