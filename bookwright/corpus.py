r"""Discover chapter sources and assign their canonical order.

A book is a directory of Markdown files, one chapter per file, named with a
two-digit prefix (``01-introduction.md``). Ordering is a pure function of the
filename so every output target sees chapters in the same sequence no matter
how the filesystem enumerates them. Files that are not chapter sources are
ignored, and names that break the ``NN-name`` convention still load; the
validator reports them.

Example
-------
>>> from bookwright.corpus import order_chapter_files
>>> order_chapter_files(["02-body.md", "notes.txt", "01-intro.md"])
['01-intro.md', '02-body.md']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from pathlib import Path

from ._constants import CHAPTER_SUFFIXES
from .errors import StructuralError
from .headings import find_title

if typ.TYPE_CHECKING:
    import collections.abc as cabc

CONVENTIONAL_NAME = re.compile(r"^\d{2}-")
IMAGE_REFERENCE = re.compile(r"!\[[^\]]*\]\(([^)\s]+)[^)]*\)")
CHAPTER_IMAGE_PREFIX = "../images/"


@dc.dataclass(frozen=True, slots=True)
class Chapter:
    """One chapter source document.

    Attributes
    ----------
    slug : str
        Filename stem; unique within the corpus and used as a lookup key.
    order : int
        1-based position derived from the lexical filename order.
    title : str
        Text of the first level-one heading, or the slug when absent.
    raw_content : str
        Unparsed Markdown body.
    filename : str
        Source filename including its suffix.
    """

    slug: str
    order: int
    title: str
    raw_content: str
    filename: str


class ChapterSource(typ.Protocol):
    """Read-only access to a collection of chapter files."""

    def exists(self) -> bool:
        """Return whether the underlying collection is present."""
        ...

    def list_names(self) -> cabc.Iterable[str]:
        """Return the names of every entry, in any order."""
        ...

    def read_text(self, name: str) -> str:
        """Return the UTF-8 contents of ``name``."""
        ...


@dc.dataclass(slots=True)
class DirectorySource:
    """Chapter source backed by a directory on disk."""

    path: Path

    def exists(self) -> bool:
        return self.path.is_dir()

    def list_names(self) -> list[str]:
        return [entry.name for entry in self.path.iterdir() if entry.is_file()]

    def read_text(self, name: str) -> str:
        return (self.path / name).read_text(encoding="utf-8")

    def __str__(self) -> str:
        return str(self.path)


def chapter_sort_key(filename: str) -> str:
    """Return the key that fixes a chapter's position in the book.

    Ordering is plain lexical order of the filename, which the ``NN-name``
    convention turns into reading order.
    """
    return filename


def is_chapter_file(filename: str) -> bool:
    """Return ``True`` when ``filename`` is a recognised chapter source."""
    if filename.startswith("."):
        return False
    return filename.lower().endswith(CHAPTER_SUFFIXES)


def has_conventional_name(filename: str) -> bool:
    """Return ``True`` when ``filename`` follows the ``NN-name`` convention."""
    return bool(CONVENTIONAL_NAME.match(filename))


def order_chapter_files(names: cabc.Iterable[str]) -> list[str]:
    """Filter ``names`` to chapter sources and sort them canonically."""
    return sorted((name for name in names if is_chapter_file(name)), key=chapter_sort_key)


def chapter_slug(filename: str) -> str:
    """Return the filename stem used as the chapter slug."""
    return Path(filename).stem


def extract_title(content: str, fallback: str) -> str:
    """Return the first level-one heading in ``content`` or ``fallback``.

    Lines inside fenced code are never titles.
    """
    return find_title(content) or fallback


def broken_image_references(content: str, images_dir: Path) -> list[str]:
    """Return ``../images/`` references in ``content`` with no file behind them."""
    return [
        target
        for target in IMAGE_REFERENCE.findall(content)
        if target.startswith(CHAPTER_IMAGE_PREFIX)
        and not (images_dir / target.removeprefix(CHAPTER_IMAGE_PREFIX)).is_file()
    ]


def load_corpus(source: ChapterSource | Path) -> list[Chapter]:
    """Load every chapter from ``source`` in canonical order.

    Parameters
    ----------
    source : ChapterSource or Path
        Chapter collection; a ``Path`` is wrapped in :class:`DirectorySource`.

    Returns
    -------
    list[Chapter]
        Chapters ordered by :func:`chapter_sort_key`. Empty when the
        directory holds no chapter sources.

    Raises
    ------
    StructuralError
        If the chapter directory does not exist or two files share a slug.
    """
    if isinstance(source, Path):
        source = DirectorySource(source)
    if not source.exists():
        msg = f"Missing chapter directory: {source}"
        raise StructuralError(msg)

    chapters: list[Chapter] = []
    seen: dict[str, str] = {}
    for order, filename in enumerate(order_chapter_files(source.list_names()), start=1):
        slug = chapter_slug(filename)
        if slug in seen:
            msg = f"Chapters '{seen[slug]}' and '{filename}' share the slug '{slug}'"
            raise StructuralError(msg)
        seen[slug] = filename
        content = source.read_text(filename)
        chapters.append(
            Chapter(
                slug=slug,
                order=order,
                title=extract_title(content, slug),
                raw_content=content,
                filename=filename,
            )
        )
    return chapters


__all__ = [
    "Chapter",
    "ChapterSource",
    "DirectorySource",
    "broken_image_references",
    "chapter_slug",
    "chapter_sort_key",
    "extract_title",
    "has_conventional_name",
    "is_chapter_file",
    "load_corpus",
    "order_chapter_files",
]
