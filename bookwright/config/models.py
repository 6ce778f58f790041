"""Typed dataclasses describing book metadata and project layout."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from .._constants import (
    BUNDLE_OUTPUT_DIR,
    CHAPTERS_DIR,
    DEFAULT_BASE_URL,
    DIST_OUTPUT_DIR,
    EBOOK_OUTPUT_DIR,
    IMAGES_DIR,
    METADATA_FILE,
    WEB_OUTPUT_DIR,
)
from ..errors import BookConfigError


@dc.dataclass(slots=True)
class WebOptions:
    """Settings for the static website target."""

    base_url: str = DEFAULT_BASE_URL
    pygments_style: str = "monokai"
    group_threshold: int = 20
    group_size: int = 5


@dc.dataclass(slots=True)
class EbookOptions:
    """Settings for the EPUB/MOBI target."""

    cover_image: str | None = None
    css: str | None = None


@dc.dataclass(slots=True)
class PdfOptions:
    """Settings for the print-ready PDF target."""

    description: str | None = None
    page_size: str = "A4"


@dc.dataclass(slots=True)
class BundleOptions:
    """Settings for the platform upload bundle."""

    sample_size: int = 2
    front_matter: bool = True


@dc.dataclass(slots=True)
class SocialLinks:
    """Book-level social links rendered in the website footer."""

    website: str | None = None
    twitter: str | None = None
    github: str | None = None


@dc.dataclass(slots=True)
class BookMetadata:
    """Book-level metadata loaded from ``book.yaml``.

    ``author_fields`` keeps the raw ``author`` / ``authors`` payload so the
    normaliser in :mod:`bookwright.authors` can classify it exactly once.
    """

    title: str
    subtitle: str | None = None
    description: str | None = None
    date: str | None = None
    language: str = "en"
    version: str | None = None
    publisher: str | None = None
    copyright: str | None = None
    isbn: str | None = None
    cover_image: str | None = None
    author_fields: dict[str, typ.Any] = dc.field(default_factory=dict)
    web: WebOptions = dc.field(default_factory=WebOptions)
    ebook: EbookOptions = dc.field(default_factory=EbookOptions)
    pdf: PdfOptions = dc.field(default_factory=PdfOptions)
    bundle: BundleOptions = dc.field(default_factory=BundleOptions)
    social: SocialLinks = dc.field(default_factory=SocialLinks)

    @property
    def resolved_cover(self) -> str | None:
        """Return the cover image path, preferring the ebook-specific one."""
        return self.ebook.cover_image or self.cover_image


@dc.dataclass(slots=True)
class BookProject:
    """Filesystem layout of a book project and its output directories."""

    root: Path
    chapters_dir: Path
    metadata_file: Path
    images_dir: Path
    web_dir: Path
    dist_dir: Path
    ebook_dir: Path
    bundle_dir: Path

    @classmethod
    def at(
        cls,
        root: Path,
        *,
        chapters_dir: Path | None = None,
        metadata_file: Path | None = None,
        images_dir: Path | None = None,
    ) -> BookProject:
        """Describe the conventional layout rooted at ``root``."""
        base = Path(root)
        return cls(
            root=base,
            chapters_dir=chapters_dir or base / CHAPTERS_DIR,
            metadata_file=metadata_file or base / METADATA_FILE,
            images_dir=images_dir or base / IMAGES_DIR,
            web_dir=base / WEB_OUTPUT_DIR,
            dist_dir=base / DIST_OUTPUT_DIR,
            ebook_dir=base / EBOOK_OUTPUT_DIR,
            bundle_dir=base / BUNDLE_OUTPUT_DIR,
        )

    def resolve_asset(self, reference: str) -> Path:
        """Resolve a metadata path such as ``src/images/cover.png``.

        Paths are tried relative to the project root and then relative to
        ``src/`` (so chapter-style ``../images/cover.jpg`` references work);
        the root-relative candidate is returned when neither exists.
        """
        candidate = Path(reference)
        if candidate.is_absolute():
            return candidate
        from_root = self.root / candidate
        from_src = self.root / "src" / reference.removeprefix("../")
        if not from_root.exists() and from_src.exists():
            return from_src
        return from_root


__all__ = [
    "BookConfigError",
    "BookMetadata",
    "BookProject",
    "BundleOptions",
    "EbookOptions",
    "PdfOptions",
    "SocialLinks",
    "WebOptions",
]
