"""Check a book project's structure and content before building.

Problems are collected, never raised: :func:`validate_book` scans the whole
project and returns a :class:`ValidationReport` whose ``errors`` block a
build and whose ``warnings`` are advisory.

Example
-------
>>> from pathlib import Path
>>> from bookwright.config import BookProject
>>> from bookwright.validation import validate_book
>>> report = validate_book(BookProject.at(Path("my-book")))  # doctest: +SKIP
>>> report.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import re
import typing as typ
from urllib.parse import urlsplit

from ruamel.yaml.error import YAMLError

from ._constants import CHAPTER_SUFFIXES, LARGE_IMAGE_BYTES, SHORT_CHAPTER_WORDS
from .config import read_metadata_mapping
from .corpus import (
    broken_image_references,
    chapter_slug,
    has_conventional_name,
    order_chapter_files,
)
from .errors import BookConfigError
from .headings import find_title
from .stats import count_words

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .config import BookProject

REQUIRED_FIELDS = ("title", "description", "date")
RECOMMENDED_FIELDS = ("subtitle", "language", "version")
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")
LINK_TARGET = re.compile(r"(?<!!)\[[^\]]*\]\(([^)\s]+)[^)]*\)")


@dc.dataclass(slots=True)
class ValidationReport:
    """Errors and warnings gathered from one validation pass."""

    errors: list[str] = dc.field(default_factory=list)
    warnings: list[str] = dc.field(default_factory=list)
    chapter_count: int = 0
    image_count: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_book(project: BookProject) -> ValidationReport:
    """Validate directories, metadata, chapters, and images of ``project``."""
    report = ValidationReport()
    for directory in (
        project.root / "src",
        project.chapters_dir,
        project.metadata_file.parent,
        project.images_dir,
    ):
        if not directory.is_dir():
            report.errors.append(f"Missing required directory: {_relative(directory, project)}")

    if project.metadata_file.is_file():
        _validate_metadata(project, report)
    else:
        report.errors.append(
            f"Missing book metadata file: {_relative(project.metadata_file, project)}"
        )

    if project.chapters_dir.is_dir():
        _validate_chapters(project, report)
    if project.images_dir.is_dir():
        _validate_images(project, report)
    return report


def _relative(path: Path, project: BookProject) -> str:
    try:
        return path.relative_to(project.root).as_posix()
    except ValueError:
        return str(path)


def _validate_metadata(project: BookProject, report: ValidationReport) -> None:
    try:
        raw = read_metadata_mapping(project.metadata_file)
    except (BookConfigError, YAMLError) as exc:
        report.errors.append(f"Invalid metadata file: {exc}")
        return

    report.errors.extend(
        f"Missing required metadata field: {field}"
        for field in REQUIRED_FIELDS
        if not raw.get(field)
    )

    authors = raw.get("authors")
    has_structured = isinstance(authors, list) and bool(authors)
    if not raw.get("author") and not has_structured:
        report.errors.append(
            'Missing author information: must have either "author" field or "authors" list'
        )
    if isinstance(authors, list):
        for index, author in enumerate(authors):
            name = author.get("name") if isinstance(author, dict) else author
            if not isinstance(name, str) or not name.strip():
                report.errors.append(f'Author at index {index} is missing a "name" string')

    report.warnings.extend(
        f"Missing recommended metadata field: {field}"
        for field in RECOMMENDED_FIELDS
        if not raw.get(field)
    )

    cover = _configured_cover(raw)
    if cover:
        path = project.resolve_asset(cover)
        if not path.is_file():
            report.errors.append(f"Cover image not found: {_relative(path, project)}")
    else:
        report.warnings.append("No cover image specified in metadata")


def _configured_cover(raw: dict[str, typ.Any]) -> str | None:
    for section in ("ebook", "kindle"):
        payload = raw.get(section)
        if isinstance(payload, dict) and payload.get("cover_image"):
            return str(payload["cover_image"])
    value = raw.get("cover_image") or raw.get("coverImage")
    return str(value) if value else None


def _validate_chapters(project: BookProject, report: ValidationReport) -> None:
    names = order_chapter_files(
        entry.name for entry in project.chapters_dir.iterdir() if entry.is_file()
    )
    report.chapter_count = len(names)
    if not names:
        report.errors.append(f"No chapter files found in {_relative(project.chapters_dir, project)}/")
        return

    unconventional = [name for name in names if not has_conventional_name(name)]
    if unconventional:
        report.warnings.append(
            "Chapter files should follow naming convention 01-chapter-name.md: "
            + ", ".join(unconventional)
        )

    slugs = {chapter_slug(name) for name in names}
    for name in names:
        content = (project.chapters_dir / name).read_text(encoding="utf-8")
        if find_title(content) is None:
            report.warnings.append(f"Chapter {name} missing main title (# heading)")
        words = count_words(content)
        if words < SHORT_CHAPTER_WORDS:
            report.warnings.append(f"Chapter {name} is very short ({words} words)")
        report.errors.extend(
            f"Broken image reference in {name}: {target}"
            for target in broken_image_references(content, project.images_dir)
        )
        for target in LINK_TARGET.findall(content):
            if _unresolved_chapter_link(target, slugs):
                report.warnings.append(f"Unresolved chapter link in {name}: {target}")


def _unresolved_chapter_link(target: str, slugs: set[str]) -> bool:
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return False
    stem, suffix = posixpath.splitext(posixpath.basename(parsed.path))
    return suffix.lower() in CHAPTER_SUFFIXES and stem not in slugs


def _validate_images(project: BookProject, report: ValidationReport) -> None:
    images = sorted(
        entry
        for entry in project.images_dir.iterdir()
        if entry.is_file() and entry.suffix.lower() in IMAGE_SUFFIXES
    )
    report.image_count = len(images)
    if not images:
        report.warnings.append(f"No image files found in {_relative(project.images_dir, project)}/")
        return
    if not any("cover" in image.name.lower() for image in images):
        report.warnings.append('No cover image found (should contain "cover" in filename)')
    for image in images:
        size = image.stat().st_size
        if size > LARGE_IMAGE_BYTES:
            report.warnings.append(
                f"Large image file: {image.name} ({size / (1024 * 1024):.1f}MB)"
            )


__all__ = ["RECOMMENDED_FIELDS", "REQUIRED_FIELDS", "ValidationReport", "validate_book"]
