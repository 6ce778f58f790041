"""Platform-bundle target: a manuscript directory for Leanpub-style services.

The bundle holds the chapter sources, a ``Book.txt`` manifest fixing their
order (wrapped by a dedication and an about-the-author file), a
``Sample.txt`` listing the free-sample chapters, an optional
``subtitle.txt``, and a copy of the images.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ

from .._constants import (
    BUNDLE_ABOUT,
    BUNDLE_DEDICATION,
    BUNDLE_MANIFEST,
    BUNDLE_SAMPLE,
    BUNDLE_SUBTITLE,
)
from ..authors import about_authors_markdown
from .manuscript import normalize_image_paths

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import LoadedBook

logger = logging.getLogger(__name__)

DEDICATION_TEMPLATE = (
    "{frontmatter}\n\n# Dedication\n\nThis book is dedicated to...\n\n{mainmatter}\n"
)


@dc.dataclass(slots=True)
class PlatformBundle:
    """Synthesised bundle contents.

    Attributes
    ----------
    manifest : list[str]
        Ordered file names written to ``Book.txt``.
    sample : list[str]
        Chapter file names written to ``Sample.txt``.
    files : dict[str, str]
        Generated file name to content, including both manifests.
    """

    manifest: list[str]
    sample: list[str]
    files: dict[str, str]


def assemble_bundle(
    book: LoadedBook,
    *,
    with_front_matter: bool | None = None,
    sample_size: int | None = None,
) -> PlatformBundle:
    """Build the manifests and generated files for ``book``.

    ``with_front_matter`` and ``sample_size`` default to the book's
    ``bundle`` metadata section.
    """
    options = book.metadata.bundle
    if with_front_matter is None:
        with_front_matter = options.front_matter
    if sample_size is None:
        sample_size = options.sample_size

    chapter_files = [chapter.filename for chapter in book.chapters]
    files: dict[str, str] = {}
    manifest = list(chapter_files)
    if with_front_matter:
        files[BUNDLE_DEDICATION] = DEDICATION_TEMPLATE
        files[BUNDLE_ABOUT] = "{backmatter}\n\n" + about_authors_markdown(book.credits)
        manifest = [BUNDLE_DEDICATION, *chapter_files, BUNDLE_ABOUT]
    if book.metadata.subtitle:
        files[BUNDLE_SUBTITLE] = book.metadata.subtitle + "\n"

    sample = chapter_files[:sample_size]
    files[BUNDLE_MANIFEST] = "\n".join(manifest) + "\n"
    files[BUNDLE_SAMPLE] = "\n".join(sample) + "\n" if sample else ""
    return PlatformBundle(manifest=manifest, sample=sample, files=files)


def write_bundle(bundle: PlatformBundle, book: LoadedBook, output_dir: Path) -> list[Path]:
    """Write ``bundle`` into ``output_dir`` and return the written paths.

    Chapter sources are written with image references normalised to
    ``images/``; the images directory itself is copied unchanged.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for chapter in book.chapters:
        target = output_dir / chapter.filename
        target.write_text(normalize_image_paths(chapter.raw_content), encoding="utf-8")
        written.append(target)
    for name, content in bundle.files.items():
        target = output_dir / name
        target.write_text(content, encoding="utf-8")
        written.append(target)

    images = book.project.images_dir
    if images.is_dir():
        shutil.copytree(images, output_dir / "images", dirs_exist_ok=True)
    else:
        logger.debug("no images directory at %s; bundle has no images", images)
    return written


__all__ = ["DEDICATION_TEMPLATE", "PlatformBundle", "assemble_bundle", "write_bundle"]
