"""Load and validate book metadata and describe the project layout.

This subpackage parses a book's ``src/metadata/book.yaml`` file, applies
defaults for the optional per-target sections (``web``, ``ebook``, ``pdf``,
``bundle``, ``social``), and produces typed dataclasses that the assembler
consumes. :class:`BookProject` names every input and output directory so the
build targets never hard-code paths.

Examples
--------
>>> from pathlib import Path
>>> from bookwright.config import BookProject, load_book_metadata
>>> project = BookProject.at(Path("my-book"))
>>> project.chapters_dir.as_posix()
'my-book/src/chapters'
>>> metadata = load_book_metadata(project.metadata_file)  # doctest: +SKIP
"""

from .loader import load_book_metadata, metadata_from_mapping, read_metadata_mapping
from .models import (
    BookConfigError,
    BookMetadata,
    BookProject,
    BundleOptions,
    EbookOptions,
    PdfOptions,
    SocialLinks,
    WebOptions,
)

__all__ = [
    "BookConfigError",
    "BookMetadata",
    "BookProject",
    "BundleOptions",
    "EbookOptions",
    "PdfOptions",
    "SocialLinks",
    "WebOptions",
    "load_book_metadata",
    "metadata_from_mapping",
    "read_metadata_mapping",
]
