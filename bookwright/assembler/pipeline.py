"""Load a book project once and hand the result to every output target.

The pipeline runs strictly in sequence: metadata is loaded and validated
first (so a missing title aborts before any target writes a file), then the
chapter corpus is read, each chapter's headings are extracted and anchored,
and the chapter is rendered with cross-links rewritten to HTML pages.

Example
-------
>>> from pathlib import Path
>>> from bookwright.assembler import BookPipeline
>>> from bookwright.config import BookProject
>>> book = BookPipeline(BookProject.at(Path("my-book"))).load()  # doctest: +SKIP
>>> [document.filename for document in book.documents]  # doctest: +SKIP
['01-introduction.html', '02-getting-started.html']
"""

from __future__ import annotations

import logging
import typing as typ

from ..authors import normalize_authors
from ..config import load_book_metadata
from ..corpus import broken_image_references, load_corpus
from ..errors import StructuralError
from ..headings import build_toc_entry
from .link_rewriter import ChapterLinkExtension
from .models import ChapterDocument, LoadedBook
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from ..config import BookMetadata, BookProject
    from ..corpus import Chapter

logger = logging.getLogger(__name__)


class BookPipeline:
    """Run the loader, extractor, and normaliser stages for a project."""

    def __init__(
        self, project: BookProject, *, metadata: BookMetadata | None = None
    ) -> None:
        self.project = project
        self._metadata = metadata

    def load(self) -> LoadedBook:
        """Load metadata and chapters and render every chapter.

        Returns
        -------
        LoadedBook
            Metadata, normalised author credits, and rendered chapters in
            corpus order.

        Raises
        ------
        BookConfigError
            If the metadata file is missing or has no title.
        StructuralError
            If the chapter directory is missing or slugs collide, or a chapter
            references an image that does not exist.
        """
        metadata = self._metadata or load_book_metadata(self.project.metadata_file)
        credits = normalize_authors(metadata.author_fields)
        chapters = load_corpus(self.project.chapters_dir)
        self._check_images(chapters)
        logger.debug(
            "loaded %d chapters from %s", len(chapters), self.project.chapters_dir
        )

        base_renderer = HtmlContentRenderer(metadata.web.pygments_style)
        renderer = base_renderer.with_links(
            ChapterLinkExtension(chapter.slug for chapter in chapters)
        )
        documents = [self._build_document(chapter, renderer) for chapter in chapters]
        return LoadedBook(
            project=self.project,
            metadata=metadata,
            credits=credits,
            documents=documents,
            renderer=base_renderer,
        )

    def _check_images(self, chapters: list[Chapter]) -> None:
        for chapter in chapters:
            missing = broken_image_references(chapter.raw_content, self.project.images_dir)
            if missing:
                msg = f"Broken image reference in {chapter.filename}: {missing[0]}"
                raise StructuralError(msg)

    @staticmethod
    def _build_document(
        chapter: Chapter, renderer: HtmlContentRenderer
    ) -> ChapterDocument:
        rendered = renderer.render_chapter(chapter.raw_content)
        return ChapterDocument(
            chapter=chapter,
            headings=rendered.headings,
            toc_entry=build_toc_entry(chapter, rendered.headings),
            html=rendered.html,
        )


__all__ = ["BookPipeline"]
