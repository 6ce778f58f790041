r"""Flat manuscript target: every chapter combined into one Markdown document.

The flat manuscript feeds the PDF and EPUB converters. It opens with a YAML
metadata block, follows with one combined table of contents that deep-links
to every chapter and section anchor, and then holds the chapters in corpus
order with a page break between each pair.

Anchors are claimed from one :class:`~bookwright.headings.AnchorRegistry`
shared by the whole document, so two chapters that both contain a
``## Summary`` section resolve to ``summary`` and ``summary-2`` rather than
colliding. Image references written relative to the chapter directory
(``../images/fig.png``) are rewritten to ``images/fig.png`` so converters can
resolve them from the directory holding the manuscript.

Example
-------
>>> from bookwright.assembler.manuscript import normalize_image_paths
>>> normalize_image_paths("![Figure](../images/fig.png)")
'![Figure](images/fig.png)'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import io
import re
import typing as typ

from ruamel.yaml import YAML

from ..headings import AnchorRegistry, anchor_markdown, build_toc_entry, extract_headings

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from ..headings import HeadingNode, TocEntry
    from .models import ChapterDocument, LoadedBook

LATEX_PAGE_BREAK = "\\newpage"
HTML_PAGE_BREAK = '<div class="page-break"></div>'
TOC_HEADING = "Table of Contents"
TOC_ANCHOR = "table-of-contents"
TOC_INDENT = "    "

IMAGE_REFERENCE_PATTERN = re.compile(
    r"!\[([^\]]*)\]\((?:\.\./)?(?:src/)?images/([^)]+)\)"
)
CHAPTER_LINK_PATTERN = re.compile(
    r"\]\((?:\./)?([A-Za-z0-9_.-]+)\.(?:md|markdown)(#[^)\s]+)?\)"
)


@dc.dataclass(slots=True)
class FlatManuscript:
    """A combined Markdown manuscript ready for external converters.

    Attributes
    ----------
    front_matter : str
        YAML metadata block; the only part that may differ between builds
        of unchanged sources (it carries the build date when the book has
        none).
    toc : str
        Combined table of contents.
    body : str
        Chapters in corpus order separated by page breaks.
    toc_entries : list[TocEntry]
        Per-chapter aggregates with manuscript-wide anchors.
    page_break : str
        Separator placed between chapters and after the table of contents.
    """

    front_matter: str
    toc: str
    body: str
    toc_entries: list[TocEntry]
    page_break: str = LATEX_PAGE_BREAK

    @property
    def text(self) -> str:
        """Return the full manuscript."""
        return (
            f"{self.front_matter}\n{self.toc}\n\n{self.page_break}\n\n{self.body}\n"
        )


def normalize_image_paths(content: str) -> str:
    """Rewrite ``../images/`` and ``src/images/`` references to ``images/``."""
    return IMAGE_REFERENCE_PATTERN.sub(r"![\1](images/\2)", content)


def _dump_yaml(payload: dict[str, typ.Any]) -> str:
    """Serialise ``payload`` as block-style YAML preserving key order."""
    dumper = YAML()
    dumper.default_flow_style = False
    dumper.width = 4096
    stream = io.StringIO()
    dumper.dump(payload, stream)
    return stream.getvalue()


def _resolve_date(book: LoadedBook, generated_at: dt.datetime | None) -> str:
    if book.metadata.date:
        return book.metadata.date
    moment = generated_at or dt.datetime.now(dt.UTC)
    return moment.date().isoformat()


def front_matter_block(book: LoadedBook, generated_at: dt.datetime | None = None) -> str:
    """Return the ``---``-delimited metadata block opening the manuscript."""
    metadata = book.metadata
    payload: dict[str, typ.Any] = {"title": metadata.title}
    if metadata.subtitle:
        payload["subtitle"] = metadata.subtitle
    if book.credits.names:
        payload["author"] = book.credits.names
    payload["date"] = _resolve_date(book, generated_at)
    payload["lang"] = metadata.language
    if metadata.description:
        payload["description"] = metadata.description
    return f"---\n{_dump_yaml(payload)}---\n"


def pandoc_metadata(book: LoadedBook, generated_at: dt.datetime | None = None) -> str:
    """Return the EPUB metadata YAML consumed by ``pandoc --epub-metadata``."""
    metadata = book.metadata
    payload: dict[str, typ.Any] = {
        "title": metadata.title,
        "author": book.credits.names,
        "date": _resolve_date(book, generated_at),
        "language": metadata.language,
        "description": metadata.description or "",
        "publisher": metadata.publisher or "",
        "rights": metadata.copyright or "",
    }
    if metadata.subtitle:
        payload["subtitle"] = metadata.subtitle
    if metadata.isbn:
        payload["identifier"] = metadata.isbn
    return _dump_yaml(payload)


def render_toc(entries: cabc.Sequence[TocEntry]) -> str:
    """Render the combined table of contents as a nested Markdown list.

    Chapters sit at the top level; sections are indented one step per level
    below two, so ``###`` headings nest under their ``##`` parent.
    """
    lines = [f"# {TOC_HEADING} {{#{TOC_ANCHOR} .unnumbered}}", ""]
    for entry in entries:
        lines.append(f"- [{entry.title}](#{entry.anchor_id})")
        lines.extend(
            f"{TOC_INDENT * (node.level - 1)}- [{node.text}](#{node.anchor_id})"
            for node in entry.sections
        )
    return "\n".join(lines)


def _rewrite_chapter_links(
    content: str,
    anchors: cabc.Mapping[str, str],
    fragments: cabc.Mapping[str, cabc.Mapping[str, str]],
) -> str:
    """Point ``NN-name.md[#frag]`` links at anchors in the manuscript.

    ``anchors`` maps a chapter slug to its title anchor and ``fragments``
    maps each slug to ``{page anchor: manuscript anchor}``; a fragment the
    chapter does not define is kept as written.
    """

    def _repl(match: re.Match[str]) -> str:
        slug, fragment = match.group(1), match.group(2)
        if slug not in anchors:
            return match.group(0)
        if not fragment:
            return f"](#{anchors[slug]})"
        target = fragment.removeprefix("#")
        return f"](#{fragments[slug].get(target, target)})"

    return CHAPTER_LINK_PATTERN.sub(_repl, content)


def _fragment_map(
    page_headings: cabc.Sequence[HeadingNode],
    manuscript_headings: cabc.Sequence[HeadingNode],
) -> dict[str, str]:
    """Map a chapter page's anchors to the anchors it got in the manuscript."""
    by_line = {node.line: node.anchor_id for node in manuscript_headings}
    return {
        node.anchor_id: by_line[node.line]
        for node in page_headings
        if node.line in by_line
    }


def _assemble_chapter(
    document: ChapterDocument, registry: AnchorRegistry
) -> tuple[str, TocEntry, dict[str, str]]:
    """Anchor one chapter against the shared registry."""
    content = normalize_image_paths(document.chapter.raw_content)
    headings = extract_headings(content, registry)
    anchored = anchor_markdown(content, headings).strip("\n")
    title_node = next((node for node in headings if node.level == 1), None)
    if title_node is None:
        chapter_anchor = registry.claim(document.slug)
        anchored = f'<a id="{chapter_anchor}"></a>\n\n{anchored}'
    else:
        chapter_anchor = title_node.anchor_id
    entry = build_toc_entry(document.chapter, headings, anchor_id=chapter_anchor)
    return anchored, entry, _fragment_map(document.headings, headings)


def assemble_flat_manuscript(
    book: LoadedBook,
    *,
    page_break: str = LATEX_PAGE_BREAK,
    generated_at: dt.datetime | None = None,
) -> FlatManuscript:
    """Combine every chapter of ``book`` into one :class:`FlatManuscript`.

    Parameters
    ----------
    book : LoadedBook
        Loaded book from :class:`~bookwright.assembler.BookPipeline`.
    page_break : str, optional
        Separator between chapters; ``\\newpage`` for pandoc, an HTML
        ``page-break`` block for HTML intermediates.
    generated_at : datetime, optional
        Timestamp used for the metadata date when the book has none.

    Returns
    -------
    FlatManuscript
        Combined manuscript. Apart from the metadata date, assembling the
        same book twice yields identical text.
    """
    registry = AnchorRegistry([TOC_ANCHOR])
    chapter_texts: list[str] = []
    entries: list[TocEntry] = []
    anchors: dict[str, str] = {}
    fragments: dict[str, dict[str, str]] = {}
    for document in book.documents:
        text, entry, fragment_map = _assemble_chapter(document, registry)
        chapter_texts.append(text)
        entries.append(entry)
        anchors[document.slug] = entry.anchor_id
        fragments[document.slug] = fragment_map

    separator = f"\n\n{page_break}\n\n"
    body = separator.join(_rewrite_chapter_links(text, anchors, fragments) for text in chapter_texts)
    return FlatManuscript(
        front_matter=front_matter_block(book, generated_at),
        toc=render_toc(entries),
        body=body,
        toc_entries=entries,
        page_break=page_break,
    )


def write_flat_manuscript(manuscript: FlatManuscript, path: Path) -> Path:
    """Write ``manuscript`` to ``path`` and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manuscript.text, encoding="utf-8")
    return path


__all__ = [
    "HTML_PAGE_BREAK",
    "LATEX_PAGE_BREAK",
    "FlatManuscript",
    "assemble_flat_manuscript",
    "front_matter_block",
    "normalize_image_paths",
    "pandoc_metadata",
    "render_toc",
    "write_flat_manuscript",
]
