"""Hand flat manuscripts to external document converters.

PDF and EPUB rendering are delegated to whichever converters are installed.
Each target tries a preference-ordered chain of :class:`Converter` entries
and falls through on failure; when nothing succeeds the build reports
:attr:`ConversionStatus.DEGRADED` and points at the artifact that was still
produced (the HTML intermediate for PDF, the flat manuscript for EPUB)
instead of pretending the target succeeded.

Example
-------
>>> from pathlib import Path
>>> from bookwright.converters import PANDOC_EPUB
>>> PANDOC_EPUB.build_command(Path("book.md"), Path("book.epub"), "pandoc")[:3]
['pandoc', '--from=markdown+smart', '--to=epub3']
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import re
import shutil
import subprocess
import tempfile
import typing as typ
from pathlib import Path

from ._constants import IMAGES_DIR
from .assembler.manuscript import (
    HTML_PAGE_BREAK,
    assemble_flat_manuscript,
    pandoc_metadata,
    write_flat_manuscript,
)
from .assembler.templating import ASSETS_DIR, build_environment, render_template
from .errors import ConversionError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .assembler.models import LoadedBook

logger = logging.getLogger(__name__)

Runner = typ.Callable[[list[str]], object]
Which = typ.Callable[[str], str | None]

FILENAME_INVALID = re.compile(r"[^a-z0-9]+")
COVER_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")


class ConversionStatus(enum.StrEnum):
    """Outcome of one conversion step."""

    CONVERTED = "converted"
    DEGRADED = "degraded"
    SKIPPED = "skipped"


class SourceKind(enum.StrEnum):
    """Which intermediate a converter consumes."""

    HTML = "html"
    MARKDOWN = "markdown"


@dc.dataclass(frozen=True, slots=True)
class Converter:
    """An external converter invoked as ``executable <arguments>``.

    ``arguments`` may reference ``{source}`` and ``{target}``.
    """

    name: str
    executable: str
    arguments: tuple[str, ...]
    source_kind: SourceKind = SourceKind.MARKDOWN

    def available(self, which: Which = shutil.which) -> bool:
        return which(self.executable) is not None

    def build_command(
        self, source: Path, target: Path, executable: str | None = None
    ) -> list[str]:
        """Return the argument vector converting ``source`` into ``target``."""
        values = {"source": str(source), "target": str(target)}
        return [
            executable or self.executable,
            *(argument.format(**values) for argument in self.arguments),
        ]

    def with_arguments(self, *extra: str) -> Converter:
        """Return a copy with ``extra`` appended to the argument template."""
        return dc.replace(self, arguments=(*self.arguments, *extra))


@dc.dataclass(frozen=True, slots=True)
class ConversionAttempt:
    """One converter tried within a chain."""

    converter: str
    succeeded: bool
    detail: str = ""


@dc.dataclass(slots=True)
class ConversionReport:
    """Outcome of a converter chain.

    Attributes
    ----------
    status : ConversionStatus
        ``CONVERTED`` when a converter produced ``target``; ``DEGRADED``
        when only ``fallback`` exists; ``SKIPPED`` when the step was not
        attempted.
    target : Path
        Requested artifact.
    converter : str or None
        Name of the converter that produced ``target``.
    attempts : list[ConversionAttempt]
        Every converter tried, in order.
    fallback : Path or None
        Artifact retained when conversion degraded.
    """

    status: ConversionStatus
    target: Path
    converter: str | None = None
    attempts: list[ConversionAttempt] = dc.field(default_factory=list)
    fallback: Path | None = None

    @property
    def artifact(self) -> Path | None:
        """Return the file this step actually left behind."""
        match self.status:
            case ConversionStatus.CONVERTED:
                return self.target
            case ConversionStatus.DEGRADED:
                return self.fallback
            case _:
                return None


WEASYPRINT = Converter(
    "weasyprint", "weasyprint", ("{source}", "{target}"), SourceKind.HTML
)
WKHTMLTOPDF = Converter(
    "wkhtmltopdf",
    "wkhtmltopdf",
    ("--enable-local-file-access", "{source}", "{target}"),
    SourceKind.HTML,
)
PRINCE = Converter("prince", "prince", ("{source}", "-o", "{target}"), SourceKind.HTML)
PANDOC_PDF = Converter(
    "pandoc",
    "pandoc",
    (
        "{source}",
        "-o",
        "{target}",
        "--number-sections",
        "--variable=geometry:margin=1in",
        "--variable=fontsize:11pt",
    ),
)
PANDOC_EPUB = Converter(
    "pandoc",
    "pandoc",
    ("--from=markdown+smart", "--to=epub3", "--standalone", "-o", "{target}", "{source}"),
)
EBOOK_CONVERT = Converter(
    "ebook-convert", "ebook-convert", ("{source}", "{target}", "--pretty-print")
)
PDF_CONVERTERS = (WEASYPRINT, WKHTMLTOPDF, PRINCE, PANDOC_PDF)


def run_command(args: list[str]) -> subprocess.CompletedProcess[str]:
    """Run a converter, raising ``CalledProcessError`` on failure."""
    return subprocess.run(  # noqa: S603
        args,
        check=True,
        text=True,
        capture_output=True,
    )


def _select_source(
    converter: Converter, sources: Path | cabc.Mapping[SourceKind, Path]
) -> Path | None:
    if isinstance(sources, Path):
        return sources
    return sources.get(converter.source_kind)


def run_converter_chain(
    converters: cabc.Sequence[Converter],
    sources: Path | cabc.Mapping[SourceKind, Path],
    target: Path,
    *,
    runner: Runner = run_command,
    which: Which = shutil.which,
    fallback: Path | None = None,
) -> ConversionReport:
    """Try ``converters`` in order until one produces ``target``.

    Parameters
    ----------
    converters : Sequence[Converter]
        Converters in preference order.
    sources : Path or Mapping[SourceKind, Path]
        Input file, or one input per :class:`SourceKind`.
    target : Path
        Artifact to produce.
    runner : Callable, optional
        Executes an argument vector; must raise on failure.
    which : Callable, optional
        Resolves an executable name to a path, ``None`` when not installed.
    fallback : Path, optional
        Artifact to report when every converter fails.

    Returns
    -------
    ConversionReport
        ``CONVERTED`` or ``DEGRADED``.

    Raises
    ------
    ConversionError
        If every converter failed and there is no fallback artifact.
    """
    attempts: list[ConversionAttempt] = []
    for converter in converters:
        source = _select_source(converter, sources)
        executable = which(converter.executable)
        if executable is None or source is None:
            reason = "not installed" if executable is None else "no input"
            logger.info("skipping %s: %s", converter.name, reason)
            attempts.append(ConversionAttempt(converter.name, succeeded=False, detail=reason))
            continue
        command = converter.build_command(source, target, executable)
        logger.info("converting %s with %s", target.name, converter.name)
        try:
            runner(command)
        except (subprocess.CalledProcessError, OSError) as exc:
            logger.warning("%s failed: %s", converter.name, exc)
            attempts.append(ConversionAttempt(converter.name, succeeded=False, detail=str(exc)))
            continue
        if not target.exists():
            logger.warning("%s exited cleanly but wrote no %s", converter.name, target)
            attempts.append(
                ConversionAttempt(converter.name, succeeded=False, detail="no output")
            )
            continue
        attempts.append(ConversionAttempt(converter.name, succeeded=True))
        return ConversionReport(
            status=ConversionStatus.CONVERTED,
            target=target,
            converter=converter.name,
            attempts=attempts,
        )

    if fallback is None or not fallback.exists():
        msg = f"No converter could produce {target} and no fallback artifact exists."
        raise ConversionError(msg)
    logger.warning("no converter produced %s; keeping %s", target.name, fallback)
    return ConversionReport(
        status=ConversionStatus.DEGRADED,
        target=target,
        attempts=attempts,
        fallback=fallback,
    )


def book_filename(title: str) -> str:
    """Return a filesystem-friendly stem derived from the book title."""
    return FILENAME_INVALID.sub("-", title.lower()).strip("-") or "book"


def resolve_cover_image(book: LoadedBook) -> Path | None:
    """Return the configured cover, or an image named ``cover*``; ``None`` if absent."""
    project = book.project
    configured = book.metadata.resolved_cover
    if configured:
        path = project.resolve_asset(configured)
        if path.is_file():
            return path
        logger.warning("configured cover image %s does not exist", path)
        return None
    if not project.images_dir.is_dir():
        return None
    candidates = sorted(
        entry
        for entry in project.images_dir.iterdir()
        if entry.is_file()
        and entry.stem.lower().startswith("cover")
        and entry.suffix.lower() in COVER_SUFFIXES
    )
    return candidates[0] if candidates else None


def _copy_images(book: LoadedBook, destination: Path) -> None:
    source = book.project.images_dir
    if source.is_dir():
        shutil.copytree(source, destination / "images", dirs_exist_ok=True)
    else:
        logger.debug("no %s directory to copy", IMAGES_DIR)


def render_manuscript_html(
    book: LoadedBook, *, generated_at: dt.datetime | None = None
) -> str:
    """Render the flat manuscript as a standalone print-styled HTML page."""
    manuscript = assemble_flat_manuscript(
        book, page_break=HTML_PAGE_BREAK, generated_at=generated_at
    )
    body_html = book.renderer.markdown(
        f"{manuscript.toc}\n\n{HTML_PAGE_BREAK}\n\n{manuscript.body}"
    )
    return render_template(
        build_environment(),
        "manuscript_page.jinja",
        book=book.metadata,
        credits=book.credits,
        body_html=body_html,
        print_css=(ASSETS_DIR / "pdf.css").read_text(encoding="utf-8"),
        pygments_css=book.renderer.stylesheet,
    )


def build_pdf(
    book: LoadedBook,
    dist_dir: Path | None = None,
    *,
    runner: Runner = run_command,
    which: Which = shutil.which,
    converters: cabc.Sequence[Converter] = PDF_CONVERTERS,
    generated_at: dt.datetime | None = None,
) -> ConversionReport:
    """Produce ``dist/<title>.pdf``, keeping the HTML intermediate.

    The flat Markdown manuscript and a copy of the images are written to a
    scoped temporary directory that is removed whether conversion succeeds
    or fails. The HTML intermediate is rendered in-process and always kept
    next to the PDF so a readable artifact exists even when no converter is
    installed.
    """
    dist = dist_dir or book.project.dist_dir
    dist.mkdir(parents=True, exist_ok=True)
    stem = book_filename(book.metadata.title)
    html_path = dist / f"{stem}.html"
    pdf_path = dist / f"{stem}.pdf"

    html_path.write_text(
        render_manuscript_html(book, generated_at=generated_at), encoding="utf-8"
    )
    _copy_images(book, dist)

    workdir = Path(tempfile.mkdtemp(prefix="bookwright-pdf-"))
    try:
        manuscript = assemble_flat_manuscript(book, generated_at=generated_at)
        markdown_path = write_flat_manuscript(manuscript, workdir / "book.md")
        _copy_images(book, workdir)
        chain = [
            converter.with_arguments(
                f"--resource-path={workdir}",
                f"--variable=papersize:{book.metadata.pdf.page_size.lower()}",
            )
            if converter.source_kind is SourceKind.MARKDOWN
            else converter
            for converter in converters
        ]
        return run_converter_chain(
            chain,
            {SourceKind.HTML: html_path, SourceKind.MARKDOWN: markdown_path},
            pdf_path,
            runner=runner,
            which=which,
            fallback=html_path,
        )
    finally:
        shutil.rmtree(workdir, ignore_errors=True)


def build_ebook(
    book: LoadedBook,
    build_dir: Path | None = None,
    *,
    runner: Runner = run_command,
    which: Which = shutil.which,
    generated_at: dt.datetime | None = None,
) -> list[ConversionReport]:
    """Produce ``book.epub`` and, when Calibre is installed, ``book.mobi``.

    Returns
    -------
    list[ConversionReport]
        The EPUB report followed by the MOBI report. MOBI is ``SKIPPED``
        when ``ebook-convert`` is missing or the EPUB step degraded.
    """
    out = build_dir or book.project.ebook_dir
    out.mkdir(parents=True, exist_ok=True)
    manuscript = assemble_flat_manuscript(book, generated_at=generated_at)
    markdown_path = write_flat_manuscript(manuscript, out / "book.md")
    metadata_path = out / "metadata.yaml"
    metadata_path.write_text(pandoc_metadata(book, generated_at), encoding="utf-8")
    _copy_images(book, out)

    css_path = out / "epub.css"
    custom_css = book.metadata.ebook.css
    css_source = book.project.resolve_asset(custom_css) if custom_css else ASSETS_DIR / "epub.css"
    shutil.copyfile(css_source, css_path)

    epub = PANDOC_EPUB.with_arguments(
        f"--epub-metadata={metadata_path}",
        f"--css={css_path}",
        f"--resource-path={out}",
    )
    cover = resolve_cover_image(book)
    if cover is not None:
        epub = epub.with_arguments(f"--epub-cover-image={cover}")
    else:
        logger.info("no cover image found; building EPUB without a cover")

    epub_path = out / "book.epub"
    epub_report = run_converter_chain(
        [epub], markdown_path, epub_path, runner=runner, which=which, fallback=markdown_path
    )

    mobi_path = out / "book.mobi"
    if epub_report.status is not ConversionStatus.CONVERTED:
        mobi_report = ConversionReport(status=ConversionStatus.SKIPPED, target=mobi_path)
    elif not EBOOK_CONVERT.available(which):
        logger.info("ebook-convert not installed; skipping MOBI")
        mobi_report = ConversionReport(status=ConversionStatus.SKIPPED, target=mobi_path)
    else:
        mobi_report = run_converter_chain(
            [EBOOK_CONVERT], epub_path, mobi_path, runner=runner, which=which, fallback=epub_path
        )
    return [epub_report, mobi_report]


__all__ = [
    "EBOOK_CONVERT",
    "PANDOC_EPUB",
    "PANDOC_PDF",
    "PDF_CONVERTERS",
    "PRINCE",
    "WEASYPRINT",
    "WKHTMLTOPDF",
    "ConversionAttempt",
    "ConversionReport",
    "ConversionStatus",
    "Converter",
    "SourceKind",
    "book_filename",
    "build_ebook",
    "build_pdf",
    "render_manuscript_html",
    "resolve_cover_image",
    "run_command",
    "run_converter_chain",
]
