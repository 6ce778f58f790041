"""Cyclopts CLI entrypoint for building and checking a book project.

The ``bookwright`` console script defined here renders the website, flat
manuscript, platform bundle, PDF, and EPUB targets from a project's
``src/`` tree, validates the project structure, and reports word counts.

Exit status is ``0`` on success, ``1`` when the project is structurally
unusable (or validation finds errors), and ``2`` when a converter-backed
target degraded to its fallback artifact.

Examples
--------
Build every target for the project in the current directory:

>>> from bookwright.cli import main
>>> main()  # doctest: +SKIP

Build only the website into a custom directory:

>>> from bookwright.cli import app
>>> app(["build", "--target", "web", "--output-dir", "site"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .assembler import (
    BookPipeline,
    WebSiteBuilder,
    assemble_bundle,
    assemble_flat_manuscript,
    write_bundle,
    write_flat_manuscript,
)
from .config import BookProject
from .converters import ConversionReport, ConversionStatus, build_ebook, build_pdf
from .corpus import load_corpus
from .errors import ConversionError, StructuralError
from .stats import corpus_stats
from .validation import validate_book

if typ.TYPE_CHECKING:
    from .assembler import LoadedBook

BuildTarget = typ.Literal["web", "manuscript", "bundle", "pdf", "epub", "all"]
TARGET_ORDER: tuple[str, ...] = ("web", "manuscript", "bundle", "pdf", "epub")
EXIT_STRUCTURAL = 1
EXIT_DEGRADED = 2

app = App(name="bookwright", config=cyclopts.config.Env("BOOKWRIGHT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _report_conversion(report: ConversionReport) -> bool:
    """Print one conversion outcome and return ``True`` when it degraded."""
    match report.status:
        case ConversionStatus.CONVERTED:
            print(f"wrote {_format_path(report.target)} ({report.converter})")
        case ConversionStatus.DEGRADED:
            tried = ", ".join(attempt.converter for attempt in report.attempts)
            fallback = _format_path(report.fallback) if report.fallback else "nothing"
            print(
                f"degraded {_format_path(report.target)}: no converter succeeded"
                f" (tried {tried or 'none'}); kept {fallback}"
            )
            return True
        case ConversionStatus.SKIPPED:
            print(f"skipped {_format_path(report.target)}")
    return False


def _build_target(name: str, book: LoadedBook, output_dir: Path | None) -> bool:
    """Build one target, printing artifacts; return ``True`` when degraded."""
    project = book.project
    match name:
        case "web":
            for path in WebSiteBuilder(book, output_dir).run():
                print(f"wrote {_format_path(path)}")
        case "manuscript":
            target = (output_dir or project.dist_dir) / "manuscript.md"
            written = write_flat_manuscript(assemble_flat_manuscript(book), target)
            print(f"wrote {_format_path(written)}")
        case "bundle":
            bundle = assemble_bundle(book)
            for path in write_bundle(bundle, book, output_dir or project.bundle_dir):
                print(f"wrote {_format_path(path)}")
        case "pdf":
            return _report_conversion(build_pdf(book, output_dir))
        case "epub":
            reports = build_ebook(book, output_dir)
            return any([_report_conversion(report) for report in reports])
    return False


@app.command(help="Build one output target, or all of them.")
def build(
    *,
    target: typ.Annotated[
        BuildTarget, Parameter(help="Target to build", env_var="BOOKWRIGHT_TARGET")
    ] = "all",
    project: typ.Annotated[
        Path, Parameter(help="Book project root", env_var="BOOKWRIGHT_PROJECT")
    ] = Path(),
    output_dir: typ.Annotated[
        Path | None,
        Parameter(
            help="Override the output folder (single target only)",
            env_var="BOOKWRIGHT_OUTPUT_DIR",
        ),
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log converter activity")] = False,
) -> None:
    """Build the requested targets for a book project.

    Parameters
    ----------
    target : {"web", "manuscript", "bundle", "pdf", "epub", "all"}, optional
        Target to build; ``"all"`` (default) builds every target in order.
    project : Path, optional
        Project root containing ``src/``; defaults to the current directory.
    output_dir : Path or None, optional
        Output directory override; only valid for a single target.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    ValueError
        If ``output_dir`` is combined with ``target="all"``.
    SystemExit
        With status 1 on structural or conversion errors and 2 when a
        converter-backed target degraded.
    """
    _configure_logging(verbose)
    if target == "all" and output_dir is not None:
        msg = "Cannot override output_dir when building every target."
        raise ValueError(msg)

    targets = TARGET_ORDER if target == "all" else (target,)
    try:
        book = BookPipeline(BookProject.at(project)).load()
        degraded = [name for name in targets if _build_target(name, book, output_dir)]
    except (StructuralError, ConversionError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(EXIT_STRUCTURAL) from exc

    if degraded:
        print(f"partial failure: {', '.join(degraded)} degraded", file=sys.stderr)
        raise SystemExit(EXIT_DEGRADED)


@app.command(help="Check the project structure, metadata, chapters, and images.")
def validate(
    *,
    project: typ.Annotated[
        Path, Parameter(help="Book project root", env_var="BOOKWRIGHT_PROJECT")
    ] = Path(),
) -> None:
    """Print a validation report; exit with status 1 when errors exist."""
    report = validate_book(BookProject.at(project))
    print("Validation Report")
    print("=" * 50)
    print(f"{report.chapter_count} chapter(s), {report.image_count} image(s)")
    if report.ok and not report.warnings:
        print("All checks passed.")
    if report.errors:
        print("Errors:")
        for error in report.errors:
            print(f"  - {error}")
    if report.warnings:
        print("Warnings:")
        for warning in report.warnings:
            print(f"  - {warning}")
    if not report.ok:
        raise SystemExit(EXIT_STRUCTURAL)


@app.command(help="Report per-chapter word counts and reading estimates.")
def wordcount(
    *,
    project: typ.Annotated[
        Path, Parameter(help="Book project root", env_var="BOOKWRIGHT_PROJECT")
    ] = Path(),
) -> None:
    """Print a word-count table, total, reading time, and page estimate."""
    book_project = BookProject.at(project)
    try:
        chapters = load_corpus(book_project.chapters_dir)
    except StructuralError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(EXIT_STRUCTURAL) from exc

    stats = corpus_stats(chapters)
    print("Word Count Report")
    print("=" * 50)
    for index, entry in enumerate(stats.chapters, start=1):
        print(f"{index:>2}. {entry.title:<30} {entry.words:>6} words")
    print("=" * 50)
    print(f"Total: {stats.total_words:,} words")
    print(f"Estimated reading time: {stats.reading_time}")
    print(f"Estimated pages: {stats.estimated_pages}")


def main() -> None:
    """Run the bookwright CLI."""
    app()


__all__ = ["app", "build", "main", "validate", "wordcount"]
