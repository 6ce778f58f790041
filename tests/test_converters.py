"""Tests for converter chains and the PDF and EPUB targets.

External converters are never executed: a fake ``which`` decides what is
"installed" and a fake runner records each command and writes (or refuses
to write) the requested target.
"""

from __future__ import annotations

import subprocess
import tempfile
import typing as typ
from pathlib import Path

import pytest

from bookwright.converters import (
    ConversionStatus,
    Converter,
    SourceKind,
    book_filename,
    build_ebook,
    build_pdf,
    resolve_cover_image,
    run_converter_chain,
)
from bookwright.errors import ConversionError

if typ.TYPE_CHECKING:
    from bookwright.assembler import LoadedBook


def _target_of(args: list[str]) -> Path:
    if "-o" in args:
        return Path(args[args.index("-o") + 1])
    return Path(args[2] if args[0].endswith("ebook-convert") else args[-1])


class FakeRunner:
    """Record commands; write the target unless the executable should fail."""

    def __init__(self, failing: tuple[str, ...] = (), silent: tuple[str, ...] = ()) -> None:
        self.failing = failing
        self.silent = silent
        self.commands: list[list[str]] = []

    def __call__(self, args: list[str]) -> None:
        self.commands.append(args)
        name = Path(args[0]).name
        if name in self.failing:
            raise subprocess.CalledProcessError(1, args, stderr="boom")
        if name not in self.silent:
            _target_of(args).write_text(f"made by {name}", encoding="utf-8")


def _which(*installed: str) -> typ.Callable[[str], str | None]:
    return lambda name: f"/usr/bin/{name}" if name in installed else None


@pytest.fixture
def private_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect ``tempfile`` so leftover working directories can be detected."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


ALPHA = Converter("alpha", "alpha", ("{source}", "-o", "{target}"))
BETA = Converter("beta", "beta", ("{source}", "-o", "{target}"))
GAMMA = Converter("gamma", "gamma", ("{source}", "-o", "{target}"))


def test_chain_falls_through_to_first_working_converter(tmp_path: Path) -> None:
    source = tmp_path / "in.md"
    source.write_text("text", encoding="utf-8")
    runner = FakeRunner(failing=("beta",))
    report = run_converter_chain(
        [ALPHA, BETA, GAMMA],
        source,
        tmp_path / "out.pdf",
        runner=runner,
        which=_which("beta", "gamma"),
    )
    assert report.status is ConversionStatus.CONVERTED
    assert report.converter == "gamma"
    assert report.artifact == tmp_path / "out.pdf"
    assert [(a.converter, a.succeeded) for a in report.attempts] == [
        ("alpha", False),
        ("beta", False),
        ("gamma", True),
    ]
    assert report.attempts[0].detail == "not installed"
    assert runner.commands[-1] == ["/usr/bin/gamma", str(source), "-o", str(tmp_path / "out.pdf")]


def test_chain_degrades_to_fallback(tmp_path: Path) -> None:
    fallback = tmp_path / "book.html"
    fallback.write_text("<html></html>", encoding="utf-8")
    report = run_converter_chain(
        [ALPHA, BETA],
        fallback,
        tmp_path / "book.pdf",
        runner=FakeRunner(failing=("alpha",), silent=("beta",)),
        which=_which("alpha", "beta"),
        fallback=fallback,
    )
    assert report.status is ConversionStatus.DEGRADED
    assert report.artifact == fallback
    assert [a.detail for a in report.attempts][1] == "no output"
    assert not (tmp_path / "book.pdf").exists()


def test_chain_without_fallback_raises(tmp_path: Path) -> None:
    with pytest.raises(ConversionError, match="No converter could produce"):
        run_converter_chain(
            [ALPHA], tmp_path / "in.md", tmp_path / "out.pdf", runner=FakeRunner(), which=_which()
        )


def test_chain_skips_converters_without_matching_input(tmp_path: Path) -> None:
    html_only = Converter("html-tool", "html-tool", ("{source}", "{target}"), SourceKind.HTML)
    source = tmp_path / "in.md"
    report = run_converter_chain(
        [html_only, ALPHA],
        {SourceKind.MARKDOWN: source},
        tmp_path / "out.pdf",
        runner=FakeRunner(),
        which=_which("html-tool", "alpha"),
    )
    assert report.converter == "alpha"
    assert report.attempts[0].detail == "no input"


def test_book_filename() -> None:
    assert book_filename("A Field Guide!") == "a-field-guide"
    assert book_filename("???") == "book"


def test_pdf_degrades_to_html_when_nothing_is_installed(
    loaded_book: LoadedBook, tmp_path: Path, private_tmp: Path
) -> None:
    dist = tmp_path / "dist"
    report = build_pdf(loaded_book, dist, runner=FakeRunner(), which=_which())
    html_path = dist / "a-field-guide.html"
    assert report.status is ConversionStatus.DEGRADED
    assert report.fallback == html_path
    html = html_path.read_text(encoding="utf-8")
    assert '<section class="title-page">' in html
    assert '<div class="page-break"></div>' in html
    assert 'id="summary-2"' in html
    assert (dist / "images" / "map.png").is_file()
    assert list(private_tmp.iterdir()) == []


def test_pdf_uses_markdown_converter_and_cleans_up(
    loaded_book: LoadedBook, tmp_path: Path, private_tmp: Path
) -> None:
    runner = FakeRunner()
    report = build_pdf(loaded_book, tmp_path / "dist", runner=runner, which=_which("pandoc"))
    assert report.status is ConversionStatus.CONVERTED
    assert report.converter == "pandoc"
    (command,) = runner.commands
    assert not any(arg.startswith("--toc") for arg in command)
    assert "--variable=papersize:a4" in command
    resource = next(arg for arg in command if arg.startswith("--resource-path="))
    workdir = Path(resource.removeprefix("--resource-path="))
    assert workdir.parent == private_tmp
    assert not workdir.exists()
    assert list(private_tmp.iterdir()) == []


def test_pdf_cleans_up_after_failure(
    loaded_book: LoadedBook, tmp_path: Path, private_tmp: Path
) -> None:
    runner = FakeRunner(failing=("weasyprint", "pandoc"))
    report = build_pdf(
        loaded_book, tmp_path / "dist", runner=runner, which=_which("weasyprint", "pandoc")
    )
    assert report.status is ConversionStatus.DEGRADED
    assert [a.converter for a in report.attempts if a.detail not in {"not installed"}] == [
        "weasyprint",
        "pandoc",
    ]
    assert list(private_tmp.iterdir()) == []


def test_ebook_degrades_without_pandoc(loaded_book: LoadedBook, tmp_path: Path) -> None:
    out = tmp_path / "kindle"
    epub, mobi = build_ebook(loaded_book, out, runner=FakeRunner(), which=_which())
    assert epub.status is ConversionStatus.DEGRADED
    assert epub.artifact == out / "book.md"
    assert mobi.status is ConversionStatus.SKIPPED
    assert (out / "metadata.yaml").is_file()
    assert (out / "epub.css").is_file()
    assert (out / "images" / "map.png").is_file()


def test_ebook_builds_epub_and_mobi(loaded_book: LoadedBook, tmp_path: Path) -> None:
    cover = loaded_book.project.images_dir / "cover.png"
    cover.write_bytes(b"png")
    out = tmp_path / "kindle"
    runner = FakeRunner()
    epub, mobi = build_ebook(
        loaded_book, out, runner=runner, which=_which("pandoc", "ebook-convert")
    )
    assert epub.status is ConversionStatus.CONVERTED
    assert mobi.status is ConversionStatus.CONVERTED
    pandoc_command, calibre_command = runner.commands
    assert "--to=epub3" in pandoc_command
    assert f"--epub-metadata={out / 'metadata.yaml'}" in pandoc_command
    assert f"--epub-cover-image={cover}" in pandoc_command
    assert calibre_command[1:3] == [str(out / "book.epub"), str(out / "book.mobi")]


def test_ebook_skips_mobi_without_calibre(loaded_book: LoadedBook, tmp_path: Path) -> None:
    _epub, mobi = build_ebook(
        loaded_book, tmp_path / "kindle", runner=FakeRunner(), which=_which("pandoc")
    )
    assert mobi.status is ConversionStatus.SKIPPED
    assert mobi.artifact is None


def test_cover_lookup(loaded_book: LoadedBook) -> None:
    assert resolve_cover_image(loaded_book) is None
    (loaded_book.project.images_dir / "cover-front.jpg").write_bytes(b"jpg")
    assert resolve_cover_image(loaded_book) == loaded_book.project.images_dir / "cover-front.jpg"
    loaded_book.metadata.cover_image = "src/images/missing.png"
    assert resolve_cover_image(loaded_book) is None


def test_pdf_page_size_reaches_both_renderers(
    loaded_book: LoadedBook, tmp_path: Path, private_tmp: Path
) -> None:
    loaded_book.metadata.pdf.page_size = "Letter"
    runner = FakeRunner(failing=("pandoc",))
    dist = tmp_path / "dist"
    build_pdf(loaded_book, dist, runner=runner, which=_which("pandoc"))
    (command,) = runner.commands
    assert "--variable=papersize:letter" in command
    html = (dist / "a-field-guide.html").read_text(encoding="utf-8")
    assert "@page { size: Letter; }" in html
