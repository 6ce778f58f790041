"""Tests for chapter discovery and ordering."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

import pytest

from bookwright.corpus import (
    broken_image_references,
    extract_title,
    has_conventional_name,
    load_corpus,
    order_chapter_files,
)
from bookwright.errors import StructuralError


@dc.dataclass
class MemorySource:
    files: dict[str, str]
    present: bool = True

    def exists(self) -> bool:
        return self.present

    def list_names(self) -> list[str]:
        return list(self.files)

    def read_text(self, name: str) -> str:
        return self.files[name]


def test_order_is_lexical_and_ignores_other_files() -> None:
    names = ["10-late.md", ".hidden.md", "02-body.markdown", "notes.txt", "01-intro.md"]
    assert order_chapter_files(names) == ["01-intro.md", "02-body.markdown", "10-late.md"]


def test_load_corpus_assigns_order_slug_and_title() -> None:
    source = MemorySource(
        {
            "02-body.md": "Intro text\n\n# The Body {#body}\n",
            "01-intro.md": "# Getting Started ##\n\nHello.\n",
        }
    )
    chapters = load_corpus(source)
    assert [(c.order, c.slug, c.title) for c in chapters] == [
        (1, "01-intro", "Getting Started"),
        (2, "02-body", "The Body"),
    ]
    assert chapters[0].filename == "01-intro.md"
    assert chapters[0].raw_content.startswith("# Getting Started")


def test_load_corpus_is_independent_of_listing_order() -> None:
    files = {"03-c.md": "# C\n", "01-a.md": "# A\n", "02-b.md": "# B\n"}
    forward = load_corpus(MemorySource(files))
    backward = load_corpus(MemorySource(dict(reversed(list(files.items())))))
    assert [c.slug for c in forward] == [c.slug for c in backward] == ["01-a", "02-b", "03-c"]


def test_title_falls_back_to_slug() -> None:
    assert extract_title("No heading here.\n## Only a section\n", "05-misc") == "05-misc"


def test_empty_directory_yields_no_chapters(tmp_path: Path) -> None:
    (tmp_path / "chapters").mkdir()
    assert load_corpus(tmp_path / "chapters") == []


def test_missing_directory_is_structural_error(tmp_path: Path) -> None:
    with pytest.raises(StructuralError, match="Missing chapter directory"):
        load_corpus(tmp_path / "absent")


def test_duplicate_slug_is_structural_error() -> None:
    source = MemorySource({"01-a.md": "# A\n", "01-a.markdown": "# A again\n"})
    with pytest.raises(StructuralError, match="share the slug '01-a'"):
        load_corpus(source)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("01-intro.md", True), ("intro.md", False), ("1-intro.md", False)],
)
def test_conventional_name(name: str, expected: bool) -> None:
    assert has_conventional_name(name) is expected


def test_title_skips_fenced_code() -> None:
    content = "```bash\n# install deps\n```\n\n# Real Title {#custom}\n"
    assert extract_title(content, "01-setup") == "Real Title"
    assert extract_title("~~~\n# only a comment\n~~~\n", "01-setup") == "01-setup"


def test_broken_image_references(tmp_path: Path) -> None:
    (tmp_path / "map.png").write_bytes(b"png")
    content = (
        "![Map](../images/map.png)\n"
        "![Gone](../images/gone.png)\n"
        "![Remote](https://example.com/x.png)\n"
    )
    assert broken_image_references(content, tmp_path) == ["../images/gone.png"]
