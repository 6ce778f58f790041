"""Tests for the flat manuscript used by the PDF and EPUB converters."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ

from ruamel.yaml import YAML

from bookwright.assembler import BookPipeline, assemble_flat_manuscript, write_flat_manuscript
from bookwright.assembler.manuscript import HTML_PAGE_BREAK, LATEX_PAGE_BREAK, pandoc_metadata
from bookwright.config import BookProject

if typ.TYPE_CHECKING:
    from pathlib import Path

    from bookwright.assembler import LoadedBook

GENERATED_AT = dt.datetime(2025, 3, 1, 12, 0, tzinfo=dt.UTC)


def _front_matter(text: str) -> dict[str, typ.Any]:
    _, block, _ = text.split("---\n", 2)
    return YAML(typ="safe").load(block)


def test_anchors_are_unique_across_chapters(loaded_book: LoadedBook) -> None:
    manuscript = assemble_flat_manuscript(loaded_book)
    assert [entry.anchor_id for entry in manuscript.toc_entries] == [
        "introduction",
        "setup",
        "wrap-up",
    ]
    setup_sections = manuscript.toc_entries[1].sections
    assert [node.anchor_id for node in setup_sections] == ["install", "details", "summary-2"]
    assert "## Summary {#summary}" in manuscript.body
    assert "## Summary {#summary-2}" in manuscript.body


def test_page_breaks_separate_toc_and_chapters(loaded_book: LoadedBook) -> None:
    manuscript = assemble_flat_manuscript(loaded_book)
    assert manuscript.text.count(LATEX_PAGE_BREAK) == 3
    html_variant = assemble_flat_manuscript(loaded_book, page_break=HTML_PAGE_BREAK)
    assert html_variant.text.count(HTML_PAGE_BREAK) == 3
    assert LATEX_PAGE_BREAK not in html_variant.text


def test_toc_nests_sections_under_chapters(loaded_book: LoadedBook) -> None:
    toc = assemble_flat_manuscript(loaded_book).toc.splitlines()
    assert toc[0] == "# Table of Contents {#table-of-contents .unnumbered}"
    assert toc[2:] == [
        "- [Introduction](#introduction)",
        "    - [Summary](#summary)",
        "- [Setup](#setup)",
        "    - [Install](#install)",
        "        - [Details](#details)",
        "    - [Summary](#summary-2)",
        "- [Wrap Up](#wrap-up)",
    ]


def test_image_paths_and_chapter_links_are_rewritten(loaded_book: LoadedBook) -> None:
    body = assemble_flat_manuscript(loaded_book).body
    assert "![Trail map](images/map.png)" in body
    assert "../images/" not in body
    assert "[the setup chapter](#setup)" in body
    assert "[introduction](#summary)" in body


def test_front_matter_carries_book_metadata(loaded_book: LoadedBook) -> None:
    manuscript = assemble_flat_manuscript(loaded_book, generated_at=GENERATED_AT)
    assert manuscript.text.startswith("---\n")
    meta = _front_matter(manuscript.text)
    assert meta["title"] == "A Field Guide"
    assert meta["subtitle"] == "Notes from the Trail"
    assert meta["author"] == ["Ada Lovelace", "Grace Hopper"]
    assert str(meta["date"]) == "2024-01-15"
    assert meta["lang"] == "en"


def test_generation_date_used_when_book_has_none(loaded_book: LoadedBook) -> None:
    loaded_book.metadata = dc.replace(loaded_book.metadata, date=None)
    manuscript = assemble_flat_manuscript(loaded_book, generated_at=GENERATED_AT)
    assert str(_front_matter(manuscript.text)["date"]) == "2025-03-01"


def test_assembly_is_deterministic(loaded_book: LoadedBook) -> None:
    first = assemble_flat_manuscript(loaded_book, generated_at=GENERATED_AT)
    second = assemble_flat_manuscript(loaded_book, generated_at=GENERATED_AT)
    assert first.text == second.text


def test_chapter_without_title_gets_an_anchor(make_book: typ.Callable[..., Path]) -> None:
    root = make_book({"01-start.md": "# Start\n\nText.\n", "02-notes.md": "Loose notes.\n"})
    book = BookPipeline(BookProject.at(root)).load()
    manuscript = assemble_flat_manuscript(book)
    assert manuscript.toc_entries[1].anchor_id == "02-notes"
    assert '<a id="02-notes"></a>\n\nLoose notes.' in manuscript.body
    assert "- [02-notes](#02-notes)" in manuscript.toc


def test_toc_heading_anchor_is_reserved(make_book: typ.Callable[..., Path]) -> None:
    root = make_book({"01-toc.md": "# Table of Contents\n\nA chapter with an awkward title.\n"})
    manuscript = assemble_flat_manuscript(BookPipeline(BookProject.at(root)).load())
    assert manuscript.toc_entries[0].anchor_id == "table-of-contents-2"


def test_write_flat_manuscript(loaded_book: LoadedBook, tmp_path: Path) -> None:
    target = tmp_path / "out" / "manuscript.md"
    manuscript = assemble_flat_manuscript(loaded_book, generated_at=GENERATED_AT)
    assert write_flat_manuscript(manuscript, target) == target
    assert target.read_text(encoding="utf-8") == manuscript.text


def test_pandoc_metadata(loaded_book: LoadedBook) -> None:
    meta = YAML(typ="safe").load(pandoc_metadata(loaded_book, GENERATED_AT))
    assert meta["title"] == "A Field Guide"
    assert meta["author"] == ["Ada Lovelace", "Grace Hopper"]
    assert meta["language"] == "en"
    assert meta["subtitle"] == "Notes from the Trail"
    assert "identifier" not in meta


def test_cross_chapter_fragments_follow_renamed_anchors(
    make_book: typ.Callable[..., Path],
) -> None:
    root = make_book(
        {
            "01-a.md": "# A\n\n## Install\n\nFirst.\n",
            "02-b.md": "# B\n\n## Install\n\nSecond.\n",
            "03-c.md": "# C\n\nGo to [B's install](02-b.md#install) or [A](01-a.md#install).\n",
        }
    )
    manuscript = assemble_flat_manuscript(BookPipeline(BookProject.at(root)).load())
    assert "## Install {#install-2}" in manuscript.body
    assert "Go to [B's install](#install-2) or [A](#install)." in manuscript.body


def test_unknown_fragment_is_kept(make_book: typ.Callable[..., Path]) -> None:
    root = make_book(
        {"01-a.md": "# A\n\nText.\n", "02-b.md": "# B\n\nSee [gone](01-a.md#nowhere).\n"}
    )
    manuscript = assemble_flat_manuscript(BookPipeline(BookProject.at(root)).load())
    assert "See [gone](#nowhere)." in manuscript.body


def test_toc_keeps_skipped_heading_levels(make_book: typ.Callable[..., Path]) -> None:
    root = make_book({"01-deep.md": "# Deep\n\n## Overview\n\n#### Detail\n\nText.\n"})
    manuscript = assemble_flat_manuscript(BookPipeline(BookProject.at(root)).load())
    detail = manuscript.toc_entries[0].sections[1]
    assert detail.number_label == "1.1.0.1"
    assert manuscript.toc.splitlines()[2:] == [
        "- [Deep](#deep)",
        "    - [Overview](#overview)",
        "            - [Detail](#detail)",
    ]
