"""Tests for heading extraction, numbering, and anchor assignment."""

from __future__ import annotations

import pytest

from bookwright.corpus import Chapter
from bookwright.headings import (
    AnchorRegistry,
    HeadingCounter,
    anchor_markdown,
    build_toc_entry,
    extract_headings,
    slugify_heading,
)


def test_numbering_resets_deeper_levels_only() -> None:
    content = "# One\n## A\n## B\n# Two\n### Deep\n"
    nodes = extract_headings(content)
    assert [node.number_label for node in nodes] == ["1", "1.1", "1.2", "2", "2.0.1"]
    assert all(len(node.number_path) == node.level for node in nodes)


def test_duplicate_headings_get_suffixed_anchors() -> None:
    nodes = extract_headings("# Guide\n## Setup\n## Setup\n## Setup\n")
    assert [node.anchor_id for node in nodes] == ["guide", "setup", "setup-2", "setup-3"]


def test_shared_registry_spans_documents() -> None:
    registry = AnchorRegistry(["summary"])
    nodes = extract_headings("## Summary\n", registry)
    assert nodes[0].anchor_id == "summary-2"
    assert "summary-2" in registry


def test_headings_inside_code_fences_are_skipped() -> None:
    content = "# Real\n\n```bash\n# comment\n```\n\n~~~\n## also code\n~~~\n## After\n"
    assert [node.text for node in extract_headings(content)] == ["Real", "After"]


def test_explicit_ids_and_closing_hashes() -> None:
    nodes = extract_headings("## Setup {#custom-id .lead}\n### Notes ###\n")
    assert (nodes[0].text, nodes[0].anchor_id) == ("Setup", "custom-id")
    assert (nodes[1].text, nodes[1].anchor_id) == ("Notes", "notes")


def test_empty_heading_text_is_skipped() -> None:
    assert extract_headings("#\n# \\\n") == []


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello, World!", "hello-world"),
        ("  Multiple   spaces ", "multiple-spaces"),
        ("Step 2: Run", "step-2-run"),
        ("!!!", "section"),
    ],
)
def test_slugify_heading(text: str, expected: str) -> None:
    assert slugify_heading(text) == expected


def test_anchor_markdown_rewrites_heading_lines() -> None:
    content = "# Intro\n\ntext\n\n## Setup {.lead}\n"
    anchored = anchor_markdown(content, extract_headings(content))
    assert anchored == "# Intro {#intro}\n\ntext\n\n## Setup {#setup .lead}\n"


def test_counter_rejects_out_of_range_levels() -> None:
    with pytest.raises(ValueError, match="between 1 and 6"):
        HeadingCounter().advance(7)


def test_toc_entry_keeps_levels_two_to_four() -> None:
    content = "# Title\n## A\n### B\n#### C\n##### D\n"
    chapter = Chapter(slug="01-t", order=1, title="Title", raw_content=content, filename="01-t.md")
    entry = build_toc_entry(chapter, extract_headings(content))
    assert entry.anchor_id == "title"
    assert [node.text for node in entry.sections] == ["A", "B", "C"]


def test_toc_entry_without_title_uses_slug() -> None:
    content = "## Only a section\n"
    chapter = Chapter(slug="04-notes", order=4, title="04-notes", raw_content=content, filename="04-notes.md")
    assert build_toc_entry(chapter, extract_headings(content)).anchor_id == "04-notes"
