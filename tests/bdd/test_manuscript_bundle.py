"""Behaviour tests for flat manuscript and platform bundle assembly.

``manuscript_bundle.feature`` checks that sections repeated across chapters
receive distinct anchors in the combined manuscript, that page breaks
separate the chapters, and that the bundle manifest wraps the chapters with
dedication and about-the-author files.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from bookwright.assembler import BookPipeline, assemble_bundle, assemble_flat_manuscript
from bookwright.assembler.manuscript import LATEX_PAGE_BREAK
from bookwright.config import BookProject

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "manuscript_bundle.feature"
)
scenarios(FEATURE_FILE)

TOC_LINK = "](#"


@pytest.fixture
def scenario_state() -> dict[str, typ.Any]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("a book with three chapters")
def given_book(book_root: Path, scenario_state: dict[str, typ.Any]) -> None:
    """Load the three-chapter sample book."""
    scenario_state["book"] = BookPipeline(BookProject.at(book_root)).load()


@given(parsers.parse('a book whose chapters share a "{title}" section'))
def given_shared_sections(
    title: str,
    make_book: typ.Callable[..., Path],
    scenario_state: dict[str, typ.Any],
) -> None:
    """Write a book where every chapter ends with the same section title."""
    chapters = {
        f"0{number}-part-{number}.md": f"# Part {number}\n\nBody.\n\n## {title}\n\nRecap.\n"
        for number in range(1, 4)
    }
    scenario_state["book"] = BookPipeline(BookProject.at(make_book(chapters))).load()


@when("I assemble the flat manuscript")
def when_assemble_manuscript(scenario_state: dict[str, typ.Any]) -> None:
    scenario_state["manuscript"] = assemble_flat_manuscript(scenario_state["book"])


@when("I assemble the platform bundle")
def when_assemble_bundle(scenario_state: dict[str, typ.Any]) -> None:
    scenario_state["bundle"] = assemble_bundle(scenario_state["book"])


@then("every table of contents link targets a unique anchor")
def then_unique_anchors(scenario_state: dict[str, typ.Any]) -> None:
    toc = scenario_state["manuscript"].toc
    targets = [
        line.split(TOC_LINK, 1)[1].rstrip(")")
        for line in toc.splitlines()
        if TOC_LINK in line
    ]
    assert len(targets) == 6
    assert len(set(targets)) == len(targets)
    assert {"summary", "summary-2", "summary-3"} <= set(targets)


@then("the chapters are separated by page breaks")
def then_page_breaks(scenario_state: dict[str, typ.Any]) -> None:
    body = scenario_state["manuscript"].body
    assert body.count(LATEX_PAGE_BREAK) == 2


@then("the manifest starts with the dedication and ends with the author section")
def then_manifest(scenario_state: dict[str, typ.Any]) -> None:
    manifest = scenario_state["bundle"].manifest
    assert manifest[0] == "dedication.txt"
    assert manifest[-1] == "about-author.txt"
    assert manifest[1:-1] == ["01-introduction.md", "02-setup.md", "03-wrap-up.md"]


@then(parsers.parse("the sample lists the first {count:d} chapters"))
def then_sample(count: int, scenario_state: dict[str, typ.Any]) -> None:
    bundle = scenario_state["bundle"]
    assert bundle.sample == bundle.manifest[1 : 1 + count]
