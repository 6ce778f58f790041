"""Shared fixtures: a small three-chapter book project on disk."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from bookwright.assembler import BookPipeline, LoadedBook
from bookwright.config import BookProject

METADATA_YAML = """
title: A Field Guide
subtitle: Notes from the Trail
description: A short book used by the test suite.
date: "2024-01-15"
language: en
version: "1.0"
authors:
  - name: Ada Lovelace
    bio: Ada writes about analytical engines.
    email: ada@example.com
    github: ada
  - name: Grace Hopper
web:
  base_url: https://books.example.com/guide/
""".strip()

CHAPTERS = {
    "01-introduction.md": (
        "# Introduction\n"
        "\n"
        "Welcome to the guide. This chapter explains what the trail looks like.\n"
        "\n"
        "## Summary\n"
        "\n"
        "See [the setup chapter](02-setup.md) for details.\n"
        "\n"
        "![Trail map](../images/map.png)\n"
    ),
    "02-setup.md": (
        "# Setup\n"
        "\n"
        "## Install\n"
        "\n"
        "```python\n"
        "# not a heading\n"
        'print("hello")\n'
        "```\n"
        "\n"
        "### Details\n"
        "\n"
        "Pack light.\n"
        "\n"
        "## Summary\n"
        "\n"
        "Back to the [introduction](01-introduction.md#summary).\n"
    ),
    "03-wrap-up.md": "# Wrap Up\n\nThat is all.\n",
}


def write_book(root: Path, chapters: dict[str, str] | None = None) -> Path:
    """Write a sample book project under ``root`` and return ``root``."""
    chapters_dir = root / "src" / "chapters"
    chapters_dir.mkdir(parents=True)
    for name, content in (chapters or CHAPTERS).items():
        (chapters_dir / name).write_text(content, encoding="utf-8")
    metadata_dir = root / "src" / "metadata"
    metadata_dir.mkdir(parents=True)
    (metadata_dir / "book.yaml").write_text(METADATA_YAML + "\n", encoding="utf-8")
    images_dir = root / "src" / "images"
    images_dir.mkdir(parents=True)
    (images_dir / "map.png").write_bytes(b"\x89PNG map")
    return root


@pytest.fixture
def make_book(tmp_path: Path) -> typ.Callable[..., Path]:
    """Return a factory writing a sample book with custom chapters."""

    def _make(chapters: dict[str, str] | None = None, name: str = "custom") -> Path:
        return write_book(tmp_path / name, chapters)

    return _make


@pytest.fixture
def book_root(tmp_path: Path) -> Path:
    """Return the root of a freshly written sample book."""
    return write_book(tmp_path / "book")


@pytest.fixture
def project(book_root: Path) -> BookProject:
    return BookProject.at(book_root)


@pytest.fixture
def loaded_book(project: BookProject) -> LoadedBook:
    """Return the sample book after the loading pipeline has run."""
    return BookPipeline(project).load()
