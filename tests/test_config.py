"""Tests for book metadata loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from bookwright.config import (
    BookConfigError,
    BookProject,
    load_book_metadata,
    metadata_from_mapping,
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "book.yaml"
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


def test_loads_sample_metadata(project: BookProject) -> None:
    metadata = load_book_metadata(project.metadata_file)
    assert metadata.title == "A Field Guide"
    assert metadata.subtitle == "Notes from the Trail"
    assert metadata.date == "2024-01-15"
    assert metadata.web.base_url == "https://books.example.com/guide"
    assert [author["name"] for author in metadata.author_fields["authors"]] == [
        "Ada Lovelace",
        "Grace Hopper",
    ]


def test_defaults_fill_optional_sections() -> None:
    metadata = metadata_from_mapping({"title": "Minimal"})
    assert metadata.language == "en"
    assert metadata.web.group_threshold == 20
    assert metadata.bundle.sample_size == 2
    assert metadata.bundle.front_matter is True
    assert metadata.resolved_cover is None
    assert metadata.author_fields == {}


def test_unquoted_yaml_date_is_normalised(tmp_path: Path) -> None:
    metadata = load_book_metadata(_write(tmp_path, "title: Dated\ndate: 2023-05-06"))
    assert metadata.date == "2023-05-06"


def test_kindle_section_is_accepted_for_ebook_options() -> None:
    metadata = metadata_from_mapping(
        {"title": "T", "cover_image": "top.png", "kindle": {"cover_image": "k.png"}}
    )
    assert metadata.ebook.cover_image == "k.png"
    assert metadata.resolved_cover == "k.png"


def test_missing_title_is_rejected() -> None:
    with pytest.raises(BookConfigError, match="title"):
        metadata_from_mapping({"description": "untitled"})


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(BookConfigError, match="not found"):
        load_book_metadata(tmp_path / "absent.yaml")


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(BookConfigError, match="mapping"):
        load_book_metadata(_write(tmp_path, "- just\n- a list"))


def test_sections_must_be_mappings() -> None:
    with pytest.raises(BookConfigError, match="'web' must be a mapping"):
        metadata_from_mapping({"title": "T", "web": "https://example.com"})


@pytest.mark.parametrize("value", ["many", 0])
def test_group_size_must_be_positive_integer(value: object) -> None:
    with pytest.raises(BookConfigError, match=r"web\.group_size"):
        metadata_from_mapping({"title": "T", "web": {"group_size": value}})


def test_project_layout(tmp_path: Path) -> None:
    project = BookProject.at(tmp_path)
    assert project.chapters_dir == tmp_path / "src" / "chapters"
    assert project.metadata_file == tmp_path / "src" / "metadata" / "book.yaml"
    assert project.web_dir == tmp_path / "docs"
    assert project.ebook_dir == tmp_path / "build" / "kindle"


def test_resolve_asset_tries_root_then_src(tmp_path: Path) -> None:
    project = BookProject.at(tmp_path)
    (tmp_path / "src" / "images").mkdir(parents=True)
    (tmp_path / "src" / "images" / "cover.png").write_bytes(b"png")
    assert project.resolve_asset("src/images/cover.png") == tmp_path / "src/images/cover.png"
    assert project.resolve_asset("../images/cover.png") == tmp_path / "src/images/cover.png"
    assert project.resolve_asset("missing.png") == tmp_path / "missing.png"
