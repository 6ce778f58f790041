"""Load book metadata YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ

from ruamel.yaml import YAML

from .helpers import _format_date, _optional_str, _positive_int, _section
from .models import (
    BookConfigError,
    BookMetadata,
    BundleOptions,
    EbookOptions,
    PdfOptions,
    SocialLinks,
    WebOptions,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


def read_metadata_mapping(path: Path) -> dict[str, typ.Any]:
    """Return the raw mapping stored in a metadata file.

    Raises
    ------
    BookConfigError
        If the file is missing or its top level is not a mapping.
    YAMLError
        If the YAML content cannot be parsed.
    """
    if not path.exists():
        msg = f"Metadata file '{path}' not found."
        raise BookConfigError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = f"Top-level YAML structure in '{path}' must be a mapping."
        raise BookConfigError(msg)
    return dict(loaded)


def load_book_metadata(path: Path) -> BookMetadata:
    """Load ``book.yaml`` into a :class:`BookMetadata` instance.

    Parameters
    ----------
    path : Path
        Filesystem path to the metadata file (usually
        ``src/metadata/book.yaml``).

    Returns
    -------
    BookMetadata
        Parsed metadata with optional sections filled from defaults.

    Raises
    ------
    BookConfigError
        If the file is missing, malformed, or lacks a title.

    Examples
    --------
    >>> from pathlib import Path
    >>> from bookwright.config import load_book_metadata
    >>> load_book_metadata(Path("src/metadata/book.yaml")).title  # doctest: +SKIP
    'A Field Guide'
    """
    return metadata_from_mapping(read_metadata_mapping(path))


def metadata_from_mapping(raw: typ.Mapping[str, typ.Any]) -> BookMetadata:
    """Build :class:`BookMetadata` from an already-parsed mapping."""
    title = _optional_str(raw.get("title"))
    if not title:
        msg = "Book metadata is missing required field 'title'."
        raise BookConfigError(msg)

    author_fields = {key: raw[key] for key in ("author", "authors") if key in raw}
    return BookMetadata(
        title=title,
        subtitle=_optional_str(raw.get("subtitle")),
        description=_optional_str(raw.get("description")),
        date=_format_date(raw.get("date")),
        language=_optional_str(raw.get("language")) or "en",
        version=_optional_str(raw.get("version")),
        publisher=_optional_str(raw.get("publisher")),
        copyright=_optional_str(raw.get("copyright")),
        isbn=_optional_str(raw.get("isbn")),
        cover_image=_optional_str(raw.get("cover_image") or raw.get("coverImage")),
        author_fields=author_fields,
        web=_build_web_options(_section(raw, "web")),
        ebook=_build_ebook_options(_section(raw, "ebook") or _section(raw, "kindle")),
        pdf=_build_pdf_options(_section(raw, "pdf")),
        bundle=_build_bundle_options(_section(raw, "bundle")),
        social=_build_social_links(_section(raw, "social")),
    )


def _build_web_options(payload: typ.Mapping[str, typ.Any]) -> WebOptions:
    base = WebOptions()
    base_url = _optional_str(payload.get("base_url")) or base.base_url
    return WebOptions(
        base_url=base_url.rstrip("/"),
        pygments_style=_optional_str(payload.get("pygments_style")) or base.pygments_style,
        group_threshold=_positive_int(
            payload.get("group_threshold"),
            field="web.group_threshold",
            default=base.group_threshold,
        ),
        group_size=_positive_int(
            payload.get("group_size"), field="web.group_size", default=base.group_size
        ),
    )


def _build_ebook_options(payload: typ.Mapping[str, typ.Any]) -> EbookOptions:
    return EbookOptions(
        cover_image=_optional_str(payload.get("cover_image")),
        css=_optional_str(payload.get("css")),
    )


def _build_pdf_options(payload: typ.Mapping[str, typ.Any]) -> PdfOptions:
    return PdfOptions(
        description=_optional_str(payload.get("description")),
        page_size=_optional_str(payload.get("page_size")) or PdfOptions().page_size,
    )


def _build_bundle_options(payload: typ.Mapping[str, typ.Any]) -> BundleOptions:
    base = BundleOptions()
    front_matter = payload.get("front_matter", base.front_matter)
    return BundleOptions(
        sample_size=_positive_int(
            payload.get("sample_size"), field="bundle.sample_size", default=base.sample_size
        ),
        front_matter=bool(front_matter),
    )


def _build_social_links(payload: typ.Mapping[str, typ.Any]) -> SocialLinks:
    return SocialLinks(
        website=_optional_str(payload.get("website")),
        twitter=_optional_str(payload.get("twitter")),
        github=_optional_str(payload.get("github")),
    )


__all__ = [
    "load_book_metadata",
    "metadata_from_mapping",
    "read_metadata_mapping",
]
