r"""Normalise author metadata into one canonical representation.

Book metadata arrives in one of two shapes: a legacy free-text ``author``
string (``"Ada Lovelace & Grace Hopper"``) or a structured ``authors`` list of
records carrying optional contact details. :func:`author_source` turns the raw
mapping into a tagged union once, :func:`normalize_authors` reduces either
variant to :class:`AuthorCredits`, and every renderer consumes that result so
the display string (``"A, B & C"``) is computed in exactly one place.

Example
-------
>>> from bookwright.authors import normalize_authors
>>> normalize_authors({"author": "Ada, Lin & Grace"}).display
'Ada, Lin & Grace'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .errors import BookConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

LEGACY_SEPARATOR = re.compile(r"\s*[&,]\s*")
PLACEHOLDER_BIO = "{name} is..."
BIOGRAPHY_PROMPT = "Add your biography here."
CONTACT_SEPARATOR = " • "

PROFILE_URLS = {
    "twitter": "https://twitter.com/{handle}",
    "linkedin": "https://www.linkedin.com/in/{handle}",
    "github": "https://github.com/{handle}",
}


@dc.dataclass(frozen=True, slots=True)
class AuthorRecord:
    """One author and their optional contact details."""

    name: str
    bio: str | None = None
    email: str | None = None
    website: str | None = None
    twitter: str | None = None
    linkedin: str | None = None
    github: str | None = None


@dc.dataclass(frozen=True, slots=True)
class LegacyAuthorString:
    """Author metadata supplied as a single free-text field."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class StructuredAuthors:
    """Author metadata supplied as a list of records."""

    records: tuple[AuthorRecord, ...]


AuthorSource = LegacyAuthorString | StructuredAuthors


@dc.dataclass(frozen=True, slots=True)
class AuthorCredits:
    """Canonical author list plus its formatted display string."""

    authors: tuple[AuthorRecord, ...]
    display: str

    @property
    def names(self) -> list[str]:
        """Return author names in credit order."""
        return [author.name for author in self.authors]

    @property
    def is_multi(self) -> bool:
        """Return ``True`` when more than one author is credited."""
        return len(self.authors) > 1


@dc.dataclass(frozen=True, slots=True)
class ContactLink:
    """A labelled hyperlink derived from one author field."""

    label: str
    url: str
    field: str


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_author_record(payload: cabc.Mapping[str, typ.Any], *, index: int = 0) -> AuthorRecord:
    """Build an :class:`AuthorRecord` from a metadata mapping.

    Raises
    ------
    BookConfigError
        If the record has no usable ``name``.
    """
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        msg = f"Author at index {index} is missing a 'name' string"
        raise BookConfigError(msg)
    return AuthorRecord(
        name=name.strip(),
        bio=_optional_str(payload.get("bio")),
        email=_optional_str(payload.get("email")),
        website=_optional_str(payload.get("website")),
        twitter=_optional_str(payload.get("twitter")),
        linkedin=_optional_str(payload.get("linkedin")),
        github=_optional_str(payload.get("github")),
    )


def author_source(raw: cabc.Mapping[str, typ.Any]) -> AuthorSource:
    """Classify raw metadata into one of the two supported author shapes.

    A non-empty ``authors`` list is authoritative; otherwise the legacy
    ``author`` string is used (possibly empty).
    """
    records = raw.get("authors")
    if isinstance(records, list) and records:
        parsed: list[AuthorRecord] = []
        for index, entry in enumerate(records):
            match entry:
                case AuthorRecord():
                    parsed.append(entry)
                case str():
                    parsed.append(parse_author_record({"name": entry}, index=index))
                case dict():
                    parsed.append(parse_author_record(entry, index=index))
                case _:
                    msg = f"Author at index {index} must be a mapping or a name"
                    raise BookConfigError(msg)
        return StructuredAuthors(records=tuple(parsed))
    return LegacyAuthorString(text=_optional_str(raw.get("author")) or "")


def split_legacy_authors(text: str) -> list[str]:
    """Split a free-text author field on ``&`` and ``,`` separators."""
    return [name.strip() for name in LEGACY_SEPARATOR.split(text) if name.strip()]


def format_author_display(names: cabc.Sequence[str]) -> str:
    """Format author names for display.

    Examples
    --------
    >>> format_author_display(["Ada"])
    'Ada'
    >>> format_author_display(["Ada", "Lin"])
    'Ada & Lin'
    >>> format_author_display(["Ada", "Lin", "Grace"])
    'Ada, Lin & Grace'
    """
    match len(names):
        case 0:
            return ""
        case 1:
            return names[0]
        case 2:
            return f"{names[0]} & {names[1]}"
        case _:
            return f"{', '.join(names[:-1])} & {names[-1]}"


def normalize_authors(
    raw: cabc.Mapping[str, typ.Any] | LegacyAuthorString | StructuredAuthors,
) -> AuthorCredits:
    """Reduce either author shape to canonical :class:`AuthorCredits`."""
    source = raw if isinstance(raw, LegacyAuthorString | StructuredAuthors) else author_source(raw)
    match source:
        case StructuredAuthors(records=records):
            authors = records
        case LegacyAuthorString(text=text):
            authors = tuple(AuthorRecord(name=name) for name in split_legacy_authors(text))
    return AuthorCredits(
        authors=authors,
        display=format_author_display([author.name for author in authors]),
    )


def _profile_url(field: str, value: str) -> str:
    """Return a canonical profile URL for a handle-style field."""
    if value.startswith(("http://", "https://")):
        return value
    handle = value.lstrip("@").strip("/")
    return PROFILE_URLS[field].format(handle=handle)


def contact_links(author: AuthorRecord) -> list[ContactLink]:
    """Return one labelled link per contact field present on ``author``."""
    links: list[ContactLink] = []
    if author.website:
        links.append(ContactLink("Website", author.website, "website"))
    if author.email:
        address = author.email.removeprefix("mailto:")
        links.append(ContactLink("Email", f"mailto:{address}", "email"))
    if author.twitter:
        links.append(ContactLink("Twitter", _profile_url("twitter", author.twitter), "twitter"))
    if author.linkedin:
        links.append(ContactLink("LinkedIn", _profile_url("linkedin", author.linkedin), "linkedin"))
    if author.github:
        links.append(ContactLink("GitHub", _profile_url("github", author.github), "github"))
    return links


def _contact_line(author: AuthorRecord) -> str | None:
    links = contact_links(author)
    if not links:
        return None
    rendered = CONTACT_SEPARATOR.join(f"[{link.label}]({link.url})" for link in links)
    return f"Contact: {rendered}"


def about_authors_markdown(credits: AuthorCredits) -> str:
    """Render the "About the Author(s)" back-matter section.

    Single-author books (or books with no credited author) get one section
    with the biography; multi-author books get one ``##`` subsection per
    author separated by horizontal rules.
    """
    if not credits.authors:
        return f"# About the Author\n\n{BIOGRAPHY_PROMPT}\n"

    if not credits.is_multi:
        author = credits.authors[0]
        parts = ["# About the Author", author.bio or PLACEHOLDER_BIO.format(name=author.name)]
        if not author.bio:
            parts.append(BIOGRAPHY_PROMPT)
        contact = _contact_line(author)
        if contact:
            parts.append(contact)
        return "\n\n".join(parts) + "\n"

    blocks: list[str] = []
    for author in credits.authors:
        parts = [f"## {author.name}", author.bio or PLACEHOLDER_BIO.format(name=author.name)]
        contact = _contact_line(author)
        if contact:
            parts.append(contact)
        blocks.append("\n\n".join(parts))
    return "# About the Authors\n\n" + "\n\n---\n\n".join(blocks) + "\n"


__all__ = [
    "AuthorCredits",
    "AuthorRecord",
    "AuthorSource",
    "ContactLink",
    "LegacyAuthorString",
    "StructuredAuthors",
    "about_authors_markdown",
    "author_source",
    "contact_links",
    "format_author_display",
    "normalize_authors",
    "parse_author_record",
    "split_legacy_authors",
]
