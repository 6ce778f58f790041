r"""Extract hierarchical heading structure from chapter Markdown.

This module scans a chapter's ATX headings top-to-bottom (skipping fenced
code), assigns every heading a per-level number path and a stable anchor
that is unique within the rendered document, and rewrites the heading lines
with explicit ``{#anchor}`` attributes so both Python-Markdown (``attr_list``)
and pandoc emit the same ids. The same anchors are referenced by the runtime
navigator and by the combined table of contents in manuscript targets.

Example
-------
>>> from bookwright.headings import extract_headings
>>> nodes = extract_headings("# Intro\n## Setup\n## Setup\n")
>>> [(node.number_label, node.anchor_id) for node in nodes]
[('1', 'intro'), ('1.1', 'setup'), ('1.2', 'setup-2')]
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .corpus import Chapter

MAX_LEVEL = 6
TOC_LEVELS = range(2, 5)

ATX_HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
ATTRIBUTE_BLOCK_PATTERN = re.compile(r"[ \t]*\{:?([^{}]*)\}[ \t]*$")
FENCE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})")
WHITESPACE_PATTERN = re.compile(r"\s+")
INVALID_ANCHOR_CHARS = re.compile(r"[^a-z0-9-]")


@dc.dataclass(frozen=True, slots=True)
class HeadingNode:
    """One heading occurrence within a chapter.

    Attributes
    ----------
    level : int
        Heading depth from 1 to 6.
    text : str
        Heading text with attribute blocks and escapes removed.
    anchor_id : str
        Identifier unique within the rendered document.
    number_path : tuple[int, ...]
        Per-level counters; its length always equals ``level``.
    line : int
        Zero-based line index of the heading in the source Markdown.
    """

    level: int
    text: str
    anchor_id: str
    number_path: tuple[int, ...]
    line: int

    @property
    def number_label(self) -> str:
        """Return the dotted form of ``number_path`` (``"2.0.1"``)."""
        return ".".join(str(part) for part in self.number_path)


@dc.dataclass(frozen=True, slots=True)
class TocEntry:
    """Per-chapter aggregate consumed by cross-format tables of contents."""

    chapter_order: int
    title: str
    anchor_id: str
    sections: tuple[HeadingNode, ...]


class AnchorRegistry:
    """Track anchors already used in a document and hand out unique ones."""

    def __init__(self, existing: cabc.Iterable[str] = ()) -> None:
        self._used: set[str] = set(existing)

    def __contains__(self, anchor: object) -> bool:
        return anchor in self._used

    def claim(self, base: str) -> str:
        """Return ``base`` or the first free ``base-N`` and mark it used."""
        candidate = base
        suffix = 2
        while candidate in self._used:
            candidate = f"{base}-{suffix}"
            suffix += 1
        self._used.add(candidate)
        return candidate


class HeadingCounter:
    """Per-level counters implementing "reset deeper, keep shallower"."""

    def __init__(self) -> None:
        self._counters = [0] * MAX_LEVEL

    def advance(self, level: int) -> tuple[int, ...]:
        """Count a heading at ``level`` and return its number path."""
        if not 1 <= level <= MAX_LEVEL:
            msg = f"Heading level must be between 1 and {MAX_LEVEL}, got {level}"
            raise ValueError(msg)
        self._counters[level - 1] += 1
        for index in range(level, MAX_LEVEL):
            self._counters[index] = 0
        return tuple(self._counters[:level])


def slugify_heading(text: str) -> str:
    """Derive the base anchor for a heading.

    Lower-cases the text, turns whitespace runs into hyphens, drops any
    character outside ``[a-z0-9-]`` and trims surrounding hyphens. Headings
    with nothing usable left become ``"section"``.
    """
    lowered = WHITESPACE_PATTERN.sub("-", text.strip().lower())
    slug = INVALID_ANCHOR_CHARS.sub("", lowered).strip("-")
    return slug or "section"


def _clean_heading(text: str) -> str:
    """Return a cleaned heading, removing escapes and whitespace."""
    return text.replace("\\", "").strip()


def _split_attributes(raw: str) -> tuple[str, str | None, list[str]]:
    """Split a trailing ``{#id .class}`` block off heading text."""
    match = ATTRIBUTE_BLOCK_PATTERN.search(raw)
    if not match:
        return raw, None, []
    explicit_id: str | None = None
    extras: list[str] = []
    for token in match.group(1).split():
        if token.startswith("#") and len(token) > 1 and explicit_id is None:
            explicit_id = token[1:]
        else:
            extras.append(token)
    return raw[: match.start()], explicit_id, extras


def _heading_lines(content: str) -> cabc.Iterator[tuple[int, re.Match[str]]]:
    """Yield ``(line_index, match)`` for ATX headings outside code fences."""
    fence: str | None = None
    for index, line in enumerate(content.splitlines()):
        fence_match = FENCE_PATTERN.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1).startswith(fence):
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            continue
        heading = ATX_HEADING_PATTERN.match(line)
        if heading:
            yield index, heading


def find_title(content: str) -> str | None:
    """Return the first level-one heading outside code fences, if any."""
    for _index, match in _heading_lines(content):
        if len(match.group(1)) != 1:
            continue
        text = _clean_heading(_split_attributes(match.group(2))[0])
        if text:
            return text
    return None


def extract_headings(
    content: str, registry: AnchorRegistry | None = None
) -> list[HeadingNode]:
    """Return every recognised heading in ``content`` in document order.

    Parameters
    ----------
    content : str
        Chapter Markdown.
    registry : AnchorRegistry, optional
        Anchors already claimed in the target document; pass a shared
        registry when several chapters are rendered into one document.

    Returns
    -------
    list[HeadingNode]
        Numbered, anchored headings. Lines the scanner does not recognise as
        headings are skipped rather than reported.
    """
    anchors = registry if registry is not None else AnchorRegistry()
    counter = HeadingCounter()
    nodes: list[HeadingNode] = []
    for index, match in _heading_lines(content):
        level = len(match.group(1))
        raw_text, explicit_id, _extras = _split_attributes(match.group(2))
        text = _clean_heading(raw_text)
        if not text:
            continue
        base = explicit_id or slugify_heading(text)
        nodes.append(
            HeadingNode(
                level=level,
                text=text,
                anchor_id=anchors.claim(base),
                number_path=counter.advance(level),
                line=index,
            )
        )
    return nodes


def anchor_markdown(content: str, headings: cabc.Sequence[HeadingNode]) -> str:
    """Rewrite heading lines in ``content`` with explicit anchor attributes."""
    if not headings:
        return content
    by_line = {node.line: node for node in headings}
    lines = content.splitlines(keepends=True)
    for index, node in by_line.items():
        line = lines[index]
        ending = line[len(line.rstrip("\r\n")) :]
        match = ATX_HEADING_PATTERN.match(line.rstrip("\r\n"))
        if match is None:  # pragma: no cover - lines come from the scanner
            continue
        raw_text, _explicit, extras = _split_attributes(match.group(2))
        attributes = " ".join([f"#{node.anchor_id}", *extras])
        lines[index] = f"{match.group(1)} {raw_text.strip()} {{{attributes}}}{ending}"
    return "".join(lines)


def build_toc_entry(
    chapter: Chapter,
    headings: cabc.Sequence[HeadingNode],
    *,
    anchor_id: str | None = None,
) -> TocEntry:
    """Aggregate a chapter's headings into a :class:`TocEntry`.

    The chapter anchor is the first level-one heading's anchor unless
    ``anchor_id`` overrides it; chapters without such a heading fall back to
    their slug. Only levels 2-4 are kept as sections.
    """
    if anchor_id is None:
        title_node = next((node for node in headings if node.level == 1), None)
        anchor_id = title_node.anchor_id if title_node else chapter.slug
    sections = tuple(node for node in headings if node.level in TOC_LEVELS)
    return TocEntry(
        chapter_order=chapter.order,
        title=chapter.title,
        anchor_id=anchor_id,
        sections=sections,
    )


__all__ = [
    "AnchorRegistry",
    "HeadingCounter",
    "HeadingNode",
    "TocEntry",
    "anchor_markdown",
    "build_toc_entry",
    "extract_headings",
    "find_title",
    "slugify_heading",
]
