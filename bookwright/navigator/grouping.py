"""Group long chapter lists into labelled menu sections.

Titles beginning ``Part N`` group under that part, titles beginning
``Chapter N`` group into fixed-size ranges (``Chapters 1-5``), and anything
else is labelled ``Chapters``. Groups are runs of adjacent chapters, so
flattening the menu gives back the corpus order. Grouping only kicks in
for corpora longer than the threshold and only when it yields more than
one multi-item group; otherwise the flat list is returned unchanged.

Example
-------
>>> from bookwright.navigator.grouping import group_label
>>> group_label("Chapter 7: Deeper")
'Chapters 6-10'
"""

from __future__ import annotations

import dataclasses as dc
import itertools
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PART_PATTERN = re.compile(r"^(part \d+)", re.IGNORECASE)
CHAPTER_PATTERN = re.compile(r"^chapter (\d+)", re.IGNORECASE)
DEFAULT_GROUP = "Chapters"

T = typ.TypeVar("T")


@dc.dataclass(slots=True)
class NavGroup(typ.Generic[T]):
    """A menu section; ``label`` is ``None`` for ungrouped items."""

    label: str | None
    items: list[T]


def group_label(title: str, group_size: int = 5) -> str:
    """Return the group a chapter title belongs to."""
    part = PART_PATTERN.match(title)
    if part:
        return part.group(1).title()
    chapter = CHAPTER_PATTERN.match(title)
    if chapter:
        number = int(chapter.group(1))
        start = ((max(number, 1) - 1) // group_size) * group_size + 1
        return f"Chapters {start}-{start + group_size - 1}"
    return DEFAULT_GROUP


def group_chapters(
    items: cabc.Sequence[T],
    *,
    title: cabc.Callable[[T], str] = str,
    threshold: int = 20,
    group_size: int = 5,
) -> list[NavGroup[T]]:
    """Partition ``items`` into menu groups.

    Parameters
    ----------
    items : Sequence
        Chapters (or titles) in corpus order.
    title : Callable, optional
        Returns the display title of an item; defaults to ``str``.
    threshold : int, optional
        Grouping is considered only when more than ``threshold`` items exist.
    group_size : int, optional
        Width of ``Chapter N`` ranges.

    Returns
    -------
    list[NavGroup]
        Contiguous runs of items sharing a label, in corpus order; a label
        may recur when its items are not adjacent. Single-item groups are
        emitted unlabeled so no lone item is ever wrapped in a heading. When grouping does not
        apply the result is one unlabeled group holding every item.
    """
    flat = [NavGroup(label=None, items=list(items))]
    if len(items) <= threshold:
        return flat

    runs = [
        (label, list(members))
        for label, members in itertools.groupby(
            items, key=lambda item: group_label(title(item), group_size)
        )
    ]
    if sum(1 for _label, members in runs if len(members) > 1) <= 1:
        return flat

    return [
        NavGroup(label=label if len(members) > 1 else None, items=members)
        for label, members in runs
    ]


def filter_chapters(
    items: cabc.Iterable[T], query: str, *, title: cabc.Callable[[T], str] = str
) -> list[T]:
    """Return the items whose title contains ``query``, ignoring case.

    A blank query matches everything.
    """
    needle = query.strip().casefold()
    if not needle:
        return list(items)
    return [item for item in items if needle in title(item).casefold()]


__all__ = ["NavGroup", "filter_chapters", "group_chapters", "group_label"]
