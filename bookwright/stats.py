"""Word counts and reading estimates for a chapter corpus."""

from __future__ import annotations

import dataclasses as dc
import math
import re
import typing as typ

from ._constants import WORDS_PER_MINUTE, WORDS_PER_PAGE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .corpus import Chapter

# Order matters: fenced code and images go before inline markup and links.
_STRIP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"```.*?```", re.DOTALL), ""),
    (re.compile(r"~~~.*?~~~", re.DOTALL), ""),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*>\s+", re.MULTILINE), ""),
)


@dc.dataclass(frozen=True, slots=True)
class ChapterStats:
    filename: str
    title: str
    words: int


@dc.dataclass(frozen=True, slots=True)
class CorpusStats:
    """Per-chapter word counts plus totals and estimates."""

    chapters: tuple[ChapterStats, ...]
    total_words: int

    @property
    def reading_minutes(self) -> int:
        return math.ceil(self.total_words / WORDS_PER_MINUTE)

    @property
    def estimated_pages(self) -> int:
        return math.ceil(self.total_words / WORDS_PER_PAGE)

    @property
    def reading_time(self) -> str:
        """Return the reading estimate as ``"1h 5m"`` or ``"12m"``."""
        hours, minutes = divmod(self.reading_minutes, 60)
        return f"{hours}h {minutes}m" if hours else f"{minutes}m"


def plain_text(markdown: str) -> str:
    """Strip Markdown syntax that should not count as words."""
    text = markdown
    for pattern, replacement in _STRIP_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def count_words(markdown: str) -> int:
    """Count the words of prose in ``markdown``, ignoring code and images.

    Examples
    --------
    >>> count_words("# Title\\n\\nSome **bold** words.")
    4
    """
    return len(plain_text(markdown).split())


def corpus_stats(chapters: cabc.Iterable[Chapter]) -> CorpusStats:
    """Return :class:`CorpusStats` for ``chapters`` in the given order."""
    per_chapter = tuple(
        ChapterStats(
            filename=chapter.filename,
            title=chapter.title,
            words=count_words(chapter.raw_content),
        )
        for chapter in chapters
    )
    return CorpusStats(
        chapters=per_chapter,
        total_words=sum(entry.words for entry in per_chapter),
    )


__all__ = ["ChapterStats", "CorpusStats", "corpus_stats", "count_words", "plain_text"]
