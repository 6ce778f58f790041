"""Render chapter Markdown into page HTML.

:meth:`HtmlContentRenderer.render_chapter` is the one place a chapter turns
into HTML: headings are extracted and numbered, their anchors are written
back into the Markdown as ``{#id}`` attribute blocks (which ``attr_list``
turns into ``id`` attributes), and every highlighted code block is tagged
with the language named on its opening fence.

Example
-------
>>> from bookwright.assembler.renderer import HtmlContentRenderer
>>> chapter = HtmlContentRenderer().render_chapter("# Intro\\n\\n## Intro\\n")
>>> [node.anchor_id for node in chapter.headings]
['intro', 'intro-2']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from ..headings import AnchorRegistry, HeadingNode, anchor_markdown, extract_headings

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

MARKDOWN_EXTENSIONS = ("fenced_code", "codehilite", "tables", "sane_lists", "attr_list")
FENCE_LINE = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})[ \t]*\{?\.?(?P<lang>[\w+#.-]*)")
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
PLAIN_LANGUAGE = "text"


@dc.dataclass(slots=True)
class RenderedChapter:
    """A chapter's headings plus the HTML rendered with their anchors."""

    headings: list[HeadingNode]
    html: str


def scan_fences(text: str) -> tuple[str, list[str]]:
    """Left-align fence lines and collect each fenced block's language.

    ``fenced_code`` only recognises fences starting in column zero, so fence
    markers indented by up to three spaces are moved to the margin. Blocks
    without an info string are reported as ``"text"``.
    """
    lines = text.splitlines(keepends=True)
    languages: list[str] = []
    opening: str | None = None
    for index, line in enumerate(lines):
        match = FENCE_LINE.match(line)
        if match is None:
            continue
        fence = match.group("fence")
        if opening is None:
            opening = fence
            languages.append(match.group("lang") or PLAIN_LANGUAGE)
        elif fence.startswith(opening):
            opening = None
        else:
            continue
        lines[index] = line.lstrip(" ")
    return "".join(lines), languages


class HtmlContentRenderer:
    """Render chapter Markdown with one fixed extension set and code style."""

    def __init__(
        self, pygments_style: str = "monokai", link_extension: Extension | None = None
    ) -> None:
        """Create a renderer.

        Parameters
        ----------
        pygments_style : str, optional
            Pygments style for highlighted code. Defaults to ``"monokai"``.
        link_extension : Extension, optional
            Extension rewriting chapter cross-links; ``None`` leaves links as
            written.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self._link_extension = link_extension

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def with_links(self, link_extension: Extension | None) -> HtmlContentRenderer:
        """Return a renderer sharing this style but using ``link_extension``."""
        return HtmlContentRenderer(self.pygments_style, link_extension)

    def markdown(self, text: str) -> str:
        """Render ``text`` into HTML."""
        aligned, languages = scan_fences(text)
        if not aligned.strip():
            return ""
        extensions: list[Extension | str] = list(MARKDOWN_EXTENSIONS)
        if self._link_extension:
            extensions.append(self._link_extension)
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        return _tag_code_languages(md.convert(aligned), languages)

    def render_chapter(
        self, content: str, registry: AnchorRegistry | None = None
    ) -> RenderedChapter:
        """Number and anchor the headings of ``content`` and render it.

        Pass ``registry`` when the chapter shares a document with others so
        its anchors stay unique across all of them.
        """
        headings = extract_headings(content, registry)
        return RenderedChapter(
            headings=headings,
            html=self.markdown(anchor_markdown(content, headings)),
        )


def _tag_code_languages(html: str, languages: list[str]) -> str:
    if not languages:
        return html
    remaining = iter(languages)

    def _repl(_match: re.Match[str]) -> str:
        language = escape(next(remaining, PLAIN_LANGUAGE), quote=True)
        return f'<div class="codehilite" data-language="{language}">'

    return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))


__all__ = ["HtmlContentRenderer", "RenderedChapter", "scan_fences"]
