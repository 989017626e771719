"""Utilities for rendering chapter Markdown into HTML fragments."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .link_rewriter import RelativeLinkExtension

if typ.TYPE_CHECKING:
    from pathlib import PurePosixPath
    from xml.etree.ElementTree import Element

    from .link_rewriter import SymlinkResolveContext
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any

FENCE_OPEN_PATTERN = re.compile(r"^(?P<indent>[ ]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
LIST_ITEM_PATTERN = re.compile(r"^(?P<indent>[ ]*)(?P<marker>[-*+]|\d{1,9}[.)])(?P<gap>[ ]+|$)")
# deeper fences are indented code blocks
MAX_FENCE_INDENT = 3
STRIKETHROUGH_PATTERN = r"(~~)(.+?)~~"
ID_STRIP_SEQUENCES = (
    "<em>",
    "</em>",
    "<code>",
    "</code>",
    "<strong>",
    "</strong>",
    "&lt;",
    "&gt;",
    "&amp;",
    "&#39;",
    "&quot;",
)
CODE_STYLE_SELECTOR = "pre > code"


def convert_quotes_to_curly(text: str) -> str:
    """Replace straight quotes with typographic ones.

    A quote opens when it is preceded by whitespace or starts the text, and
    closes otherwise.

    >>> convert_quotes_to_curly("'one', \\"two\\"")
    '‘one’, “two”'
    """
    converted: list[str] = []
    preceded_by_whitespace = True
    for char in text:
        match char:
            case "'":
                converted.append("‘" if preceded_by_whitespace else "’")
            case '"':
                converted.append("“" if preceded_by_whitespace else "”")
            case _:
                converted.append(char)
        preceded_by_whitespace = char.isspace()
    return "".join(converted)


def normalize_id(content: str) -> str:
    """Convert ``content`` into an HTML id with no ASCII whitespace.

    >>> normalize_id("`--passes`: add more rustdoc passes")
    '--passes-add-more-rustdoc-passes'
    """
    chars: list[str] = []
    for char in content:
        if char.isalnum() or char in "_-":
            chars.append(char.lower() if char.isascii() else char)
        elif char.isspace():
            chars.append("-")
    return "".join(chars)


def id_from_content(content: str) -> str:
    """Derive an anchor id from rendered heading markup.

    >>> id_from_content("## **Bold** title")
    'bold-title'
    """
    for sequence in ID_STRIP_SEQUENCES:
        content = content.replace(sequence, "")
    trimmed = content.strip().lstrip("#").strip()
    return normalize_id(trimmed)


def _slugify_heading(value: str, separator: str) -> str:  # noqa: ARG001
    return normalize_id(value.strip())


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _track_list_items(containers: list[int], line: str) -> None:
    """Keep ``containers`` as the content columns of the open list items."""
    width = _indent_width(line)
    while containers and width < containers[-1]:
        containers.pop()
    if match := LIST_ITEM_PATTERN.match(line):
        gap = len(match["gap"])
        if not 1 <= gap <= MAX_FENCE_INDENT + 1:
            gap = 1
        containers.append(len(match["indent"]) + len(match["marker"]) + gap)


def _opening_fence(line: str, base: int) -> tuple[str, str, str] | None:
    """Return ``(indent, fence, info)`` if ``line`` opens a fence at column ``base``.

    >>> _opening_fence("  ```rust, no_run", 2)
    ('  ', '```', 'rust,no_run')
    >>> _opening_fence("    ```rust", 0) is None
    True
    """
    match = FENCE_OPEN_PATTERN.match(line)
    if match is None:
        return None
    indent = match["indent"]
    if not base <= len(indent) <= base + MAX_FENCE_INDENT:
        return None
    fence = match["fence"]
    info = match["info"]
    if fence.startswith("`") and "`" in info:
        return None
    return indent, fence, "".join(info.split())


def _closing_fence_index(lines: list[str], start: int, fence: str, base: int) -> int:
    """Return the index of the line closing ``fence``, or ``len(lines)``.

    A closing fence uses the same character, is at least as long as the
    opening one, and carries nothing but trailing whitespace.
    """
    closing = re.compile(
        rf"^[ ]{{0,{base + MAX_FENCE_INDENT}}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$"
    )
    for index in range(start, len(lines)):
        if closing.match(lines[index]):
            return index
    return len(lines)


class FencedCodePreprocessor(Preprocessor):
    """Stash fenced code blocks as ``<pre><code class="language-…">`` HTML.

    A fence opens at most three columns past the enclosing list item's
    content column; anything deeper stays an indented code block. An
    unclosed fence runs to the end of the chapter. The info string loses all
    internal whitespace, so ``rust, no_run`` and ``rust,no_run`` produce the
    same class.
    """

    def __init__(self, md: Markdown, formatter: HtmlFormatter | None) -> None:
        super().__init__(md)
        self.formatter = formatter

    def run(self, lines: list[str]) -> list[str]:
        output: list[str] = []
        containers: list[int] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            if line.strip():
                _track_list_items(containers, line)
            base = containers[-1] if containers else 0
            opening = _opening_fence(line, base)
            if opening is None:
                output.append(line)
                index += 1
                continue
            indent, fence, info = opening
            end = _closing_fence_index(lines, index + 1, fence, base)
            body = lines[index + 1 : end]
            if end == len(lines):
                while body and not body[-1].strip():
                    body.pop()
            code = "".join(f"{text}\n" for text in body)
            placeholder = self.md.htmlStash.store(
                self._render(self._dedent(code, len(indent)), info)
            )
            output.extend(["", f"{indent}{placeholder}", ""])
            index = end + 1
        return output

    def _render(self, code: str, info: str) -> str:
        class_attr = f' class="language-{escape(info, quote=True)}"' if info else ""
        body = self._highlight(code, info) if self.formatter else None
        if body is None:
            body = escape(code, quote=False)
        return f"<pre><code{class_attr}>{body}</code></pre>"

    def _highlight(self, code: str, info: str) -> str | None:
        language = info.split(",", 1)[0]
        if not language:
            return None
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            return None
        return highlight(code, lexer, self.formatter)

    @staticmethod
    def _dedent(code: str, width: int) -> str:
        if not width:
            return code
        pattern = re.compile(rf"^[ ]{{0,{width}}}", re.MULTILINE)
        return pattern.sub("", code)


class CurlyQuotesTreeprocessor(Treeprocessor):
    """Apply :func:`convert_quotes_to_curly` to text outside code."""

    SKIP_TAGS: typ.ClassVar[frozenset[str]] = frozenset(
        {"code", "pre", "kbd", "samp", "script", "style"}
    )

    def run(self, root: Element) -> None:
        self._convert(root)

    def _convert(self, element: Element) -> None:
        if element.tag in self.SKIP_TAGS:
            return
        if element.text:
            element.text = convert_quotes_to_curly(element.text)
        for child in element:
            self._convert(child)
            if child.tail:
                child.tail = convert_quotes_to_curly(child.tail)


class ChapterMarkdownExtension(Extension):
    """Fenced code, strikethrough, and optional curly quotes for chapters."""

    def __init__(self, *, curly_quotes: bool, formatter: HtmlFormatter | None) -> None:
        super().__init__()
        self.curly_quotes = curly_quotes
        self.formatter = formatter

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the chapter processors on the Markdown instance."""
        md.preprocessors.register(
            FencedCodePreprocessor(md, self.formatter), "bookbinder_fenced_code", 25
        )
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"), "bookbinder_del", 40
        )
        if self.curly_quotes:
            md.treeprocessors.register(
                CurlyQuotesTreeprocessor(md), "bookbinder_curly_quotes", 12
            )


class HtmlContentRenderer:
    """Render chapter Markdown with consistent extensions and link fixing."""

    def __init__(self, *, curly_quotes: bool = False, pygments_style: str | None = None) -> None:
        """Initialize a renderer.

        Parameters
        ----------
        curly_quotes : bool, optional
            Convert straight quotes to typographic ones outside code.
        pygments_style : str, optional
            Name of a Pygments style. When set, fenced code is highlighted on
            the server; otherwise code blocks only carry ``language-*``
            classes for client-side highlighting.
        """
        self.curly_quotes = curly_quotes
        self.pygments_style = pygments_style
        self._formatter = (
            HtmlFormatter(style=pygments_style, nowrap=True) if pygments_style else None
        )

    @property
    def stylesheet(self) -> str | None:
        """Return the CSS for highlighted code, or ``None`` without Pygments."""
        if self._formatter is None:
            return None
        return self._formatter.get_style_defs(CODE_STYLE_SELECTOR)

    def markdown(
        self,
        text: str,
        *,
        print_path: PurePosixPath | None = None,
        symlink_context: SymlinkResolveContext | None = None,
    ) -> str:
        """Render ``text`` into HTML, fixing every link for its output page.

        Parameters
        ----------
        text : str
            Chapter Markdown.
        print_path : PurePosixPath, optional
            The chapter's output path when rendering for ``print.html``.
        symlink_context : SymlinkResolveContext, optional
            Context used to resolve ``.md`` links through the render map.

        Returns
        -------
        str
            The HTML fragment; empty when ``text`` is blank.
        """
        if not text.strip():
            return ""
        extensions: list[Extension | str] = [
            "tables",
            "sane_lists",
            "footnotes",
            "toc",
            ChapterMarkdownExtension(
                curly_quotes=self.curly_quotes, formatter=self._formatter
            ),
            RelativeLinkExtension(print_path, symlink_context),
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "toc": {
                    "slugify": _slugify_heading,
                    "anchorlink": True,
                    "anchorlink_class": "header",
                }
            },
        )
        return md.convert(text)


__all__ = [
    "FENCE_OPEN_PATTERN",
    "HtmlContentRenderer",
    "convert_quotes_to_curly",
    "id_from_content",
    "normalize_id",
]
