r"""Parse ``SUMMARY.md`` into the ordered table-of-contents model.

The summary is the contract between the book's author and the loader: prefix
chapters, a numbered (and nestable) list of chapters, and suffix chapters.
This module turns the Markdown list into :class:`Summary` dataclasses; it
does not read chapter content. See :mod:`bookbinder.book.loader` for that.

Example
-------
>>> from bookbinder.book.summary import parse_summary
>>> summary = parse_summary(
...     "# Summary\n\n[Intro](README.md)\n\n- [One](one.md)\n    - [Two](two.md)\n"
... )
>>> [link.name for link in summary.prefix_chapters]
['Intro']
>>> str(summary.numbered_chapters[0].nested_items[0].number)
'1.1.'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
from pathlib import Path

from bookbinder._constants import SUMMARY_FILENAME
from bookbinder.errors import BookIoError, SummaryParseError

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r"^#\s+(?P<title>.+?)\s*#*\s*$")
SEPARATOR_PATTERN = re.compile(r"^\s*(?:-{3,}|\*{3,}|_{3,})\s*$")
LIST_ITEM_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)[-*+]\s+\[(?P<name>[^\]]*)\]\((?P<location>[^)]*)\)\s*$"
)
BARE_LINK_PATTERN = re.compile(r"^\[(?P<name>[^\]]*)\]\((?P<location>[^)]*)\)\s*$")
TAB_WIDTH = 4


@dc.dataclass(frozen=True, slots=True)
class SectionNumber:
    """Hierarchical chapter number such as ``1.2.``.

    Attributes
    ----------
    parts : tuple[int, ...]
        One positive integer per nesting level.
    """

    parts: tuple[int, ...]

    def child(self, index: int) -> SectionNumber:
        """Return the number of this entry's ``index``-th nested chapter."""
        return SectionNumber((*self.parts, index))

    def __str__(self) -> str:
        return "".join(f"{part}." for part in self.parts)


@dc.dataclass(frozen=True, slots=True)
class Separator:
    """A spacer between table-of-contents entries."""


@dc.dataclass(slots=True)
class Link:
    """A table-of-contents entry before its content is loaded.

    Attributes
    ----------
    name : str
        Title shown in navigation.
    location : Path or None
        Source file, absolute or relative to the source root. ``None`` marks
        a draft entry with no backing file.
    number : SectionNumber or None
        Position in the numbering scheme; ``None`` for prefix and suffix
        chapters.
    nested_items : list[SummaryItem]
        Child entries in their declared order.
    """

    name: str
    location: Path | None = None
    number: SectionNumber | None = None
    nested_items: list[SummaryItem] = dc.field(default_factory=list)

    def push_item(self, item: SummaryItem) -> None:
        """Append a nested entry."""
        self.nested_items.append(item)


SummaryItem = Link | Separator


@dc.dataclass(slots=True)
class Summary:
    """The three ordered sections declared by ``SUMMARY.md``."""

    title: str | None = None
    prefix_chapters: list[SummaryItem] = dc.field(default_factory=list)
    numbered_chapters: list[SummaryItem] = dc.field(default_factory=list)
    suffix_chapters: list[SummaryItem] = dc.field(default_factory=list)

    def items(self) -> list[SummaryItem]:
        """Return prefix, numbered, and suffix entries concatenated in order."""
        return [*self.prefix_chapters, *self.numbered_chapters, *self.suffix_chapters]


def _indent_width(indent: str) -> int:
    return len(indent.replace("\t", " " * TAB_WIDTH))


def _make_link(name: str, location: str) -> Link:
    """Build a Link, treating an empty location as a draft."""
    target = location.strip()
    return Link(name=name.strip(), location=Path(target) if target else None)


def _count_links(items: list[SummaryItem]) -> int:
    return sum(1 for item in items if isinstance(item, Link))


class _SummaryParser:
    """Line-oriented state machine behind :func:`parse_summary`."""

    def __init__(self) -> None:
        self.summary = Summary()
        self.phase = "prefix"
        self.stack: list[tuple[int, Link]] = []
        self.seen_entry = False

    def feed(self, line: str, lineno: int) -> None:
        if not line.strip():
            return
        if SEPARATOR_PATTERN.match(line):
            self._current_section().append(Separator())
            self.stack.clear()
            self.seen_entry = True
            return
        if match := LIST_ITEM_PATTERN.match(line):
            self._add_numbered(match, lineno)
            return
        if match := BARE_LINK_PATTERN.match(line.strip()):
            self._add_affix(match)
            return
        if (match := TITLE_PATTERN.match(line)) and not self.seen_entry:
            if self.summary.title is None:
                self.summary.title = match.group("title")
                return
        msg = f"unexpected content {line.strip()!r}"
        raise SummaryParseError(msg, lineno)

    def _current_section(self) -> list[SummaryItem]:
        match self.phase:
            case "prefix":
                return self.summary.prefix_chapters
            case "numbered":
                return self.summary.numbered_chapters
            case _:
                return self.summary.suffix_chapters

    def _add_affix(self, match: re.Match[str]) -> None:
        if self.phase == "numbered":
            self.phase = "suffix"
            self.stack.clear()
        self._current_section().append(_make_link(match["name"], match["location"]))
        self.seen_entry = True

    def _add_numbered(self, match: re.Match[str], lineno: int) -> None:
        if self.phase == "suffix":
            msg = "numbered chapters cannot follow suffix chapters"
            raise SummaryParseError(msg, lineno)
        self.phase = "numbered"
        self.seen_entry = True
        indent = _indent_width(match["indent"])
        link = _make_link(match["name"], match["location"])

        while self.stack and self.stack[-1][0] >= indent:
            self.stack.pop()

        if self.stack:
            parent = self.stack[-1][1]
            if parent.number is None:  # pragma: no cover - numbered parents only
                msg = "nested chapter has an unnumbered parent"
                raise SummaryParseError(msg, lineno)
            link.number = parent.number.child(_count_links(parent.nested_items) + 1)
            parent.push_item(link)
        else:
            if indent > 0:
                msg = (
                    "nested chapter has no parent"
                    if self.summary.numbered_chapters
                    else "the first numbered chapter must not be indented"
                )
                raise SummaryParseError(msg, lineno)
            siblings = self.summary.numbered_chapters
            link.number = SectionNumber((_count_links(siblings) + 1,))
            siblings.append(link)
        self.stack.append((indent, link))


def parse_summary(text: str) -> Summary:
    """Parse the contents of ``SUMMARY.md``.

    Parameters
    ----------
    text : str
        Raw summary Markdown.

    Returns
    -------
    Summary
        Prefix, numbered, and suffix entries in declaration order. Numbered
        entries carry hierarchical :class:`SectionNumber` values; separators
        never consume a number.

    Raises
    ------
    SummaryParseError
        If a line is not a title, link, list item, separator, or blank, or if
        a numbered list appears after suffix chapters.
    """
    parser = _SummaryParser()
    for lineno, line in enumerate(text.splitlines(), start=1):
        parser.feed(line, lineno)
    return parser.summary


def load_summary(src_dir: Path) -> Summary:
    """Read and parse ``SUMMARY.md`` from the book's source directory."""
    summary_path = src_dir / SUMMARY_FILENAME
    logger.debug("Parsing %s", summary_path)
    try:
        text = summary_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Couldn't open {SUMMARY_FILENAME}"
        raise BookIoError(msg) from exc
    return parse_summary(text)


__all__ = [
    "Link",
    "SectionNumber",
    "Separator",
    "Summary",
    "SummaryItem",
    "load_summary",
    "parse_summary",
]
