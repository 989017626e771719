"""Table-of-contents and previous/next navigation for rendered chapters.

Every link produced here is relative to the page being rendered, so the
output tree can be served from any URL prefix or opened straight from disk.
In multilingual builds chapters live under ``<language>/`` and the helpers
account for that directory when computing relative links.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import PurePosixPath

from bookbinder.book.model import Book, Chapter, Separator

from .paths import path_to_root, posix_text

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bookbinder.book.model import BookItem


@dc.dataclass(frozen=True, slots=True)
class ChapterLink:
    """A titled link to another chapter, relative to the current page."""

    title: str
    link: str


@dc.dataclass(slots=True)
class TocEntry:
    """One row of the flattened sidebar table of contents.

    Attributes
    ----------
    depth : int
        Nesting level, starting at ``0`` for top-level entries.
    title : str
        Chapter name; empty for separators.
    number : str or None
        Rendered section number such as ``"1.2."``.
    href : str or None
        Link relative to the current page; ``None`` for drafts and separators.
    active : bool
        ``True`` for the chapter being rendered.
    is_draft : bool
        ``True`` for chapters without an output file.
    is_separator : bool
        ``True`` for spacer rows.
    """

    depth: int
    title: str = ""
    number: str | None = None
    href: str | None = None
    active: bool = False
    is_draft: bool = False
    is_separator: bool = False


def site_path(chapter: Chapter, language: str | None = None) -> PurePosixPath:
    """Return the chapter's output path relative to the site root."""
    if chapter.dest_path is None:
        msg = f"Draft chapter {chapter.name!r} has no output path"
        raise ValueError(msg)
    path = PurePosixPath(posix_text(chapter.dest_path))
    if language:
        return PurePosixPath(language) / path
    return path


def relative_link(current_page: PurePosixPath, target: PurePosixPath) -> str:
    """Return ``target`` (site-root relative) as seen from ``current_page``.

    >>> relative_link(PurePosixPath("guide/cli.html"), PurePosixPath("intro.html"))
    '../intro.html'
    """
    return f"{path_to_root(current_page)}{target.as_posix()}"


def _neighbour(
    book: Book, current: Chapter, step: int, language: str | None
) -> ChapterLink | None:
    chapters = book.rendered_chapters()
    position = next(
        (index for index, chapter in enumerate(chapters) if chapter is current), None
    )
    if position is None:
        return None
    target_index = position + step
    if not 0 <= target_index < len(chapters):
        return None
    target = chapters[target_index]
    link = relative_link(site_path(current, language), site_path(target, language))
    return ChapterLink(title=target.name, link=link)


def previous_chapter(
    book: Book, current: Chapter, *, language: str | None = None
) -> ChapterLink | None:
    """Return a link to the rendered chapter before ``current``, if any."""
    return _neighbour(book, current, -1, language)


def next_chapter(
    book: Book, current: Chapter, *, language: str | None = None
) -> ChapterLink | None:
    """Return a link to the rendered chapter after ``current``, if any."""
    return _neighbour(book, current, 1, language)


def build_toc(
    book: Book,
    current_page: PurePosixPath,
    *,
    current: Chapter | None = None,
    language: str | None = None,
) -> list[TocEntry]:
    """Flatten the book tree into sidebar rows for ``current_page``.

    Parameters
    ----------
    book : Book
        The loaded book.
    current_page : PurePosixPath
        Output path (site-root relative) of the page the TOC is rendered into.
    current : Chapter, optional
        The chapter being rendered; its row is marked ``active``.
    language : str, optional
        Language directory chapters are written under, in multilingual builds.
    """
    entries: list[TocEntry] = []
    _append_entries(entries, book.sections, 0, current_page, current, language)
    return entries


def _append_entries(
    entries: list[TocEntry],
    items: cabc.Sequence[BookItem],
    depth: int,
    current_page: PurePosixPath,
    current: Chapter | None,
    language: str | None,
) -> None:
    for item in items:
        match item:
            case Separator():
                entries.append(TocEntry(depth=depth, is_separator=True))
            case Chapter() as chapter:
                href = None
                if not chapter.is_draft:
                    href = relative_link(current_page, site_path(chapter, language))
                entries.append(
                    TocEntry(
                        depth=depth,
                        title=chapter.name,
                        number=str(chapter.number) if chapter.number else None,
                        href=href,
                        active=chapter is current,
                        is_draft=chapter.is_draft,
                    )
                )
                _append_entries(
                    entries, chapter.sub_items, depth + 1, current_page, current, language
                )


__all__ = [
    "ChapterLink",
    "TocEntry",
    "build_toc",
    "next_chapter",
    "path_to_root",
    "previous_chapter",
    "relative_link",
    "site_path",
]
