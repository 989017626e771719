"""Shared dataclasses used by the book generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from .navigation import ChapterLink, TocEntry


@dc.dataclass(slots=True)
class PageModel:
    """Structured data passed to the page template.

    Attributes
    ----------
    title : str
        Chapter title (or book title for the print page).
    page_title : str
        Text for the ``<title>`` element.
    path : str
        Output path of the page, relative to the site root.
    path_to_root : str
        Relative prefix from the page back to the site root.
    content : str
        Rendered chapter HTML.
    toc : list[TocEntry]
        Flattened sidebar rows with links relative to this page.
    previous : ChapterLink or None
        Link to the preceding chapter.
    next : ChapterLink or None
        Link to the following chapter.
    translation_links : list[dict[str, str]]
        ``language``, ``label`` and site-root relative ``link`` for each
        other language of the book.
    is_print : bool
        ``True`` when rendering the single-page print view.
    """

    title: str
    page_title: str
    path: str
    path_to_root: str
    content: str
    toc: list[TocEntry]
    previous: ChapterLink | None = None
    next: ChapterLink | None = None
    translation_links: list[dict[str, str]] = dc.field(default_factory=list)
    is_print: bool = False


__all__ = ["PageModel"]
